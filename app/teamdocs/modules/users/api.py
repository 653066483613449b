from __future__ import annotations

from flask import Blueprint

from app.teamdocs.api import ok, pagination, pagination_params, request_params, require_param
from app.teamdocs.audit import request_ip
from app.teamdocs.auth import current_user, require_auth
from app.teamdocs.db import db_session, live
from app.teamdocs.models import User
from app.teamdocs.modules.users.service import (
    activate_user,
    get_user,
    set_notification_subscription,
    suspend_user,
    update_role,
    user_updater,
)
from app.teamdocs.policies import authorize, present_policies
from app.teamdocs.presenters import present_user

bp = Blueprint("users", __name__)


def _present(viewer: User, user: User) -> dict:
    return present_user(user, include_details=viewer.id == user.id or viewer.is_admin)


@bp.post("/users.info")
@require_auth
def users_info():
    s = db_session()
    u = current_user()
    params = request_params()
    user = get_user(s, params["id"], u.team_id) if params.get("id") else u
    authorize(u, "read", user)
    return ok(_present(u, user), policies=present_policies(u, [user]))


@bp.post("/users.list")
@require_auth
def users_list():
    s = db_session()
    u = current_user()
    offset, limit = pagination_params(request_params())

    q = live(s, User).filter(User.team_id == u.team_id)
    if not u.is_admin:
        q = q.filter(User.suspended_at.is_(None))
    users = q.order_by(User.name.asc(), User.id.asc()).offset(offset).limit(limit).all()
    return ok(
        [_present(u, user) for user in users],
        policies=present_policies(u, users),
        pagination=pagination(offset, limit),
    )


@bp.post("/users.update")
@require_auth
def users_update():
    s = db_session()
    u = current_user()
    params = request_params()
    user = get_user(s, params["id"], u.team_id) if params.get("id") else u
    authorize(u, "update", user)

    user_updater(s, target=user, actor=u, params=params, ip=request_ip())
    s.commit()
    return ok(_present(u, user), policies=present_policies(u, [user]))


@bp.post("/users.update_role")
@require_auth
def users_update_role():
    s = db_session()
    u = current_user()
    params = request_params()
    user = get_user(s, require_param(params, "id"), u.team_id)
    authorize(u, "updateRole", user)

    update_role(s, target=user, actor=u, role=require_param(params, "role"), ip=request_ip())
    s.commit()
    return ok(_present(u, user), policies=present_policies(u, [user]))


@bp.post("/users.suspend")
@require_auth
def users_suspend():
    s = db_session()
    u = current_user()
    params = request_params()
    user = get_user(s, require_param(params, "id"), u.team_id)
    authorize(u, "suspend", user)

    suspend_user(s, target=user, actor=u, ip=request_ip())
    s.commit()
    return ok(_present(u, user), policies=present_policies(u, [user]))


@bp.post("/users.activate")
@require_auth
def users_activate():
    s = db_session()
    u = current_user()
    params = request_params()
    user = get_user(s, require_param(params, "id"), u.team_id)
    authorize(u, "activate", user)

    activate_user(s, target=user, actor=u, ip=request_ip())
    s.commit()
    return ok(_present(u, user), policies=present_policies(u, [user]))


@bp.post("/users.notificationsSubscribe")
@require_auth
def users_notifications_subscribe():
    s = db_session()
    u = current_user()
    params = request_params()
    set_notification_subscription(
        s, user=u, event_type=require_param(params, "eventType"), subscribed=True, ip=request_ip()
    )
    s.commit()
    return ok(_present(u, u))


@bp.post("/users.notificationsUnsubscribe")
@require_auth
def users_notifications_unsubscribe():
    s = db_session()
    u = current_user()
    params = request_params()
    set_notification_subscription(
        s, user=u, event_type=require_param(params, "eventType"), subscribed=False, ip=request_ip()
    )
    s.commit()
    return ok(_present(u, u))
