from __future__ import annotations

from flask import Blueprint

from app.teamdocs.api import ok, optional_bool, pagination, pagination_params, request_params, require_param
from app.teamdocs.audit import request_ip
from app.teamdocs.auth import current_user, require_auth
from app.teamdocs.db import db_session
from app.teamdocs.errors import NotFoundError
from app.teamdocs.models import User
from app.teamdocs.modules.collections.service import (
    UNSET,
    add_collection_user,
    collection_creator,
    collection_destroyer,
    collection_updater,
    get_collection,
    live_collections,
    remove_collection_user,
)
from app.teamdocs.policies import authorize, can, present_policies
from app.teamdocs.presenters import present_collection, present_membership

bp = Blueprint("collections", __name__)


def _load_member(user_id: str | None, team_id: str) -> User:
    member = db_session().get(User, user_id) if user_id else None
    if not member or member.team_id != team_id or member.deleted_at is not None:
        raise NotFoundError("User not found.")
    return member


@bp.post("/collections.create")
@require_auth
def collections_create():
    s = db_session()
    u = current_user()
    params = request_params()
    authorize(u, "createCollection", u.team)

    collection = collection_creator(
        s,
        user=u,
        name=require_param(params, "name"),
        description=params.get("description"),
        color=params.get("color"),
        icon=params.get("icon"),
        permission=params.get("permission"),
        sharing=optional_bool(params, "sharing") is not False,
        ip=request_ip(),
    )
    s.commit()
    return ok(present_collection(collection), policies=present_policies(u, [collection]))


@bp.post("/collections.info")
@require_auth
def collections_info():
    s = db_session()
    u = current_user()
    params = request_params()
    collection = get_collection(s, require_param(params, "id"), u.team_id)
    authorize(u, "read", collection)
    return ok(present_collection(collection), policies=present_policies(u, [collection]))


@bp.post("/collections.list")
@require_auth
def collections_list():
    s = db_session()
    u = current_user()
    offset, limit = pagination_params(request_params())
    readable = [c for c in live_collections(s, u.team_id) if can(u, "read", c)]
    page = readable[offset : offset + limit]
    return ok(
        [present_collection(c) for c in page],
        policies=present_policies(u, page),
        pagination=pagination(offset, limit),
    )


@bp.post("/collections.update")
@require_auth
def collections_update():
    s = db_session()
    u = current_user()
    params = request_params()
    collection = get_collection(s, require_param(params, "id"), u.team_id)
    authorize(u, "update", collection)

    collection_updater(
        s,
        collection=collection,
        user=u,
        name=params.get("name"),
        description=params["description"] if "description" in params else UNSET,
        color=params["color"] if "color" in params else UNSET,
        permission=params["permission"] if "permission" in params else UNSET,
        sharing=optional_bool(params, "sharing"),
        ip=request_ip(),
    )
    s.commit()
    return ok(present_collection(collection), policies=present_policies(u, [collection]))


@bp.post("/collections.delete")
@require_auth
def collections_delete():
    s = db_session()
    u = current_user()
    params = request_params()
    collection = get_collection(s, require_param(params, "id"), u.team_id)
    authorize(u, "delete", collection)

    collection_destroyer(s, collection=collection, user=u, ip=request_ip())
    s.commit()
    return ok()


@bp.post("/collections.add_user")
@require_auth
def collections_add_user():
    s = db_session()
    u = current_user()
    params = request_params()
    collection = get_collection(s, require_param(params, "id"), u.team_id)
    authorize(u, "addUser", collection)
    member = _load_member(require_param(params, "userId"), u.team_id)

    membership = add_collection_user(
        s,
        collection=collection,
        member=member,
        user=u,
        permission=params.get("permission") or "read_write",
        ip=request_ip(),
    )
    s.commit()
    return ok(present_membership(membership))


@bp.post("/collections.remove_user")
@require_auth
def collections_remove_user():
    s = db_session()
    u = current_user()
    params = request_params()
    collection = get_collection(s, require_param(params, "id"), u.team_id)
    authorize(u, "removeUser", collection)
    member = _load_member(require_param(params, "userId"), u.team_id)

    remove_collection_user(s, collection=collection, member=member, user=u, ip=request_ip())
    s.commit()
    return ok()


@bp.post("/collections.memberships")
@require_auth
def collections_memberships():
    s = db_session()
    u = current_user()
    params = request_params()
    collection = get_collection(s, require_param(params, "id"), u.team_id)
    authorize(u, "read", collection)
    return ok([present_membership(m) for m in collection.memberships])
