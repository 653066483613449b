from __future__ import annotations

import uuid
from collections import defaultdict
from collections.abc import Callable
from datetime import datetime, timedelta
from functools import wraps
from typing import Any

from flask import Blueprint, current_app, g, request, session
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.security import check_password_hash

from app.teamdocs.api import ok, request_params
from app.teamdocs.audit import record_event, request_ip
from app.teamdocs.constants import RECENTLY_ACTIVE_MINUTES
from app.teamdocs.db import db_session, live
from app.teamdocs.errors import AuthenticationError, RateLimitExceededError, UserSuspendedError, ValidationError
from app.teamdocs.models import User
from app.teamdocs.policies import present_policies
from app.teamdocs.presenters import present_team, present_user

bp = Blueprint("auth", __name__)
_login_attempts: dict[str, list[datetime]] = defaultdict(list)
_LOGIN_RATE_LIMIT = 5
_LOGIN_RATE_WINDOW = 300  # seconds
_TOKEN_SALT = "teamdocs-api-token"


def _check_rate_limit(ip: str) -> bool:
    now = datetime.utcnow()
    cutoff = now - timedelta(seconds=_LOGIN_RATE_WINDOW)
    recent = [t for t in _login_attempts.get(ip, ()) if t > cutoff]
    if not recent:
        _login_attempts.pop(ip, None)
        return False
    _login_attempts[ip] = recent
    return len(recent) >= _LOGIN_RATE_LIMIT


def _record_attempt(ip: str) -> None:
    _login_attempts[ip].append(datetime.utcnow())


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=_TOKEN_SALT)


def issue_api_token(user: User) -> str:
    """Signed API token for `user`; invalidated when the user signs out."""
    return _serializer().dumps({"id": user.id, "v": user.token_version})


def _user_from_token(token: str) -> User | None:
    max_age = int(current_app.config.get("TOKEN_MAX_AGE_DAYS") or 90) * 86400
    try:
        payload = _serializer().loads(token, max_age=max_age)
    except SignatureExpired:
        current_app.logger.info("Rejected expired API token (request_id=%s)", getattr(g, "request_id", None))
        return None
    except BadSignature:
        return None
    if not isinstance(payload, dict):
        return None
    user = db_session().get(User, payload.get("id"))
    if not user or user.deleted_at is not None or user.token_version != payload.get("v"):
        return None
    return user


def _token_from_request() -> str | None:
    header = request.headers.get("Authorization") or ""
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    body = request.get_json(silent=True)
    if isinstance(body, dict) and body.get("token"):
        return str(body["token"])
    return request.form.get("token") or None


def load_current_user() -> None:
    """
    Loads g.current_user from an API token (body, form or bearer header) or
    from the signed session cookie. Also assigns a per-request request_id
    (for audit/log correlation).
    """
    if not getattr(g, "request_id", None):
        g.request_id = uuid.uuid4().hex
    g.current_user = None
    if request.path.startswith(("/health", "/healthz")):
        return

    token = _token_from_request()
    if token:
        g.current_user = _user_from_token(token)
        return

    user_id = session.get("user_id")
    if not user_id:
        return
    user = db_session().get(User, user_id)
    if not user or user.deleted_at is not None or session.get("token_version") != user.token_version:
        session.pop("user_id", None)
        return
    g.current_user = user


def current_user() -> User:
    u = getattr(g, "current_user", None)
    if not u:
        raise AuthenticationError()
    return u


def _touch_last_active(user: User) -> None:
    now = datetime.utcnow()
    threshold = now - timedelta(minutes=RECENTLY_ACTIVE_MINUTES)
    if user.last_active_at is None or user.last_active_at < threshold:
        s = db_session()
        user.last_active_at = now
        user.last_active_ip = request_ip()
        s.commit()


def require_auth(fn: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(fn)
    def wrapped(*args: Any, **kwargs: Any):
        user: User | None = getattr(g, "current_user", None)
        if not user:
            raise AuthenticationError()
        if user.is_suspended:
            raise UserSuspendedError()
        _touch_last_active(user)
        return fn(*args, **kwargs)

    return wrapped


@bp.post("/auth.login")
def auth_login():
    params = request_params()
    email = str(params.get("email") or "").strip().lower()
    password = str(params.get("password") or "")
    ip = request.remote_addr or "unknown"

    if not email or not password:
        raise ValidationError("email and password are required.")
    if _check_rate_limit(ip):
        raise RateLimitExceededError("Too many login attempts. Please wait 5 minutes.")

    _record_attempt(ip)

    s = db_session()
    user = (
        live(s, User)
        .filter(User.email == email)
        .order_by(User.created_at.asc())
        .first()
    )
    if not user or not user.password_hash or not check_password_hash(user.password_hash, password):
        record_event(
            s,
            name="users.signin_failed",
            actor=None,
            team_id=user.team_id if user else None,
            data={"email": email},
        )
        s.commit()
        raise AuthenticationError("Invalid credentials.")
    if user.is_suspended:
        raise UserSuspendedError()

    session["user_id"] = user.id
    session["token_version"] = user.token_version
    _login_attempts[ip].clear()
    user.last_active_at = datetime.utcnow()
    user.last_active_ip = request_ip()
    record_event(s, name="users.signin", actor=user, model_id=user.id)
    s.commit()

    return ok(
        {"token": issue_api_token(user), "user": present_user(user, include_details=True), "team": present_team(user.team)},
        policies=present_policies(user, [user.team]),
    )


@bp.post("/auth.info")
@require_auth
def auth_info():
    user = current_user()
    return ok(
        {"user": present_user(user, include_details=True), "team": present_team(user.team)},
        policies=present_policies(user, [user.team, user]),
    )


@bp.post("/auth.delete")
@require_auth
def auth_delete():
    s = db_session()
    user = current_user()
    user.token_version += 1
    record_event(s, name="users.signout", actor=user, model_id=user.id)
    s.commit()
    session.pop("user_id", None)
    session.pop("token_version", None)
    return ok()
