from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from app.teamdocs.audit import record_event
from app.teamdocs.constants import NOTIFICATION_EVENT_TYPES, USER_PREFERENCES, USER_ROLES
from app.teamdocs.errors import NotFoundError, ValidationError

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.teamdocs.models import User

_NAME_MAX_LENGTH = 255


def get_user(s: "Session", user_id: str | None, team_id: str) -> "User":
    from app.teamdocs.models import User

    user = s.get(User, user_id) if user_id else None
    if not user or user.team_id != team_id or user.deleted_at is not None:
        raise NotFoundError("User not found.")
    return user


def validate_event_type(event_type: Any) -> str:
    if not isinstance(event_type, str) or event_type not in NOTIFICATION_EVENT_TYPES:
        raise ValidationError(f"Unknown notification event type: {event_type!r}")
    return event_type


def user_updater(s: "Session", *, target: "User", actor: "User", params: dict, ip: str | None = None) -> "User":
    changes: list[str] = []

    if params.get("name") is not None:
        name = str(params["name"]).strip()
        if not name:
            raise ValidationError("name must not be empty.")
        if len(name) > _NAME_MAX_LENGTH:
            raise ValidationError(f"name must be at most {_NAME_MAX_LENGTH} characters.")
        if name != target.name:
            target.name = name
            changes.append("name")

    if "avatarUrl" in params:
        avatar_url = params["avatarUrl"] or None
        if avatar_url is not None and not isinstance(avatar_url, str):
            raise ValidationError("avatarUrl must be a string or null.")
        if avatar_url != target.avatar_url:
            target.avatar_url = avatar_url
            changes.append("avatarUrl")

    if params.get("language") is not None:
        language = params["language"]
        if not isinstance(language, str) or not 2 <= len(language) <= 16:
            raise ValidationError("language must be a locale code (e.g. en_US).")
        if language != target.language:
            target.language = language
            changes.append("language")

    if params.get("preferences") is not None:
        prefs = params["preferences"]
        if not isinstance(prefs, dict):
            raise ValidationError("preferences must be an object.")
        unknown = sorted(set(prefs) - USER_PREFERENCES)
        if unknown:
            raise ValidationError(f"Unknown user preferences: {', '.join(unknown)}")
        for key, value in prefs.items():
            if not isinstance(value, bool):
                raise ValidationError(f"Preference {key} must be a boolean.")
        changed = [key for key, value in prefs.items() if (target.preferences or {}).get(key) != value]
        for key in changed:
            target.set_preference(key, prefs[key])
        if changed:
            changes.append("preferences")

    target.updated_at = datetime.utcnow()
    record_event(
        s,
        name="users.update",
        actor=actor,
        model_id=target.id,
        user_id=target.id,
        data={"changes": changes},
        ip=ip,
    )
    return target


def set_notification_subscription(
    s: "Session", *, user: "User", event_type: str, subscribed: bool, ip: str | None = None
) -> "User":
    event_type = validate_event_type(event_type)
    user.set_notification_event_type(event_type, subscribed)
    user.updated_at = datetime.utcnow()

    record_event(
        s,
        name="users.notifications_subscribe" if subscribed else "users.notifications_unsubscribe",
        actor=user,
        model_id=user.id,
        data={"eventType": event_type},
        ip=ip,
    )
    return user


def update_role(s: "Session", *, target: "User", actor: "User", role: Any, ip: str | None = None) -> "User":
    if not isinstance(role, str) or role not in USER_ROLES:
        raise ValidationError(f"role must be one of: {', '.join(USER_ROLES)}")
    if target.id == actor.id:
        raise ValidationError("You cannot change your own role.")

    old_role = target.role
    target.role = role
    target.updated_at = datetime.utcnow()
    record_event(
        s,
        name="users.update_role",
        actor=actor,
        model_id=target.id,
        user_id=target.id,
        data={"old": old_role, "new": role},
        ip=ip,
    )
    return target


def suspend_user(s: "Session", *, target: "User", actor: "User", ip: str | None = None) -> "User":
    if target.id == actor.id:
        raise ValidationError("You cannot suspend yourself.")
    if target.suspended_at is None:
        target.suspended_at = datetime.utcnow()
        target.suspended_by_id = actor.id
        # Existing sessions and tokens stop working immediately.
        target.token_version += 1
    record_event(s, name="users.suspend", actor=actor, model_id=target.id, user_id=target.id, ip=ip)
    return target


def activate_user(s: "Session", *, target: "User", actor: "User", ip: str | None = None) -> "User":
    target.suspended_at = None
    target.suspended_by_id = None
    record_event(s, name="users.activate", actor=actor, model_id=target.id, user_id=target.id, ip=ip)
    return target
