"""
Client-side models mirroring the server's presented JSON.

Fields listed in a model's `SAVED_FIELDS` are the ones sent back on save;
everything else is read-only on the client.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, ClassVar

from app.teamdocs.constants import (
    NOTIFICATION_EVENT_DEFAULTS,
    PREF_SEAMLESS_EDIT,
    RECENTLY_ACTIVE_MINUTES,
    ROLE_ADMIN,
    ROLE_MEMBER,
    ROLE_VIEWER,
    TEAM_PREF_SEAMLESS_EDIT,
    TEAM_PREFERENCE_DEFAULTS,
    USER_PREFERENCE_DEFAULTS,
)

if TYPE_CHECKING:
    from app.teamdocs.client.api_client import ApiClient


def parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass
class Team:
    id: str
    name: str = ""
    subdomain: str | None = None
    default_collection_id: str | None = None
    preferences: dict[str, Any] | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "Team":
        return cls(
            id=data["id"],
            name=data.get("name") or "",
            subdomain=data.get("subdomain"),
            default_collection_id=data.get("defaultCollectionId"),
            preferences=data.get("preferences"),
        )

    def get_preference(self, key: str) -> Any:
        prefs = self.preferences or {}
        if prefs.get(key) is not None:
            return prefs[key]
        return TEAM_PREFERENCE_DEFAULTS.get(key, False)


@dataclass
class User:
    SAVED_FIELDS: ClassVar[tuple[tuple[str, str], ...]] = (
        ("id", "id"),
        ("avatar_url", "avatarUrl"),
        ("name", "name"),
        ("color", "color"),
        ("language", "language"),
        ("preferences", "preferences"),
        ("notification_settings", "notificationSettings"),
    )

    id: str
    avatar_url: str | None = None
    name: str = ""
    color: str | None = None
    language: str = "en_US"
    preferences: dict[str, bool] | None = None
    notification_settings: dict[str, bool] = field(default_factory=dict)

    email: str | None = None
    is_admin: bool = False
    is_viewer: bool = False
    last_active_at: str | None = None
    is_suspended: bool = False
    deleted_at: str | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "User":
        return cls(
            id=data["id"],
            avatar_url=data.get("avatarUrl"),
            name=data.get("name") or "",
            color=data.get("color"),
            language=data.get("language") or "en_US",
            preferences=data.get("preferences"),
            notification_settings=dict(data.get("notificationSettings") or {}),
            email=data.get("email"),
            is_admin=bool(data.get("isAdmin")),
            is_viewer=bool(data.get("isViewer")),
            last_active_at=data.get("lastActiveAt"),
            is_suspended=bool(data.get("isSuspended")),
            deleted_at=data.get("deletedAt"),
        )

    def to_json(self) -> dict[str, Any]:
        return {key: getattr(self, attr) for attr, key in self.SAVED_FIELDS}

    def update_from_json(self, data: dict[str, Any]) -> None:
        fresh = User.from_json({**self._as_server_json(), **data})
        self.__dict__.update(fresh.__dict__)

    def _as_server_json(self) -> dict[str, Any]:
        return {
            **self.to_json(),
            "email": self.email,
            "isAdmin": self.is_admin,
            "isViewer": self.is_viewer,
            "lastActiveAt": self.last_active_at,
            "isSuspended": self.is_suspended,
            "deletedAt": self.deleted_at,
        }

    @property
    def initial(self) -> str:
        return self.name[0] if self.name else "?"

    @property
    def is_invited(self) -> bool:
        return not self.last_active_at

    def is_recently_active(self, now: datetime | None = None) -> bool:
        """
        Whether the user has been active within the last five minutes.
        """
        last_active = parse_timestamp(self.last_active_at)
        if last_active is None:
            return False
        now = now or datetime.now(timezone.utc)
        return last_active > now - timedelta(minutes=RECENTLY_ACTIVE_MINUTES)

    @property
    def role(self) -> str:
        if self.is_admin:
            return ROLE_ADMIN
        elif self.is_viewer:
            return ROLE_VIEWER
        else:
            return ROLE_MEMBER

    def separate_edit_mode(self, team: Team) -> bool:
        """
        True when editing happens behind an explicit "Edit" button rather
        than seamlessly. The user's preference wins over the team's.
        """
        return not self.get_preference(PREF_SEAMLESS_EDIT, team.get_preference(TEAM_PREF_SEAMLESS_EDIT))

    def subscribed_to_event_type(self, event_type: str) -> bool:
        if self.notification_settings.get(event_type) is not None:
            return self.notification_settings[event_type]
        return NOTIFICATION_EVENT_DEFAULTS.get(event_type, False)

    def set_notification_event_type(self, client: "ApiClient", event_type: str, value: bool) -> None:
        """
        Set the preference locally, then persist it on the server.
        """
        self.notification_settings = {**self.notification_settings, event_type: value}
        if value:
            client.post("users.notificationsSubscribe", {"eventType": event_type})
        else:
            client.post("users.notificationsUnsubscribe", {"eventType": event_type})

    def get_preference(self, key: str, default: bool = False) -> bool:
        prefs = self.preferences or {}
        if prefs.get(key) is not None:
            return prefs[key]
        if USER_PREFERENCE_DEFAULTS.get(key) is not None:
            return USER_PREFERENCE_DEFAULTS[key]
        return default

    def set_preference(self, key: str, value: bool) -> None:
        self.preferences = {**(self.preferences or {}), key: value}

    def save(self, client: "ApiClient") -> "User":
        res = client.post("users.update", self.to_json())
        self.update_from_json(res.get("data") or {})
        return self
