from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from app.teamdocs.constants import (
    NOTIFICATION_EVENT_DEFAULTS,
    ROLE_ADMIN,
    ROLE_MEMBER,
    ROLE_VIEWER,
    TEAM_PREFERENCE_DEFAULTS,
    USER_PREFERENCE_DEFAULTS,
)

if TYPE_CHECKING:
    from app.teamdocs.modules.collections.models import Collection


# Plain JSON on sqlite (tests), JSONB on Postgres.
JSONType = JSON().with_variant(JSONB(), "postgresql")


def new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    pass


class Team(Base):
    __tablename__ = "teams"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    subdomain: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)
    avatar_url: Mapped[str | None] = mapped_column(String(4096), nullable=True)

    sharing: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    guest_signin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    document_embeds: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    member_collection_create: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    invite_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    default_user_role: Mapped[str] = mapped_column(String(16), nullable=False, default=ROLE_MEMBER)

    default_collection_id: Mapped[str | None] = mapped_column(
        ForeignKey("collections.id", ondelete="SET NULL"),
        nullable=True,
    )
    preferences: Mapped[dict | None] = mapped_column(JSONType, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)

    allowed_domains: Mapped[list["TeamDomain"]] = relationship(
        "TeamDomain",
        back_populates="team",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="TeamDomain.created_at",
    )
    default_collection: Mapped["Collection | None"] = relationship(
        "Collection",
        foreign_keys=[default_collection_id],
        lazy="selectin",
        post_update=True,
    )

    def get_preference(self, key: str) -> Any:
        """Stored team preference, falling back to the team defaults."""
        prefs = self.preferences or {}
        if prefs.get(key) is not None:
            return prefs[key]
        return TEAM_PREFERENCE_DEFAULTS.get(key, False)


class TeamDomain(Base):
    __tablename__ = "team_domains"
    __table_args__ = (
        UniqueConstraint("team_id", "name", name="uq_team_domain_name"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    team_id: Mapped[str] = mapped_column(ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_by_id: Mapped[str | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    team: Mapped[Team] = relationship("Team", back_populates="allowed_domains")


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("team_id", "email", name="uq_user_team_email"),
        Index("idx_users_team_id", "team_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    team_id: Mapped[str] = mapped_column(ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)

    email: Mapped[str] = mapped_column(String(320), nullable=False)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    avatar_url: Mapped[str | None] = mapped_column(String(4096), nullable=True)
    color: Mapped[str | None] = mapped_column(String(16), nullable=True)
    language: Mapped[str] = mapped_column(String(16), nullable=False, default="en_US")

    role: Mapped[str] = mapped_column(String(16), nullable=False, default=ROLE_MEMBER)
    preferences: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    notification_settings: Mapped[dict | None] = mapped_column(JSONType, nullable=True)

    # Bumped on sign out; tokens carrying an older version are rejected.
    token_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    last_active_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    last_active_ip: Mapped[str | None] = mapped_column(String(64), nullable=True)
    suspended_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    suspended_by_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)

    team: Mapped[Team] = relationship("Team", lazy="selectin")

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_viewer(self) -> bool:
        return self.role == ROLE_VIEWER

    @property
    def is_suspended(self) -> bool:
        return self.suspended_at is not None

    @property
    def is_active(self) -> bool:
        return not self.is_suspended and self.deleted_at is None

    @property
    def is_invited(self) -> bool:
        return self.last_active_at is None

    def get_preference(self, key: str, default: bool = False) -> bool:
        """
        Stored preference, else the system default for the key, else `default`.
        """
        prefs = self.preferences or {}
        if prefs.get(key) is not None:
            return prefs[key]
        if USER_PREFERENCE_DEFAULTS.get(key) is not None:
            return USER_PREFERENCE_DEFAULTS[key]
        return default

    def set_preference(self, key: str, value: bool) -> None:
        self.preferences = {**(self.preferences or {}), key: value}

    def subscribed_to_event_type(self, event_type: str) -> bool:
        settings = self.notification_settings or {}
        if settings.get(event_type) is not None:
            return settings[event_type]
        return NOTIFICATION_EVENT_DEFAULTS.get(event_type, False)

    def set_notification_event_type(self, event_type: str, value: bool) -> None:
        self.notification_settings = {**(self.notification_settings or {}), event_type: value}


class Event(Base):
    """
    Append-only audit trail event.
    Names follow "<resource>.<verb>", e.g. "stars.delete".
    """

    __tablename__ = "events"
    __table_args__ = (
        Index("idx_events_team_id_created_at", "team_id", "created_at"),
        Index("idx_events_name", "name"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    request_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    name: Mapped[str] = mapped_column(String(128), nullable=False)
    model_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    actor_id: Mapped[str | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    user_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    team_id: Mapped[str | None] = mapped_column(ForeignKey("teams.id", ondelete="CASCADE"), nullable=True)
    collection_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    document_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    ip: Mapped[str | None] = mapped_column(String(64), nullable=True)
    data: Mapped[dict | None] = mapped_column(JSONType, nullable=True)


# Ensure module models are imported so Base.metadata includes their tables.
# (Kept at bottom to avoid circular imports.)
from app.teamdocs.modules.collections.models import Collection, CollectionUser  # noqa: E402,F401
from app.teamdocs.modules.documents.models import Document  # noqa: E402,F401
from app.teamdocs.modules.stars.models import Star  # noqa: E402,F401
from app.teamdocs.modules.attachments.models import Attachment  # noqa: E402,F401
