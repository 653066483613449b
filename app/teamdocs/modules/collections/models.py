from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.teamdocs.models import Base, Team, new_id


class Collection(Base):
    __tablename__ = "collections"
    __table_args__ = (
        Index("idx_collections_team_id", "team_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    team_id: Mapped[str] = mapped_column(ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    color: Mapped[str | None] = mapped_column(String(16), nullable=True)
    icon: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # "read" | "read_write" for team-wide access, None for private collections
    permission: Mapped[str | None] = mapped_column(String(16), nullable=True)
    sharing: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    index: Mapped[str | None] = mapped_column(String(256), nullable=True)

    created_by_id: Mapped[str | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    deleted_by_id: Mapped[str | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)

    team: Mapped[Team] = relationship("Team", foreign_keys=[team_id], lazy="selectin")
    memberships: Mapped[list["CollectionUser"]] = relationship(
        "CollectionUser",
        back_populates="collection",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def is_private(self) -> bool:
        return self.permission is None

    def membership_for(self, user_id: str) -> "CollectionUser | None":
        for m in self.memberships:
            if m.user_id == user_id:
                return m
        return None


class CollectionUser(Base):
    __tablename__ = "collection_users"
    __table_args__ = (
        UniqueConstraint("collection_id", "user_id", name="uq_collection_user"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    collection_id: Mapped[str] = mapped_column(ForeignKey("collections.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    permission: Mapped[str] = mapped_column(String(16), nullable=False, default="read_write")
    created_by_id: Mapped[str | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    collection: Mapped[Collection] = relationship("Collection", back_populates="memberships")
