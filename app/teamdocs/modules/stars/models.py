from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.teamdocs.models import Base, new_id

if TYPE_CHECKING:
    from app.teamdocs.modules.collections.models import Collection
    from app.teamdocs.modules.documents.models import Document


class Star(Base):
    """A user's bookmark of a document or a collection. Exactly one target is set."""

    __tablename__ = "stars"
    __table_args__ = (
        Index("idx_stars_user_id", "user_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    team_id: Mapped[str] = mapped_column(ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    document_id: Mapped[str | None] = mapped_column(ForeignKey("documents.id", ondelete="CASCADE"), nullable=True)
    collection_id: Mapped[str | None] = mapped_column(ForeignKey("collections.id", ondelete="CASCADE"), nullable=True)

    index: Mapped[str | None] = mapped_column(String(256), nullable=True)

    created_by_id: Mapped[str | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)

    document: Mapped["Document | None"] = relationship("Document", lazy="selectin")
    collection: Mapped["Collection | None"] = relationship("Collection", lazy="selectin")
