from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.teamdocs.models import Base, new_id


class Attachment(Base):
    __tablename__ = "attachments"
    __table_args__ = (
        Index("idx_attachments_team_id", "team_id"),
        Index("idx_attachments_document_id", "document_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    team_id: Mapped[str] = mapped_column(ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[str | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    document_id: Mapped[str | None] = mapped_column(ForeignKey("documents.id", ondelete="SET NULL"), nullable=True)

    key: Mapped[str] = mapped_column(String(4096), nullable=False, unique=True)  # storage key
    name: Mapped[str] = mapped_column(String(255), nullable=False)  # sanitized original filename
    content_type: Mapped[str] = mapped_column(String(255), nullable=False, default="application/octet-stream")
    size: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sha256: Mapped[str] = mapped_column(String(64), nullable=False)
    acl: Mapped[str] = mapped_column(String(32), nullable=False, default="private")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
