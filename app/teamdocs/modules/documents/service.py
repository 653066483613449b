from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from app.teamdocs.audit import record_event
from app.teamdocs.db import live
from app.teamdocs.errors import NotFoundError, ValidationError

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.teamdocs.models import User
    from app.teamdocs.modules.collections.models import Collection
    from app.teamdocs.modules.documents.models import Document

TITLE_MAX_LENGTH = 255


def _clean_title(title: object) -> str:
    if title is not None and not isinstance(title, str):
        raise ValidationError("title must be a string.")
    title = (title or "").strip()
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"title must be at most {TITLE_MAX_LENGTH} characters.")
    return title


def _clean_text(text: object) -> str:
    if text is not None and not isinstance(text, str):
        raise ValidationError("text must be a string.")
    return text or ""


def get_document(s: "Session", document_id: str | None, team_id: str) -> "Document":
    from app.teamdocs.modules.documents.models import Document

    document = s.get(Document, document_id) if document_id else None
    if not document or document.team_id != team_id or document.deleted_at is not None:
        raise NotFoundError("Document not found.")
    return document


def document_creator(
    s: "Session",
    *,
    user: "User",
    collection: "Collection",
    title: str | None = None,
    text: str | None = None,
    publish: bool = False,
    ip: str | None = None,
) -> "Document":
    from app.teamdocs.modules.documents.models import Document

    now = datetime.utcnow()
    document = Document(
        team_id=collection.team_id,
        collection_id=collection.id,
        title=_clean_title(title),
        text=_clean_text(text),
        created_by_id=user.id,
        last_modified_by_id=user.id,
        published_at=now if publish else None,
        created_at=now,
        updated_at=now,
    )
    s.add(document)
    s.flush()

    record_event(
        s,
        name="documents.create",
        actor=user,
        model_id=document.id,
        collection_id=collection.id,
        document_id=document.id,
        data={"title": document.title},
        ip=ip,
    )
    if publish:
        record_event(
            s,
            name="documents.publish",
            actor=user,
            model_id=document.id,
            collection_id=collection.id,
            document_id=document.id,
            data={"title": document.title},
            ip=ip,
        )
    return document


def document_updater(
    s: "Session",
    *,
    document: "Document",
    user: "User",
    title: str | None = None,
    text: str | None = None,
    publish: bool = False,
    ip: str | None = None,
) -> "Document":
    changes: list[str] = []
    if title is not None:
        new_title = _clean_title(title)
        if new_title != document.title:
            document.title = new_title
            changes.append("title")
    if text is not None and _clean_text(text) != document.text:
        document.text = text
        changes.append("text")

    now = datetime.utcnow()
    document.last_modified_by_id = user.id
    document.updated_at = now

    record_event(
        s,
        name="documents.update",
        actor=user,
        model_id=document.id,
        collection_id=document.collection_id,
        document_id=document.id,
        data={"title": document.title, "changes": changes},
        ip=ip,
    )
    if publish and document.published_at is None:
        document.published_at = now
        record_event(
            s,
            name="documents.publish",
            actor=user,
            model_id=document.id,
            collection_id=document.collection_id,
            document_id=document.id,
            data={"title": document.title},
            ip=ip,
        )
    return document


def document_destroyer(s: "Session", *, document: "Document", user: "User", ip: str | None = None) -> None:
    """Soft-delete a document and the stars pointing at it."""
    from app.teamdocs.modules.stars.models import Star

    now = datetime.utcnow()
    document.deleted_at = now
    document.deleted_by_id = user.id

    stars = (
        live(s, Star)
        .filter(Star.document_id == document.id)
        .all()
    )
    for star in stars:
        star.deleted_at = now

    record_event(
        s,
        name="documents.delete",
        actor=user,
        model_id=document.id,
        collection_id=document.collection_id,
        document_id=document.id,
        data={"title": document.title},
        ip=ip,
    )
