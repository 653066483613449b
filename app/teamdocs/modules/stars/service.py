from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from app.teamdocs.audit import record_event
from app.teamdocs.db import live
from app.teamdocs.errors import NotFoundError, ValidationError
from app.teamdocs.fractional_index import DIGITS, generate_key_between

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.teamdocs.models import User
    from app.teamdocs.modules.collections.models import Collection
    from app.teamdocs.modules.documents.models import Document
    from app.teamdocs.modules.stars.models import Star

INDEX_MAX_LENGTH = 256


def validate_index(index: object) -> str:
    if not isinstance(index, str) or not index:
        raise ValidationError("index must be a non-empty string.")
    if len(index) > INDEX_MAX_LENGTH or any(ch not in DIGITS for ch in index) or index.endswith(DIGITS[0]):
        raise ValidationError("index is not a valid position key.")
    return index


def live_stars(s: "Session", user_id: str) -> list["Star"]:
    from app.teamdocs.modules.stars.models import Star

    rows = (
        live(s, Star)
        .filter(Star.user_id == user_id)
        .all()
    )
    return sorted(rows, key=lambda st: (st.index or "", st.created_at))


def get_star(s: "Session", star_id: str | None, user: "User") -> "Star":
    from app.teamdocs.modules.stars.models import Star

    star = s.get(Star, star_id) if star_id else None
    if not star or star.team_id != user.team_id or star.deleted_at is not None:
        raise NotFoundError("Star not found.")
    return star


def star_creator(
    s: "Session",
    *,
    user: "User",
    document: "Document | None" = None,
    collection: "Collection | None" = None,
    index: str | None = None,
    ip: str | None = None,
) -> "Star":
    """
    Star a document or a collection for `user`. Starring the same target
    twice returns the existing star. Without an explicit index the star is
    placed first.
    """
    from app.teamdocs.modules.stars.models import Star

    if (document is None) == (collection is None):
        raise ValidationError("One of documentId or collectionId is required.")

    stars = live_stars(s, user.id)
    for existing in stars:
        if document is not None and existing.document_id == document.id:
            return existing
        if collection is not None and existing.collection_id == collection.id:
            return existing

    if index is None:
        index = generate_key_between(None, stars[0].index if stars and stars[0].index else None)
    else:
        index = validate_index(index)

    now = datetime.utcnow()
    star = Star(
        team_id=user.team_id,
        user_id=user.id,
        document_id=document.id if document is not None else None,
        collection_id=collection.id if collection is not None else None,
        index=index,
        created_by_id=user.id,
        created_at=now,
        updated_at=now,
    )
    s.add(star)
    s.flush()

    record_event(
        s,
        name="stars.create",
        actor=user,
        model_id=star.id,
        document_id=star.document_id,
        collection_id=star.collection_id,
        ip=ip,
    )
    return star


def star_updater(s: "Session", *, star: "Star", user: "User", index: str, ip: str | None = None) -> "Star":
    star.index = validate_index(index)
    star.updated_at = datetime.utcnow()

    record_event(
        s,
        name="stars.update",
        actor=user,
        model_id=star.id,
        document_id=star.document_id,
        collection_id=star.collection_id,
        data={"index": star.index},
        ip=ip,
    )
    return star


def star_destroyer(s: "Session", *, star: "Star", user: "User", ip: str | None = None) -> "Star":
    """Soft-delete a star and record a `stars.delete` event."""
    star.deleted_at = datetime.utcnow()

    record_event(
        s,
        name="stars.delete",
        actor=user,
        model_id=star.id,
        user_id=user.id,
        document_id=star.document_id,
        collection_id=star.collection_id,
        ip=ip,
    )
    return star
