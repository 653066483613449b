from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from app.teamdocs.audit import record_event
from app.teamdocs.db import live
from app.teamdocs.constants import COLLECTION_PERMISSIONS, MEMBERSHIP_PERMISSIONS
from app.teamdocs.errors import NotFoundError, ValidationError
from app.teamdocs.fractional_index import generate_key_between

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.teamdocs.models import User
    from app.teamdocs.modules.collections.models import Collection, CollectionUser

logger = logging.getLogger(__name__)

UNSET = object()


def validate_permission(permission: object) -> str | None:
    if permission is None:
        return None
    if permission not in COLLECTION_PERMISSIONS:
        raise ValidationError(f"permission must be one of: {', '.join(COLLECTION_PERMISSIONS)} or null")
    return permission  # type: ignore[return-value]


def _optional_text(value: object, field: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string.")
    return value


def live_collections(s: "Session", team_id: str) -> list["Collection"]:
    from app.teamdocs.modules.collections.models import Collection

    rows = (
        live(s, Collection)
        .filter(Collection.team_id == team_id)
        .all()
    )
    return sorted(rows, key=lambda c: (c.index or "", c.created_at))


def get_collection(s: "Session", collection_id: str | None, team_id: str) -> "Collection":
    from app.teamdocs.modules.collections.models import Collection

    collection = s.get(Collection, collection_id) if collection_id else None
    if not collection or collection.team_id != team_id or collection.deleted_at is not None:
        raise NotFoundError("Collection not found.")
    return collection


def collection_creator(
    s: "Session",
    *,
    user: "User",
    name: str,
    description: str | None = None,
    color: str | None = None,
    icon: str | None = None,
    permission: str | None = None,
    sharing: bool = True,
    ip: str | None = None,
) -> "Collection":
    from app.teamdocs.modules.collections.models import Collection, CollectionUser

    name = (_optional_text(name, "name") or "").strip()
    if not name:
        raise ValidationError("name is required.")
    description = _optional_text(description, "description")
    color = _optional_text(color, "color")
    icon = _optional_text(icon, "icon")

    existing = live_collections(s, user.team_id)
    last_index = existing[-1].index if existing else None

    now = datetime.utcnow()
    collection = Collection(
        team_id=user.team_id,
        name=name,
        description=(description or "").strip() or None,
        color=color,
        icon=icon,
        permission=validate_permission(permission),
        sharing=bool(sharing),
        index=generate_key_between(last_index, None),
        created_by_id=user.id,
        created_at=now,
        updated_at=now,
    )
    collection.memberships.append(CollectionUser(user_id=user.id, permission="admin", created_by_id=user.id))
    s.add(collection)
    s.flush()

    record_event(
        s,
        name="collections.create",
        actor=user,
        model_id=collection.id,
        collection_id=collection.id,
        data={"name": collection.name},
        ip=ip,
    )
    return collection


def collection_updater(
    s: "Session",
    *,
    collection: "Collection",
    user: "User",
    name: str | None = None,
    description: object = UNSET,
    color: object = UNSET,
    permission: object = UNSET,
    sharing: bool | None = None,
    ip: str | None = None,
) -> "Collection":
    changes: list[str] = []

    if name is not None:
        new_name = (_optional_text(name, "name") or "").strip()
        if not new_name:
            raise ValidationError("name must not be empty.")
        if new_name != collection.name:
            collection.name = new_name
            changes.append("name")

    if description is not UNSET:
        new_description = (_optional_text(description, "description") or "").strip() or None
        if new_description != collection.description:
            collection.description = new_description
            changes.append("description")

    if color is not UNSET and _optional_text(color, "color") != collection.color:
        collection.color = color  # type: ignore[assignment]
        changes.append("color")

    if sharing is not None and bool(sharing) != collection.sharing:
        collection.sharing = bool(sharing)
        changes.append("sharing")

    if permission is not UNSET:
        new_permission = validate_permission(permission)
        if new_permission != collection.permission:
            collection.permission = new_permission
            changes.append("permission")
            # A private collection cannot remain the team's landing collection.
            team = collection.team
            if collection.is_private and team.default_collection_id == collection.id:
                team.default_collection_id = None
                team.updated_at = datetime.utcnow()
                logger.info("Cleared default collection of team %s (collection %s made private)", team.id, collection.id)

    collection.updated_at = datetime.utcnow()
    record_event(
        s,
        name="collections.update",
        actor=user,
        model_id=collection.id,
        collection_id=collection.id,
        data={"name": collection.name, "changes": changes},
        ip=ip,
    )
    return collection


def collection_destroyer(s: "Session", *, collection: "Collection", user: "User", ip: str | None = None) -> None:
    """Soft-delete a collection together with its documents and the stars pointing at them."""
    from app.teamdocs.modules.documents.models import Document
    from app.teamdocs.modules.stars.models import Star

    remaining = [c for c in live_collections(s, collection.team_id) if c.id != collection.id]
    if not remaining:
        raise ValidationError("Cannot delete the last collection.")

    now = datetime.utcnow()
    collection.deleted_at = now
    collection.deleted_by_id = user.id

    documents = (
        live(s, Document)
        .filter(Document.collection_id == collection.id)
        .all()
    )
    document_ids = [d.id for d in documents]
    for d in documents:
        d.deleted_at = now
        d.deleted_by_id = user.id

    star_q = live(s, Star)
    if document_ids:
        star_q = star_q.filter((Star.collection_id == collection.id) | (Star.document_id.in_(document_ids)))
    else:
        star_q = star_q.filter(Star.collection_id == collection.id)
    for star in star_q.all():
        star.deleted_at = now

    team = collection.team
    if team.default_collection_id == collection.id:
        team.default_collection_id = None
        team.updated_at = now

    record_event(
        s,
        name="collections.delete",
        actor=user,
        model_id=collection.id,
        collection_id=collection.id,
        data={"name": collection.name, "documents": len(document_ids)},
        ip=ip,
    )


def add_collection_user(
    s: "Session",
    *,
    collection: "Collection",
    member: "User",
    user: "User",
    permission: str = "read_write",
    ip: str | None = None,
) -> "CollectionUser":
    from app.teamdocs.modules.collections.models import CollectionUser

    if permission not in MEMBERSHIP_PERMISSIONS:
        raise ValidationError(f"permission must be one of: {', '.join(MEMBERSHIP_PERMISSIONS)}")
    if member.team_id != collection.team_id:
        raise NotFoundError("User not found.")

    membership = collection.membership_for(member.id)
    if membership is None:
        membership = CollectionUser(user_id=member.id, permission=permission, created_by_id=user.id)
        collection.memberships.append(membership)
    else:
        membership.permission = permission
    s.flush()

    record_event(
        s,
        name="collections.add_user",
        actor=user,
        model_id=collection.id,
        user_id=member.id,
        collection_id=collection.id,
        data={"permission": permission},
        ip=ip,
    )
    return membership


def remove_collection_user(
    s: "Session",
    *,
    collection: "Collection",
    member: "User",
    user: "User",
    ip: str | None = None,
) -> None:
    membership = collection.membership_for(member.id)
    if membership is None:
        raise NotFoundError("User is not a member of this collection.")
    collection.memberships.remove(membership)

    record_event(
        s,
        name="collections.remove_user",
        actor=user,
        model_id=collection.id,
        user_id=member.id,
        collection_id=collection.id,
        ip=ip,
    )
