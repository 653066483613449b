from __future__ import annotations

from app.teamdocs.models import User
from app.teamdocs.modules.collections.policies import can_read_collection, can_write_collection
from app.teamdocs.modules.documents.models import Document
from app.teamdocs.policies import allow


def can_read_document(actor: User, document: Document) -> bool:
    if document.deleted_at is not None or document.team_id != actor.team_id:
        return False
    return can_read_collection(actor, document.collection)


def can_write_document(actor: User, document: Document) -> bool:
    if document.deleted_at is not None or document.team_id != actor.team_id:
        return False
    return can_write_collection(actor, document.collection)


allow(Document, ["read", "star", "unstar"], can_read_document)
allow(Document, ["update", "delete"], can_write_document)
