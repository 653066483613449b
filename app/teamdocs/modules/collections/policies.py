from __future__ import annotations

from app.teamdocs.models import User
from app.teamdocs.modules.collections.models import Collection
from app.teamdocs.policies import allow, is_team_admin, is_team_model


def _membership_permission(actor: User, collection: Collection) -> str | None:
    m = collection.membership_for(actor.id)
    return m.permission if m else None


def can_read_collection(actor: User, collection: Collection) -> bool:
    if not is_team_model(actor, collection) or collection.deleted_at is not None:
        return False
    if not collection.is_private:
        return True
    return _membership_permission(actor, collection) is not None


def can_write_collection(actor: User, collection: Collection) -> bool:
    if actor.is_viewer or not can_read_collection(actor, collection):
        return False
    if collection.permission == "read_write":
        return True
    return _membership_permission(actor, collection) in ("read_write", "admin")


def can_manage_collection(actor: User, collection: Collection) -> bool:
    if actor.is_viewer or not is_team_model(actor, collection) or collection.deleted_at is not None:
        return False
    if is_team_admin(actor, collection):
        return True
    return _membership_permission(actor, collection) == "admin"


allow(Collection, ["read", "star", "unstar"], can_read_collection)
allow(Collection, "createDocument", can_write_collection)
allow(Collection, ["update", "delete", "addUser", "removeUser"], can_manage_collection)
