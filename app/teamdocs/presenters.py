"""
JSON presenters. Field names are camelCase to match the client models.
"""
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.teamdocs.models import Event, Team, User
    from app.teamdocs.modules.attachments.models import Attachment
    from app.teamdocs.modules.collections.models import Collection, CollectionUser
    from app.teamdocs.modules.documents.models import Document
    from app.teamdocs.modules.stars.models import Star


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() + "Z" if value else None


def present_team(team: "Team") -> dict[str, Any]:
    return {
        "id": team.id,
        "name": team.name,
        "subdomain": team.subdomain,
        "avatarUrl": team.avatar_url,
        "sharing": team.sharing,
        "guestSignin": team.guest_signin,
        "documentEmbeds": team.document_embeds,
        "memberCollectionCreate": team.member_collection_create,
        "inviteRequired": team.invite_required,
        "defaultUserRole": team.default_user_role,
        "defaultCollectionId": team.default_collection_id,
        "allowedDomains": [d.name for d in team.allowed_domains],
        "preferences": team.preferences or {},
        "createdAt": _iso(team.created_at),
        "updatedAt": _iso(team.updated_at),
    }


def present_user(user: "User", *, include_details: bool = False) -> dict[str, Any]:
    """
    `include_details` adds private fields; only pass it for the user
    themselves or a team admin.
    """
    data: dict[str, Any] = {
        "id": user.id,
        "name": user.name,
        "avatarUrl": user.avatar_url,
        "color": user.color,
        "language": user.language,
        "role": user.role,
        "isAdmin": user.is_admin,
        "isViewer": user.is_viewer,
        "isSuspended": user.is_suspended,
        "lastActiveAt": _iso(user.last_active_at),
        "createdAt": _iso(user.created_at),
        "updatedAt": _iso(user.updated_at),
    }
    if include_details:
        data["email"] = user.email
        data["preferences"] = user.preferences or {}
        data["notificationSettings"] = user.notification_settings or {}
    return data


def present_membership(membership: "CollectionUser") -> dict[str, Any]:
    return {
        "id": membership.id,
        "userId": membership.user_id,
        "collectionId": membership.collection_id,
        "permission": membership.permission,
        "createdById": membership.created_by_id,
    }


def present_collection(collection: "Collection") -> dict[str, Any]:
    return {
        "id": collection.id,
        "name": collection.name,
        "description": collection.description,
        "color": collection.color,
        "icon": collection.icon,
        "permission": collection.permission,
        "sharing": collection.sharing,
        "index": collection.index,
        "createdById": collection.created_by_id,
        "createdAt": _iso(collection.created_at),
        "updatedAt": _iso(collection.updated_at),
        "deletedAt": _iso(collection.deleted_at),
    }


def present_document(document: "Document") -> dict[str, Any]:
    return {
        "id": document.id,
        "collectionId": document.collection_id,
        "title": document.title,
        "text": document.text,
        "createdById": document.created_by_id,
        "lastModifiedById": document.last_modified_by_id,
        "publishedAt": _iso(document.published_at),
        "createdAt": _iso(document.created_at),
        "updatedAt": _iso(document.updated_at),
        "deletedAt": _iso(document.deleted_at),
    }


def present_star(star: "Star") -> dict[str, Any]:
    return {
        "id": star.id,
        "documentId": star.document_id,
        "collectionId": star.collection_id,
        "index": star.index,
        "createdAt": _iso(star.created_at),
        "updatedAt": _iso(star.updated_at),
    }


def present_attachment(attachment: "Attachment") -> dict[str, Any]:
    return {
        "id": attachment.id,
        "documentId": attachment.document_id,
        "name": attachment.name,
        "contentType": attachment.content_type,
        "size": attachment.size,
        "url": f"/api/attachments.redirect?id={attachment.id}",
        "createdAt": _iso(attachment.created_at),
    }


def present_event(event: "Event") -> dict[str, Any]:
    return {
        "id": event.id,
        "name": event.name,
        "modelId": event.model_id,
        "actorId": event.actor_id,
        "userId": event.user_id,
        "collectionId": event.collection_id,
        "documentId": event.document_id,
        "ip": event.ip,
        "data": event.data,
        "createdAt": _iso(event.created_at),
    }
