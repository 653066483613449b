from __future__ import annotations

import hashlib
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from werkzeug.utils import secure_filename

from app.teamdocs.audit import record_event
from app.teamdocs.errors import NotFoundError, ValidationError
from app.teamdocs.storage import Storage

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.teamdocs.models import User
    from app.teamdocs.modules.attachments.models import Attachment
    from app.teamdocs.modules.documents.models import Document


def sanitize_upload_filename(filename: str) -> str:
    fn = secure_filename(filename or "")
    return fn or "attachment.bin"


def build_attachment_storage_key(team_id: str, filename: str) -> str:
    """Unique storage key; the uuid segment keeps same-named uploads apart."""
    return f"attachments/{team_id}/{uuid.uuid4().hex}/{sanitize_upload_filename(filename)}"


def file_digest_and_bytes(file_bytes: bytes) -> tuple[str, int]:
    h = hashlib.sha256()
    h.update(file_bytes)
    return (h.hexdigest(), len(file_bytes))


def get_attachment(s: "Session", attachment_id: str | None, team_id: str) -> "Attachment":
    from app.teamdocs.modules.attachments.models import Attachment

    attachment = s.get(Attachment, attachment_id) if attachment_id else None
    if not attachment or attachment.team_id != team_id:
        raise NotFoundError("Attachment not found.")
    return attachment


def attachment_creator(
    s: "Session",
    *,
    storage: Storage,
    user: "User",
    file_bytes: bytes,
    filename: str,
    content_type: str | None,
    document: "Document | None" = None,
    ip: str | None = None,
) -> "Attachment":
    from app.teamdocs.modules.attachments.models import Attachment

    if not file_bytes:
        raise ValidationError("file must not be empty.")

    sha256, size = file_digest_and_bytes(file_bytes)
    key = build_attachment_storage_key(user.team_id, filename)
    content_type = content_type or "application/octet-stream"
    storage.put_bytes(key, file_bytes, content_type=content_type)

    attachment = Attachment(
        team_id=user.team_id,
        user_id=user.id,
        document_id=document.id if document is not None else None,
        key=key,
        name=sanitize_upload_filename(filename),
        content_type=content_type,
        size=size,
        sha256=sha256,
        created_at=datetime.utcnow(),
    )
    s.add(attachment)
    s.flush()

    record_event(
        s,
        name="attachments.create",
        actor=user,
        model_id=attachment.id,
        document_id=attachment.document_id,
        data={"name": attachment.name, "size": size, "contentType": content_type},
        ip=ip,
    )
    return attachment


def attachment_destroyer(
    s: "Session", *, storage: Storage, attachment: "Attachment", user: "User", ip: str | None = None
) -> None:
    storage.delete(attachment.key)
    s.delete(attachment)

    record_event(
        s,
        name="attachments.delete",
        actor=user,
        model_id=attachment.id,
        document_id=attachment.document_id,
        data={"name": attachment.name},
        ip=ip,
    )
