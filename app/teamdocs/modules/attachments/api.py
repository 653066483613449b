from __future__ import annotations

from flask import Blueprint, current_app, request, send_file

from app.teamdocs.api import ok, request_params, require_param
from app.teamdocs.audit import request_ip
from app.teamdocs.auth import current_user, require_auth
from app.teamdocs.db import db_session
from app.teamdocs.errors import NotFoundError, ValidationError
from app.teamdocs.modules.attachments.service import attachment_creator, attachment_destroyer, get_attachment
from app.teamdocs.modules.documents.service import get_document
from app.teamdocs.policies import authorize, present_policies
from app.teamdocs.presenters import present_attachment
from app.teamdocs.storage import StorageError, storage_from_config

bp = Blueprint("attachments", __name__)


@bp.post("/attachments.create")
@require_auth
def attachments_create():
    s = db_session()
    u = current_user()
    authorize(u, "createAttachment", u.team)

    f = request.files.get("file")
    if not f or not f.filename:
        raise ValidationError("file is required.")

    document = None
    document_id = request.form.get("documentId")
    if document_id:
        document = get_document(s, document_id, u.team_id)
        authorize(u, "update", document)

    attachment = attachment_creator(
        s,
        storage=storage_from_config(current_app.config),
        user=u,
        file_bytes=f.read(),
        filename=f.filename,
        content_type=f.mimetype,
        document=document,
        ip=request_ip(),
    )
    s.commit()
    return ok(present_attachment(attachment), policies=present_policies(u, [attachment]))


@bp.route("/attachments.redirect", methods=["GET", "POST"])
@require_auth
def attachments_redirect():
    s = db_session()
    u = current_user()
    params = request_params() if request.method == "POST" else request.args.to_dict()
    attachment = get_attachment(s, require_param(params, "id"), u.team_id)
    authorize(u, "read", attachment)

    try:
        blob = storage_from_config(current_app.config).open(attachment.key)
    except StorageError as e:
        current_app.logger.warning("Attachment blob missing: %s (%s)", attachment.id, e)
        raise NotFoundError("Attachment not found.") from e
    return send_file(
        blob,
        mimetype=attachment.content_type,
        as_attachment=False,
        download_name=attachment.name,
    )


@bp.post("/attachments.delete")
@require_auth
def attachments_delete():
    s = db_session()
    u = current_user()
    params = request_params()
    attachment = get_attachment(s, require_param(params, "id"), u.team_id)
    authorize(u, "delete", attachment)

    attachment_destroyer(
        s,
        storage=storage_from_config(current_app.config),
        attachment=attachment,
        user=u,
        ip=request_ip(),
    )
    s.commit()
    return ok()
