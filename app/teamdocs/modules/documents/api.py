from __future__ import annotations

from flask import Blueprint

from app.teamdocs.api import ok, optional_bool, pagination, pagination_params, request_params, require_param
from app.teamdocs.audit import request_ip
from app.teamdocs.auth import current_user, require_auth
from app.teamdocs.db import db_session, live
from app.teamdocs.modules.collections.service import get_collection, live_collections
from app.teamdocs.modules.documents.models import Document
from app.teamdocs.modules.documents.service import document_creator, document_destroyer, document_updater, get_document
from app.teamdocs.policies import authorize, can, present_policies
from app.teamdocs.presenters import present_document

bp = Blueprint("documents", __name__)


@bp.post("/documents.create")
@require_auth
def documents_create():
    s = db_session()
    u = current_user()
    params = request_params()
    authorize(u, "createDocument", u.team)
    collection = get_collection(s, require_param(params, "collectionId"), u.team_id)
    authorize(u, "createDocument", collection)

    document = document_creator(
        s,
        user=u,
        collection=collection,
        title=params.get("title"),
        text=params.get("text"),
        publish=bool(optional_bool(params, "publish")),
        ip=request_ip(),
    )
    s.commit()
    return ok(present_document(document), policies=present_policies(u, [document]))


@bp.post("/documents.info")
@require_auth
def documents_info():
    s = db_session()
    u = current_user()
    params = request_params()
    document = get_document(s, require_param(params, "id"), u.team_id)
    authorize(u, "read", document)
    return ok(present_document(document), policies=present_policies(u, [document]))


@bp.post("/documents.list")
@require_auth
def documents_list():
    s = db_session()
    u = current_user()
    params = request_params()
    offset, limit = pagination_params(params)

    collection_id = params.get("collectionId")
    if collection_id:
        collection = get_collection(s, collection_id, u.team_id)
        authorize(u, "read", collection)
        collection_ids = [collection.id]
    else:
        collection_ids = [c.id for c in live_collections(s, u.team_id) if can(u, "read", c)]

    documents = []
    if collection_ids:
        documents = (
            live(s, Document)
            .filter(Document.collection_id.in_(collection_ids))
            .order_by(Document.updated_at.desc(), Document.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )
    return ok(
        [present_document(d) for d in documents],
        policies=present_policies(u, documents),
        pagination=pagination(offset, limit),
    )


@bp.post("/documents.update")
@require_auth
def documents_update():
    s = db_session()
    u = current_user()
    params = request_params()
    document = get_document(s, require_param(params, "id"), u.team_id)
    authorize(u, "update", document)

    document_updater(
        s,
        document=document,
        user=u,
        title=params.get("title"),
        text=params.get("text"),
        publish=bool(optional_bool(params, "publish")),
        ip=request_ip(),
    )
    s.commit()
    return ok(present_document(document), policies=present_policies(u, [document]))


@bp.post("/documents.delete")
@require_auth
def documents_delete():
    s = db_session()
    u = current_user()
    params = request_params()
    document = get_document(s, require_param(params, "id"), u.team_id)
    authorize(u, "delete", document)

    document_destroyer(s, document=document, user=u, ip=request_ip())
    s.commit()
    return ok()
