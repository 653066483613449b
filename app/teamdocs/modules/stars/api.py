from __future__ import annotations

from flask import Blueprint

from app.teamdocs.api import ok, pagination, pagination_params, request_params, require_param
from app.teamdocs.audit import request_ip
from app.teamdocs.auth import current_user, require_auth
from app.teamdocs.db import db_session
from app.teamdocs.errors import ValidationError
from app.teamdocs.modules.collections.service import get_collection
from app.teamdocs.modules.documents.service import get_document
from app.teamdocs.modules.stars.service import get_star, live_stars, star_creator, star_destroyer, star_updater
from app.teamdocs.policies import authorize, can, present_policies
from app.teamdocs.presenters import present_document, present_star

bp = Blueprint("stars", __name__)


@bp.post("/stars.create")
@require_auth
def stars_create():
    s = db_session()
    u = current_user()
    params = request_params()
    document_id = params.get("documentId")
    collection_id = params.get("collectionId")
    if bool(document_id) == bool(collection_id):
        raise ValidationError("One of documentId or collectionId is required.")

    document = collection = None
    if document_id:
        document = get_document(s, document_id, u.team_id)
        authorize(u, "star", document)
    else:
        collection = get_collection(s, collection_id, u.team_id)
        authorize(u, "star", collection)

    star = star_creator(
        s,
        user=u,
        document=document,
        collection=collection,
        index=params.get("index"),
        ip=request_ip(),
    )
    s.commit()
    return ok(present_star(star), policies=present_policies(u, [star]))


@bp.post("/stars.list")
@require_auth
def stars_list():
    s = db_session()
    u = current_user()
    offset, limit = pagination_params(request_params())

    # Stars whose target is no longer readable (e.g. removed from a private collection) are hidden.
    visible = [
        st
        for st in live_stars(s, u.id)
        if (st.document is not None and can(u, "read", st.document))
        or (st.collection is not None and can(u, "read", st.collection))
    ]
    page = visible[offset : offset + limit]
    documents = [st.document for st in page if st.document is not None]
    return ok(
        {
            "stars": [present_star(st) for st in page],
            "documents": [present_document(d) for d in documents],
        },
        policies=present_policies(u, page),
        pagination=pagination(offset, limit),
    )


@bp.post("/stars.update")
@require_auth
def stars_update():
    s = db_session()
    u = current_user()
    params = request_params()
    star = get_star(s, require_param(params, "id"), u)
    authorize(u, "update", star)

    star_updater(s, star=star, user=u, index=require_param(params, "index"), ip=request_ip())
    s.commit()
    return ok(present_star(star), policies=present_policies(u, [star]))


@bp.post("/stars.delete")
@require_auth
def stars_delete():
    s = db_session()
    u = current_user()
    params = request_params()
    star = get_star(s, require_param(params, "id"), u)
    authorize(u, "delete", star)

    star_destroyer(s, star=star, user=u, ip=request_ip())
    s.commit()
    return ok()
