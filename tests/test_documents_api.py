from app.teamdocs.db import session_scope
from app.teamdocs.models import Event
from app.teamdocs.modules.documents.models import Document
from app.teamdocs.modules.stars.models import Star

from factories import build_collection, build_document, build_star, build_team, build_user, build_viewer, token_for


def test_create_and_publish_document(app, client):
    with session_scope(app) as s:
        user = build_user(s)
        collection = build_collection(s, user=user)
    token = token_for(app, user)

    r = client.post(
        "/api/documents.create",
        json={"token": token, "collectionId": collection.id, "title": "  Onboarding ", "text": "# Hi", "publish": True},
    )
    assert r.status_code == 200
    doc = r.get_json()["data"]
    assert doc["title"] == "Onboarding"
    assert doc["publishedAt"] is not None

    with session_scope(app) as s:
        names = [e.name for e in s.query(Event).filter(Event.document_id == doc["id"]).order_by(Event.id).all()]
        assert names == ["documents.create", "documents.publish"]


def test_update_document_and_publish_later(app, client):
    with session_scope(app) as s:
        user = build_user(s)
        document = build_document(s, user=user, published_at=None)
    token = token_for(app, user)

    r = client.post("/api/documents.update", json={"token": token, "id": document.id, "text": "Updated"})
    assert r.status_code == 200
    assert r.get_json()["data"]["text"] == "Updated"
    assert r.get_json()["data"]["publishedAt"] is None

    r = client.post("/api/documents.update", json={"token": token, "id": document.id, "publish": True})
    assert r.get_json()["data"]["publishedAt"] is not None


def test_list_documents_in_readable_collections_only(app, client):
    with session_scope(app) as s:
        team = build_team(s)
        owner = build_user(s, team=team)
        reader = build_user(s, team=team)
        shared = build_collection(s, user=owner)
        private = build_collection(s, user=owner, permission=None)
        visible = build_document(s, user=owner, collection=shared)
        hidden = build_document(s, user=owner, collection=private)

    r = client.post("/api/documents.list", json={"token": token_for(app, reader)})
    assert r.status_code == 200
    ids = [d["id"] for d in r.get_json()["data"]]
    assert visible.id in ids
    assert hidden.id not in ids

    r = client.post("/api/documents.info", json={"token": token_for(app, reader), "id": hidden.id})
    assert r.status_code == 403


def test_viewer_cannot_edit_documents(app, client):
    with session_scope(app) as s:
        team = build_team(s)
        owner = build_user(s, team=team)
        viewer = build_viewer(s, team=team)
        collection = build_collection(s, user=owner)
        document = build_document(s, user=owner, collection=collection)
    token = token_for(app, viewer)

    r = client.post("/api/documents.info", json={"token": token, "id": document.id})
    assert r.status_code == 200
    r = client.post("/api/documents.update", json={"token": token, "id": document.id, "title": "No"})
    assert r.status_code == 403
    r = client.post("/api/documents.create", json={"token": token, "collectionId": collection.id})
    assert r.status_code == 403


def test_read_only_collection_blocks_member_writes(app, client):
    with session_scope(app) as s:
        team = build_team(s)
        owner = build_user(s, team=team)
        member = build_user(s, team=team)
        collection = build_collection(s, user=owner, permission="read")
    r = client.post(
        "/api/documents.create",
        json={"token": token_for(app, member), "collectionId": collection.id, "title": "Nope"},
    )
    assert r.status_code == 403


def test_delete_document_removes_its_stars(app, client):
    with session_scope(app) as s:
        user = build_user(s)
        document = build_document(s, user=user)
        star = build_star(s, user=user, document=document)
    token = token_for(app, user)

    r = client.post("/api/documents.delete", json={"token": token, "id": document.id})
    assert r.status_code == 200

    with session_scope(app) as s:
        assert s.get(Star, star.id).deleted_at is not None

    r = client.post("/api/documents.info", json={"token": token, "id": document.id})
    assert r.status_code == 404


def test_document_not_found(app, client):
    with session_scope(app) as s:
        user = build_user(s)
    r = client.post("/api/documents.info", json={"token": token_for(app, user), "id": "missing"})
    assert r.status_code == 404
    assert r.get_json() == {"ok": False, "error": "not_found", "status": 404, "message": "Document not found."}


def test_document_title_and_text_must_be_strings(app, client):
    with session_scope(app) as s:
        user = build_user(s)
        collection = build_collection(s, user=user)
        document = build_document(s, user=user, collection=collection, text="original")
    token = token_for(app, user)

    r = client.post("/api/documents.create", json={"token": token, "collectionId": collection.id, "title": 5})
    assert r.status_code == 400
    assert r.get_json()["error"] == "validation_error"

    r = client.post("/api/documents.update", json={"token": token, "id": document.id, "title": ["x"]})
    assert r.status_code == 400

    r = client.post("/api/documents.update", json={"token": token, "id": document.id, "text": 5})
    assert r.status_code == 400

    with session_scope(app) as s:
        assert s.get(Document, document.id).text == "original"
