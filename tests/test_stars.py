from app.teamdocs.db import session_scope
from app.teamdocs.modules.stars.models import Star
from app.teamdocs.modules.stars.service import live_stars, star_creator, star_destroyer

from factories import build_collection, build_document, build_star, build_user, find_latest_event, token_for

IP = "127.0.0.1"


def test_star_destroyer_destroys_existing_star(app):
    with session_scope(app) as s:
        user = build_user(s)
        document = build_document(s, user=user)
        star = build_star(s, user=user, document=document, index="P")

    with session_scope(app) as s:
        star = s.get(Star, star.id)
        star_destroyer(s, star=star, user=user, ip=IP)

    with session_scope(app) as s:
        count = s.query(Star).filter(Star.user_id == user.id).filter(Star.deleted_at.is_(None)).count()
        assert count == 0
        assert live_stars(s, user.id) == []

    event = find_latest_event(app)
    assert event is not None
    assert event.name == "stars.delete"
    assert event.model_id == star.id
    assert event.user_id == user.id
    assert event.document_id == document.id
    assert event.ip == IP


def test_star_creator_is_idempotent_and_prepends(app):
    with session_scope(app) as s:
        user = build_user(s)
        first_doc = build_document(s, user=user)
        second_doc = build_document(s, user=user)

    with session_scope(app) as s:
        first = star_creator(s, user=user, document=first_doc)
        again = star_creator(s, user=user, document=first_doc)
        assert again.id == first.id

        second = star_creator(s, user=user, document=second_doc)
        assert second.index < first.index
        assert [st.id for st in live_stars(s, user.id)] == [second.id, first.id]


def test_stars_api_create_list_update_delete(app, client):
    with session_scope(app) as s:
        user = build_user(s)
        collection = build_collection(s, user=user)
        document = build_document(s, user=user, collection=collection)
    token = token_for(app, user)

    r = client.post("/api/stars.create", json={"token": token, "documentId": document.id})
    assert r.status_code == 200
    doc_star = r.get_json()["data"]
    assert doc_star["documentId"] == document.id

    r = client.post("/api/stars.create", json={"token": token, "collectionId": collection.id})
    assert r.status_code == 200
    collection_star = r.get_json()["data"]

    r = client.post("/api/stars.list", json={"token": token})
    assert r.status_code == 200
    data = r.get_json()["data"]
    assert [st["id"] for st in data["stars"]] == [collection_star["id"], doc_star["id"]]
    assert [d["id"] for d in data["documents"]] == [document.id]

    # Move the document star to the front.
    r = client.post("/api/stars.update", json={"token": token, "id": doc_star["id"], "index": "0V"})
    assert r.status_code == 200
    r = client.post("/api/stars.list", json={"token": token})
    assert [st["id"] for st in r.get_json()["data"]["stars"]] == [doc_star["id"], collection_star["id"]]

    r = client.post("/api/stars.delete", json={"token": token, "id": doc_star["id"]})
    assert r.status_code == 200
    r = client.post("/api/stars.list", json={"token": token})
    assert [st["id"] for st in r.get_json()["data"]["stars"]] == [collection_star["id"]]


def test_stars_create_requires_exactly_one_target(app, client):
    with session_scope(app) as s:
        user = build_user(s)
    r = client.post("/api/stars.create", json={"token": token_for(app, user)})
    assert r.status_code == 400


def test_stars_update_rejects_invalid_index(app, client):
    with session_scope(app) as s:
        user = build_user(s)
        star = build_star(s, user=user)
    token = token_for(app, user)
    for bad in ("P0", "not valid", ""):
        r = client.post("/api/stars.update", json={"token": token, "id": star.id, "index": bad})
        assert r.status_code == 400, bad


def test_cannot_delete_another_users_star(app, client):
    with session_scope(app) as s:
        owner = build_user(s)
        other = build_user(s, team=owner.team)
        star = build_star(s, user=owner)
    r = client.post("/api/stars.delete", json={"token": token_for(app, other), "id": star.id})
    assert r.status_code == 403
