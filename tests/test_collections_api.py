from app.teamdocs.db import session_scope
from app.teamdocs.modules.collections.models import Collection
from app.teamdocs.modules.documents.models import Document
from app.teamdocs.modules.stars.models import Star

from factories import build_admin, build_collection, build_document, build_star, build_team, build_user, build_viewer, token_for


def test_create_collection_gives_creator_admin_membership(app, client):
    with session_scope(app) as s:
        user = build_user(s)
    token = token_for(app, user)

    r = client.post("/api/collections.create", json={"token": token, "name": "Engineering", "permission": "read"})
    assert r.status_code == 200
    body = r.get_json()
    collection = body["data"]
    assert collection["name"] == "Engineering"
    assert collection["permission"] == "read"
    assert body["policies"][0]["abilities"]["update"] is True

    r = client.post("/api/collections.memberships", json={"token": token, "id": collection["id"]})
    assert r.status_code == 200
    assert r.get_json()["data"] == [
        {
            "id": r.get_json()["data"][0]["id"],
            "userId": user.id,
            "collectionId": collection["id"],
            "permission": "admin",
            "createdById": user.id,
        }
    ]


def test_new_collections_are_appended(app, client):
    with session_scope(app) as s:
        admin = build_admin(s)
    token = token_for(app, admin)

    names = ["First", "Second", "Third"]
    for name in names:
        assert client.post("/api/collections.create", json={"token": token, "name": name}).status_code == 200

    r = client.post("/api/collections.list", json={"token": token})
    assert [c["name"] for c in r.get_json()["data"]] == names
    assert r.get_json()["pagination"]["limit"] == 25


def test_create_collection_rejects_unknown_permission(app, client):
    with session_scope(app) as s:
        admin = build_admin(s)
    r = client.post("/api/collections.create", json={"token": token_for(app, admin), "name": "X", "permission": "owner"})
    assert r.status_code == 400


def test_viewer_cannot_create_collection(app, client):
    with session_scope(app) as s:
        viewer = build_viewer(s)
    r = client.post("/api/collections.create", json={"token": token_for(app, viewer), "name": "Nope"})
    assert r.status_code == 403


def test_private_collection_hidden_from_non_members(app, client):
    with session_scope(app) as s:
        team = build_team(s)
        owner = build_user(s, team=team)
        other = build_user(s, team=team)
        private = build_collection(s, user=owner, permission=None)
    other_token = token_for(app, other)

    r = client.post("/api/collections.info", json={"token": other_token, "id": private.id})
    assert r.status_code == 403
    r = client.post("/api/collections.list", json={"token": other_token})
    assert private.id not in [c["id"] for c in r.get_json()["data"]]

    # Adding a membership grants access.
    r = client.post(
        "/api/collections.add_user",
        json={"token": token_for(app, owner), "id": private.id, "userId": other.id, "permission": "read"},
    )
    assert r.status_code == 200
    r = client.post("/api/collections.info", json={"token": other_token, "id": private.id})
    assert r.status_code == 200

    r = client.post(
        "/api/collections.remove_user",
        json={"token": token_for(app, owner), "id": private.id, "userId": other.id},
    )
    assert r.status_code == 200
    r = client.post("/api/collections.info", json={"token": other_token, "id": private.id})
    assert r.status_code == 403


def test_update_collection(app, client):
    with session_scope(app) as s:
        admin = build_admin(s)
        collection = build_collection(s, user=admin)
    r = client.post(
        "/api/collections.update",
        json={"token": token_for(app, admin), "id": collection.id, "name": "Renamed", "description": "About"},
    )
    assert r.status_code == 200
    data = r.get_json()["data"]
    assert data["name"] == "Renamed"
    assert data["description"] == "About"
    assert data["permission"] == "read_write"


def test_delete_collection_soft_deletes_documents_and_stars(app, client):
    with session_scope(app) as s:
        admin = build_admin(s)
        doomed = build_collection(s, user=admin)
        build_collection(s, user=admin)
        document = build_document(s, user=admin, collection=doomed)
        star = build_star(s, user=admin, document=document)
    token = token_for(app, admin)

    r = client.post("/api/collections.delete", json={"token": token, "id": doomed.id})
    assert r.status_code == 200

    with session_scope(app) as s:
        assert s.get(Collection, doomed.id).deleted_at is not None
        assert s.get(Document, document.id).deleted_at is not None
        assert s.get(Star, star.id).deleted_at is not None

    r = client.post("/api/collections.info", json={"token": token, "id": doomed.id})
    assert r.status_code == 404


def test_cannot_delete_last_collection(app, client):
    with session_scope(app) as s:
        admin = build_admin(s)
        only = build_collection(s, user=admin)
    r = client.post("/api/collections.delete", json={"token": token_for(app, admin), "id": only.id})
    assert r.status_code == 400
    assert r.get_json()["error"] == "validation_error"


def test_member_cannot_delete_collection_they_do_not_manage(app, client):
    with session_scope(app) as s:
        team = build_team(s)
        admin = build_admin(s, team=team)
        member = build_user(s, team=team)
        collection = build_collection(s, user=admin)
        build_collection(s, user=admin)
    r = client.post("/api/collections.delete", json={"token": token_for(app, member), "id": collection.id})
    assert r.status_code == 403


def test_collection_fields_must_be_strings(app, client):
    with session_scope(app) as s:
        user = build_user(s)
        collection = build_collection(s, user=user)
    token = token_for(app, user)

    for body in ({"name": 123}, {"name": "Ok", "description": ["x"]}, {"name": "Ok", "color": 7}):
        r = client.post("/api/collections.create", json={"token": token, **body})
        assert r.status_code == 400, body
        assert r.get_json()["error"] == "validation_error"

    for body in ({"name": 7}, {"description": {"a": 1}}, {"color": 3}):
        r = client.post("/api/collections.update", json={"token": token, "id": collection.id, **body})
        assert r.status_code == 400, body

    with session_scope(app) as s:
        assert s.get(Collection, collection.id).name == collection.name


def test_create_collection_sharing_flag(app, client):
    with session_scope(app) as s:
        user = build_user(s)
    token = token_for(app, user)

    r = client.post("/api/collections.create", json={"token": token, "name": "Default"})
    assert r.get_json()["data"]["sharing"] is True

    r = client.post("/api/collections.create", json={"token": token, "name": "Closed", "sharing": False})
    assert r.get_json()["data"]["sharing"] is False

    r = client.post("/api/collections.create", json={"token": token, "name": "Typo", "sharing": "false"})
    assert r.status_code == 400
