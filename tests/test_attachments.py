import io

import pytest

from app.teamdocs.db import session_scope
from app.teamdocs.modules.attachments.models import Attachment
from app.teamdocs.storage import LocalStorage, StorageError

from factories import build_admin, build_document, build_team, build_user, find_latest_event, token_for


def _upload(client, token, data=b"hello world", filename="notes.txt", **form):
    return client.post(
        "/api/attachments.create",
        data={"token": token, "file": (io.BytesIO(data), filename), **form},
        content_type="multipart/form-data",
    )


def test_upload_download_delete(app, client, tmp_path):
    with session_scope(app) as s:
        user = build_user(s)
        document = build_document(s, user=user)
    token = token_for(app, user)

    r = _upload(client, token, filename="../../secret notes.txt", documentId=document.id)
    assert r.status_code == 200
    attachment = r.json["data"]
    assert attachment["name"] == "secret_notes.txt"
    assert attachment["size"] == len(b"hello world")
    assert attachment["documentId"] == document.id

    with session_scope(app) as s:
        row = s.get(Attachment, attachment["id"])
        key = row.key
    assert key.startswith(f"attachments/{user.team_id}/")
    assert (tmp_path / "storage" / key).read_bytes() == b"hello world"

    r = client.get(f"/api/attachments.redirect?id={attachment['id']}", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.data == b"hello world"

    r = client.post("/api/attachments.delete", json={"token": token, "id": attachment["id"]})
    assert r.status_code == 200
    assert not (tmp_path / "storage" / key).exists()
    assert find_latest_event(app).name == "attachments.delete"


def test_upload_requires_file(app, client):
    with session_scope(app) as s:
        user = build_user(s)
    r = client.post("/api/attachments.create", data={"token": token_for(app, user)}, content_type="multipart/form-data")
    assert r.status_code == 400


def test_only_uploader_or_admin_can_delete(app, client):
    with session_scope(app) as s:
        team = build_team(s)
        uploader = build_user(s, team=team)
        other = build_user(s, team=team)
        admin = build_admin(s, team=team)
    attachment_id = _upload(client, token_for(app, uploader)).json["data"]["id"]

    r = client.post("/api/attachments.delete", json={"token": token_for(app, other), "id": attachment_id})
    assert r.status_code == 403
    r = client.post("/api/attachments.delete", json={"token": token_for(app, admin), "id": attachment_id})
    assert r.status_code == 200


def test_other_team_cannot_download(app, client):
    with session_scope(app) as s:
        uploader = build_user(s)
        stranger = build_user(s)
    attachment_id = _upload(client, token_for(app, uploader)).json["data"]["id"]
    r = client.post("/api/attachments.redirect", json={"token": token_for(app, stranger), "id": attachment_id})
    assert r.status_code == 404


def test_local_storage_rejects_escaping_keys(tmp_path):
    storage = LocalStorage(root=tmp_path)
    with pytest.raises(StorageError):
        storage.put_bytes("../outside.txt", b"x")


def test_missing_blob_downloads_as_not_found(app, client, tmp_path):
    with session_scope(app) as s:
        user = build_user(s)
    token = token_for(app, user)
    attachment_id = _upload(client, token).json["data"]["id"]

    with session_scope(app) as s:
        key = s.get(Attachment, attachment_id).key
    (tmp_path / "storage" / key).unlink()

    r = client.post("/api/attachments.redirect", json={"token": token, "id": attachment_id})
    assert r.status_code == 404
    assert r.json["error"] == "not_found"
