from datetime import datetime, timedelta, timezone

import pytest

from app.teamdocs.client import ApiClientError, Team, User


class FakeClient:
    def __init__(self, responses=None):
        self.calls = []
        self.responses = responses or {}

    def post(self, path, body=None):
        self.calls.append((path, body))
        response = self.responses.get(path, {"ok": True, "status": 200})
        if isinstance(response, Exception):
            raise response
        return response


def _user(**overrides):
    data = {
        "id": "u1",
        "name": "Jane Doe",
        "avatarUrl": None,
        "color": "#FF0000",
        "language": "en_US",
        "isAdmin": False,
        "isViewer": False,
        "lastActiveAt": None,
        "preferences": None,
        "notificationSettings": {},
    }
    data.update(overrides)
    return User.from_json(data)


def test_initial():
    assert _user().initial == "J"
    assert _user(name="").initial == "?"


def test_role():
    assert _user().role == "member"
    assert _user(isViewer=True).role == "viewer"
    assert _user(isAdmin=True, isViewer=True).role == "admin"


def test_is_invited_until_first_activity():
    assert _user().is_invited is True
    assert _user(lastActiveAt="2026-01-01T00:00:00Z").is_invited is False


def test_is_recently_active():
    now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    recent = (now - timedelta(minutes=4)).isoformat()
    stale = (now - timedelta(minutes=6)).isoformat()
    assert _user(lastActiveAt=recent).is_recently_active(now) is True
    assert _user(lastActiveAt=stale).is_recently_active(now) is False
    assert _user().is_recently_active(now) is False


def test_get_preference_falls_back_to_defaults():
    user = _user(preferences={"rememberLastPath": False})
    assert user.get_preference("rememberLastPath") is False
    assert user.get_preference("useCursorPointer") is True
    assert user.get_preference("fullWidthDocuments") is False
    assert user.get_preference("fullWidthDocuments", True) is True


def test_set_preference_replaces_mapping():
    user = _user(preferences={"rememberLastPath": False})
    before = user.preferences
    user.set_preference("seamlessEdit", True)
    assert user.preferences == {"rememberLastPath": False, "seamlessEdit": True}
    assert before == {"rememberLastPath": False}


def test_separate_edit_mode_prefers_user_over_team():
    seamless_team = Team(id="t1")
    separate_team = Team(id="t2", preferences={"seamlessEdit": False})

    assert _user().separate_edit_mode(seamless_team) is False
    assert _user().separate_edit_mode(separate_team) is True
    assert _user(preferences={"seamlessEdit": True}).separate_edit_mode(separate_team) is False
    assert _user(preferences={"seamlessEdit": False}).separate_edit_mode(seamless_team) is True


def test_subscribed_to_event_type_defaults():
    user = _user(notificationSettings={"documents.update": False})
    assert user.subscribed_to_event_type("documents.update") is False
    assert user.subscribed_to_event_type("documents.publish") is True
    assert user.subscribed_to_event_type("collections.create") is False
    assert user.subscribed_to_event_type("unknown.event") is False


def test_set_notification_event_type_posts_to_server():
    client = FakeClient()
    user = _user()
    before = user.notification_settings

    user.set_notification_event_type(client, "collections.create", True)
    user.set_notification_event_type(client, "documents.publish", False)

    assert user.notification_settings == {"collections.create": True, "documents.publish": False}
    assert before == {}
    assert client.calls == [
        ("users.notificationsSubscribe", {"eventType": "collections.create"}),
        ("users.notificationsUnsubscribe", {"eventType": "documents.publish"}),
    ]


def test_set_notification_event_type_propagates_errors():
    client = FakeClient({"users.notificationsSubscribe": ApiClientError(400, "validation_error", "bad")})
    with pytest.raises(ApiClientError) as exc:
        _user().set_notification_event_type(client, "nope", True)
    assert exc.value.status == 400


def test_to_json_contains_saved_fields_only():
    user = _user(email="jane@example.com", isAdmin=True)
    assert user.to_json() == {
        "id": "u1",
        "avatarUrl": None,
        "name": "Jane Doe",
        "color": "#FF0000",
        "language": "en_US",
        "preferences": None,
        "notificationSettings": {},
    }


def test_save_refreshes_from_response():
    client = FakeClient({"users.update": {"ok": True, "data": {"id": "u1", "name": "Janet", "isAdmin": True}}})
    user = _user()
    user.name = "Janet"
    user.save(client)

    assert client.calls[0][0] == "users.update"
    assert client.calls[0][1]["name"] == "Janet"
    assert user.name == "Janet"
    assert user.is_admin is True
    assert user.color == "#FF0000"
