from datetime import datetime, timedelta

from app.teamdocs import auth
from app.teamdocs.db import session_scope
from app.teamdocs.models import User

from factories import DEFAULT_PASSWORD, build_user, find_latest_event


def test_login_returns_token_and_records_event(app, client):
    with session_scope(app) as s:
        user = build_user(s, email="alice@example.com")

    r = client.post("/api/auth.login", json={"email": "Alice@Example.com", "password": DEFAULT_PASSWORD})
    assert r.status_code == 200
    data = r.json["data"]
    assert data["user"]["id"] == user.id
    assert data["team"]["id"] == user.team_id
    assert find_latest_event(app).name == "users.signin"

    r = client.post("/api/auth.info", json={"token": data["token"]})
    assert r.status_code == 200

    with session_scope(app) as s:
        assert s.get(User, user.id).last_active_at is not None


def test_session_cookie_authenticates_after_login(app, client):
    with session_scope(app) as s:
        build_user(s, email="cookie@example.com")
    client.post("/api/auth.login", json={"email": "cookie@example.com", "password": DEFAULT_PASSWORD})
    r = client.post("/api/auth.info")
    assert r.status_code == 200


def test_login_with_bad_password_is_audited(app, client):
    with session_scope(app) as s:
        user = build_user(s, email="bob@example.com")

    r = client.post("/api/auth.login", json={"email": "bob@example.com", "password": "wrong"})
    assert r.status_code == 401
    event = find_latest_event(app)
    assert event.name == "users.signin_failed"
    assert event.team_id == user.team_id


def test_login_is_rate_limited(app, client):
    with session_scope(app) as s:
        build_user(s, email="carol@example.com")
    for _ in range(5):
        r = client.post("/api/auth.login", json={"email": "carol@example.com", "password": "wrong"})
        assert r.status_code == 401
    r = client.post("/api/auth.login", json={"email": "carol@example.com", "password": DEFAULT_PASSWORD})
    assert r.status_code == 429
    assert r.json["error"] == "rate_limit_exceeded"


def test_logout_invalidates_tokens(app, client):
    with session_scope(app) as s:
        build_user(s, email="dave@example.com")
    r = client.post("/api/auth.login", json={"email": "dave@example.com", "password": DEFAULT_PASSWORD})
    token = r.json["data"]["token"]

    r = client.post("/api/auth.delete", json={"token": token})
    assert r.status_code == 200
    assert find_latest_event(app).name == "users.signout"

    r = client.post("/api/auth.info", json={"token": token})
    assert r.status_code == 401


def test_rate_limit_forgets_idle_addresses():
    stale = datetime.utcnow() - timedelta(seconds=auth._LOGIN_RATE_WINDOW + 60)
    auth._login_attempts["10.0.0.1"] = [stale, stale]
    auth._record_attempt("10.0.0.2")

    assert auth._check_rate_limit("10.0.0.1") is False
    assert "10.0.0.1" not in auth._login_attempts
    assert auth._check_rate_limit("10.0.0.3") is False
    assert "10.0.0.3" not in auth._login_attempts
    assert auth._check_rate_limit("10.0.0.2") is False
    assert len(auth._login_attempts["10.0.0.2"]) == 1
