"""
Model builders and environment helpers for tests.

Builders take an open session, flush, and return the instance; sessions use
expire_on_commit=False so the returned objects stay readable after commit.
"""
from __future__ import annotations

import itertools
from datetime import datetime

from werkzeug.security import generate_password_hash

from app.teamdocs.auth import issue_api_token
from app.teamdocs.constants import ROLE_ADMIN, ROLE_MEMBER, ROLE_VIEWER
from app.teamdocs.db import session_scope
from app.teamdocs.models import Event, Team, User
from app.teamdocs.modules.collections.models import Collection, CollectionUser
from app.teamdocs.modules.documents.models import Document
from app.teamdocs.modules.stars.models import Star

_seq = itertools.count(1)

DEFAULT_PASSWORD = "pw"


def build_team(s, **overrides) -> Team:
    n = next(_seq)
    team = Team(name=overrides.pop("name", f"Team {n}"), subdomain=overrides.pop("subdomain", f"team-{n}"), **overrides)
    s.add(team)
    s.flush()
    return team


def build_user(s, *, team: Team | None = None, role: str = ROLE_MEMBER, **overrides) -> User:
    if team is None:
        team = build_team(s)
    n = next(_seq)
    user = User(
        team_id=team.id,
        email=overrides.pop("email", f"user{n}@example.com"),
        password_hash=generate_password_hash(overrides.pop("password", DEFAULT_PASSWORD)),
        name=overrides.pop("name", f"User {n}"),
        role=role,
        **overrides,
    )
    s.add(user)
    s.flush()
    return user


def build_admin(s, *, team: Team | None = None, **overrides) -> User:
    return build_user(s, team=team, role=ROLE_ADMIN, **overrides)


def build_viewer(s, *, team: Team | None = None, **overrides) -> User:
    return build_user(s, team=team, role=ROLE_VIEWER, **overrides)


def build_collection(s, *, user: User, permission: str | None = "read_write", **overrides) -> Collection:
    n = next(_seq)
    collection = Collection(
        team_id=user.team_id,
        name=overrides.pop("name", f"Collection {n}"),
        permission=permission,
        index=overrides.pop("index", None),
        created_by_id=user.id,
        **overrides,
    )
    collection.memberships.append(CollectionUser(user_id=user.id, permission="admin", created_by_id=user.id))
    s.add(collection)
    s.flush()
    return collection


def build_document(s, *, user: User, collection: Collection | None = None, **overrides) -> Document:
    if collection is None:
        collection = build_collection(s, user=user)
    n = next(_seq)
    document = Document(
        team_id=collection.team_id,
        collection_id=collection.id,
        title=overrides.pop("title", f"Document {n}"),
        text=overrides.pop("text", "Hello"),
        created_by_id=user.id,
        last_modified_by_id=user.id,
        published_at=overrides.pop("published_at", datetime.utcnow()),
        **overrides,
    )
    s.add(document)
    s.flush()
    return document


def build_star(s, *, user: User, document: Document | None = None, index: str = "P") -> Star:
    if document is None:
        document = build_document(s, user=user)
    star = Star(
        team_id=document.team_id,
        user_id=user.id,
        document_id=document.id,
        created_by_id=user.id,
        index=index,
    )
    s.add(star)
    s.flush()
    return star


def token_for(app, user: User) -> str:
    with app.app_context():
        return issue_api_token(user)


def set_cloud_hosted(app) -> None:
    app.config["DEPLOYMENT"] = "hosted"


def set_self_hosted(app) -> None:
    app.config["DEPLOYMENT"] = "self-hosted"


def find_latest_event(app, **filters) -> Event | None:
    with session_scope(app) as s:
        q = s.query(Event)
        for key, value in filters.items():
            q = q.filter(getattr(Event, key) == value)
        return q.order_by(Event.id.desc()).first()
