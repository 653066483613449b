from __future__ import annotations

from typing import Any

from flask import g, has_request_context, request
from sqlalchemy.orm import Session

from app.teamdocs.models import Event, User


def request_ip() -> str | None:
    if not has_request_context():
        return None
    return request.remote_addr


def record_event(
    s: Session,
    *,
    name: str,
    actor: User | None,
    model_id: str | None = None,
    team_id: str | None = None,
    user_id: str | None = None,
    collection_id: str | None = None,
    document_id: str | None = None,
    data: dict[str, Any] | None = None,
    ip: str | None = None,
    request_id: str | None = None,
) -> Event:
    """
    Append-only audit event helper.
    """
    rid = request_id
    if rid is None and has_request_context():
        rid = getattr(g, "request_id", None)
    ev = Event(
        name=name,
        model_id=model_id,
        request_id=rid,
        actor_id=actor.id if actor else None,
        user_id=user_id or (actor.id if actor else None),
        team_id=team_id or (actor.team_id if actor else None),
        collection_id=collection_id,
        document_id=document_id,
        ip=ip if ip is not None else request_ip(),
        data=data or None,
    )
    s.add(ev)
    return ev
