from __future__ import annotations

from flask import Blueprint

from app.teamdocs.api import ok, pagination, pagination_params, request_params
from app.teamdocs.auth import current_user, require_auth
from app.teamdocs.db import db_session
from app.teamdocs.errors import ValidationError
from app.teamdocs.models import Event
from app.teamdocs.policies import authorize
from app.teamdocs.presenters import present_event

bp = Blueprint("events", __name__)

_FILTERS = (
    ("name", Event.name),
    ("actorId", Event.actor_id),
    ("documentId", Event.document_id),
    ("collectionId", Event.collection_id),
)


@bp.post("/events.list")
@require_auth
def events_list():
    s = db_session()
    u = current_user()
    params = request_params()
    authorize(u, "audit", u.team)
    offset, limit = pagination_params(params)

    direction = str(params.get("direction") or "DESC").upper()
    if direction not in ("ASC", "DESC"):
        raise ValidationError("direction must be ASC or DESC.")

    q = s.query(Event).filter(Event.team_id == u.team_id)
    for key, column in _FILTERS:
        value = params.get(key)
        if not value:
            continue
        if not isinstance(value, str):
            raise ValidationError(f"{key} must be a string.")
        q = q.filter(column == value)

    order = Event.id.asc() if direction == "ASC" else Event.id.desc()
    events = q.order_by(order).offset(offset).limit(limit).all()
    return ok([present_event(e) for e in events], pagination=pagination(offset, limit))
