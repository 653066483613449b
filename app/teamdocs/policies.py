"""
Ability table.

Rules are registered per model class with `allow(Model, actions, predicate)`;
a predicate receives `(actor, subject)` and returns a bool. Feature modules
register their own rules in `<module>/policies.py`.
"""
from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from app.teamdocs.config import is_cloud_hosted
from app.teamdocs.errors import AuthorizationError
from app.teamdocs.models import Team, User

Predicate = Callable[[User, Any], bool]

_rules: dict[type, dict[str, list[Predicate]]] = {}


def allow(model: type, actions: str | Iterable[str], predicate: Predicate) -> None:
    if isinstance(actions, str):
        actions = [actions]
    table = _rules.setdefault(model, {})
    for action in actions:
        table.setdefault(action, []).append(predicate)


def actions_for(model: type) -> list[str]:
    return list(_rules.get(model, {}))


def can(actor: User | None, action: str, subject: Any) -> bool:
    if actor is None or not actor.is_active or subject is None:
        return False
    predicates = _rules.get(type(subject), {}).get(action)
    if not predicates:
        return False
    return any(p(actor, subject) for p in predicates)


def authorize(actor: User | None, action: str, subject: Any) -> None:
    if not can(actor, action, subject):
        raise AuthorizationError()


def serialize(actor: User | None, subject: Any) -> dict[str, bool]:
    return {action: can(actor, action, subject) for action in actions_for(type(subject))}


def present_policies(actor: User | None, subjects: Iterable[Any]) -> list[dict]:
    return [{"id": subject.id, "abilities": serialize(actor, subject)} for subject in subjects if subject is not None]


def is_team_model(actor: User, model: Any) -> bool:
    team_id = model.id if isinstance(model, Team) else getattr(model, "team_id", None)
    return team_id is not None and actor.team_id == team_id


def is_team_admin(actor: User, model: Any) -> bool:
    return is_team_model(actor, model) and actor.is_admin


# ---------- Team ----------
allow(Team, "read", is_team_model)
allow(Team, "share", lambda actor, team: is_team_model(actor, team) and team.sharing)
allow(Team, "createTeam", lambda actor, team: is_cloud_hosted() and is_team_admin(actor, team))
allow(Team, ["update", "audit"], is_team_admin)
allow(Team, "createAttachment", is_team_model)
allow(
    Team,
    "createCollection",
    lambda actor, team: is_team_model(actor, team)
    and not actor.is_viewer
    and (actor.is_admin or team.member_collection_create),
)
allow(Team, "createDocument", lambda actor, team: is_team_model(actor, team) and not actor.is_viewer)
allow(Team, ["createGroup", "createIntegration"], is_team_admin)


# ---------- User ----------
allow(User, "read", is_team_model)
allow(User, "update", lambda actor, user: actor.id == user.id or is_team_admin(actor, user))
allow(User, ["updateRole", "suspend", "activate"], lambda actor, user: actor.id != user.id and is_team_admin(actor, user))


# Feature module rules register on import. (Kept at bottom to avoid circular imports.)
from app.teamdocs.modules.collections import policies as _collection_policies  # noqa: E402,F401
from app.teamdocs.modules.documents import policies as _document_policies  # noqa: E402,F401
from app.teamdocs.modules.stars import policies as _star_policies  # noqa: E402,F401
from app.teamdocs.modules.attachments import policies as _attachment_policies  # noqa: E402,F401
