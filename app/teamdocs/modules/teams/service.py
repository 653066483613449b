from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import TYPE_CHECKING, Any

from app.teamdocs.audit import record_event
from app.teamdocs.constants import (
    RESERVED_SUBDOMAINS,
    ROLE_ADMIN,
    SUBDOMAIN_MAX_LENGTH,
    SUBDOMAIN_MIN_LENGTH,
    TEAM_PREFERENCES,
    USER_ROLES,
)
from app.teamdocs.errors import ValidationError
from app.teamdocs.policies import authorize

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.teamdocs.models import Team, User

logger = logging.getLogger(__name__)

_SUBDOMAIN_RE = re.compile(r"^[a-z\d-]+$")
_DOMAIN_RE = re.compile(r"^(?=.{1,253}$)([a-z\d]([a-z\d-]{0,61}[a-z\d])?\.)+[a-z]{2,63}$")
_NAME_MAX_LENGTH = 255

# (request key, model attribute) pairs for plain boolean settings
_BOOLEAN_SETTINGS = (
    ("sharing", "sharing"),
    ("guestSignin", "guest_signin"),
    ("documentEmbeds", "document_embeds"),
    ("memberCollectionCreate", "member_collection_create"),
    ("inviteRequired", "invite_required"),
)


def slugify_subdomain(name: str) -> str:
    slug = re.sub(r"[^a-z\d]+", "-", (name or "").lower()).strip("-")
    slug = slug[:SUBDOMAIN_MAX_LENGTH].strip("-")
    if len(slug) < SUBDOMAIN_MIN_LENGTH or slug in RESERVED_SUBDOMAINS:
        slug = "team"
    return slug


def validate_subdomain(subdomain: str) -> str:
    subdomain = subdomain.strip().lower()
    if not SUBDOMAIN_MIN_LENGTH <= len(subdomain) <= SUBDOMAIN_MAX_LENGTH:
        raise ValidationError(
            f"subdomain must be between {SUBDOMAIN_MIN_LENGTH} and {SUBDOMAIN_MAX_LENGTH} characters."
        )
    if not _SUBDOMAIN_RE.match(subdomain):
        raise ValidationError("subdomain may only contain lowercase letters, numbers and dashes.")
    if subdomain in RESERVED_SUBDOMAINS:
        raise ValidationError("subdomain is reserved.")
    return subdomain


def _subdomain_taken(s: "Session", subdomain: str, exclude_team_id: str | None = None) -> bool:
    from app.teamdocs.models import Team

    q = s.query(Team.id).filter(Team.subdomain == subdomain)
    if exclude_team_id:
        q = q.filter(Team.id != exclude_team_id)
    return q.first() is not None


def unique_subdomain(s: "Session", name: str) -> str:
    base = slugify_subdomain(name)
    candidate = base
    n = 1
    while _subdomain_taken(s, candidate):
        n += 1
        suffix = f"-{n}"
        candidate = base[: SUBDOMAIN_MAX_LENGTH - len(suffix)] + suffix
    return candidate


def normalize_allowed_domains(domains: Any) -> list[str]:
    """Drop empty entries, lowercase, de-duplicate (keeping order)."""
    if not isinstance(domains, list):
        raise ValidationError("allowedDomains must be a list of domain names.")
    out: list[str] = []
    for raw in domains:
        if not isinstance(raw, str):
            raise ValidationError("allowedDomains must be a list of domain names.")
        domain = raw.strip().lower()
        if not domain:
            continue
        if not _DOMAIN_RE.match(domain):
            raise ValidationError(f"{raw!r} is not a valid domain name.")
        if domain not in out:
            out.append(domain)
    return out


def team_creator(s: "Session", *, name: str, user: "User", ip: str | None = None) -> tuple["Team", "User"]:
    """
    Create a new team and an admin account for `user` inside it. The new
    account copies the actor's profile; the actor's own account is untouched.
    """
    from app.teamdocs.models import Team, User

    name = (name or "").strip()
    if not name:
        raise ValidationError("name is required.")
    if len(name) > _NAME_MAX_LENGTH:
        raise ValidationError(f"name must be at most {_NAME_MAX_LENGTH} characters.")

    now = datetime.utcnow()
    team = Team(name=name, subdomain=unique_subdomain(s, name), created_at=now, updated_at=now)
    s.add(team)
    s.flush()

    new_user = User(
        team_id=team.id,
        email=user.email,
        password_hash=user.password_hash,
        name=user.name,
        avatar_url=user.avatar_url,
        color=user.color,
        language=user.language,
        role=ROLE_ADMIN,
        created_at=now,
        updated_at=now,
    )
    s.add(new_user)
    s.flush()

    record_event(
        s,
        name="teams.create",
        actor=user,
        model_id=team.id,
        team_id=team.id,
        user_id=new_user.id,
        data={"name": team.name, "subdomain": team.subdomain},
        ip=ip,
    )
    record_event(
        s,
        name="users.create",
        actor=new_user,
        model_id=new_user.id,
        team_id=team.id,
        data={"name": new_user.name, "sourceTeamId": user.team_id},
        ip=ip,
    )
    logger.info("Created team %s (%s) for user %s", team.id, team.subdomain, user.id)
    return team, new_user


def _sync_allowed_domains(s: "Session", team: "Team", user: "User", domains: list[str]) -> dict[str, list[str]]:
    from app.teamdocs.models import TeamDomain

    existing = {d.name: d for d in team.allowed_domains}
    removed = [name for name in existing if name not in domains]
    added = [name for name in domains if name not in existing]

    for name in removed:
        team.allowed_domains.remove(existing[name])
    # Deletes must reach the database before re-adding a name in the same flush.
    s.flush()
    for name in added:
        team.allowed_domains.append(TeamDomain(name=name, created_by_id=user.id))
    return {"added": added, "removed": removed}


def team_updater(s: "Session", *, team: "Team", user: "User", params: dict, ip: str | None = None) -> "Team":
    """
    Apply any subset of the team settings in `params` (camelCase keys).
    Unchanged values are accepted and simply not reported as changes.
    """
    from app.teamdocs.modules.collections.service import get_collection

    changes: dict[str, Any] = {}

    def _set(attr: str, key: str, value: Any) -> None:
        old = getattr(team, attr)
        if old != value:
            changes[key] = {"old": old, "new": value}
            setattr(team, attr, value)

    if params.get("name") is not None:
        name = str(params["name"]).strip()
        if not name:
            raise ValidationError("name must not be empty.")
        if len(name) > _NAME_MAX_LENGTH:
            raise ValidationError(f"name must be at most {_NAME_MAX_LENGTH} characters.")
        _set("name", "name", name)

    if "subdomain" in params:
        raw = params["subdomain"]
        if raw is not None and not isinstance(raw, str):
            raise ValidationError("subdomain must be a string or null.")
        subdomain = validate_subdomain(raw) if raw else None
        if subdomain and _subdomain_taken(s, subdomain, exclude_team_id=team.id):
            raise ValidationError("subdomain is already in use.")
        _set("subdomain", "subdomain", subdomain)

    if "avatarUrl" in params:
        avatar_url = params["avatarUrl"]
        if avatar_url is not None and not isinstance(avatar_url, str):
            raise ValidationError("avatarUrl must be a string or null.")
        _set("avatar_url", "avatarUrl", avatar_url or None)

    for key, attr in _BOOLEAN_SETTINGS:
        value = params.get(key)
        if value is None:
            continue
        if not isinstance(value, bool):
            raise ValidationError(f"{key} must be a boolean.")
        _set(attr, key, value)

    if params.get("defaultUserRole") is not None:
        role = params["defaultUserRole"]
        if role not in USER_ROLES:
            raise ValidationError(f"defaultUserRole must be one of: {', '.join(USER_ROLES)}")
        _set("default_user_role", "defaultUserRole", role)

    if "defaultCollectionId" in params:
        collection_id = params["defaultCollectionId"]
        if collection_id:
            collection = get_collection(s, collection_id, team.id)
            authorize(user, "read", collection)
            _set("default_collection_id", "defaultCollectionId", collection.id)
        else:
            _set("default_collection_id", "defaultCollectionId", None)

    if params.get("preferences") is not None:
        prefs = params["preferences"]
        if not isinstance(prefs, dict):
            raise ValidationError("preferences must be an object.")
        unknown = sorted(set(prefs) - TEAM_PREFERENCES)
        if unknown:
            raise ValidationError(f"Unknown team preferences: {', '.join(unknown)}")
        for pref, value in prefs.items():
            if not isinstance(value, bool):
                raise ValidationError(f"Preference {pref} must be a boolean.")
        merged = {**(team.preferences or {}), **prefs}
        _set("preferences", "preferences", merged)

    if "allowedDomains" in params and params["allowedDomains"] is not None:
        domains = normalize_allowed_domains(params["allowedDomains"])
        diff = _sync_allowed_domains(s, team, user, domains)
        if diff["added"] or diff["removed"]:
            changes["allowedDomains"] = diff

    team.updated_at = datetime.utcnow()
    record_event(
        s,
        name="teams.update",
        actor=user,
        model_id=team.id,
        team_id=team.id,
        data={"changes": sorted(changes)},
        ip=ip,
    )
    return team
