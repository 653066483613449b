from __future__ import annotations

from app.teamdocs.modules.stars.models import Star
from app.teamdocs.policies import allow

allow(Star, ["read", "update", "delete"], lambda actor, star: star.user_id == actor.id and star.deleted_at is None)
