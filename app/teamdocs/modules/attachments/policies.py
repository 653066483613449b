from __future__ import annotations

from app.teamdocs.modules.attachments.models import Attachment
from app.teamdocs.policies import allow, is_team_admin, is_team_model

allow(Attachment, "read", is_team_model)
allow(
    Attachment,
    "delete",
    lambda actor, attachment: is_team_model(actor, attachment)
    and (attachment.user_id == actor.id or is_team_admin(actor, attachment)),
)
