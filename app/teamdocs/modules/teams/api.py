from __future__ import annotations

from flask import Blueprint

from app.teamdocs.api import ok, request_params, require_param
from app.teamdocs.audit import request_ip
from app.teamdocs.auth import current_user, issue_api_token, require_auth
from app.teamdocs.config import is_cloud_hosted
from app.teamdocs.db import db_session
from app.teamdocs.errors import PaymentRequiredError
from app.teamdocs.modules.teams.service import team_creator, team_updater
from app.teamdocs.policies import authorize, present_policies
from app.teamdocs.presenters import present_team, present_user

bp = Blueprint("teams", __name__)


@bp.post("/teams.create")
@require_auth
def teams_create():
    s = db_session()
    u = current_user()
    params = request_params()
    if not is_cloud_hosted():
        raise PaymentRequiredError("Creating additional teams requires a hosted deployment.")
    authorize(u, "createTeam", u.team)

    team, new_user = team_creator(s, name=require_param(params, "name"), user=u, ip=request_ip())
    s.commit()
    return ok(
        {
            "team": present_team(team),
            "user": present_user(new_user, include_details=True),
            "token": issue_api_token(new_user),
        },
        policies=present_policies(new_user, [team]),
    )


@bp.post("/team.update")
@require_auth
def team_update():
    s = db_session()
    u = current_user()
    params = request_params()
    team = u.team
    authorize(u, "update", team)

    team_updater(s, team=team, user=u, params=params, ip=request_ip())
    s.commit()
    return ok(present_team(team), policies=present_policies(u, [team]))
