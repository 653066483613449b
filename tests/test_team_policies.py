from app.teamdocs.db import session_scope
from app.teamdocs.policies import can, serialize

from factories import build_admin, build_team, build_user, build_viewer, set_cloud_hosted, set_self_hosted


def _abilities(app, role_builder):
    with session_scope(app) as s:
        team = build_team(s)
        actor = role_builder(s, team=team)
    with app.app_context():
        return serialize(actor, team)


def test_member_on_self_hosted_can_read_and_create_content(app):
    set_self_hosted(app)
    abilities = _abilities(app, build_user)
    assert abilities["read"] is True
    assert abilities["createTeam"] is False
    assert abilities["createAttachment"] is True
    assert abilities["createCollection"] is True
    assert abilities["createDocument"] is True
    assert abilities["createGroup"] is False
    assert abilities["createIntegration"] is False
    assert abilities["update"] is False
    assert abilities["audit"] is False


def test_admin_on_self_hosted_can_manage_but_not_create_teams(app):
    set_self_hosted(app)
    abilities = _abilities(app, build_admin)
    assert abilities["read"] is True
    assert abilities["createTeam"] is False
    assert abilities["createAttachment"] is True
    assert abilities["createCollection"] is True
    assert abilities["createDocument"] is True
    assert abilities["createGroup"] is True
    assert abilities["createIntegration"] is True
    assert abilities["update"] is True


def test_admin_on_cloud_hosted_can_create_teams(app):
    set_cloud_hosted(app)
    abilities = _abilities(app, build_admin)
    assert abilities["read"] is True
    assert abilities["createTeam"] is True
    assert abilities["createAttachment"] is True
    assert abilities["createCollection"] is True
    assert abilities["createDocument"] is True
    assert abilities["createGroup"] is True
    assert abilities["createIntegration"] is True


def test_viewer_cannot_create_collections_or_documents(app):
    abilities = _abilities(app, build_viewer)
    assert abilities["read"] is True
    assert abilities["createCollection"] is False
    assert abilities["createDocument"] is False


def test_member_collection_create_can_be_disabled(app):
    with session_scope(app) as s:
        team = build_team(s, member_collection_create=False)
        member = build_user(s, team=team)
        admin = build_admin(s, team=team)
    with app.app_context():
        assert can(member, "createCollection", team) is False
        assert can(admin, "createCollection", team) is True


def test_no_abilities_on_another_team(app):
    with session_scope(app) as s:
        team = build_team(s)
        outsider = build_admin(s)
    with app.app_context():
        assert not any(serialize(outsider, team).values())


def test_suspended_user_has_no_abilities(app):
    from datetime import datetime

    with session_scope(app) as s:
        team = build_team(s)
        admin = build_admin(s, team=team, suspended_at=datetime.utcnow())
    with app.app_context():
        assert not any(serialize(admin, team).values())
        assert can(None, "read", team) is False
