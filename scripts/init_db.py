"""
Seed a fresh teamdocs database with its first team, an admin account and a
"Welcome" collection that becomes the team default.

Safe to re-run: an existing admin email short-circuits the seed and passwords
are never overwritten.

Usage:
  python scripts/init_db.py [--email EMAIL] [--team-name NAME]
"""
from __future__ import annotations

import argparse
import os
import sys
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from werkzeug.security import generate_password_hash

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.teamdocs.constants import ROLE_ADMIN  # noqa: E402
from app.teamdocs.db import _engine_kwargs  # noqa: E402
from app.teamdocs.models import Team, User  # noqa: E402
from app.teamdocs.modules.collections.service import collection_creator  # noqa: E402
from app.teamdocs.modules.teams.service import unique_subdomain  # noqa: E402


@contextmanager
def _session_scope(database_url: str):
    # Standalone engine so release can seed without building the Flask app.
    engine = create_engine(database_url, **_engine_kwargs(database_url))
    s = Session(bind=engine, autoflush=False, expire_on_commit=False)
    try:
        yield s
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()
        engine.dispose()


def seed_only(*, database_url: str | None = None, email: str | None = None, team_name: str | None = None) -> None:
    admin_email = (email or os.environ.get("ADMIN_EMAIL") or "admin@example.com").strip().lower()
    admin_password = os.environ.get("ADMIN_PASSWORD") or "change-me"
    team_name = (team_name or os.environ.get("TEAM_NAME") or "My Team").strip()
    db_url = (database_url or os.environ.get("DATABASE_URL") or "sqlite:///teamdocs.db").strip()

    with _session_scope(db_url) as s:
        existing = s.query(User).filter(User.email == admin_email).first()
        if existing:
            print(f"[seed] {admin_email} already belongs to team {existing.team_id}; skipping.")
            return

        team = Team(name=team_name, subdomain=unique_subdomain(s, team_name))
        s.add(team)
        s.flush()

        admin = User(
            team_id=team.id,
            email=admin_email,
            password_hash=generate_password_hash(admin_password),
            name=admin_email.split("@")[0],
            role=ROLE_ADMIN,
        )
        s.add(admin)
        s.flush()

        welcome = collection_creator(s, user=admin, name="Welcome", permission="read_write")
        team.default_collection = welcome
        subdomain = team.subdomain

    print(f"[seed] created team {team_name!r} ({subdomain}) with admin {admin_email}")
    if admin_password == "change-me":
        print("[seed] ADMIN_PASSWORD not set; sign in with the default password and change it.")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the first teamdocs team and admin.")
    parser.add_argument("--email", help="Admin email (defaults to ADMIN_EMAIL).")
    parser.add_argument("--team-name", help="Team name (defaults to TEAM_NAME).")
    args = parser.parse_args()
    seed_only(email=args.email, team_name=args.team_name)


if __name__ == "__main__":
    main()
