"""
Release step for a teamdocs deploy: migrate the schema to head, then seed the
first team unless --no-seed is given.

Production refuses sqlite so a missing DATABASE_URL never lands on a local file.

Usage:
  python scripts/release.py [--no-seed] [--revision REV]
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _database_url() -> str:
    url = (os.environ.get("DATABASE_URL") or "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL must be set for a release.")
    env = (os.environ.get("ENV") or "").strip().lower()
    if env in ("prod", "production") and url.startswith("sqlite"):
        raise RuntimeError("sqlite is not supported in production; point DATABASE_URL at Postgres.")
    return url


def _alembic_config(db_url: str):
    from alembic.config import Config

    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "migrations"))
    cfg.set_main_option("sqlalchemy.url", db_url)
    return cfg


def run_release(*, seed: bool = True, revision: str = "head") -> None:
    from alembic import command

    db_url = _database_url()
    print(f"[release] deployment={(os.environ.get('DEPLOYMENT') or 'self-hosted').strip()}", flush=True)
    print(f"[release] upgrading schema to {revision}", flush=True)
    command.upgrade(_alembic_config(db_url), revision)

    if seed:
        from scripts import init_db

        print("[release] seeding first team", flush=True)
        init_db.seed_only(database_url=db_url)
    print("[release] done", flush=True)


def main() -> None:
    parser = argparse.ArgumentParser(description="Migrate and seed the teamdocs database.")
    parser.add_argument("--no-seed", action="store_true", help="Skip creating the first team and admin.")
    parser.add_argument("--revision", default="head", help="Alembic revision to upgrade to.")
    args = parser.parse_args()
    run_release(seed=not args.no_seed, revision=args.revision)


if __name__ == "__main__":
    main()
