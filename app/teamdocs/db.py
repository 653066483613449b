from __future__ import annotations

from contextlib import contextmanager
from collections.abc import Generator
from typing import Any

from flask import Flask, g
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Query, Session, sessionmaker


def _engine_kwargs(db_url: str) -> dict[str, Any]:
    kwargs: dict[str, Any] = {"future": True, "pool_pre_ping": True}
    if db_url.startswith("postgres"):
        kwargs.update(pool_recycle=1800, pool_size=5, max_overflow=10, pool_timeout=30)
    elif db_url.startswith("sqlite"):
        # Request handlers and gunicorn threads share the pool.
        kwargs["connect_args"] = {"check_same_thread": False}
    return kwargs


def init_db(app: Flask) -> None:
    db_url = app.config["DATABASE_URL"]
    engine = create_engine(db_url, **_engine_kwargs(db_url))
    if app.config.get("LOG_LEVEL") == "DEBUG":
        @event.listens_for(engine, "checkout")
        def _receive_checkout(dbapi_connection, connection_record, connection_proxy):  # type: ignore[no-redef]
            app.logger.debug("DB connection checkout from pool")
    app.extensions["sqlalchemy_engine"] = engine
    app.extensions["sqlalchemy_sessionmaker"] = sessionmaker(
        bind=engine,
        class_=Session,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        future=True,
    )


def db_session(app: Flask | None = None) -> Session:
    """
    Request-scoped session, created on first use and closed in teardown.
    """
    if getattr(g, "db_session", None) is not None:
        return g.db_session
    if app is None:
        from flask import current_app

        app = current_app
    g.db_session = app.extensions["sqlalchemy_sessionmaker"]()  # type: ignore[assignment]
    return g.db_session


def teardown_db_session(exc: BaseException | None) -> None:
    s: Session | None = getattr(g, "db_session", None)
    if s is None:
        return
    if exc is not None:
        s.rollback()
    s.close()
    g.db_session = None


def live(s: Session, model: type) -> Query:
    """Query over rows of a soft-deleting model that are not deleted."""
    return s.query(model).filter(model.deleted_at.is_(None))  # type: ignore[attr-defined]


@contextmanager
def session_scope(app: Flask) -> Generator[Session, None, None]:
    """
    Non-request helper for scripts and tests: yields a session and commits/rolls back.
    """
    s: Session = app.extensions["sqlalchemy_sessionmaker"]()
    try:
        yield s
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()
