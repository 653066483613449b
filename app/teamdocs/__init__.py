import logging
import os
from datetime import timedelta

from dotenv import load_dotenv
from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException

from app.teamdocs.config import load_config
from app.teamdocs.db import init_db, teardown_db_session
from app.teamdocs.errors import ApiError
from app.teamdocs import models as _models  # noqa: F401  (registers every table)
from app.teamdocs import policies as _policies  # noqa: F401  (registers every ability)
from app.teamdocs.routes import bp as routes_bp
from app.teamdocs.auth import bp as auth_bp, load_current_user
from app.teamdocs.modules.teams.api import bp as teams_bp
from app.teamdocs.modules.users.api import bp as users_bp
from app.teamdocs.modules.collections.api import bp as collections_bp
from app.teamdocs.modules.documents.api import bp as documents_bp
from app.teamdocs.modules.stars.api import bp as stars_bp
from app.teamdocs.modules.attachments.api import bp as attachments_bp
from app.teamdocs.modules.events.api import bp as events_bp


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__)
    app.config.from_mapping(load_config())
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(days=app.config["TOKEN_MAX_AGE_DAYS"])
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Production guardrails (fail fast with clear logs)
    env = (app.config.get("ENV") or "").strip().lower()
    if env in ("prod", "production"):
        if not app.config.get("DATABASE_URL") or str(app.config["DATABASE_URL"]).strip() == "":
            raise RuntimeError("DATABASE_URL is required in production.")
        if str(app.config["DATABASE_URL"]).startswith("sqlite"):
            raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")
        if not app.config.get("SECRET_KEY") or str(app.config["SECRET_KEY"]) in ("", "change-me"):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")

    init_db(app)

    def _dispose_engine_on_fork() -> None:
        if hasattr(os, "register_at_fork"):
            def _after_fork_child():
                engine = app.extensions.get("sqlalchemy_engine")
                if engine:
                    engine.dispose()
                    app.logger.info("Disposed DB engine after fork (pid=%s)", os.getpid())

            os.register_at_fork(after_in_child=_after_fork_child)

    _dispose_engine_on_fork()

    # Storage sanity check (fail loudly on misconfiguration)
    if app.config.get("STORAGE_BACKEND") == "s3":
        missing_s3 = [
            key
            for key in ("S3_ENDPOINT", "S3_BUCKET", "S3_ACCESS_KEY_ID", "S3_SECRET_ACCESS_KEY")
            if not app.config.get(key)
        ]
        if missing_s3:
            app.logger.error("STORAGE CONFIG ERROR: Missing required S3 env vars: %s", ", ".join(missing_s3))

    app.register_blueprint(routes_bp)
    for api_bp in (auth_bp, teams_bp, users_bp, collections_bp, documents_bp, stars_bp, attachments_bp, events_bp):
        app.register_blueprint(api_bp, url_prefix="/api")

    app.before_request(load_current_user)
    app.teardown_appcontext(teardown_db_session)

    @app.errorhandler(ApiError)
    def _err_api(e: ApiError):  # type: ignore[no-redef]
        if e.status >= 500:
            app.logger.error("API error %s (request_id=%s): %s", e.error, getattr(g, "request_id", None), e.message)
        elif e.status == 403:
            app.logger.warning(
                "Forbidden: %s %s user=%s request_id=%s",
                request.method,
                request.path,
                getattr(getattr(g, "current_user", None), "id", None),
                getattr(g, "request_id", None),
            )
        return jsonify(e.to_dict()), e.status

    @app.errorhandler(HTTPException)
    def _err_http(e: HTTPException):  # type: ignore[no-redef]
        status = e.code or 500
        error = (e.name or "error").lower().replace(" ", "_")
        return jsonify({"ok": False, "error": error, "status": status, "message": e.description}), status

    @app.errorhandler(Exception)
    def _err_500(e: Exception):  # type: ignore[no-redef]
        app.logger.exception("Unhandled 500 (request_id=%s)", getattr(g, "request_id", None))
        return jsonify(ApiError().to_dict()), 500

    logging.getLogger(__name__).info("create_app() complete; app ready to serve")

    return app
