from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from werkzeug.exceptions import InternalServerError
from werkzeug.middleware.proxy_fix import ProxyFix

from config import get_settings_module

from .auth.controller import register as register_auth
from .auth.session_interface import ServerSideSessionInterface
from .clients.controller import register as register_clients
from .container import build_container
from .core.constants import DEFAULT_SESSION_HOURS
from .core.enums import StorageBackend
from .core.exceptions import PersistenceError
from .database.bootstrap import apply_schema, list_tables
from .database.connection import DBConfig

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def _configure_logging(app: Flask) -> None:
    level = str(app.config.get("LOG_LEVEL") or ("DEBUG" if app.config.get("DEBUG") else "INFO")).upper()
    logging.basicConfig(level=level, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    logging.getLogger(__name__.rsplit(".", 1)[0]).setLevel(level)


def _register_error_handlers(app: Flask) -> None:
    """JSON envelopes for storage failures raised outside the API views.

    A session store outage surfaces while the request context is pushed, before
    any view runs, so Flask reports it as an ``InternalServerError``.
    """

    def _api_error(e):
        original = e.original_exception if isinstance(e, InternalServerError) else e
        if not request.path.startswith("/api/"):
            return e if isinstance(e, InternalServerError) else InternalServerError(original_exception=e)
        if isinstance(original, PersistenceError):
            logger.error("Storage failure on %s: %s", request.path, original)
        body = {"success": False, "message": "Internal server error"}
        if app.config.get("DEBUG") and original is not None:
            body["error"] = str(original)
        return jsonify(body), 500

    app.register_error_handler(PersistenceError, _api_error)
    app.register_error_handler(InternalServerError, _api_error)


def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__, template_folder="../../../templates", static_folder="../../../static")

    settings_module = get_settings_module()
    app.config.from_object(importlib.import_module(settings_module))
    if overrides:
        app.config.update(overrides)

    _configure_logging(app)

    app.secret_key = app.config["SECRET_KEY"]
    hours = int(app.config.get("SESSION_LIFETIME_HOURS") or DEFAULT_SESSION_HOURS)
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(hours=hours)
    app.config["SESSION_COOKIE_HTTPONLY"] = True

    database_url = app.config.get("DATABASE_URL")
    if database_url:
        app.config["DB_CONFIG"] = DBConfig.from_url(database_url).as_dict()

    if app.config.get("TRUST_PROXY"):
        # One reverse-proxy hop (HTTPS terminates upstream in production).
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)

    container = build_container(config=app.config)

    if app.config.get("AUTO_INIT_DB") and container.conn is not None:
        apply_schema(app.config["DB_CONFIG"], schema_path=SCHEMA_PATH)
        logger.info("Schema ready (tables=%d)", len(list_tables(app.config["DB_CONFIG"])))

    if not container.access_policy.is_configured:
        logger.warning("SYSTEM_PASSWORD is not set; every login attempt will be rejected")

    app.session_interface = ServerSideSessionInterface(container.session_store)
    app.extensions["client_records"] = container

    register_auth(app, container)
    register_clients(app, container)
    _register_error_handlers(app)

    if container.storage_backend == StorageBackend.MYSQL:
        db = container.conn.config
        target = f"{db.user}@{db.host}:{db.port}/{db.database}"
    else:
        target = str(container.clients_repo.path)
    logger.info("settings=%s storage=%s (%s)", settings_module, container.storage_backend.value, target)

    return app
