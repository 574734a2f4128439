from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask
from werkzeug.exceptions import HTTPException

from .alerts.controller import register as register_alerts
from .attendance.controller import register as register_attendance
from .common.web import domain_error_response, error_response
from .config import get_settings_module
from .container import Container, build_container
from .core.constants import DEFAULT_TIMEZONE
from .core.enums import ErrorCode
from .core.exceptions import DomainError
from .dashboard.controller import register as register_dashboard
from .database.bootstrap import SCHEMA_PATH, apply_schema, ensure_demo_users, list_tables
from .logging_config import configure_logging
from .reports.controller import register as register_reports
from .shifts.controller import register as register_shifts
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        if e.code in (ErrorCode.WRITE_FAILED, ErrorCode.INTERNAL_ERROR):
            logger.error("%s: %s", e.code.value, e.message)
        return domain_error_response(e)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return e
        logger.exception("unhandled error")
        return error_response(ErrorCode.INTERNAL_ERROR, "An unexpected error occurred")


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    tz_name = getattr(settings, "TIMEZONE", DEFAULT_TIMEZONE)

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_users(db_config)

        container = build_container(db_config=db_config, tz_name=tz_name)

    app.extensions["staff_reporting"] = container

    register_error_handlers(app)
    register_users(app, container)
    register_attendance(app, container)
    register_reports(app, container)
    register_shifts(app, container)
    register_alerts(app, container)
    register_dashboard(app, container)

    return app
