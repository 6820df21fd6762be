"""SmartKid backend package.

Organized by feature modules (users, students, attendance, reports, ...)
with a thin Flask controller layer over service/repository layers. Every
read and write goes through the role-scoped policy in :mod:`smartkid.access`.
"""
from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .activities.controller import register as register_activities
from .admin.controller import register as register_admin
from .attendance.controller import register as register_attendance
from .badges.controller import register as register_badges
from .classes.controller import register as register_classes
from .common.http import register_error_handlers
from .config import get_settings_module
from .container import Container, build_container
from .database.bootstrap import apply_schema, ensure_demo_data, list_tables
from .milestones.controller import register as register_milestones
from .reports.controller import register as register_reports
from .roadmaps.controller import register as register_roadmaps
from .students.controller import register as register_students
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    ``container`` lets tests inject services backed by in-memory repositories;
    when omitted the MySQL-backed container is built from settings.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

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

        if getattr(settings, "AUTO_INIT_DB", False):
            schema_path = Path(__file__).resolve().parents[2] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if getattr(settings, "AUTO_SEED_DB", False):
            ensure_demo_data(db_config)

        container = build_container(
            db_config=db_config,
            jwt_secret=getattr(settings, "JWT_SECRET", app.secret_key),
            token_ttl_hours=int(getattr(settings, "TOKEN_TTL_HOURS", 24)),
        )

    app.extensions["smartkid"] = container
    register_error_handlers(app)

    register_users(app, container)
    register_admin(app, container)
    register_classes(app, container)
    register_students(app, container)
    register_attendance(app, container)
    register_reports(app, container)
    register_milestones(app, container)
    register_badges(app, container)
    register_roadmaps(app, container)
    register_activities(app, container)

    return app
