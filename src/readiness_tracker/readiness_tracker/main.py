from __future__ import annotations

import atexit
import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .database.bootstrap import apply_schema, list_tables

from .common.http import register_error_handlers
from .container import Container, EngineOptions, build_container
from .absences.controller import register as register_absences
from .checkins.controller import register as register_checkins
from .exemptions.controller import register as register_exemptions
from .grading.controller import register as register_grading
from .holidays.controller import register as register_holidays
from .summaries.controller import register as register_summaries

log = logging.getLogger(__name__)


def register_routes(app: Flask, container: Container) -> None:
    register_error_handlers(app)
    register_checkins(app, container)
    register_summaries(app, container)
    register_absences(app, container)
    register_grading(app, container)
    register_holidays(app, container)
    register_exemptions(app, container)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    if container is None:
        log.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            log.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        container = build_container(db_config=db_config, options=EngineOptions.from_settings(settings))
        atexit.register(container.dispatcher.shutdown, False)

    app.extensions["readiness_container"] = container
    register_routes(app, container)
    return app
