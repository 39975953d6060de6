from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .activity_log.controller import register as register_activity
from .admins.controller import register as register_admins
from .checkin.controller import register as register_checkin
from .common.web import register_error_handlers
from .container import Container, build_container
from .content.controller import register as register_content
from .dashboard.controller import register as register_dashboard
from .core.logging import setup_logging
from .feedback.controller import register as register_feedback
from .inquiries.controller import register as register_inquiries
from .invoices.controller import register as register_invoices
from .registrations.controller import register as register_registrations
from .settings.controller import register as register_settings
from .workshops.controller import register as register_workshops

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["JSON_SORT_KEYS"] = False

    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        firestore_config = getattr(settings, "FIRESTORE_CONFIG")
        logger.info(
            "settings=%s project=%s emulator=%s",
            settings_module,
            firestore_config.get("project_id"),
            firestore_config.get("emulator_host") or "-",
        )
        container = build_container(
            firestore_config=firestore_config,
            functions_region=getattr(settings, "FUNCTIONS_REGION", "asia-southeast1"),
            year=int(getattr(settings, "CONFERENCE_YEAR", 2026)),
        )

    register_error_handlers(app)

    register_admins(app, container)
    register_registrations(app, container)
    register_checkin(app, container)
    register_invoices(app, container)
    register_workshops(app, container)
    register_settings(app, container)
    register_inquiries(app, container)
    register_content(app, container)
    register_dashboard(app, container)
    register_feedback(app, container)
    register_activity(app, container)

    return app
