"""Flask application factory."""

import logging
from typing import Optional

from flask import Flask

from ..analyzers.usage import UsageLoader
from .routes.api import api_bp
from .routes.dashboard import dashboard_bp
from .services.dashboard_service import DashboardService

logger = logging.getLogger(__name__)


def create_app(loader: Optional[UsageLoader] = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        loader: Optional UsageLoader; tests inject one with fake sources

    Returns:
        Configured Flask app with ``dashboard_service`` attached
    """
    app = Flask(__name__)
    app.json.sort_keys = False

    app.dashboard_service = DashboardService(loader)

    app.register_blueprint(api_bp)
    app.register_blueprint(dashboard_bp)

    logger.debug("Web application created")
    return app
