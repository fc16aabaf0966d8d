"""
SiteBook - Application Package

This package contains the sync gateway's HTTP layer:
- api/: HTTP route handlers (Flask Blueprints)

The app factory and core Flask setup remain in app_init.py at the project root.
Business logic lives in the top-level services package.
"""

import logging

from app.api.admin import admin_bp
from app.api.data import data_bp
from app.api.invoices import invoices_bp
from app.api.notifications import notifications_bp
from app.api.projects import projects_bp
from app.api.schedule import schedule_bp
from app.api.tasks import tasks_bp

logger = logging.getLogger(__name__)

GATEWAY_BLUEPRINTS = (
    data_bp,
    projects_bp,
    tasks_bp,
    invoices_bp,
    schedule_bp,
    notifications_bp,
    admin_bp,
)


def register_blueprints(app):
    """
    Register all gateway blueprints under API_PREFIX.

    Args:
        app: Flask application instance
    """
    prefix = app.config.get('API_PREFIX', '/api')
    for blueprint in GATEWAY_BLUEPRINTS:
        app.register_blueprint(blueprint, url_prefix=prefix)
    logger.info(f"Registered {len(GATEWAY_BLUEPRINTS)} gateway blueprints under {prefix}")


__all__ = ['register_blueprints', 'GATEWAY_BLUEPRINTS']
