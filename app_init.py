"""
Application Initialization Module
Properly initializes Flask app with all infrastructure components
"""
import os
import click
from flask import Flask
from config import get_config
from logging_config import setup_logging
from security import setup_security
from health_checks import register_health_checks
import logging

logger = logging.getLogger(__name__)


def create_app(config_class=None):
    """
    Application factory that creates and configures Flask app with all infrastructure

    Args:
        config_class: Optional configuration class; defaults to the FLASK_ENV selection

    Returns:
        Configured Flask application instance
    """
    # Create Flask app
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config_class or get_config())

    setup_logging(app)

    logger.info("=" * 60)
    logger.info("Initializing SiteBook sync gateway")
    logger.info("=" * 60)
    logger.info(f"Environment: {os.environ.get('FLASK_ENV', 'development')}")
    logger.info(f"Debug mode: {app.debug}")

    # Setup security (CORS, headers, error handlers)
    setup_security(app, app.config)

    initialize_database(app)

    from app import register_blueprints
    register_blueprints(app)

    # Register health check endpoints
    register_health_checks(app)

    register_commands(app)

    logger.info("Application initialization complete")
    logger.info("=" * 60)

    return app


def initialize_database(app):
    """
    Bind the engine, create missing tables and optionally seed demo data

    Args:
        app: Flask application instance
    """
    from database.connection import configure_engine, init_db
    from database.seed import seed_database

    configure_engine(app.config['DATABASE_URL'], echo=app.config.get('SQLALCHEMY_ECHO', False))

    if app.config.get('AUTO_CREATE_TABLES'):
        init_db()

    if app.config.get('SEED_DEMO_DATA'):
        seed_database()


def register_commands(app):
    """
    Register maintenance CLI commands

    Args:
        app: Flask application instance
    """

    @app.cli.command('init-db')
    def init_db_command():
        """Create all tables that do not exist yet."""
        from database.connection import init_db
        init_db()
        click.echo("Database tables created/verified")

    @app.cli.command('seed-demo')
    def seed_demo_command():
        """Load the BuildPro demo organization."""
        from database.seed import seed_database
        created = seed_database()
        click.echo("Demo data seeded" if created else "Demo data already present")

    @app.cli.command('repair-invoices')
    def repair_invoices_command():
        """Add the invoice attachment column to databases created before it existed."""
        from database.connection import get_db_session
        from services.schema_guard import add_column, column_exists

        with get_db_session() as session:
            if column_exists(session, 'invoices', 'attachment_url'):
                click.echo("invoices.attachment_url already present")
                return
            add_column(session, 'invoices', 'attachment_url')
        click.echo("Added invoices.attachment_url")
