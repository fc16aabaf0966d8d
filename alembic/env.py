"""
Alembic environment for the SiteBook schema.
Migrates the database named by the application config (or -x url=...).
"""

import os
import sys
from logging.config import fileConfig

from sqlalchemy import pool, create_engine
from alembic import context

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Import our models and Base
from config import get_config
from database.connection import Base
from database import models  # noqa: F401 - Import to register models

# Alembic Config object
config = context.config

# Set up Python logging from alembic.ini
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Set the target metadata for autogenerate support
target_metadata = Base.metadata


def get_url():
    """
    Database URL for migrations.

    `alembic -x url=sqlite:///legacy.db upgrade head` targets another database;
    otherwise the URL of the active FLASK_ENV configuration is used.
    """
    override = context.get_x_argument(as_dictionary=True).get('url')
    return override or get_config().DATABASE_URL


def run_migrations_offline() -> None:
    """
    Run migrations in 'offline' mode.
    This generates SQL scripts without connecting to the database.
    """
    url = get_url()
    if not url:
        raise RuntimeError("No database URL: set DATABASE_URL or pass -x url=...")

    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """
    Run migrations in 'online' mode.
    This connects to the database and runs migrations directly.
    """
    url = get_url()
    if not url:
        raise RuntimeError("No database URL: set DATABASE_URL or pass -x url=...")

    connectable = create_engine(url, poolclass=pool.NullPool)

    try:
        with connectable.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=target_metadata,
                render_as_batch=connection.dialect.name == 'sqlite',
            )

            with context.begin_transaction():
                context.run_migrations()
    finally:
        connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
