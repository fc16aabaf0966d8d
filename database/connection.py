"""
Database connection management for SiteBook.
Handles SQLAlchemy engine creation, session management, and connection verification.
"""

import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

# SQLAlchemy Base for model declarations
Base = declarative_base()

# Engine and SessionLocal are bound by configure_engine()
engine = None
SessionLocal = None


def configure_engine(database_url: str, echo: bool = False):
    """
    Create the process-wide engine and session factory for a database URL.
    Replaces any previously configured engine.
    """
    global engine, SessionLocal

    if not database_url:
        raise RuntimeError(
            "DATABASE_URL not configured. Cannot connect to the database. "
            "Please set the DATABASE_URL environment variable."
        )

    if engine is not None:
        engine.dispose()

    if database_url.startswith('sqlite'):
        options = {'connect_args': {'check_same_thread': False}}
        if database_url in ('sqlite://', 'sqlite:///:memory:'):
            # One shared connection so every session sees the same in-memory database
            options['poolclass'] = StaticPool
    else:
        options = {
            'pool_size': 5,
            'max_overflow': 10,
            'pool_pre_ping': True,  # Verify connections before using
            'pool_recycle': 300,    # Recycle connections after 5 minutes
        }

    try:
        engine = create_engine(database_url, echo=echo, **options)
    except Exception as e:
        logger.error(f"Failed to create database engine: {e}")
        raise RuntimeError(f"Failed to connect to database: {e}")

    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    logger.info(f"Database engine created for {engine.url.get_backend_name()}")
    return engine


def get_engine():
    """Get the configured SQLAlchemy engine."""
    if engine is None:
        raise RuntimeError("Database engine is not configured; call configure_engine() first")
    return engine


def get_session_factory():
    """Get the configured session factory."""
    get_engine()
    return SessionLocal


@contextmanager
def get_db_session():
    """
    Context manager for getting a database session.
    Commits on success, rolls back on any error and re-raises it.

    Example:
        with get_db_session() as db:
            projects = db.query(Project).all()
    """
    session_factory = get_session_factory()
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def check_db_connection():
    """
    Verify that the database connection is working.
    Returns True if connection is successful, raises exception otherwise.
    """
    try:
        eng = get_engine()
        with eng.connect() as conn:
            result = conn.execute(text("SELECT 1"))
            result.fetchone()
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        raise RuntimeError(f"Cannot connect to database: {e}")


def init_db():
    """
    Create all tables that do not exist yet.
    Existing tables are left untouched; column drift is repaired at write time.
    """
    # Import models to ensure they're registered with Base
    from database import models  # noqa: F401

    eng = get_engine()
    Base.metadata.create_all(bind=eng)
    logger.info("Database tables created/verified")


def drop_db():
    """Drop every table. Used by tests and the reset CLI command."""
    from database import models  # noqa: F401

    Base.metadata.drop_all(bind=get_engine())
    logger.warning("All database tables dropped")
