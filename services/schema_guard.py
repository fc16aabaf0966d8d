"""
Schema Guard - runtime repair of columns added after a deployment was created.

Deployments created before a column existed have no migration history, so the
first write that touches such a column fails. The guard recognizes the
missing-column error, adds the column, and retries the operation exactly once.
"""

import logging
import re
from typing import Callable, TypeVar

from sqlalchemy import inspect, text
from sqlalchemy.exc import OperationalError, ProgrammingError
from sqlalchemy.orm import Session

from services.errors import SchemaDriftError

logger = logging.getLogger(__name__)

T = TypeVar('T')

_MISSING_COLUMN_TEMPLATES = (
    r'no column named {column}\b',                                                # sqlite insert
    r'no such column:\s*(?:\w+\.)?{column}\b',                                    # sqlite select/update
    r'column\s+"?(?:\w+\.)?{column}"?(?:\s+of relation\s+"?\w+"?)?\s+does not exist',  # postgres
    r"unknown column '(?:\w+\.)?{column}'",                                       # mysql
)


def is_missing_column_error(error: Exception, column: str) -> bool:
    """Check whether a database error reports the given column as missing."""
    message = str(getattr(error, 'orig', None) or error)
    for template in _MISSING_COLUMN_TEMPLATES:
        if re.search(template.format(column=re.escape(column)), message, re.IGNORECASE):
            return True
    return False


def column_exists(session: Session, table: str, column: str) -> bool:
    """Check the live schema for a column."""
    inspector = inspect(session.get_bind())
    return any(c['name'] == column for c in inspector.get_columns(table))


def add_column(session: Session, table: str, column: str, ddl_type: str = 'TEXT') -> None:
    """Add a nullable column and commit the DDL."""
    session.execute(text(f'ALTER TABLE {table} ADD COLUMN {column} {ddl_type}'))
    session.commit()
    logger.warning(f"Schema repaired: added {table}.{column} ({ddl_type})")


def with_column_repair(session: Session, table: str, column: str,
                       operation: Callable[[], T], ddl_type: str = 'TEXT') -> T:
    """
    Run a write operation, repairing a missing column once if needed.

    The operation must be re-runnable from scratch: it is called a second
    time after the session has been rolled back and the column added. Any
    failure on the retry, or any other storage error, propagates unchanged.
    """
    try:
        result = operation()
        session.flush()
        return result
    except (OperationalError, ProgrammingError) as e:
        if not is_missing_column_error(e, column):
            raise
        session.rollback()
        drift = SchemaDriftError(table, column)
        logger.warning(f"{drift.message}; running defensive migration and retrying once")

    add_column(session, table, column, ddl_type)
    result = operation()
    session.flush()
    return result
