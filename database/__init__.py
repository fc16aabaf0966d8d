"""
Database package for SiteBook.
Provides SQLAlchemy models, connection management, and session handling.
"""

from database.connection import (
    Base,
    configure_engine,
    get_engine,
    get_db_session,
    init_db,
    check_db_connection
)

from database.models import (
    Organization,
    User,
    Project,
    Task,
    TaskComment,
    ProjectUpdate,
    Meeting,
    Reminder,
    OtherMatter,
    Invoice,
    Notification
)

__all__ = [
    # Connection
    'Base',
    'configure_engine',
    'get_engine',
    'get_db_session',
    'init_db',
    'check_db_connection',
    # Models
    'Organization',
    'User',
    'Project',
    'Task',
    'TaskComment',
    'ProjectUpdate',
    'Meeting',
    'Reminder',
    'OtherMatter',
    'Invoice',
    'Notification'
]
