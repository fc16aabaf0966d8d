"""
API Blueprints Package

All sync gateway route handlers, organized by entity family.
Each module defines a Flask Blueprint registered in app/__init__.py.

BLUEPRINT REFERENCE:
====================
- data.py          : Snapshot (GET /data), signup, user profile updates
- projects.py      : Projects, cascade delete, project timeline updates
- tasks.py         : Tasks, completion reports, comments
- invoices.py      : Invoices (with attachment column repair)
- schedule.py      : Meetings, reminders, other matters
- notifications.py : Read receipts
- admin.py         : Super-admin organization console
- common.py        : Body parsing and tenant resolution helpers
"""

# All blueprints are imported and registered in app/__init__.py
# This file serves as documentation only

__all__ = []
