"""
Snapshot Service - Builds the full per-tenant read served by GET /data.
"""

import logging
from typing import Dict

from database.models import (
    Organization, Project, Task, ProjectUpdate, Notification
)
from services.invoices_repository import InvoicesRepository
from services.organizations_repository import OrganizationsRepository
from services.schedule_repository import ScheduleRepository
from services.users_repository import UsersRepository

logger = logging.getLogger(__name__)

# Collections a snapshot always carries, even when empty
SNAPSHOT_COLLECTIONS = (
    'users', 'projects', 'tasks', 'projectUpdates', 'meetings',
    'invoices', 'notifications', 'reminders', 'otherMatters',
)


def empty_snapshot() -> Dict:
    """Snapshot returned for an absent or unknown email."""
    snapshot = {'user': None, 'organization': None}
    for name in SNAPSHOT_COLLECTIONS:
        snapshot[name] = []
    return snapshot


class SnapshotService:
    """Reads everything a user's organization owns in one pass."""

    def __init__(self, session):
        self.session = session

    def snapshot_for(self, email: str) -> Dict:
        """
        Build the snapshot for the user with this email.

        Every collection is filtered by the user's organization. Super admins
        additionally receive the list of all organizations.
        """
        user = UsersRepository(self.session).get_user_by_email(email)
        if user is None:
            if email:
                logger.info(f"Snapshot requested for unknown email {email}")
            return empty_snapshot()

        org_id = user.organization_id
        organization = self.session.get(Organization, org_id)
        schedule = ScheduleRepository(self.session, org_id)

        projects = self.session.query(Project).filter(
            Project.organization_id == org_id
        ).order_by(Project.created_at, Project.id).all()
        tasks = self.session.query(Task).filter(
            Task.organization_id == org_id
        ).order_by(Task.project_id, Task.position).all()
        updates = self.session.query(ProjectUpdate).filter(
            ProjectUpdate.organization_id == org_id
        ).order_by(ProjectUpdate.date).all()
        notifications = self.session.query(Notification).filter(
            Notification.organization_id == org_id
        ).order_by(Notification.date.desc()).all()

        snapshot = {
            'user': user.to_dict(),
            'organization': organization.to_dict() if organization else None,
            'users': UsersRepository(self.session, org_id).list_users(),
            'projects': [p.to_dict() for p in projects],
            'tasks': [t.to_dict() for t in tasks],
            'projectUpdates': [u.to_dict() for u in updates],
            'meetings': schedule.list_meetings(),
            'invoices': InvoicesRepository(self.session, org_id).list_invoices(),
            'notifications': [n.to_dict() for n in notifications],
            'reminders': schedule.list_reminders(),
            'otherMatters': schedule.list_other_matters(),
        }
        if user.is_super_admin:
            snapshot['organizations'] = OrganizationsRepository(self.session).list_organizations()
        return snapshot
