"""
Notification Service - Manages in-app notifications.

This service handles:
- Deciding whether a task completion notifies the task creator
- Creating notifications for users
- Marking notifications as read

The decision and message format live in plain functions so the client-side
action layer produces exactly what the gateway persists.
"""

import logging
from typing import Dict, List, Optional

from services.errors import NotFoundError
from services.helpers import generate_id, utc_now_iso

logger = logging.getLogger(__name__)

TASK_COMPLETED = 'task_completed'
URGENT = 'urgent'


def should_notify_creator(created_by: Optional[str], completed_by: Optional[str]) -> bool:
    """A completion notifies the task creator unless they completed it themselves."""
    return bool(created_by) and created_by != completed_by


def build_task_completion_notification(task: Dict, project_name: str, completed_by: Optional[str],
                                       organization_id: str, note: str = None, image: str = None,
                                       notification_id: str = None, date: str = None) -> Optional[Dict]:
    """
    Build the notification for a task completion, or None when suppressed.

    Args:
        task: Task in wire shape (needs id, title, createdBy)
        project_name: Name of the owning project
        completed_by: User id of the completer
        organization_id: Tenant of the task
        note: Completion note
        image: Completion image (URI or data blob)

    Returns:
        Notification dict in wire shape, or None
    """
    if not should_notify_creator(task.get('createdBy'), completed_by):
        return None
    return {
        'id': notification_id or generate_id(),
        'organizationId': organization_id,
        'userId': task['createdBy'],
        'message': f'Task "{task.get("title")}" completed in {project_name}',
        'read': False,
        'date': date or utc_now_iso(),
        'type': TASK_COMPLETED,
        'data': {'taskId': task['id'], 'note': note, 'image': image},
    }


class NotificationService:
    """Service for managing persisted notifications."""

    def __init__(self, session, organization_id: str = None):
        self.session = session
        self.organization_id = organization_id

    def create_notification(self, data: Dict) -> Dict:
        """
        Persist a notification given in wire shape.

        Returns:
            Created notification dict
        """
        from database.models import Notification

        notification = Notification(
            id=data.get('id') or generate_id(),
            organization_id=data.get('organizationId') or self.organization_id,
        )
        notification.apply_wire(data)
        if notification.is_read is None:
            notification.is_read = False
        if not notification.date:
            notification.date = utc_now_iso()

        self.session.add(notification)
        self.session.flush()

        logger.info(f"Created notification for user {notification.user_id}: {notification.message}")
        return notification.to_dict()

    def get_notifications(self, user_id: str = None, unread_only: bool = False) -> List[Dict]:
        """Get notifications of the organization, newest first."""
        from database.models import Notification

        query = self.session.query(Notification)
        if self.organization_id:
            query = query.filter(Notification.organization_id == self.organization_id)
        if user_id:
            query = query.filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.is_read.is_(False))

        notifications = query.order_by(Notification.date.desc()).all()
        return [n.to_dict() for n in notifications]

    def mark_as_read(self, notification_id: str) -> Dict:
        """Mark a notification as read."""
        from database.models import Notification

        query = self.session.query(Notification).filter(Notification.id == notification_id)
        if self.organization_id:
            query = query.filter(Notification.organization_id == self.organization_id)
        notification = query.first()

        if not notification:
            raise NotFoundError('Notification', notification_id)

        notification.is_read = True
        self.session.flush()
        return notification.to_dict()
