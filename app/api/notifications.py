"""
Notification Routes Blueprint

- POST /api/notification/read: mark one notification as read
"""

import logging
from flask import Blueprint

from app.api.common import json_body, request_org_id, require_field, success

logger = logging.getLogger(__name__)

notifications_bp = Blueprint('notifications_bp', __name__)


@notifications_bp.route('/notification/read', methods=['POST'])
def mark_notification_read():
    from database.connection import get_db_session
    from services.notification_service import NotificationService

    data = json_body()
    notification_id = require_field(data, 'id')
    with get_db_session() as session:
        notification = NotificationService(session, request_org_id(data)).mark_as_read(notification_id)
    return success(notification=notification)
