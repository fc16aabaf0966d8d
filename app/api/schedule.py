"""
Schedule Routes Blueprint

Meetings, reminders and other matters (sticky notes):
- POST /api/meeting, POST /api/meeting/update, POST /api/meeting/complete, DELETE /api/meeting
- POST /api/reminder, POST /api/reminder/update, DELETE /api/reminder
- POST /api/other-matter, PUT /api/other-matter, DELETE /api/other-matter
"""

import logging
from flask import Blueprint

from app.api.common import json_body, request_org_id, require_field, success

logger = logging.getLogger(__name__)

schedule_bp = Blueprint('schedule_bp', __name__)


def _repository(session, data):
    from services.schedule_repository import ScheduleRepository
    return ScheduleRepository(session, request_org_id(data))


# ============================================================================
# MEETINGS
# ============================================================================

@schedule_bp.route('/meeting', methods=['POST'])
def create_meeting():
    from database.connection import get_db_session

    data = json_body()
    with get_db_session() as session:
        meeting = _repository(session, data).create_meeting(data)
    return success(201, id=meeting['id'], meeting=meeting)


@schedule_bp.route('/meeting/update', methods=['POST'])
def update_meeting():
    from database.connection import get_db_session

    data = json_body()
    with get_db_session() as session:
        meeting = _repository(session, data).update_meeting(data)
    return success(meeting=meeting)


@schedule_bp.route('/meeting/complete', methods=['POST'])
def complete_meeting():
    from database.connection import get_db_session

    data = json_body()
    meeting_id = require_field(data, 'id')
    with get_db_session() as session:
        meeting = _repository(session, data).complete_meeting(meeting_id, data.get('completedBy'))
    return success(meeting=meeting)


@schedule_bp.route('/meeting', methods=['DELETE'])
def delete_meeting():
    from database.connection import get_db_session

    data = json_body()
    meeting_id = require_field(data, 'id')
    with get_db_session() as session:
        _repository(session, data).delete_meeting(meeting_id)
    return success()


# ============================================================================
# REMINDERS
# ============================================================================

@schedule_bp.route('/reminder', methods=['POST'])
def create_reminder():
    from database.connection import get_db_session

    data = json_body()
    with get_db_session() as session:
        reminder = _repository(session, data).create_reminder(data)
    return success(201, id=reminder['id'], reminder=reminder)


@schedule_bp.route('/reminder/update', methods=['POST'])
def update_reminder():
    from database.connection import get_db_session

    data = json_body()
    with get_db_session() as session:
        reminder = _repository(session, data).update_reminder(data)
    return success(reminder=reminder)


@schedule_bp.route('/reminder', methods=['DELETE'])
def delete_reminder():
    from database.connection import get_db_session

    data = json_body()
    reminder_id = require_field(data, 'id')
    with get_db_session() as session:
        _repository(session, data).delete_reminder(reminder_id)
    return success()


# ============================================================================
# OTHER MATTERS
# ============================================================================

@schedule_bp.route('/other-matter', methods=['POST'])
def create_other_matter():
    from database.connection import get_db_session

    data = json_body()
    with get_db_session() as session:
        matter = _repository(session, data).create_other_matter(data)
    return success(201, id=matter['id'], otherMatter=matter)


@schedule_bp.route('/other-matter', methods=['PUT'])
def update_other_matter():
    from database.connection import get_db_session

    data = json_body()
    with get_db_session() as session:
        matter = _repository(session, data).update_other_matter(data)
    return success(otherMatter=matter)


@schedule_bp.route('/other-matter', methods=['DELETE'])
def delete_other_matter():
    from database.connection import get_db_session

    data = json_body()
    matter_id = require_field(data, 'id')
    with get_db_session() as session:
        _repository(session, data).delete_other_matter(matter_id)
    return success()
