"""
Schedule Repository - Database operations for meetings, reminders and other matters.
"""

import logging
from typing import Dict, List

from database.models import Meeting, Reminder, OtherMatter
from services.base_repository import ScopedRepository
from services.helpers import meeting_sort_key, reminder_sort_key, utc_now_iso
from validators import (
    validate_meeting_request,
    validate_reminder_request,
    validate_other_matter_request
)

logger = logging.getLogger(__name__)


class ScheduleRepository(ScopedRepository):
    """Repository for the organization's calendar and notes."""

    # =========================================================================
    # MEETINGS
    # =========================================================================

    def list_meetings(self) -> List[Dict]:
        """List meetings ordered by date and time."""
        meetings = [m.to_dict() for m in self._query(Meeting).all()]
        return sorted(meetings, key=meeting_sort_key)

    def create_meeting(self, data: Dict) -> Dict:
        """Create a meeting (or replace it when retried with the same id)."""
        meeting = self._upsert(Meeting, data, validator=validate_meeting_request,
                               defaults={'completed': False})
        self.session.flush()
        logger.info(f"Created meeting: {meeting.id}")
        return meeting.to_dict()

    def update_meeting(self, data: Dict) -> Dict:
        """Full replace of a meeting by id."""
        meeting = self._replace(Meeting, data, 'Meeting', validator=validate_meeting_request)
        self.session.flush()
        logger.info(f"Updated meeting: {meeting.id}")
        return meeting.to_dict()

    def complete_meeting(self, meeting_id: str, completed_by: str = None) -> Dict:
        """Mark a meeting as held."""
        meeting = self._require(Meeting, meeting_id, 'Meeting')
        meeting.completed = True
        meeting.completed_by = completed_by
        meeting.completed_at = utc_now_iso()
        self.session.flush()
        return meeting.to_dict()

    def delete_meeting(self, meeting_id: str) -> None:
        """Delete a meeting."""
        self._delete(Meeting, meeting_id, 'Meeting')

    # =========================================================================
    # REMINDERS
    # =========================================================================

    def list_reminders(self) -> List[Dict]:
        """List reminders ordered by date."""
        reminders = [r.to_dict() for r in self._query(Reminder).all()]
        return sorted(reminders, key=reminder_sort_key)

    def create_reminder(self, data: Dict) -> Dict:
        """Create a reminder (or replace it when retried with the same id)."""
        reminder = self._upsert(Reminder, data, validator=validate_reminder_request,
                                defaults={'completed': False})
        self.session.flush()
        logger.info(f"Created reminder: {reminder.id}")
        return reminder.to_dict()

    def update_reminder(self, data: Dict) -> Dict:
        """Full replace of a reminder by id."""
        reminder = self._replace(Reminder, data, 'Reminder', validator=validate_reminder_request)
        self.session.flush()
        logger.info(f"Updated reminder: {reminder.id}")
        return reminder.to_dict()

    def delete_reminder(self, reminder_id: str) -> None:
        """Delete a reminder."""
        self._delete(Reminder, reminder_id, 'Reminder')

    # =========================================================================
    # OTHER MATTERS
    # =========================================================================

    def list_other_matters(self) -> List[Dict]:
        """List sticky notes, newest first."""
        matters = self._query(OtherMatter).order_by(OtherMatter.date.desc(), OtherMatter.id).all()
        return [m.to_dict() for m in matters]

    def create_other_matter(self, data: Dict) -> Dict:
        """Create a sticky note (or replace it when retried with the same id)."""
        matter = self._upsert(OtherMatter, data, validator=validate_other_matter_request)
        if not matter.date:
            matter.date = utc_now_iso()
        self.session.flush()
        logger.info(f"Created other matter: {matter.id}")
        return matter.to_dict()

    def update_other_matter(self, data: Dict) -> Dict:
        """Full replace of a sticky note by id."""
        matter = self._replace(OtherMatter, data, 'Other matter', validator=validate_other_matter_request)
        self.session.flush()
        return matter.to_dict()

    def delete_other_matter(self, matter_id: str) -> None:
        """Delete a sticky note."""
        self._delete(OtherMatter, matter_id, 'Other matter')
