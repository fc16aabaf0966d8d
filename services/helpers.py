"""
Helper utility functions shared by the repositories and the client-side store.
"""

import uuid
from datetime import datetime, timezone
from urllib.parse import quote_plus

from dateutil import parser

# Records without a parsable date sort after everything else
_UNDATED = datetime.max


def generate_id():
    """Generate a new opaque record id."""
    return str(uuid.uuid4())


def utc_now_iso():
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def parse_timestamp(value):
    """Parse an ISO date/datetime string into a naive UTC datetime, or None."""
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = parser.parse(str(value))
        except (ValueError, OverflowError):
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def meeting_sort_key(meeting):
    """Meetings are ordered by date then time of day."""
    date = meeting.get('date')
    time_of_day = meeting.get('time') or '00:00'
    stamp = parse_timestamp(f"{date}T{time_of_day}") if date else None
    if stamp is None:
        stamp = parse_timestamp(date) or _UNDATED
    return stamp


def reminder_sort_key(reminder):
    """Reminders are ordered by date."""
    return parse_timestamp(reminder.get('date')) or _UNDATED


def default_avatar(name):
    """Generated initials avatar for users without a picture."""
    return f"https://ui-avatars.com/api/?name={quote_plus(name or '')}&background=random"
