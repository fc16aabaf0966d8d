"""
Task lifecycle rules on wire-shaped task dicts.

    pending <-> in-progress -> completed -> pending

Reopening always lands on pending and erases the completion report.
"""

from typing import Dict, List, Optional

from services.helpers import utc_now_iso
from services.list_codec import parse_list
from validators import TASK_STATUSES, ValidationError

COMPLETION_FIELDS = ('completedAt', 'completionNote', 'completionImage', 'completedBy')


def complete(task: Dict, completed_by: Optional[str], note: str = None, image: str = None,
             images: Optional[List[str]] = None, now: str = None) -> Dict:
    """
    Return the task with a completion report.

    Completing an already completed task keeps the original completedAt and
    replaces the report.
    """
    if images is None:
        images = [image] if image else []
    else:
        images = parse_list(images)
    if image is None and images:
        image = images[0]

    completed = dict(task)
    already_completed = task.get('status') == 'completed' and task.get('completedAt')
    completed['status'] = 'completed'
    completed['completedAt'] = task['completedAt'] if already_completed else (now or utc_now_iso())
    completed['completionNote'] = note
    completed['completionImage'] = image
    completed['completionImages'] = images
    completed['completedBy'] = completed_by
    return completed


def reopen(task: Dict) -> Dict:
    """Return the task back in pending with every completion field cleared."""
    reopened = dict(task)
    reopened['status'] = 'pending'
    for field in COMPLETION_FIELDS:
        reopened[field] = None
    reopened['completionImages'] = []
    return reopened


def normalize(task: Dict, now: str = None) -> Dict:
    """
    Enforce the completion invariants on a full task replacement.

    A completed task always has completedAt; an open task carries no
    completion report.
    """
    status = task.get('status') or 'pending'
    if status not in TASK_STATUSES:
        raise ValidationError(f"Invalid status '{status}'", field='status')

    normalized = dict(task)
    normalized['status'] = status
    normalized['attachments'] = parse_list(task.get('attachments'))
    normalized['completionImages'] = parse_list(task.get('completionImages'))
    if status == 'completed':
        if not normalized.get('completedAt'):
            normalized['completedAt'] = now or utc_now_iso()
    else:
        for field in COMPLETION_FIELDS:
            normalized[field] = None
        normalized['completionImages'] = []
    return normalized
