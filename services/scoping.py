"""
Organization Scoping Layer.

scope() is the one tenant filter used for every read. With no active
organization every collection is empty.
"""

import logging
from typing import Dict, List, NamedTuple, Optional

from services.errors import ConfigurationError, TenantBoundaryError
from services.helpers import parse_timestamp

logger = logging.getLogger(__name__)


class ScopedView(NamedTuple):
    """Everything the current tenant may see."""
    organization: Optional[Dict]
    users: List[Dict]
    projects: List[Dict]
    tasks: List[Dict]
    meetings: List[Dict]
    invoices: List[Dict]
    reminders: List[Dict]
    notifications: List[Dict]
    other_matters: List[Dict]


def empty_view() -> ScopedView:
    """The fail-closed view used when no organization is active."""
    return ScopedView(None, [], [], [], [], [], [], [], [])


_EPOCH = parse_timestamp('1970-01-01T00:00:00')


def scope(store) -> ScopedView:
    """Derive the tenant-filtered view of a store."""
    organization, state = store.state_copy()
    if not organization or not organization.get('id'):
        return empty_view()

    org_id = organization['id']

    def owned(records):
        return [r for r in records if r.get('organizationId') == org_id]

    projects = owned(state['projects'])
    for project in projects:
        project['tasks'] = owned(project['tasks'])
        project['updates'] = owned(project['updates'])

    return ScopedView(
        organization=organization,
        users=owned(state['users']),
        projects=projects,
        tasks=[t for p in projects for t in p['tasks']],
        meetings=owned(state['meetings']),
        invoices=owned(state['invoices']),
        reminders=owned(state['reminders']),
        notifications=owned(state['notifications']),
        other_matters=owned(state['other_matters']),
    )


def ensure_in_scope(store, record: Optional[Dict]) -> Dict:
    """
    Check that a record belongs to the active organization.

    Raises:
        ConfigurationError: no active organization
        TenantBoundaryError: the record belongs to another organization
    """
    organization = store.current_organization
    if not organization:
        raise ConfigurationError()
    if record is not None and record.get('organizationId') != organization['id']:
        logger.error(f"Record {record.get('id')} of organization {record.get('organizationId')} "
                     f"reached organization {organization['id']}")
        raise TenantBoundaryError(
            f"Record '{record.get('id')}' belongs to another organization"
        )
    return record


def my_notifications(view: ScopedView, user_id: str) -> List[Dict]:
    """Notifications of the view addressed to one user, newest first."""
    mine = [n for n in view.notifications if n.get('userId') == user_id]
    return sorted(mine, key=lambda n: parse_timestamp(n.get('date')) or _EPOCH, reverse=True)


def unread_count(view: ScopedView, user_id: str) -> int:
    return sum(1 for n in my_notifications(view, user_id) if not n.get('read'))

