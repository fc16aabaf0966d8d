"""
Entity Store - the client-side copy of an organization's data.

Holds every entity collection plus the signed-in identity. State changes only
through two entry points:

- load(snapshot): swap in a full snapshot from GET /data, all or nothing
- apply(ops): run a batch of ('upsert', kind, record) / ('delete', kind, id)
  operations, all or nothing

Tasks and project updates live inside their project; comments live inside
their task. Every apply is journaled with a sequence number so a refresh can
re-apply local changes issued after it started (see load(as_of=...)).

Readers get deep copies; nothing returned by an accessor aliases store state.
"""

import copy
import logging
import threading
from typing import Any, Dict, Iterable, List, Optional, Tuple

from services.errors import NotFoundError
from services.helpers import meeting_sort_key, reminder_sort_key
from services.list_codec import parse_json_object, parse_list
from validators import ValidationError

logger = logging.getLogger(__name__)

UPSERT = 'upsert'
DELETE = 'delete'

# Op kind -> top-level collection
FLAT_KINDS = {
    'organization': 'organizations',
    'user': 'users',
    'project': 'projects',
    'meeting': 'meetings',
    'invoice': 'invoices',
    'reminder': 'reminders',
    'notification': 'notifications',
    'other_matter': 'other_matters',
}
# Kinds stored inside a parent record
NESTED_KINDS = ('task', 'project_update', 'comment')
KINDS = tuple(FLAT_KINDS) + NESTED_KINDS

# Snapshot key -> collection
SNAPSHOT_KEYS = {
    'organizations': 'organizations',
    'users': 'users',
    'projects': 'projects',
    'meetings': 'meetings',
    'invoices': 'invoices',
    'reminders': 'reminders',
    'notifications': 'notifications',
    'otherMatters': 'other_matters',
}

# Collections whose records must carry an organizationId
SCOPED_COLLECTIONS = (
    'users', 'projects', 'meetings', 'invoices',
    'reminders', 'notifications', 'other_matters',
)

# New records of these collections go to the front
NEWEST_FIRST = ('notifications', 'invoices', 'other_matters')

Op = Tuple[str, str, Any]


def _empty_state() -> Dict[str, List[Dict]]:
    return {name: [] for name in FLAT_KINDS.values()}


def _require_id(record: Any, kind: str) -> Dict:
    if not isinstance(record, dict) or not record.get('id'):
        raise ValidationError(f"{kind} record without an id")
    return record


def _index_of(records: List[Dict], record_id: str) -> int:
    for index, record in enumerate(records):
        if record.get('id') == record_id:
            return index
    return -1


# =============================================================================
# RECORD NORMALIZATION
# =============================================================================

def normalize_comment(comment: Dict, task_id: str) -> Dict:
    comment = dict(_require_id(comment, 'comment'))
    comment['taskId'] = task_id
    comment['images'] = parse_list(comment.get('images'))
    return comment


def normalize_task(task: Dict, project: Dict) -> Dict:
    """Task inside its project; list fields are always lists."""
    task = dict(_require_id(task, 'task'))
    task['projectId'] = project['id']
    if not task.get('organizationId'):
        task['organizationId'] = project.get('organizationId')
    task['status'] = task.get('status') or 'pending'
    task['attachments'] = parse_list(task.get('attachments'))
    task['completionImages'] = parse_list(task.get('completionImages'))
    task['comments'] = [normalize_comment(c, task['id']) for c in parse_list(task.get('comments'))]
    return task


def normalize_project_update(update: Dict, project: Dict) -> Dict:
    update = dict(_require_id(update, 'project update'))
    update['projectId'] = project['id']
    if not update.get('organizationId'):
        update['organizationId'] = project.get('organizationId')
    return update


def normalize_project(project: Dict) -> Dict:
    project = dict(_require_id(project, 'project'))
    project['tasks'] = [normalize_task(t, project) for t in parse_list(project.get('tasks'))]
    project['updates'] = [normalize_project_update(u, project) for u in parse_list(project.get('updates'))]
    return project


def normalize_meeting(meeting: Dict) -> Dict:
    meeting = dict(_require_id(meeting, 'meeting'))
    meeting['attendees'] = parse_list(meeting.get('attendees'))
    meeting['completed'] = bool(meeting.get('completed'))
    return meeting


def normalize_reminder(reminder: Dict) -> Dict:
    reminder = dict(_require_id(reminder, 'reminder'))
    reminder['completed'] = bool(reminder.get('completed'))
    return reminder


def normalize_notification(notification: Dict) -> Dict:
    notification = dict(_require_id(notification, 'notification'))
    notification['read'] = bool(notification.get('read'))
    notification['data'] = parse_json_object(notification.get('data'))
    return notification


NORMALIZERS = {
    'meetings': normalize_meeting,
    'reminders': normalize_reminder,
    'notifications': normalize_notification,
}


def sort_collections(state: Dict[str, List[Dict]]) -> None:
    """Meetings ascend by (date, time), reminders by date. Ties keep insertion order."""
    state['meetings'].sort(key=meeting_sort_key)
    state['reminders'].sort(key=reminder_sort_key)


def build_state(snapshot: Dict) -> Dict[str, List[Dict]]:
    """
    Validate and normalize a snapshot into fresh collections.

    Raises:
        ValidationError: on any malformed record; nothing is built
    """
    if not isinstance(snapshot, dict):
        raise ValidationError("Snapshot must be an object")

    state = _empty_state()
    for key, name in SNAPSHOT_KEYS.items():
        records = snapshot.get(key) or []
        if not isinstance(records, list):
            raise ValidationError(f"Snapshot field '{key}' must be a list")
        if name == 'projects':
            state[name] = [normalize_project(p) for p in records]
        else:
            normalizer = NORMALIZERS.get(name)
            state[name] = [normalizer(r) if normalizer else dict(_require_id(r, key)) for r in records]
        if name in SCOPED_COLLECTIONS:
            for record in state[name]:
                if not record.get('organizationId'):
                    raise ValidationError(f"{key} record '{record['id']}' has no organizationId")

    projects = {p['id']: p for p in state['projects']}
    for task in snapshot.get('tasks') or []:
        _require_id(task, 'task')
        project = projects.get(task.get('projectId'))
        if project is None:
            raise ValidationError(f"Task '{task['id']}' references unknown project '{task.get('projectId')}'")
        project['tasks'].append(normalize_task(task, project))
    for update in snapshot.get('projectUpdates') or []:
        _require_id(update, 'project update')
        project = projects.get(update.get('projectId'))
        if project is None:
            raise ValidationError(
                f"Project update '{update['id']}' references unknown project '{update.get('projectId')}'"
            )
        project['updates'].append(normalize_project_update(update, project))

    sort_collections(state)
    return state


class EntityStore:
    """Thread-safe container for the client-side entity collections."""

    def __init__(self):
        self._lock = threading.RLock()
        self._state = _empty_state()
        self._current_user = None
        self._current_organization = None
        self._revision = 0
        self._sequence = 0
        self._journal: List[Tuple[int, List[Op]]] = []

    # =========================================================================
    # WRITES
    # =========================================================================

    def load(self, snapshot: Dict, as_of: Optional[int] = None) -> None:
        """
        Replace every collection with a snapshot.

        With as_of (a sequence number from mark()), journaled operations
        issued after that point are re-applied on top of the snapshot, so a
        refresh does not discard local changes made while it was in flight.

        Raises:
            ValidationError: malformed snapshot; the previous state is kept
        """
        state = build_state(copy.deepcopy(snapshot))
        with self._lock:
            journal = []
            if as_of is not None:
                journal = [entry for entry in self._journal if entry[0] > as_of]
                for sequence, ops in journal:
                    logger.debug(f"Replaying local change {sequence} over snapshot")
                    self._run_ops(state, ops, strict=False)
                sort_collections(state)

            self._state = state
            self._journal = journal
            if 'user' in snapshot:
                self._current_user = copy.deepcopy(snapshot.get('user'))
                self._current_organization = self._resolve_organization(
                    self._current_user, snapshot.get('organization')
                )
            self._revision += 1
            logger.info(f"Loaded snapshot (revision {self._revision}, "
                        f"{len(self._journal)} local changes replayed)")

    def apply(self, ops: Iterable[Op]) -> int:
        """
        Apply a batch of operations atomically.

        Returns:
            Sequence number of the batch

        Raises:
            NotFoundError: a target record (or a task's project) is missing
            ValidationError: malformed operation or record
        """
        ops = list(ops)
        with self._lock:
            state = copy.deepcopy(self._state)
            self._run_ops(state, ops, strict=True)
            sort_collections(state)

            self._state = state
            self._refresh_identity()
            self._sequence += 1
            self._journal.append((self._sequence, ops))
            self._revision += 1
            return self._sequence

    def mark(self) -> int:
        """Sequence number of the latest applied batch."""
        with self._lock:
            return self._sequence

    def set_identity(self, user: Optional[Dict], organization: Optional[Dict] = None) -> None:
        with self._lock:
            self._current_user = copy.deepcopy(user)
            self._current_organization = self._resolve_organization(user, organization)
            self._revision += 1

    def clear(self) -> None:
        """Forget the signed-in identity (logout). Collections are kept."""
        with self._lock:
            self._current_user = None
            self._current_organization = None
            self._revision += 1

    def reset(self) -> None:
        """Empty everything, identity and journal included."""
        with self._lock:
            self._state = _empty_state()
            self._current_user = None
            self._current_organization = None
            self._journal = []
            self._revision += 1

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    def _run_ops(self, state: Dict, ops: List[Op], strict: bool) -> None:
        for op in ops:
            if not isinstance(op, (tuple, list)) or len(op) != 3:
                raise ValidationError(f"Malformed operation: {op!r}")
            action, kind, payload = op
            if kind not in KINDS:
                raise ValidationError(f"Unknown entity kind '{kind}'")
            try:
                if action == UPSERT:
                    self._upsert(state, kind, payload)
                elif action == DELETE:
                    if not self._delete(state, kind, payload):
                        raise NotFoundError(kind.replace('_', ' ').capitalize(), payload)
                else:
                    raise ValidationError(f"Unknown operation '{action}'")
            except NotFoundError as e:
                if strict:
                    raise
                # Replayed change whose target is gone from the fresh snapshot
                logger.warning(f"Skipped replayed {action} of {kind}: {e.message}")

    def _upsert(self, state: Dict, kind: str, record: Dict) -> None:
        if kind == 'task':
            self._upsert_task(state, record)
        elif kind == 'project_update':
            project = self._project_in(state, _require_id(record, 'project update').get('projectId'))
            self._put(project['updates'], normalize_project_update(record, project))
        elif kind == 'comment':
            task = self._task_in(state, _require_id(record, 'comment').get('taskId'))
            self._put(task['comments'], normalize_comment(record, task['id']))
        elif kind == 'project':
            self._upsert_project(state, record)
        else:
            name = FLAT_KINDS[kind]
            normalizer = NORMALIZERS.get(name)
            record = normalizer(record) if normalizer else dict(_require_id(record, kind))
            self._put(state[name], record, prepend=(name in NEWEST_FIRST))

    def _upsert_project(self, state: Dict, record: Dict) -> None:
        existing_index = _index_of(state['projects'], _require_id(record, 'project')['id'])
        project = normalize_project(record)
        if existing_index >= 0:
            existing = state['projects'][existing_index]
            if 'tasks' not in record:
                project['tasks'] = existing['tasks']
            if 'updates' not in record:
                project['updates'] = existing['updates']
        self._put(state['projects'], project)

    def _upsert_task(self, state: Dict, record: Dict) -> None:
        _require_id(record, 'task')
        project = self._project_in(state, record.get('projectId'))
        previous = None
        for other in state['projects']:
            index = _index_of(other['tasks'], record['id'])
            if index >= 0 and other is not project:
                # Moved to another project
                previous = other['tasks'].pop(index)
            elif index >= 0:
                previous = other['tasks'][index]
        task = normalize_task(record, project)
        if 'comments' not in record and previous is not None:
            task['comments'] = previous['comments']
        self._put(project['tasks'], task)

    @staticmethod
    def _put(records: List[Dict], record: Dict, prepend: bool = False) -> None:
        index = _index_of(records, record['id'])
        if index >= 0:
            records[index] = record
        elif prepend:
            records.insert(0, record)
        else:
            records.append(record)

    @staticmethod
    def _remove(records: List[Dict], record_id: str) -> bool:
        index = _index_of(records, record_id)
        if index < 0:
            return False
        del records[index]
        return True

    def _delete(self, state: Dict, kind: str, record_id: str) -> bool:
        if kind == 'task':
            return any(self._remove(p['tasks'], record_id) for p in state['projects'])
        if kind == 'project_update':
            return any(self._remove(p['updates'], record_id) for p in state['projects'])
        if kind == 'comment':
            return any(
                self._remove(t['comments'], record_id)
                for p in state['projects'] for t in p['tasks']
            )
        return self._remove(state[FLAT_KINDS[kind]], record_id)

    @staticmethod
    def _project_in(state: Dict, project_id: str) -> Dict:
        for project in state['projects']:
            if project['id'] == project_id:
                return project
        raise NotFoundError('Project', project_id)

    @staticmethod
    def _task_in(state: Dict, task_id: str) -> Dict:
        for project in state['projects']:
            for task in project['tasks']:
                if task['id'] == task_id:
                    return task
        raise NotFoundError('Task', task_id)

    def _resolve_organization(self, user: Optional[Dict], organization: Optional[Dict]) -> Optional[Dict]:
        if user is None:
            return None
        if organization:
            return copy.deepcopy(organization)
        org_id = user.get('organizationId')
        for candidate in self._state['organizations']:
            if candidate['id'] == org_id:
                return copy.deepcopy(candidate)
        return {'id': org_id} if org_id else None

    def _refresh_identity(self) -> None:
        """Keep the identity in step with upserted user/organization records."""
        if self._current_user:
            index = _index_of(self._state['users'], self._current_user['id'])
            if index >= 0:
                self._current_user = copy.deepcopy(self._state['users'][index])
        if self._current_organization:
            index = _index_of(self._state['organizations'], self._current_organization['id'])
            if index >= 0:
                self._current_organization = copy.deepcopy(self._state['organizations'][index])

    # =========================================================================
    # READS
    # =========================================================================

    @property
    def revision(self) -> int:
        with self._lock:
            return self._revision

    @property
    def current_user(self) -> Optional[Dict]:
        with self._lock:
            return copy.deepcopy(self._current_user)

    @property
    def current_organization(self) -> Optional[Dict]:
        with self._lock:
            return copy.deepcopy(self._current_organization)

    def state_copy(self) -> Tuple[Optional[Dict], Dict[str, List[Dict]]]:
        """The active organization and all collections, read under one lock."""
        with self._lock:
            return copy.deepcopy(self._current_organization), copy.deepcopy(self._state)

    def collection(self, name: str) -> List[Dict]:
        with self._lock:
            return copy.deepcopy(self._state[name])

    def organizations(self) -> List[Dict]:
        return self.collection('organizations')

    def users(self) -> List[Dict]:
        return self.collection('users')

    def projects(self) -> List[Dict]:
        return self.collection('projects')

    def meetings(self) -> List[Dict]:
        return self.collection('meetings')

    def invoices(self) -> List[Dict]:
        return self.collection('invoices')

    def reminders(self) -> List[Dict]:
        return self.collection('reminders')

    def notifications(self) -> List[Dict]:
        return self.collection('notifications')

    def other_matters(self) -> List[Dict]:
        return self.collection('other_matters')

    def get(self, kind: str, record_id: str) -> Optional[Dict]:
        """Look up a record of a top-level kind by id."""
        with self._lock:
            records = self._state[FLAT_KINDS[kind]]
            index = _index_of(records, record_id)
            return copy.deepcopy(records[index]) if index >= 0 else None

    def get_project(self, project_id: str) -> Optional[Dict]:
        return self.get('project', project_id)

    def get_user(self, user_id: str) -> Optional[Dict]:
        return self.get('user', user_id)

    def find_user_by_email(self, email: str) -> Optional[Dict]:
        if not email:
            return None
        email = email.strip()
        with self._lock:
            for user in self._state['users']:
                if user.get('email') == email:
                    return copy.deepcopy(user)
        return None

    def find_task(self, task_id: str) -> Optional[Dict]:
        with self._lock:
            for project in self._state['projects']:
                index = _index_of(project['tasks'], task_id)
                if index >= 0:
                    return copy.deepcopy(project['tasks'][index])
        return None

    def find_project_update(self, update_id: str) -> Optional[Dict]:
        with self._lock:
            for project in self._state['projects']:
                index = _index_of(project['updates'], update_id)
                if index >= 0:
                    return copy.deepcopy(project['updates'][index])
        return None

    def all_tasks(self) -> List[Dict]:
        """Every task of every project, in project then board order."""
        with self._lock:
            return [copy.deepcopy(t) for p in self._state['projects'] for t in p['tasks']]
