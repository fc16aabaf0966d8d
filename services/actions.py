"""
Action Layer - every state transition of the client-side store.

Each action checks its preconditions against the scoped store, sends the
change to the gateway when a SyncClient is attached, and then applies the
resulting operations to the EntityStore in one batch. A failed gateway call
raises GatewayError and leaves the store untouched.

Ids are generated here, once per action, and travel with the record; the
gateway treats a create with a known id as a replace.
"""

import logging
from typing import Callable, Dict, List, Optional

from services import task_rules
from services.entity_store import DELETE, UPSERT, EntityStore
from services.errors import ConfigurationError, NotFoundError, PermissionDeniedError
from services.helpers import default_avatar, generate_id, utc_now_iso
from services.list_codec import parse_list
from services.notification_service import build_task_completion_notification
from services.scoping import ensure_in_scope, scope
from services.sync_client import SyncClient
from validators import (
    INVOICE_STATUSES, ORGANIZATION_STATUSES, ValidationError, clamp_progress, ensure_valid,
    validate_choice, validate_invoice_request, validate_meeting_request,
    validate_other_matter_request, validate_project_request, validate_reminder_request,
    validate_signup_request, validate_task_request
)

logger = logging.getLogger(__name__)


def _without(record: Dict, *keys) -> Dict:
    """Copy of a record minus nested collections that travel separately."""
    return {k: v for k, v in record.items() if k not in keys}


class ActionLayer:
    """
    State transitions over an EntityStore.

    Args:
        store: The entity store to mutate
        client: Optional SyncClient; without one the store is the only copy
        clock: Callable returning the current time as an ISO string
        id_factory: Callable returning a fresh record id
    """

    def __init__(self, store: EntityStore, client: Optional[SyncClient] = None,
                 clock: Callable[[], str] = None, id_factory: Callable[[], str] = None):
        self.store = store
        self.client = client
        self.clock = clock or utc_now_iso
        self.id_factory = id_factory or generate_id

    # =========================================================================
    # PLUMBING
    # =========================================================================

    def _organization(self) -> Dict:
        organization = self.store.current_organization
        if not organization:
            raise ConfigurationError()
        return organization

    def _actor(self) -> Dict:
        self._organization()
        return self.store.current_user or {}

    def _push(self, method: str, *args):
        if self.client is None:
            return None
        return getattr(self.client, method)(*args)

    def _commit(self, ops: List) -> int:
        return self.store.apply(ops)

    def _scoped(self, kind: str, record_id: str, resource: str) -> Dict:
        self._organization()
        record = self.store.get(kind, record_id)
        if record is None:
            raise NotFoundError(resource, record_id)
        return ensure_in_scope(self.store, record)

    def _scoped_task(self, task_id: str) -> Dict:
        self._organization()
        task = self.store.find_task(task_id)
        if task is None:
            raise NotFoundError('Task', task_id)
        return ensure_in_scope(self.store, task)

    def _today(self) -> str:
        return self.clock()[:10]

    # =========================================================================
    # SESSION
    # =========================================================================

    def login(self, email: str) -> Dict:
        """
        Sign in by email and adopt the user's organization.

        Raises:
            NotFoundError: no user has this email
        """
        if self.client is not None:
            snapshot = self.client.fetch_data(email)
            user = snapshot.get('user')
            if not user:
                raise NotFoundError('User', email)
            self.client.set_organization(user.get('organizationId'), user.get('id'))
            self.store.load(snapshot)
        else:
            user = self.store.find_user_by_email(email)
            if user is None:
                raise NotFoundError('User', email)
            self.store.set_identity(user)

        logger.info(f"Logged in {email}")
        return self.store.current_user

    def logout(self) -> None:
        self.store.clear()
        if self.client is not None:
            self.client.set_organization(None)
        logger.info("Logged out")

    def refresh(self) -> int:
        """
        Reload the snapshot for the signed-in user.

        Local changes applied while the request was in flight are replayed
        on top of the fresh snapshot.

        Returns:
            The store revision after the reload
        """
        user = self.store.current_user
        if not user:
            raise ConfigurationError("Nobody is logged in")
        if self.client is None:
            return self.store.revision

        as_of = self.store.mark()
        snapshot = self.client.fetch_data(user['email'])
        if not snapshot.get('user'):
            raise NotFoundError('User', user['email'])
        self.store.load(snapshot, as_of=as_of)
        return self.store.revision

    def signup(self, name: str, email: str, organization_name: str, role: str = 'builder',
               password: str = None, phone: str = None) -> Dict:
        """
        Register a user and sign them in.

        Joins the organization with this name when one is known, otherwise
        creates it; the creator of a new organization is its admin.
        """
        ensure_valid(validate_signup_request({'name': name, 'email': email, 'phone': phone}))
        if not organization_name:
            raise ValidationError("Organization name is required", field='organizationName')
        if self.store.find_user_by_email(email):
            raise ValidationError(f"Email '{email}' is already registered", field='email')

        organization = next(
            (o for o in self.store.organizations() if o.get('name') == organization_name), None
        )

        if self.client is not None:
            payload = {
                'name': name, 'email': email, 'password': password, 'company': organization_name,
                'role': role, 'phone': phone, 'joinByName': True,
            }
            if organization:
                payload['organizationId'] = organization['id']
            self.client.signup(payload)
            return self.login(email)

        ops = []
        is_admin = organization is None
        if organization is None:
            organization = {
                'id': self.id_factory(), 'name': organization_name, 'createdAt': self.clock(),
                'status': 'active', 'subscriptionStatus': 'trial',
            }
            ops.append((UPSERT, 'organization', organization))
        user = {
            'id': self.id_factory(), 'organizationId': organization['id'], 'name': name,
            'email': email.strip(), 'role': role, 'avatar': default_avatar(name), 'phone': phone,
            'company': organization_name, 'isAdmin': is_admin, 'isSuperAdmin': False,
        }
        ops.append((UPSERT, 'user', user))
        self._commit(ops)
        self.store.set_identity(user, organization)
        logger.info(f"Signed up {email} into organization {organization['id']}")
        return self.store.current_user

    # =========================================================================
    # USERS
    # =========================================================================

    def invite_user(self, name: str, email: str, role: str = 'worker',
                    phone: str = None, company: str = None) -> Dict:
        """Add a member (not an admin) to the current organization."""
        organization = self._organization()
        ensure_valid(validate_signup_request({'name': name, 'email': email, 'phone': phone}))
        if self.store.find_user_by_email(email):
            raise ValidationError(f"Email '{email}' is already registered", field='email')

        user = {
            'id': self.id_factory(), 'organizationId': organization['id'], 'name': name,
            'email': email.strip(), 'role': role, 'avatar': default_avatar(name), 'phone': phone,
            'company': company or organization.get('name'), 'isAdmin': False, 'isSuperAdmin': False,
        }
        response = self._push('signup', dict(user, organizationId=organization['id']))
        if response and response.get('userId'):
            user['id'] = response['userId']
        self._commit([(UPSERT, 'user', user)])
        return user

    def update_user(self, user: Dict) -> Dict:
        """Full replace of a user profile."""
        current = self._scoped('user', user.get('id'), 'User')
        record = dict(user, organizationId=current['organizationId'])
        record['isSuperAdmin'] = current.get('isSuperAdmin', False)
        ensure_valid(validate_signup_request(record))
        response = self._push('update_user', record)
        if response and response.get('user'):
            record = response['user']
        self._commit([(UPSERT, 'user', record)])
        return record

    # =========================================================================
    # PROJECTS
    # =========================================================================

    def create_project(self, data: Dict) -> Dict:
        organization = self._organization()
        actor = self._actor()
        project = {
            'id': self.id_factory(), 'name': None, 'address': '', 'clientName': '',
            'clientEmail': None, 'clientPhone': None, 'status': 'active', 'progress': 0,
            'startDate': None, 'endDate': None, 'color': '', 'createdBy': actor.get('id'),
            'createdAt': self.clock(),
        }
        project.update(_without(data, 'tasks', 'updates', 'id'))
        project['organizationId'] = organization['id']
        project['progress'] = clamp_progress(project['progress'])
        ensure_valid(validate_project_request(project))

        self._push('create_project', project)
        self._commit([(UPSERT, 'project', dict(project, tasks=[], updates=[]))])
        logger.info(f"Created project: {project['id']}")
        return self.store.get_project(project['id'])

    def update_project(self, project: Dict) -> Dict:
        current = self._scoped('project', project.get('id'), 'Project')
        record = _without(project, 'tasks', 'updates')
        record['organizationId'] = current['organizationId']
        record['progress'] = clamp_progress(record.get('progress', current.get('progress', 0)))
        ensure_valid(validate_project_request(record))

        self._push('update_project', record)
        self._commit([(UPSERT, 'project', record)])
        return self.store.get_project(record['id'])

    def update_project_progress(self, project_id: str, progress) -> Dict:
        current = self._scoped('project', project_id, 'Project')
        record = _without(current, 'tasks', 'updates')
        record['progress'] = clamp_progress(progress)
        self._push('update_project', record)
        self._commit([(UPSERT, 'project', record)])
        return self.store.get_project(project_id)

    def delete_project(self, project_id: str) -> None:
        """
        Delete a project with its tasks, comments, updates and every
        invoice or meeting pointing at it, in one batch.
        """
        project = self._scoped('project', project_id, 'Project')
        view = scope(self.store)

        ops = []
        for task in project['tasks']:
            ops.extend((DELETE, 'comment', c['id']) for c in task['comments'])
        ops.extend((DELETE, 'task', t['id']) for t in project['tasks'])
        ops.extend((DELETE, 'project_update', u['id']) for u in project['updates'])
        ops.extend((DELETE, 'invoice', i['id']) for i in view.invoices if i.get('projectId') == project_id)
        ops.extend((DELETE, 'meeting', m['id']) for m in view.meetings if m.get('projectId') == project_id)
        ops.append((DELETE, 'project', project_id))

        self._push('delete_project', project_id)
        self._commit(ops)
        logger.info(f"Deleted project {project_id} ({len(ops) - 1} dependent records)")

    # =========================================================================
    # TASKS
    # =========================================================================

    def add_task(self, project_id: str, data: Dict) -> Dict:
        project = self._scoped('project', project_id, 'Project')
        actor = self._actor()
        task = {
            'id': self.id_factory(), 'title': None, 'description': '', 'assignedTo': None,
            'status': 'pending', 'requiredDate': None, 'completedAt': None, 'completionNote': None,
            'completionImage': None, 'completionImages': [], 'createdBy': actor.get('id'),
            'completedBy': None, 'attachments': [],
        }
        task.update(_without(data, 'comments', 'id'))
        task['projectId'] = project['id']
        task['organizationId'] = project['organizationId']
        ensure_valid(validate_task_request(task))
        task = task_rules.normalize(task, now=self.clock())

        self._push('create_task', task)
        self._commit([(UPSERT, 'task', dict(task, comments=[]))])
        logger.info(f"Added task {task['id']} to project {project_id}")
        return self.store.find_task(task['id'])

    def update_task(self, task: Dict) -> Dict:
        """Full replace of a task; moving it to another project of the tenant is allowed."""
        current = self._scoped_task(task.get('id'))
        record = dict(_without(current, 'comments'), **_without(task, 'comments'))
        record['organizationId'] = current['organizationId']
        if record.get('projectId') != current['projectId']:
            self._scoped('project', record.get('projectId'), 'Project')
        ensure_valid(validate_task_request(record))
        record = task_rules.normalize(record, now=self.clock())

        self._push('update_task', record)
        self._commit([(UPSERT, 'task', record)])
        return self.store.find_task(record['id'])

    def assign_task(self, task_id: str, user_id: Optional[str]) -> Dict:
        current = self._scoped_task(task_id)
        if user_id:
            self._scoped('user', user_id, 'User')
        record = dict(_without(current, 'comments'), assignedTo=user_id)
        self._push('update_task', record)
        self._commit([(UPSERT, 'task', record)])
        return self.store.find_task(task_id)

    def delete_task(self, task_id: str) -> None:
        task = self._scoped_task(task_id)
        ops = [(DELETE, 'comment', c['id']) for c in task['comments']]
        ops.append((DELETE, 'task', task_id))
        self._push('delete_task', task_id)
        self._commit(ops)

    def complete_task(self, task_id: str, note: str = None, image: str = None,
                      images: Optional[List[str]] = None) -> Dict:
        """
        Record a completion report for the current user.

        The task creator gets a notification when someone else completes the
        task. Completing an already completed task only refreshes the report.
        """
        task = self._scoped_task(task_id)
        organization = self._organization()
        actor_id = self._actor().get('id')

        if self.client is not None:
            response = self.client.complete_task(task_id, actor_id, note, image, images)
            completed = _without(response['task'], 'comments', 'notification')
            notification = response.get('notification')
        else:
            was_completed = task['status'] == 'completed'
            now = self.clock()
            completed = task_rules.complete(_without(task, 'comments'), actor_id, note=note,
                                            image=image, images=images, now=now)
            notification = None
            if not was_completed:
                project = self.store.get_project(task['projectId'])
                notification = build_task_completion_notification(
                    completed, project['name'], actor_id, organization['id'], note=note,
                    image=image, notification_id=self.id_factory(), date=now
                )

        ops = [(UPSERT, 'task', completed)]
        if notification:
            ops.append((UPSERT, 'notification', notification))
        self._commit(ops)
        logger.info(f"Completed task {task_id} by {actor_id}")
        return self.store.find_task(task_id)

    def uncomplete_task(self, task_id: str) -> Dict:
        """Reopen a task. The completion report is erased; notifications stay."""
        task = self._scoped_task(task_id)
        if self.client is not None:
            reopened = _without(self.client.uncomplete_task(task_id)['task'], 'comments')
        else:
            reopened = task_rules.reopen(_without(task, 'comments'))
        self._commit([(UPSERT, 'task', reopened)])
        return self.store.find_task(task_id)

    # =========================================================================
    # COMMENTS
    # =========================================================================

    def add_comment(self, task_id: str, message: str, images: Optional[List[str]] = None) -> Dict:
        task = self._scoped_task(task_id)
        if not message:
            raise ValidationError("Comment message is required", field='message')
        comment = {
            'id': self.id_factory(), 'taskId': task['id'], 'userId': self._actor().get('id'),
            'message': message, 'images': parse_list(images), 'createdAt': self.clock(),
        }
        self._push('add_comment', comment)
        self._commit([(UPSERT, 'comment', comment)])
        return comment

    def delete_comment(self, task_id: str, comment_id: str) -> None:
        """Only the comment's author or an admin may delete it."""
        task = self._scoped_task(task_id)
        comment = next((c for c in task['comments'] if c['id'] == comment_id), None)
        if comment is None:
            raise NotFoundError('Comment', comment_id)
        actor = self._actor()
        if comment.get('userId') != actor.get('id') and not (actor.get('isAdmin') or actor.get('isSuperAdmin')):
            raise PermissionDeniedError("Only the author or an admin can delete this comment")
        self._push('delete_comment', comment_id, actor.get('id'))
        self._commit([(DELETE, 'comment', comment_id)])

    # =========================================================================
    # PROJECT UPDATES (timeline)
    # =========================================================================

    def add_project_update(self, project_id: str, message: str) -> Dict:
        project = self._scoped('project', project_id, 'Project')
        if not message:
            raise ValidationError("Update message is required", field='message')
        actor = self._actor()
        update = {
            'id': self.id_factory(), 'projectId': project['id'],
            'organizationId': project['organizationId'], 'message': message,
            'date': self.clock(), 'authorName': actor.get('name', ''), 'userId': actor.get('id'),
        }
        self._push('add_project_update', update)
        self._commit([(UPSERT, 'project_update', update)])
        return update

    def _scoped_update(self, update_id: str) -> Dict:
        self._organization()
        update = self.store.find_project_update(update_id)
        if update is None:
            raise NotFoundError('Project update', update_id)
        return ensure_in_scope(self.store, update)

    def edit_project_update(self, update_id: str, message: str) -> Dict:
        update = self._scoped_update(update_id)
        if not message:
            raise ValidationError("Update message is required", field='message')
        update['message'] = message
        self._push('edit_project_update', update_id, message)
        self._commit([(UPSERT, 'project_update', update)])
        return update

    def delete_project_update(self, update_id: str) -> None:
        self._scoped_update(update_id)
        self._push('delete_project_update', update_id)
        self._commit([(DELETE, 'project_update', update_id)])

    # =========================================================================
    # INVOICES
    # =========================================================================

    def add_invoice(self, data: Dict) -> Dict:
        organization = self._organization()
        invoice = {
            'id': self.id_factory(), 'type': 'sent', 'amount': None, 'clientName': '',
            'dueDate': None, 'status': 'pending', 'date': self._today(), 'description': '',
            'projectId': None, 'attachmentUrl': None, 'createdBy': self._actor().get('id'),
        }
        invoice.update(_without(data, 'id'))
        invoice['organizationId'] = organization['id']
        ensure_valid(validate_invoice_request(invoice))
        if invoice.get('projectId'):
            self._scoped('project', invoice['projectId'], 'Project')

        self._push('create_invoice', invoice)
        self._commit([(UPSERT, 'invoice', invoice)])
        logger.info(f"Added invoice {invoice['id']}")
        return invoice

    def update_invoice(self, invoice: Dict) -> Dict:
        current = self._scoped('invoice', invoice.get('id'), 'Invoice')
        record = dict(current, **invoice)
        record['organizationId'] = current['organizationId']
        ensure_valid(validate_invoice_request(record))
        self._push('update_invoice', record)
        self._commit([(UPSERT, 'invoice', record)])
        return record

    def update_invoice_status(self, invoice_id: str, status: str) -> Dict:
        """Any status may follow any other."""
        current = self._scoped('invoice', invoice_id, 'Invoice')
        ensure_valid(validate_choice(status, INVOICE_STATUSES), field='status')
        record = dict(current, status=status)
        self._push('update_invoice_status', invoice_id, status)
        self._commit([(UPSERT, 'invoice', record)])
        return record

    def delete_invoice(self, invoice_id: str) -> None:
        self._scoped('invoice', invoice_id, 'Invoice')
        self._push('delete_invoice', invoice_id)
        self._commit([(DELETE, 'invoice', invoice_id)])

    # =========================================================================
    # MEETINGS
    # =========================================================================

    def add_meeting(self, data: Dict) -> Dict:
        organization = self._organization()
        meeting = {
            'id': self.id_factory(), 'title': None, 'date': None, 'time': '', 'projectId': None,
            'attendees': [], 'address': None, 'description': None, 'assignedTo': None,
            'completed': False, 'completedBy': None, 'completedAt': None,
            'createdBy': self._actor().get('id'),
        }
        meeting.update(_without(data, 'id'))
        meeting['organizationId'] = organization['id']
        meeting['attendees'] = parse_list(meeting['attendees'])
        ensure_valid(validate_meeting_request(meeting))
        if meeting.get('projectId'):
            self._scoped('project', meeting['projectId'], 'Project')

        self._push('create_meeting', meeting)
        self._commit([(UPSERT, 'meeting', meeting)])
        return meeting

    def update_meeting(self, meeting: Dict) -> Dict:
        current = self._scoped('meeting', meeting.get('id'), 'Meeting')
        record = dict(current, **meeting)
        record['organizationId'] = current['organizationId']
        record['attendees'] = parse_list(record.get('attendees'))
        ensure_valid(validate_meeting_request(record))
        self._push('update_meeting', record)
        self._commit([(UPSERT, 'meeting', record)])
        return record

    def complete_meeting(self, meeting_id: str) -> Dict:
        current = self._scoped('meeting', meeting_id, 'Meeting')
        actor_id = self._actor().get('id')
        response = self._push('complete_meeting', meeting_id, actor_id)
        if response and response.get('meeting'):
            record = response['meeting']
        else:
            record = dict(current, completed=True, completedBy=actor_id, completedAt=self.clock())
        self._commit([(UPSERT, 'meeting', record)])
        return record

    def delete_meeting(self, meeting_id: str) -> None:
        self._scoped('meeting', meeting_id, 'Meeting')
        self._push('delete_meeting', meeting_id)
        self._commit([(DELETE, 'meeting', meeting_id)])

    # =========================================================================
    # REMINDERS
    # =========================================================================

    def add_reminder(self, data: Dict) -> Dict:
        organization = self._organization()
        reminder = {
            'id': self.id_factory(), 'title': None, 'text': None, 'description': None,
            'date': None, 'completed': False, 'assignedTo': None, 'completedBy': None,
            'completedAt': None, 'createdBy': self._actor().get('id'),
        }
        reminder.update(_without(data, 'id'))
        reminder['organizationId'] = organization['id']
        ensure_valid(validate_reminder_request(reminder))
        self._push('create_reminder', reminder)
        self._commit([(UPSERT, 'reminder', reminder)])
        return reminder

    def update_reminder(self, reminder: Dict) -> Dict:
        current = self._scoped('reminder', reminder.get('id'), 'Reminder')
        record = dict(current, **reminder)
        record['organizationId'] = current['organizationId']
        ensure_valid(validate_reminder_request(record))
        self._push('update_reminder', record)
        self._commit([(UPSERT, 'reminder', record)])
        return record

    def toggle_reminder(self, reminder_id: str) -> Dict:
        """Flip completed; completedBy is left as it is."""
        current = self._scoped('reminder', reminder_id, 'Reminder')
        record = dict(current, completed=not current.get('completed'))
        self._push('update_reminder', record)
        self._commit([(UPSERT, 'reminder', record)])
        return record

    def delete_reminder(self, reminder_id: str) -> None:
        self._scoped('reminder', reminder_id, 'Reminder')
        self._push('delete_reminder', reminder_id)
        self._commit([(DELETE, 'reminder', reminder_id)])

    # =========================================================================
    # OTHER MATTERS
    # =========================================================================

    def add_other_matter(self, data: Dict) -> Dict:
        organization = self._organization()
        matter = {
            'id': self.id_factory(), 'title': None, 'description': None, 'address': '',
            'note': '', 'date': self.clock(), 'assignedTo': None,
            'createdBy': self._actor().get('id'),
        }
        matter.update(_without(data, 'id'))
        matter['organizationId'] = organization['id']
        ensure_valid(validate_other_matter_request(matter))
        self._push('create_other_matter', matter)
        self._commit([(UPSERT, 'other_matter', matter)])
        return matter

    def update_other_matter(self, matter: Dict) -> Dict:
        current = self._scoped('other_matter', matter.get('id'), 'Other matter')
        record = dict(current, **matter)
        record['organizationId'] = current['organizationId']
        ensure_valid(validate_other_matter_request(record))
        self._push('update_other_matter', record)
        self._commit([(UPSERT, 'other_matter', record)])
        return record

    def delete_other_matter(self, matter_id: str) -> None:
        self._scoped('other_matter', matter_id, 'Other matter')
        self._push('delete_other_matter', matter_id)
        self._commit([(DELETE, 'other_matter', matter_id)])

    # =========================================================================
    # NOTIFICATIONS
    # =========================================================================

    def mark_notification_read(self, notification_id: str) -> Dict:
        current = self._scoped('notification', notification_id, 'Notification')
        record = dict(current, read=True)
        self._push('mark_notification_read', notification_id)
        self._commit([(UPSERT, 'notification', record)])
        return record

    # =========================================================================
    # ORGANIZATIONS (super admin)
    # =========================================================================

    def _require_super_admin(self) -> Dict:
        actor = self._actor()
        if not actor.get('isSuperAdmin'):
            raise PermissionDeniedError("Super admin access required")
        return actor

    def _organization_record(self, org_id: str) -> Dict:
        organization = self.store.get('organization', org_id)
        if organization is None:
            raise NotFoundError('Organization', org_id)
        return organization

    def update_organization_status(self, org_id: str, status: str) -> Dict:
        self._require_super_admin()
        ensure_valid(validate_choice(status, ORGANIZATION_STATUSES), field='status')
        record = dict(self._organization_record(org_id), status=status)
        response = self._push('update_organization_status', org_id, status)
        if response and response.get('organization'):
            record = response['organization']
        self._commit([(UPSERT, 'organization', record)])
        return record

    def delete_organization(self, org_id: str) -> None:
        """Remove a tenant and everything it owns from the store."""
        self._require_super_admin()
        if org_id == self._organization()['id']:
            raise ValidationError("Cannot delete the organization you are signed in to")
        self._organization_record(org_id)

        _, state = self.store.state_copy()
        ops = []
        for project in state['projects']:
            if project.get('organizationId') != org_id:
                continue
            for task in project['tasks']:
                ops.extend((DELETE, 'comment', c['id']) for c in task['comments'])
                ops.append((DELETE, 'task', task['id']))
            ops.extend((DELETE, 'project_update', u['id']) for u in project['updates'])
        for kind, name in (('invoice', 'invoices'), ('meeting', 'meetings'), ('project', 'projects'),
                           ('reminder', 'reminders'), ('other_matter', 'other_matters'),
                           ('notification', 'notifications'), ('user', 'users')):
            ops.extend((DELETE, kind, r['id']) for r in state[name] if r.get('organizationId') == org_id)
        ops.append((DELETE, 'organization', org_id))

        self._push('delete_organization', org_id)
        self._commit(ops)
        logger.info(f"Deleted organization {org_id}")
