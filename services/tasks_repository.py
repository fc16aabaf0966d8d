"""
Tasks Repository - Database operations for project tasks and their comment threads.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import func

from database.models import Project, Task, TaskComment, User
from services import task_rules
from services.base_repository import ScopedRepository
from services.errors import NotFoundError, PermissionDeniedError
from services.helpers import generate_id, utc_now_iso
from services.notification_service import NotificationService, build_task_completion_notification
from validators import ValidationError, ensure_valid, validate_task_request

logger = logging.getLogger(__name__)


class TasksRepository(ScopedRepository):
    """Repository for task database operations."""

    def __init__(self, session, organization_id: str = None):
        super().__init__(session, organization_id)
        self.notifications = NotificationService(session, organization_id)

    def list_tasks(self, project_id: str = None) -> List[Dict]:
        """List tasks, optionally of one project, in board order."""
        query = self._query(Task)
        if project_id:
            query = query.filter(Task.project_id == project_id)
        return [t.to_dict() for t in query.order_by(Task.project_id, Task.position).all()]

    def get_task(self, task_id: str) -> Task:
        """Get a task model by ID or raise NotFoundError."""
        return self._require(Task, task_id, 'Task')

    def _save_wire(self, task: Task, data: Dict) -> Dict:
        """Normalize a wire task and write it onto the model."""
        normalized = task_rules.normalize(data)
        task.apply_wire(normalized)
        self.session.flush()
        return task.to_dict()

    def create_task(self, data: Dict) -> Dict:
        """
        Append a task to its project.
        A retried create with the same id replaces the existing task.
        """
        ensure_valid(validate_task_request(data))

        project = self._require(Project, data['projectId'], 'Project')
        task = self._claim(Task, data['id'], project.organization_id)
        if task is None:
            position = self.session.query(func.count(Task.id)).filter(
                Task.project_id == project.id
            ).scalar() or 0
            task = Task(
                id=data['id'],
                project_id=project.id,
                organization_id=project.organization_id,
                position=position,
            )
            self.session.add(task)

        result = self._save_wire(task, data)
        logger.info(f"Created task {task.id} in project {project.id}")
        return result

    def update_task(self, data: Dict) -> Dict:
        """Full replace of a task by id."""
        ensure_valid(validate_task_request(data))
        task = self.get_task(data['id'])
        if data['projectId'] != task.project_id:
            # Moving a task keeps it inside the same organization
            project = self._require(Project, data['projectId'], 'Project')
            if project.organization_id != task.organization_id:
                raise NotFoundError('Project', data['projectId'])
            task.project_id = project.id

        current = task.to_dict(include_comments=False)
        current.update({k: v for k, v in data.items() if k != 'comments'})
        result = self._save_wire(task, current)
        logger.info(f"Updated task: {task.id}")
        return result

    def complete_task(self, task_id: str, completed_by: str, note: str = None,
                      image: str = None, completion_images: Optional[List[str]] = None) -> Dict:
        """
        Record a completion report.

        The task creator is notified when someone else completes the task.
        Re-completing an already completed task only refreshes the report.
        """
        task = self.get_task(task_id)
        was_completed = task.status == 'completed'

        completed = task_rules.complete(
            task.to_dict(include_comments=False), completed_by,
            note=note, image=image, images=completion_images
        )
        result = self._save_wire(task, completed)

        notification = None
        if not was_completed:
            notification_data = build_task_completion_notification(
                result, task.project.name, completed_by, task.organization_id,
                note=note, image=image
            )
            if notification_data:
                notification = self.notifications.create_notification(notification_data)

        logger.info(f"Completed task {task_id} by {completed_by}")
        result['notification'] = notification
        return result

    def uncomplete_task(self, task_id: str) -> Dict:
        """Reopen a task; the completion report is discarded."""
        task = self.get_task(task_id)
        result = self._save_wire(task, task_rules.reopen(task.to_dict(include_comments=False)))
        logger.info(f"Reopened task: {task_id}")
        return result

    def delete_task(self, task_id: str) -> None:
        """Delete a task together with its comments."""
        task = self.get_task(task_id)
        self.session.query(TaskComment).filter(
            TaskComment.task_id == task.id
        ).delete(synchronize_session=False)
        self.session.query(Task).filter(Task.id == task.id).delete(synchronize_session=False)
        self.session.flush()
        logger.info(f"Deleted task: {task_id}")

    # =========================================================================
    # COMMENTS
    # =========================================================================

    def add_comment(self, data: Dict) -> Dict:
        """Append a comment to a task thread."""
        if not data.get('userId') or not data.get('message'):
            raise ValidationError("Missing required fields: userId, message")
        task = self.get_task(data.get('taskId'))

        comment_id = data.get('id') or generate_id()
        comment = self._claim(TaskComment, comment_id, task.organization_id)
        if comment is not None and comment.task_id != task.id:
            raise ValidationError(f"Comment '{comment_id}' belongs to another task", field='id')
        if comment is None:
            comment = TaskComment(id=comment_id, task_id=task.id, organization_id=task.organization_id)
            self.session.add(comment)
        comment.apply_wire(data)
        if not comment.created_at:
            comment.created_at = utc_now_iso()
        self.session.flush()
        logger.info(f"Added comment {comment.id} to task {task.id}")
        return comment.to_dict()

    def delete_comment(self, comment_id: str, user_id: str = None) -> None:
        """
        Delete a comment.

        When the acting user is known, only the author or an organization
        admin may delete it.
        """
        comment = self._require(TaskComment, comment_id, 'Comment')
        if user_id and user_id != comment.user_id:
            actor = self.session.get(User, user_id)
            if actor is None or not (actor.is_admin or actor.is_super_admin) \
                    or actor.organization_id != comment.organization_id:
                raise PermissionDeniedError("Only the author or an admin can delete this comment")
        self.session.delete(comment)
        self.session.flush()
        logger.info(f"Deleted comment: {comment_id}")
