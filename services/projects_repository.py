"""
Projects Repository - Database operations for projects and their timeline updates.

Deleting a project is the one multi-table write in the gateway: it runs as a
single batch inside the caller's transaction, children before the parent.
"""

import logging
from typing import Dict, List

from database.models import (
    Project, Task, TaskComment, ProjectUpdate, Invoice, Meeting
)
from services.base_repository import ScopedRepository
from services.helpers import utc_now_iso
from validators import ValidationError, clamp_progress, validate_project_request

logger = logging.getLogger(__name__)


class ProjectsRepository(ScopedRepository):
    """Repository for project database operations."""

    def list_projects(self) -> List[Dict]:
        """List projects of the organization, oldest first."""
        projects = self._query(Project).order_by(Project.created_at, Project.id).all()
        return [p.to_dict() for p in projects]

    def get_project(self, project_id: str) -> Project:
        """Get a project model by ID or raise NotFoundError."""
        return self._require(Project, project_id, 'Project')

    def create_project(self, data: Dict) -> Dict:
        """Create a project (or replace it when retried with the same id)."""
        data = dict(data)
        data['progress'] = clamp_progress(data.get('progress', 0))
        data.setdefault('createdAt', utc_now_iso())
        project = self._upsert(Project, data, validator=validate_project_request)
        self.session.flush()
        logger.info(f"Created project: {project.id}")
        return project.to_dict()

    def update_project(self, data: Dict) -> Dict:
        """Full replace of a project by id."""
        data = dict(data)
        if 'progress' in data:
            data['progress'] = clamp_progress(data['progress'])
        project = self._replace(Project, data, 'Project', validator=validate_project_request)
        self.session.flush()
        logger.info(f"Updated project: {project.id}")
        return project.to_dict()

    def delete_project(self, project_id: str) -> Dict[str, int]:
        """
        Delete a project and everything that references it.

        Order: task comments, tasks, project updates, invoices, meetings,
        then the project. Nothing is committed here; a failure anywhere
        leaves the caller's transaction to roll the whole batch back.

        Returns:
            Number of deleted rows per table
        """
        project = self.get_project(project_id)
        task_ids = [row.id for row in self.session.query(Task.id).filter(Task.project_id == project.id)]

        counts = {}
        if task_ids:
            counts['task_comments'] = self.session.query(TaskComment).filter(
                TaskComment.task_id.in_(task_ids)
            ).delete(synchronize_session=False)
        else:
            counts['task_comments'] = 0
        counts['tasks'] = self.session.query(Task).filter(
            Task.project_id == project.id
        ).delete(synchronize_session=False)
        counts['project_updates'] = self.session.query(ProjectUpdate).filter(
            ProjectUpdate.project_id == project.id
        ).delete(synchronize_session=False)
        counts['invoices'] = self.session.query(Invoice).filter(
            Invoice.organization_id == project.organization_id,
            Invoice.project_id == project.id
        ).delete(synchronize_session=False)
        counts['meetings'] = self.session.query(Meeting).filter(
            Meeting.organization_id == project.organization_id,
            Meeting.project_id == project.id
        ).delete(synchronize_session=False)

        counts['projects'] = self.session.query(Project).filter(
            Project.id == project.id
        ).delete(synchronize_session=False)
        self.session.flush()
        logger.info(f"Deleted project {project_id} with cascade {counts}")
        return counts

    # =========================================================================
    # PROJECT UPDATES (timeline)
    # =========================================================================

    def add_update(self, data: Dict) -> Dict:
        """Post a timeline entry on a project."""
        if not data.get('message'):
            raise ValidationError("Missing required fields: message", field='message')
        project = self.get_project(data.get('projectId'))

        update_id = data.get('id')
        update = self._claim(ProjectUpdate, update_id, project.organization_id)
        if update is not None and update.project_id != project.id:
            raise ValidationError(f"Update '{update_id}' belongs to another project", field='id')
        if update is None:
            update = ProjectUpdate(project_id=project.id, organization_id=project.organization_id)
            if update_id:
                update.id = update_id
            self.session.add(update)
        update.apply_wire(data)
        if not update.date:
            update.date = utc_now_iso()
        self.session.flush()
        logger.info(f"Added project update {update.id} to project {project.id}")
        return update.to_dict()

    def edit_update(self, update_id: str, message: str) -> Dict:
        """Edit the message of one timeline entry."""
        if not message:
            raise ValidationError("Missing required fields: message", field='message')
        update = self._require(ProjectUpdate, update_id, 'Project update')
        update.message = message
        self.session.flush()
        return update.to_dict()

    def delete_update(self, update_id: str) -> None:
        """Delete one timeline entry."""
        self._delete(ProjectUpdate, update_id, 'Project update')
