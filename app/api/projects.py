"""
Project Routes Blueprint

Handles projects and their timeline updates:
- POST   /api/project: create a project
- POST   /api/project/update: replace a project
- DELETE /api/project: delete a project with its tasks, comments, updates,
  invoices and meetings in one transaction
- POST   /api/project/update-post: add a timeline update
- PUT    /api/project/update: edit a timeline update
- DELETE /api/project/update: delete a timeline update
"""

import logging
from flask import Blueprint

from app.api.common import json_body, request_org_id, require_field, success

logger = logging.getLogger(__name__)

projects_bp = Blueprint('projects_bp', __name__)


# ============================================================================
# PROJECTS
# ============================================================================

@projects_bp.route('/project', methods=['POST'])
def create_project():
    from database.connection import get_db_session
    from services.projects_repository import ProjectsRepository

    data = json_body()
    with get_db_session() as session:
        project = ProjectsRepository(session, request_org_id(data)).create_project(data)
    return success(201, id=project['id'], project=project)


@projects_bp.route('/project/update', methods=['POST'])
def update_project():
    from database.connection import get_db_session
    from services.projects_repository import ProjectsRepository

    data = json_body()
    with get_db_session() as session:
        project = ProjectsRepository(session, request_org_id(data)).update_project(data)
    return success(project=project)


@projects_bp.route('/project', methods=['DELETE'])
def delete_project():
    """Cascade delete; any failure rolls back every table."""
    from database.connection import get_db_session
    from services.projects_repository import ProjectsRepository

    data = json_body()
    project_id = require_field(data, 'id')
    with get_db_session() as session:
        counts = ProjectsRepository(session, request_org_id(data)).delete_project(project_id)
    return success(deleted=counts)


# ============================================================================
# PROJECT UPDATES (timeline)
# ============================================================================

@projects_bp.route('/project/update-post', methods=['POST'])
def add_project_update():
    from database.connection import get_db_session
    from services.projects_repository import ProjectsRepository

    data = json_body()
    with get_db_session() as session:
        update = ProjectsRepository(session, request_org_id(data)).add_update(data)
    return success(201, id=update['id'], update=update)


@projects_bp.route('/project/update', methods=['PUT'])
def edit_project_update():
    from database.connection import get_db_session
    from services.projects_repository import ProjectsRepository

    data = json_body()
    update_id = require_field(data, 'id')
    with get_db_session() as session:
        update = ProjectsRepository(session, request_org_id(data)).edit_update(
            update_id, data.get('message')
        )
    return success(update=update)


@projects_bp.route('/project/update', methods=['DELETE'])
def delete_project_update():
    from database.connection import get_db_session
    from services.projects_repository import ProjectsRepository

    data = json_body()
    update_id = require_field(data, 'id')
    with get_db_session() as session:
        ProjectsRepository(session, request_org_id(data)).delete_update(update_id)
    return success()
