"""
Task Routes Blueprint

Handles tasks and their comment threads:
- POST   /api/task: create a task
- POST   /api/task/update: replace a task
- POST   /api/task/complete: record a completion report (may notify the creator)
- POST   /api/task/uncomplete: reopen a task, erasing the report
- DELETE /api/task: delete a task and its comments
- POST   /api/task/comment: add a comment
- DELETE /api/task/comment: delete a comment (author or admin)
"""

import logging
from flask import Blueprint

from app.api.common import json_body, request_org_id, require_field, success

logger = logging.getLogger(__name__)

tasks_bp = Blueprint('tasks_bp', __name__)


@tasks_bp.route('/task', methods=['POST'])
def create_task():
    from database.connection import get_db_session
    from services.tasks_repository import TasksRepository

    data = json_body()
    with get_db_session() as session:
        task = TasksRepository(session, request_org_id(data)).create_task(data)
    return success(201, id=task['id'], task=task)


@tasks_bp.route('/task/update', methods=['POST'])
def update_task():
    from database.connection import get_db_session
    from services.tasks_repository import TasksRepository

    data = json_body()
    with get_db_session() as session:
        task = TasksRepository(session, request_org_id(data)).update_task(data)
    return success(task=task)


@tasks_bp.route('/task/complete', methods=['POST'])
def complete_task():
    from database.connection import get_db_session
    from services.tasks_repository import TasksRepository

    data = json_body()
    task_id = require_field(data, 'taskId')
    with get_db_session() as session:
        task = TasksRepository(session, request_org_id(data)).complete_task(
            task_id,
            data.get('completedBy'),
            note=data.get('note'),
            image=data.get('image'),
            completion_images=data.get('completionImages'),
        )
    notification = task.pop('notification', None)
    return success(task=task, notification=notification)


@tasks_bp.route('/task/uncomplete', methods=['POST'])
def uncomplete_task():
    from database.connection import get_db_session
    from services.tasks_repository import TasksRepository

    data = json_body()
    task_id = require_field(data, 'taskId')
    with get_db_session() as session:
        task = TasksRepository(session, request_org_id(data)).uncomplete_task(task_id)
    return success(task=task)


@tasks_bp.route('/task', methods=['DELETE'])
def delete_task():
    from database.connection import get_db_session
    from services.tasks_repository import TasksRepository

    data = json_body()
    task_id = require_field(data, 'id')
    with get_db_session() as session:
        TasksRepository(session, request_org_id(data)).delete_task(task_id)
    return success()


# ============================================================================
# COMMENTS
# ============================================================================

@tasks_bp.route('/task/comment', methods=['POST'])
def add_comment():
    from database.connection import get_db_session
    from services.tasks_repository import TasksRepository

    data = json_body()
    with get_db_session() as session:
        comment = TasksRepository(session, request_org_id(data)).add_comment(data)
    return success(201, id=comment['id'], comment=comment)


@tasks_bp.route('/task/comment', methods=['DELETE'])
def delete_comment():
    from database.connection import get_db_session
    from services.tasks_repository import TasksRepository

    data = json_body()
    comment_id = require_field(data, 'id')
    with get_db_session() as session:
        TasksRepository(session, request_org_id(data)).delete_comment(comment_id, data.get('userId'))
    return success()
