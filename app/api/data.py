"""
Snapshot & Account Routes Blueprint

- GET  /api/data?email=<addr>: full snapshot of the user's organization
- POST /api/signup: register a user (creates the organization when needed)
- POST /api/user/update: replace a user profile
"""

import logging
from flask import Blueprint, request, jsonify

from app.api.common import json_body, request_org_id, success

logger = logging.getLogger(__name__)

data_bp = Blueprint('data_bp', __name__)


@data_bp.route('/data', methods=['GET'])
def get_data():
    """Snapshot for a user; unknown or missing email yields {user: null}."""
    from database.connection import get_db_session
    from services.snapshot_service import SnapshotService

    email = (request.args.get('email') or '').strip()
    with get_db_session() as session:
        snapshot = SnapshotService(session).snapshot_for(email)
    return jsonify(snapshot)


@data_bp.route('/signup', methods=['POST'])
def signup():
    """Register a user and report the ids of the user and organization."""
    from database.connection import get_db_session
    from services.users_repository import UsersRepository

    data = json_body()
    with get_db_session() as session:
        result = UsersRepository(session).signup(data)
    logger.info(f"Signup completed for {data.get('email')}")
    return success(201, **result)


@data_bp.route('/user/update', methods=['POST'])
def update_user():
    from database.connection import get_db_session
    from services.users_repository import UsersRepository

    data = json_body()
    with get_db_session() as session:
        user = UsersRepository(session, request_org_id(data)).update_user(data)
    return success(user=user)
