"""
Admin Routes Blueprint

Super-admin console over every organization:
- GET    /api/organizations: list organizations
- POST   /api/organization/status: activate or suspend an organization
- DELETE /api/organization: delete an organization and everything it owns

Callers identify themselves with the X-User-Id header; only super admins pass.
"""

from functools import wraps
from flask import Blueprint, request
import logging

from app.api.common import json_body, require_field, success
from services.errors import PermissionDeniedError, ValidationError

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admin_bp', __name__)


def super_admin_required(f):
    """Reject callers that are not super admins"""
    @wraps(f)
    def decorated(*args, **kwargs):
        from database.connection import get_db_session
        from database.models import User

        user_id = request.headers.get('X-User-Id')
        if not user_id:
            raise PermissionDeniedError("Super admin access required")
        with get_db_session() as session:
            user = session.get(User, user_id)
            allowed = user is not None and bool(user.is_super_admin)
        if not allowed:
            logger.warning(f"Denied super admin route {request.path} to {user_id}")
            raise PermissionDeniedError("Super admin access required")
        return f(*args, **kwargs)
    return decorated


@admin_bp.route('/organizations', methods=['GET'])
@super_admin_required
def list_organizations():
    from database.connection import get_db_session
    from services.organizations_repository import OrganizationsRepository

    with get_db_session() as session:
        organizations = OrganizationsRepository(session).list_organizations()
    return success(organizations=organizations)


@admin_bp.route('/organization/status', methods=['POST'])
@super_admin_required
def update_organization_status():
    from database.connection import get_db_session
    from services.organizations_repository import OrganizationsRepository

    data = json_body()
    org_id = require_field(data, 'id')
    with get_db_session() as session:
        organization = OrganizationsRepository(session).update_status(org_id, data.get('status'))
    return success(organization=organization)


@admin_bp.route('/organization', methods=['DELETE'])
@super_admin_required
def delete_organization():
    from database.connection import get_db_session
    from services.organizations_repository import OrganizationsRepository

    data = json_body()
    org_id = require_field(data, 'id')
    if org_id == request.headers.get('X-Organization-Id'):
        raise ValidationError("Cannot delete the organization you are signed in to", field='id')
    with get_db_session() as session:
        counts = OrganizationsRepository(session).delete_organization(org_id)
    return success(deleted=counts)
