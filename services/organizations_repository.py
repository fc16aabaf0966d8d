"""
Organizations Repository - Tenant administration for super admins.
"""

import logging
from typing import Dict, List

from database.models import Organization, TENANT_TABLES
from services.errors import NotFoundError
from validators import ORGANIZATION_STATUSES, ensure_valid, validate_choice

logger = logging.getLogger(__name__)


class OrganizationsRepository:
    """Repository for organization (tenant) records."""

    def __init__(self, session):
        self.session = session

    def list_organizations(self) -> List[Dict]:
        """List every organization."""
        organizations = self.session.query(Organization).order_by(Organization.name).all()
        return [o.to_dict() for o in organizations]

    def get_organization(self, org_id: str) -> Organization:
        organization = self.session.get(Organization, org_id) if org_id else None
        if organization is None:
            raise NotFoundError('Organization', org_id)
        return organization

    def update_status(self, org_id: str, status: str) -> Dict:
        """Activate or suspend an organization."""
        ensure_valid(validate_choice(status, ORGANIZATION_STATUSES), field='status')
        organization = self.get_organization(org_id)
        organization.status = status
        self.session.flush()
        logger.info(f"Organization {org_id} is now {status}")
        return organization.to_dict()

    def delete_organization(self, org_id: str) -> Dict[str, int]:
        """
        Delete an organization with every row it owns.

        Tables are emptied children first within the caller's transaction.

        Returns:
            Number of deleted rows per table
        """
        organization = self.get_organization(org_id)
        counts = {}
        for model in TENANT_TABLES:
            counts[model.__tablename__] = self.session.query(model).filter(
                model.organization_id == organization.id
            ).delete(synchronize_session=False)
        self.session.query(Organization).filter(
            Organization.id == organization.id
        ).delete(synchronize_session=False)
        self.session.flush()
        logger.info(f"Deleted organization {org_id} with cascade {counts}")
        return counts
