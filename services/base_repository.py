"""
Base repository with organization-scoped lookups and wire-shaped writes.
"""

import logging
from typing import Dict, Optional, Type

from sqlalchemy.orm import Session

from database.connection import Base
from services.errors import NotFoundError, TenantBoundaryError
from validators import ValidationError, ensure_valid

logger = logging.getLogger(__name__)


class ScopedRepository:
    """
    Repository bound to a session and, optionally, one organization.

    When organization_id is set every id lookup is restricted to that
    organization; a record of another tenant is reported as not found.
    """

    def __init__(self, session: Session, organization_id: str = None):
        self.session = session
        self.organization_id = organization_id

    def _query(self, model: Type[Base]):
        query = self.session.query(model)
        if self.organization_id:
            query = query.filter(model.organization_id == self.organization_id)
        return query

    def _find(self, model: Type[Base], record_id: str):
        if not record_id:
            return None
        return self._query(model).filter(model.id == record_id).first()

    def _require(self, model: Type[Base], record_id: str, resource: str):
        record = self._find(model, record_id)
        if record is None:
            raise NotFoundError(resource, record_id)
        return record

    def _claim(self, model: Type[Base], record_id: str, organization_id: str):
        """
        Existing row for a client-supplied id, or None when the id is free.

        Ids are global primary keys, so a row owned by another organization
        is a tenant boundary crossing rather than a record to overwrite.
        """
        if not record_id:
            return None
        record = self.session.get(model, record_id)
        if record is not None and record.organization_id != organization_id:
            logger.warning(f"Rejected write to {model.__tablename__} {record_id} from {organization_id}")
            raise TenantBoundaryError(f"Id '{record_id}' belongs to another organization")
        return record

    def _organization_for_create(self, data: Dict) -> str:
        """Resolve the owning organization of a new record."""
        body_org = data.get('organizationId')
        if self.organization_id and body_org and body_org != self.organization_id:
            raise TenantBoundaryError(
                f"Record for organization '{body_org}' submitted under '{self.organization_id}'"
            )
        org_id = self.organization_id or body_org
        if not org_id:
            raise ValidationError("organizationId is required", field='organizationId')
        return org_id

    def _upsert(self, model: Type[Base], data: Dict, validator=None,
                defaults: Optional[Dict] = None):
        """
        Insert a record with a caller-supplied id, or replace it when the id exists.

        Retrying a create with the same id therefore never duplicates the row.
        """
        if validator is not None:
            ensure_valid(validator(data))

        org_id = self._organization_for_create(data)
        record = self._claim(model, data['id'], org_id)
        if record is None:
            record = model(id=data['id'], organization_id=org_id)
            for attr, value in (defaults or {}).items():
                setattr(record, attr, value)
            self.session.add(record)
        record.apply_wire(data)
        return record

    def _replace(self, model: Type[Base], data: Dict, resource: str, validator=None):
        """Full-object replace of an existing record."""
        if validator is not None:
            ensure_valid(validator(data))
        record = self._require(model, data.get('id'), resource)
        record.apply_wire(data)
        return record

    def _delete(self, model: Type[Base], record_id: str, resource: str) -> None:
        record = self._require(model, record_id, resource)
        self.session.delete(record)
        logger.info(f"Deleted {resource.lower()}: {record_id}")
