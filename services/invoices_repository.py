"""
Invoices Repository - Database operations for invoices.

Writes go through the schema guard: databases created before invoices had an
attachment_url column get it added on first use.
"""

import logging
from typing import Dict, List

from database.models import Invoice
from services.base_repository import ScopedRepository
from services.schema_guard import with_column_repair
from validators import (
    INVOICE_STATUSES, ensure_valid, validate_choice, validate_invoice_request
)

logger = logging.getLogger(__name__)

ATTACHMENT_COLUMN = 'attachment_url'


class InvoicesRepository(ScopedRepository):
    """Repository for invoice database operations."""

    def _guarded(self, operation):
        return with_column_repair(self.session, Invoice.__tablename__, ATTACHMENT_COLUMN, operation)

    def list_invoices(self) -> List[Dict]:
        """List invoices, newest issue date first."""
        def operation():
            invoices = self._query(Invoice).order_by(Invoice.date.desc(), Invoice.id).all()
            return [i.to_dict() for i in invoices]
        return self._guarded(operation)

    def create_invoice(self, data: Dict) -> Dict:
        """Create an invoice (or replace it when retried with the same id)."""
        ensure_valid(validate_invoice_request(data))

        def operation():
            invoice = self._upsert(Invoice, data, defaults={'status': 'pending'})
            self.session.flush()
            return invoice.to_dict()

        result = self._guarded(operation)
        logger.info(f"Created invoice: {result['id']}")
        return result

    def update_invoice(self, data: Dict) -> Dict:
        """Full replace of an invoice by id."""
        ensure_valid(validate_invoice_request(data))

        def operation():
            invoice = self._replace(Invoice, data, 'Invoice')
            self.session.flush()
            return invoice.to_dict()

        result = self._guarded(operation)
        logger.info(f"Updated invoice: {result['id']}")
        return result

    def update_status(self, invoice_id: str, status: str) -> Dict:
        """Move an invoice to any status; transitions are unconstrained."""
        ensure_valid(validate_choice(status, INVOICE_STATUSES), field='status')

        def operation():
            invoice = self._require(Invoice, invoice_id, 'Invoice')
            invoice.status = status
            self.session.flush()
            return invoice.to_dict()

        return self._guarded(operation)

    def delete_invoice(self, invoice_id: str) -> None:
        """Delete an invoice."""
        self._guarded(lambda: self._delete(Invoice, invoice_id, 'Invoice'))
