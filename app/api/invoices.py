"""
Invoice Routes Blueprint

- POST   /api/invoice: create an invoice
- POST   /api/invoice/update: replace an invoice
- POST   /api/invoice/status: move an invoice to another status
- DELETE /api/invoice: delete an invoice

Databases created before invoices carried attachment_url get the column added
on first write (see services.schema_guard).
"""

import logging
from flask import Blueprint

from app.api.common import json_body, request_org_id, require_field, success

logger = logging.getLogger(__name__)

invoices_bp = Blueprint('invoices_bp', __name__)


@invoices_bp.route('/invoice', methods=['POST'])
def create_invoice():
    from database.connection import get_db_session
    from services.invoices_repository import InvoicesRepository

    data = json_body()
    with get_db_session() as session:
        invoice = InvoicesRepository(session, request_org_id(data)).create_invoice(data)
    return success(201, id=invoice['id'], invoice=invoice)


@invoices_bp.route('/invoice/update', methods=['POST'])
def update_invoice():
    from database.connection import get_db_session
    from services.invoices_repository import InvoicesRepository

    data = json_body()
    with get_db_session() as session:
        invoice = InvoicesRepository(session, request_org_id(data)).update_invoice(data)
    return success(invoice=invoice)


@invoices_bp.route('/invoice/status', methods=['POST'])
def update_invoice_status():
    from database.connection import get_db_session
    from services.invoices_repository import InvoicesRepository

    data = json_body()
    invoice_id = require_field(data, 'id')
    with get_db_session() as session:
        invoice = InvoicesRepository(session, request_org_id(data)).update_status(
            invoice_id, data.get('status')
        )
    return success(invoice=invoice)


@invoices_bp.route('/invoice', methods=['DELETE'])
def delete_invoice():
    from database.connection import get_db_session
    from services.invoices_repository import InvoicesRepository

    data = json_body()
    invoice_id = require_field(data, 'id')
    with get_db_session() as session:
        InvoicesRepository(session, request_org_id(data)).delete_invoice(invoice_id)
    return success()
