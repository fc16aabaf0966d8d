"""
Tests for the invoice attachment column repair
"""
import pytest
from unittest.mock import MagicMock, patch
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from services.schema_guard import is_missing_column_error, with_column_repair

LEGACY_INVOICES_DDL = """
CREATE TABLE invoices (
    id VARCHAR(64) PRIMARY KEY,
    organization_id VARCHAR(64) NOT NULL,
    type VARCHAR(20) NOT NULL,
    amount FLOAT NOT NULL,
    client_name VARCHAR(255),
    due_date VARCHAR(32),
    status VARCHAR(20),
    date VARCHAR(32),
    description TEXT,
    project_id VARCHAR(64),
    created_by VARCHAR(64)
)
"""


def db_error(message):
    return OperationalError('INSERT INTO invoices ...', {}, Exception(message))


@pytest.fixture
def legacy_invoices(demo_tenant):
    """Replace the invoices table with one created before attachments existed"""
    from database.connection import get_engine

    with get_engine().begin() as conn:
        conn.execute(text('DROP TABLE invoices'))
        conn.execute(text(LEGACY_INVOICES_DDL))
    return demo_tenant


def has_attachment_column():
    from database.connection import get_db_session
    from services.schema_guard import column_exists

    with get_db_session() as session:
        return column_exists(session, 'invoices', 'attachment_url')


@pytest.mark.unit
class TestIsMissingColumnError:
    """Tests for recognizing missing-column errors"""

    @pytest.mark.parametrize('message', [
        'table invoices has no column named attachment_url',
        'no such column: invoices.attachment_url',
        'column "attachment_url" of relation "invoices" does not exist',
        'column invoices.attachment_url does not exist',
        "Unknown column 'attachment_url' in 'field list'",
    ])
    def test_recognized(self, message):
        assert is_missing_column_error(db_error(message), 'attachment_url') is True

    def test_other_column_is_not_matched(self):
        error = db_error('table invoices has no column named due_date')
        assert is_missing_column_error(error, 'attachment_url') is False

    def test_unrelated_error(self):
        assert is_missing_column_error(db_error('database is locked'), 'attachment_url') is False


@pytest.mark.unit
class TestWithColumnRepair:
    """Tests for the repair-and-retry wrapper"""

    def test_success_runs_once(self):
        session = MagicMock()
        operation = MagicMock(return_value='ok')

        assert with_column_repair(session, 'invoices', 'attachment_url', operation) == 'ok'
        operation.assert_called_once()
        session.rollback.assert_not_called()

    def test_missing_column_is_added_and_retried(self):
        session = MagicMock()
        operation = MagicMock(side_effect=[db_error('no such column: invoices.attachment_url'), 'ok'])

        with patch('services.schema_guard.add_column') as mock_add:
            result = with_column_repair(session, 'invoices', 'attachment_url', operation)

        assert result == 'ok'
        assert operation.call_count == 2
        session.rollback.assert_called_once()
        mock_add.assert_called_once_with(session, 'invoices', 'attachment_url', 'TEXT')

    def test_failed_retry_propagates(self):
        session = MagicMock()
        error = db_error('no such column: invoices.attachment_url')
        operation = MagicMock(side_effect=[error, error])

        with patch('services.schema_guard.add_column') as mock_add:
            with pytest.raises(OperationalError):
                with_column_repair(session, 'invoices', 'attachment_url', operation)

        mock_add.assert_called_once()
        assert operation.call_count == 2

    def test_other_errors_are_not_repaired(self):
        session = MagicMock()
        operation = MagicMock(side_effect=db_error('database is locked'))

        with patch('services.schema_guard.add_column') as mock_add:
            with pytest.raises(OperationalError):
                with_column_repair(session, 'invoices', 'attachment_url', operation)

        mock_add.assert_not_called()
        operation.assert_called_once()


@pytest.mark.integration
class TestLegacyDatabase:
    """Tests against an invoices table lacking attachment_url"""

    def test_repository_create_repairs_schema(self, legacy_invoices):
        from database.connection import get_db_session
        from services.invoices_repository import InvoicesRepository

        assert has_attachment_column() is False

        with get_db_session() as session:
            invoice = InvoicesRepository(session, 'org1').create_invoice({
                'id': 'i-legacy', 'type': 'sent', 'amount': 150,
                'attachmentUrl': 'data:application/pdf;base64,JVBE',
            })

        assert invoice['attachmentUrl'] == 'data:application/pdf;base64,JVBE'
        assert has_attachment_column() is True

    def test_gateway_create_succeeds(self, client, legacy_invoices):
        response = client.post('/api/invoice', headers={'X-Organization-Id': 'org1'}, json={
            'id': 'i-legacy', 'type': 'received', 'amount': 80, 'attachmentUrl': 'receipt.pdf',
        })

        assert response.status_code == 201
        data = client.get('/api/data', query_string={'email': 'john@buildpro.com'}).get_json()
        assert [i['attachmentUrl'] for i in data['invoices']] == ['receipt.pdf']

    def test_snapshot_read_repairs_schema(self, client, legacy_invoices):
        response = client.get('/api/data', query_string={'email': 'john@buildpro.com'})

        assert response.status_code == 200
        assert response.get_json()['invoices'] == []
        assert has_attachment_column() is True

    def test_cli_repair(self, app, legacy_invoices):
        runner = app.test_cli_runner()

        first = runner.invoke(args=['repair-invoices'])
        second = runner.invoke(args=['repair-invoices'])

        assert 'Added invoices.attachment_url' in first.output
        assert 'already present' in second.output
        assert has_attachment_column() is True
