"""
Pytest configuration and shared fixtures
"""
import os
import sys
from json import loads
import pytest
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

GATEWAY_HOST = 'http://gateway.test'


@pytest.fixture
def app_config():
    """Fixture providing test configuration"""
    from config import TestingConfig
    return TestingConfig


@pytest.fixture
def test_env_vars():
    """Fixture providing test environment variables"""
    original_env = os.environ.copy()

    # Set test environment variables
    os.environ['FLASK_ENV'] = 'testing'
    os.environ['SECRET_KEY'] = 'k7Qz2r9Xw4Lm8Np3Vb6Ty1Hc5Jd0Fg2Sa9Ue4Io7Pq'
    os.environ['DATABASE_URL'] = 'sqlite://'

    yield

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def app(app_config):
    """Gateway app bound to a fresh in-memory database"""
    from app_init import create_app
    from database.connection import drop_db

    flask_app = create_app(app_config)
    yield flask_app
    drop_db()


@pytest.fixture
def client(app):
    """Create a test client"""
    return app.test_client()


@pytest.fixture
def db_session(app):
    """A raw session on the test database, rolled back afterwards"""
    from database.connection import get_session_factory

    session = get_session_factory()()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def demo_tenant(app):
    """BuildPro demo organization (org1) with users u1..u4 and u_admin"""
    from database.connection import get_db_session
    from database.seed import seed_demo_data

    with get_db_session() as session:
        seed_demo_data(session)
    return 'org1'


@pytest.fixture
def rival_tenant(client):
    """A second organization created through signup; returns (org_id, user_id)"""
    response = client.post('/api/signup', json={
        'name': 'Rita Rival',
        'email': 'rita@rival.com',
        'company': 'Rival Builds',
    })
    assert response.status_code == 201
    body = response.get_json()
    return body['orgId'], body['userId']


class GatewayResponse:
    """The subset of requests.Response that SyncClient reads"""

    def __init__(self, response):
        self.status_code = response.status_code
        self.reason = response.status.split(' ', 1)[1] if ' ' in response.status else ''
        self.text = response.get_data(as_text=True)

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return loads(self.text)


class GatewaySession:
    """Stands in for requests.Session by routing calls into the Flask test client"""

    def __init__(self, test_client, host=GATEWAY_HOST):
        self.test_client = test_client
        self.host = host
        self.calls = []

    def request(self, method, url, json=None, params=None, headers=None, timeout=None):
        path = url[len(self.host):]
        self.calls.append((method, path))
        response = self.test_client.open(
            path, method=method, json=json, query_string=params, headers=headers
        )
        return GatewayResponse(response)


@pytest.fixture
def gateway_session(client):
    return GatewaySession(client)


@pytest.fixture
def sync_client(gateway_session):
    """SyncClient talking to the in-process gateway"""
    from services.sync_client import SyncClient
    return SyncClient(f'{GATEWAY_HOST}/api', session=gateway_session)


@pytest.fixture
def new_layer(client):
    """Factory for a signed-out ActionLayer with its own store and gateway session"""
    from services.actions import ActionLayer
    from services.entity_store import EntityStore
    from services.sync_client import SyncClient

    def build():
        session = GatewaySession(client)
        return ActionLayer(EntityStore(), SyncClient(f'{GATEWAY_HOST}/api', session=session)), session

    return build


@pytest.fixture
def make_layer(new_layer):
    """Factory for a signed-in ActionLayer with its own store and gateway session"""
    def build(email):
        layer, session = new_layer()
        layer.login(email)
        return layer, session

    return build


@pytest.fixture
def two_tenant_snapshot():
    """Client-side snapshot holding records of two organizations"""
    return {
        'user': {'id': 'u1', 'organizationId': 'org1', 'name': 'John Builder',
                 'email': 'john@buildpro.com', 'role': 'builder', 'isAdmin': True},
        'organization': {'id': 'org1', 'name': 'BuildPro Constructions'},
        'organizations': [
            {'id': 'org1', 'name': 'BuildPro Constructions', 'status': 'active'},
            {'id': 'org2', 'name': 'Rival Builds', 'status': 'active'},
        ],
        'users': [
            {'id': 'u1', 'organizationId': 'org1', 'name': 'John Builder',
             'email': 'john@buildpro.com', 'role': 'builder', 'isAdmin': True},
            {'id': 'u2', 'organizationId': 'org1', 'name': 'Mike Carpenter',
             'email': 'mike@buildpro.com', 'role': 'worker', 'isAdmin': False},
            {'id': 'u_admin', 'organizationId': 'org1', 'name': 'Super Admin',
             'email': 'me@example.com', 'role': 'builder', 'isAdmin': True, 'isSuperAdmin': True},
            {'id': 'r1', 'organizationId': 'org2', 'name': 'Rita Rival',
             'email': 'rita@rival.com', 'role': 'builder', 'isAdmin': True},
        ],
        'projects': [
            {'id': 'p1', 'organizationId': 'org1', 'name': 'Modern Villa Renovation',
             'status': 'active', 'progress': 35},
            {'id': 'p2', 'organizationId': 'org1', 'name': 'City Apartment Complex',
             'status': 'active', 'progress': 78},
            {'id': 'rp1', 'organizationId': 'org2', 'name': 'Rival Tower',
             'status': 'active', 'progress': 10},
        ],
        'tasks': [
            {'id': 't1', 'projectId': 'p1', 'organizationId': 'org1',
             'title': 'Install Kitchen Frames', 'status': 'pending',
             'assignedTo': 'u2', 'createdBy': 'u1', 'attachments': '[]',
             'comments': [{'id': 'c1', 'userId': 'u2', 'message': 'On it', 'images': '[]'}]},
            {'id': 't2', 'projectId': 'p1', 'organizationId': 'org1',
             'title': 'Electrical Wiring', 'status': 'in-progress', 'createdBy': 'u1'},
            {'id': 'rt1', 'projectId': 'rp1', 'organizationId': 'org2',
             'title': 'Pour slab', 'status': 'pending', 'createdBy': 'r1'},
        ],
        'projectUpdates': [
            {'id': 'pu1', 'projectId': 'p1', 'organizationId': 'org1',
             'message': 'Demolition finished', 'date': '2026-03-01T08:00:00Z',
             'authorName': 'John Builder', 'userId': 'u1'},
        ],
        'meetings': [
            {'id': 'm2', 'organizationId': 'org1', 'title': 'Client Briefing',
             'date': '2026-03-05', 'time': '14:00', 'projectId': 'p2', 'attendees': '["u1"]'},
            {'id': 'm1', 'organizationId': 'org1', 'title': 'Site Inspection',
             'date': '2026-03-05', 'time': '09:00', 'projectId': 'p1', 'attendees': ['u1', 'u2']},
            {'id': 'rm1', 'organizationId': 'org2', 'title': 'Rival meeting',
             'date': '2026-03-01', 'time': '10:00'},
        ],
        'invoices': [
            {'id': 'i1', 'organizationId': 'org1', 'type': 'sent', 'amount': 1200,
             'status': 'pending', 'projectId': 'p1', 'date': '2026-03-01'},
            {'id': 'ri1', 'organizationId': 'org2', 'type': 'received', 'amount': 50,
             'status': 'paid'},
        ],
        'notifications': [
            {'id': 'n1', 'organizationId': 'org1', 'userId': 'u1',
             'message': 'Dave completed "Final Plumbing Check"', 'read': False,
             'date': '2026-03-01T10:00:00Z', 'type': 'task_completed'},
            {'id': 'rn1', 'organizationId': 'org2', 'userId': 'r1',
             'message': 'Rival news', 'read': False, 'date': '2026-03-02T10:00:00Z'},
        ],
        'reminders': [
            {'id': 'r-late', 'organizationId': 'org1', 'title': 'Order timber', 'date': '2026-03-09'},
            {'id': 'r-soon', 'organizationId': 'org1', 'title': 'Call council', 'date': '2026-03-02'},
        ],
        'otherMatters': [
            {'id': 'om1', 'organizationId': 'org1', 'title': 'Skip bin', 'date': '2026-03-01'},
        ],
    }
