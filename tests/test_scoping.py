"""
Tests for organization scoping
"""
import pytest
from services.entity_store import UPSERT, EntityStore
from services.errors import ConfigurationError, TenantBoundaryError
from services.scoping import ensure_in_scope, my_notifications, scope, unread_count


@pytest.fixture
def store(two_tenant_snapshot):
    entity_store = EntityStore()
    entity_store.load(two_tenant_snapshot)
    return entity_store


@pytest.mark.unit
class TestScope:
    """Tests for the tenant-filtered view"""

    def test_only_own_records_are_visible(self, store):
        view = scope(store)
        assert view.organization['id'] == 'org1'
        assert [p['id'] for p in view.projects] == ['p1', 'p2']
        assert {u['id'] for u in view.users} == {'u1', 'u2', 'u_admin'}
        assert [i['id'] for i in view.invoices] == ['i1']
        assert [m['id'] for m in view.meetings] == ['m1', 'm2']
        assert [n['id'] for n in view.notifications] == ['n1']

    def test_tasks_are_flattened_from_projects(self, store):
        assert [t['id'] for t in scope(store).tasks] == ['t1', 't2']

    def test_no_organization_means_empty_view(self, store):
        store.clear()
        view = scope(store)
        assert view.organization is None
        assert view.projects == []
        assert view.tasks == []
        assert view.users == []

    def test_switching_identity_switches_view(self, store):
        store.set_identity(store.get_user('r1'))
        view = scope(store)
        assert [p['id'] for p in view.projects] == ['rp1']
        assert [t['id'] for t in view.tasks] == ['rt1']
        assert [i['id'] for i in view.invoices] == ['ri1']

    def test_foreign_task_inside_own_project_is_hidden(self, store):
        store.apply([(UPSERT, 'task', {'id': 'leak', 'projectId': 'p1', 'organizationId': 'org2',
                                       'title': 'Foreign'})])
        assert 'leak' not in [t['id'] for t in scope(store).tasks]

    def test_view_is_a_copy(self, store):
        scope(store).projects[0]['name'] = 'mutated'
        assert store.get_project('p1')['name'] == 'Modern Villa Renovation'


@pytest.mark.unit
class TestEnsureInScope:
    """Tests for the tenant boundary check"""

    def test_own_record_passes(self, store):
        record = store.get_project('p1')
        assert ensure_in_scope(store, record) is record

    def test_foreign_record_raises(self, store):
        with pytest.raises(TenantBoundaryError):
            ensure_in_scope(store, store.get_project('rp1'))

    def test_no_organization_raises_configuration_error(self, store):
        store.clear()
        with pytest.raises(ConfigurationError):
            ensure_in_scope(store, store.get_project('p1'))


@pytest.mark.unit
class TestNotificationsView:
    """Tests for per-user notification reads"""

    def test_newest_first(self, store):
        store.apply([(UPSERT, 'notification', {'id': 'n-old', 'organizationId': 'org1', 'userId': 'u1',
                                               'message': 'Old', 'date': '2026-01-01T00:00:00Z'})])
        ids = [n['id'] for n in my_notifications(scope(store), 'u1')]
        assert ids == ['n1', 'n-old']

    def test_only_addressed_user(self, store):
        assert my_notifications(scope(store), 'u2') == []

    def test_unread_count(self, store):
        store.apply([(UPSERT, 'notification', {'id': 'n-read', 'organizationId': 'org1', 'userId': 'u1',
                                               'message': 'Seen', 'read': True,
                                               'date': '2026-03-03T00:00:00Z'})])
        assert unread_count(scope(store), 'u1') == 1
