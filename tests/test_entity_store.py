"""
Tests for the client-side entity store
"""
import threading
from unittest.mock import patch
import pytest
from services.entity_store import DELETE, UPSERT, EntityStore, build_state
from services.errors import NotFoundError
from validators import ValidationError


@pytest.fixture
def store(two_tenant_snapshot):
    entity_store = EntityStore()
    entity_store.load(two_tenant_snapshot)
    return entity_store


@pytest.mark.unit
class TestLoad:
    """Tests for loading snapshots"""

    def test_load_sets_identity(self, store):
        assert store.current_user['id'] == 'u1'
        assert store.current_organization['id'] == 'org1'

    def test_tasks_are_nested_in_projects(self, store):
        project = store.get_project('p1')
        assert [t['id'] for t in project['tasks']] == ['t1', 't2']

    def test_project_updates_are_nested(self, store):
        assert [u['id'] for u in store.get_project('p1')['updates']] == ['pu1']

    def test_list_fields_are_decoded(self, store):
        task = store.find_task('t1')
        assert task['attachments'] == []
        assert task['completionImages'] == []
        assert task['comments'][0]['images'] == []
        assert task['comments'][0]['taskId'] == 't1'

    def test_meeting_attendees_are_lists(self, store):
        attendees = {m['id']: m['attendees'] for m in store.meetings()}
        assert attendees['m2'] == ['u1']
        assert attendees['m1'] == ['u1', 'u2']

    def test_meetings_sorted_by_date_then_time(self, store):
        assert [m['id'] for m in store.meetings()] == ['rm1', 'm1', 'm2']

    def test_reminders_sorted_by_date(self, store):
        assert [r['id'] for r in store.reminders()] == ['r-soon', 'r-late']

    def test_task_with_unknown_project_rejects_snapshot(self, store, two_tenant_snapshot):
        revision = store.revision
        two_tenant_snapshot['tasks'].append({'id': 'tx', 'projectId': 'missing', 'title': 'Ghost'})

        with pytest.raises(ValidationError):
            store.load(two_tenant_snapshot)

        assert store.revision == revision
        assert store.find_task('t1') is not None

    def test_record_without_organization_rejects_snapshot(self, two_tenant_snapshot):
        two_tenant_snapshot['invoices'].append({'id': 'i-orphan', 'type': 'sent', 'amount': 1})
        with pytest.raises(ValidationError):
            build_state(two_tenant_snapshot)

    def test_collection_must_be_a_list(self, two_tenant_snapshot):
        two_tenant_snapshot['meetings'] = {'id': 'm1'}
        with pytest.raises(ValidationError):
            build_state(two_tenant_snapshot)


@pytest.mark.unit
class TestApply:
    """Tests for applying operation batches"""

    def test_upsert_inserts_and_replaces(self, store):
        store.apply([(UPSERT, 'reminder', {'id': 'r-new', 'organizationId': 'org1',
                                           'title': 'Book crane', 'date': '2026-03-03'})])
        store.apply([(UPSERT, 'reminder', {'id': 'r-new', 'organizationId': 'org1',
                                           'title': 'Book crane (50t)', 'date': '2026-03-03'})])

        titles = [r['title'] for r in store.reminders() if r['id'] == 'r-new']
        assert titles == ['Book crane (50t)']

    def test_invoices_are_prepended(self, store):
        store.apply([(UPSERT, 'invoice', {'id': 'i-new', 'organizationId': 'org1',
                                          'type': 'sent', 'amount': 10})])
        assert store.invoices()[0]['id'] == 'i-new'

    def test_notifications_are_prepended(self, store):
        store.apply([(UPSERT, 'notification', {'id': 'n-new', 'organizationId': 'org1',
                                               'userId': 'u1', 'message': 'Hi'})])
        assert store.notifications()[0]['id'] == 'n-new'

    def test_projects_are_appended(self, store):
        store.apply([(UPSERT, 'project', {'id': 'p-new', 'organizationId': 'org1', 'name': 'Shed'})])
        assert store.projects()[-1]['id'] == 'p-new'

    def test_project_upsert_keeps_tasks_when_absent(self, store):
        store.apply([(UPSERT, 'project', {'id': 'p1', 'organizationId': 'org1', 'name': 'Renamed'})])
        project = store.get_project('p1')
        assert project['name'] == 'Renamed'
        assert len(project['tasks']) == 2
        assert len(project['updates']) == 1

    def test_task_upsert_keeps_comments_when_absent(self, store):
        store.apply([(UPSERT, 'task', {'id': 't1', 'projectId': 'p1', 'organizationId': 'org1',
                                       'title': 'Install Kitchen Frames v2', 'status': 'pending'})])
        task = store.find_task('t1')
        assert task['title'] == 'Install Kitchen Frames v2'
        assert [c['id'] for c in task['comments']] == ['c1']

    def test_task_can_move_between_projects(self, store):
        store.apply([(UPSERT, 'task', {'id': 't2', 'projectId': 'p2', 'organizationId': 'org1',
                                       'title': 'Electrical Wiring'})])
        assert [t['id'] for t in store.get_project('p1')['tasks']] == ['t1']
        assert [t['id'] for t in store.get_project('p2')['tasks']] == ['t2']

    def test_task_for_missing_project_fails(self, store):
        with pytest.raises(NotFoundError):
            store.apply([(UPSERT, 'task', {'id': 'tx', 'projectId': 'nope', 'title': 'x'})])

    def test_failed_batch_changes_nothing(self, store):
        revision = store.revision
        with pytest.raises(NotFoundError):
            store.apply([
                (DELETE, 'task', 't1'),
                (DELETE, 'meeting', 'does-not-exist'),
            ])
        assert store.find_task('t1') is not None
        assert store.revision == revision

    def test_delete_nested_comment(self, store):
        store.apply([(DELETE, 'comment', 'c1')])
        assert store.find_task('t1')['comments'] == []

    def test_unknown_kind_rejected(self, store):
        with pytest.raises(ValidationError):
            store.apply([(UPSERT, 'invoice_line', {'id': 'x'})])

    def test_unknown_operation_rejected(self, store):
        with pytest.raises(ValidationError):
            store.apply([('patch', 'meeting', {'id': 'm1'})])

    def test_upserting_current_user_refreshes_identity(self, store):
        user = store.get_user('u1')
        user['name'] = 'John B. Builder'
        store.apply([(UPSERT, 'user', user)])
        assert store.current_user['name'] == 'John B. Builder'

    def test_readers_get_copies(self, store):
        project = store.get_project('p1')
        project['tasks'].clear()
        store.projects()[0]['name'] = 'mutated'
        assert len(store.get_project('p1')['tasks']) == 2
        assert store.get_project('p1')['name'] == 'Modern Villa Renovation'

    def test_concurrent_applies_are_all_kept(self, store):
        def add(index):
            store.apply([(UPSERT, 'other_matter', {'id': f'om-{index}', 'organizationId': 'org1',
                                                   'title': f'Note {index}'})])

        threads = [threading.Thread(target=add, args=(i,)) for i in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(store.other_matters()) == 21


@pytest.mark.unit
class TestRefreshOverlay:
    """Tests for replaying local changes over a fresh snapshot"""

    def test_changes_after_mark_survive_reload(self, store, two_tenant_snapshot):
        as_of = store.mark()
        store.apply([(UPSERT, 'other_matter', {'id': 'om-local', 'organizationId': 'org1',
                                               'title': 'Added during refresh'})])

        store.load(two_tenant_snapshot, as_of=as_of)

        assert 'om-local' in [m['id'] for m in store.other_matters()]

    def test_changes_before_mark_are_not_replayed(self, store, two_tenant_snapshot):
        store.apply([(DELETE, 'other_matter', 'om1')])
        as_of = store.mark()

        store.load(two_tenant_snapshot, as_of=as_of)

        assert 'om1' in [m['id'] for m in store.other_matters()]

    def test_replay_skips_missing_targets(self, store, two_tenant_snapshot):
        as_of = store.mark()
        store.apply([(DELETE, 'meeting', 'm1')])
        two_tenant_snapshot['meetings'] = [m for m in two_tenant_snapshot['meetings'] if m['id'] != 'm1']

        store.load(two_tenant_snapshot, as_of=as_of)

        assert 'm1' not in [m['id'] for m in store.meetings()]

    def test_failed_replay_keeps_journal(self, store, two_tenant_snapshot):
        as_of = store.mark()
        store.apply([(UPSERT, 'other_matter', {'id': 'om-local', 'organizationId': 'org1',
                                               'title': 'Added during refresh'})])
        revision = store.revision

        with patch.object(store, '_run_ops', side_effect=ValidationError("Replay failed")):
            with pytest.raises(ValidationError):
                store.load(two_tenant_snapshot, as_of=as_of)
        assert store.revision == revision

        store.load(two_tenant_snapshot, as_of=as_of)
        assert 'om-local' in [m['id'] for m in store.other_matters()]

    def test_plain_load_discards_journal(self, store, two_tenant_snapshot):
        store.apply([(UPSERT, 'other_matter', {'id': 'om-local', 'organizationId': 'org1',
                                               'title': 'Local'})])
        store.load(two_tenant_snapshot)
        assert 'om-local' not in [m['id'] for m in store.other_matters()]


@pytest.mark.unit
class TestIdentity:
    """Tests for identity management"""

    def test_clear_forgets_identity_but_keeps_data(self, store):
        store.clear()
        assert store.current_user is None
        assert store.current_organization is None
        assert store.projects()

    def test_reset_empties_everything(self, store):
        store.reset()
        assert store.projects() == []
        assert store.current_user is None

    def test_identity_resolves_organization_from_collection(self, store):
        store.set_identity(store.get_user('r1'))
        assert store.current_organization['name'] == 'Rival Builds'

    def test_find_user_by_email(self, store):
        assert store.find_user_by_email('mike@buildpro.com')['id'] == 'u2'
        assert store.find_user_by_email('nobody@example.com') is None
