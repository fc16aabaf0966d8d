"""
Tests for task lifecycle rules and completion notifications
"""
import pytest
from services import task_rules
from services.notification_service import build_task_completion_notification, should_notify_creator
from validators import ValidationError


@pytest.fixture
def open_task():
    return {
        'id': 't1', 'projectId': 'p1', 'title': 'Install Kitchen Frames', 'status': 'in-progress',
        'createdBy': 'u1', 'completedAt': None, 'completionImages': [], 'attachments': [],
    }


@pytest.mark.unit
class TestComplete:
    """Tests for completion reports"""

    def test_complete_sets_report(self, open_task):
        done = task_rules.complete(open_task, 'u2', note='Done', image='img-1',
                                   now='2026-03-02T10:00:00.000Z')
        assert done['status'] == 'completed'
        assert done['completedAt'] == '2026-03-02T10:00:00.000Z'
        assert done['completedBy'] == 'u2'
        assert done['completionNote'] == 'Done'
        assert done['completionImages'] == ['img-1']

    def test_first_image_becomes_cover(self, open_task):
        done = task_rules.complete(open_task, 'u2', images=['a', 'b'])
        assert done['completionImage'] == 'a'

    def test_recomplete_keeps_completed_at(self, open_task):
        first = task_rules.complete(open_task, 'u2', now='2026-03-02T10:00:00.000Z')
        second = task_rules.complete(first, 'u3', note='Fixed', now='2026-03-04T10:00:00.000Z')
        assert second['completedAt'] == '2026-03-02T10:00:00.000Z'
        assert second['completedBy'] == 'u3'
        assert second['completionNote'] == 'Fixed'

    def test_input_is_not_mutated(self, open_task):
        task_rules.complete(open_task, 'u2')
        assert open_task['status'] == 'in-progress'


@pytest.mark.unit
class TestReopen:
    """Tests for reopening"""

    def test_reopen_erases_report(self, open_task):
        done = task_rules.complete(open_task, 'u2', note='Done', image='img')
        reopened = task_rules.reopen(done)
        assert reopened['status'] == 'pending'
        for field in task_rules.COMPLETION_FIELDS:
            assert reopened[field] is None
        assert reopened['completionImages'] == []


@pytest.mark.unit
class TestNormalize:
    """Tests for full task replacement"""

    def test_completed_without_timestamp_gets_one(self, open_task):
        task = task_rules.normalize(dict(open_task, status='completed'), now='2026-03-02T00:00:00.000Z')
        assert task['completedAt'] == '2026-03-02T00:00:00.000Z'

    def test_open_task_drops_report(self, open_task):
        task = task_rules.normalize(dict(open_task, status='pending', completionNote='stale',
                                         completedAt='2026-03-01'))
        assert task['completionNote'] is None
        assert task['completedAt'] is None

    def test_missing_status_defaults_to_pending(self, open_task):
        assert task_rules.normalize(dict(open_task, status=None))['status'] == 'pending'

    def test_invalid_status_rejected(self, open_task):
        with pytest.raises(ValidationError):
            task_rules.normalize(dict(open_task, status='done'))

    def test_list_fields_are_lists(self, open_task):
        task = task_rules.normalize(dict(open_task, attachments='["plan.pdf"]', completionImages=None))
        assert task['attachments'] == ['plan.pdf']
        assert task['completionImages'] == []


@pytest.mark.unit
class TestCompletionNotification:
    """Tests for creator notifications"""

    def test_someone_else_completing_notifies_creator(self):
        assert should_notify_creator('u1', 'u2') is True

    def test_creator_completing_own_task_is_silent(self):
        assert should_notify_creator('u1', 'u1') is False

    def test_task_without_creator_is_silent(self):
        assert should_notify_creator(None, 'u2') is False

    def test_notification_shape(self, open_task):
        notification = build_task_completion_notification(
            open_task, 'Modern Villa Renovation', 'u2', 'org1', note='Done', image='img',
            notification_id='n9', date='2026-03-02T00:00:00.000Z'
        )
        assert notification['id'] == 'n9'
        assert notification['userId'] == 'u1'
        assert notification['organizationId'] == 'org1'
        assert notification['read'] is False
        assert notification['type'] == 'task_completed'
        assert 'Install Kitchen Frames' in notification['message']
        assert 'Modern Villa Renovation' in notification['message']
        assert notification['data'] == {'taskId': 't1', 'note': 'Done', 'image': 'img'}

    def test_suppressed_notification_is_none(self, open_task):
        assert build_task_completion_notification(open_task, 'P', 'u1', 'org1') is None
