"""
Unit Tests for the Task Tracker.

This module covers the statistics aggregator (percentages, completion
time, per-priority pending buckets, clamping and bad input) and the task
API endpoints (CRUD, ownership, filtering, sorting and statistics).
"""

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase
from rest_framework import status
from datetime import datetime, timedelta, timezone as dt_timezone

from .models import Task, TaskStatus
from .serializers import StatsReportSerializer
from .stats import (
    InputDataError,
    PriorityBucket,
    StatsReport,
    TaskStatsAggregator,
    compute_stats,
    summarize_pending_time
)


NOW = datetime(2025, 1, 15, 12, 0, tzinfo=dt_timezone.utc)


def make_task(task_id=1, priority=3, status='Pending', start=None, end=None,
              actual_end=None, updated=None):
    start = start or NOW - timedelta(hours=1)
    return {
        'id': task_id,
        'title': f'Task {task_id}',
        'priority': priority,
        'status': status,
        'start_time': start,
        'end_time': end or start + timedelta(hours=5),
        'actual_end_time': actual_end,
        'updated_at': updated or NOW,
    }


class EmptyCollectionTests(TestCase):
    """Tests for statistics over no tasks at all."""

    def test_empty_collection_is_zero_filled(self):
        """No tasks should give a fully zero-valued report."""
        report = compute_stats([], NOW)

        self.assertEqual(report.total_tasks, 0)
        self.assertEqual(report.completed_percentage, 0)
        self.assertEqual(report.pending_percentage, 0)
        self.assertEqual(report.average_completion_time, 0)
        self.assertEqual(
            report.pending_time_stats,
            [PriorityBucket(priority=p) for p in range(1, 6)]
        )

    def test_empty_report_matches_default_report(self):
        self.assertEqual(compute_stats([], NOW), StatsReport())


class PercentageTests(TestCase):
    """Tests for completed/pending percentages."""

    def test_percentages_sum_to_hundred(self):
        """Completed and pending percentages should add up to 100."""
        tasks = [
            make_task(1, status='Finished', actual_end=NOW),
            make_task(2),
            make_task(3, priority=5),
        ]
        report = compute_stats(tasks, NOW)

        self.assertEqual(report.total_tasks, 3)
        self.assertAlmostEqual(report.completed_percentage, 100 / 3)
        self.assertAlmostEqual(report.pending_percentage, 200 / 3)
        self.assertAlmostEqual(
            report.completed_percentage + report.pending_percentage, 100.0
        )

    def test_percentages_within_bounds(self):
        """Percentages should stay between 0 and 100."""
        all_finished = [make_task(i, status='Finished', actual_end=NOW) for i in range(4)]
        report = compute_stats(all_finished, NOW)

        self.assertEqual(report.completed_percentage, 100)
        self.assertEqual(report.pending_percentage, 0)


class CompletionTimeTests(TestCase):
    """Tests for the average completion time of finished tasks."""

    def test_single_finished_task(self):
        """A task finished 3 hours after it started averages 3.0 hours."""
        start = NOW - timedelta(hours=10)
        task = make_task(status='Finished', start=start, actual_end=start + timedelta(hours=3))

        report = compute_stats([task], NOW)
        self.assertAlmostEqual(report.average_completion_time, 3.0)

    def test_falls_back_to_updated_at(self):
        """Without an actual end time, updated_at marks completion."""
        start = NOW - timedelta(hours=10)
        task = make_task(
            status='Finished', start=start, actual_end=None,
            updated=start + timedelta(hours=6)
        )

        report = compute_stats([task], NOW)
        self.assertAlmostEqual(report.average_completion_time, 6.0)

    def test_average_over_finished_only(self):
        """Pending tasks should not affect the completion average."""
        start = NOW - timedelta(hours=10)
        tasks = [
            make_task(1, status='Finished', start=start, actual_end=start + timedelta(hours=2)),
            make_task(2, status='Finished', start=start, actual_end=start + timedelta(hours=4)),
            make_task(3, start=NOW - timedelta(hours=100)),
        ]

        report = compute_stats(tasks, NOW)
        self.assertAlmostEqual(report.average_completion_time, 3.0)

    def test_negative_completion_time_not_clamped(self):
        """An actual end before the start feeds a negative value into the average."""
        start = NOW - timedelta(hours=10)
        task = make_task(status='Finished', start=start, actual_end=start - timedelta(hours=2))

        report = compute_stats([task], NOW)
        self.assertAlmostEqual(report.average_completion_time, -2.0)


class PendingBucketTests(TestCase):
    """Tests for the per-priority pending-time buckets."""

    def test_always_five_buckets_in_order(self):
        """Buckets should cover priorities 1-5 even if only one is used."""
        report = compute_stats([make_task(priority=4)], NOW)

        self.assertEqual(
            [b.priority for b in report.pending_time_stats],
            [1, 2, 3, 4, 5]
        )

    def test_single_pending_task(self):
        """Priority 3 task started 2h ago, due in 4h."""
        task = make_task(
            priority=3,
            start=NOW - timedelta(hours=2),
            end=NOW + timedelta(hours=4)
        )
        report = compute_stats([task], NOW)

        bucket = report.pending_time_stats[2]
        self.assertEqual(bucket.priority, 3)
        self.assertEqual(bucket.pending_count, 1)
        self.assertAlmostEqual(bucket.average_time_lapsed, 2.0)
        self.assertAlmostEqual(bucket.average_time_to_finish, 4.0)

        for other in report.pending_time_stats:
            if other.priority != 3:
                self.assertEqual(other, PriorityBucket(priority=other.priority))

    def test_past_due_task_clamped(self):
        """A task whose end time has passed has zero time left."""
        task = make_task(
            priority=1,
            start=NOW - timedelta(hours=8),
            end=NOW - timedelta(hours=3)
        )
        bucket = compute_stats([task], NOW).pending_time_stats[0]

        self.assertEqual(bucket.average_time_to_finish, 0)
        self.assertAlmostEqual(bucket.average_time_lapsed, 8.0)

    def test_future_start_clamped(self):
        """A task that has not started yet has zero time lapsed."""
        task = make_task(
            priority=2,
            start=NOW + timedelta(hours=5),
            end=NOW + timedelta(hours=7)
        )
        bucket = compute_stats([task], NOW).pending_time_stats[1]

        self.assertEqual(bucket.average_time_lapsed, 0)
        self.assertAlmostEqual(bucket.average_time_to_finish, 7.0)

    def test_bucket_averages_multiple_tasks(self):
        """Clamping applies per task before averaging."""
        tasks = [
            make_task(1, priority=5, start=NOW - timedelta(hours=2), end=NOW + timedelta(hours=6)),
            make_task(2, priority=5, start=NOW - timedelta(hours=4), end=NOW - timedelta(hours=1)),
        ]
        bucket = compute_stats(tasks, NOW).pending_time_stats[4]

        self.assertEqual(bucket.pending_count, 2)
        self.assertAlmostEqual(bucket.average_time_lapsed, 3.0)
        self.assertAlmostEqual(bucket.average_time_to_finish, 3.0)

    def test_averages_never_negative(self):
        """Every bucket average should be non-negative."""
        tasks = [
            make_task(i, priority=(i % 5) + 1,
                      start=NOW + timedelta(hours=i - 5),
                      end=NOW + timedelta(hours=i - 8))
            for i in range(10)
        ]
        for bucket in compute_stats(tasks, NOW).pending_time_stats:
            self.assertGreaterEqual(bucket.average_time_lapsed, 0)
            self.assertGreaterEqual(bucket.average_time_to_finish, 0)

    def test_finished_tasks_not_bucketed(self):
        task = make_task(priority=2, status='Finished', actual_end=NOW)
        report = compute_stats([task], NOW)

        self.assertTrue(all(b.pending_count == 0 for b in report.pending_time_stats))


class IdempotenceTests(TestCase):

    def test_same_inputs_same_report(self):
        """Computing twice with the same inputs gives identical reports."""
        tasks = [
            make_task(1, status='Finished', actual_end=NOW),
            make_task(2, priority=1),
            make_task(3, priority=4, end=NOW - timedelta(hours=1)),
        ]
        aggregator = TaskStatsAggregator()

        self.assertEqual(
            aggregator.compute_stats(tasks, NOW),
            aggregator.compute_stats(tasks, NOW)
        )

    def test_tasks_not_mutated(self):
        task = make_task(priority=3)
        snapshot = dict(task)
        compute_stats([task], NOW)

        self.assertEqual(task, snapshot)


class InputDataErrorTests(TestCase):
    """Tests for malformed task records."""

    def test_missing_end_time(self):
        """A pending task without an end time cannot be aggregated."""
        task = make_task()
        task['end_time'] = None

        with self.assertRaises(InputDataError) as ctx:
            compute_stats([task], NOW)
        self.assertEqual(ctx.exception.field, 'end_time')
        self.assertEqual(ctx.exception.task_id, 1)

    def test_unparsable_timestamp(self):
        task = make_task()
        task['start_time'] = 'not a timestamp'

        with self.assertRaises(InputDataError):
            compute_stats([task], NOW)

    def test_invalid_calendar_date(self):
        task = make_task()
        task['start_time'] = '2025-13-45T00:00:00'

        with self.assertRaises(InputDataError):
            compute_stats([task], NOW)

    def test_iso_string_timestamps_accepted(self):
        """Timestamps given as ISO strings should be parsed."""
        task = make_task(priority=3)
        task['start_time'] = '2025-01-15T10:00:00Z'
        task['end_time'] = '2025-01-15T16:00:00+00:00'

        bucket = compute_stats([task], NOW).pending_time_stats[2]
        self.assertAlmostEqual(bucket.average_time_lapsed, 2.0)
        self.assertAlmostEqual(bucket.average_time_to_finish, 4.0)

    def test_naive_and_aware_mix(self):
        task = make_task(start=datetime(2025, 1, 15, 10, 0))

        with self.assertRaises(InputDataError):
            compute_stats([task], NOW)

    def test_priority_out_of_range(self):
        with self.assertRaises(InputDataError) as ctx:
            compute_stats([make_task(priority=7)], NOW)
        self.assertEqual(ctx.exception.field, 'priority')

    def test_error_dict(self):
        error = InputDataError('bad', task_id=5, field='start_time')
        self.assertEqual(error.to_dict(), {
            'error_code': 'ERR_INVALID_TASK_DATA',
            'message': 'bad',
            'field': 'start_time',
            'task_id': 5
        })


class DerivedTimeTests(TestCase):
    """Tests for total estimated time and the pending time summary."""

    def test_total_estimated_time(self):
        bucket = PriorityBucket(
            priority=2, pending_count=3,
            average_time_lapsed=2.0, average_time_to_finish=1.5
        )
        self.assertAlmostEqual(bucket.total_estimated_time, 10.5)

    def test_total_estimated_time_ignores_negative_remaining(self):
        bucket = PriorityBucket(
            priority=2, pending_count=2,
            average_time_lapsed=1.0, average_time_to_finish=-4.0
        )
        self.assertAlmostEqual(bucket.total_estimated_time, 2.0)

    def test_summary_totals(self):
        tasks = [
            make_task(1, priority=1, start=NOW - timedelta(hours=2), end=NOW + timedelta(hours=1)),
            make_task(2, priority=1, start=NOW - timedelta(hours=4), end=NOW + timedelta(hours=3)),
            make_task(3, priority=4, start=NOW - timedelta(hours=1), end=NOW + timedelta(hours=5)),
        ]
        summary = summarize_pending_time(compute_stats(tasks, NOW))

        self.assertAlmostEqual(summary.total_time_lapsed, 7.0)
        self.assertAlmostEqual(summary.total_time_remaining, 9.0)
        self.assertAlmostEqual(summary.total_estimated_time, 16.0)
        self.assertEqual([row['priority'] for row in summary.per_priority], [1, 2, 3, 4, 5])
        self.assertAlmostEqual(summary.per_priority[0]['total_estimated_time'], 10.0)
        self.assertAlmostEqual(summary.per_priority[3]['total_estimated_time'], 6.0)


class StatsSerializerTests(TestCase):

    def test_report_shape(self):
        """Serialized reports use camelCase keys and five buckets."""
        data = StatsReportSerializer(compute_stats([], NOW)).data

        self.assertEqual(
            set(data),
            {'totalTasks', 'completedPercentage', 'pendingPercentage',
             'averageCompletionTime', 'pendingTimeStats'}
        )
        self.assertEqual(len(data['pendingTimeStats']), 5)
        self.assertEqual(
            dict(data['pendingTimeStats'][0]),
            {'priority': 1, 'averageTimeLapsed': 0.0,
             'averageTimeToFinish': 0.0, 'pendingCount': 0}
        )


class TaskModelTests(TestCase):
    """Tests for Task model validation."""

    def setUp(self):
        self.user = get_user_model().objects.create_user('model-user', password='pw')

    def test_end_before_start_rejected_on_creation(self):
        from django.core.exceptions import ValidationError

        start = timezone.now()
        task = Task(user=self.user, title='Backwards', priority=2,
                    start_time=start, end_time=start - timedelta(hours=1))
        with self.assertRaises(ValidationError):
            task.full_clean()

    def test_priority_range_validated(self):
        from django.core.exceptions import ValidationError

        start = timezone.now()
        task = Task(user=self.user, title='Too urgent', priority=6,
                    start_time=start, end_time=start + timedelta(hours=1))
        with self.assertRaises(ValidationError):
            task.full_clean()

    def test_defaults_to_pending(self):
        start = timezone.now()
        task = Task.objects.create(user=self.user, title='New', priority=1,
                                   start_time=start, end_time=start + timedelta(hours=1))
        self.assertEqual(task.status, TaskStatus.PENDING)
        self.assertIsNone(task.actual_end_time)
        self.assertFalse(task.is_finished)


class TaskAPITestCase(APITestCase):
    """Shared setup for authenticated API tests."""

    def setUp(self):
        cache.clear()
        User = get_user_model()
        self.user = User.objects.create_user('alice', 'alice@example.com', 'secret-pass')
        self.other = User.objects.create_user('bob', 'bob@example.com', 'secret-pass')
        self.token = Token.objects.create(user=self.user)
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {self.token.key}')

    def create_task(self, user=None, **fields):
        start = fields.pop('start_time', timezone.now() - timedelta(hours=1))
        defaults = {
            'title': 'Task',
            'priority': 3,
            'start_time': start,
            'end_time': start + timedelta(hours=4),
        }
        defaults.update(fields)
        return Task.objects.create(user=user or self.user, **defaults)


class TaskCRUDTests(TaskAPITestCase):
    """Tests for the task CRUD endpoints."""

    def test_requires_authentication(self):
        self.client.credentials()
        response = self.client.get('/api/tasks/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_task(self):
        """POST /api/tasks/ creates a Pending task."""
        response = self.client.post('/api/tasks/', {
            'title': '  Write report  ',
            'priority': 2,
            'startTime': '2025-01-15T09:00:00Z',
            'endTime': '2025-01-15T17:00:00Z',
            'status': 'Finished',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['title'], 'Write report')
        self.assertEqual(response.data['status'], 'Pending')
        self.assertIsNone(response.data['actualEndTime'])
        self.assertEqual(Task.objects.get().user, self.user)

    def test_create_missing_fields(self):
        response = self.client.post('/api/tasks/', {'title': 'Incomplete'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])
        self.assertIn('startTime', response.data['errors'])

    def test_create_priority_out_of_range(self):
        response = self.client.post('/api/tasks/', {
            'title': 'Bad priority',
            'priority': 6,
            'startTime': '2025-01-15T09:00:00Z',
            'endTime': '2025-01-15T17:00:00Z',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error_code'], 'ERR_INVALID_PRIORITY')

    def test_create_end_before_start(self):
        response = self.client.post('/api/tasks/', {
            'title': 'Backwards',
            'priority': 1,
            'startTime': '2025-01-15T17:00:00Z',
            'endTime': '2025-01-15T09:00:00Z',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error_code'], 'ERR_INVALID_TIME_RANGE')

    def test_create_blank_title(self):
        response = self.client.post('/api/tasks/', {
            'title': '   ',
            'priority': 1,
            'startTime': '2025-01-15T09:00:00Z',
            'endTime': '2025-01-15T17:00:00Z',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_only_own_tasks(self):
        self.create_task(title='Mine')
        self.create_task(user=self.other, title='Theirs')

        response = self.client.get('/api/tasks/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([t['title'] for t in response.data], ['Mine'])

    def test_finishing_sets_actual_end_time(self):
        """Pending -> Finished records the actual end time."""
        task = self.create_task()

        response = self.client.put(f'/api/tasks/{task.pk}/', {'status': 'Finished'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'Finished')
        task.refresh_from_db()
        self.assertIsNotNone(task.actual_end_time)

    def test_finishing_again_keeps_actual_end_time(self):
        finished_at = timezone.now() - timedelta(hours=2)
        task = self.create_task(status=TaskStatus.FINISHED, actual_end_time=finished_at)

        self.client.put(f'/api/tasks/{task.pk}/', {'status': 'Finished'}, format='json')

        task.refresh_from_db()
        self.assertEqual(task.actual_end_time, finished_at)

    def test_finishing_with_end_time_override(self):
        task = self.create_task()

        response = self.client.put(f'/api/tasks/{task.pk}/', {
            'status': 'Finished',
            'endTime': '2030-01-01T00:00:00Z',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        task.refresh_from_db()
        self.assertEqual(task.end_time.year, 2030)
        self.assertIsNotNone(task.actual_end_time)

    def test_finished_back_to_pending_allowed(self):
        task = self.create_task(status=TaskStatus.FINISHED, actual_end_time=timezone.now())

        response = self.client.patch(f'/api/tasks/{task.pk}/', {'status': 'Pending'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'Pending')

    def test_update_invalid_status(self):
        task = self.create_task()
        response = self.client.put(f'/api/tasks/{task.pk}/', {'status': 'Done'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error_code'], 'ERR_INVALID_STATUS')

    def test_update_missing_task(self):
        response = self.client.put('/api/tasks/9999/', {'title': 'x'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error_code'], 'ERR_TASK_NOT_FOUND')

    def test_update_other_users_task(self):
        task = self.create_task(user=self.other)
        response = self.client.put(f'/api/tasks/{task.pk}/', {'title': 'Hijack'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        task.refresh_from_db()
        self.assertEqual(task.title, 'Task')

    def test_delete_task(self):
        task = self.create_task()
        response = self.client.delete(f'/api/tasks/{task.pk}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'message': 'Task deleted successfully', 'id': task.pk})
        self.assertFalse(Task.objects.filter(pk=task.pk).exists())

    def test_delete_other_users_task(self):
        task = self.create_task(user=self.other)
        response = self.client.delete(f'/api/tasks/{task.pk}/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Task.objects.filter(pk=task.pk).exists())

    def test_bulk_delete_only_own_tasks(self):
        mine = [self.create_task(), self.create_task()]
        theirs = self.create_task(user=self.other)

        response = self.client.post('/api/tasks/bulk-delete/', {
            'ids': [mine[0].pk, mine[1].pk, theirs.pk, 9999]
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['deleted'], sorted([mine[0].pk, mine[1].pk]))
        self.assertEqual(response.data['count'], 2)
        self.assertTrue(Task.objects.filter(pk=theirs.pk).exists())

    def test_bulk_delete_requires_ids(self):
        response = self.client.post('/api/tasks/bulk-delete/', {'ids': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class TaskListFilterTests(TaskAPITestCase):
    """Tests for filtering and sorting the task list."""

    def setUp(self):
        super().setUp()
        base = timezone.now()
        self.create_task(title='Bravo', priority=2, start_time=base - timedelta(hours=3))
        self.create_task(title='Alpha', priority=5, start_time=base - timedelta(hours=1),
                         status=TaskStatus.FINISHED)
        self.create_task(title='Charlie', priority=2, start_time=base - timedelta(hours=2))

    def test_filter_by_priority(self):
        response = self.client.get('/api/tasks/', {'priority': 2})
        self.assertEqual({t['title'] for t in response.data}, {'Bravo', 'Charlie'})

    def test_filter_by_status(self):
        response = self.client.get('/api/tasks/', {'status': 'Finished'})
        self.assertEqual([t['title'] for t in response.data], ['Alpha'])

    def test_sort_by_title(self):
        response = self.client.get('/api/tasks/', {'sortBy': 'title'})
        self.assertEqual([t['title'] for t in response.data], ['Alpha', 'Bravo', 'Charlie'])

    def test_sort_by_start_time_desc(self):
        response = self.client.get('/api/tasks/', {'sortBy': 'startTime', 'sortOrder': 'desc'})
        self.assertEqual([t['title'] for t in response.data], ['Alpha', 'Charlie', 'Bravo'])

    def test_sort_by_priority_is_stable(self):
        """Equal priorities keep creation (id) order."""
        response = self.client.get('/api/tasks/', {'sortBy': 'priority'})
        self.assertEqual([t['title'] for t in response.data], ['Bravo', 'Charlie', 'Alpha'])

    def test_invalid_sort_field(self):
        response = self.client.get('/api/tasks/', {'sortBy': 'password'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error_code'], 'ERR_INVALID_SORT')


class TaskStatsAPITests(TaskAPITestCase):
    """Tests for the statistics endpoints."""

    def test_stats_empty(self):
        response = self.client.get('/api/tasks/stats/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['totalTasks'], 0)
        self.assertEqual(response.data['completedPercentage'], 0)
        self.assertEqual(response.data['pendingPercentage'], 0)
        self.assertEqual(response.data['averageCompletionTime'], 0)
        self.assertEqual(
            [b['priority'] for b in response.data['pendingTimeStats']],
            [1, 2, 3, 4, 5]
        )

    def test_stats_for_user_tasks(self):
        """GET /api/tasks/stats/ aggregates only the caller's tasks."""
        now = timezone.now()
        start = now - timedelta(hours=10)
        self.create_task(status=TaskStatus.FINISHED, start_time=start,
                         actual_end_time=start + timedelta(hours=3))
        self.create_task(priority=3, start_time=now - timedelta(hours=2),
                         end_time=now + timedelta(hours=4))
        self.create_task(user=self.other, priority=1)

        response = self.client.get('/api/tasks/stats/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['totalTasks'], 2)
        self.assertAlmostEqual(response.data['completedPercentage'], 50.0)
        self.assertAlmostEqual(response.data['pendingPercentage'], 50.0)
        self.assertAlmostEqual(response.data['averageCompletionTime'], 3.0)

        bucket = response.data['pendingTimeStats'][2]
        self.assertEqual(bucket['pendingCount'], 1)
        self.assertAlmostEqual(bucket['averageTimeLapsed'], 2.0, places=2)
        self.assertAlmostEqual(bucket['averageTimeToFinish'], 4.0, places=2)
        self.assertEqual(response.data['pendingTimeStats'][0]['pendingCount'], 0)

    def test_stats_with_corrupt_task(self):
        """Bad stored data is reported as a failed computation."""
        self.create_task(priority=9)

        response = self.client.get('/api/tasks/stats/')

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['error_code'], 'ERR_INVALID_TASK_DATA')

    def test_time_summary(self):
        now = timezone.now()
        self.create_task(priority=1, start_time=now - timedelta(hours=2),
                         end_time=now + timedelta(hours=1))
        self.create_task(priority=1, start_time=now - timedelta(hours=4),
                         end_time=now - timedelta(hours=1))

        response = self.client.get('/api/tasks/stats/summary/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertAlmostEqual(response.data['totalTimeLapsed'], 6.0, places=2)
        self.assertAlmostEqual(response.data['totalTimeRemaining'], 1.0, places=2)
        self.assertAlmostEqual(response.data['perPriority'][0]['totalEstimatedTime'], 7.0, places=2)
        self.assertEqual(len(response.data['perPriority']), 5)

    def test_stats_requires_authentication(self):
        self.client.credentials()
        response = self.client.get('/api/tasks/stats/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class APIInfoTests(APITestCase):

    def test_api_info_endpoint(self):
        """GET /api/ should return API information without a token."""
        response = self.client.get('/api/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('name', response.data)
        self.assertIn('endpoints', response.data)
        self.assertIn('ERR_INVALID_TASK_DATA', response.data['error_codes'])
