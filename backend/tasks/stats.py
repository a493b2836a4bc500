"""
Task Statistics Aggregation for the Task Tracker.

This module turns the full set of tasks owned by one user into a
statistics report: completion percentages, the average time it took to
finish tasks, and per-priority aggregates of how long pending tasks have
been running and how long they have left.

Aggregation Rules:
-----------------
- Finished tasks feed the average completion time, measured from
  start_time to actual_end_time (or updated_at when no actual end was
  recorded). These values are not clamped.
- Pending tasks are bucketed by priority (1-5). Time lapsed and time to
  finish are clamped at zero per task before averaging.
- All five priority buckets are always reported, in ascending order.

The aggregator is a pure function of its inputs: "now" is always passed
in by the caller.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional
import logging

from django.utils.dateparse import parse_datetime

from .models import TaskStatus


logger = logging.getLogger(__name__)


# ==================== Error Codes ====================

class ErrorCode(Enum):
    """Error codes used in API error envelopes."""
    SUCCESS = "SUCCESS"
    ERR_MISSING_FIELD = "ERR_MISSING_FIELD"
    ERR_INVALID_PRIORITY = "ERR_INVALID_PRIORITY"
    ERR_INVALID_STATUS = "ERR_INVALID_STATUS"
    ERR_INVALID_TIME_RANGE = "ERR_INVALID_TIME_RANGE"
    ERR_INVALID_SORT = "ERR_INVALID_SORT"
    ERR_INVALID_TASK_DATA = "ERR_INVALID_TASK_DATA"
    ERR_TASK_NOT_FOUND = "ERR_TASK_NOT_FOUND"
    ERR_NOT_AUTHORIZED = "ERR_NOT_AUTHORIZED"
    ERR_INVALID_CREDENTIALS = "ERR_INVALID_CREDENTIALS"
    ERR_USER_EXISTS = "ERR_USER_EXISTS"


class InputDataError(ValueError):
    """A task record cannot be aggregated because a field is missing or malformed."""

    def __init__(self, message: str, task_id: Any = None, field: Optional[str] = None):
        super().__init__(message)
        self.task_id = task_id
        self.field = field

    def to_dict(self) -> Dict:
        result = {
            'error_code': ErrorCode.ERR_INVALID_TASK_DATA.value,
            'message': str(self)
        }
        if self.field:
            result['field'] = self.field
        if self.task_id is not None:
            result['task_id'] = self.task_id
        return result


PRIORITY_LEVELS = (1, 2, 3, 4, 5)

SECONDS_PER_HOUR = 60 * 60


@dataclass
class PriorityBucket:
    """Pending-time aggregates for a single priority level."""
    priority: int
    pending_count: int = 0
    average_time_lapsed: float = 0.0
    average_time_to_finish: float = 0.0

    @property
    def total_estimated_time(self) -> float:
        """Total hours the pending tasks of this priority are expected to take."""
        return self.pending_count * (
            self.average_time_lapsed + max(0.0, self.average_time_to_finish)
        )


@dataclass
class StatsReport:
    """Statistics for every task owned by one user."""
    total_tasks: int = 0
    completed_percentage: float = 0.0
    pending_percentage: float = 0.0
    average_completion_time: float = 0.0
    pending_time_stats: List[PriorityBucket] = field(
        default_factory=lambda: [PriorityBucket(priority=p) for p in PRIORITY_LEVELS]
    )


@dataclass
class TimeSummary:
    """Overall pending-time totals derived from a StatsReport."""
    total_time_lapsed: float = 0.0
    total_time_remaining: float = 0.0
    total_estimated_time: float = 0.0
    per_priority: List[Dict] = field(default_factory=list)


def _read(task: Any, name: str) -> Any:
    """Read a field from either a model instance or a plain mapping."""
    if isinstance(task, Mapping):
        return task.get(name)
    return getattr(task, name, None)


class TaskStatsAggregator:
    """
    Computes a StatsReport from a collection of tasks.

    The aggregator holds no state between calls; one instance can be
    shared by any number of concurrent requests.
    """

    def to_datetime(self, task: Any, name: str) -> datetime:
        """
        Read a timestamp field from a task.

        Accepts datetime objects and ISO-8601 strings. Raises InputDataError
        when the value is missing or cannot be parsed.
        """
        value = _read(task, name)
        task_id = _read(task, 'id')

        if value is None:
            raise InputDataError(
                f"Task is missing required timestamp '{name}'",
                task_id=task_id,
                field=name
            )
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                parsed = parse_datetime(value)
            except ValueError:
                parsed = None
            if parsed is not None:
                return parsed

        raise InputDataError(
            f"Task has an unparsable timestamp in '{name}': {value!r}",
            task_id=task_id,
            field=name
        )

    def hours_between(self, start: datetime, end: datetime, task: Any = None) -> float:
        """Signed number of hours from start to end."""
        try:
            delta = end - start
        except TypeError as exc:
            # Mixing naive and aware datetimes.
            raise InputDataError(
                f"Cannot compare timestamps {start!r} and {end!r}: {exc}",
                task_id=_read(task, 'id') if task is not None else None
            ) from exc
        return delta.total_seconds() / SECONDS_PER_HOUR

    def is_finished(self, task: Any) -> bool:
        status = _read(task, 'status')
        return status == TaskStatus.FINISHED

    def calculate_completion_time(self, task: Any) -> float:
        """
        Hours a finished task took, from start_time to its completion.

        The completion timestamp is actual_end_time, falling back to
        updated_at. The result may be negative for inconsistent data.
        """
        start = self.to_datetime(task, 'start_time')
        if _read(task, 'actual_end_time') is not None:
            completed = self.to_datetime(task, 'actual_end_time')
        else:
            completed = self.to_datetime(task, 'updated_at')
        return self.hours_between(start, completed, task)

    def calculate_pending_times(self, task: Any, now: datetime) -> tuple:
        """
        Return (time_lapsed, time_to_finish) in hours for a pending task.

        Both values are clamped at zero.
        """
        start = self.to_datetime(task, 'start_time')
        end = self.to_datetime(task, 'end_time')
        time_lapsed = max(0.0, self.hours_between(start, now, task))
        time_to_finish = max(0.0, self.hours_between(now, end, task))
        return time_lapsed, time_to_finish

    def priority_of(self, task: Any) -> int:
        priority = _read(task, 'priority')
        try:
            priority = int(priority)
        except (TypeError, ValueError):
            priority = None
        if priority not in PRIORITY_LEVELS:
            raise InputDataError(
                f"Task priority must be between 1 and 5, got {_read(task, 'priority')!r}",
                task_id=_read(task, 'id'),
                field='priority'
            )
        return priority

    def compute_stats(self, tasks: Iterable[Any], now: datetime) -> StatsReport:
        """
        Aggregate statistics for the given tasks at the moment ``now``.

        Args:
            tasks: Every task owned by one user, in any order (may be empty)
            now: Moment of evaluation

        Returns:
            StatsReport with exactly five pending-time buckets
        """
        tasks = list(tasks)
        total_tasks = len(tasks)

        finished = [t for t in tasks if self.is_finished(t)]
        pending = [t for t in tasks if not self.is_finished(t)]

        if total_tasks:
            completed_percentage = len(finished) / total_tasks * 100
            pending_percentage = len(pending) / total_tasks * 100
        else:
            completed_percentage = 0.0
            pending_percentage = 0.0

        completion_times = [self.calculate_completion_time(t) for t in finished]
        average_completion_time = (
            sum(completion_times) / len(completion_times) if completion_times else 0.0
        )

        # priority -> [time lapsed sum, time to finish sum, count]
        sums = {p: [0.0, 0.0, 0] for p in PRIORITY_LEVELS}
        for task in pending:
            priority = self.priority_of(task)
            time_lapsed, time_to_finish = self.calculate_pending_times(task, now)
            sums[priority][0] += time_lapsed
            sums[priority][1] += time_to_finish
            sums[priority][2] += 1

        buckets = []
        for priority in PRIORITY_LEVELS:
            lapsed_sum, finish_sum, count = sums[priority]
            buckets.append(PriorityBucket(
                priority=priority,
                pending_count=count,
                average_time_lapsed=lapsed_sum / count if count else 0.0,
                average_time_to_finish=finish_sum / count if count else 0.0
            ))

        logger.debug(
            "Aggregated %d tasks (%d finished, %d pending)",
            total_tasks, len(finished), len(pending)
        )

        return StatsReport(
            total_tasks=total_tasks,
            completed_percentage=completed_percentage,
            pending_percentage=pending_percentage,
            average_completion_time=average_completion_time,
            pending_time_stats=buckets
        )


def compute_stats(tasks: Iterable[Any], now: datetime) -> StatsReport:
    """Compute a StatsReport with a fresh aggregator."""
    return TaskStatsAggregator().compute_stats(tasks, now)


def summarize_pending_time(report: StatsReport) -> TimeSummary:
    """Derive overall pending-time totals from a report."""
    per_priority = [
        {
            'priority': bucket.priority,
            'pending_count': bucket.pending_count,
            'total_estimated_time': bucket.total_estimated_time
        }
        for bucket in report.pending_time_stats
    ]
    return TimeSummary(
        total_time_lapsed=sum(
            b.average_time_lapsed * b.pending_count for b in report.pending_time_stats
        ),
        total_time_remaining=sum(
            max(0.0, b.average_time_to_finish) * b.pending_count
            for b in report.pending_time_stats
        ),
        total_estimated_time=sum(row['total_estimated_time'] for row in per_priority),
        per_priority=per_priority
    )
