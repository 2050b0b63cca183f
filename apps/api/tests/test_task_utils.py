"""
Tests for organizer task utilities
"""

from datetime import date, datetime, timedelta, timezone, UTC

import pytest

from lvlai_api.ai.models import TaskContext
from lvlai_api.ai.task_utils import (
    calendar_date_to_datetime,
    is_overdue,
    parse_calendar_date,
    parse_priority,
    select_optimization_candidates,
    to_calendar_date,
)
from lvlai_api.models import TaskPriority, TaskStatus

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=UTC)


def ctx(
    task_id: str,
    priority: TaskPriority = TaskPriority.MEDIUM,
    status: TaskStatus = TaskStatus.PENDING,
    due_date: datetime | None = None,
) -> TaskContext:
    return TaskContext(
        id=task_id,
        title=f"Task {task_id}",
        priority=priority,
        status=status,
        points=10,
        tags=[],
        created_at=NOW,
        updated_at=NOW,
        due_date=due_date,
    )


class TestCandidateSelection:
    def test_orders_by_priority_then_due_date(self):
        tasks = [
            ctx("low-early", TaskPriority.LOW, due_date=NOW),
            ctx("urgent-late", TaskPriority.URGENT, due_date=NOW + timedelta(days=5)),
            ctx("urgent-early", TaskPriority.URGENT, due_date=NOW + timedelta(days=1)),
            ctx("high", TaskPriority.HIGH, due_date=NOW + timedelta(days=2)),
            ctx("medium", TaskPriority.MEDIUM, due_date=NOW + timedelta(days=3)),
        ]

        ids = [t.id for t in select_optimization_candidates(tasks, 15)]

        assert ids == ["urgent-early", "urgent-late", "high", "medium", "low-early"]

    def test_dated_tasks_come_before_undated(self):
        tasks = [
            ctx("undated", TaskPriority.HIGH),
            ctx("dated", TaskPriority.HIGH, due_date=NOW + timedelta(days=30)),
        ]

        ids = [t.id for t in select_optimization_candidates(tasks, 15)]

        assert ids == ["dated", "undated"]

    def test_ties_keep_store_order(self):
        due = NOW + timedelta(days=2)
        tasks = [ctx(str(i), TaskPriority.MEDIUM, due_date=due) for i in range(5)]

        ids = [t.id for t in select_optimization_candidates(tasks, 15)]

        assert ids == ["0", "1", "2", "3", "4"]

    def test_completed_tasks_are_excluded(self):
        tasks = [
            ctx("done", TaskPriority.URGENT, status=TaskStatus.COMPLETED),
            ctx("doing", status=TaskStatus.IN_PROGRESS),
            ctx("todo"),
        ]

        ids = {t.id for t in select_optimization_candidates(tasks, 15)}

        assert ids == {"doing", "todo"}

    def test_truncates_after_sorting(self):
        tasks = [ctx("low", TaskPriority.LOW)] + [
            ctx(f"urgent-{i}", TaskPriority.URGENT) for i in range(3)
        ]

        ids = [t.id for t in select_optimization_candidates(tasks, 2)]

        assert ids == ["urgent-0", "urgent-1"]

    def test_naive_and_aware_due_dates_compare(self):
        tasks = [
            ctx("aware", due_date=NOW + timedelta(days=1)),
            ctx("naive", due_date=NOW.replace(tzinfo=None)),
        ]

        ids = [t.id for t in select_optimization_candidates(tasks, 15)]

        assert ids == ["naive", "aware"]

    def test_empty(self):
        assert select_optimization_candidates([], 15) == []


class TestOverdue:
    def test_past_due_open_task_is_overdue(self):
        assert is_overdue(NOW - timedelta(hours=1), TaskStatus.PENDING, NOW)

    def test_completed_task_is_never_overdue(self):
        assert not is_overdue(NOW - timedelta(days=3), TaskStatus.COMPLETED, NOW)

    def test_future_or_missing_due_date(self):
        assert not is_overdue(NOW + timedelta(hours=1), TaskStatus.IN_PROGRESS, NOW)
        assert not is_overdue(None, TaskStatus.PENDING, NOW)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("2025-03-14", date(2025, 3, 14)),
        ("2025-03-14T00:00:00Z", date(2025, 3, 14)),
        ("2025-03-14T23:30:00-02:00", date(2025, 3, 15)),
        (" 2025-03-14 ", date(2025, 3, 14)),
        ("next tuesday", None),
        ("2025-02-30", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_calendar_date(value, expected):
    assert parse_calendar_date(value) == expected


@pytest.mark.parametrize(
    "value,expected",
    [
        ("urgent", TaskPriority.URGENT),
        ("HIGH", TaskPriority.HIGH),
        (" Low ", TaskPriority.LOW),
        ("critical", None),
        (None, None),
    ],
)
def test_parse_priority(value, expected):
    assert parse_priority(value) == expected


def test_to_calendar_date_uses_utc():
    tokyo = timezone(timedelta(hours=9))
    assert to_calendar_date(datetime(2025, 3, 15, 8, 0, tzinfo=tokyo)) == date(2025, 3, 14)
    assert to_calendar_date(None) is None


def test_calendar_date_to_datetime_is_midnight_utc():
    value = calendar_date_to_datetime(date(2025, 3, 14))
    assert value == datetime(2025, 3, 14, tzinfo=UTC)
