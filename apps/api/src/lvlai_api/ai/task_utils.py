"""
Utility functions for organizer task processing
"""

import logging
from datetime import date, datetime, UTC

from lvlai_api.ai.models import TaskContext
from lvlai_api.models import TaskPriority, TaskStatus

logger = logging.getLogger(__name__)

OPEN_STATUSES = (TaskStatus.PENDING, TaskStatus.IN_PROGRESS)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (the store keeps UTC) and convert aware ones"""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def to_calendar_date(value: datetime | date | None) -> date | None:
    """Normalize a stored due date to its UTC calendar date"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_utc(value).date()
    return value


def is_overdue(
    due_date: datetime | None, status: TaskStatus, now: datetime | None = None
) -> bool:
    """A task is overdue when its due date has passed and it is not completed"""
    if due_date is None or status == TaskStatus.COMPLETED:
        return False
    now = now or datetime.now(UTC)
    return as_utc(due_date) < as_utc(now)


def parse_calendar_date(value) -> date | None:
    """
    Parse a model- or caller-supplied date.

    Accepts ``YYYY-MM-DD`` and full ISO-8601 timestamps (which are reduced to
    their UTC calendar date). Anything else yields None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_utc(value).date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return as_utc(datetime.fromisoformat(text.replace("Z", "+00:00"))).date()
    except ValueError:
        return None


def parse_priority(value) -> TaskPriority | None:
    """Case-insensitive priority lookup; unknown values yield None"""
    if value is None:
        return None
    if isinstance(value, TaskPriority):
        return value
    try:
        return TaskPriority(str(value).strip().lower())
    except ValueError:
        return None


def calendar_date_to_datetime(value: date) -> datetime:
    """Store calendar dates as midnight UTC"""
    return datetime(value.year, value.month, value.day, tzinfo=UTC)


_NO_DUE_DATE = datetime.max.replace(tzinfo=UTC)


def _optimization_sort_key(task: TaskContext) -> tuple:
    # Higher rank first; dated tasks before undated; earlier dates first
    due = as_utc(task.due_date) if task.due_date else _NO_DUE_DATE
    return (-task.priority.rank, task.due_date is None, due)


def select_optimization_candidates(
    tasks: list[TaskContext], max_tasks: int
) -> list[TaskContext]:
    """
    Pick the tasks offered to the model for workload optimization.

    Keeps pending and in-progress tasks, orders them by priority (urgent first)
    and then by due date (earliest first, undated last), and keeps the first
    ``max_tasks``. ``sorted`` is stable, so ties keep the store's order.
    """
    open_tasks = [t for t in tasks if t.status in OPEN_STATUSES]
    candidates = sorted(open_tasks, key=_optimization_sort_key)[:max_tasks]
    logger.debug(
        f"Optimization candidates: {len(candidates)} of {len(open_tasks)} open tasks "
        f"(limit {max_tasks})"
    )
    return candidates
