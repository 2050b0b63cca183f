"""
Tests for the fixture task sets
"""

import random
from datetime import datetime, UTC
from uuid import uuid4

import pytest
from sqlmodel import select

from lvlai_api.common.error_handlers import ResourceNotFoundError
from lvlai_api.models import Task, TaskPriority, TaskStatus
from lvlai_api.seed import (
    CLUTTERED_TASKS,
    build_cluttered_tasks,
    build_random_tasks,
    due_date_distribution,
    points_for,
    seed_tasks,
)

NOW = datetime(2025, 3, 10, 8, 0, tzinfo=UTC)


def test_points_follow_priority():
    assert points_for(TaskPriority.URGENT) == 25
    assert points_for(TaskPriority.HIGH) == 20
    assert points_for(TaskPriority.MEDIUM) == 15
    assert points_for(TaskPriority.LOW) == 10


def test_cluttered_set_shape():
    tasks = build_cluttered_tasks(now=NOW, rng=random.Random(1))

    assert len(tasks) == len(CLUTTERED_TASKS) == 32
    overdue = [t for t in tasks if t.due_date and t.due_date < NOW]
    assert {t.title for t in overdue} == {
        "Fix critical security vulnerability",
        "Complete performance review",
    }
    assert all("overdue" in t.description for t in overdue)
    assert sum(1 for t in tasks if t.due_date is None) == 3

    distribution = due_date_distribution(tasks)
    assert distribution["2025-03-10"] == 6
    assert distribution["No due date"] == 3


def test_due_times_fall_in_working_hours():
    tasks = build_random_tasks(count=40, now=NOW, rng=random.Random(7))

    for task in tasks:
        assert task.status in (TaskStatus.PENDING, TaskStatus.IN_PROGRESS)
        assert task.points == points_for(task.priority)
        if task.due_date:
            assert 9 <= task.due_date.hour <= 16
            assert 0 <= (task.due_date.date() - NOW.date()).days < 14


def test_random_set_is_reproducible_with_seeded_rng():
    first = build_random_tasks(count=5, now=NOW, rng=random.Random(3))
    second = build_random_tasks(count=5, now=NOW, rng=random.Random(3))

    assert [t.title for t in first] == [t.title for t in second]
    assert [t.due_date for t in first] == [t.due_date for t in second]


def test_seed_tasks_inserts_for_user(session, user):
    saved = seed_tasks(session, str(user.id), "random", count=4)

    assert len(saved) == 4
    assert all(task.user_id == user.id for task in saved)
    stored = session.exec(select(Task).where(Task.user_id == user.id)).all()
    assert len(stored) == 4


def test_seed_tasks_clear_keeps_completed(session, user, make_task):
    make_task(user, "Old open task")
    done = make_task(user, "Finished", status=TaskStatus.COMPLETED)

    seed_tasks(session, user.id, "cluttered", clear=True)

    titles = [t.title for t in session.exec(select(Task).where(Task.user_id == user.id))]
    assert "Old open task" not in titles
    assert done.title in titles
    assert len(titles) == 33


def test_seed_tasks_unknown_user(session):
    with pytest.raises(ResourceNotFoundError):
        seed_tasks(session, str(uuid4()), "random")


def test_seed_tasks_unknown_kind(session, user):
    with pytest.raises(ValueError, match="Unknown task set"):
        seed_tasks(session, user.id, "tidy")
