"""
Tests for organizer context collection and prompt formatting
"""

from datetime import datetime, UTC
from uuid import uuid4

import pytest

from lvlai_api.ai.context_collector import (
    MAX_COMPLETED_TASKS_IN_PROMPT,
    ContextCollector,
    format_context_for_prompt,
)
from lvlai_api.ai.models import RetrievedContext, TaskContext, TaskStats, UserContext
from lvlai_api.common.error_handlers import ResourceNotFoundError, ValidationError
from lvlai_api.models import TaskPriority, TaskStatus


@pytest.fixture
def collector():
    return ContextCollector()


def test_retrieve_user_data(collector, session, user):
    profile = collector.retrieve_user_data(session, str(user.id))

    assert profile.user_id == str(user.id)
    assert profile.name == "Ada"
    assert profile.level == 4
    assert profile.xp == 1250
    assert profile.daily_goal_xp == 150


def test_retrieve_user_data_unknown_user(collector, session):
    assert collector.retrieve_user_data(session, str(uuid4())) is None


def test_retrieve_user_tasks_flags_overdue(collector, session, user, make_task):
    make_task(user, "Late", due_in_days=-2)
    make_task(user, "Late but done", status=TaskStatus.COMPLETED, due_in_days=-2)
    make_task(user, "Upcoming", due_in_days=3)
    make_task(user, "Whenever")

    tasks = {t.title: t for t in collector.retrieve_user_tasks(session, str(user.id))}

    assert tasks["Late"].is_overdue
    assert not tasks["Late but done"].is_overdue
    assert not tasks["Upcoming"].is_overdue
    assert not tasks["Whenever"].is_overdue


def test_retrieve_user_tasks_only_returns_own_tasks(
    collector, session, user, other_user, make_task
):
    make_task(user, "Mine")
    make_task(other_user, "Theirs")

    titles = [t.title for t in collector.retrieve_user_tasks(session, str(user.id))]

    assert titles == ["Mine"]


def test_collect_context_stats(collector, session, user, make_task):
    make_task(user, "One", due_in_days=-1)
    make_task(user, "Two", status=TaskStatus.IN_PROGRESS)
    make_task(user, "Three", status=TaskStatus.COMPLETED)

    context = collector.collect_context(session, str(user.id))

    assert context.user.name == "Ada"
    assert context.stats == TaskStats(
        total_tasks=3,
        pending_tasks=1,
        in_progress_tasks=1,
        completed_tasks=1,
        overdue_tasks=1,
    )


def test_collect_context_unknown_user(collector, session):
    with pytest.raises(ResourceNotFoundError):
        collector.collect_context(session, str(uuid4()))


def test_collect_context_malformed_id(collector, session):
    with pytest.raises(ValidationError):
        collector.collect_context(session, "not-a-uuid")


# Formatting


def profile() -> UserContext:
    return UserContext(
        user_id="u1",
        name="Ada",
        email="ada@example.com",
        level=4,
        xp=1250,
        total_tasks_completed=37,
        timezone="UTC",
        daily_goal_xp=150,
    )


def task(title, status=TaskStatus.PENDING, **fields) -> TaskContext:
    now = datetime(2025, 3, 10, tzinfo=UTC)
    defaults = dict(
        id=title,
        title=title,
        priority=TaskPriority.MEDIUM,
        status=status,
        points=10,
        tags=[],
        created_at=now,
        updated_at=now,
    )
    defaults.update(fields)
    return TaskContext(**defaults)


def test_format_empty_task_list():
    text = format_context_for_prompt(RetrievedContext(user=profile()))

    assert text.startswith("# USER PROFILE\nName: Ada\nLevel: 4 | XP: 1250\n")
    assert "Daily Goal: 150 XP" in text
    assert "# TASK STATISTICS\nTotal Tasks: 0\n" in text
    assert text.endswith("# TASK LIST\nNo tasks found.\n")


def test_format_task_lines():
    overdue = task(
        "File taxes",
        priority=TaskPriority.URGENT,
        description="Before the penalty kicks in",
        due_date=datetime(2025, 3, 8, 17, 0, tzinfo=UTC),
        tags=["finance", "admin"],
        points=25,
        is_overdue=True,
    )
    context = RetrievedContext(
        user=profile(),
        tasks=[overdue, task("Stretch", status=TaskStatus.IN_PROGRESS)],
        stats=TaskStats(total_tasks=2, pending_tasks=1, in_progress_tasks=1, overdue_tasks=1),
    )

    text = format_context_for_prompt(context)

    assert (
        "## PENDING TASKS (1)\n"
        "1. [URGENT] File taxes\n"
        "   Description: Before the penalty kicks in\n"
        "   Due: 2025-03-08 ⚠️ OVERDUE\n"
        "   Tags: finance, admin\n"
        "   Points: 25 XP\n"
    ) in text
    assert "## IN PROGRESS TASKS (1)\n1. [MEDIUM] Stretch\n   Points: 10 XP\n" in text
    assert "COMPLETED TASKS" not in text


def test_format_caps_completed_tasks():
    done = [task(f"Done {i}", status=TaskStatus.COMPLETED) for i in range(13)]
    context = RetrievedContext(user=profile(), tasks=done)

    text = format_context_for_prompt(context)

    assert "## COMPLETED TASKS (13)" in text
    assert f"{MAX_COMPLETED_TASKS_IN_PROMPT}. [MEDIUM] Done 9" in text
    assert "Done 10" not in text
    assert "... and 3 more completed tasks" in text


def test_format_is_deterministic():
    context = RetrievedContext(user=profile(), tasks=[task("A"), task("B")])
    assert format_context_for_prompt(context) == format_context_for_prompt(context)
