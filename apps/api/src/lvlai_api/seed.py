"""
Fixture task sets for exercising the organizer by hand.

``cluttered`` is a deliberately unbalanced week: overloaded days next to
near-empty ones, a couple of overdue tasks and some undated ones. ``random``
draws tasks from a template pool with a 14 day due-date spread.
"""

import logging
import random
from collections import Counter
from datetime import datetime, timedelta, UTC
from uuid import UUID

from sqlmodel import Session

from lvlai_api.common.error_handlers import ResourceNotFoundError, safe_execute, validate_uuid
from lvlai_api.models import Task, TaskCreate, TaskPriority, TaskStatus
from lvlai_api.services import UserService, task_service

logger = logging.getLogger(__name__)

P = TaskPriority

# (title, priority, days from today or None for no due date, tags)
CLUTTERED_TASKS: list[tuple[str, TaskPriority, int | None, list[str]]] = [
    # Overloaded today
    ("Critical bug fix in production", P.URGENT, 0, ["work", "urgent"]),
    ("Client presentation preparation", P.URGENT, 0, ["work", "presentation"]),
    ("Server maintenance emergency", P.URGENT, 0, ["work", "devops"]),
    ("Review legal documents", P.HIGH, 0, ["work", "legal"]),
    ("Team meeting preparation", P.MEDIUM, 0, ["work", "meeting"]),
    ("Update project documentation", P.LOW, 0, ["work", "documentation"]),
    ("Code review for feature branch", P.HIGH, 1, ["work", "development"]),
    ("Database migration planning", P.HIGH, 2, ["work", "database"]),
    ("Write unit tests", P.MEDIUM, 2, ["work", "testing"]),
    ("Update dependencies", P.MEDIUM, 2, ["work", "maintenance"]),
    ("Design new feature mockups", P.MEDIUM, 2, ["work", "design"]),
    ("Write blog post", P.LOW, 2, ["work", "writing"]),
    ("API documentation update", P.MEDIUM, 3, ["work", "documentation"]),
    ("Client demo preparation", P.URGENT, 3, ["work", "demo"]),
    ("Budget planning for next quarter", P.HIGH, 3, ["work", "finance"]),
    ("Team retrospective meeting", P.MEDIUM, 3, ["work", "meeting"]),
    ("Quarterly report preparation", P.URGENT, 4, ["work", "reporting"]),
    ("Security audit review", P.HIGH, 4, ["work", "security"]),
    ("Performance optimization", P.HIGH, 4, ["work", "optimization"]),
    ("User feedback analysis", P.MEDIUM, 4, ["work", "analysis"]),
    ("Update README files", P.LOW, 4, ["work", "documentation"]),
    ("Refactor legacy code", P.MEDIUM, 5, ["work", "refactoring"]),
    ("Deploy to staging environment", P.URGENT, 6, ["work", "deployment"]),
    ("Run integration tests", P.HIGH, 6, ["work", "testing"]),
    ("Update user guide", P.MEDIUM, 6, ["work", "documentation"]),
    ("Plan next sprint", P.MEDIUM, 6, ["work", "planning"]),
    ("Clean up old files", P.LOW, 6, ["work", "maintenance"]),
    # Overdue
    ("Fix critical security vulnerability", P.URGENT, -2, ["work", "security", "overdue"]),
    ("Complete performance review", P.HIGH, -1, ["work", "hr", "overdue"]),
    # Undated
    ("Research new technology stack", P.MEDIUM, None, ["work", "research"]),
    ("Improve code documentation", P.LOW, None, ["work", "documentation"]),
    ("Set up CI/CD pipeline", P.HIGH, None, ["work", "devops"]),
]

RANDOM_TEMPLATES: list[tuple[str, TaskPriority, list[str]]] = [
    ("Review quarterly financial reports", P.HIGH, ["work", "finance"]),
    ("Prepare presentation for client meeting", P.URGENT, ["work", "presentation"]),
    ("Update project documentation", P.MEDIUM, ["work", "documentation"]),
    ("Schedule team standup meeting", P.LOW, ["work", "meeting"]),
    ("Write unit tests for authentication module", P.MEDIUM, ["work", "testing"]),
    ("Grocery shopping for the week", P.MEDIUM, ["personal", "shopping"]),
    ("Call dentist to schedule appointment", P.MEDIUM, ["personal", "health"]),
    ("Renew car insurance", P.HIGH, ["personal", "finance"]),
    ("Book flight tickets for vacation", P.MEDIUM, ["personal", "travel"]),
    ("Clean out garage", P.LOW, ["personal", "chores"]),
    ("Morning workout - Cardio session", P.HIGH, ["health", "fitness"]),
    ("Meal prep for the week", P.MEDIUM, ["health", "nutrition"]),
    ("Practice meditation for 20 minutes", P.LOW, ["health", "wellness"]),
    ("Complete online course module 3", P.MEDIUM, ["learning", "education"]),
    ("Practice coding challenges", P.MEDIUM, ["learning", "programming"]),
    ("Design database schema for new feature", P.HIGH, ["project", "development"]),
    ("Set up CI/CD pipeline", P.HIGH, ["project", "devops"]),
    ("Deploy staging environment", P.URGENT, ["project", "deployment"]),
]

RANDOM_DESCRIPTIONS = [
    "Make sure to review all details carefully",
    "This is important for the upcoming deadline",
    "Double-check before submitting",
    "Coordinate with team members if needed",
    "Reference the documentation if unsure",
]

POINTS_BY_PRIORITY = {P.URGENT: 25, P.HIGH: 20, P.MEDIUM: 15, P.LOW: 10}


def points_for(priority: TaskPriority) -> int:
    return POINTS_BY_PRIORITY.get(priority, 10)


def _due_at(now: datetime, days_from_now: int, rng: random.Random) -> datetime:
    """A working-hours time on the given day"""
    day = now + timedelta(days=days_from_now)
    return day.replace(
        hour=rng.randint(9, 16), minute=rng.randint(0, 59), second=0, microsecond=0
    )


def build_cluttered_tasks(
    now: datetime | None = None, rng: random.Random | None = None
) -> list[TaskCreate]:
    now = now or datetime.now(UTC)
    rng = rng or random.Random()
    tasks = []
    for title, priority, days_from_now, tags in CLUTTERED_TASKS:
        if days_from_now is None:
            note = "No specific deadline set."
        elif days_from_now < 0:
            note = "This task is overdue!"
        else:
            note = ""
        tasks.append(
            TaskCreate(
                title=title,
                description=f"This task needs to be completed. {note}".strip(),
                priority=priority,
                status=TaskStatus.IN_PROGRESS if rng.random() > 0.7 else TaskStatus.PENDING,
                due_date=None if days_from_now is None else _due_at(now, days_from_now, rng),
                points=points_for(priority),
                tags=list(tags),
            )
        )
    return tasks


def build_random_tasks(
    count: int = 15,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> list[TaskCreate]:
    now = now or datetime.now(UTC)
    rng = rng or random.Random()
    tasks = []
    for _ in range(count):
        title, priority, tags = rng.choice(RANDOM_TEMPLATES)
        has_due_date = rng.random() > 0.3
        tasks.append(
            TaskCreate(
                title=title,
                description=rng.choice(RANDOM_DESCRIPTIONS) if rng.random() > 0.5 else None,
                priority=priority,
                status=rng.choice([TaskStatus.PENDING, TaskStatus.IN_PROGRESS]),
                due_date=_due_at(now, rng.randrange(14), rng) if has_due_date else None,
                points=points_for(priority),
                tags=list(tags),
            )
        )
    return tasks


def clear_open_tasks(session: Session, user_id: UUID) -> int:
    """Delete the user's pending and in-progress tasks"""
    existing = task_service.get_open_tasks(session, user_id)

    def delete_operation():
        for task in existing:
            session.delete(task)
        return len(existing)

    return safe_execute(session, delete_operation)


def seed_tasks(
    session: Session,
    user_id: str | UUID,
    kind: str,
    count: int = 15,
    clear: bool = False,
) -> list[Task]:
    """Insert a fixture task set for an existing user"""
    owner = validate_uuid(user_id, "user_id")
    if UserService.get_user(session, owner) is None:
        raise ResourceNotFoundError("User", owner)

    if clear:
        removed = clear_open_tasks(session, owner)
        logger.info(f"Deleted {removed} existing pending/in-progress tasks")

    if kind == "cluttered":
        tasks = build_cluttered_tasks()
    elif kind == "random":
        tasks = build_random_tasks(count)
    else:
        raise ValueError(f"Unknown task set: {kind}")

    saved = [task_service.create_task(session, task, owner) for task in tasks]
    logger.info(f"✅ Created {len(saved)} {kind} tasks for user {owner}")
    return saved


def due_date_distribution(tasks: list[Task] | list[TaskCreate]) -> Counter:
    """Task count per due date, undated tasks under "No due date" """
    return Counter(
        task.due_date.date().isoformat() if task.due_date else "No due date"
        for task in tasks
    )
