"""
Context collection service for the organizer agent
"""

import logging
from datetime import datetime, UTC

from sqlmodel import Session

from lvlai_api.ai.models import RetrievedContext, TaskContext, TaskStats, UserContext
from lvlai_api.ai.task_utils import is_overdue, to_calendar_date
from lvlai_api.common.error_handlers import ResourceNotFoundError, validate_uuid
from lvlai_api.models import Task, TaskPriority, TaskStatus, User
from lvlai_api.services import task_service, user_service

logger = logging.getLogger(__name__)

MAX_COMPLETED_TASKS_IN_PROMPT = 10


def user_to_context(user: User) -> UserContext:
    return UserContext(
        user_id=str(user.id),
        name=user.name,
        email=user.email,
        level=user.level,
        xp=user.xp,
        total_tasks_completed=user.total_tasks_completed,
        timezone=user.timezone,
        daily_goal_xp=user.daily_goal_xp,
    )


def task_to_context(task: Task, now: datetime | None = None) -> TaskContext:
    status = TaskStatus(task.status)
    return TaskContext(
        id=str(task.id),
        title=task.title,
        description=task.description,
        priority=TaskPriority(task.priority),
        status=status,
        due_date=task.due_date,
        completed_at=task.completed_at,
        points=task.points,
        tags=list(task.tags or []),
        created_at=task.created_at,
        updated_at=task.updated_at,
        is_overdue=is_overdue(task.due_date, status, now),
    )


def compute_stats(tasks: list[TaskContext]) -> TaskStats:
    return TaskStats(
        total_tasks=len(tasks),
        pending_tasks=sum(1 for t in tasks if t.status == TaskStatus.PENDING),
        in_progress_tasks=sum(1 for t in tasks if t.status == TaskStatus.IN_PROGRESS),
        completed_tasks=sum(1 for t in tasks if t.status == TaskStatus.COMPLETED),
        overdue_tasks=sum(1 for t in tasks if t.is_overdue),
    )


class ContextCollector:
    """Service for collecting a user's profile and tasks for prompting"""

    def __init__(self):
        self.user_service = user_service
        self.task_service = task_service

    def retrieve_user_data(self, session: Session, user_id: str) -> UserContext | None:
        """Get the user's profile, or None if the user does not exist"""
        validate_uuid(user_id, "user_id")
        user = self.user_service.get_user(session, user_id)
        if user is None:
            return None
        return user_to_context(user)

    def retrieve_user_tasks(self, session: Session, user_id: str) -> list[TaskContext]:
        """Get all of the user's tasks, newest first"""
        validate_uuid(user_id, "user_id")
        now = datetime.now(UTC)
        tasks = self.task_service.get_tasks(session, user_id)
        return [task_to_context(task, now) for task in tasks]

    def collect_context(self, session: Session, user_id: str) -> RetrievedContext:
        """Collect profile, tasks and statistics for a user"""
        logger.debug(f"Context Collection: Starting for user {user_id}")

        # Both reads share one session, so they run one after the other
        user = self.retrieve_user_data(session, user_id)
        if user is None:
            raise ResourceNotFoundError("User", user_id)
        tasks = self.retrieve_user_tasks(session, user_id)

        stats = compute_stats(tasks)
        logger.info(
            f"Context Collection: {stats.total_tasks} tasks for user {user_id} "
            f"({stats.pending_tasks} pending, {stats.in_progress_tasks} in progress, "
            f"{stats.overdue_tasks} overdue)"
        )
        return RetrievedContext(user=user, tasks=tasks, stats=stats)


def _format_task(task: TaskContext, index: int) -> str:
    lines = [f"{index}. [{task.priority.value.upper()}] {task.title}"]
    if task.description:
        lines.append(f"   Description: {task.description}")
    if task.due_date:
        due = f"   Due: {to_calendar_date(task.due_date).isoformat()}"
        if task.is_overdue:
            due += " ⚠️ OVERDUE"
        lines.append(due)
    if task.tags:
        lines.append(f"   Tags: {', '.join(task.tags)}")
    lines.append(f"   Points: {task.points} XP")
    return "\n".join(lines) + "\n"


def format_context_for_prompt(context: RetrievedContext) -> str:
    """Render a context snapshot as the text block embedded in system prompts"""
    user, tasks, stats = context.user, context.tasks, context.stats

    prompt = "# USER PROFILE\n"
    prompt += f"Name: {user.name}\n"
    prompt += f"Level: {user.level} | XP: {user.xp}\n"
    prompt += f"Completed Tasks: {user.total_tasks_completed}\n"
    prompt += f"Daily Goal: {user.daily_goal_xp} XP\n"
    prompt += f"Timezone: {user.timezone}\n\n"

    prompt += "# TASK STATISTICS\n"
    prompt += f"Total Tasks: {stats.total_tasks}\n"
    prompt += f"Pending: {stats.pending_tasks} | In Progress: {stats.in_progress_tasks}\n"
    prompt += f"Completed: {stats.completed_tasks} | Overdue: {stats.overdue_tasks}\n\n"

    prompt += "# TASK LIST\n"
    if not tasks:
        return prompt + "No tasks found.\n"

    pending = [t for t in tasks if t.status == TaskStatus.PENDING]
    in_progress = [t for t in tasks if t.status == TaskStatus.IN_PROGRESS]
    completed = [t for t in tasks if t.status == TaskStatus.COMPLETED]

    if pending:
        prompt += f"## PENDING TASKS ({len(pending)})\n"
        prompt += "".join(_format_task(t, i) for i, t in enumerate(pending, 1))
        prompt += "\n"

    if in_progress:
        prompt += f"## IN PROGRESS TASKS ({len(in_progress)})\n"
        prompt += "".join(_format_task(t, i) for i, t in enumerate(in_progress, 1))
        prompt += "\n"

    if completed:
        prompt += f"## COMPLETED TASKS ({len(completed)})\n"
        shown = completed[:MAX_COMPLETED_TASKS_IN_PROMPT]
        prompt += "".join(_format_task(t, i) for i, t in enumerate(shown, 1))
        remaining = len(completed) - len(shown)
        if remaining > 0:
            prompt += f"... and {remaining} more completed tasks\n"
        prompt += "\n"

    return prompt


context_collector = ContextCollector()
