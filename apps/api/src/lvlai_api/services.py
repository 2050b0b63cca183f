import logging
from uuid import UUID

from sqlmodel import Session, select

from lvlai_api.base_service import BaseService
from lvlai_api.common.error_handlers import safe_execute, validate_uuid
from lvlai_api.models import (
    Task,
    TaskCreate,
    TaskStatus,
    TaskUpdate,
    User,
    UserCreate,
)

logger = logging.getLogger(__name__)


class UserService:
    """User service"""

    @staticmethod
    def get_user(session: Session, user_id: str | UUID) -> User | None:
        """Get user by ID, or None when no such user exists"""
        user_id = validate_uuid(user_id, "user_id")
        return session.exec(select(User).where(User.id == user_id)).first()

    @staticmethod
    def create_user(session: Session, user_data: UserCreate, user_id: str | UUID) -> User:
        """Create user with an externally assigned ID"""
        user_id = validate_uuid(user_id, "user_id")

        def create_operation():
            user = User(id=user_id, name=user_data.name, email=user_data.email)
            session.add(user)
            session.flush()
            return user

        return safe_execute(session, create_operation)


class TaskService(BaseService[Task, TaskCreate, TaskUpdate]):
    """Task service; every query is scoped to the owning user"""

    def __init__(self):
        super().__init__(Task)

    def _create_instance(self, data: TaskCreate, **kwargs) -> Task:
        return Task(**data.model_dump(), user_id=kwargs["user_id"])

    def _get_user_filter(self, user_id: UUID):
        return Task.user_id == user_id

    def create_task(self, session: Session, task_data: TaskCreate, user_id: str | UUID) -> Task:
        """Create task"""
        return self.create(session, task_data, user_id)

    def get_tasks(self, session: Session, user_id: str | UUID) -> list[Task]:
        """Get all tasks for user, newest first"""
        return self.get_all(session, user_id)

    def get_open_tasks(self, session: Session, user_id: str | UUID) -> list[Task]:
        """Get pending and in-progress tasks for user, newest first"""
        return [
            task
            for task in self.get_tasks(session, user_id)
            if task.status in (TaskStatus.PENDING, TaskStatus.IN_PROGRESS)
        ]

    def update_task(
        self,
        session: Session,
        task_id: str | UUID,
        task_data: TaskUpdate,
        user_id: str | UUID,
    ) -> Task:
        """Partially update an owned task"""
        task = self.update(session, task_id, task_data, user_id)
        logger.debug(f"Updated task {task.id}: {task_data.model_dump(exclude_unset=True)}")
        return task


# Service instances
user_service = UserService()
task_service = TaskService()
