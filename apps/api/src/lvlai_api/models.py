from datetime import datetime, UTC
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel
from sqlalchemy import JSON
from sqlalchemy import Enum as SQLEnum
from sqlmodel import Column, Relationship, SQLModel
from sqlmodel import Field as SQLField


class TaskStatus(str, Enum):
    """Task status enum"""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    """Task priority enum, declared from lowest to highest"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def rank(self) -> int:
        return PRIORITY_RANK[self]


PRIORITY_RANK: dict[TaskPriority, int] = {
    TaskPriority.LOW: 1,
    TaskPriority.MEDIUM: 2,
    TaskPriority.HIGH: 3,
    TaskPriority.URGENT: 4,
}


# Database Models (SQLModel)
class UserBase(SQLModel):
    """Base user model"""

    name: str = SQLField(min_length=1, max_length=100)
    email: str = SQLField(unique=True, index=True)
    level: int = SQLField(default=1, ge=1)
    xp: int = SQLField(default=0, ge=0)
    total_tasks_completed: int = SQLField(default=0, ge=0)
    timezone: str = SQLField(default="UTC", max_length=64)
    daily_goal_xp: int = SQLField(default=100, ge=0)


class User(UserBase, table=True):  # type: ignore[call-arg]
    """User database model"""

    __tablename__ = "users"

    id: UUID | None = SQLField(default_factory=uuid4, primary_key=True)
    created_at: datetime | None = SQLField(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime | None = SQLField(default_factory=lambda: datetime.now(UTC))

    # Relationships
    tasks: list["Task"] = Relationship(back_populates="user")


class TaskBase(SQLModel):
    """Base task model"""

    title: str = SQLField(min_length=1, max_length=200)
    description: str | None = SQLField(default=None, max_length=1000)
    priority: TaskPriority = SQLField(
        default=TaskPriority.MEDIUM,
        sa_column=Column(
            SQLEnum(TaskPriority, values_callable=lambda x: [e.value for e in x])
        ),
    )
    status: TaskStatus = SQLField(
        default=TaskStatus.PENDING,
        sa_column=Column(
            SQLEnum(TaskStatus, values_callable=lambda x: [e.value for e in x])
        ),
    )
    due_date: datetime | None = SQLField(default=None)
    completed_at: datetime | None = SQLField(default=None)
    points: int = SQLField(default=10, ge=0, description="XP awarded on completion")
    tags: list[str] = SQLField(default_factory=list, sa_column=Column(JSON))


class Task(TaskBase, table=True):  # type: ignore[call-arg]
    """Task database model"""

    __tablename__ = "tasks"

    id: UUID | None = SQLField(default_factory=uuid4, primary_key=True)
    user_id: UUID = SQLField(foreign_key="users.id", index=True, ondelete="CASCADE")
    created_at: datetime | None = SQLField(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime | None = SQLField(default_factory=lambda: datetime.now(UTC))

    # Relationships
    user: User = Relationship(back_populates="tasks")


# API Models (Pydantic)
class UserCreate(BaseModel):
    """User creation request"""

    name: str
    email: str


class TaskCreate(TaskBase):
    """Task creation request"""

    pass


class TaskUpdate(BaseModel):
    """Partial task update; only fields that are set get written"""

    title: str | None = None
    description: str | None = None
    priority: TaskPriority | None = None
    status: TaskStatus | None = None
    due_date: datetime | None = None
    points: int | None = None
    tags: list[str] | None = None


# Error Response Models
class ErrorResponse(BaseModel):
    """Standardized error response model

    ``message`` is the human-readable summary, ``error`` the underlying cause.
    ``details`` is only populated outside production.
    """

    success: bool = False
    message: str
    error: str | None = None
    error_code: str | None = None
    details: dict[str, Any] | None = None

    @classmethod
    def create(
        cls,
        code: str,
        message: str,
        error: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> "ErrorResponse":
        """Create a standardized error response"""
        return cls(message=message, error=error, error_code=code, details=details)
