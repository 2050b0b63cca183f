"""
AI service data models and types
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from lvlai_api.models import TaskPriority, TaskStatus


# Context snapshot handed to prompts
@dataclass
class UserContext:
    """Profile fields the organizer shows to the model."""

    user_id: str
    name: str
    email: str
    level: int
    xp: int
    total_tasks_completed: int
    timezone: str
    daily_goal_xp: int


@dataclass
class TaskContext:
    """A task as seen by the organizer, with a computed overdue flag."""

    id: str
    title: str
    priority: TaskPriority
    status: TaskStatus
    points: int
    tags: list[str]
    created_at: datetime | None
    updated_at: datetime | None
    description: str | None = None
    due_date: datetime | None = None
    completed_at: datetime | None = None
    is_overdue: bool = False


@dataclass
class TaskStats:
    total_tasks: int = 0
    pending_tasks: int = 0
    in_progress_tasks: int = 0
    completed_tasks: int = 0
    overdue_tasks: int = 0


@dataclass
class RetrievedContext:
    """User profile, task list and derived statistics."""

    user: UserContext
    tasks: list[TaskContext] = field(default_factory=list)
    stats: TaskStats = field(default_factory=TaskStats)


class CamelModel(BaseModel):
    """Base for organizer API payloads, serialized with camelCase keys"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Workload optimization
class TaskRecommendation(CamelModel):
    """A proposed due date and/or priority change for one task."""

    task_id: str
    task_title: str
    current_due_date: date | None = None
    suggested_due_date: date | None = None
    current_priority: TaskPriority
    suggested_priority: TaskPriority | None = None
    reason: str


class WorkloadOptimizationResult(CamelModel):
    analysis: str
    recommendations: list[TaskRecommendation] = Field(default_factory=list)
    summary: str = ""


class OptimizationMetadata(CamelModel):
    user_id: str
    timestamp: datetime
    type: str = "workload_optimization"
    days: int
    max_tasks: int

    @field_serializer("timestamp")
    def serialize_timestamp(self, value: datetime) -> str:
        return value.isoformat()


class WorkloadOptimizationResponse(WorkloadOptimizationResult):
    success: bool = True
    metadata: OptimizationMetadata


class RecommendationToApply(CamelModel):
    """One caller-approved change; only supplied fields are written."""

    task_id: str = Field(..., min_length=1)
    suggested_due_date: str | None = None
    suggested_priority: str | None = None


class ApplyOptimizationRequest(CamelModel):
    recommendations: list[RecommendationToApply]


class ApplyOptimizationResult(CamelModel):
    updated: int = 0
    errors: list[str] = Field(default_factory=list)


class ApplyOptimizationResponse(CamelModel):
    success: bool = True
    updated: int
    errors: list[str] | None = None
    message: str


# Free-text organizer endpoints
class ChatRequest(CamelModel):
    message: str = Field(..., min_length=1, max_length=1000)
    temperature: float | None = Field(None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(None, ge=1, le=8000)
    provider: str | None = None


class BreakdownRequest(CamelModel):
    task_description: str = Field(..., min_length=1, max_length=500)


class OrganizerMetadata(CamelModel):
    """Metadata attached to free-text organizer answers"""

    user_id: str | None = None
    timestamp: datetime
    type: str | None = None
    model: str | None = None
    plan_date: str | None = Field(None, alias="date")

    @field_serializer("timestamp")
    def serialize_timestamp(self, value: datetime) -> str:
        return value.isoformat()


def metadata_dict(metadata: BaseModel) -> dict[str, Any]:
    """Serialize metadata with aliases, omitting unset optional fields"""
    return metadata.model_dump(by_alias=True, exclude_none=True, mode="json")
