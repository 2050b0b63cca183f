"""
Organizer agent: grounds prompts in the user's tasks and talks to the model.
"""

import asyncio
import logging

from sqlmodel import Session

from lvlai_api.ai.context_collector import (
    ContextCollector,
    context_collector,
    format_context_for_prompt,
)
from lvlai_api.ai.model_gateway import (
    CompletionOptions,
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    ProviderName,
    check_provider,
    select_provider,
)
from lvlai_api.ai.models import (
    ApplyOptimizationResult,
    RecommendationToApply,
    WorkloadOptimizationResult,
)
from lvlai_api.ai.prompts import (
    DAILY_PLAN_PROMPT,
    MOTIVATION_PROMPT,
    PRODUCTIVITY_PROMPT,
    SUGGESTIONS_PROMPT,
    build_breakdown_prompt,
    build_optimization_prompt,
    build_system_prompt,
)
from lvlai_api.ai.recommendation_extractor import extract_recommendations
from lvlai_api.ai.task_utils import (
    calendar_date_to_datetime,
    parse_calendar_date,
    parse_priority,
    select_optimization_candidates,
)
from lvlai_api.common.error_handlers import (
    OptimizationTimeoutError,
    ResourceNotFoundError,
    ServiceError,
    ValidationError,
    validate_uuid,
)
from lvlai_api.config import settings
from lvlai_api.models import TaskUpdate
from lvlai_api.services import TaskService, task_service

logger = logging.getLogger(__name__)

DEFAULT_OPTIMIZATION_DAYS = 7
DEFAULT_OPTIMIZATION_MAX_TASKS = 15
NOTHING_TO_OPTIMIZE = "No pending tasks found to optimize."


class OrganizerAgent:
    """Organizer agent operations for one request"""

    def __init__(
        self,
        collector: ContextCollector | None = None,
        tasks: TaskService | None = None,
    ):
        self.collector = collector or context_collector
        self.task_service = tasks or task_service

    async def chat(
        self,
        session: Session,
        user_id: str,
        message: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
        provider: str | ProviderName | None = None,
    ) -> str:
        """Answer a message with the user's full context in the system prompt"""
        logger.info(f"Retrieving context for user: {user_id}")
        context = self.collector.collect_context(session, user_id)
        system_prompt = build_system_prompt(format_context_for_prompt(context))

        model_provider = select_provider(provider)
        logger.info(f"Using AI provider: {model_provider.name.value}")

        options = CompletionOptions(
            temperature=DEFAULT_TEMPERATURE if temperature is None else temperature,
            max_tokens=max_tokens or DEFAULT_MAX_TOKENS,
        )
        # The SDK call blocks; run it off the event loop
        return await asyncio.to_thread(
            model_provider.complete, system_prompt, message, options
        )

    def model_name(self, provider: str | ProviderName | None = None) -> str:
        """Model identifier of the provider a call would use"""
        return select_provider(provider).model

    async def test_provider_connection(
        self, provider: str | ProviderName | None = None
    ) -> dict[str, str]:
        return await asyncio.to_thread(check_provider, provider)

    async def get_organization_suggestions(
        self, session: Session, user_id: str, provider: str | None = None
    ) -> str:
        return await self.chat(
            session, user_id, SUGGESTIONS_PROMPT, temperature=0.6, provider=provider
        )

    async def get_daily_plan(
        self, session: Session, user_id: str, provider: str | None = None
    ) -> str:
        return await self.chat(
            session, user_id, DAILY_PLAN_PROMPT, temperature=0.6, provider=provider
        )

    async def analyze_productivity(
        self, session: Session, user_id: str, provider: str | None = None
    ) -> str:
        return await self.chat(
            session, user_id, PRODUCTIVITY_PROMPT, temperature=0.7, provider=provider
        )

    async def get_motivation(
        self, session: Session, user_id: str, provider: str | None = None
    ) -> str:
        return await self.chat(
            session, user_id, MOTIVATION_PROMPT, temperature=0.8, provider=provider
        )

    async def breakdown_task(
        self,
        session: Session,
        user_id: str,
        task_description: str,
        provider: str | None = None,
    ) -> str:
        """Split a task description into subtasks; the answer is free text"""
        return await self.chat(
            session,
            user_id,
            build_breakdown_prompt(task_description),
            temperature=0.6,
            provider=provider,
        )

    async def optimize_workload(
        self,
        session: Session,
        user_id: str,
        days: int = DEFAULT_OPTIMIZATION_DAYS,
        max_tasks: int = DEFAULT_OPTIMIZATION_MAX_TASKS,
        provider: str | None = None,
    ) -> WorkloadOptimizationResult:
        """
        Ask the model to rebalance the user's open tasks over ``days`` days.

        Only the ``max_tasks`` most pressing pending/in-progress tasks are
        offered. With no such tasks the model is not called at all.
        """
        tasks = self.collector.retrieve_user_tasks(session, user_id)
        candidates = select_optimization_candidates(tasks, max_tasks)

        if not candidates:
            logger.info(f"No open tasks to optimize for user {user_id}")
            return WorkloadOptimizationResult(
                analysis=NOTHING_TO_OPTIMIZE, recommendations=[], summary=""
            )

        prompt = build_optimization_prompt(candidates, days)
        # Low temperature for structured output
        ai_response = await self.chat(
            session,
            user_id,
            prompt,
            temperature=0.2,
            max_tokens=2000,
            provider=provider,
        )

        result = extract_recommendations(ai_response, candidates)
        logger.info(
            f"Optimization complete: {len(result.recommendations)} recommendations found"
        )
        return result

    async def optimize_workload_with_timeout(
        self,
        session: Session,
        user_id: str,
        days: int = DEFAULT_OPTIMIZATION_DAYS,
        max_tasks: int = DEFAULT_OPTIMIZATION_MAX_TASKS,
        timeout_seconds: float | None = None,
    ) -> WorkloadOptimizationResult:
        """
        ``optimize_workload`` bounded by a timeout.

        On expiry the caller stops waiting; a provider call already running in
        its worker thread is left to finish on its own.
        """
        timeout = timeout_seconds
        if timeout is None:
            timeout = settings.optimization_timeout_seconds
        try:
            return await asyncio.wait_for(
                self.optimize_workload(session, user_id, days, max_tasks),
                timeout=timeout,
            )
        except TimeoutError as e:
            logger.error(
                f"⏱️ Workload optimization for user {user_id} exceeded {timeout}s"
            )
            raise OptimizationTimeoutError(timeout) from e

    def apply_workload_optimization(
        self,
        session: Session,
        user_id: str,
        recommendations: list[RecommendationToApply],
    ) -> ApplyOptimizationResult:
        """
        Write caller-approved due dates/priorities back to the user's tasks.

        Items are applied one at a time, each in its own transaction. A failing
        item is reported in ``errors`` and does not stop the rest.
        """
        validate_uuid(user_id, "user_id")
        result = ApplyOptimizationResult()

        for rec in recommendations:
            try:
                update = self._build_task_update(rec)
                if update is None:
                    logger.debug(f"Nothing to apply for task {rec.task_id}")
                    continue
                self.task_service.update_task(session, rec.task_id, update, user_id)
                result.updated += 1
            except ResourceNotFoundError:
                result.errors.append(f"Task {rec.task_id} not found")
            except ServiceError as e:
                result.errors.append(f"Failed to update task {rec.task_id}: {e.message}")

        logger.info(
            f"Applied workload optimization for user {user_id}: "
            f"{result.updated} updated, {len(result.errors)} errors"
        )
        if result.errors:
            logger.warning(f"Apply errors: {result.errors}")
        return result

    def _build_task_update(self, rec: RecommendationToApply) -> TaskUpdate | None:
        """Partial update holding only the supplied fields"""
        validate_uuid(rec.task_id, "taskId")
        fields = {}

        if rec.suggested_due_date:
            due = parse_calendar_date(rec.suggested_due_date)
            if due is None:
                raise ValidationError(
                    f"Invalid due date: {rec.suggested_due_date}",
                    field="suggestedDueDate",
                )
            fields["due_date"] = calendar_date_to_datetime(due)

        if rec.suggested_priority:
            priority = parse_priority(rec.suggested_priority)
            if priority is None:
                raise ValidationError(
                    f"Invalid priority: {rec.suggested_priority}",
                    field="suggestedPriority",
                )
            fields["priority"] = priority

        if not fields:
            return None
        return TaskUpdate(**fields)


organizer_agent = OrganizerAgent()
