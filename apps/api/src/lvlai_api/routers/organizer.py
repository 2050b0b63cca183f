"""
Organizer agent API endpoints.

Every endpoint except ``/health`` requires a bearer token and works on the
caller's own profile and tasks only.
"""

import logging
from dataclasses import asdict
from datetime import datetime, UTC
from typing import Any, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.encoders import jsonable_encoder
from pydantic.alias_generators import to_camel
from sqlmodel import Session

from lvlai_api.ai.context_collector import format_context_for_prompt
from lvlai_api.ai.model_gateway import ProviderName, configured_providers
from lvlai_api.ai.models import (
    ApplyOptimizationRequest,
    ApplyOptimizationResponse,
    BreakdownRequest,
    ChatRequest,
    OptimizationMetadata,
    OrganizerMetadata,
    WorkloadOptimizationResponse,
    metadata_dict,
)
from lvlai_api.ai.organizer_agent import (
    DEFAULT_OPTIMIZATION_DAYS,
    DEFAULT_OPTIMIZATION_MAX_TASKS,
    organizer_agent,
)
from lvlai_api.auth import get_current_user_id
from lvlai_api.common.error_handlers import ServiceError
from lvlai_api.config import settings
from lvlai_api.database import get_session
from lvlai_api.exceptions import debug_details, status_for_service_error
from lvlai_api.models import ErrorResponse
from lvlai_api.rate_limiter import get_rate_limit_for_path, limiter

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/organizer", tags=["organizer"])

MAX_OPTIMIZATION_DAYS = 31
MAX_OPTIMIZATION_TASKS = 50

ORGANIZER_FEATURES = [
    "chat",
    "organization-suggestions",
    "daily-plan",
    "productivity-analysis",
    "motivation",
    "workload-optimization",
    "task-breakdown",
    "provider-test",
]

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Bad request"},
    401: {"model": ErrorResponse, "description": "Not authenticated"},
    404: {"model": ErrorResponse, "description": "User not found"},
    500: {"model": ErrorResponse, "description": "Internal server error"},
}


def _raise_http_error(exc: Exception, message: str, request: Request) -> NoReturn:
    """Re-raise ``exc`` as an HTTPException carrying the standard error body"""
    if isinstance(exc, ServiceError):
        status_code = status_for_service_error(exc)
        code = exc.error_code or "SERVICE_ERROR"
        error = exc.message
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        code = "INTERNAL_SERVER_ERROR"
        error = None if settings.is_production else str(exc) or type(exc).__name__

    raise HTTPException(
        status_code=status_code,
        detail=ErrorResponse.create(
            code=code,
            message=message,
            error=error,
            details=debug_details(exc, request.url.path),
        ).model_dump(exclude_none=True),
    ) from exc


def _metadata(user_id: str | None = None, **fields: Any) -> dict[str, Any]:
    return metadata_dict(
        OrganizerMetadata(user_id=user_id, timestamp=datetime.now(UTC), **fields)
    )


def _camelize(value: Any) -> Any:
    if isinstance(value, dict):
        return {to_camel(key): _camelize(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_camelize(item) for item in value]
    return value


@router.post("/chat", responses=ERROR_RESPONSES)
@limiter.limit(get_rate_limit_for_path("/api/organizer/chat"))
async def chat(
    request: Request,
    response: Response,
    body: ChatRequest,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """Chat with the organizer agent about the caller's tasks"""
    try:
        answer = await organizer_agent.chat(
            session,
            user_id,
            body.message.strip(),
            temperature=body.temperature,
            max_tokens=body.max_tokens,
            provider=body.provider,
        )
        return {
            "success": True,
            "response": answer,
            "metadata": _metadata(
                user_id, model=organizer_agent.model_name(body.provider)
            ),
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Organizer chat error for user {user_id}: {e}")
        _raise_http_error(e, "Failed to get response from organizer", request)


@router.get("/suggestions", responses=ERROR_RESPONSES)
@limiter.limit(get_rate_limit_for_path("/api/organizer/suggestions"))
async def get_suggestions(
    request: Request,
    response: Response,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """Task organization and prioritization suggestions"""
    try:
        suggestions = await organizer_agent.get_organization_suggestions(session, user_id)
        return {
            "success": True,
            "suggestions": suggestions,
            "metadata": _metadata(user_id, type="organization_suggestions"),
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting suggestions for user {user_id}: {e}")
        _raise_http_error(e, "Failed to get organization suggestions", request)


@router.get("/daily-plan", responses=ERROR_RESPONSES)
@limiter.limit(get_rate_limit_for_path("/api/organizer/daily-plan"))
async def get_daily_plan(
    request: Request,
    response: Response,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """Ordered plan of what to work on today"""
    try:
        plan = await organizer_agent.get_daily_plan(session, user_id)
        return {
            "success": True,
            "plan": plan,
            "metadata": _metadata(
                user_id,
                type="daily_plan",
                plan_date=datetime.now(UTC).date().isoformat(),
            ),
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting daily plan for user {user_id}: {e}")
        _raise_http_error(e, "Failed to get daily plan", request)


@router.get("/productivity-analysis", responses=ERROR_RESPONSES)
@limiter.limit(get_rate_limit_for_path("/api/organizer/productivity-analysis"))
async def get_productivity_analysis(
    request: Request,
    response: Response,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    try:
        analysis = await organizer_agent.analyze_productivity(session, user_id)
        return {
            "success": True,
            "analysis": analysis,
            "metadata": _metadata(user_id, type="productivity_analysis"),
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error analyzing productivity for user {user_id}: {e}")
        _raise_http_error(e, "Failed to analyze productivity", request)


@router.get("/motivation", responses=ERROR_RESPONSES)
@limiter.limit(get_rate_limit_for_path("/api/organizer/motivation"))
async def get_motivation(
    request: Request,
    response: Response,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    try:
        motivation = await organizer_agent.get_motivation(session, user_id)
        return {
            "success": True,
            "motivation": motivation,
            "metadata": _metadata(user_id, type="motivation"),
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting motivation for user {user_id}: {e}")
        _raise_http_error(e, "Failed to get motivation", request)


@router.post("/breakdown-task", responses=ERROR_RESPONSES)
@limiter.limit(get_rate_limit_for_path("/api/organizer/breakdown-task"))
async def breakdown_task(
    request: Request,
    response: Response,
    body: BreakdownRequest,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """Break a task description into subtasks (free text, not parsed)"""
    try:
        breakdown = await organizer_agent.breakdown_task(
            session, user_id, body.task_description.strip()
        )
        return {
            "success": True,
            "breakdown": breakdown,
            "metadata": _metadata(user_id, type="task_breakdown"),
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error breaking down task for user {user_id}: {e}")
        _raise_http_error(e, "Failed to break down task", request)


@router.get("/context", responses=ERROR_RESPONSES)
@limiter.limit(get_rate_limit_for_path("/api/organizer/context"))
async def get_context(
    request: Request,
    response: Response,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """The context snapshot and the exact text block sent to the model"""
    try:
        context = organizer_agent.collector.collect_context(session, user_id)
        return {
            "success": True,
            "context": jsonable_encoder(_camelize(asdict(context))),
            "formattedContext": format_context_for_prompt(context),
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting context for user {user_id}: {e}")
        _raise_http_error(e, "Failed to get context", request)


@router.get("/test-provider", responses=ERROR_RESPONSES)
@limiter.limit(get_rate_limit_for_path("/api/organizer/test-provider"))
async def check_provider_connection(
    request: Request,
    response: Response,
    provider: ProviderName | None = Query(None, description="Provider to test"),
    user_id: str = Depends(get_current_user_id),
):
    """Send a fixed hello prompt to a provider and report whether it answered"""
    try:
        result = await organizer_agent.test_provider_connection(provider)
        return {
            "success": True,
            "testResult": result,
            "metadata": _metadata(type="provider_test"),
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error testing provider {provider}: {e}")
        _raise_http_error(e, "Failed to test AI provider", request)


@router.get("/health")
async def organizer_health():
    """Public liveness report; never calls a provider"""
    providers = configured_providers()
    active = next(iter(providers.values()), None)
    return {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "service": "organizer-agent",
        "model": active.model if active else settings.deepseek_model,
        "providers": {name.value: name in providers for name in ProviderName},
        "features": ORGANIZER_FEATURES,
    }


@router.get(
    "/workload-optimization",
    response_model=WorkloadOptimizationResponse,
    responses=ERROR_RESPONSES,
)
@limiter.limit(get_rate_limit_for_path("/api/organizer/workload-optimization"))
async def optimize_workload(
    request: Request,
    response: Response,
    days: int = Query(
        DEFAULT_OPTIMIZATION_DAYS,
        ge=1,
        le=MAX_OPTIMIZATION_DAYS,
        description="Planning window in days",
    ),
    max_tasks: int = Query(
        DEFAULT_OPTIMIZATION_MAX_TASKS,
        ge=1,
        le=MAX_OPTIMIZATION_TASKS,
        alias="maxTasks",
        description="Maximum number of open tasks offered to the model",
    ),
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """
    Propose due date and priority changes that spread open tasks over the
    next ``days`` days. Nothing is written; see apply-workload-optimization.
    """
    try:
        logger.info(
            f"Optimizing workload for user {user_id} (days={days}, maxTasks={max_tasks})"
        )
        result = await organizer_agent.optimize_workload_with_timeout(
            session, user_id, days=days, max_tasks=max_tasks
        )
        return WorkloadOptimizationResponse(
            analysis=result.analysis,
            recommendations=result.recommendations,
            summary=result.summary,
            metadata=OptimizationMetadata(
                user_id=user_id,
                timestamp=datetime.now(UTC),
                days=days,
                max_tasks=max_tasks,
            ),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(
            f"Error optimizing workload for user {user_id} (days={days}): "
            f"{type(e).__name__}: {e}"
        )
        _raise_http_error(e, "Failed to optimize workload", request)


@router.post(
    "/apply-workload-optimization",
    response_model=ApplyOptimizationResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
)
@limiter.limit(get_rate_limit_for_path("/api/organizer/apply-workload-optimization"))
async def apply_workload_optimization(
    request: Request,
    response: Response,
    body: ApplyOptimizationRequest,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """Write the caller-approved recommendations; failures are reported per item"""
    try:
        result = organizer_agent.apply_workload_optimization(
            session, user_id, body.recommendations
        )
        return ApplyOptimizationResponse(
            updated=result.updated,
            errors=result.errors or None,
            message=f"Successfully updated {result.updated} task(s)",
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error applying workload optimization for user {user_id}: {e}")
        _raise_http_error(e, "Failed to apply workload optimization", request)
