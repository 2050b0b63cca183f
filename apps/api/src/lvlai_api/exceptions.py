"""
FastAPI exception handlers.

Every error answer carries ``success: false`` and a human-readable
``message``. Diagnostic ``details`` are only attached outside production.
"""

import logging
import traceback

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from lvlai_api.common.error_handlers import (
    ResourceNotFoundError,
    ServiceError,
    ValidationError,
)
from lvlai_api.config import settings
from lvlai_api.models import ErrorResponse

logger = logging.getLogger(__name__)


def debug_details(exc: Exception, path: str) -> dict | None:
    """Exception type and summary for error bodies; None in production"""
    if settings.is_production:
        return None
    return {
        "error_type": type(exc).__name__,
        "path": path,
        "traceback": traceback.format_exception_only(type(exc), exc)[-1].strip(),
    }


def status_for_service_error(exc: ServiceError) -> int:
    """Map a service-layer exception onto an HTTP status code"""
    if isinstance(exc, ResourceNotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    # ConfigurationError, ProviderError and OptimizationTimeoutError included
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions"""
    if isinstance(exc.detail, dict):
        content = {"success": False, **exc.detail}
        content.setdefault("message", "Request failed")
    else:
        content = ErrorResponse.create(
            code=f"HTTP_{exc.status_code}", message=str(exc.detail)
        ).model_dump(exclude_none=True)
    return JSONResponse(
        status_code=exc.status_code, content=content, headers=exc.headers
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors"""
    errors = []
    for error in exc.errors():
        errors.append(
            {
                "field": " -> ".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
        )

    logger.info(f"Request validation failed on {request.url.path}: {errors}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "message": "Request validation failed",
            "error_code": "VALIDATION_ERROR",
            "errors": errors,
        },
    )


async def pydantic_validation_exception_handler(
    request: Request, exc: PydanticValidationError
):
    """Handle Pydantic validation errors raised while building responses"""
    logger.error(f"Data validation failed on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse.create(
            code="VALIDATION_ERROR",
            message="Data validation failed",
            details=debug_details(exc, request.url.path),
        ).model_dump(exclude_none=True),
    )


async def service_exception_handler(request: Request, exc: ServiceError):
    """Handle service-layer exceptions"""
    status_code = status_for_service_error(exc)
    if status_code >= 500:
        logger.error(f"❌ {type(exc).__name__} on {request.url.path}: {exc.message}")
    else:
        logger.warning(f"⚠️ {type(exc).__name__} on {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse.create(
            code=exc.error_code or "SERVICE_ERROR",
            message=exc.message,
            error=exc.message,
            details=debug_details(exc, request.url.path),
        ).model_dump(exclude_none=True),
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions"""
    logger.error(f"Unexpected error: {type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse.create(
            code="INTERNAL_ERROR",
            message="Internal server error",
            error=None if settings.is_production else str(exc),
            details=debug_details(exc, request.url.path),
        ).model_dump(exclude_none=True),
    )
