"""
Common error handling utilities
"""

import logging
from uuid import UUID

from sqlmodel import Session

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base exception for service-layer errors"""

    def __init__(self, message: str, error_code: str | None = None):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class ResourceNotFoundError(ServiceError):
    """Raised when a requested resource is not found"""

    def __init__(self, resource_type: str, resource_id: str | UUID):
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type} with ID {resource_id} not found"
        super().__init__(message, "RESOURCE_NOT_FOUND")


class ValidationError(ServiceError):
    """Raised when validation fails"""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message, "VALIDATION_ERROR")


class ConfigurationError(ServiceError):
    """Raised when a required setting (e.g. an AI provider key) is missing"""

    def __init__(self, message: str):
        super().__init__(message, "CONFIGURATION_ERROR")


class ExternalServiceError(ServiceError):
    """Raised when external service (e.g., an AI provider) fails"""

    def __init__(self, service_name: str, message: str, error_code: str | None = None):
        self.service_name = service_name
        self.detail = message
        full_message = f"{service_name} service error: {message}"
        super().__init__(full_message, error_code or "EXTERNAL_SERVICE_ERROR")


class ProviderError(ExternalServiceError):
    """Raised when a model provider call fails or returns no completion"""

    def __init__(self, provider: str, message: str):
        super().__init__(provider, message, "PROVIDER_ERROR")


class OptimizationTimeoutError(ServiceError):
    """Raised when workload optimization exceeds its time bound"""

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(
            "Optimization timeout: Process took too long", "OPTIMIZATION_TIMEOUT"
        )


def safe_execute(session: Session, operation, rollback_on_error: bool = True):
    """Safely execute database operations with error handling"""
    try:
        result = operation()
        session.commit()
        return result
    except ServiceError:
        if rollback_on_error:
            session.rollback()
        raise
    except Exception as e:
        if rollback_on_error:
            session.rollback()

        # Log the error
        logger.error(f"Database operation failed: {e}")

        # Re-raise as service error
        if "constraint" in str(e).lower():
            raise ValidationError("Database constraint violation") from e
        raise ServiceError(f"Database operation failed: {str(e)}") from e


def validate_uuid(value: str | UUID, name: str) -> UUID:
    """Validate UUID format"""
    if isinstance(value, UUID):
        return value

    try:
        return UUID(str(value))
    except (ValueError, TypeError):
        raise ValidationError(
            f"Invalid UUID format for {name}: {value}", field=name
        ) from None
