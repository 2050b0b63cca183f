"""
Common utilities module
"""

from lvlai_api.common.error_handlers import (
    ConfigurationError,
    ExternalServiceError,
    OptimizationTimeoutError,
    ProviderError,
    ResourceNotFoundError,
    ServiceError,
    ValidationError,
    safe_execute,
    validate_uuid,
)

__all__ = [
    "ServiceError",
    "ResourceNotFoundError",
    "ValidationError",
    "ConfigurationError",
    "ExternalServiceError",
    "ProviderError",
    "OptimizationTimeoutError",
    "safe_execute",
    "validate_uuid",
]
