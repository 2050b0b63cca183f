"""
Rate limiting for API protection
"""

import logging

from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

logger = logging.getLogger(__name__)

# In-memory storage; limits are per process
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200 per minute", "1000 per hour"],
    headers_enabled=True,
    storage_uri=None,
)

# Organizer endpoints call a paid model provider on every request
RATE_LIMITS = {
    "/api/organizer/chat": "30 per minute",
    "/api/organizer/suggestions": "20 per hour",
    "/api/organizer/daily-plan": "20 per hour",
    "/api/organizer/productivity-analysis": "20 per hour",
    "/api/organizer/motivation": "30 per hour",
    "/api/organizer/breakdown-task": "30 per hour",
    "/api/organizer/test-provider": "10 per minute",
    "/api/organizer/workload-optimization": "10 per hour",
    "/api/organizer/apply-workload-optimization": "30 per minute",
    "/api/organizer/context": "60 per minute",
    "/api/organizer/*": "60 per minute",
    # Health check - very high limit
    "/health": "1000 per minute",
    "/": "1000 per minute",
}

DEFAULT_RATE_LIMIT = "60 per minute"


def get_rate_limit_for_path(path: str) -> str:
    """
    Get the appropriate rate limit for a given path
    """
    # Check exact matches first
    if path in RATE_LIMITS:
        return RATE_LIMITS[path]

    # Check wildcard patterns
    for pattern, limit in RATE_LIMITS.items():
        if "*" in pattern:
            base_path = pattern.replace("/*", "")
            if path.startswith(base_path):
                return limit

    return DEFAULT_RATE_LIMIT


def configure_rate_limiting(app):
    """
    Configure rate limiting for the FastAPI application
    """
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    logger.info("✅ Rate limiting configured with the following limits:")
    for path, limit in RATE_LIMITS.items():
        logger.info(f"  {path}: {limit}")

    return limiter
