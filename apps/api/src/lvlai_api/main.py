import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from lvlai_api.ai.model_gateway import configured_providers
from lvlai_api.common.error_handlers import ServiceError
from lvlai_api.config import settings, validate_production_config
from lvlai_api.database import db
from lvlai_api.exceptions import (
    general_exception_handler,
    http_exception_handler,
    pydantic_validation_exception_handler,
    service_exception_handler,
    validation_exception_handler,
)
from lvlai_api.rate_limiter import configure_rate_limiting, limiter
from lvlai_api.routers import organizer


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger(__name__)
    logger.info("🚀 FastAPI server starting up...")

    validate_production_config()

    # Log configuration info
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Host: {settings.host}, Port: {settings.port}")
    logger.info(f"Debug mode: {settings.debug}")

    providers = configured_providers()
    if providers:
        names = ", ".join(name.value for name in providers)
        logger.info(f"✅ AI providers configured: {names}")
    else:
        logger.warning("⚠️ No AI provider configured, organizer endpoints will fail")

    # Test database connection (non-blocking)
    try:
        if await db.health_check():
            logger.info("✅ Database connection successful")
            logger.info("💡 Tables are created manually: python create_tables.py")
        else:
            logger.warning("⚠️ Database connection failed, continuing in degraded mode")
    except Exception as e:
        logger.warning(
            f"⚠️ Database health check error: {e}, continuing in degraded mode"
        )

    logger.info("✅ FastAPI server startup complete")
    yield
    # Shutdown
    logger.info("🔄 FastAPI server shutting down...")


# Initialize FastAPI app
app = FastAPI(
    title=settings.api_title,
    description=settings.api_description,
    version=settings.api_version,
    lifespan=lifespan,
)


def is_origin_allowed(origin: str) -> bool:
    """Check if origin is allowed based on our CORS policy"""
    if origin in settings.cors_origins_list:
        return True

    logging.getLogger(__name__).warning(f"CORS: Origin {origin} BLOCKED")
    return False


def _add_cors_headers(response: Response, origin: str) -> None:
    response.headers["Access-Control-Allow-Origin"] = origin
    response.headers["Access-Control-Allow-Credentials"] = "true"
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE, OPTIONS"
    response.headers["Access-Control-Allow-Headers"] = "*"
    response.headers["Access-Control-Max-Age"] = "86400"


# Slow request threshold in seconds
SLOW_REQUEST_THRESHOLD = 1.0


# CORS handling + request timing
@app.middleware("http")
async def cors_middleware(request: Request, call_next):
    perf_logger = logging.getLogger("lvlai.perf")
    origin = request.headers.get("origin")

    # Handle preflight requests first
    if request.method == "OPTIONS" and origin and is_origin_allowed(origin):
        preflight_response = Response(status_code=200)
        _add_cors_headers(preflight_response, origin)
        return preflight_response

    start_time = time.monotonic()
    response = await call_next(request)
    duration = time.monotonic() - start_time

    method = request.method
    path = request.url.path
    if duration >= SLOW_REQUEST_THRESHOLD:
        perf_logger.warning(
            "SLOW %s %s %d %.3fs", method, path, response.status_code, duration
        )
    else:
        perf_logger.info("%s %s %d %.3fs", method, path, response.status_code, duration)

    # Add timing header for client-side observability
    response.headers["X-Response-Time"] = f"{duration:.3f}s"

    # Always add CORS headers for allowed origins
    if origin and is_origin_allowed(origin):
        _add_cors_headers(response, origin)

    return response


# Configure rate limiting
configure_rate_limiting(app)

# Add exception handlers
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(ValidationError, pydantic_validation_exception_handler)
app.add_exception_handler(ServiceError, service_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# Include API routers
app.include_router(organizer.router, prefix="/api")


# Health check endpoint
@app.get("/health")
@limiter.limit("1000 per minute")
async def health_check(request: Request):
    """Health check endpoint"""
    db_healthy = await db.health_check()

    # Minimal information exposure for security
    if db_healthy:
        return JSONResponse({"status": "healthy", "message": "OK"})
    return JSONResponse(
        {"status": "unhealthy", "message": "Service temporarily unavailable"},
        status_code=503,
    )


# Root endpoint
@app.get("/")
@limiter.limit("1000 per minute")
async def root(request: Request):
    """Root endpoint with API information"""
    return JSONResponse({"message": "LVL.AI API", "status": "active"})


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "lvlai_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        reload_dirs=["./"],
    )
