"""
SchoolHub API - Main Application Entry Point

This module initializes and configures the FastAPI application including:
- Logging, Database and Redis connections
- CORS and request timeout middleware
- Exception handlers rendering the error envelope
- API routing and the uploaded file mount
- Health check endpoints
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from schoolhub.api import api_router
from schoolhub.core.config import settings
from schoolhub.core.database import async_session_maker, close_db, init_db
from schoolhub.core.exceptions import RateLimitExceededError, ServiceError
from schoolhub.core.redis import close_redis, get_redis, init_redis
from schoolhub.modules.shared import ErrorResponse

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events including:
    - Logging
    - Redis connection
    - Database connection
    """
    # Startup
    configure_logging()
    logger.info(f"Starting {settings.app_name} in {settings.python_env} mode...")

    # Initialize Redis
    try:
        await init_redis()
        logger.info("[OK] Redis connected")
    except Exception as e:
        logger.error(f"[FAIL] Redis connection failed: {e}")
        if settings.is_production:
            raise

    # Initialize Database
    try:
        await init_db()
        logger.info("[OK] Database connected")
    except Exception as e:
        logger.error(f"[FAIL] Database connection failed: {e}")
        if settings.is_production:
            raise

    yield  # Application runs here

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}...")
    await close_redis()
    await close_db()
    logger.info("[OK] Cleanup complete")


def error_response(status_code: int, message: str, error: str, headers=None) -> JSONResponse:
    """Render the error envelope."""
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message, error=error).model_dump(),
        headers=headers,
    )


app = FastAPI(
    title=settings.app_name,
    description="School management API: courses, enrollments, assignments, grading and attendance",
    version="0.1.0",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

app.include_router(api_router, prefix=settings.api_prefix)

# Uploaded files written by LocalObjectStore
app.mount(
    "/uploads",
    StaticFiles(directory=settings.storage_dir, check_dir=False),
    name="uploads",
)


# ============================================
# Exception handlers
# ============================================


@app.exception_handler(ServiceError)
async def service_error_handler(_request: Request, exc: ServiceError) -> JSONResponse:
    headers = None
    if isinstance(exc, RateLimitExceededError):
        headers = {"Retry-After": str(exc.retry_after_seconds)}
    return error_response(exc.status_code, exc.message, exc.error_code, headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        message = f"{location}: {first.get('msg', 'invalid value')}"
    else:
        message = "Invalid request"
    return error_response(400, message, "VALIDATION_ERROR")


@app.exception_handler(IntegrityError)
async def integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning(f"Unhandled integrity error: {exc.orig}")
    return error_response(409, "The request conflicts with existing data", "CONFLICT")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    try:
        code = HTTPStatus(exc.status_code).name
    except ValueError:
        code = "HTTP_ERROR"
    return error_response(exc.status_code, str(exc.detail), code, getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return error_response(500, "An unexpected error occurred.", "INTERNAL_ERROR")


# ============================================
# Middleware
# ============================================


@app.middleware("http")
async def request_timeout(request: Request, call_next):
    """Bound every request; the session dependency rolls back on cancellation."""
    try:
        return await asyncio.wait_for(call_next(request), timeout=settings.request_timeout_seconds)
    except asyncio.TimeoutError:
        logger.warning(f"Request timed out: {request.method} {request.url.path}")
        return error_response(504, "The request took too long to complete", "TIMEOUT")


# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================
# Health
# ============================================


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint for container orchestration."""
    return {"status": "healthy"}


@app.get("/ready", tags=["Health"])
async def readiness_check():
    """Readiness check: the database must answer; Redis is reported."""
    checks: dict[str, str] = {}
    try:
        async with async_session_maker() as session:
            await session.execute(text("SELECT 1"))
        checks["database"] = "connected"
    except Exception as e:
        logger.error(f"Readiness check failed for database: {e}")
        checks["database"] = "error"

    redis = await get_redis()
    if redis is None:
        checks["redis"] = "not initialized"
    else:
        try:
            await redis.ping()
            checks["redis"] = "connected"
        except Exception as e:
            logger.error(f"Readiness check failed for redis: {e}")
            checks["redis"] = "error"

    ready = checks["database"] == "connected"
    return JSONResponse(
        status_code=200 if ready else 503,
        content={"status": "ready" if ready else "not ready", **checks},
    )
