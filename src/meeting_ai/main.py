"""FastAPI application factory.

Creates the app with logging middleware, metrics middleware, CORS, Sentry,
lifespan events for database initialization, the v1 API router, and the
error handler that renders every MeetingAIError as ``{"error", "details"}``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import JSONResponse, Response

from src.meeting_ai.config import get_settings
from src.meeting_ai.core.database import close_db, init_db
from src.meeting_ai.core.exceptions import MeetingAIError
from src.meeting_ai.core.monitoring import MetricsMiddleware, get_metrics_response, init_sentry
from src.meeting_ai.api.middleware import LoggingMiddleware, configure_structlog
from src.meeting_ai.api.v1.router import router as v1_router

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: init DB and Sentry on startup, close on shutdown."""
    settings = get_settings()
    configure_structlog()
    await init_db()

    if settings.SENTRY_DSN:
        init_sentry(dsn=settings.SENTRY_DSN, environment=settings.ENVIRONMENT.value)

    if not settings.GEMINI_API_KEY:
        logger.warning("startup.gemini_not_configured")
    if not settings.SUPABASE_URL:
        logger.warning("startup.auth_not_configured")

    logger.info("startup.complete", environment=settings.ENVIRONMENT.value)

    yield

    await close_db()


async def meeting_ai_error_handler(request: Request, exc: MeetingAIError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "request.failed",
            path=request.url.path,
            error_type=type(exc).__name__,
            error=exc.message,
        )
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


def _cors_origins(raw: str) -> list[str]:
    if raw.strip() == "*":
        return ["*"]
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Meeting AI API",
        version="0.1.0",
        description="Meeting extraction, summarisation and query service with a meeting store",
        lifespan=lifespan,
    )

    app.add_exception_handler(MeetingAIError, meeting_ai_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Middleware is added in reverse order (last added = outermost)

    origins = _cors_origins(settings.CORS_ALLOWED_ORIGINS)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(LoggingMiddleware)

    # Outermost -- records Prometheus metrics for all requests
    app.add_middleware(MetricsMiddleware)

    app.include_router(v1_router)

    @app.get("/metrics", include_in_schema=False)
    async def metrics(request: Request) -> Response:
        """Prometheus metrics endpoint."""
        return get_metrics_response()

    return app


# Module-level app for uvicorn
app = create_app()
