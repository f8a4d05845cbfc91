"""Structured logging setup and per-request access log.

configure_structlog() renders JSON in production and console output
elsewhere. LoggingMiddleware binds a request id (echoed as X-Request-ID)
into structlog's contextvars, so every event logged while the request runs
carries it, then emits one ``request_completed`` event with status and
timing. The caller's ``sub`` claim is read from the bearer token without
verification and is only ever used as a log field.
"""

from __future__ import annotations

import logging
import time
import uuid

import structlog
from fastapi import Request, Response
from jose import JWTError, jwt
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.meeting_ai.config import Environment, get_settings

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def configure_structlog() -> None:
    settings = get_settings()
    logging.basicConfig(format="%(message)s", level=settings.LOG_LEVEL.upper())

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.ENVIRONMENT == Environment.production
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _unverified_subject(authorization: str | None) -> str | None:
    """``sub`` claim of a bearer JWT, unverified. Opaque tokens yield None."""
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    try:
        claims = jwt.get_unverified_claims(authorization[7:].strip())
    except JWTError:
        return None
    subject = claims.get("sub")
    return str(subject) if subject else None


class LoggingMiddleware(BaseHTTPMiddleware):
    """Binds request context for the duration of a request and logs its outcome."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            user_id=_unverified_subject(request.headers.get("Authorization")),
        )

        start = time.monotonic()
        try:
            try:
                response = await call_next(request)
            except Exception:
                logger.exception(
                    "request_error",
                    duration_ms=round((time.monotonic() - start) * 1000, 2),
                )
                raise

            elapsed_ms = round((time.monotonic() - start) * 1000, 2)
            response.headers[REQUEST_ID_HEADER] = request_id

            if response.status_code >= 500:
                log = logger.error
            elif response.status_code >= 400:
                log = logger.warning
            else:
                log = logger.info
            log("request_completed", status_code=response.status_code, duration_ms=elapsed_ms)
            return response
        finally:
            structlog.contextvars.clear_contextvars()
