"""Prometheus metrics and Sentry integration.

Provides:
- MetricsMiddleware: per-route HTTP request metrics
- track_generation_call(): Gemini call count, latency and token usage
- extraction_fallback_total / meeting_operations_total: pipeline counters
- init_sentry(): Sentry setup that scrubs bearer credentials
- get_metrics_response(): Prometheus exposition for the /metrics route
"""

from __future__ import annotations

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from prometheus_client import REGISTRY, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger(__name__)

# ── HTTP Metrics ─────────────────────────────────────────────────────────────

http_requests_total = Counter(
    "meeting_ai_http_requests_total",
    "HTTP requests by route template and status",
    ["method", "route", "status_code"],
)

http_request_duration_seconds = Histogram(
    "meeting_ai_http_request_duration_seconds",
    "HTTP request latency by route template",
    ["method", "route"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

# ── Generation Metrics ───────────────────────────────────────────────────────

generation_requests_total = Counter(
    "meeting_ai_generation_requests_total",
    "Gemini generateContent calls by task and outcome",
    ["model", "task", "outcome"],
)

generation_duration_seconds = Histogram(
    "meeting_ai_generation_duration_seconds",
    "Gemini generateContent latency",
    ["model", "task"],
    buckets=(0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0),
)

generation_tokens_total = Counter(
    "meeting_ai_generation_tokens_total",
    "Tokens reported in usageMetadata",
    ["model", "task", "token_type"],
)

# ── Pipeline Metrics ─────────────────────────────────────────────────────────

extraction_fallback_total = Counter(
    "meeting_ai_extraction_fallback_total",
    "Extraction responses that needed the key/value pattern fallback",
)

meeting_operations_total = Counter(
    "meeting_ai_meeting_operations_total",
    "Meeting gateway operations by outcome",
    ["operation", "outcome"],
)


# ── Metrics Middleware ───────────────────────────────────────────────────────


def _route_template(request: Request) -> str:
    """Matched route path (``/api/v1/meetings/{meeting_id}``), else ``unmatched``."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class MetricsMiddleware(BaseHTTPMiddleware):
    """Records request count and latency per route template.

    Labels use the route template rather than the raw path so meeting ids
    do not create new series. /metrics itself is not recorded.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start

        route = _route_template(request)
        http_requests_total.labels(request.method, route, str(response.status_code)).inc()
        http_request_duration_seconds.labels(request.method, route).observe(elapsed)
        return response


# ── Generation Call Tracking ─────────────────────────────────────────────────


@asynccontextmanager
async def track_generation_call(model: str, task: str) -> AsyncGenerator[dict[str, Any], None]:
    """Time one generation call and record its outcome.

    The caller fills ``prompt_tokens`` / ``completion_tokens`` from the
    response's usageMetadata. An exception escaping the block is counted
    under its class name as the outcome and re-raised.

    Usage:
        async with track_generation_call("gemini-2.0-flash", "extract") as usage:
            data = ...
            usage["prompt_tokens"] = data["usageMetadata"]["promptTokenCount"]
    """
    usage: dict[str, Any] = {"prompt_tokens": 0, "completion_tokens": 0}
    outcome = "success"
    start = time.perf_counter()
    try:
        yield usage
    except Exception as exc:
        outcome = type(exc).__name__
        raise
    finally:
        generation_requests_total.labels(model, task, outcome).inc()
        generation_duration_seconds.labels(model, task).observe(time.perf_counter() - start)
        for token_type in ("prompt", "completion"):
            count = usage.get(f"{token_type}_tokens") or 0
            if count:
                generation_tokens_total.labels(model, task, token_type).inc(count)


# ── Sentry Integration ───────────────────────────────────────────────────────


def _scrub_credentials(event: dict, hint: dict) -> dict:
    """Drop bearer tokens and the Supabase key from captured request headers."""
    headers = (event.get("request") or {}).get("headers")
    if isinstance(headers, dict):
        for name in list(headers):
            if name.lower() in ("authorization", "apikey", "x-goog-api-key"):
                headers[name] = "[Filtered]"
    return event


def init_sentry(dsn: str, environment: str) -> None:
    """Initialize Sentry for unhandled errors.

    Args:
        dsn: Sentry DSN string.
        environment: Deployment environment (development, staging, production).
    """
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.starlette import StarletteIntegration

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        traces_sample_rate=0.1 if environment == "production" else 1.0,
        send_default_pii=False,
        before_send=_scrub_credentials,
        integrations=[StarletteIntegration(), FastApiIntegration()],
    )
    logger.info("sentry_initialized", environment=environment)


def get_metrics_response() -> Response:
    """Prometheus exposition format response."""
    return Response(
        content=generate_latest(REGISTRY),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
