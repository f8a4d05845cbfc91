"""Domain error taxonomy shared by the AI task and meeting gateway pipelines.

Every error carries the HTTP status it is surfaced with and an optional
``details`` payload. A single exception handler registered in main.py
renders them as ``{"error": ..., "details": ...}``.
"""

from __future__ import annotations

from typing import Any


class MeetingAIError(Exception):
    """Base class for errors surfaced to API callers.

    Attributes:
        message: Short human-readable error description.
        details: Optional diagnostic payload (upstream status, body, ...).
    """

    status_code: int = 500

    def __init__(self, message: str, details: Any = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


# -- Client errors ------------------------------------------------------------


class InvalidTaskType(MeetingAIError):
    """Task type is not one of extract, summarize, query."""

    status_code = 400

    def __init__(self, task_type: object) -> None:
        self.task_type = task_type
        super().__init__("Invalid AI task type", details=f"Unsupported task type: {task_type!r}")


class MissingIdentifier(MeetingAIError):
    """Delete requested without a meeting id."""

    status_code = 400

    def __init__(self) -> None:
        super().__init__("Meeting id is required")


class MethodNotSupported(MeetingAIError):
    status_code = 405

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__("Method not allowed", details=f"{method} is not supported on this resource")


# -- Authentication -----------------------------------------------------------


class MissingCredential(MeetingAIError):
    """No Authorization header, or not a usable Bearer credential."""

    status_code = 401

    def __init__(self, details: str | None = None) -> None:
        super().__init__("Missing bearer token", details=details)


class InvalidCredential(MeetingAIError):
    """The auth service rejected the bearer token."""

    status_code = 401

    def __init__(self, details: str | None = None) -> None:
        super().__init__("Invalid or expired token", details=details)


# -- Server-side failures -----------------------------------------------------


class ServiceNotConfigured(MeetingAIError):
    """A required upstream credential or URL is missing from settings."""

    status_code = 500


class UpstreamUnavailable(MeetingAIError):
    """An upstream service was unreachable or answered with a non-success status.

    Attributes:
        service: Which upstream failed ("generation" or "auth").
        upstream_status: HTTP status returned, or None for transport failures.
        body: Raw response body (or transport error text).
    """

    status_code = 500

    def __init__(self, service: str, upstream_status: int | None, body: str) -> None:
        self.service = service
        self.upstream_status = upstream_status
        self.body = body
        if upstream_status is None:
            details = f"Request failed: {body}"
        else:
            details = f"Status {upstream_status}: {body}"
        super().__init__(f"{service.capitalize()} service request failed", details=details)


class MalformedUpstreamEnvelope(MeetingAIError):
    """Generation service answered, but without a single-candidate text envelope."""

    status_code = 500

    def __init__(self, reason: str, payload: Any = None) -> None:
        self.reason = reason
        self.payload = payload
        super().__init__(
            "Invalid response structure from generation service",
            details={"reason": reason, "response": payload},
        )


class StoreUnavailable(MeetingAIError):
    """The meeting store failed to execute an operation."""

    status_code = 500

    def __init__(self, operation: str, error: Exception) -> None:
        self.operation = operation
        super().__init__("Meeting store operation failed", details=f"{operation}: {type(error).__name__}")
