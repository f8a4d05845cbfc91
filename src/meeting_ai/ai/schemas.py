"""Pydantic schemas for the AI task pipeline.

Defines the generation request handed to the Gemini client, the normalized
extraction record, and the HTTP request/response bodies of the AI endpoint.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

UNKNOWN = "unknown"

EXTRACTION_FIELDS: tuple[str, ...] = (
    "title",
    "date",
    "time",
    "location",
    "client",
    "project",
    "attendees",
)


class TaskType(str, Enum):
    """AI task variants. Determines prompt template and generation parameters."""

    EXTRACT = "extract"
    SUMMARIZE = "summarize"
    QUERY = "query"


class GenerationRequest(BaseModel):
    """Instruction payload plus generation parameters for one model call."""

    model_config = ConfigDict(frozen=True)

    instruction_text: str
    temperature: float = Field(ge=0, le=2)
    max_output_tokens: int = Field(gt=0)


class ExtractionRecord(BaseModel):
    """Normalized output of the extract task.

    All seven keys are always present. Fields the model did not provide
    carry the ``"unknown"`` marker; explicit nulls from the model stay None.
    """

    title: str | None = UNKNOWN
    date: str | None = UNKNOWN
    time: str | None = UNKNOWN
    location: str | None = UNKNOWN
    client: str | None = UNKNOWN
    project: str | None = UNKNOWN
    attendees: str | None = UNKNOWN


class AITaskRequest(BaseModel):
    """Request body for POST /api/v1/ai.

    ``type`` is left untyped so missing or unsupported values surface as
    InvalidTaskType (400) rather than a schema validation error.
    """

    task_type: Any = Field(None, validation_alias=AliasChoices("type", "taskType", "task_type"))
    content: str | None = None
    prompt: str | None = Field(None, description="Legacy alias for content")

    @property
    def text(self) -> str:
        return self.content or self.prompt or ""


class AITaskResponse(BaseModel):
    result: ExtractionRecord | str


class ErrorResponse(BaseModel):
    error: str
    details: object | None = None
