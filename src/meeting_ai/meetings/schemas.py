"""Pydantic v2 schemas for the meeting gateway.

Records are serialized with camelCase keys (meetingDate, createdBy, ...)
and accepted in either camelCase or snake_case.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class DeleteOutcome(str, Enum):
    """Result of a delete request."""

    DELETED = "deleted"
    NOT_FOUND = "not_found"


class MeetingCreate(BaseModel):
    """Fields a caller may supply when creating a meeting.

    There is no created_by field: ownership is stamped from the resolved
    identity and any client-supplied value is ignored.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=500)
    meeting_date: date | None = None
    meeting_time: str | None = Field(None, max_length=20)
    location: str | None = Field(None, max_length=500)
    client: str | None = Field(None, max_length=300)
    project: str | None = Field(None, max_length=300)
    attendees: str | None = None


class MeetingRecord(MeetingCreate):
    """Persisted meeting, including id and ownership."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: uuid.UUID
    created_by: str
    created_at: datetime | None = None
