"""Meeting persistence model.

MeetingModel is a flat row: meeting details plus ``created_by`` (owner
email, the ownership column) and ``meeting_date`` (listing sort key).
Ids are generated application-side so the table works on both PostgreSQL
and SQLite.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import Date, DateTime, Index, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from src.meeting_ai.core.database import Base


class MeetingModel(Base):
    """Meeting record owned by the identity that created it."""

    __tablename__ = "meetings"
    __table_args__ = (
        Index("ix_meetings_created_by_meeting_date", "created_by", "meeting_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    meeting_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    meeting_time: Mapped[str | None] = mapped_column(String(20), nullable=True)
    location: Mapped[str | None] = mapped_column(String(500), nullable=True)
    client: Mapped[str | None] = mapped_column(String(300), nullable=True)
    project: Mapped[str | None] = mapped_column(String(300), nullable=True)
    attendees: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str] = mapped_column(String(320), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )
