"""Meeting repository -- async CRUD for meeting rows.

Provides MeetingRepository with the session_factory callable pattern.
Ownership filtering happens inside the SQL statements, so a delete by a
non-owner is a single statement that matches no row.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator, Callable

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.meeting_ai.meetings.models import MeetingModel
from src.meeting_ai.meetings.schemas import MeetingCreate, MeetingRecord

logger = structlog.get_logger(__name__)


def _model_to_record(model: MeetingModel) -> MeetingRecord:
    """Convert MeetingModel to MeetingRecord schema."""
    return MeetingRecord.model_validate(model)


def _parse_id(meeting_id: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(meeting_id))
    except ValueError:
        return None


class MeetingRepository:
    """Async operations on the meetings table.

    Args:
        session_factory: Async callable that yields AsyncSession instances.
    """

    def __init__(
        self, session_factory: Callable[..., AsyncGenerator[AsyncSession, None]]
    ) -> None:
        self._session_factory = session_factory

    async def list_meetings(self, owner_email: str | None = None) -> list[MeetingRecord]:
        """List meetings by meeting date, newest first.

        Args:
            owner_email: Restrict to rows created by this email. None lists
                every row.

        Returns:
            Records ordered by meeting_date descending (undated last), then
            created_at descending.
        """
        async for session in self._session_factory():
            stmt = select(MeetingModel).order_by(
                MeetingModel.meeting_date.desc().nulls_last(),
                MeetingModel.created_at.desc(),
            )
            if owner_email is not None:
                stmt = stmt.where(MeetingModel.created_by == owner_email)
            result = await session.execute(stmt)
            return [_model_to_record(m) for m in result.scalars().all()]
        return []

    async def create_meeting(self, data: MeetingCreate, created_by: str) -> MeetingRecord:
        """Insert a meeting owned by ``created_by``.

        Returns:
            MeetingRecord with generated id and created_at.
        """
        async for session in self._session_factory():
            model = MeetingModel(
                title=data.title,
                meeting_date=data.meeting_date,
                meeting_time=data.meeting_time,
                location=data.location,
                client=data.client,
                project=data.project,
                attendees=data.attendees,
                created_by=created_by,
            )
            session.add(model)
            await session.commit()
            await session.refresh(model)
            logger.info("meeting.created", meeting_id=str(model.id), created_by=created_by)
            return _model_to_record(model)
        raise RuntimeError("Session factory yielded no session")

    async def delete_meeting(self, meeting_id: str, owner_email: str) -> bool:
        """Delete a meeting only if ``owner_email`` created it.

        Returns:
            True if a row was removed, False if no row matched id and owner.
        """
        parsed_id = _parse_id(meeting_id)
        if parsed_id is None:
            return False

        async for session in self._session_factory():
            stmt = delete(MeetingModel).where(
                MeetingModel.id == parsed_id,
                MeetingModel.created_by == owner_email,
            )
            result = await session.execute(stmt)
            await session.commit()
            deleted = result.rowcount > 0
            logger.info(
                "meeting.delete",
                meeting_id=meeting_id,
                owner=owner_email,
                deleted=deleted,
            )
            return deleted
        return False
