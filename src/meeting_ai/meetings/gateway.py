"""MeetingGateway -- identity-scoped list/create/delete over the meeting store.

Every operation takes an already resolved Identity. Ownership is stamped on
create from the identity's email and enforced on delete inside the store
statement. Store failures surface as StoreUnavailable.
"""

from __future__ import annotations

import structlog
from sqlalchemy.exc import SQLAlchemyError

from src.meeting_ai.config import ListScope
from src.meeting_ai.core.exceptions import MissingIdentifier, StoreUnavailable
from src.meeting_ai.core.monitoring import meeting_operations_total
from src.meeting_ai.core.security import Identity
from src.meeting_ai.meetings.repository import MeetingRepository
from src.meeting_ai.meetings.schemas import DeleteOutcome, MeetingCreate, MeetingRecord

logger = structlog.get_logger(__name__)


class MeetingGateway:
    """Meeting operations on behalf of one caller.

    Args:
        repository: Meeting store.
        list_scope: ``owner`` lists only the caller's rows, ``all`` lists
            every row.
    """

    def __init__(
        self,
        repository: MeetingRepository,
        list_scope: ListScope = ListScope.owner,
    ) -> None:
        self._repository = repository
        self._list_scope = ListScope(list_scope)

    async def list_meetings(self, identity: Identity) -> list[MeetingRecord]:
        """Return the accessible meetings ordered by meeting date, newest first."""
        owner = identity.email if self._list_scope is ListScope.owner else None
        try:
            meetings = await self._repository.list_meetings(owner_email=owner)
        except SQLAlchemyError as exc:
            logger.error("meetings.list_failed", user_id=identity.id, exc_info=True)
            meeting_operations_total.labels("list", "store_error").inc()
            raise StoreUnavailable("list", exc) from exc

        meeting_operations_total.labels("list", "ok").inc()
        logger.info(
            "meetings.listed",
            user_id=identity.id,
            scope=self._list_scope.value,
            count=len(meetings),
        )
        return meetings

    async def create_meeting(self, identity: Identity, fields: MeetingCreate) -> MeetingRecord:
        """Persist a meeting owned by the caller."""
        try:
            record = await self._repository.create_meeting(fields, created_by=identity.email)
        except SQLAlchemyError as exc:
            logger.error("meetings.create_failed", user_id=identity.id, exc_info=True)
            meeting_operations_total.labels("create", "store_error").inc()
            raise StoreUnavailable("create", exc) from exc

        meeting_operations_total.labels("create", "created").inc()
        return record

    async def delete_meeting(self, identity: Identity, meeting_id: str | None) -> DeleteOutcome:
        """Delete a meeting if it exists and the caller created it.

        Raises:
            MissingIdentifier: No id given; the store is not touched.
        """
        if meeting_id is None or not str(meeting_id).strip():
            meeting_operations_total.labels("delete", "missing_id").inc()
            raise MissingIdentifier()

        try:
            deleted = await self._repository.delete_meeting(
                str(meeting_id).strip(), owner_email=identity.email
            )
        except SQLAlchemyError as exc:
            logger.error("meetings.delete_failed", user_id=identity.id, exc_info=True)
            meeting_operations_total.labels("delete", "store_error").inc()
            raise StoreUnavailable("delete", exc) from exc

        outcome = DeleteOutcome.DELETED if deleted else DeleteOutcome.NOT_FOUND
        meeting_operations_total.labels("delete", outcome.value).inc()
        return outcome
