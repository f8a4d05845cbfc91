"""FastAPI dependency injection for services and authentication.

These dependencies are used in endpoint function signatures to inject the
task dispatcher, the meeting gateway, and the authenticated caller. Tests
replace them through ``app.dependency_overrides``.
"""

from __future__ import annotations

from fastapi import Depends, Header

from src.meeting_ai.ai.dispatcher import TaskDispatcher
from src.meeting_ai.ai.dispatcher import get_task_dispatcher as _get_task_dispatcher
from src.meeting_ai.config import get_settings
from src.meeting_ai.core.database import get_session
from src.meeting_ai.core.security import Identity, IdentityResolver
from src.meeting_ai.core.security import get_identity_resolver as _get_identity_resolver
from src.meeting_ai.meetings.gateway import MeetingGateway
from src.meeting_ai.meetings.repository import MeetingRepository


async def get_task_dispatcher() -> TaskDispatcher:
    """Get the AI task dispatcher."""
    return _get_task_dispatcher()


async def get_identity_resolver() -> IdentityResolver:
    """Get the bearer token resolver."""
    return _get_identity_resolver()


async def get_meeting_gateway() -> MeetingGateway:
    """Get a meeting gateway bound to the database session factory."""
    settings = get_settings()
    return MeetingGateway(
        repository=MeetingRepository(session_factory=get_session),
        list_scope=settings.MEETINGS_LIST_SCOPE,
    )


async def get_current_identity(
    authorization: str | None = Header(default=None),
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> Identity:
    """Resolve the caller from the Authorization header.

    Raises:
        MissingCredential: No bearer token (401).
        InvalidCredential: Token rejected by the auth service (401).
    """
    return await resolver.resolve(authorization)

