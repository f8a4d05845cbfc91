"""Test fixtures for the AI task and meeting gateway tests.

Provides:
- FakeIdentityResolver mapping known bearer tokens to identities
- InMemoryMeetingRepository standing in for the SQL repository
- FastAPI test app with dependency overrides and an async HTTP client
- File-backed aiosqlite session factory for repository tests
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator
from datetime import date, datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool

from src.meeting_ai.ai.client import GenerationClient
from src.meeting_ai.ai.dispatcher import TaskDispatcher
from src.meeting_ai.ai.prompts import PromptBuilder
from src.meeting_ai.api import deps
from src.meeting_ai.config import ListScope
from src.meeting_ai.core.database import Base
from src.meeting_ai.core.exceptions import InvalidCredential
from src.meeting_ai.core.security import Identity, extract_bearer_token
from src.meeting_ai.main import create_app
from src.meeting_ai.meetings.gateway import MeetingGateway
from src.meeting_ai.meetings.models import MeetingModel  # noqa: F401
from src.meeting_ai.meetings.schemas import MeetingCreate, MeetingRecord

ALICE = Identity(id="user-alice", email="alice@example.com")
BOB = Identity(id="user-bob", email="bob@example.com")

ALICE_TOKEN = "alice-token"
BOB_TOKEN = "bob-token"


# ── Test Doubles ─────────────────────────────────────────────────────────────


class FakeIdentityResolver:
    """Resolves a fixed set of tokens without calling the auth service."""

    def __init__(self, tokens: dict[str, Identity]) -> None:
        self._tokens = tokens
        self.calls = 0

    async def resolve(self, authorization: str | None) -> Identity:
        token = extract_bearer_token(authorization)
        self.calls += 1
        identity = self._tokens.get(token)
        if identity is None:
            raise InvalidCredential()
        return identity


class InMemoryMeetingRepository:
    """Dict-backed stand-in for MeetingRepository with the same ordering rules."""

    def __init__(self) -> None:
        self.rows: dict[uuid.UUID, MeetingRecord] = {}
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    async def list_meetings(self, owner_email: str | None = None) -> list[MeetingRecord]:
        rows = [
            r for r in self.rows.values()
            if owner_email is None or r.created_by == owner_email
        ]
        rows.sort(key=lambda r: r.created_at, reverse=True)
        rows.sort(key=lambda r: r.meeting_date or date.min, reverse=True)
        return rows

    async def create_meeting(self, data: MeetingCreate, created_by: str) -> MeetingRecord:
        self._clock += timedelta(seconds=1)
        record = MeetingRecord(
            **data.model_dump(),
            id=uuid.uuid4(),
            created_by=created_by,
            created_at=self._clock,
        )
        self.rows[record.id] = record
        return record

    async def delete_meeting(self, meeting_id: str, owner_email: str) -> bool:
        try:
            key = uuid.UUID(meeting_id)
        except ValueError:
            return False
        row = self.rows.get(key)
        if row is None or row.created_by != owner_email:
            return False
        del self.rows[key]
        return True


# ── Identity / Store Fixtures ────────────────────────────────────────────────


@pytest.fixture
def identity_resolver() -> FakeIdentityResolver:
    return FakeIdentityResolver({ALICE_TOKEN: ALICE, BOB_TOKEN: BOB})


@pytest.fixture
def meeting_repository() -> InMemoryMeetingRepository:
    return InMemoryMeetingRepository()


@pytest.fixture
def alice() -> Identity:
    return ALICE


@pytest.fixture
def bob() -> Identity:
    return BOB


@pytest.fixture
def alice_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {ALICE_TOKEN}"}


@pytest.fixture
def bob_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {BOB_TOKEN}"}


# ── Generation Fixtures ──────────────────────────────────────────────────────


@pytest.fixture
def generation_client() -> MagicMock:
    """GenerationClient double whose generate() returns canned model text."""
    client = MagicMock(spec=GenerationClient)
    client.generate = AsyncMock(return_value="")
    return client


@pytest.fixture
def dispatcher(generation_client) -> TaskDispatcher:
    return TaskDispatcher(prompt_builder=PromptBuilder(), client=generation_client)


# ── App Fixtures ─────────────────────────────────────────────────────────────


@pytest.fixture
def app(identity_resolver, meeting_repository, dispatcher):
    """FastAPI app with services replaced by test doubles."""
    application = create_app()
    application.dependency_overrides[deps.get_identity_resolver] = lambda: identity_resolver
    application.dependency_overrides[deps.get_task_dispatcher] = lambda: dispatcher
    application.dependency_overrides[deps.get_meeting_gateway] = lambda: MeetingGateway(
        repository=meeting_repository, list_scope=ListScope.owner
    )
    yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing the API."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ── Database Fixtures ────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Session factory over a fresh SQLite file, one connection per session."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'meetings.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async def factory() -> AsyncGenerator[AsyncSession, None]:
        async with AsyncSession(engine, expire_on_commit=False) as session:
            yield session

    yield factory

    await engine.dispose()
