"""Pytest configuration and fixtures for the onboarding service.

Uses app.main:app for HTTP tests, tests.fakes for use case tests, and
app.infrastructure.persistence.database for DB-dependent fixtures.
"""

import asyncio
from datetime import UTC, datetime
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from httpx import ASGITransport, AsyncClient
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.application.dtos.care_team import DefaultCareTeamConfig
from app.application.use_cases.registration import (
    ConvergenceChecker,
    ProcessRegistrationTasksUseCase,
    RegistrationTaskRunner,
    build_task_handlers,
)
from app.domain.enums import UserRole
from app.domain.value_objects.retry_policy import RetryPolicy
from app.infrastructure.persistence import database
from app.main import app
from tests.fakes import (
    FakeClock,
    FakeRoomService,
    InMemoryCareTeamStore,
    InMemoryProfileStore,
    InMemoryRegistrationTaskStore,
    InMemorySubjectLeaseStore,
    RecordingDispatcher,
)

ALEMBIC_INI = Path(__file__).resolve().parents[1] / "alembic.ini"

T0 = datetime(2026, 3, 2, 9, 0, 0, tzinfo=UTC)

DOCTOR_ID = "doctor-1"
NUTRITIONIST_ID = "nutritionist-1"


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI). Clears dependency overrides after."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(T0)


@pytest.fixture
def task_store(clock: FakeClock) -> InMemoryRegistrationTaskStore:
    return InMemoryRegistrationTaskStore(clock, RetryPolicy())


@pytest.fixture
def profile_store() -> InMemoryProfileStore:
    """Profile store holding the default care team members."""
    store = InMemoryProfileStore()
    store.add(DOCTOR_ID, UserRole.DOCTOR, first_name="Ada", last_name="Okello")
    store.add(NUTRITIONIST_ID, UserRole.NUTRITIONIST, first_name="Ben", last_name="Mugisha")
    return store


@pytest.fixture
def care_team_store() -> InMemoryCareTeamStore:
    return InMemoryCareTeamStore(
        DefaultCareTeamConfig(doctor_id=DOCTOR_ID, nutritionist_id=NUTRITIONIST_ID)
    )


@pytest.fixture
def lease_store(clock: FakeClock) -> InMemorySubjectLeaseStore:
    return InMemorySubjectLeaseStore(clock)


@pytest.fixture
def room_service() -> FakeRoomService:
    return FakeRoomService()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def process_use_case(
    clock: FakeClock,
    task_store: InMemoryRegistrationTaskStore,
    profile_store: InMemoryProfileStore,
    care_team_store: InMemoryCareTeamStore,
    lease_store: InMemorySubjectLeaseStore,
    room_service: FakeRoomService,
    dispatcher: RecordingDispatcher,
) -> ProcessRegistrationTasksUseCase:
    """Trigger use case wired to the in-memory stores above."""
    handlers = build_task_handlers(profile_store, care_team_store, room_service, dispatcher)
    runner = RegistrationTaskRunner(task_store, handlers, timeout_seconds=1.0, clock=clock)
    checker = ConvergenceChecker(task_store, profile_store, clock=clock)
    return ProcessRegistrationTasksUseCase(runner, checker, lease_store, clock=clock)


@pytest.fixture
async def session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory for repository/integration tests against Postgres.

    Requires DATABASE_URL. Skips (pytest.skip) when it is not configured.
    Migrates the schema to head (alembic) and empties the orchestrator
    tables after the test. Use @pytest.mark.requires_db on tests that need this fixture;
    run without DB via: pytest -m 'not requires_db'.
    """
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        pytest.skip("Postgres not configured: set DATABASE_URL")
    # env.py drives its own event loop, so upgrade runs off this one.
    await asyncio.to_thread(command.upgrade, Config(str(ALEMBIC_INI)), "head")
    yield database.AsyncSessionLocal
    async with database.AsyncSessionLocal.begin() as session:
        for table in reversed(database.Base.metadata.sorted_tables):
            await session.execute(delete(table))
    await database.dispose_engine()
