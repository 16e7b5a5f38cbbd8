"""Integration test fixtures for database and HTTP client operations.

Each test gets a fresh in-memory SQLite database shared through a single
connection (StaticPool), so every short-lived session sees the same data.
"""

from collections.abc import AsyncGenerator, Callable
from uuid import UUID

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from src.app.api.dependencies import get_orchestrator, get_session_factory
from src.app.core.db import build_session_factory
from src.app.core.security import create_access_token
from src.app.main import create_app
from src.app.orchestration.actors import Actor
from src.app.orchestration.factory import Orchestrator, build_orchestrator
from src.app.services import BuildingService, DeletionRequestService
from tests.helpers import FlakyBuildingDirectory


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory database with all tables."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield test_engine
    await test_engine.dispose()


@pytest.fixture
async def file_session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker[AsyncSession]]:
    """File-backed database with a connection per session, for real races.

    Transactions begin IMMEDIATE so concurrent writers wait on SQLite's busy
    timeout instead of failing to upgrade a shared lock.
    """
    file_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'deletion.db'}")

    @event.listens_for(file_engine.sync_engine, "connect")
    def _driver_transactions_off(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(file_engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    async with file_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield build_session_factory(file_engine)
    await file_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(engine)


@pytest.fixture
def buildings_directory(
    session_factory: async_sessionmaker[AsyncSession],
) -> FlakyBuildingDirectory:
    """Building directory with no faults configured; tests add them as needed."""
    return FlakyBuildingDirectory(session_factory)


@pytest.fixture
def orchestrator(
    session_factory: async_sessionmaker[AsyncSession],
    buildings_directory: FlakyBuildingDirectory,
) -> Orchestrator:
    return build_orchestrator(session_factory, buildings=buildings_directory)


@pytest.fixture
def deletion_service(
    session_factory: async_sessionmaker[AsyncSession], orchestrator: Orchestrator
) -> DeletionRequestService:
    return DeletionRequestService(session_factory, orchestrator)


@pytest.fixture
def building_service(
    session_factory: async_sessionmaker[AsyncSession], orchestrator: Orchestrator
) -> BuildingService:
    return BuildingService(session_factory, orchestrator)


@pytest.fixture
def auth_headers() -> Callable[[Actor], dict[str, str]]:
    """Build an Authorization header carrying the actor's claims."""

    def _headers(actor: Actor) -> dict[str, str]:
        token = create_access_token(actor.id, actor.roles, tenant_id=actor.tenant_id)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    orchestrator: Orchestrator,
) -> AsyncGenerator[AsyncClient]:
    """HTTP client against the app, wired to the test database."""
    app = create_app()
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def approved_request(
    deletion_service: DeletionRequestService,
    owner: Actor,
    admin: Actor,
    tenant_id: UUID,
):
    """Factory: create and approve a request for `tenant_id`, returning the outcome."""

    async def _approve():
        request, _ = await deletion_service.create(
            owner, tenant_id, "Tenant is closing its property business"
        )
        return await deletion_service.decide(admin, request.id, approve=True)

    return _approve
