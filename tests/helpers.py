"""Test helpers for seeding resource stores and injecting faults."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import replace
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import col, select

from src.app.directories.base import BuildingView
from src.app.directories.sql import SqlBuildingDirectory
from src.app.models import Building, BuildingStatus, DeletionRequest, LedgerEntry, Unit
from src.app.orchestration.errors import UpstreamUnavailable
from src.app.orchestration.ledger import StatusLedger
from tests.factories import BuildingFactory, UnitFactory


async def create_building(
    session_factory: async_sessionmaker[AsyncSession],
    tenant_id: UUID,
    active_units: int = 0,
    inactive_units: int = 0,
    status: BuildingStatus = BuildingStatus.ACTIVE,
    **kwargs,
) -> Building:
    """Create a building with the given number of active and inactive units."""
    building = BuildingFactory.build(tenant_id=tenant_id, status=status.value, **kwargs)
    async with session_factory() as session:
        session.add(building)
        await session.flush()
        for _ in range(active_units):
            session.add(UnitFactory.build(building_id=building.id))
        for _ in range(inactive_units):
            session.add(UnitFactory.inactive(building_id=building.id))
        await session.commit()
    return building


async def set_units_active(
    session_factory: async_sessionmaker[AsyncSession],
    building_id: UUID,
    active: bool,
    limit: int | None = None,
) -> None:
    """Flip units of a building, as the CRUD surface would."""
    async with session_factory() as session:
        result = await session.execute(select(Unit.id).where(Unit.building_id == building_id))
        ids = list(result.scalars().all())[:limit]
        await session.execute(update(Unit).where(col(Unit.id).in_(ids)).values(active=active))
        await session.commit()


async def get_building(
    session_factory: async_sessionmaker[AsyncSession], building_id: UUID
) -> Building:
    async with session_factory() as session:
        building = await session.get(Building, building_id)
    assert building is not None
    return building


async def get_request(
    session_factory: async_sessionmaker[AsyncSession], request_id: UUID
) -> DeletionRequest:
    async with session_factory() as session:
        request = await session.get(DeletionRequest, request_id)
    assert request is not None
    return request


async def ledger_entries(
    session_factory: async_sessionmaker[AsyncSession],
    resource_id: UUID,
    to_status: str | None = None,
) -> list[LedgerEntry]:
    async with session_factory() as session:
        query = select(LedgerEntry).where(LedgerEntry.resource_id == resource_id)
        if to_status is not None:
            query = query.where(LedgerEntry.to_status == to_status)
        result = await session.execute(query)
        return list(result.scalars().all())


class FlakyBuildingDirectory(SqlBuildingDirectory):
    """SQL building directory with per-building fault injection.

    - `failing_updates`: update_building_status raises UpstreamUnavailable
    - `slow_reads`: get_building sleeps `delay` seconds first
    - `stale_reads`: get_building reports this status once, whatever is stored
    - `after_update`: awaited once, right after the status update commits
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], delay: float = 1.0):
        super().__init__(session_factory)
        self.delay = delay
        self.failing_updates: set[UUID] = set()
        self.slow_reads: set[UUID] = set()
        self.stale_reads: dict[UUID, BuildingStatus] = {}
        self.after_update: dict[UUID, Callable[[], Awaitable[None]]] = {}
        self.update_calls: list[UUID] = []

    async def get_building(self, building_id: UUID) -> BuildingView | None:
        if building_id in self.slow_reads:
            await asyncio.sleep(self.delay)
        view = await super().get_building(building_id)
        stale = self.stale_reads.pop(building_id, None)
        if view is not None and stale is not None:
            return replace(view, status=stale)
        return view

    async def update_building_status(
        self,
        building_id: UUID,
        status: BuildingStatus,
        expected: BuildingStatus,
    ) -> bool:
        self.update_calls.append(building_id)
        if building_id in self.failing_updates:
            raise UpstreamUnavailable("Building directory", "injected failure")
        updated = await super().update_building_status(building_id, status, expected)
        hook = self.after_update.pop(building_id, None)
        if hook is not None:
            await hook()
        return updated


class UnreachableUnitDirectory:
    """Unit directory whose every read fails."""

    async def get_units_by_building(self, building_id: UUID) -> list:
        raise UpstreamUnavailable("Unit directory", "connection refused")


def unreachable_session_factory() -> AsyncSession:
    """Session factory whose every session fails to connect."""
    raise OperationalError("SELECT 1", {}, ConnectionRefusedError("connection refused"))


class FlakyStatusLedger(StatusLedger):
    """Status ledger whose writes fail at the database for chosen resources."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        super().__init__(session_factory)
        self.failing_resources: set[UUID] = set()

    async def record(self, entry: LedgerEntry) -> bool:
        if entry.resource_id in self.failing_resources:
            return await StatusLedger(unreachable_session_factory).record(entry)
        return await super().record(entry)
