"""Repositories for Building and Unit entities."""

from typing import Any, cast
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.engine import CursorResult
from sqlmodel import select

from src.app.models import Building, BuildingStatus, Unit
from src.app.models.base import utc_now
from src.app.repositories.base import BaseRepository


class BuildingRepository(BaseRepository[Building]):
    """Repository for Building entity."""

    model = Building

    async def list_by_tenant(
        self, tenant_id: UUID, status: BuildingStatus | None = None
    ) -> list[Building]:
        """List a tenant's buildings, optionally filtered by status."""
        query = select(Building).where(Building.tenant_id == tenant_id)
        if status is not None:
            query = query.where(Building.status == status.value)
        query = query.order_by(Building.code)  # type: ignore[arg-type]
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def compare_and_set_status(
        self,
        building_id: UUID,
        expected: BuildingStatus,
        new: BuildingStatus,
    ) -> bool:
        """Set status only if it still equals `expected`.

        Returns:
            True if the row was updated, False if the status had already moved
            (or the building does not exist).
        """
        values: dict[str, Any] = {"status": new.value, "updated_at": utc_now()}
        if new == BuildingStatus.ARCHIVED:
            values["archived_at"] = values["updated_at"]

        stmt = (
            update(Building)
            .where(
                Building.id == building_id,  # type: ignore[arg-type]
                Building.status == expected.value,  # type: ignore[arg-type]
            )
            .values(**values)
        )
        result = await self.session.execute(stmt)
        return (cast(CursorResult[Any], result).rowcount or 0) == 1


class UnitRepository(BaseRepository[Unit]):
    """Repository for Unit entity (read-only from the orchestrator's side)."""

    model = Unit

    async def list_by_building(self, building_id: UUID) -> list[Unit]:
        """List all units of a building, active or not."""
        result = await self.session.execute(
            select(Unit).where(Unit.building_id == building_id).order_by(Unit.code)  # type: ignore[arg-type]
        )
        return list(result.scalars().all())
