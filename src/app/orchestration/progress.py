"""Progress poller - read-only child counts for buildings and tenants.

Reads are eventually consistent. Two successive calls may disagree if units
are being (de)activated concurrently, and nothing here assumes counts only
ever go up.
"""

import asyncio
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, TypeVar
from uuid import UUID

from src.app.core.config import get_settings
from src.app.directories.base import BuildingDirectory, BuildingView, UnitDirectory
from src.app.models import BuildingStatus
from src.app.orchestration.errors import UpstreamUnavailable


@dataclass(frozen=True)
class BuildingTargetsStatus:
    building_id: UUID
    total_units: int
    inactive_units: int

    @property
    def active_units(self) -> int:
        return self.total_units - self.inactive_units

    @property
    def units_ready(self) -> bool:
        # An empty building is ready immediately
        return self.total_units == 0 or self.inactive_units == self.total_units

    def as_dict(self) -> dict[str, Any]:
        return {
            "building_id": self.building_id,
            "total_units": self.total_units,
            "inactive_units": self.inactive_units,
            "units_ready": self.units_ready,
        }

    def describe(self) -> str:
        return f"{self.active_units} of {self.total_units} units still active"


@dataclass(frozen=True)
class TenantProgress:
    tenant_id: UUID
    buildings_total: int
    buildings_archived: int
    units_total: int
    units_inactive: int

    @property
    def buildings_ready(self) -> bool:
        return self.buildings_archived == self.buildings_total

    @property
    def units_ready(self) -> bool:
        return self.units_total == 0 or self.units_inactive == self.units_total

    @property
    def all_targets_ready(self) -> bool:
        return self.buildings_ready and self.units_ready

    def as_dict(self) -> dict[str, Any]:
        return {
            "tenant_id": self.tenant_id,
            "buildings_total": self.buildings_total,
            "buildings_archived": self.buildings_archived,
            "units_total": self.units_total,
            "units_inactive": self.units_inactive,
            "buildings_ready": self.buildings_ready,
            "units_ready": self.units_ready,
            "all_targets_ready": self.all_targets_ready,
        }

    def describe(self) -> str:
        remaining = self.buildings_total - self.buildings_archived
        return f"{remaining} of {self.buildings_total} buildings not yet archived"


T = TypeVar("T")


async def bounded(call: Awaitable[T], store: str) -> T:
    """Await a resource store call under the configured upstream timeout."""
    timeout = get_settings().upstream_timeout_seconds
    try:
        async with asyncio.timeout(timeout):
            return await call
    except TimeoutError as e:
        raise UpstreamUnavailable(store, f"no answer within {timeout:g}s") from e


class ProgressPoller:
    """Aggregates unit and building counts from the directories."""

    def __init__(self, units: UnitDirectory, buildings: BuildingDirectory):
        self.units = units
        self.buildings = buildings

    async def building_progress(self, building_id: UUID) -> BuildingTargetsStatus:
        units = await bounded(self.units.get_units_by_building(building_id), "Unit directory")
        return BuildingTargetsStatus(
            building_id=building_id,
            total_units=len(units),
            inactive_units=sum(1 for u in units if not u.active),
        )

    async def list_buildings(self, tenant_id: UUID) -> list[BuildingView]:
        return await bounded(
            self.buildings.list_buildings_by_tenant(tenant_id), "Building directory"
        )

    async def tenant_progress(self, tenant_id: UUID) -> TenantProgress:
        buildings = await self.list_buildings(tenant_id)
        units_total = 0
        units_inactive = 0
        for building in buildings:
            status = await self.building_progress(building.id)
            units_total += status.total_units
            units_inactive += status.inactive_units

        return TenantProgress(
            tenant_id=tenant_id,
            buildings_total=len(buildings),
            buildings_archived=sum(1 for b in buildings if b.status == BuildingStatus.ARCHIVED),
            units_total=units_total,
            units_inactive=units_inactive,
        )
