"""Read/write contracts for the resource stores the orchestrator consumes.

Buildings and units are owned by the base-domain service. The orchestrator
only reads units and only changes a building's status column, always as a
compare-and-set on the status it last observed.
"""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from src.app.models import BuildingStatus


@dataclass(frozen=True)
class UnitView:
    id: UUID
    active: bool


@dataclass(frozen=True)
class BuildingView:
    id: UUID
    tenant_id: UUID
    status: BuildingStatus
    name: str = ""
    code: str = ""


class UnitDirectory(Protocol):
    async def get_units_by_building(self, building_id: UUID) -> list[UnitView]: ...


class BuildingDirectory(Protocol):
    async def get_building(self, building_id: UUID) -> BuildingView | None: ...

    async def list_buildings_by_tenant(self, tenant_id: UUID) -> list[BuildingView]: ...

    async def update_building_status(
        self,
        building_id: UUID,
        status: BuildingStatus,
        expected: BuildingStatus,
    ) -> bool:
        """Set `status` if the building is still in `expected`.

        Returns False when the building had already moved on.
        """
        ...
