"""Building schemas for API response."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from src.app.models import BuildingStatus


class BuildingRead(BaseModel):
    id: UUID
    tenant_id: UUID
    name: str
    code: str
    status: BuildingStatus
    updated_at: datetime
    archived_at: datetime | None

    model_config = {"from_attributes": True}


class BuildingTargetsStatusRead(BaseModel):
    """Unit progress of one building. `units_ready` is true for an empty building."""

    building_id: UUID
    total_units: int
    inactive_units: int
    units_ready: bool


class DeletingBuildingRead(BaseModel):
    building: BuildingRead
    targets_status: BuildingTargetsStatusRead
