"""Building and unit models - owned by the base-domain CRUD surface.

The orchestrator reads both tables and only ever writes `buildings.status`
(through the transition engine). Units are never mutated here.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from src.app.models.base import utc_now
from src.app.models.enums import BuildingStatus


class Building(SQLModel, table=True):
    """Building owned by a tenant."""

    __tablename__ = "buildings"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(index=True)
    name: str = Field(max_length=200)
    code: str = Field(max_length=50, index=True)
    status: str = Field(default=BuildingStatus.ACTIVE.value, max_length=20, index=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    archived_at: datetime | None = Field(default=None)

    @property
    def status_enum(self) -> BuildingStatus:
        """Get status as BuildingStatus enum."""
        return BuildingStatus(self.status)


class Unit(SQLModel, table=True):
    """Rentable unit inside a building."""

    __tablename__ = "units"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    building_id: UUID = Field(foreign_key="buildings.id", index=True)
    code: str = Field(max_length=50)
    active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utc_now)
