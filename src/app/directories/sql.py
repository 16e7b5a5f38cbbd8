"""Directories backed by the shared Postgres database.

Each call runs in its own short-lived session so that one store's failure
never leaves another store's transaction half open.
"""

from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.app.core.logging import get_logger
from src.app.directories.base import BuildingView, UnitView
from src.app.models import Building, BuildingStatus
from src.app.orchestration.errors import UpstreamUnavailable
from src.app.repositories import BuildingRepository, UnitRepository

logger = get_logger(__name__)


def _to_view(building: Building) -> BuildingView:
    return BuildingView(
        id=building.id,
        tenant_id=building.tenant_id,
        status=building.status_enum,
        name=building.name,
        code=building.code,
    )


class SqlUnitDirectory:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_units_by_building(self, building_id: UUID) -> list[UnitView]:
        try:
            async with self._session_factory() as session:
                units = await UnitRepository(session).list_by_building(building_id)
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Unit directory read failed", building_id=str(building_id), error=str(e))
            raise UpstreamUnavailable("Unit directory") from e
        return [UnitView(id=u.id, active=u.active) for u in units]


class SqlBuildingDirectory:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_building(self, building_id: UUID) -> BuildingView | None:
        try:
            async with self._session_factory() as session:
                building = await BuildingRepository(session).get_by_id(building_id)
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Building directory read failed", building_id=str(building_id), error=str(e))
            raise UpstreamUnavailable("Building directory") from e
        return _to_view(building) if building else None

    async def list_buildings_by_tenant(self, tenant_id: UUID) -> list[BuildingView]:
        try:
            async with self._session_factory() as session:
                buildings = await BuildingRepository(session).list_by_tenant(tenant_id)
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Building directory list failed", tenant_id=str(tenant_id), error=str(e))
            raise UpstreamUnavailable("Building directory") from e
        return [_to_view(b) for b in buildings]

    async def update_building_status(
        self,
        building_id: UUID,
        status: BuildingStatus,
        expected: BuildingStatus,
    ) -> bool:
        try:
            async with self._session_factory() as session:
                updated = await BuildingRepository(session).compare_and_set_status(
                    building_id, expected, status
                )
                await session.commit()
        except (SQLAlchemyError, OSError) as e:
            logger.warning(
                "Building status update failed",
                building_id=str(building_id),
                status=status.value,
                error=str(e),
            )
            raise UpstreamUnavailable("Building directory") from e
        return updated
