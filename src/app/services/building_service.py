"""Building-side operations of the deletion flow."""

from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.app.models import Building, BuildingStatus, ResourceType
from src.app.orchestration.actors import Actor, authorize_view
from src.app.orchestration.errors import ResourceNotFound, UpstreamUnavailable
from src.app.orchestration.factory import Orchestrator
from src.app.orchestration.progress import BuildingTargetsStatus, bounded
from src.app.repositories import BuildingRepository


class BuildingService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        orchestrator: Orchestrator,
    ):
        self._session_factory = session_factory
        self.orchestrator = orchestrator

    async def _get(self, building_id: UUID) -> Building:
        try:
            async with self._session_factory() as session:
                building = await BuildingRepository(session).get_by_id(building_id)
        except SQLAlchemyError as e:
            raise UpstreamUnavailable("Building directory") from e
        if building is None:
            raise ResourceNotFound(ResourceType.BUILDING.value, building_id)
        return building

    async def targets_status(self, actor: Actor, building_id: UUID) -> BuildingTargetsStatus:
        """Live unit counts for a building. Never cached."""
        building = await bounded(
            self.orchestrator.buildings.get_building(building_id), "Building directory"
        )
        if building is None:
            raise ResourceNotFound(ResourceType.BUILDING.value, building_id)
        authorize_view(actor, building.tenant_id)
        return await self.orchestrator.gates.evaluate(building_id)

    async def complete(self, actor: Actor, building_id: UUID) -> Building:
        """Archive a PENDING_DELETION building whose units are all inactive.

        The unit gate is re-checked at call time, whatever an earlier
        targets-status read showed.

        Raises:
            InvalidTransition: Building is not PENDING_DELETION (or ARCHIVED).
            PreconditionNotMet: Units still active; carries the counts.
        """
        await self.orchestrator.engine.request_transition(
            ResourceType.BUILDING,
            building_id,
            BuildingStatus.ARCHIVED.value,
            actor,
        )
        return await self._get(building_id)

    async def list_deleting(
        self, actor: Actor, tenant_id: UUID
    ) -> list[tuple[Building, BuildingTargetsStatus]]:
        """Buildings of a tenant awaiting archive, each with its unit progress."""
        authorize_view(actor, tenant_id)
        try:
            async with self._session_factory() as session:
                buildings = await BuildingRepository(session).list_by_tenant(
                    tenant_id, BuildingStatus.PENDING_DELETION
                )
        except SQLAlchemyError as e:
            raise UpstreamUnavailable("Building directory") from e

        results = []
        for building in buildings:
            status = await self.orchestrator.poller.building_progress(building.id)
            results.append((building, status))
        return results
