"""Cascade dispatcher - fans a tenant approval out to its buildings."""

import asyncio
from uuid import UUID

from src.app.core.config import get_settings
from src.app.core.logging import get_logger
from src.app.models import BuildingStatus, ResourceType
from src.app.orchestration.actors import SYSTEM_ACTOR
from src.app.orchestration.engine import TransitionEngine
from src.app.orchestration.errors import CascadeFailure, OrchestrationError
from src.app.orchestration.progress import ProgressPoller

logger = get_logger(__name__)


class CascadeDispatcher:
    """Moves every building of an approved tenant to PENDING_DELETION.

    Buildings are handled one at a time, each under its own timeout. A
    failure is collected and the fan-out moves on; buildings that already
    moved are never rolled back. Re-running is safe because each per-building
    transition is idempotent.
    """

    def __init__(self, engine: TransitionEngine, poller: ProgressPoller):
        self.engine = engine
        self.poller = poller

    async def fan_out_approval(self, tenant_id: UUID, request_id: UUID) -> list[CascadeFailure]:
        """Request PENDING_DELETION for each of the tenant's buildings.

        Returns:
            One CascadeFailure per building that could not be moved (empty on
            full success).

        Raises:
            UpstreamUnavailable: If the tenant's buildings could not be listed.
        """
        timeout = get_settings().upstream_timeout_seconds
        buildings = await self.poller.list_buildings(tenant_id)
        failures: list[CascadeFailure] = []

        for building in buildings:
            try:
                async with asyncio.timeout(timeout):
                    await self.engine.request_transition(
                        ResourceType.BUILDING,
                        building.id,
                        BuildingStatus.PENDING_DELETION.value,
                        SYSTEM_ACTOR,
                        deletion_request_id=request_id,
                    )
            except TimeoutError:
                failures.append(
                    CascadeFailure(
                        building_id=building.id,
                        error="timeout",
                        message=f"Building did not respond within {timeout:g}s",
                    )
                )
            except OrchestrationError as e:
                failures.append(
                    CascadeFailure(building_id=building.id, error=e.code, message=e.message)
                )

        if failures:
            logger.warning(
                "Cascade completed with failures",
                tenant_id=str(tenant_id),
                deletion_request_id=str(request_id),
                buildings=len(buildings),
                failed=[str(f.building_id) for f in failures],
            )
        else:
            logger.info(
                "Cascade completed",
                tenant_id=str(tenant_id),
                deletion_request_id=str(request_id),
                buildings=len(buildings),
            )
        return failures
