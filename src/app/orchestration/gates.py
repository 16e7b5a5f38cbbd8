"""Gate evaluator - preconditions checked at the instant of a transition."""

from uuid import UUID

from src.app.core.logging import get_logger
from src.app.models import BuildingStatus
from src.app.orchestration.progress import BuildingTargetsStatus, ProgressPoller, TenantProgress

logger = get_logger(__name__)


class GateEvaluator:
    """Re-reads live state on every call; results are never cached.

    A failed read raises UpstreamUnavailable, so an unreachable store can
    only ever block a gated transition, never let it through.
    """

    def __init__(self, poller: ProgressPoller):
        self.poller = poller

    async def evaluate(self, building_id: UUID) -> BuildingTargetsStatus:
        """Gate for PENDING_DELETION -> ARCHIVED: every unit inactive."""
        return await self.poller.building_progress(building_id)

    async def evaluate_tenant(self, tenant_id: UUID) -> TenantProgress:
        """Gate for APPROVED -> COMPLETED, with counts for display."""
        return await self.poller.tenant_progress(tenant_id)

    async def tenant_ready(self, tenant_id: UUID) -> bool:
        """True iff every building owned by the tenant is ARCHIVED."""
        buildings = await self.poller.list_buildings(tenant_id)
        ready = all(b.status == BuildingStatus.ARCHIVED for b in buildings)
        logger.debug(
            "Tenant readiness evaluated",
            tenant_id=str(tenant_id),
            buildings=len(buildings),
            ready=ready,
        )
        return ready
