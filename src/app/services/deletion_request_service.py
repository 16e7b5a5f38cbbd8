"""Tenant deletion request service."""

from dataclasses import dataclass, field
from typing import Literal
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.app.core.config import get_settings
from src.app.core.logging import get_logger
from src.app.models import (
    BuildingStatus,
    DeletionRequest,
    DeletionRequestStatus,
    LedgerEntry,
    ResourceType,
)
from src.app.orchestration.actors import (
    SYSTEM_ACTOR,
    Actor,
    authorize_request_creation,
    authorize_view,
)
from src.app.orchestration.errors import (
    ActiveRequestExists,
    CascadeFailure,
    InvalidTransition,
    PartialCascadeFailure,
    PreconditionNotMet,
    ResourceNotFound,
    Unauthorized,
    UpstreamUnavailable,
)
from src.app.orchestration.factory import Orchestrator
from src.app.orchestration.progress import TenantProgress
from src.app.repositories import DeletionRequestRepository

logger = get_logger(__name__)

RequestScope = Literal["mine", "all"]


@dataclass
class DecisionOutcome:
    request: DeletionRequest
    applied: bool
    cascade_failures: list[CascadeFailure] = field(default_factory=list)


@dataclass
class ReconcileOutcome:
    request_id: UUID
    status: str
    cascade_failures: int = 0
    backfilled: int = 0
    completed: bool = False


def normalize_reason(reason: str) -> str:
    """Strip a deletion reason and enforce the minimum length.

    Raises:
        ValueError: If the stripped reason is too short.
    """
    stripped = reason.strip()
    min_length = get_settings().deletion_reason_min_length
    if len(stripped) < min_length:
        raise ValueError(f"Reason must be at least {min_length} characters")
    return stripped


class DeletionRequestService:
    """Deletion request lifecycle: create, decide, cancel, complete.

    Every status change goes through the transition engine. This service only
    inserts new requests and reads.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        orchestrator: Orchestrator,
    ):
        self._session_factory = session_factory
        self.orchestrator = orchestrator

    async def _get(self, request_id: UUID) -> DeletionRequest:
        try:
            async with self._session_factory() as session:
                request = await DeletionRequestRepository(session).get_by_id(request_id)
        except SQLAlchemyError as e:
            raise UpstreamUnavailable("Deletion request store") from e
        if request is None:
            raise ResourceNotFound(ResourceType.DELETION_REQUEST.value, request_id)
        return request

    async def _resolve_existing(
        self, existing: DeletionRequest, actor: Actor, reason: str
    ) -> DeletionRequest:
        """Return `existing` if this create call is a replay of it."""
        if existing.requested_by == actor.id and existing.reason == reason:
            logger.info(
                "Deletion request already exists",
                deletion_request_id=str(existing.id),
                tenant_id=str(existing.tenant_id),
            )
            return existing
        raise ActiveRequestExists(existing.tenant_id, existing.id, existing.status)

    async def create(
        self, actor: Actor, tenant_id: UUID, reason: str
    ) -> tuple[DeletionRequest, bool]:
        """Open a PENDING deletion request for a tenant.

        Returns:
            Tuple of (request, created). `created` is False when an identical
            active request from the same requester already existed.

        Raises:
            Unauthorized: Actor is not an owner of the tenant.
            ValueError: Reason too short.
            ActiveRequestExists: Another PENDING or APPROVED request exists.
        """
        authorize_request_creation(actor, tenant_id)
        reason = normalize_reason(reason)

        try:
            async with self._session_factory() as session:
                repo = DeletionRequestRepository(session)
                existing = await repo.get_active_for_tenant(tenant_id)
                if existing is not None:
                    return await self._resolve_existing(existing, actor, reason), False

                # The partial unique index on active requests handles remaining races
                request = DeletionRequest(
                    tenant_id=tenant_id, requested_by=actor.id, reason=reason
                )
                repo.add(request)
                try:
                    await session.commit()
                except IntegrityError:
                    await session.rollback()
                    existing = await repo.get_active_for_tenant(tenant_id)
                    if existing is None:
                        raise
                    return await self._resolve_existing(existing, actor, reason), False
                await session.refresh(request)
        except SQLAlchemyError as e:
            logger.error("Deletion request insert failed", tenant_id=str(tenant_id), error=str(e))
            raise UpstreamUnavailable("Deletion request store") from e

        logger.info(
            "Deletion request created",
            deletion_request_id=str(request.id),
            tenant_id=str(tenant_id),
            requested_by=str(actor.id),
        )
        return request, True

    async def get(self, actor: Actor, request_id: UUID) -> DeletionRequest:
        request = await self._get(request_id)
        authorize_view(actor, request.tenant_id)
        return request

    async def list_requests(
        self,
        actor: Actor,
        scope: RequestScope,
        cursor: str | None,
        limit: int,
        status: DeletionRequestStatus | None = None,
    ) -> tuple[list[DeletionRequest], str | None, bool]:
        """List requests visible to the actor.

        `mine` lists every request of the actor's tenant, or the actor's own
        requests when they belong to no tenant. `all` is for administrators.
        """
        if scope == "all" and not actor.is_admin:
            raise Unauthorized("Only platform administrators may list all deletion requests")

        tenant_id: UUID | None = None
        requested_by: UUID | None = None
        if scope == "mine":
            if actor.tenant_id is not None:
                tenant_id = actor.tenant_id
            else:
                requested_by = actor.id

        try:
            async with self._session_factory() as session:
                return await DeletionRequestRepository(session).list_paginated(
                    cursor=cursor,
                    limit=limit,
                    requested_by=requested_by,
                    tenant_id=tenant_id,
                    status=status,
                )
        except SQLAlchemyError as e:
            raise UpstreamUnavailable("Deletion request store") from e

    async def decide(
        self,
        actor: Actor,
        request_id: UUID,
        approve: bool,
        rejection_reason: str | None = None,
        note: str | None = None,
    ) -> DecisionOutcome:
        """Approve or reject a PENDING request.

        Approval is committed to the ledger first, then fanned out to the
        tenant's buildings. Repeating an approval re-runs the fan-out, which
        only touches buildings that have not moved yet.
        """
        if not approve and not (rejection_reason and rejection_reason.strip()):
            raise ValueError("A rejection reason is required to reject a request")

        engine = self.orchestrator.engine
        target = DeletionRequestStatus.APPROVED if approve else DeletionRequestStatus.REJECTED
        result = await engine.request_transition(
            ResourceType.DELETION_REQUEST,
            request_id,
            target.value,
            actor,
            rejection_reason=rejection_reason.strip() if rejection_reason else None,
            note=note,
        )

        failures: list[CascadeFailure] = []
        if result.state == DeletionRequestStatus.APPROVED.value:
            request = await self._get(request_id)
            failures = await self.orchestrator.cascade.fan_out_approval(request.tenant_id, request_id)
            if not failures:
                await self._try_complete(request)

        return DecisionOutcome(
            request=await self._get(request_id),
            applied=result.applied,
            cascade_failures=failures,
        )

    async def cancel(self, actor: Actor, request_id: UUID) -> DeletionRequest:
        """Withdraw a PENDING request. APPROVED requests cannot be canceled."""
        await self.orchestrator.engine.request_transition(
            ResourceType.DELETION_REQUEST,
            request_id,
            DeletionRequestStatus.CANCELED.value,
            actor,
        )
        return await self._get(request_id)

    async def _try_complete(self, request: DeletionRequest) -> bool:
        """Complete an APPROVED request if its tenant is ready.

        Returns True if the request is COMPLETED afterwards.
        """
        if request.status != DeletionRequestStatus.APPROVED.value:
            return request.status == DeletionRequestStatus.COMPLETED.value
        if not await self.orchestrator.gates.tenant_ready(request.tenant_id):
            return False
        try:
            await self.orchestrator.engine.request_transition(
                ResourceType.DELETION_REQUEST,
                request.id,
                DeletionRequestStatus.COMPLETED.value,
                SYSTEM_ACTOR,
                reason="All buildings archived",
            )
        except PreconditionNotMet:
            # A building was listed ARCHIVED a moment ago; the next check retries
            return False
        return True

    async def targets_status(
        self, actor: Actor, request_id: UUID
    ) -> tuple[DeletionRequest, TenantProgress]:
        """Progress of the tenant's buildings and units.

        Also advances an APPROVED request to COMPLETED when every building
        is archived.
        """
        request = await self.get(actor, request_id)
        progress = await self.orchestrator.poller.tenant_progress(request.tenant_id)
        if request.status == DeletionRequestStatus.APPROVED.value and progress.buildings_ready:
            if await self._try_complete(request):
                request = await self._get(request_id)
        return request, progress

    async def complete(self, actor: Actor, request_id: UUID) -> DeletionRequest:
        """Explicit, gated completion by an administrator."""
        await self.orchestrator.engine.request_transition(
            ResourceType.DELETION_REQUEST,
            request_id,
            DeletionRequestStatus.COMPLETED.value,
            actor,
        )
        return await self._get(request_id)

    async def retry_cascade(self, actor: Actor, request_id: UUID) -> DeletionRequest:
        """Re-run the approval fan-out for an APPROVED request.

        Raises:
            PartialCascadeFailure: If some buildings still could not be moved.
        """
        if not (actor.is_admin or actor.is_system):
            raise Unauthorized("Only platform administrators may retry a cascade")
        request = await self._get(request_id)
        if request.status != DeletionRequestStatus.APPROVED.value:
            raise InvalidTransition(
                request.status,
                DeletionRequestStatus.APPROVED.value,
                f"Cascade only runs for APPROVED requests; this one is {request.status}",
            )

        failures = await self.orchestrator.cascade.fan_out_approval(request.tenant_id, request_id)
        if failures:
            raise PartialCascadeFailure(failures)
        return request

    async def history(self, actor: Actor, request_id: UUID) -> list[LedgerEntry]:
        request = await self.get(actor, request_id)
        return await self.orchestrator.ledger.history_for_request(request.id)

    async def list_approved_ids(self) -> list[UUID]:
        try:
            async with self._session_factory() as session:
                return await DeletionRequestRepository(session).list_ids_by_status(
                    DeletionRequestStatus.APPROVED
                )
        except SQLAlchemyError as e:
            raise UpstreamUnavailable("Deletion request store") from e

    async def reconcile(self, request_id: UUID) -> ReconcileOutcome:
        """Drive one APPROVED request toward convergence.

        Re-runs the fan-out and completes the request once every building is
        archived. Safe to repeat any number of times.
        """
        request = await self._get(request_id)
        if request.status != DeletionRequestStatus.APPROVED.value:
            return ReconcileOutcome(request_id=request_id, status=request.status)

        failures = await self.orchestrator.cascade.fan_out_approval(request.tenant_id, request_id)
        backfilled = 0
        for building in await self.orchestrator.poller.list_buildings(request.tenant_id):
            if building.status != BuildingStatus.ACTIVE:
                backfilled += await self.orchestrator.engine.backfill_building_ledger(
                    building, request_id
                )
        completed = await self._try_complete(request)
        outcome = ReconcileOutcome(
            request_id=request_id,
            status=(
                DeletionRequestStatus.COMPLETED.value
                if completed
                else DeletionRequestStatus.APPROVED.value
            ),
            cascade_failures=len(failures),
            backfilled=backfilled,
            completed=completed,
        )
        logger.info(
            "Deletion request reconciled",
            deletion_request_id=str(request_id),
            status=outcome.status,
            cascade_failures=outcome.cascade_failures,
            backfilled=outcome.backfilled,
        )
        return outcome
