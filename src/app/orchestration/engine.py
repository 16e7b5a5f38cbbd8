"""Transition engine - the single entry point for every deletion state change.

Each call:

1. loads the resource and authorizes the actor,
2. checks the static legal-transition table,
3. evaluates the gate (if the transition has one) against a fresh read,
4. applies the change as a compare-and-set on the current status and
   records it in the ledger.

Replaying a transition that was already applied returns a result with
`applied=False` instead of raising, so every caller may retry freely.
"""

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.app.core.logging import get_logger
from src.app.directories.base import BuildingDirectory, BuildingView
from src.app.models import (
    BuildingStatus,
    DeletionRequest,
    DeletionRequestStatus,
    ResourceType,
)
from src.app.models.base import utc_now
from src.app.orchestration.actors import (
    SYSTEM_ACTOR,
    Actor,
    authorize_building_transition,
    authorize_request_transition,
)
from src.app.orchestration.errors import (
    InvalidTransition,
    PreconditionNotMet,
    ResourceNotFound,
    UpstreamUnavailable,
)
from src.app.orchestration.gates import GateEvaluator
from src.app.orchestration.ledger import StatusLedger, build_entry
from src.app.orchestration.progress import bounded
from src.app.repositories import DeletionRequestRepository, LedgerRepository

logger = get_logger(__name__)

_R = DeletionRequestStatus
_B = BuildingStatus

LEGAL_TRANSITIONS: dict[ResourceType, dict[str, frozenset[str]]] = {
    ResourceType.DELETION_REQUEST: {
        _R.PENDING.value: frozenset({_R.APPROVED.value, _R.REJECTED.value, _R.CANCELED.value}),
        _R.APPROVED.value: frozenset({_R.COMPLETED.value}),
    },
    ResourceType.BUILDING: {
        _B.ACTIVE.value: frozenset({_B.PENDING_DELETION.value}),
        _B.PENDING_DELETION.value: frozenset({_B.ARCHIVED.value}),
    },
}

# States that can only have been reached by passing through the key state.
# Asking for the key state while in one of these is a replay, not an error.
IMPLIED_BY: dict[ResourceType, dict[str, frozenset[str]]] = {
    ResourceType.DELETION_REQUEST: {
        _R.APPROVED.value: frozenset({_R.COMPLETED.value}),
    },
    ResourceType.BUILDING: {
        _B.PENDING_DELETION.value: frozenset({_B.ARCHIVED.value}),
    },
}


def is_legal(resource_type: ResourceType, current: str, target: str) -> bool:
    return target in LEGAL_TRANSITIONS[resource_type].get(current, frozenset())


def is_already_applied(resource_type: ResourceType, current: str, target: str) -> bool:
    return current == target or current in IMPLIED_BY[resource_type].get(target, frozenset())


@dataclass(frozen=True)
class TransitionResult:
    resource_type: ResourceType
    resource_id: UUID
    previous_state: str
    state: str
    applied: bool


class TransitionEngine:
    """Applies deletion request and building transitions."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        buildings: BuildingDirectory,
        gates: GateEvaluator,
        ledger: StatusLedger,
    ):
        self._session_factory = session_factory
        self.buildings = buildings
        self.gates = gates
        self.ledger = ledger

    async def request_transition(
        self,
        resource_type: ResourceType,
        resource_id: UUID,
        target_state: str,
        actor: Actor,
        *,
        deletion_request_id: UUID | None = None,
        reason: str | None = None,
        rejection_reason: str | None = None,
        note: str | None = None,
    ) -> TransitionResult:
        """Move a resource to `target_state` on behalf of `actor`.

        Raises:
            ResourceNotFound: Unknown resource.
            Unauthorized: Actor may not perform this transition.
            InvalidTransition: Transition not legal from the current state.
            PreconditionNotMet: Gate evaluated false at call time.
            UpstreamUnavailable: A resource store could not be read or written.
        """
        if resource_type == ResourceType.DELETION_REQUEST:
            return await self._transition_request(
                resource_id,
                DeletionRequestStatus(target_state),
                actor,
                reason=reason,
                rejection_reason=rejection_reason,
                note=note,
            )
        return await self._transition_building(
            resource_id,
            BuildingStatus(target_state),
            actor,
            deletion_request_id=deletion_request_id,
            reason=reason,
        )

    # Deletion requests live in this service's own database: the status
    # update and the ledger entry commit in one transaction.

    async def _load_request(self, request_id: UUID) -> DeletionRequest:
        try:
            async with self._session_factory() as session:
                request = await DeletionRequestRepository(session).get_by_id(request_id)
        except SQLAlchemyError as e:
            raise UpstreamUnavailable("Deletion request store") from e
        if request is None:
            raise ResourceNotFound(ResourceType.DELETION_REQUEST.value, request_id)
        return request

    async def _transition_request(
        self,
        request_id: UUID,
        target: DeletionRequestStatus,
        actor: Actor,
        reason: str | None,
        rejection_reason: str | None,
        note: str | None,
    ) -> TransitionResult:
        request = await self._load_request(request_id)
        current = request.status

        authorize_request_transition(actor, request.tenant_id, target)

        if is_already_applied(ResourceType.DELETION_REQUEST, current, target.value):
            return self._replayed(ResourceType.DELETION_REQUEST, request_id, current, actor)
        if not is_legal(ResourceType.DELETION_REQUEST, current, target.value):
            raise InvalidTransition(current, target.value)

        if target == DeletionRequestStatus.COMPLETED:
            progress = await self.gates.evaluate_tenant(request.tenant_id)
            if not progress.buildings_ready:
                logger.info(
                    "Deletion request completion gate not met",
                    deletion_request_id=str(request_id),
                    buildings_total=progress.buildings_total,
                    buildings_archived=progress.buildings_archived,
                )
                raise PreconditionNotMet(progress)

        now = utc_now()
        fields: dict[str, Any] = {}
        if target in (DeletionRequestStatus.APPROVED, DeletionRequestStatus.REJECTED):
            fields = {"decided_by": actor.id, "decided_at": now, "note": note}
            if target == DeletionRequestStatus.REJECTED:
                fields["rejection_reason"] = rejection_reason
        elif target == DeletionRequestStatus.COMPLETED:
            fields = {"completed_at": now}
        elif target == DeletionRequestStatus.CANCELED:
            fields = {"canceled_at": now}

        entry = build_entry(
            ResourceType.DELETION_REQUEST,
            request_id,
            request.tenant_id,
            current,
            target.value,
            actor,
            deletion_request_id=request_id,
            reason=rejection_reason or reason or note,
        )

        try:
            async with self._session_factory() as session:
                won = await DeletionRequestRepository(session).compare_and_set_status(
                    request_id, DeletionRequestStatus(current), target, **fields
                )
                if won:
                    LedgerRepository(session).add(entry)
                    try:
                        await session.commit()
                    except IntegrityError:
                        await session.rollback()
                        won = False
                else:
                    await session.rollback()
        except SQLAlchemyError as e:
            logger.error(
                "Deletion request transition failed",
                deletion_request_id=str(request_id),
                target=target.value,
                error=str(e),
            )
            raise UpstreamUnavailable("Deletion request store") from e

        if not won:
            # Lost a race; whoever won decides whether this is a replay.
            latest = await self._load_request(request_id)
            if is_already_applied(ResourceType.DELETION_REQUEST, latest.status, target.value):
                return self._replayed(ResourceType.DELETION_REQUEST, request_id, latest.status, actor)
            raise InvalidTransition(latest.status, target.value)

        logger.info(
            "Deletion request transitioned",
            deletion_request_id=str(request_id),
            tenant_id=str(request.tenant_id),
            from_status=current,
            to_status=target.value,
            actor_id=str(actor.id),
        )
        return TransitionResult(
            ResourceType.DELETION_REQUEST, request_id, current, target.value, applied=True
        )

    # Buildings live in the base-domain store. The status change is a
    # compare-and-set there, then the ledger entry is appended here. An entry
    # lost between those two steps is backfilled by reconciliation only.

    async def _load_building(self, building_id: UUID) -> BuildingView:
        building = await bounded(self.buildings.get_building(building_id), "Building directory")
        if building is None:
            raise ResourceNotFound(ResourceType.BUILDING.value, building_id)
        return building

    async def _approved_request_for(self, tenant_id: UUID) -> DeletionRequest | None:
        try:
            async with self._session_factory() as session:
                request = await DeletionRequestRepository(session).get_active_for_tenant(tenant_id)
        except SQLAlchemyError as e:
            raise UpstreamUnavailable("Deletion request store") from e
        if request is not None and request.status == DeletionRequestStatus.APPROVED.value:
            return request
        return None

    async def _transition_building(
        self,
        building_id: UUID,
        target: BuildingStatus,
        actor: Actor,
        deletion_request_id: UUID | None,
        reason: str | None,
    ) -> TransitionResult:
        building = await self._load_building(building_id)
        current = building.status.value

        authorize_building_transition(actor, building.tenant_id, target)

        approved = await self._approved_request_for(building.tenant_id)
        request_id = approved.id if approved else deletion_request_id

        if is_already_applied(ResourceType.BUILDING, current, target.value):
            return self._replayed(ResourceType.BUILDING, building_id, current, actor)
        if not is_legal(ResourceType.BUILDING, current, target.value):
            raise InvalidTransition(current, target.value)

        details: dict[str, Any] | None = None
        if target == BuildingStatus.PENDING_DELETION:
            if approved is None or (deletion_request_id and approved.id != deletion_request_id):
                raise InvalidTransition(
                    current,
                    target.value,
                    "Building can only enter PENDING_DELETION from its tenant's approved "
                    "deletion request",
                )
        elif target == BuildingStatus.ARCHIVED:
            status = await self.gates.evaluate(building_id)
            if not status.units_ready:
                logger.info(
                    "Building completion gate not met",
                    building_id=str(building_id),
                    total_units=status.total_units,
                    inactive_units=status.inactive_units,
                )
                raise PreconditionNotMet(status)
            details = {"total_units": status.total_units, "inactive_units": status.inactive_units}

        won = await bounded(
            self.buildings.update_building_status(building_id, target, expected=building.status),
            "Building directory",
        )
        if not won:
            latest = await self._load_building(building_id)
            if is_already_applied(ResourceType.BUILDING, latest.status.value, target.value):
                return self._replayed(ResourceType.BUILDING, building_id, latest.status.value, actor)
            raise InvalidTransition(latest.status.value, target.value)

        recorded = await self.ledger.record(
            build_entry(
                ResourceType.BUILDING,
                building_id,
                building.tenant_id,
                current,
                target.value,
                actor,
                deletion_request_id=request_id,
                reason=reason,
                details=details,
            )
        )
        if not recorded:
            logger.warning(
                "Building transition won but ledger entry was already present",
                building_id=str(building_id),
                to_status=target.value,
                actor_id=str(actor.id),
            )

        logger.info(
            "Building transitioned",
            building_id=str(building_id),
            tenant_id=str(building.tenant_id),
            from_status=current,
            to_status=target.value,
            actor_id=str(actor.id),
        )
        return TransitionResult(ResourceType.BUILDING, building_id, current, target.value, applied=True)

    async def backfill_building_ledger(
        self, building: BuildingView, deletion_request_id: UUID
    ) -> int:
        """Record every status the building reached without a ledger entry.

        Entries are attributed to the system actor, since whoever made the
        original change is unknown. Returns the number of entries written.
        """
        reached: list[BuildingStatus] = {
            BuildingStatus.ACTIVE: [],
            BuildingStatus.PENDING_DELETION: [BuildingStatus.PENDING_DELETION],
            BuildingStatus.ARCHIVED: [BuildingStatus.PENDING_DELETION, BuildingStatus.ARCHIVED],
        }[building.status]

        written = 0
        previous = BuildingStatus.ACTIVE
        for status in reached:
            recorded = await self.ledger.has_transition(
                ResourceType.BUILDING, building.id, status.value
            )
            if not recorded:
                entry = build_entry(
                    ResourceType.BUILDING,
                    building.id,
                    building.tenant_id,
                    previous.value,
                    status.value,
                    SYSTEM_ACTOR,
                    deletion_request_id=deletion_request_id,
                    details={"backfilled": True},
                )
                if await self.ledger.record(entry):
                    written += 1
            previous = status

        if written:
            logger.warning(
                "Backfilled missing building ledger entries",
                building_id=str(building.id),
                deletion_request_id=str(deletion_request_id),
                entries=written,
            )
        return written

    @staticmethod
    def _replayed(
        resource_type: ResourceType, resource_id: UUID, state: str, actor: Actor
    ) -> TransitionResult:
        logger.info(
            "Transition already applied",
            resource_type=resource_type.value,
            resource_id=str(resource_id),
            state=state,
            actor_id=str(actor.id),
        )
        return TransitionResult(resource_type, resource_id, state, state, applied=False)
