"""Deletion reconciliation activities."""

from dataclasses import dataclass
from uuid import UUID

from temporalio import activity

from src.app.core.db import get_session_factory
from src.app.orchestration.factory import build_orchestrator
from src.app.services.deletion_request_service import DeletionRequestService


@dataclass
class ReconcileInput:
    deletion_request_id: str


@dataclass
class ReconcileOutput:
    deletion_request_id: str
    status: str
    cascade_failures: int
    completed: bool


def _service() -> DeletionRequestService:
    session_factory = get_session_factory()
    return DeletionRequestService(session_factory, build_orchestrator(session_factory))


@activity.defn
async def list_approved_requests() -> list[str]:
    """IDs of every APPROVED deletion request, oldest first."""
    ids = await _service().list_approved_ids()
    activity.logger.info(f"Found {len(ids)} approved deletion request(s)")
    return [str(i) for i in ids]


@activity.defn
async def reconcile_deletion_request(input: ReconcileInput) -> ReconcileOutput:
    """
    Drive one APPROVED request toward COMPLETED.

    Re-runs the building fan-out, then completes the request if every
    building of the tenant is ARCHIVED.

    Idempotent: every step is a replay-safe transition, so retries only
    touch what has not converged yet.
    """
    outcome = await _service().reconcile(UUID(input.deletion_request_id))
    return ReconcileOutput(
        deletion_request_id=str(outcome.request_id),
        status=outcome.status,
        cascade_failures=outcome.cascade_failures,
        completed=outcome.completed,
    )
