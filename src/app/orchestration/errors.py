"""Deletion orchestration error taxonomy.

Every error carries a stable `code` for clients and a message that tells the
caller what to do next. HTTP mapping lives in core/exceptions.py.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from uuid import UUID

if TYPE_CHECKING:
    from src.app.orchestration.progress import BuildingTargetsStatus, TenantProgress


class OrchestrationError(Exception):
    """Base class for deletion orchestration failures."""

    code = "orchestration_error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def extra(self) -> dict[str, Any]:
        """Additional fields included in the error response body."""
        return {}


class ResourceNotFound(OrchestrationError):
    code = "not_found"
    status_code = 404

    def __init__(self, resource_type: str, resource_id: UUID):
        super().__init__(f"{resource_type.replace('_', ' ').capitalize()} {resource_id} not found")
        self.resource_type = resource_type
        self.resource_id = resource_id


class InvalidTransition(OrchestrationError):
    """Requested state change is not legal from the current state."""

    code = "invalid_transition"
    status_code = 409

    def __init__(self, current: str, target: str, message: str | None = None):
        super().__init__(message or f"Cannot move from {current} to {target}")
        self.current = current
        self.target = target

    def extra(self) -> dict[str, Any]:
        return {"current_status": self.current, "target_status": self.target}


class PreconditionNotMet(OrchestrationError):
    """Gate failed. Carries the progress snapshot observed at call time."""

    code = "precondition_not_met"
    status_code = 409

    def __init__(self, status: "BuildingTargetsStatus | TenantProgress"):
        super().__init__(status.describe())
        self.status = status

    def extra(self) -> dict[str, Any]:
        return {"status": self.status.as_dict()}


class Unauthorized(OrchestrationError):
    code = "unauthorized"
    status_code = 403


class ActiveRequestExists(OrchestrationError):
    code = "active_request_exists"
    status_code = 409

    def __init__(self, tenant_id: UUID, request_id: UUID, status: str):
        super().__init__(
            f"Tenant already has a {status} deletion request ({request_id}); "
            "wait for it to finish or cancel it first"
        )
        self.tenant_id = tenant_id
        self.request_id = request_id

    def extra(self) -> dict[str, Any]:
        return {"deletion_request_id": str(self.request_id)}


class UpstreamUnavailable(OrchestrationError):
    """A resource store could not be reached or did not answer in time."""

    code = "upstream_unavailable"
    status_code = 503

    def __init__(self, store: str, reason: str | None = None):
        message = f"{store} is unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(f"{message}. Retry shortly")
        self.store = store


@dataclass(frozen=True)
class CascadeFailure:
    """One building the approval fan-out could not move."""

    building_id: UUID
    error: str
    message: str


class PartialCascadeFailure(OrchestrationError):
    """Fan-out reached some buildings but not all of them."""

    code = "partial_cascade_failure"
    status_code = 502

    def __init__(self, failures: list[CascadeFailure]):
        super().__init__(
            f"{len(failures)} building(s) could not be moved to PENDING_DELETION; "
            "retry the cascade"
        )
        self.failures = failures

    def extra(self) -> dict[str, Any]:
        return {
            "failures": [
                {"building_id": str(f.building_id), "error": f.error, "message": f.message}
                for f in self.failures
            ]
        }
