"""Shared enums for models."""

from enum import Enum


class DeletionRequestStatus(str, Enum):
    """Tenant deletion request lifecycle status."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_REQUEST_STATUSES


TERMINAL_REQUEST_STATUSES = frozenset(
    {
        DeletionRequestStatus.REJECTED,
        DeletionRequestStatus.COMPLETED,
        DeletionRequestStatus.CANCELED,
    }
)

# A tenant may hold at most one request in these states
ACTIVE_REQUEST_STATUSES = frozenset(
    {
        DeletionRequestStatus.PENDING,
        DeletionRequestStatus.APPROVED,
    }
)


class BuildingStatus(str, Enum):
    """Building lifecycle status as seen by the deletion orchestrator."""

    ACTIVE = "ACTIVE"
    PENDING_DELETION = "PENDING_DELETION"
    ARCHIVED = "ARCHIVED"


class ResourceType(str, Enum):
    """Resources whose status the transition engine manages."""

    DELETION_REQUEST = "deletion_request"
    BUILDING = "building"
