"""Model exports.

Import from here: `from src.app.models import Building, DeletionRequest`
"""

from src.app.models.building import Building, Unit
from src.app.models.deletion_request import DeletionRequest
from src.app.models.enums import (
    ACTIVE_REQUEST_STATUSES,
    TERMINAL_REQUEST_STATUSES,
    BuildingStatus,
    DeletionRequestStatus,
    ResourceType,
)
from src.app.models.ledger import LedgerEntry

__all__ = [
    # Enums
    "ACTIVE_REQUEST_STATUSES",
    "TERMINAL_REQUEST_STATUSES",
    "BuildingStatus",
    "DeletionRequestStatus",
    "ResourceType",
    # Models
    "Building",
    "DeletionRequest",
    "LedgerEntry",
    "Unit",
]
