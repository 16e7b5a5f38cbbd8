from src.app.schemas.building import (
    BuildingRead,
    BuildingTargetsStatusRead,
    DeletingBuildingRead,
)
from src.app.schemas.deletion_request import (
    CascadeFailureRead,
    DecisionResponse,
    DeletionDecision,
    DeletionRequestCreate,
    DeletionRequestRead,
    LedgerEntryRead,
    TenantTargetsStatus,
)
from src.app.schemas.pagination import PaginatedResponse

__all__ = [
    # Building
    "BuildingRead",
    "BuildingTargetsStatusRead",
    "DeletingBuildingRead",
    # Deletion request
    "CascadeFailureRead",
    "DecisionResponse",
    "DeletionDecision",
    "DeletionRequestCreate",
    "DeletionRequestRead",
    "LedgerEntryRead",
    "TenantTargetsStatus",
    # Pagination
    "PaginatedResponse",
]
