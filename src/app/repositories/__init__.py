"""Repository layer - data access abstraction."""

from src.app.repositories.base import BaseRepository
from src.app.repositories.building import BuildingRepository, UnitRepository
from src.app.repositories.deletion_request import DeletionRequestRepository
from src.app.repositories.ledger import LedgerRepository

__all__ = [
    "BaseRepository",
    "BuildingRepository",
    "DeletionRequestRepository",
    "LedgerRepository",
    "UnitRepository",
]
