from src.app.services.building_service import BuildingService
from src.app.services.deletion_request_service import DeletionRequestService

__all__ = ["BuildingService", "DeletionRequestService"]
