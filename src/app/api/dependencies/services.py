"""Service factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.app.api.dependencies.db import SessionFactory
from src.app.orchestration.factory import Orchestrator, build_orchestrator
from src.app.services import BuildingService, DeletionRequestService


def get_orchestrator(session_factory: SessionFactory) -> Orchestrator:
    """Get the orchestration stack over the shared session factory."""
    return build_orchestrator(session_factory)


OrchestratorDep = Annotated[Orchestrator, Depends(get_orchestrator)]


def get_deletion_request_service(
    session_factory: SessionFactory,
    orchestrator: OrchestratorDep,
) -> DeletionRequestService:
    """Get deletion request service."""
    return DeletionRequestService(session_factory, orchestrator)


def get_building_service(
    session_factory: SessionFactory,
    orchestrator: OrchestratorDep,
) -> BuildingService:
    """Get building service."""
    return BuildingService(session_factory, orchestrator)


DeletionRequestServiceDep = Annotated[
    DeletionRequestService, Depends(get_deletion_request_service)
]
BuildingServiceDep = Annotated[BuildingService, Depends(get_building_service)]
