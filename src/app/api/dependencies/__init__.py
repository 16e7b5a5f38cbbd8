"""FastAPI dependency injection definitions."""

# Auth
from src.app.api.dependencies.auth import CurrentActor, actor_from_claims, get_current_actor

# Database
from src.app.api.dependencies.db import SessionFactory, get_session_factory

# Services
from src.app.api.dependencies.services import (
    BuildingServiceDep,
    DeletionRequestServiceDep,
    OrchestratorDep,
    get_building_service,
    get_deletion_request_service,
    get_orchestrator,
)

__all__ = [
    # Auth
    "CurrentActor",
    "actor_from_claims",
    "get_current_actor",
    # Database
    "SessionFactory",
    "get_session_factory",
    # Services
    "BuildingServiceDep",
    "DeletionRequestServiceDep",
    "OrchestratorDep",
    "get_building_service",
    "get_deletion_request_service",
    "get_orchestrator",
]
