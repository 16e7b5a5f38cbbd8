"""Building endpoints of the deletion flow."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query

from src.app.api.dependencies import BuildingServiceDep, CurrentActor
from src.app.orchestration.progress import BuildingTargetsStatus
from src.app.schemas.building import (
    BuildingRead,
    BuildingTargetsStatusRead,
    DeletingBuildingRead,
)

router = APIRouter(prefix="/buildings", tags=["buildings"])


def _status_read(status: BuildingTargetsStatus) -> BuildingTargetsStatusRead:
    return BuildingTargetsStatusRead(**status.as_dict())


@router.get(
    "/deleting",
    response_model=list[DeletingBuildingRead],
    summary="Buildings awaiting archive",
    description="PENDING_DELETION buildings of a tenant with their unit progress.",
)
async def list_deleting_buildings(
    tenant_id: Annotated[UUID, Query()],
    actor: CurrentActor,
    service: BuildingServiceDep,
) -> list[DeletingBuildingRead]:
    results = await service.list_deleting(actor, tenant_id)
    return [
        DeletingBuildingRead(
            building=BuildingRead.model_validate(building),
            targets_status=_status_read(status),
        )
        for building, status in results
    ]


@router.get(
    "/{building_id}/targets-status",
    response_model=BuildingTargetsStatusRead,
    summary="Building unit progress",
    description="Live count of total and inactive units. Never cached.",
)
async def get_building_targets_status(
    building_id: UUID,
    actor: CurrentActor,
    service: BuildingServiceDep,
) -> BuildingTargetsStatusRead:
    return _status_read(await service.targets_status(actor, building_id))


@router.post(
    "/{building_id}/complete",
    response_model=BuildingRead,
    summary="Archive a building",
    description="Archive a PENDING_DELETION building once all its units are inactive.",
    responses={
        403: {"description": "Caller may not complete this building"},
        409: {"description": "Building not PENDING_DELETION, or units still active"},
    },
)
async def complete_building(
    building_id: UUID,
    actor: CurrentActor,
    service: BuildingServiceDep,
) -> BuildingRead:
    return BuildingRead.model_validate(await service.complete(actor, building_id))
