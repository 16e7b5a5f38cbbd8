"""Tenant deletion request endpoints."""

from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, Response, status

from src.app.api.dependencies import CurrentActor, DeletionRequestServiceDep
from src.app.models import DeletionRequestStatus
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

router = APIRouter(prefix="/deletion-requests", tags=["deletion-requests"])


@router.post(
    "",
    response_model=DeletionRequestRead,
    status_code=status.HTTP_201_CREATED,
    summary="Request tenant deletion",
    description="Open a PENDING deletion request for the caller's tenant.",
    responses={
        200: {"description": "Identical active request already exists"},
        201: {"description": "Request created"},
        403: {"description": "Caller is not an owner of the tenant"},
        409: {"description": "Tenant already has an active request"},
    },
)
async def create_deletion_request(
    body: DeletionRequestCreate,
    response: Response,
    actor: CurrentActor,
    service: DeletionRequestServiceDep,
) -> DeletionRequestRead:
    try:
        request, created = await service.create(actor, body.tenant_id, body.reason)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from e
    if not created:
        response.status_code = status.HTTP_200_OK
    return DeletionRequestRead.model_validate(request)


@router.get(
    "",
    response_model=PaginatedResponse[DeletionRequestRead],
    summary="List deletion requests",
    description="`mine` lists the requests of the caller's tenant; `all` is admin-only.",
)
async def list_deletion_requests(
    actor: CurrentActor,
    service: DeletionRequestServiceDep,
    scope: Annotated[Literal["mine", "all"], Query()] = "mine",
    request_status: Annotated[DeletionRequestStatus | None, Query(alias="status")] = None,
    cursor: Annotated[str | None, Query(description="Cursor for pagination")] = None,
    limit: Annotated[int, Query(ge=1, le=100, description="Max items to return")] = 50,
) -> PaginatedResponse[DeletionRequestRead]:
    requests, next_cursor, has_more = await service.list_requests(
        actor, scope, cursor=cursor, limit=limit, status=request_status
    )
    return PaginatedResponse(
        items=[DeletionRequestRead.model_validate(r) for r in requests],
        next_cursor=next_cursor,
        has_more=has_more,
    )


@router.get("/{request_id}", response_model=DeletionRequestRead, summary="Get deletion request")
async def get_deletion_request(
    request_id: UUID,
    actor: CurrentActor,
    service: DeletionRequestServiceDep,
) -> DeletionRequestRead:
    return DeletionRequestRead.model_validate(await service.get(actor, request_id))


@router.post(
    "/{request_id}/decision",
    response_model=DecisionResponse,
    summary="Approve or reject",
    description=(
        "Admin decision on a PENDING request. Approval moves every building of "
        "the tenant to PENDING_DELETION; buildings that could not be moved are "
        "listed in `cascade_failures` and can be retried."
    ),
    responses={
        403: {"description": "Caller is not an administrator"},
        409: {"description": "Request is not PENDING"},
    },
)
async def decide_deletion_request(
    request_id: UUID,
    body: DeletionDecision,
    actor: CurrentActor,
    service: DeletionRequestServiceDep,
) -> DecisionResponse:
    try:
        outcome = await service.decide(
            actor,
            request_id,
            approve=body.approve,
            rejection_reason=body.rejection_reason,
            note=body.note,
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from e
    return DecisionResponse(
        request=DeletionRequestRead.model_validate(outcome.request),
        applied=outcome.applied,
        cascade_failures=[CascadeFailureRead.model_validate(f) for f in outcome.cascade_failures],
    )


@router.post(
    "/{request_id}/cancel",
    response_model=DeletionRequestRead,
    summary="Cancel a pending request",
    responses={409: {"description": "Request is no longer PENDING"}},
)
async def cancel_deletion_request(
    request_id: UUID,
    actor: CurrentActor,
    service: DeletionRequestServiceDep,
) -> DeletionRequestRead:
    return DeletionRequestRead.model_validate(await service.cancel(actor, request_id))


@router.get(
    "/{request_id}/targets-status",
    response_model=TenantTargetsStatus,
    summary="Tenant deletion progress",
    description=(
        "Building and unit counts for the tenant. Completes an APPROVED request "
        "once every building is archived."
    ),
)
async def get_request_targets_status(
    request_id: UUID,
    actor: CurrentActor,
    service: DeletionRequestServiceDep,
) -> TenantTargetsStatus:
    request, progress = await service.targets_status(actor, request_id)
    return TenantTargetsStatus(
        deletion_request_id=request.id,
        request_status=request.status_enum,
        **progress.as_dict(),
    )


@router.post(
    "/{request_id}/complete",
    response_model=DeletionRequestRead,
    summary="Complete a request",
    responses={409: {"description": "Not every building is archived yet"}},
)
async def complete_deletion_request(
    request_id: UUID,
    actor: CurrentActor,
    service: DeletionRequestServiceDep,
) -> DeletionRequestRead:
    return DeletionRequestRead.model_validate(await service.complete(actor, request_id))


@router.post(
    "/{request_id}/cascade",
    response_model=DeletionRequestRead,
    summary="Retry the approval cascade",
    responses={502: {"description": "Some buildings still could not be moved"}},
)
async def retry_cascade(
    request_id: UUID,
    actor: CurrentActor,
    service: DeletionRequestServiceDep,
) -> DeletionRequestRead:
    return DeletionRequestRead.model_validate(await service.retry_cascade(actor, request_id))


@router.get(
    "/{request_id}/history",
    response_model=list[LedgerEntryRead],
    summary="Transition history",
    description="Ledger entries for the request and the buildings it moved, oldest first.",
)
async def get_request_history(
    request_id: UUID,
    actor: CurrentActor,
    service: DeletionRequestServiceDep,
) -> list[LedgerEntryRead]:
    entries = await service.history(actor, request_id)
    return [LedgerEntryRead.model_validate(e) for e in entries]
