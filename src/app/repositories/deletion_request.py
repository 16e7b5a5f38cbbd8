"""DeletionRequest repository."""

from typing import Any, cast
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.engine import CursorResult
from sqlmodel import col, select

from src.app.models import ACTIVE_REQUEST_STATUSES, DeletionRequest, DeletionRequestStatus
from src.app.models.base import utc_now
from src.app.repositories.base import BaseRepository


class DeletionRequestRepository(BaseRepository[DeletionRequest]):
    """Repository for DeletionRequest entity."""

    model = DeletionRequest

    async def get_active_for_tenant(self, tenant_id: UUID) -> DeletionRequest | None:
        """Get the tenant's PENDING or APPROVED request, if any."""
        active = [s.value for s in ACTIVE_REQUEST_STATUSES]
        result = await self.session.execute(
            select(DeletionRequest).where(
                DeletionRequest.tenant_id == tenant_id,
                col(DeletionRequest.status).in_(active),
            )
        )
        return result.scalars().first()

    async def list_paginated(
        self,
        cursor: str | None,
        limit: int,
        requested_by: UUID | None = None,
        tenant_id: UUID | None = None,
        status: DeletionRequestStatus | None = None,
    ) -> tuple[list[DeletionRequest], str | None, bool]:
        """List requests newest first with optional filters."""
        query = select(DeletionRequest)
        if requested_by is not None:
            query = query.where(DeletionRequest.requested_by == requested_by)
        if tenant_id is not None:
            query = query.where(DeletionRequest.tenant_id == tenant_id)
        if status is not None:
            query = query.where(DeletionRequest.status == status.value)
        return await self.paginate(query, cursor, limit)

    async def list_ids_by_status(self, status: DeletionRequestStatus) -> list[UUID]:
        result = await self.session.execute(
            select(DeletionRequest.id)
            .where(DeletionRequest.status == status.value)
            .order_by(col(DeletionRequest.created_at))
        )
        return list(result.scalars().all())

    async def compare_and_set_status(
        self,
        request_id: UUID,
        expected: DeletionRequestStatus,
        new: DeletionRequestStatus,
        **fields: Any,
    ) -> bool:
        """Move a request from `expected` to `new`, setting extra columns.

        Returns:
            True if this call won the update, False if the row was no longer
            in `expected` (another caller moved it first).
        """
        stmt = (
            update(DeletionRequest)
            .where(
                col(DeletionRequest.id) == request_id,
                col(DeletionRequest.status) == expected.value,
            )
            .values(status=new.value, updated_at=utc_now(), **fields)
        )
        result = await self.session.execute(stmt)
        return (cast(CursorResult[Any], result).rowcount or 0) == 1
