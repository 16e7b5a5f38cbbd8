"""Ledger repository - append-only, no update or delete methods."""

from uuid import UUID

from sqlalchemy import and_, or_
from sqlmodel import col, select

from src.app.models import LedgerEntry, ResourceType
from src.app.repositories.base import BaseRepository


class LedgerRepository(BaseRepository[LedgerEntry]):
    """Repository for LedgerEntry entity."""

    model = LedgerEntry

    async def get_transition(
        self, resource_type: ResourceType, resource_id: UUID, to_status: str
    ) -> LedgerEntry | None:
        """Get the entry recording a resource's arrival at `to_status`."""
        result = await self.session.execute(
            select(LedgerEntry).where(
                LedgerEntry.resource_type == resource_type.value,
                LedgerEntry.resource_id == resource_id,
                LedgerEntry.to_status == to_status,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_request(self, request_id: UUID) -> list[LedgerEntry]:
        """List a request's own transitions plus those it caused on buildings."""
        result = await self.session.execute(
            select(LedgerEntry)
            .where(
                or_(
                    col(LedgerEntry.deletion_request_id) == request_id,
                    and_(
                        col(LedgerEntry.resource_type) == ResourceType.DELETION_REQUEST.value,
                        col(LedgerEntry.resource_id) == request_id,
                    ),
                )
            )
            .order_by(col(LedgerEntry.created_at))
        )
        return list(result.scalars().all())
