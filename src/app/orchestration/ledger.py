"""Status ledger - durable, append-only transition history."""

from typing import Any
from uuid import UUID

from asgi_correlation_id import correlation_id
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.app.core.logging import get_logger
from src.app.models import LedgerEntry, ResourceType
from src.app.orchestration.actors import Actor
from src.app.orchestration.errors import UpstreamUnavailable
from src.app.repositories import LedgerRepository

logger = get_logger(__name__)


def build_entry(
    resource_type: ResourceType,
    resource_id: UUID,
    tenant_id: UUID,
    from_status: str,
    to_status: str,
    actor: Actor,
    deletion_request_id: UUID | None = None,
    reason: str | None = None,
    details: dict[str, Any] | None = None,
) -> LedgerEntry:
    return LedgerEntry(
        resource_type=resource_type.value,
        resource_id=resource_id,
        tenant_id=tenant_id,
        deletion_request_id=deletion_request_id,
        from_status=from_status,
        to_status=to_status,
        actor_id=actor.id,
        actor_roles=sorted(actor.roles),
        reason=reason,
        correlation_id=correlation_id.get(),
        details=details,
    )


class StatusLedger:
    """Writes and reads ledger entries.

    A resource reaches each status at most once, so a second write of the
    same transition hits the unique key and is reported as already recorded.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def record(self, entry: LedgerEntry) -> bool:
        """Durably append `entry` in its own transaction.

        Returns:
            True if written, False if this transition was already recorded.

        Raises:
            UpstreamUnavailable: If the ledger could not be written.
        """
        try:
            async with self._session_factory() as session:
                LedgerRepository(session).add(entry)
                try:
                    await session.commit()
                except IntegrityError:
                    await session.rollback()
                    logger.info(
                        "Ledger transition already recorded",
                        resource_type=entry.resource_type,
                        resource_id=str(entry.resource_id),
                        to_status=entry.to_status,
                    )
                    return False
        except SQLAlchemyError as e:
            logger.error("Ledger write failed", resource_id=str(entry.resource_id), error=str(e))
            raise UpstreamUnavailable("Status ledger") from e
        return True

    async def has_transition(
        self, resource_type: ResourceType, resource_id: UUID, to_status: str
    ) -> bool:
        try:
            async with self._session_factory() as session:
                entry = await LedgerRepository(session).get_transition(
                    resource_type, resource_id, to_status
                )
        except SQLAlchemyError as e:
            logger.error("Ledger read failed", resource_id=str(resource_id), error=str(e))
            raise UpstreamUnavailable("Status ledger") from e
        return entry is not None

    async def history_for_request(self, request_id: UUID) -> list[LedgerEntry]:
        try:
            async with self._session_factory() as session:
                return await LedgerRepository(session).list_for_request(request_id)
        except SQLAlchemyError as e:
            logger.error("Ledger read failed", deletion_request_id=str(request_id), error=str(e))
            raise UpstreamUnavailable("Status ledger") from e
