"""Base repository with common data-access operations."""

from datetime import datetime
from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import and_, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from src.app.schemas.pagination import decode_cursor, encode_cursor

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """Base repository providing common database operations.

    Repositories handle data access only. Transaction control (commit)
    is done by the caller that owns the session.
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, id: UUID) -> ModelType | None:
        """Get a record by its primary key."""
        result = await self.session.execute(
            select(self.model).where(self.model.id == id)  # type: ignore[attr-defined]
        )
        return result.scalar_one_or_none()

    def add(self, entity: ModelType) -> None:
        """Add entity to session (no flush/commit)."""
        self.session.add(entity)

    async def paginate(
        self,
        query: Any,  # SelectOfScalar or Select - SQLModel/SQLAlchemy query
        cursor: str | None,
        limit: int,
    ) -> tuple[list[ModelType], str | None, bool]:
        """Execute keyset pagination over (created_at, id), newest first.

        Args:
            query: The base SQLAlchemy query to paginate
            cursor: Optional cursor from previous page (base64-encoded)
            limit: Maximum number of items to return

        Returns:
            Tuple of (items, next_cursor, has_more)

        Note:
            The cursor encodes "<created_at isoformat>|<id>" of the last item
            so rows sharing a timestamp are neither skipped nor repeated.
        """
        created_at = self.model.created_at  # type: ignore[attr-defined]
        pk = self.model.id  # type: ignore[attr-defined]

        if cursor:
            try:
                raw_ts, raw_id = decode_cursor(cursor).split("|", 1)
                ts = datetime.fromisoformat(raw_ts)
                last_id = UUID(raw_id)
                query = query.where(
                    or_(created_at < ts, and_(created_at == ts, pk < last_id))
                )
            except (ValueError, TypeError):
                # Invalid cursor - ignore and start from beginning
                pass

        query = query.order_by(created_at.desc(), pk.desc()).limit(limit + 1)

        result = await self.session.execute(query)
        items = list(result.scalars().all())

        has_more = len(items) > limit
        if has_more:
            items = items[:limit]

        next_cursor = None
        if has_more and items:
            last_item = items[-1]
            next_cursor = encode_cursor(
                f"{last_item.created_at.isoformat()}|{last_item.id}"  # type: ignore[attr-defined]
            )

        return items, next_cursor, has_more
