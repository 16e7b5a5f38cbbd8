"""Database dependencies."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.app.core.db import get_session_factory as _get_session_factory


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory for services that open one short session per step."""
    return _get_session_factory()


SessionFactory = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]
