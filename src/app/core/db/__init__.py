"""Database utilities - engine and sessions."""

from src.app.core.db.engine import dispose_engine, get_engine
from src.app.core.db.session import (
    build_session_factory,
    get_session,
    get_session_factory,
    reset_session_factory,
)

__all__ = [
    # Engine
    "dispose_engine",
    "get_engine",
    # Session
    "build_session_factory",
    "get_session",
    "get_session_factory",
    "reset_session_factory",
]
