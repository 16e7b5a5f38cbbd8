"""Root test fixtures shared across all test types.

This conftest contains fixtures that can be used by both unit and integration tests.
Database-specific fixtures are in tests/integration/conftest.py.
"""

import os

# Settings are read at import time; set test values before any app imports
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-at-least-32-characters")
os.environ.setdefault("DATABASE_SSL_MODE", "disable")

# ruff: noqa: E402 - Imports must be after env var setup
from uuid import UUID, uuid4

import pytest

from src.app.core.config import get_settings
from src.app.orchestration.actors import Actor

# Clear settings cache to ensure test environment variables are picked up
get_settings.cache_clear()


@pytest.fixture
def tenant_id() -> UUID:
    return uuid4()


@pytest.fixture
def owner(tenant_id: UUID) -> Actor:
    """Tenant owner of `tenant_id`."""
    return Actor(id=uuid4(), roles=frozenset({"tenant_owner"}), tenant_id=tenant_id)


@pytest.fixture
def operator(tenant_id: UUID) -> Actor:
    """Tenant operator of `tenant_id`."""
    return Actor(id=uuid4(), roles=frozenset({"tenant_operator"}), tenant_id=tenant_id)


@pytest.fixture
def admin() -> Actor:
    """Platform administrator (no tenant)."""
    return Actor(id=uuid4(), roles=frozenset({"admin"}))


@pytest.fixture
def outsider() -> Actor:
    """Operator of some other tenant."""
    return Actor(id=uuid4(), roles=frozenset({"tenant_operator", "tenant_owner"}), tenant_id=uuid4())
