"""Tests for structured logging context."""

from uuid import uuid4

import pytest
import structlog
from structlog.testing import CapturingLogger

from src.app.core.logging import (
    bind_actor_context,
    bind_request_context,
    clear_request_context,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def capturing_logger():
    """Create a capturing logger for tests."""
    cap_logger = CapturingLogger()

    # Save original configuration to restore later
    old_config = structlog.get_config()

    structlog.configure(
        processors=[structlog.contextvars.merge_contextvars],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=lambda *args, **kwargs: cap_logger,
        cache_logger_on_first_use=False,
    )

    clear_request_context()
    yield cap_logger
    clear_request_context()
    structlog.configure(**old_config)


def test_bind_request_context(capturing_logger):
    bind_request_context("test-request-123")
    structlog.get_logger().info("test message")

    entries = capturing_logger.calls
    assert len(entries) == 1
    assert entries[0].kwargs["request_id"] == "test-request-123"


def test_bind_request_context_with_none(capturing_logger):
    """Test that None request_id is not bound."""
    bind_request_context(None)
    structlog.get_logger().info("test message")

    assert "request_id" not in capturing_logger.calls[0].kwargs


def test_bind_actor_context(capturing_logger):
    actor_id = uuid4()
    tenant_id = uuid4()

    bind_actor_context(actor_id, tenant_id, frozenset({"tenant_owner", "tenant_operator"}))
    structlog.get_logger().info("test message")

    kwargs = capturing_logger.calls[0].kwargs
    assert kwargs["actor_id"] == str(actor_id)
    assert kwargs["actor_tenant_id"] == str(tenant_id)
    assert kwargs["actor_roles"] == ["tenant_operator", "tenant_owner"]


def test_bind_actor_context_without_tenant(capturing_logger):
    """Platform admins carry no tenant."""
    bind_actor_context(uuid4(), None, ["admin"])
    structlog.get_logger().info("test message")

    assert "actor_tenant_id" not in capturing_logger.calls[0].kwargs


def test_actor_roles_not_logged_when_disabled(capturing_logger, monkeypatch):
    from src.app.core.config import get_settings

    monkeypatch.setattr(get_settings(), "log_actor_roles", False)

    bind_actor_context(uuid4(), uuid4(), ["admin"])
    structlog.get_logger().info("test message")

    assert "actor_roles" not in capturing_logger.calls[0].kwargs


def test_clear_request_context(capturing_logger):
    bind_request_context("test-request-123")
    bind_actor_context(uuid4(), uuid4())

    clear_request_context()

    structlog.get_logger().info("test message")
    kwargs = capturing_logger.calls[0].kwargs
    assert "request_id" not in kwargs
    assert "actor_id" not in kwargs
    assert "actor_tenant_id" not in kwargs
