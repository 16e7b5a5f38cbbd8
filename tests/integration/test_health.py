"""Tests for the API health check and its caching."""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from src.app.core.db import dispose_engine, reset_session_factory
from src.app.core.health import reset_health_cache
from src.app.main import create_app

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
async def clear_health_cache():
    """Reset health cache and the global engine around each test."""
    reset_health_cache()
    yield
    reset_health_cache()
    await dispose_engine()
    reset_session_factory()


async def test_temporal_outage_is_degraded_not_unhealthy():
    app = create_app()

    with patch(
        "src.app.core.health.get_temporal_client",
        AsyncMock(side_effect=RuntimeError("connection refused")),
    ):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["database"] == "healthy"
    assert data["temporal"].startswith("unhealthy")
    assert data["cached"] is False


async def test_health_check_caching():
    """Test that health check results are cached for 10 seconds."""
    app = create_app()

    with patch("src.app.core.health.get_temporal_client", AsyncMock()):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response1 = await client.get("/health")
            response2 = await client.get("/health")

    assert response1.json()["status"] == "healthy"
    assert response1.json()["cached"] is False
    assert response2.status_code == 200
    assert response2.json()["cached"] is True
    assert response2.json()["cache_age_seconds"] < 10


async def test_database_outage_is_unhealthy():
    app = create_app()

    with (
        patch("src.app.core.health.get_temporal_client", AsyncMock()),
        patch("src.app.core.health.get_session", side_effect=OSError("database down")),
    ):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health")

    assert response.status_code == 503
    assert response.json()["database"] == "unhealthy: database down"
