"""Tests for GET /health and /metrics: no device header needed, correlation ID in response."""

import pytest
from httpx import ASGITransport, AsyncClient

from app.main import app


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.mark.asyncio
async def test_health_returns_200_without_device(client: AsyncClient):
    """GET /health is a liveness check: no X-Device-ID required."""
    r = await client.get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert "version" in data
    assert "correlation_id" in data


@pytest.mark.asyncio
async def test_health_correlation_id_auto_generated(client: AsyncClient):
    """GET /health returns a correlation_id when not provided."""
    r = await client.get("/health")
    assert r.status_code == 200
    assert len(r.json()["correlation_id"]) > 0


@pytest.mark.asyncio
async def test_metrics_exports_counters(async_client: AsyncClient, metrics):
    metrics.increment("submission_succeeded")
    r = await async_client.get("/metrics")
    assert r.status_code == 200
    assert r.json()["counters"]["submission_succeeded"] == 1
