"""Health endpoint tests."""

import pytest

from datagov import __version__


@pytest.mark.asyncio
async def test_health_returns_ok(client):
    """Health endpoint reports status, uptime, version and the database check."""
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["database"] == "ok"
    assert data["version"] == __version__
    assert data["uptime"] >= 0
    assert "T" in data["timestamp"]


@pytest.mark.asyncio
async def test_health_needs_no_session(client):
    client.cookies.clear()
    assert (await client.get("/api/health")).status_code == 200
