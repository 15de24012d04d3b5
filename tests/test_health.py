"""Health endpoint integration test."""

import pytest
from httpx import ASGITransport, AsyncClient

from phaseguide.main import app


@pytest.mark.asyncio
async def test_health_returns_ok(container):
    """Health endpoint reports service and workflow catalog status."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        resp = await client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["service"] == "phaseguide"
    assert data["bundled_workflows_found"] is True
    assert data["default_workflow"] == "waterfall"
