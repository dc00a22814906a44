"""
Tests for health, metrics and root endpoints.
"""

import pytest
from httpx import AsyncClient

from conftest import reservation_payload


@pytest.mark.asyncio
async def test_health_without_redis(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["cache"] == {"status": "disabled"}


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient):
    response = await client.get("/", headers={"X-Request-ID": "abc123"})
    assert response.status_code == 200
    assert response.headers["X-Request-ID"] == "abc123"
    assert "X-Response-Time" in response.headers


@pytest.mark.asyncio
async def test_metrics_count_decisions(client: AsyncClient, auth_headers, space_id, monday):
    await client.post(
        "/api/v1/reservations/",
        json=reservation_payload(space_id, monday, 10, 11),
        headers=auth_headers,
    )

    response = await client.get("/metrics")
    assert response.status_code == 200
    assert 'booking_decisions_total{operation="create",result="admitted"}' in response.text
