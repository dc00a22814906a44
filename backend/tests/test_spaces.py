"""
Tests for space endpoints: CRUD, pagination and the deletion guard.
"""

from datetime import date, timedelta

import pytest
from httpx import AsyncClient

from conftest import at, reservation_payload
from space_reservations.models.reservation import Reservation


@pytest.mark.asyncio
async def test_create_space(client: AsyncClient, auth_headers):
    """Authenticated user can create a space."""
    response = await client.post(
        "/api/v1/spaces/",
        json={"name": "Board Room", "location": "Floor 3", "capacity": 12},
        headers=auth_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Board Room"
    assert data["capacity"] == 12
    assert data["description"] is None


@pytest.mark.asyncio
async def test_create_space_unauthenticated(client: AsyncClient):
    """Unauthenticated space creation returns 401."""
    response = await client.post(
        "/api/v1/spaces/",
        json={"name": "Board Room", "location": "Floor 3", "capacity": 12},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_space_invalid_capacity(client: AsyncClient, auth_headers):
    """Capacity must be positive."""
    response = await client.post(
        "/api/v1/spaces/",
        json={"name": "Closet", "location": "Basement", "capacity": 0},
        headers=auth_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_spaces(client: AsyncClient, auth_headers, space_id):
    """List returns paginated results, served from the database when Redis is off."""
    response = await client.get("/api/v1/spaces/", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["total_pages"] == 1
    assert data["cached"] is False
    assert data["spaces"][0]["id"] == space_id


@pytest.mark.asyncio
async def test_list_spaces_pagination(client: AsyncClient, auth_headers):
    for i in range(3):
        await client.post(
            "/api/v1/spaces/",
            json={"name": f"Room {i}", "location": "Floor 2", "capacity": 4},
            headers=auth_headers,
        )

    response = await client.get("/api/v1/spaces/?page=2&page_size=2", headers=auth_headers)
    data = response.json()
    assert data["total"] == 3
    assert data["total_pages"] == 2
    assert [s["name"] for s in data["spaces"]] == ["Room 2"]


@pytest.mark.asyncio
async def test_get_space(client: AsyncClient, auth_headers, space_id):
    response = await client.get(f"/api/v1/spaces/{space_id}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["name"] == "Meeting Room A"


@pytest.mark.asyncio
async def test_get_space_not_found(client: AsyncClient, auth_headers):
    """Non-existent space returns 404."""
    response = await client.get("/api/v1/spaces/99999", headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_space(client: AsyncClient, auth_headers, space_id):
    response = await client.put(
        f"/api/v1/spaces/{space_id}",
        json={"capacity": 20, "description": None},
        headers=auth_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["capacity"] == 20
    assert data["name"] == "Meeting Room A"
    assert data["description"] is None


@pytest.mark.asyncio
async def test_delete_unreferenced_space(client: AsyncClient, auth_headers, space_id):
    response = await client.delete(f"/api/v1/spaces/{space_id}", headers=auth_headers)
    assert response.status_code == 204

    response = await client.get(f"/api/v1/spaces/{space_id}", headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_unknown_space(client: AsyncClient, auth_headers):
    response = await client.delete("/api/v1/spaces/99999", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["detail"]["reason"] == "space_not_found"


@pytest.mark.asyncio
async def test_delete_space_with_future_reservation(
    client: AsyncClient, auth_headers, space_id, monday
):
    """A space referenced by a reservation cannot be deleted."""
    created = await client.post(
        "/api/v1/reservations/",
        json=reservation_payload(space_id, monday, 9, 10),
        headers=auth_headers,
    )
    assert created.status_code == 201

    response = await client.delete(f"/api/v1/spaces/{space_id}", headers=auth_headers)
    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["reason"] == "space_has_reservations"
    assert detail["count"] == 1

    # The space is still there
    response = await client.get(f"/api/v1/spaces/{space_id}", headers=auth_headers)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_delete_space_with_past_reservation(
    client: AsyncClient, auth_headers, space_id, db_session
):
    """Past reservations block deletion too."""
    last_year = date.today() - timedelta(days=365)
    db_session.add(Reservation(
        space_id=space_id,
        user_email="test@example.com",
        reservation_date=last_year,
        start_time=at(last_year, 9),
        end_time=at(last_year, 10),
    ))
    await db_session.commit()

    response = await client.delete(f"/api/v1/spaces/{space_id}", headers=auth_headers)
    assert response.status_code == 409
    assert response.json()["detail"]["reason"] == "space_has_reservations"
