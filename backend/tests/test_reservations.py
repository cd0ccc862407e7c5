"""
Tests for reservation endpoints: booking, owner confirmation flow and
access control.
"""

import pytest
from httpx import AsyncClient

from tablebook.services import auth_service


def _booking(venue_id: int, **overrides) -> dict:
    body = {
        "venue_id": venue_id,
        "date": "2025-06-05",
        "time": "19:00",
        "party_size": 2,
        "guest_name": "Kim Guest",
        "guest_phone": "010-1111-2222",
    }
    body.update(overrides)
    return body


@pytest.mark.asyncio
async def test_create_reservation_starts_pending(client: AsyncClient, owner, customer_headers):
    """A status sent by the client is ignored."""
    response = await client.post(
        "/api/v1/reservations",
        json=_booking(owner.venue_id, status="confirmed"),
        headers=customer_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "pending"
    assert data["venue_name"] == "Owner's Table"
    assert data["confirmation_number"].startswith("BK-20250601-")


@pytest.mark.asyncio
async def test_create_reservation_unauthenticated(client: AsyncClient, owner):
    response = await client.post("/api/v1/reservations", json=_booking(owner.venue_id))
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_party_larger_than_capacity(client: AsyncClient, owner, customer_headers):
    response = await client.post(
        "/api/v1/reservations",
        json=_booking(owner.venue_id, party_size=11),
        headers=customer_headers,
    )
    assert response.status_code == 422
    assert response.json() == {
        "detail": "Only 10 seats left. Requested: 11",
        "error": "capacity_exceeded",
    }


@pytest.mark.asyncio
async def test_owner_confirms_and_capacity_drops(
    client: AsyncClient, owner, owner_headers, customer_headers
):
    created = await client.post(
        "/api/v1/reservations", json=_booking(owner.venue_id, party_size=4), headers=customer_headers
    )
    reservation_id = created.json()["id"]

    response = await client.post(f"/api/v1/reservations/{reservation_id}/confirm", headers=customer_headers)
    assert response.status_code == 403

    response = await client.post(f"/api/v1/reservations/{reservation_id}/confirm", headers=owner_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "confirmed"

    availability = await client.get(
        f"/api/v1/venues/{owner.venue_id}/availability", params={"date": "2025-06-05"}
    )
    assert availability.json()["remaining"] == 6


@pytest.mark.asyncio
async def test_rejecting_twice_is_an_error(client: AsyncClient, owner, owner_headers, customer_headers):
    created = await client.post(
        "/api/v1/reservations", json=_booking(owner.venue_id), headers=customer_headers
    )
    url = f"/api/v1/reservations/{created.json()['id']}/reject"

    assert (await client.post(url, headers=owner_headers)).status_code == 200
    response = await client.post(url, headers=owner_headers)
    assert response.status_code == 422
    assert response.json()["error"] == "invalid_transition"


@pytest.mark.asyncio
async def test_my_reservations_are_partitioned(
    client: AsyncClient, owner, owner_headers, customer_headers
):
    await client.post(
        "/api/v1/reservations", json=_booking(owner.venue_id, date="2025-06-01", time="17:00"),
        headers=customer_headers,
    )
    await client.post(
        "/api/v1/reservations", json=_booking(owner.venue_id, date="2025-06-02"),
        headers=customer_headers,
    )

    response = await client.get("/api/v1/reservations", headers=customer_headers)
    assert response.status_code == 200
    data = response.json()
    assert [r["date"] for r in data["upcoming"]] == ["2025-06-02"]
    assert [r["time"] for r in data["past"]] == ["17:00"]

    response = await client.get("/api/v1/reservations", headers=owner_headers)
    assert response.json() == {"upcoming": [], "past": []}


@pytest.mark.asyncio
async def test_lookup_by_code_and_access_control(
    client: AsyncClient, storage, clock, ids, owner, owner_headers, customer_headers, make_headers
):
    created = (await client.post(
        "/api/v1/reservations", json=_booking(owner.venue_id), headers=customer_headers
    )).json()

    response = await client.get(
        f"/api/v1/reservations/code/{created['confirmation_number']}", headers=customer_headers
    )
    assert response.json()["id"] == created["id"]

    response = await client.get(f"/api/v1/reservations/{created['id']}", headers=owner_headers)
    assert response.status_code == 200

    stranger = await auth_service.signup_customer(
        storage, clock, ids,
        login_id="stranger", email="stranger@example.com", password="strangerpass1", name="Stranger",
    )
    response = await client.get(f"/api/v1/reservations/{created['id']}", headers=make_headers(stranger))
    assert response.status_code == 403

    response = await client.get("/api/v1/reservations/BK-missing", headers=customer_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_guest_edits_but_cannot_confirm(client: AsyncClient, owner, customer_headers):
    created = (await client.post(
        "/api/v1/reservations", json=_booking(owner.venue_id), headers=customer_headers
    )).json()
    url = f"/api/v1/reservations/{created['id']}"

    response = await client.patch(url, json={"status": "confirmed"}, headers=customer_headers)
    assert response.status_code == 403

    response = await client.patch(url, json={"party_size": 3, "time": "20:00"}, headers=customer_headers)
    assert response.status_code == 200
    assert response.json()["party_size"] == 3
    assert response.json()["status"] == "pending"

    response = await client.patch(url, json={"status": "cancelled"}, headers=customer_headers)
    assert response.json()["status"] == "cancelled"


@pytest.mark.asyncio
async def test_guest_cannot_grow_a_confirmed_party_past_capacity(
    client: AsyncClient, owner, owner_headers, customer_headers
):
    created = (await client.post(
        "/api/v1/reservations", json=_booking(owner.venue_id), headers=customer_headers
    )).json()
    url = f"/api/v1/reservations/{created['id']}"
    await client.post(f"{url}/confirm", headers=owner_headers)

    response = await client.patch(url, json={"party_size": 100}, headers=customer_headers)
    assert response.status_code == 422
    assert response.json()["error"] == "capacity_exceeded"

    availability = (await client.get(
        f"/api/v1/venues/{owner.venue_id}/availability", params={"date": "2025-06-05"}
    )).json()
    assert availability["confirmed"] == 2
    assert availability["remaining"] == 8

    await client.post(
        f"/api/v1/settings/venue/{owner.venue_id}/toggle-date",
        json={"date": "2025-06-06"},
        headers=owner_headers,
    )
    response = await client.patch(url, json={"date": "2025-06-06"}, headers=customer_headers)
    assert response.status_code == 422
    assert (await client.get(url, headers=customer_headers)).json()["date"] == "2025-06-05"


@pytest.mark.asyncio
async def test_cancel_then_delete(client: AsyncClient, owner, customer_headers):
    created = (await client.post(
        "/api/v1/reservations", json=_booking(owner.venue_id), headers=customer_headers
    )).json()
    url = f"/api/v1/reservations/{created['id']}"

    response = await client.delete(url, headers=customer_headers)
    assert response.status_code == 422

    response = await client.post(f"{url}/cancel", headers=customer_headers)
    assert response.json()["status"] == "cancelled"

    response = await client.delete(url, headers=customer_headers)
    assert response.status_code == 204
    assert (await client.get(url, headers=customer_headers)).status_code == 404


@pytest.mark.asyncio
async def test_venue_reservations_owner_only(
    client: AsyncClient, owner, owner_headers, customer_headers
):
    first = (await client.post(
        "/api/v1/reservations", json=_booking(owner.venue_id), headers=customer_headers
    )).json()
    await client.post(
        "/api/v1/reservations", json=_booking(owner.venue_id, date="2025-06-06"), headers=customer_headers
    )
    await client.post(f"/api/v1/reservations/{first['id']}/confirm", headers=owner_headers)

    url = f"/api/v1/reservations/venue/{owner.venue_id}"
    assert (await client.get(url, headers=customer_headers)).status_code == 403

    response = await client.get(url, headers=owner_headers)
    assert len(response.json()["upcoming"]) == 2

    response = await client.get(url, params={"status": "confirmed"}, headers=owner_headers)
    assert [r["id"] for r in response.json()["upcoming"]] == [first["id"]]


@pytest.mark.asyncio
async def test_health_and_metrics(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["cache"] == {"status": "disabled"}

    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "reservation_attempts_total" in response.text
