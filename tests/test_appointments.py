"""Tests for appointment endpoints."""

from datetime import UTC, datetime, timedelta

import pytest
from bson import ObjectId
from httpx import AsyncClient

USER_ID = "6650f1a2b3c4d5e6f7a8b9c0"


@pytest.fixture
def sample_appointment_data(tomorrow: str) -> dict:
    """Sample appointment data for testing."""
    return {
        "date": tomorrow,
        "patient_id": "0102030405",
        "user_id": USER_ID,
        "reason": "  Toothache ",
        "line_items": [
            {"name": "Cleaning", "cost": 50, "qty": 2},
            {"name": "X-ray", "cost": 30, "qty": 1},
        ],
    }


async def _create(client: AsyncClient, body: dict) -> str:
    response = await client.post("/api/appointments", json=body)
    assert response.status_code == 201, response.text
    return response.json()["id"]


@pytest.mark.asyncio
async def test_create_appointment_computes_total(
    client: AsyncClient, sample_appointment_data: dict
) -> None:
    """Test creating an appointment without an explicit total."""
    response = await client.post("/api/appointments", json=sample_appointment_data)
    assert response.status_code == 201
    data = response.json()
    assert data["ok"] is True
    assert data["total"] == 130

    stored = (await client.get(f"/api/appointments/{data['id']}")).json()["data"]
    assert stored["total"] == 130
    assert stored["status"] == "Pending"
    assert stored["reason"] == "Toothache"
    assert stored["user_id"] == USER_ID
    assert [item["quantity"] for item in stored["line_items"]] == [2, 1]


@pytest.mark.asyncio
async def test_explicit_total_is_kept(client: AsyncClient, sample_appointment_data: dict) -> None:
    """An explicit total, even zero, is stored verbatim."""
    sample_appointment_data["total"] = 0
    response = await client.post("/api/appointments", json=sample_appointment_data)
    assert response.json()["total"] == 0

    sample_appointment_data.pop("line_items")
    sample_appointment_data.pop("total")
    response = await client.post("/api/appointments", json=sample_appointment_data)
    assert response.json()["total"] == 0


@pytest.mark.asyncio
async def test_create_validation(client: AsyncClient, sample_appointment_data: dict) -> None:
    sample_appointment_data["user_id"] = "nope"
    response = await client.post("/api/appointments", json=sample_appointment_data)
    assert response.status_code == 400

    sample_appointment_data["user_id"] = USER_ID
    sample_appointment_data["status"] = "Lost"
    response = await client.post("/api/appointments", json=sample_appointment_data)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_get_appointment_includes_patient_name(
    client: AsyncClient, sample_appointment_data: dict, sample_patient_data: dict
) -> None:
    """Test getting a specific appointment."""
    await client.post("/api/patients", json=sample_patient_data)
    appointment_id = await _create(client, sample_appointment_data)

    response = await client.get(f"/api/appointments/{appointment_id}")
    assert response.status_code == 200
    assert response.json()["data"]["patient_name"] == "Ana María Pérez López"


@pytest.mark.asyncio
async def test_patient_name_missing_patient(client: AsyncClient, sample_appointment_data: dict) -> None:
    """Appointments of unknown patients carry no name."""
    appointment_id = await _create(client, sample_appointment_data)

    response = await client.get(f"/api/appointments/{appointment_id}")
    assert response.json()["data"]["patient_name"] is None


@pytest.mark.asyncio
async def test_list_appointments_filters(client: AsyncClient, sample_appointment_data: dict) -> None:
    """Test listing appointments by patient, status and day range."""
    sample_appointment_data["date"] = "2025-03-01T15:00:00Z"
    await _create(client, sample_appointment_data)
    sample_appointment_data["date"] = "2025-03-05T09:00:00Z"
    sample_appointment_data["status"] = "Confirmed"
    await _create(client, sample_appointment_data)
    await _create(client, {**sample_appointment_data, "patient_id": "other"})

    response = await client.get("/api/appointments", params={"patient_id": "0102030405"})
    data = response.json()
    assert data["total"] == 2
    assert data["pageSize"] == 100
    assert data["data"][0]["date"].startswith("2025-03-05")

    response = await client.get("/api/appointments", params={"from": "2025-03-01", "to": "2025-03-01"})
    assert response.json()["total"] == 1

    response = await client.get("/api/appointments", params={"status": "Confirmed"})
    assert response.json()["total"] == 2

    response = await client.get("/api/appointments", params={"user_id": USER_ID, "limit": 900})
    data = response.json()
    assert data["total"] == 3
    assert data["pageSize"] == 500

    response = await client.get("/api/appointments", params={"from": "03/01/2025"})
    assert response.status_code == 400
    assert response.json()["error"] == "invalid from"


@pytest.mark.asyncio
async def test_upcoming_appointments(client: AsyncClient, sample_appointment_data: dict) -> None:
    past = (datetime.now(UTC) - timedelta(days=2)).isoformat()
    later = (datetime.now(UTC) + timedelta(days=5)).isoformat()
    await _create(client, {**sample_appointment_data, "date": past})
    soon_id = await _create(client, sample_appointment_data)
    await _create(client, {**sample_appointment_data, "date": later})

    response = await client.get("/api/appointments/upcoming")
    data = response.json()
    assert data["total"] == 2
    assert data["data"][0]["_id"] == soon_id


@pytest.mark.asyncio
async def test_update_recomputes_total_only_for_new_items(
    client: AsyncClient, sample_appointment_data: dict
) -> None:
    appointment_id = await _create(client, sample_appointment_data)

    response = await client.patch(f"/api/appointments/{appointment_id}", json={"status": "Confirmed"})
    assert response.json() == {"ok": True, "modified": 1}
    stored = (await client.get(f"/api/appointments/{appointment_id}")).json()["data"]
    assert stored["total"] == 130

    await client.patch(
        f"/api/appointments/{appointment_id}",
        json={"line_items": [{"name": "Crown", "unit_cost": 200}]},
    )
    stored = (await client.get(f"/api/appointments/{appointment_id}")).json()["data"]
    assert stored["total"] == 200

    await client.patch(
        f"/api/appointments/{appointment_id}",
        json={"line_items": [{"name": "Crown", "unit_cost": 200}], "total": 150},
    )
    stored = (await client.get(f"/api/appointments/{appointment_id}")).json()["data"]
    assert stored["total"] == 150


@pytest.mark.asyncio
async def test_update_missing_appointment(client: AsyncClient) -> None:
    response = await client.patch(f"/api/appointments/{ObjectId()}", json={"status": "Confirmed"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_soft_delete_cancels(client: AsyncClient, sample_appointment_data: dict) -> None:
    appointment_id = await _create(client, sample_appointment_data)

    response = await client.delete(f"/api/appointments/{appointment_id}", params={"soft": "true"})
    assert response.json() == {"ok": True, "softDeleted": True}
    stored = (await client.get(f"/api/appointments/{appointment_id}")).json()["data"]
    assert stored["status"] == "Cancelled"


@pytest.mark.asyncio
async def test_hard_delete(client: AsyncClient, sample_appointment_data: dict) -> None:
    appointment_id = await _create(client, sample_appointment_data)

    response = await client.delete(f"/api/appointments/{appointment_id}")
    assert response.json() == {"ok": True, "deleted": True}

    response = await client.get(f"/api/appointments/{appointment_id}")
    assert response.status_code == 404
