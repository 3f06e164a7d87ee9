"""Tests for role catalog endpoints."""

import pytest
from bson import ObjectId
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_catalog(client: AsyncClient) -> None:
    response = await client.get("/api/roles/catalog")
    assert response.json() == {
        "ok": True,
        "data": ["Administrator", "Dentist", "Assistant", "LabTechnician"],
    }


@pytest.mark.asyncio
async def test_list_seeded_roles(client: AsyncClient, roles: dict) -> None:
    response = await client.get("/api/roles")
    data = response.json()
    assert data["total"] == 4
    assert [role["name"] for role in data["data"]] == sorted(roles)

    response = await client.get("/api/roles", params={"q": "laboratory"})
    assert response.json()["data"][0]["name"] == "LabTechnician"


@pytest.mark.asyncio
async def test_create_role(client: AsyncClient) -> None:
    response = await client.post(
        "/api/roles", json={"name": "Assistant", "description": " Front desk ", "permissions": ["agenda"]}
    )
    assert response.status_code == 201

    data = (await client.get(f"/api/roles/{response.json()['id']}")).json()["data"]
    assert data["description"] == "Front desk"
    assert data["permissions"] == ["agenda"]

    response = await client.post("/api/roles", json={"name": "Assistant"})
    assert response.status_code == 409
    assert response.json()["error"] == "Role already exists"

    response = await client.post("/api/roles", json={"name": "Owner"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_name_is_immutable(client: AsyncClient, roles: dict) -> None:
    role_id = str(roles["Dentist"])

    response = await client.patch(f"/api/roles/{role_id}", json={"name": "Administrator"})
    assert response.status_code == 400

    response = await client.patch(f"/api/roles/{role_id}", json={"permissions": ["charts"]})
    assert response.json() == {"ok": True, "modified": 1}


@pytest.mark.asyncio
async def test_delete_refused_while_assigned(client: AsyncClient, roles: dict, db) -> None:
    """Every user holding the role is counted once, and force does not help."""
    await client.post(
        "/api/users",
        json={"names": "Ada", "surnames": "Ruiz", "email": "ada@dentalflow.ec", "role_name": "Assistant"},
    )
    await client.post(
        "/api/users",
        json={
            "names": "Leo",
            "surnames": "Paz",
            "email": "leo@dentalflow.ec",
            "role_id": str(roles["Assistant"]),
        },
    )
    # Legacy record referencing the role by name only
    await db["users"].insert_one({"email": "old@dentalflow.ec", "role_name": "Assistant"})

    role_id = str(roles["Assistant"])
    for params in ({}, {"force": "1"}, {"force": "true"}):
        response = await client.delete(f"/api/roles/{role_id}", params=params)
        assert response.status_code == 409
        body = response.json()
        assert body["inUseBy"] == {"by_id": 2, "by_name": 1}
        assert sum(body["inUseBy"].values()) == 3

    assert (await client.get(f"/api/roles/{role_id}")).status_code == 200


@pytest.mark.asyncio
async def test_delete_unassigned_role(client: AsyncClient, roles: dict) -> None:
    response = await client.delete(f"/api/roles/{roles['Administrator']}")
    assert response.json() == {"ok": True, "deleted": 1}

    response = await client.delete(f"/api/roles/{ObjectId()}")
    assert response.status_code == 404
