"""Tests for laboratory order endpoints."""

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import AsyncClient


@pytest.fixture
def sample_order_data() -> dict:
    """Order with three products."""
    return {
        "appointment_id": str(ObjectId()),
        "user_id": str(ObjectId()),
        "products": [
            {"product_type": "Crown", "specifications": "  shade A2 "},
            {"product_type": "Bridge", "quantity": 2},
            {"product_type": "Night guard", "specifications": ""},
        ],
    }


@pytest_asyncio.fixture
async def order_id(client: AsyncClient, sample_order_data: dict) -> str:
    response = await client.post("/api/lab-orders", json=sample_order_data)
    assert response.status_code == 201, response.text
    return response.json()["id"]


async def _order(client: AsyncClient, order_id: str) -> dict:
    return (await client.get(f"/api/lab-orders/{order_id}")).json()["data"]


async def _types(client: AsyncClient, order_id: str) -> list[str]:
    return [product["product_type"] for product in (await _order(client, order_id))["products"]]


@pytest.mark.asyncio
async def test_create_order(client: AsyncClient, order_id: str) -> None:
    data = await _order(client, order_id)
    assert data["status"] == "Pending"
    assert data["notes"] is None
    assert data["creation_date"]
    assert data["products"][0] == {"product_type": "Crown", "specifications": "shade A2", "quantity": 1}
    assert data["products"][2]["specifications"] is None


@pytest.mark.asyncio
async def test_create_requires_products(client: AsyncClient, sample_order_data: dict) -> None:
    sample_order_data["products"] = []
    response = await client.post("/api/lab-orders", json=sample_order_data)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_patch_out_of_range_leaves_order_unchanged(client: AsyncClient, order_id: str) -> None:
    """Patching index 5 of a three-product order is a 404."""
    before = await _order(client, order_id)

    response = await client.patch(
        f"/api/lab-orders/{order_id}",
        json={"status": "InProduction", "product_patch": {"index": 5, "item": {"quantity": 3}}},
    )
    assert response.status_code == 404
    assert response.json() == {"ok": False, "error": "index out of range"}
    assert await _order(client, order_id) == before


@pytest.mark.asyncio
async def test_patch_product_merges(client: AsyncClient, order_id: str) -> None:
    response = await client.patch(
        f"/api/lab-orders/{order_id}",
        json={"product_patch": {"index": 0, "item": {"quantity": 4}}, "status": "InProduction"},
    )
    assert response.json() == {"ok": True, "modified": 1}

    data = await _order(client, order_id)
    assert data["products"][0] == {"product_type": "Crown", "specifications": "shade A2", "quantity": 4}
    assert data["status"] == "InProduction"


@pytest.mark.asyncio
async def test_push_then_delete_by_index(client: AsyncClient, order_id: str) -> None:
    response = await client.patch(
        f"/api/lab-orders/{order_id}", json={"push_products": [{"product_type": "Veneer"}]}
    )
    assert response.json()["modified"] == 1
    assert await _types(client, order_id) == ["Crown", "Bridge", "Night guard", "Veneer"]

    response = await client.patch(f"/api/lab-orders/{order_id}", json={"product_delete_index": 1})
    assert response.json() == {"ok": True, "modified": 1}
    assert await _types(client, order_id) == ["Crown", "Night guard", "Veneer"]

    response = await client.patch(f"/api/lab-orders/{order_id}", json={"product_delete_index": 10})
    assert response.json() == {"ok": True, "modified": 0}
    assert await _types(client, order_id) == ["Crown", "Night guard", "Veneer"]


@pytest.mark.asyncio
async def test_set_products_replaces_all(client: AsyncClient, order_id: str) -> None:
    response = await client.patch(
        f"/api/lab-orders/{order_id}", json={"set_products": [{"product_type": "Implant"}]}
    )
    assert response.json()["modified"] == 1
    assert await _types(client, order_id) == ["Implant"]


@pytest.mark.asyncio
async def test_one_product_operation_per_request(client: AsyncClient, order_id: str) -> None:
    response = await client.patch(
        f"/api/lab-orders/{order_id}",
        json={"push_products": [{"product_type": "Veneer"}], "product_delete_index": 0},
    )
    assert response.status_code == 400
    assert await _types(client, order_id) == ["Crown", "Bridge", "Night guard"]


@pytest.mark.asyncio
async def test_notes_and_search(client: AsyncClient, order_id: str) -> None:
    response = await client.patch(f"/api/lab-orders/{order_id}", json={"notes": "Rush, deliver Friday"})
    assert response.json()["modified"] == 1
    assert (await _order(client, order_id))["notes"] == {"text": "Rush, deliver Friday"}

    for q in ("rush", "bridge", "A2"):
        response = await client.get("/api/lab-orders", params={"q": q})
        assert response.json()["total"] == 1, q

    response = await client.get("/api/lab-orders", params={"q": "implant"})
    assert response.json()["total"] == 0

    response = await client.patch(f"/api/lab-orders/{order_id}", json={"notes": None})
    assert (await _order(client, order_id))["notes"] is None


@pytest.mark.asyncio
async def test_list_filters(client: AsyncClient, order_id: str, sample_order_data: dict) -> None:
    response = await client.get(
        "/api/lab-orders", params={"appointment_id": sample_order_data["appointment_id"]}
    )
    assert response.json()["total"] == 1

    response = await client.get("/api/lab-orders", params={"status": "Delivered"})
    assert response.json()["total"] == 0

    response = await client.get("/api/lab-orders", params={"user_id": "bad"})
    assert response.status_code == 400
    assert response.json()["error"] == "invalid user_id"


@pytest.mark.asyncio
async def test_missing_order(client: AsyncClient) -> None:
    missing = str(ObjectId())
    response = await client.patch(f"/api/lab-orders/{missing}", json={"status": "Delivered"})
    assert response.status_code == 404

    response = await client.patch(
        f"/api/lab-orders/{missing}", json={"product_patch": {"index": 0, "item": {"quantity": 2}}}
    )
    assert response.status_code == 404
    assert response.json()["error"] == "Order not found"


@pytest.mark.asyncio
async def test_delete_order(client: AsyncClient, order_id: str) -> None:
    response = await client.delete(f"/api/lab-orders/{order_id}")
    assert response.json() == {"ok": True, "deleted": 1}
    assert (await client.get(f"/api/lab-orders/{order_id}")).status_code == 404


@pytest.mark.asyncio
async def test_patch_product_explicit_null(client: AsyncClient, order_id: str) -> None:
    """An explicit null clears an optional field and is rejected on a required one."""
    response = await client.patch(
        f"/api/lab-orders/{order_id}",
        json={"product_patch": {"index": 0, "item": {"specifications": None}}},
    )
    assert response.json() == {"ok": True, "modified": 1}
    assert (await _order(client, order_id))["products"][0]["specifications"] is None

    response = await client.patch(
        f"/api/lab-orders/{order_id}",
        json={"product_patch": {"index": 0, "item": {"product_type": None}}},
    )
    assert response.status_code == 400
    assert (await _order(client, order_id))["products"][0]["product_type"] == "Crown"
