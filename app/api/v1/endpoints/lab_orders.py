"""Laboratory order endpoints."""

from typing import Any

from fastapi import APIRouter, Query, status

from app.core.query import Pagination
from app.dependencies import Database
from app.schemas.lab_orders import LabOrderCreate, LabOrderStatus, LabOrderUpdate
from app.services.lab_order_service import LabOrderService

router = APIRouter(prefix="/lab-orders", tags=["Lab orders"])


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create lab order")
async def create_order(data: LabOrderCreate, db: Database) -> dict[str, Any]:
    """Create a laboratory order with at least one product."""
    service = LabOrderService(db)
    return {"ok": True, "id": await service.create_order(data)}


@router.get("", summary="List lab orders")
async def list_orders(
    db: Database,
    appointment_id: str | None = Query(None),
    user_id: str | None = Query(None),
    status_filter: LabOrderStatus | None = Query(None, alias="status"),
    date_from: str | None = Query(None, alias="from", description="YYYY-MM-DD"),
    date_to: str | None = Query(None, alias="to", description="YYYY-MM-DD"),
    q: str | None = Query(None, description="Matches product type, specifications or notes"),
    page: int | None = Query(None),
    limit: int | None = Query(None),
) -> dict[str, Any]:
    """
    List laboratory orders, newest first.

    Args:
        db: Database handle
        appointment_id: Filter by appointment
        user_id: Filter by requesting user
        status_filter: Filter by status
        date_from: First creation day included
        date_to: Last creation day included
        q: Free text search
        page: Page number
        limit: Items per page

    Returns:
        Paginated envelope
    """
    pagination = Pagination.from_query(page, limit)
    service = LabOrderService(db)
    data, total = await service.list_orders(
        pagination,
        appointment_id=appointment_id,
        user_id=user_id,
        status=status_filter,
        date_from=date_from,
        date_to=date_to,
        q=q,
    )
    return pagination.envelope(data, total)


@router.get("/{order_id}", summary="Get lab order")
async def get_order(order_id: str, db: Database) -> dict[str, Any]:
    service = LabOrderService(db)
    return {"ok": True, "data": await service.get_order(order_id)}


@router.patch("/{order_id}", summary="Update lab order")
async def update_order(order_id: str, data: LabOrderUpdate, db: Database) -> dict[str, Any]:
    """
    Update status and notes, and apply at most one product operation.

    Product operations are ``set_products``, ``push_products``,
    ``product_patch`` (``{index, item}``) and ``product_delete_index``.
    """
    service = LabOrderService(db)
    return {"ok": True, "modified": await service.update_order(order_id, data)}


@router.delete("/{order_id}", summary="Delete lab order")
async def delete_order(order_id: str, db: Database) -> dict[str, Any]:
    service = LabOrderService(db)
    return {"ok": True, "deleted": await service.delete_order(order_id)}
