"""Laboratory order service for business logic."""

from datetime import UTC, datetime
from typing import Any

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from app.core.exceptions import NotFoundException
from app.core.identifiers import require_object_id
from app.core.line_items import ArrayFieldMutator
from app.core.notes import normalize_notes
from app.core.query import Pagination, contains, day_range
from app.schemas.common import serialize_document
from app.schemas.lab_orders import LabOrderCreate, LabOrderStatus, LabOrderUpdate, Product

logger = structlog.get_logger()

LAB_ORDERS_COLLECTION = "lab_orders"


class LabOrderService:
    """Service for laboratory orders and their product lists."""

    def __init__(self, db: AsyncDatabase):
        """Initialize service with database handle."""
        self.db = db
        self.collection = db[LAB_ORDERS_COLLECTION]
        self.products = ArrayFieldMutator(
            self.collection,
            "products",
            Product,
            not_found_message="Order not found",
        )

    async def create_order(self, data: LabOrderCreate) -> str:
        """Create a laboratory order."""
        now = datetime.now(UTC)
        creation_date = data.creation_date or now
        doc = {
            "appointment_id": require_object_id(data.appointment_id, "appointment_id"),
            "user_id": require_object_id(data.user_id, "user_id"),
            "creation_date": creation_date,
            "status": data.status.value,
            "notes": normalize_notes(data.notes),
            "products": [product.model_dump() for product in data.products],
            "created_at": now,
            "updated_at": now,
        }
        result = await self.collection.insert_one(doc)
        logger.info("lab_order_created", order_id=str(result.inserted_id))
        return str(result.inserted_id)

    async def list_orders(
        self,
        pagination: Pagination,
        appointment_id: str | None = None,
        user_id: str | None = None,
        status: LabOrderStatus | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
        q: str | None = None,
    ) -> tuple[list[dict], int]:
        """List orders, newest first, with optional text search."""
        query: dict[str, Any] = {}
        if appointment_id:
            query["appointment_id"] = require_object_id(appointment_id, "appointment_id")
        if user_id:
            query["user_id"] = require_object_id(user_id, "user_id")
        if status:
            query["status"] = status.value
        date_condition = day_range(date_from, date_to)
        if date_condition:
            query["creation_date"] = date_condition
        if q:
            rx = contains(q)
            query["$or"] = [
                {"products.product_type": rx},
                {"products.specifications": rx},
                {"notes.text": rx},
            ]

        cursor = (
            self.collection.find(query)
            .sort([("creation_date", -1)])
            .skip(pagination.skip)
            .limit(pagination.limit)
        )
        docs = await cursor.to_list(None)
        total = await self.collection.count_documents(query)
        return [serialize_document(doc) for doc in docs], total

    async def get_order(self, order_id: str) -> dict:
        """Get an order by identifier."""
        oid = require_object_id(order_id)
        doc = await self.collection.find_one({"_id": oid})
        if not doc:
            raise NotFoundException("Order not found")
        return serialize_document(doc)

    async def update_order(self, order_id: str, data: LabOrderUpdate) -> int:
        """
        Update status, notes and the product list of an order.

        ``status`` and ``notes`` ride along with whichever product operation
        was sent, in the same write as that operation's final step.

        Returns:
            Number of modified documents
        """
        oid = require_object_id(order_id)
        doc_filter = {"_id": oid}

        extra: dict[str, Any] = {}
        if data.status is not None:
            extra["status"] = data.status.value
        if data.notes_sent:
            extra["notes"] = normalize_notes(data.notes)

        if data.set_products is not None:
            return await self.products.replace_all(doc_filter, data.set_products, extra)

        if data.push_products is not None:
            return await self.products.append(doc_filter, data.push_products, extra)

        if data.product_patch is not None:
            patch = data.product_patch.item.model_dump(exclude_unset=True)
            return await self.products.patch_at(
                doc_filter, data.product_patch.index, patch, extra
            )

        if data.product_delete_index is not None:
            removed = await self.products.delete_at(doc_filter, data.product_delete_index, extra)
            return 1 if removed else 0

        extra["updated_at"] = datetime.now(UTC)
        result = await self.collection.update_one(doc_filter, {"$set": extra})
        if result.matched_count == 0:
            raise NotFoundException("Order not found")
        return result.modified_count

    async def delete_order(self, order_id: str) -> int:
        """Hard delete an order."""
        oid = require_object_id(order_id)
        result = await self.collection.delete_one({"_id": oid})
        if result.deleted_count == 0:
            raise NotFoundException("Order not found")
        return result.deleted_count
