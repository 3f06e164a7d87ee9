"""Procedure type service for business logic."""

from datetime import UTC, datetime
from typing import Any

import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import ConflictException, NotFoundException
from app.core.identifiers import require_object_id
from app.core.query import Pagination, contains
from app.core.references import Reference, count_references, ensure_deletable
from app.schemas.common import serialize_document
from app.schemas.procedure_types import ProcedureTypeCreate, ProcedureTypeUpdate

logger = structlog.get_logger()

PROCEDURE_TYPES_COLLECTION = "procedure_types"


class ProcedureTypeService:
    """Service for the procedure type catalog."""

    def __init__(self, db: AsyncDatabase):
        """Initialize service with database handle."""
        self.db = db
        self.collection = db[PROCEDURE_TYPES_COLLECTION]

    async def create_procedure_type(self, data: ProcedureTypeCreate) -> str:
        """Create a procedure type with a unique name."""
        now = datetime.now(UTC)
        doc = {
            "name": data.name,
            "cost": data.cost,
            "active": data.active,
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = await self.collection.insert_one(doc)
        except DuplicateKeyError as e:
            raise ConflictException("Procedure type name already exists") from e
        return str(result.inserted_id)

    async def list_procedure_types(
        self,
        pagination: Pagination,
        q: str | None = None,
        active: bool | None = None,
    ) -> tuple[list[dict], int]:
        """List procedure types ordered by name."""
        query: dict[str, Any] = {}
        if q:
            query["name"] = contains(q)
        if active is not None:
            query["active"] = active

        cursor = (
            self.collection.find(query)
            .sort([("name", 1)])
            .skip(pagination.skip)
            .limit(pagination.limit)
        )
        docs = await cursor.to_list(None)
        total = await self.collection.count_documents(query)
        return [serialize_document(doc) for doc in docs], total

    async def get_procedure_type(self, procedure_type_id: str) -> dict:
        """Get a procedure type by identifier."""
        oid = require_object_id(procedure_type_id)
        doc = await self.collection.find_one({"_id": oid})
        if not doc:
            raise NotFoundException("Procedure type not found")
        return serialize_document(doc)

    async def update_procedure_type(self, procedure_type_id: str, data: ProcedureTypeUpdate) -> int:
        """Partially update a procedure type."""
        oid = require_object_id(procedure_type_id)
        values = data.model_dump(exclude_none=True)
        values["updated_at"] = datetime.now(UTC)

        try:
            result = await self.collection.update_one({"_id": oid}, {"$set": values})
        except DuplicateKeyError as e:
            raise ConflictException("Procedure type name already exists") from e
        if result.matched_count == 0:
            raise NotFoundException("Procedure type not found")
        return result.modified_count

    async def delete_procedure_type(self, procedure_type_id: str, force: bool = False) -> int:
        """
        Delete a procedure type.

        Appointments whose line items point at it block the delete unless
        ``force`` is set.
        """
        oid = require_object_id(procedure_type_id)
        counts = await count_references(
            self.db,
            [Reference("appointments", "appointments", {"line_items.procedure_type_id": oid})],
        )
        ensure_deletable(
            counts,
            "Cannot delete: procedure type referenced by {total} appointment(s). "
            "Use ?force=1 to delete anyway.",
            counts_key="refs",
            force=force,
            allow_force=True,
        )

        result = await self.collection.delete_one({"_id": oid})
        if result.deleted_count == 0:
            raise NotFoundException("Procedure type not found")
        logger.info("procedure_type_deleted", procedure_type_id=str(oid), forced=force)
        return result.deleted_count
