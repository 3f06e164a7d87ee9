"""Role service for business logic."""

from datetime import UTC, datetime

import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import ConflictException, NotFoundException
from app.core.identifiers import require_object_id
from app.core.query import Pagination, contains
from app.core.references import Reference, count_references, ensure_deletable
from app.core.roles import ROLES_COLLECTION
from app.schemas.common import serialize_document
from app.schemas.roles import RoleCreate, RoleUpdate

logger = structlog.get_logger()


class RoleService:
    """Service for the role catalog."""

    def __init__(self, db: AsyncDatabase):
        """Initialize service with database handle."""
        self.db = db
        self.collection = db[ROLES_COLLECTION]

    async def create_role(self, data: RoleCreate) -> str:
        """Create a role. Names are unique."""
        now = datetime.now(UTC)
        doc = {
            "name": data.name.value,
            "description": data.description,
            "permissions": list(data.permissions),
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = await self.collection.insert_one(doc)
        except DuplicateKeyError as e:
            raise ConflictException("Role already exists") from e
        return str(result.inserted_id)

    async def list_roles(self, pagination: Pagination, q: str | None = None) -> tuple[list[dict], int]:
        """List roles ordered by name."""
        query = {}
        if q:
            rx = contains(q)
            query = {"$or": [{"name": rx}, {"description": rx}]}

        cursor = (
            self.collection.find(query)
            .sort([("name", 1)])
            .skip(pagination.skip)
            .limit(pagination.limit)
        )
        docs = await cursor.to_list(None)
        total = await self.collection.count_documents(query)
        return [serialize_document(doc) for doc in docs], total

    async def get_role(self, role_id: str) -> dict:
        """Get a role by identifier."""
        oid = require_object_id(role_id)
        doc = await self.collection.find_one({"_id": oid})
        if not doc:
            raise NotFoundException("Role not found")
        return serialize_document(doc)

    async def update_role(self, role_id: str, data: RoleUpdate) -> int:
        """Update description and permissions of a role."""
        oid = require_object_id(role_id)
        values: dict = {"updated_at": datetime.now(UTC)}
        if data.description is not None:
            values["description"] = data.description.strip()
        if data.permissions is not None:
            values["permissions"] = list(data.permissions)

        result = await self.collection.update_one({"_id": oid}, {"$set": values})
        if result.matched_count == 0:
            raise NotFoundException("Role not found")
        return result.modified_count

    async def delete_role(self, role_id: str) -> int:
        """
        Delete a role no user refers to.

        Users may reference a role by identifier or only by name; both count,
        each user once. There is no override.
        """
        oid = require_object_id(role_id)
        role = await self.collection.find_one({"_id": oid})
        if not role:
            raise NotFoundException("Role not found")

        counts = await count_references(
            self.db,
            [
                Reference("by_id", "users", {"role_id": oid}),
                Reference("by_name", "users", {"role_name": role["name"], "role_id": {"$ne": oid}}),
            ],
        )
        ensure_deletable(
            counts,
            "Cannot delete: role is assigned to {total} user(s). Reassign them first.",
            counts_key="inUseBy",
        )

        result = await self.collection.delete_one({"_id": oid})
        logger.info("role_deleted", role_id=str(oid), name=role["name"])
        return result.deleted_count
