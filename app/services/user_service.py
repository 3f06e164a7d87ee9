"""Staff user service for business logic."""

from datetime import UTC, datetime
from typing import Any

import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import BadRequestException, ConflictException, NotFoundException
from app.core.identifiers import parse_object_id, require_object_id
from app.core.query import Pagination, contains
from app.core.roles import RoleName, resolve_role
from app.schemas.common import serialize_document
from app.schemas.users import UPDATABLE_FIELDS, UserCreate, UserUpdate

logger = structlog.get_logger()

USERS_COLLECTION = "users"


def normalize_specialty(value: str | list[str] | None) -> list[str]:
    """Store specialty as a list of non-empty strings."""
    if value is None:
        return []
    values = value if isinstance(value, list) else [value]
    return [item.strip() for item in values if item and item.strip()]


def _finalize_role(record: dict[str, Any]) -> dict[str, Any]:
    """Validate the outcome of role resolution before it is stored."""
    if record.get("role_id") is not None:
        role_oid = parse_object_id(record["role_id"])
        if role_oid is None:
            raise BadRequestException("invalid role_id")
        record["role_id"] = role_oid
        if not record.get("role_name"):
            raise BadRequestException("role_id does not match any role")
    return record


class UserService:
    """Service for staff user operations."""

    def __init__(self, db: AsyncDatabase):
        """Initialize service with database handle."""
        self.db = db
        self.collection = db[USERS_COLLECTION]

    async def list_users(
        self,
        pagination: Pagination,
        search: str | None = None,
        role: str | None = None,
        status: str | None = None,
    ) -> tuple[list[dict], int]:
        """List users with a compact projection and optional filters."""
        conditions: list[dict[str, Any]] = []
        if search:
            rx = contains(search)
            conditions.append(
                {
                    "$or": [
                        {"names": rx},
                        {"surnames": rx},
                        {"email": rx},
                        {"role_name": rx},
                    ]
                }
            )
        if role:
            conditions.append({"role_name": role})
        if status:
            conditions.append({"status": status})
        query = {"$and": conditions} if conditions else {}

        cursor = (
            self.collection.find(
                query,
                {
                    "external_user_id": 1,
                    "names": 1,
                    "surnames": 1,
                    "email": 1,
                    "status": 1,
                    "role_name": 1,
                    "role_id": 1,
                    "specialty": 1,
                },
            )
            .sort([("surnames", 1), ("names", 1)])
            .skip(pagination.skip)
            .limit(pagination.limit)
        )
        docs = await cursor.to_list(None)
        total = await self.collection.count_documents(query)

        data = []
        for doc in docs:
            doc["name"] = f"{doc.get('names') or ''} {doc.get('surnames') or ''}"
            data.append(serialize_document(doc))
        return data, total

    async def get_user(self, user_id: str) -> dict:
        """Get a user by identifier."""
        oid = require_object_id(user_id)
        doc = await self.collection.find_one({"_id": oid})
        if not doc:
            raise NotFoundException("User not found")
        return serialize_document(doc)

    async def create_user(self, data: UserCreate) -> str:
        """
        Create a staff user.

        Role fields are reconciled with the catalog, and dentists must list
        at least one specialty.

        Returns:
            Identifier of the new user
        """
        record = data.model_dump(mode="json", exclude_none=True)
        record = _finalize_role(await resolve_role(self.db, record))
        if not record.get("role_name"):
            raise BadRequestException("role could not be resolved")

        record["email"] = record["email"].strip().lower()
        record["specialty"] = normalize_specialty(data.specialty)
        if record["role_name"] == RoleName.DENTIST.value and not record["specialty"]:
            raise BadRequestException("specialty is required for role Dentist")

        now = datetime.now(UTC)
        record["created_at"] = now
        record["updated_at"] = now

        try:
            result = await self.collection.insert_one(record)
        except DuplicateKeyError as e:
            raise ConflictException("Email already registered") from e

        logger.info("user_created", user_id=str(result.inserted_id), role=record["role_name"])
        return str(result.inserted_id)

    async def update_user(self, user_id: str, data: UserUpdate) -> int:
        """
        Partially update a user.

        When ``external_user_id`` is sent it selects the user instead of
        ``user_id``.

        Returns:
            Number of modified documents
        """
        if data.external_user_id:
            doc_filter: dict[str, Any] = {"external_user_id": data.external_user_id}
        else:
            doc_filter = {"_id": require_object_id(user_id)}

        sent = data.model_dump(mode="json", include=set(UPDATABLE_FIELDS), exclude_none=True)
        patch = _finalize_role(await resolve_role(self.db, sent))
        # Unresolved role_name: drop the stale role_id
        unset: dict[str, str] = {}
        if "role_name" in patch and patch.get("role_id") is None:
            unset["role_id"] = ""

        if "email" in patch:
            patch["email"] = patch["email"].strip().lower()
        if "specialty" in patch:
            patch["specialty"] = normalize_specialty(data.specialty)
        for key in ("address", "phone"):
            if key in patch:
                patch[key] = patch[key].strip()

        current = await self.collection.find_one(doc_filter, {"specialty": 1, "role_name": 1})
        if not current:
            raise NotFoundException("User not found")
        effective_role = patch.get("role_name") or current.get("role_name")
        if effective_role == RoleName.DENTIST.value:
            specialty = patch["specialty"] if "specialty" in patch else current.get("specialty")
            if not specialty:
                raise BadRequestException("specialty is required for role Dentist")

        patch["updated_at"] = datetime.now(UTC)
        update: dict[str, Any] = {"$set": patch}
        if unset:
            update["$unset"] = unset
            logger.info("role_id_cleared", role_name=patch["role_name"])
        try:
            result = await self.collection.update_one({"_id": current["_id"]}, update)
        except DuplicateKeyError as e:
            raise ConflictException("Email already registered") from e

        if result.matched_count == 0:
            raise NotFoundException("User not found")
        return result.modified_count

    async def delete_user(self, user_id: str) -> int:
        """Hard delete a user."""
        oid = require_object_id(user_id)
        result = await self.collection.delete_one({"_id": oid})
        if result.deleted_count == 0:
            raise NotFoundException("User not found")
        return result.deleted_count
