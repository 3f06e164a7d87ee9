"""MongoDB connection management, index provisioning and bootstrap."""

from collections.abc import AsyncGenerator
from typing import Any

import structlog
from pymongo import ASCENDING, DESCENDING, AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import OperationFailure

from app.config import settings
from app.core.roles import ensure_roles_seed

logger = structlog.get_logger()

# Global MongoDB client instance
_mongo_client: AsyncMongoClient | None = None

_TOLERATED_INDEX_ERRORS = {"IndexOptionsConflict", "IndexKeySpecsConflict"}

BASE_INDEXES: list[tuple[str, list[tuple[str, int]], dict[str, Any]]] = [
    ("roles", [("name", ASCENDING)], {"name": "uq_roles_name", "unique": True}),
    ("users", [("email", ASCENDING)], {"name": "uq_users_email", "unique": True}),
    ("users", [("external_user_id", ASCENDING)], {"name": "ix_users_external_user_id"}),
    ("users", [("role_name", ASCENDING)], {"name": "ix_users_role_name"}),
    ("users", [("role_id", ASCENDING)], {"name": "ix_users_role_id"}),
    (
        "patients",
        [("surnames", ASCENDING), ("names", ASCENDING)],
        {"name": "ix_patients_name"},
    ),
    ("patients", [("email", ASCENDING)], {"name": "ix_patients_email"}),
    (
        "appointments",
        [("patient_id", ASCENDING), ("date", DESCENDING)],
        {"name": "ix_appointments_patient_date"},
    ),
    (
        "appointments",
        [("user_id", ASCENDING), ("date", DESCENDING)],
        {"name": "ix_appointments_user_date"},
    ),
    (
        "clinical_histories",
        [("patient_id", ASCENDING)],
        {"name": "uq_history_patient", "unique": True},
    ),
    (
        "procedure_types",
        [("name", ASCENDING)],
        {"name": "uq_procedure_type_name", "unique": True},
    ),
    ("lab_orders", [("creation_date", DESCENDING)], {"name": "ix_lab_orders_date"}),
    ("lab_orders", [("appointment_id", ASCENDING)], {"name": "ix_lab_orders_appointment"}),
]


def get_mongo_client() -> AsyncMongoClient:
    """
    Get or create the MongoDB client instance.

    Returns:
        Process-wide client
    """
    global _mongo_client

    if _mongo_client is None:
        _mongo_client = AsyncMongoClient(
            settings.mongodb_uri,
            appname=settings.app_name,
            tz_aware=True,
        )

    return _mongo_client


def get_database() -> AsyncDatabase:
    """Get the application database handle."""
    return get_mongo_client()[settings.db_name]


async def get_db() -> AsyncGenerator[AsyncDatabase, None]:
    """Dependency for getting the database handle."""
    yield get_database()


async def create_index_safe(
    collection: AsyncCollection,
    keys: list[tuple[str, int]],
    **options: Any,
) -> str | None:
    """
    Create an index, treating an existing equivalent or conflicting index as success.

    Returns:
        Index name, or None if it already existed
    """
    try:
        return await collection.create_index(keys, **options)
    except OperationFailure as e:
        code_name = (e.details or {}).get("codeName")
        if code_name in _TOLERATED_INDEX_ERRORS or "already exists" in str(e):
            logger.info("index_exists", collection=collection.name, index=options.get("name"))
            return None
        raise


async def ensure_indexes(db: AsyncDatabase) -> None:
    """Create the base indexes of every collection."""
    for collection_name, keys, options in BASE_INDEXES:
        await create_index_safe(db[collection_name], keys, **options)


async def init_database(db: AsyncDatabase | None = None) -> AsyncDatabase:
    """
    Initialize the database for the running process.

    Provisions indexes and seeds the role catalog unless SKIP_INDEX_SEED is set.
    """
    db = db if db is not None else get_database()
    if not settings.skip_index_seed:
        await ensure_indexes(db)
        await ensure_roles_seed(db)
    return db


async def close_database() -> None:
    """Close the MongoDB client."""
    global _mongo_client

    if _mongo_client is not None:
        await _mongo_client.close()
        _mongo_client = None

