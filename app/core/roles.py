"""Role catalog and role reference reconciliation."""

from enum import Enum
from typing import Any

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from app.core.identifiers import parse_object_id

logger = structlog.get_logger()

ROLES_COLLECTION = "roles"


class RoleName(str, Enum):
    """Closed set of staff roles.

    Shared by request validation and the resolver below.
    """

    ADMINISTRATOR = "Administrator"
    DENTIST = "Dentist"
    ASSISTANT = "Assistant"
    LAB_TECHNICIAN = "LabTechnician"


ROLE_DESCRIPTIONS: dict[RoleName, str] = {
    RoleName.ADMINISTRATOR: "System management",
    RoleName.DENTIST: "Clinical care",
    RoleName.ASSISTANT: "Operations support",
    RoleName.LAB_TECHNICIAN: "Laboratory",
}

ROLE_NAMES: list[str] = [role.value for role in RoleName]


def is_known_role(name: Any) -> bool:
    """Check whether a value names a catalog role."""
    if isinstance(name, RoleName):
        return True
    return isinstance(name, str) and name in ROLE_NAMES


async def resolve_role(db: AsyncDatabase, record: dict[str, Any]) -> dict[str, Any]:
    """
    Reconcile ``role_name`` and ``role_id`` against the role catalog.

    When both fields are present and the identifier resolves, the catalog
    name replaces whatever name the client sent.

    Args:
        db: Database handle
        record: Partial user record

    Returns:
        A copy of the record with role fields filled in where possible
    """
    out = dict(record)
    name = out.get("role_name")
    if isinstance(name, RoleName):
        name = name.value
        out["role_name"] = name
    raw_id = out.get("role_id")
    roles = db[ROLES_COLLECTION]

    if not name and not raw_id:
        return out

    if raw_id and not name:
        role_oid = parse_object_id(raw_id)
        if role_oid is not None:
            role = await roles.find_one({"_id": role_oid})
            if role and role.get("name"):
                out["role_id"] = role["_id"]
                out["role_name"] = role["name"]
        return out

    if name and not raw_id:
        if not is_known_role(name):
            return out
        role = await roles.find_one({"name": name})
        if role:
            out["role_id"] = role["_id"]
        return out

    role_oid = parse_object_id(raw_id)
    if role_oid is not None:
        by_id = await roles.find_one({"_id": role_oid})
        if by_id:
            out["role_id"] = by_id["_id"]
            if by_id.get("name") and by_id["name"] != name:
                logger.info(
                    "role_reconciled",
                    role_id=str(role_oid),
                    sent_name=name,
                    catalog_name=by_id["name"],
                )
                out["role_name"] = by_id["name"]
            return out

    if is_known_role(name):
        by_name = await roles.find_one({"name": name})
        if by_name:
            out["role_id"] = by_name["_id"]
    return out


async def ensure_roles_seed(db: AsyncDatabase) -> bool:
    """
    Insert the role catalog when the collection is empty.

    Once any role exists this never runs again, even if the enumeration grows.

    Returns:
        True if the catalog was seeded
    """
    roles = db[ROLES_COLLECTION]
    if await roles.count_documents({}) > 0:
        return False

    docs = [
        {
            "name": role.value,
            "description": ROLE_DESCRIPTIONS[role],
            "permissions": [],
        }
        for role in RoleName
    ]
    await roles.insert_many(docs)
    logger.info("roles_seeded", count=len(docs))
    return True
