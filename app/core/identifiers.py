"""Identifier parsing helpers.

Generated identifiers are MongoDB ObjectIds (24 hex characters). Patients use
a natural string key instead, which is never run through these helpers.
"""

from typing import Any

from bson import ObjectId
from bson.errors import InvalidId

from app.core.exceptions import BadRequestException


def parse_object_id(value: Any) -> ObjectId | None:
    """
    Interpret a value as an ObjectId.

    Args:
        value: ObjectId instance or 24-character hex string

    Returns:
        ObjectId, or None when the value cannot be parsed
    """
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str):
        return None
    candidate = value.strip()
    if len(candidate) != 24:
        return None
    try:
        return ObjectId(candidate)
    except (InvalidId, TypeError):
        return None


def require_object_id(value: Any, field: str = "id") -> ObjectId:
    """Parse an ObjectId or raise a 400 naming the offending field."""
    oid = parse_object_id(value)
    if oid is None:
        raise BadRequestException(f"invalid {field}")
    return oid
