"""Shared schema types and document serialization."""

import re
from datetime import UTC, datetime
from typing import Annotated, Any

from bson import ObjectId
from pydantic import AfterValidator, BaseModel, StringConstraints, model_validator

ObjectIdStr = Annotated[str, StringConstraints(strip_whitespace=True, pattern=r"^[0-9a-fA-F]{24}$")]
TrimmedStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


def to_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


UtcDatetime = Annotated[datetime, AfterValidator(to_utc)]


def blank_to_none(value: str | None) -> str | None:
    """Trim a string, mapping empty results to None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def title_case(value: str) -> str:
    """Collapse whitespace and capitalize the first letter of every word."""
    collapsed = re.sub(r"\s+", " ", value).strip().lower()
    return re.sub(r"\b([^\W\d_])", lambda m: m.group(1).upper(), collapsed)


class PatchModel(BaseModel):
    """Base for partial updates: at least one field must be sent."""

    @model_validator(mode="after")
    def require_some_field(self):
        """Reject empty patches."""
        if not self.model_fields_set:
            raise ValueError("Nothing to update")
        return self


def serialize_document(value: Any) -> Any:
    """Convert BSON values in a document into JSON-friendly ones."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return to_utc(value).isoformat()
    if isinstance(value, dict):
        return {key: serialize_document(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [serialize_document(item) for item in value]
    return value
