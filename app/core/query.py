"""Helpers for list endpoints: flags, pagination, date ranges and text search."""

import re
from dataclasses import dataclass
from datetime import UTC, date, datetime, time
from typing import Any

from app.core.exceptions import BadRequestException

_TRUE = {"1", "true", "t", "yes", "y"}
_FALSE = {"0", "false", "f", "no", "n"}


def parse_bool(value: Any, default: bool | None = None) -> bool | None:
    """Parse a boolean-ish query value, returning ``default`` when unrecognized."""
    if value is None:
        return default
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    return default


@dataclass(frozen=True)
class Pagination:
    """Clamped page/limit pair."""

    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_query(
        cls,
        page: int | None,
        limit: int | None,
        default_limit: int = 50,
        max_limit: int = 200,
    ) -> "Pagination":
        limit = default_limit if limit is None else limit
        return cls(page=max(page or 1, 1), limit=min(max(limit, 1), max_limit))

    def envelope(self, data: list[Any], total: int) -> dict[str, Any]:
        return {"ok": True, "total": total, "page": self.page, "pageSize": self.limit, "data": data}


def _parse_day(value: str, field: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError as e:
        raise BadRequestException(f"invalid {field}") from e


def day_range(date_from: str | None, date_to: str | None) -> dict[str, datetime]:
    """
    Build a ``$gte``/``$lte`` condition covering whole days.

    Args:
        date_from: First day, YYYY-MM-DD
        date_to: Last day, YYYY-MM-DD

    Returns:
        Mongo range condition, empty when neither bound is given
    """
    condition: dict[str, datetime] = {}
    if date_from:
        condition["$gte"] = datetime.combine(_parse_day(date_from, "from"), time.min, tzinfo=UTC)
    if date_to:
        condition["$lte"] = datetime.combine(_parse_day(date_to, "to"), time(23, 59, 59), tzinfo=UTC)
    return condition


def contains(text: str) -> dict[str, str]:
    """Case-insensitive substring match."""
    return {"$regex": re.escape(text), "$options": "i"}
