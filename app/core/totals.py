"""Appointment line items and their derived total."""

from collections.abc import Iterable
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel

from app.core.exceptions import BadRequestException
from app.core.identifiers import parse_object_id


def _as_number(value: Any) -> float:
    if isinstance(value, bool):
        raise BadRequestException("invalid numeric value")
    if isinstance(value, int | float):
        return value
    try:
        return float(Decimal(str(value).strip()))
    except (InvalidOperation, ValueError) as e:
        raise BadRequestException("invalid numeric value") from e


def normalize_line_items(items: Iterable[BaseModel | dict[str, Any]] | None) -> list[dict[str, Any]]:
    """
    Clean up appointment line items before they are stored.

    Names are trimmed, quantity defaults to 1, and items with an empty name,
    a negative cost or a quantity below 1 are dropped rather than zeroed.

    Args:
        items: Raw line items

    Returns:
        Normalized line items
    """
    out: list[dict[str, Any]] = []
    for item in items or []:
        raw = item.model_dump(exclude_none=True) if isinstance(item, BaseModel) else dict(item)
        name = str(raw.get("name") or "").strip()
        unit_cost = _as_number(raw.get("unit_cost", 0))
        quantity = int(_as_number(raw["quantity"])) if raw.get("quantity") is not None else 1
        if not name or unit_cost < 0 or quantity < 1:
            continue

        line: dict[str, Any] = {"name": name, "unit_cost": unit_cost, "quantity": quantity}
        procedure_type_id = parse_object_id(raw.get("procedure_type_id"))
        if procedure_type_id is not None:
            line["procedure_type_id"] = procedure_type_id
        out.append(line)
    return out


def compute_total(items: Iterable[dict[str, Any]] | None) -> float:
    """Sum of unit cost times quantity."""
    return sum(item["unit_cost"] * item.get("quantity", 1) for item in items or [])


def resolve_total(
    explicit_total: float | None,
    items_changed: bool,
    items: list[dict[str, Any]] | None,
) -> float | None:
    """
    Decide what the stored total should become after a mutation.

    An explicit total is taken verbatim, without checking it against the
    items. Otherwise the total is recomputed only when the items changed.

    Returns:
        New total, or None to leave the stored total untouched
    """
    if explicit_total is not None:
        return explicit_total
    if items_changed:
        return compute_total(items)
    return None
