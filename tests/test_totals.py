"""Tests for appointment line items and totals."""

import pytest
from bson import ObjectId

from app.core.exceptions import BadRequestException
from app.core.totals import compute_total, normalize_line_items, resolve_total
from app.schemas.appointments import LineItem


def test_normalize_trims_defaults_and_drops_invalid() -> None:
    """Blank names, negative costs and zero quantities are dropped."""
    procedure_type_id = str(ObjectId())
    items = normalize_line_items(
        [
            {"name": "  Cleaning ", "unit_cost": "25.5", "procedure_type_id": procedure_type_id},
            {"name": "   ", "unit_cost": 10},
            {"name": "Filling", "unit_cost": -1},
            {"name": "Crown", "unit_cost": 100, "quantity": 0},
            LineItem(name="X-ray", cost=15, qty=2),
        ]
    )

    assert items == [
        {
            "name": "Cleaning",
            "unit_cost": 25.5,
            "quantity": 1,
            "procedure_type_id": ObjectId(procedure_type_id),
        },
        {"name": "X-ray", "unit_cost": 15.0, "quantity": 2},
    ]


def test_normalize_rejects_non_numeric_cost() -> None:
    with pytest.raises(BadRequestException):
        normalize_line_items([{"name": "Cleaning", "unit_cost": "cheap"}])


def test_compute_total() -> None:
    items = normalize_line_items(
        [{"name": "A", "unit_cost": 50, "quantity": 2}, {"name": "B", "unit_cost": 30}]
    )
    assert compute_total(items) == 130
    assert compute_total([]) == 0
    assert compute_total(None) == 0


def test_resolve_total_precedence() -> None:
    """Explicit total wins, then recompute on item change, else untouched."""
    items = [{"name": "A", "unit_cost": 10, "quantity": 3}]
    assert resolve_total(5, True, items) == 5
    assert resolve_total(0, False, None) == 0
    assert resolve_total(None, True, items) == 30
    assert resolve_total(None, True, []) == 0
    assert resolve_total(None, False, items) is None
