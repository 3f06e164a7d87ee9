"""Tests for the reference check run before deletes."""

import pytest

from app.core.exceptions import ConflictException
from app.core.references import Reference, count_references, ensure_deletable


@pytest.mark.asyncio
async def test_count_references_per_label(db) -> None:
    await db["appointments"].insert_many(
        [{"patient_id": "p1"}, {"patient_id": "p1"}, {"patient_id": "p2"}]
    )
    counts = await count_references(
        db,
        [
            Reference("appointments", "appointments", {"patient_id": "p1"}),
            Reference("clinical_history", "clinical_histories", {"patient_id": "p1"}),
        ],
    )
    assert counts == {"appointments": 2, "clinical_history": 0}


def test_unreferenced_entity_is_deletable() -> None:
    ensure_deletable({"appointments": 0}, "blocked by {total}")


def test_references_block_with_counts() -> None:
    with pytest.raises(ConflictException) as exc_info:
        ensure_deletable({"by_id": 2, "by_name": 1}, "blocked by {total}", counts_key="inUseBy")

    assert exc_info.value.status_code == 409
    assert exc_info.value.message == "blocked by 3"
    assert exc_info.value.extra == {"inUseBy": {"by_id": 2, "by_name": 1}}


def test_force_only_honoured_when_allowed() -> None:
    counts = {"appointments": 1}
    ensure_deletable(counts, "blocked", force=True, allow_force=True)

    with pytest.raises(ConflictException):
        ensure_deletable(counts, "blocked", force=True, allow_force=False)
