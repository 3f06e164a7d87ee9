"""Cross-collection reference checks run before deletes.

Counting and deleting are separate round-trips, so a reference created in
between is not seen. There is no lock around the pair.
"""

import asyncio
from dataclasses import dataclass
from typing import Any

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from app.core.exceptions import ConflictException

logger = structlog.get_logger()


@dataclass(frozen=True)
class Reference:
    """A collection that may point at the entity being deleted."""

    label: str
    collection: str
    query: dict[str, Any]


async def count_references(db: AsyncDatabase, references: list[Reference]) -> dict[str, int]:
    """
    Count documents referencing an entity, one count per reference.

    Args:
        db: Database handle
        references: Where to look and how to match

    Returns:
        Mapping of reference label to document count
    """
    counts = await asyncio.gather(
        *(db[ref.collection].count_documents(ref.query) for ref in references)
    )
    return {ref.label: count or 0 for ref, count in zip(references, counts, strict=True)}


def ensure_deletable(
    counts: dict[str, int],
    message: str,
    counts_key: str = "refs",
    force: bool = False,
    allow_force: bool = False,
) -> None:
    """
    Block a delete while references exist.

    Args:
        counts: Output of :func:`count_references`
        message: Conflict message, formatted with ``total``
        counts_key: Body key under which the counts are reported
        force: Caller asked to delete anyway
        allow_force: Whether this kind of entity honours ``force``

    Raises:
        ConflictException: If referenced and not overridden
    """
    total = sum(counts.values())
    if total == 0:
        return
    if force and allow_force:
        logger.warning("reference_gate_overridden", refs=counts)
        return

    logger.info("reference_gate_blocked", refs=counts)
    raise ConflictException(message.format(total=total), extra={counts_key: counts})
