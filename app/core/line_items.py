"""Index-addressed mutation of array fields inside a document.

Positions are zero-based. Deleting by position is done in two steps because
MongoDB has no atomic "remove element i" operator:

1. ``$unset`` the element, which leaves a ``null`` marker in its slot.
2. ``$pull`` every ``null`` from the array.

Between the two writes the document briefly holds the marker. Positions of
the other elements never shift until step 2 runs.

Patching by position reads the element and writes the merge back in two
round-trips. Concurrent patches to the same position race and the last
write wins; no lock is taken.
"""

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from pymongo.asynchronous.collection import AsyncCollection

from app.core.exceptions import (
    IndexOutOfRangeException,
    NotFoundException,
    ValidationException,
    validation_details,
)

logger = structlog.get_logger()


def _as_document(item: BaseModel | dict[str, Any]) -> dict[str, Any]:
    if isinstance(item, BaseModel):
        return item.model_dump()
    return dict(item)


class ArrayFieldMutator:
    """Patch, append, replace or delete elements of one array field."""

    def __init__(
        self,
        collection: AsyncCollection,
        field: str,
        item_model: type[BaseModel],
        not_found_message: str = "Not found",
    ):
        """
        Initialize mutator.

        Args:
            collection: Collection holding the documents
            field: Name of the array field
            item_model: Schema every element must satisfy
            not_found_message: Error message when the parent document is absent
        """
        self.collection = collection
        self.field = field
        self.item_model = item_model
        self.not_found_message = not_found_message

    @staticmethod
    def _stamp(extra_set: dict[str, Any] | None) -> dict[str, Any]:
        values = dict(extra_set or {})
        values["updated_at"] = datetime.now(UTC)
        return values

    async def _current_items(self, doc_filter: dict[str, Any]) -> tuple[Any, list[Any]]:
        doc = await self.collection.find_one(doc_filter, {self.field: 1})
        if doc is None:
            raise NotFoundException(self.not_found_message)
        return doc["_id"], list(doc.get(self.field) or [])

    @staticmethod
    def _element_at(items: list[Any], index: int) -> Any:
        if index < 0 or index >= len(items) or not items[index]:
            raise IndexOutOfRangeException()
        return items[index]

    async def patch_at(
        self,
        doc_filter: dict[str, Any],
        index: int,
        patch: dict[str, Any],
        extra_set: dict[str, Any] | None = None,
    ) -> int:
        """
        Merge a partial item over the element at ``index``.

        Only keys present in ``patch`` override the stored element. The merge
        is validated against the full item schema before anything is written.

        Returns:
            Number of modified documents
        """
        doc_id, items = await self._current_items(doc_filter)
        current = self._element_at(items, index)

        merged = {**current, **patch}
        try:
            validated = self.item_model.model_validate(merged)
        except PydanticValidationError as e:
            raise ValidationException("Invalid item", details=validation_details(e)) from e

        values = self._stamp(extra_set)
        values[f"{self.field}.{index}"] = {**merged, **validated.model_dump()}
        result = await self.collection.update_one({"_id": doc_id}, {"$set": values})
        return result.modified_count

    async def append(
        self,
        doc_filter: dict[str, Any],
        items: Iterable[BaseModel | dict[str, Any]],
        extra_set: dict[str, Any] | None = None,
    ) -> int:
        """Append items to the end of the array."""
        docs = [_as_document(item) for item in items]
        result = await self.collection.update_one(
            doc_filter,
            {"$push": {self.field: {"$each": docs}}, "$set": self._stamp(extra_set)},
        )
        if result.matched_count == 0:
            raise NotFoundException(self.not_found_message)
        return result.modified_count

    async def replace_all(
        self,
        doc_filter: dict[str, Any],
        items: Iterable[BaseModel | dict[str, Any]],
        extra_set: dict[str, Any] | None = None,
    ) -> int:
        """Substitute the whole array in one write."""
        values = self._stamp(extra_set)
        values[self.field] = [_as_document(item) for item in items]
        result = await self.collection.update_one(doc_filter, {"$set": values})
        if result.matched_count == 0:
            raise NotFoundException(self.not_found_message)
        return result.modified_count

    async def delete_at(
        self,
        doc_filter: dict[str, Any],
        index: int,
        extra_set: dict[str, Any] | None = None,
        check_exists: bool = False,
    ) -> bool:
        """
        Remove the element at ``index`` with the unset-then-pull protocol.

        Without ``check_exists`` an index past the end is a no-op that still
        succeeds. With it, a missing element raises before any write.

        Returns:
            True if an element was removed
        """
        if check_exists:
            doc_id, items = await self._current_items(doc_filter)
            self._element_at(items, index)
            doc_filter = {"_id": doc_id}

        blanked = await self.collection.update_one(
            doc_filter, {"$unset": {f"{self.field}.{index}": ""}}
        )
        if blanked.matched_count == 0:
            raise NotFoundException(self.not_found_message)

        await self.collection.update_one(
            doc_filter,
            {"$pull": {self.field: None}, "$set": self._stamp(extra_set)},
        )
        logger.info("array_item_deleted", field=self.field, index=index)
        return blanked.modified_count > 0
