"""Clinical history service for business logic."""

from datetime import UTC, datetime
from typing import Any

import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import ConflictException, NotFoundException
from app.core.identifiers import require_object_id
from app.core.line_items import ArrayFieldMutator
from app.core.query import Pagination, day_range
from app.schemas.clinical_histories import (
    ClinicalHistoryCreate,
    ClinicalHistoryUpdate,
    PerformedProcedure,
    PerformedProcedurePatch,
    ProcedureAppend,
)
from app.schemas.common import serialize_document, to_utc

logger = structlog.get_logger()

HISTORIES_COLLECTION = "clinical_histories"
FREE_FORM_SECTIONS = ("medical_history", "allergies", "prescriptions")


def _parse_date(value: Any) -> Any:
    if isinstance(value, dict) and "$date" in value:
        value = value["$date"]
    if isinstance(value, str):
        try:
            return to_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            return value
    return value


def normalize_dated_items(items: list[Any]) -> list[Any]:
    """Convert date-like values of object entries into datetimes.

    Keys containing ``date`` holding an ISO string (or an extended-JSON
    ``{"$date": ...}``) are parsed; unparseable values are kept as sent.
    """
    out = []
    for item in items:
        if isinstance(item, dict):
            item = {
                key: _parse_date(value) if "date" in key.lower() else value
                for key, value in item.items()
            }
        out.append(item)
    return out


class ClinicalHistoryService:
    """Service for clinical histories. One history per patient."""

    def __init__(self, db: AsyncDatabase):
        """Initialize service with database handle."""
        self.db = db
        self.collection = db[HISTORIES_COLLECTION]
        self.procedures = ArrayFieldMutator(
            self.collection,
            "procedures",
            PerformedProcedure,
            not_found_message="Clinical history not found",
        )

    async def list_histories(
        self, pagination: Pagination, patient_id: str | None = None
    ) -> tuple[list[dict], int]:
        """List histories, newest first."""
        query = {"patient_id": patient_id} if patient_id else {}
        cursor = (
            self.collection.find(query)
            .sort([("created_at", -1)])
            .skip(pagination.skip)
            .limit(pagination.limit)
        )
        docs = await cursor.to_list(None)
        total = await self.collection.count_documents(query)
        return [serialize_document(doc) for doc in docs], total

    async def get_history(self, history_id: str) -> dict:
        """Get a history by identifier."""
        oid = require_object_id(history_id)
        doc = await self.collection.find_one({"_id": oid})
        if not doc:
            raise NotFoundException("Clinical history not found")
        return serialize_document(doc)

    async def create_history(self, data: ClinicalHistoryCreate) -> str:
        """Create a patient's history. A second history for the same patient conflicts."""
        now = datetime.now(UTC)
        doc: dict[str, Any] = {"patient_id": data.patient_id}
        for section in FREE_FORM_SECTIONS:
            doc[section] = normalize_dated_items(getattr(data, section))
        doc["procedures"] = [item.model_dump() for item in data.procedures]
        doc["created_at"] = now
        doc["updated_at"] = now

        try:
            result = await self.collection.insert_one(doc)
        except DuplicateKeyError as e:
            raise ConflictException("Clinical history already exists for this patient") from e
        return str(result.inserted_id)

    async def update_history(self, history_id: str, data: ClinicalHistoryUpdate) -> int:
        """Replace whole sections of a history."""
        oid = require_object_id(history_id)
        values: dict[str, Any] = {}
        if data.patient_id is not None:
            values["patient_id"] = data.patient_id
        for section in FREE_FORM_SECTIONS:
            items = getattr(data, section)
            if items is not None:
                values[section] = normalize_dated_items(items)
        if data.procedures is not None:
            values["procedures"] = [item.model_dump() for item in data.procedures]
        values["updated_at"] = datetime.now(UTC)

        try:
            result = await self.collection.update_one({"_id": oid}, {"$set": values})
        except DuplicateKeyError as e:
            raise ConflictException("Clinical history already exists for this patient") from e
        if result.matched_count == 0:
            raise NotFoundException("Clinical history not found")
        return result.modified_count

    async def delete_history(self, history_id: str) -> int:
        """Delete a history."""
        oid = require_object_id(history_id)
        result = await self.collection.delete_one({"_id": oid})
        if result.deleted_count == 0:
            raise NotFoundException("Clinical history not found")
        return result.deleted_count

    async def list_procedures(
        self,
        patient_id: str,
        date_from: str | None = None,
        date_to: str | None = None,
    ) -> dict[str, Any]:
        """Performed procedures of a patient, optionally within whole days."""
        bounds = day_range(date_from, date_to)
        doc = await self.collection.find_one({"patient_id": patient_id}, {"procedures": 1})
        if not doc:
            raise NotFoundException("Clinical history not found")

        selected = []
        for item in doc.get("procedures") or []:
            if not item:
                continue
            performed = item.get("date")
            if isinstance(performed, datetime):
                performed = to_utc(performed)
                if "$gte" in bounds and performed < bounds["$gte"]:
                    continue
                if "$lte" in bounds and performed > bounds["$lte"]:
                    continue
            elif bounds:
                continue
            selected.append(item)

        return {"patient_id": patient_id, "procedures": serialize_document(selected)}

    async def append_procedures(self, data: ProcedureAppend) -> dict[str, Any]:
        """
        Append performed procedures, creating the history on first use.

        Returns:
            Whether the history was created and how many items were added
        """
        items = [item.model_dump() for item in data.items]
        now = datetime.now(UTC)
        result = await self.collection.update_one(
            {"patient_id": data.patient_id},
            {
                "$setOnInsert": {
                    "patient_id": data.patient_id,
                    **{section: [] for section in FREE_FORM_SECTIONS},
                    "created_at": now,
                },
                "$push": {"procedures": {"$each": items}},
                "$set": {"updated_at": now},
            },
            upsert=True,
        )
        return {"upserted": result.upserted_id is not None, "added": len(items)}

    async def patch_procedure(
        self, patient_id: str, index: int, data: PerformedProcedurePatch
    ) -> int:
        """Merge a partial procedure over the one at ``index``."""
        patch = data.model_dump(exclude_unset=True)
        return await self.procedures.patch_at({"patient_id": patient_id}, index, patch)

    async def delete_procedure(self, patient_id: str, index: int) -> bool:
        """Remove the procedure at ``index``."""
        return await self.procedures.delete_at(
            {"patient_id": patient_id}, index, check_exists=True
        )
