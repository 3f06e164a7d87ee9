"""Patient service for business logic."""

from datetime import UTC, datetime

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from app.core.exceptions import NotFoundException
from app.core.query import Pagination, contains
from app.core.references import Reference, count_references, ensure_deletable
from app.schemas.common import serialize_document
from app.schemas.patients import PatientUpdate, PatientUpsert

logger = structlog.get_logger()

PATIENTS_COLLECTION = "patients"


class PatientService:
    """Service for patient operations.

    Patients are addressed by their natural key, so no ObjectId parsing
    happens here.
    """

    def __init__(self, db: AsyncDatabase):
        """Initialize service with database handle."""
        self.db = db
        self.collection = db[PATIENTS_COLLECTION]

    async def list_patients(self, pagination: Pagination, q: str | None = None) -> tuple[list[dict], int]:
        """Search patients by key, names, surnames or email."""
        query = {}
        if q:
            rx = contains(q)
            query = {
                "$or": [
                    {"_id": rx},
                    {"names": rx},
                    {"surnames": rx},
                    {"email": rx},
                ]
            }

        cursor = (
            self.collection.find(query, {"created_at": 0, "updated_at": 0})
            .sort([("surnames", 1), ("names", 1)])
            .skip(pagination.skip)
            .limit(pagination.limit)
        )
        docs = await cursor.to_list(None)
        total = await self.collection.count_documents(query)
        return [serialize_document(doc) for doc in docs], total

    async def get_patient(self, patient_id: str) -> dict:
        """Get a patient by natural key."""
        doc = await self.collection.find_one({"_id": str(patient_id)})
        if not doc:
            raise NotFoundException("Patient not found")
        return serialize_document(doc)

    async def upsert_patient(self, data: PatientUpsert) -> bool:
        """
        Insert a patient or replace the sent fields of an existing one.

        Returns:
            True if a new patient was inserted
        """
        fields = data.model_dump(mode="json", exclude={"id"}, exclude_none=True)
        now = datetime.now(UTC)
        result = await self.collection.update_one(
            {"_id": data.id},
            {
                "$setOnInsert": {"created_at": now},
                "$set": {**fields, "updated_at": now},
            },
            upsert=True,
        )
        upserted = result.upserted_id is not None
        logger.info("patient_upserted", patient_id=data.id, inserted=upserted)
        return upserted

    async def update_patient(self, patient_id: str, data: PatientUpdate) -> int:
        """Partially update a patient."""
        patch = data.model_dump(mode="json", exclude_none=True)
        patch["updated_at"] = datetime.now(UTC)
        result = await self.collection.update_one({"_id": str(patient_id)}, {"$set": patch})
        if result.matched_count == 0:
            raise NotFoundException("Patient not found")
        return result.modified_count

    async def delete_patient(self, patient_id: str) -> int:
        """
        Delete a patient that nothing references.

        Appointments and the clinical history anchor clinical data, so there
        is no override.
        """
        patient_id = str(patient_id)
        counts = await count_references(
            self.db,
            [
                Reference("appointments", "appointments", {"patient_id": patient_id}),
                Reference("clinical_history", "clinical_histories", {"patient_id": patient_id}),
            ],
        )
        ensure_deletable(
            counts,
            "Cannot delete: patient has {total} active reference(s)",
            counts_key="refs",
        )

        result = await self.collection.delete_one({"_id": patient_id})
        if result.deleted_count == 0:
            raise NotFoundException("Patient not found")
        return result.deleted_count
