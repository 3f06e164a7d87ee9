"""Appointment service for business logic."""

from datetime import UTC, datetime
from typing import Any

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from app.core.exceptions import NotFoundException
from app.core.identifiers import require_object_id
from app.core.query import Pagination, day_range
from app.core.totals import normalize_line_items, resolve_total
from app.schemas.appointments import AppointmentCreate, AppointmentStatus, AppointmentUpdate
from app.schemas.common import serialize_document

logger = structlog.get_logger()

APPOINTMENTS_COLLECTION = "appointments"
PATIENTS_COLLECTION = "patients"


class AppointmentService:
    """Service for managing appointments."""

    def __init__(self, db: AsyncDatabase):
        """Initialize service with database handle."""
        self.db = db
        self.collection = db[APPOINTMENTS_COLLECTION]

    async def _with_patient_names(self, docs: list[dict]) -> list[dict]:
        """Attach ``patient_name`` from the patients collection."""
        patient_ids = list({doc.get("patient_id") for doc in docs if doc.get("patient_id")})
        names: dict[str, str] = {}
        if patient_ids:
            cursor = self.db[PATIENTS_COLLECTION].find(
                {"_id": {"$in": patient_ids}}, {"names": 1, "surnames": 1}
            )
            for patient in await cursor.to_list(None):
                names[patient["_id"]] = " ".join(
                    part for part in (patient.get("names"), patient.get("surnames")) if part
                )

        out = []
        for doc in docs:
            doc["patient_name"] = names.get(doc.get("patient_id"))
            out.append(serialize_document(doc))
        return out

    async def create_appointment(self, data: AppointmentCreate) -> dict[str, Any]:
        """
        Create a new appointment.

        Args:
            data: Appointment creation data

        Returns:
            Identifier and stored total
        """
        line_items = normalize_line_items(data.line_items)
        now = datetime.now(UTC)
        doc = {
            "date": data.date,
            "patient_id": data.patient_id,
            "user_id": require_object_id(data.user_id, "user_id"),
            "status": data.status.value,
            "reason": (data.reason or "").strip() or None,
            "line_items": line_items,
            "total": resolve_total(data.total, True, line_items),
            "created_at": now,
            "updated_at": now,
        }

        result = await self.collection.insert_one(doc)
        logger.info(
            "appointment_created",
            appointment_id=str(result.inserted_id),
            total=doc["total"],
        )
        return {"id": str(result.inserted_id), "total": doc["total"]}

    async def list_appointments(
        self,
        pagination: Pagination,
        patient_id: str | None = None,
        user_id: str | None = None,
        status: AppointmentStatus | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
    ) -> tuple[list[dict], int]:
        """List appointments, most recent first."""
        query: dict[str, Any] = {}
        if patient_id:
            query["patient_id"] = patient_id
        if user_id:
            query["user_id"] = require_object_id(user_id, "user_id")
        if status:
            query["status"] = status.value
        date_condition = day_range(date_from, date_to)
        if date_condition:
            query["date"] = date_condition

        cursor = (
            self.collection.find(query)
            .sort([("date", -1)])
            .skip(pagination.skip)
            .limit(pagination.limit)
        )
        docs = await cursor.to_list(None)
        total = await self.collection.count_documents(query)
        return await self._with_patient_names(docs), total

    async def list_upcoming(
        self,
        pagination: Pagination,
        user_id: str | None = None,
    ) -> tuple[list[dict], int]:
        """List appointments from now on, soonest first."""
        query: dict[str, Any] = {"date": {"$gte": datetime.now(UTC)}}
        if user_id:
            query["user_id"] = require_object_id(user_id, "user_id")

        cursor = (
            self.collection.find(query)
            .sort([("date", 1)])
            .skip(pagination.skip)
            .limit(pagination.limit)
        )
        docs = await cursor.to_list(None)
        total = await self.collection.count_documents(query)
        return await self._with_patient_names(docs), total

    async def get_appointment(self, appointment_id: str) -> dict:
        """Get an appointment with the patient's name."""
        oid = require_object_id(appointment_id)
        doc = await self.collection.find_one({"_id": oid})
        if not doc:
            raise NotFoundException("Appointment not found")
        return (await self._with_patient_names([doc]))[0]

    async def update_appointment(self, appointment_id: str, data: AppointmentUpdate) -> int:
        """
        Partially update an appointment.

        An explicit ``total`` is stored as sent. Otherwise the total is
        recomputed only when ``line_items`` is part of the update.

        Returns:
            Number of modified documents
        """
        oid = require_object_id(appointment_id)
        values: dict[str, Any] = {"updated_at": datetime.now(UTC)}

        if data.date is not None:
            values["date"] = data.date
        if data.patient_id is not None:
            values["patient_id"] = data.patient_id
        if data.user_id is not None:
            values["user_id"] = require_object_id(data.user_id, "user_id")
        if data.status is not None:
            values["status"] = data.status.value
        if "reason" in data.model_fields_set:
            values["reason"] = (data.reason or "").strip() or None

        line_items = None
        if data.line_items is not None:
            line_items = normalize_line_items(data.line_items)
            values["line_items"] = line_items

        total = resolve_total(data.total, line_items is not None, line_items)
        if total is not None:
            values["total"] = total

        result = await self.collection.update_one({"_id": oid}, {"$set": values})
        if result.matched_count == 0:
            raise NotFoundException("Appointment not found")
        return result.modified_count

    async def delete_appointment(self, appointment_id: str, soft: bool = False) -> dict[str, bool]:
        """Cancel (soft) or remove (hard) an appointment."""
        oid = require_object_id(appointment_id)

        if soft:
            result = await self.collection.update_one(
                {"_id": oid},
                {
                    "$set": {
                        "status": AppointmentStatus.CANCELLED.value,
                        "updated_at": datetime.now(UTC),
                    }
                },
            )
            if result.matched_count == 0:
                raise NotFoundException("Appointment not found")
            return {"softDeleted": True}

        result = await self.collection.delete_one({"_id": oid})
        if result.deleted_count == 0:
            raise NotFoundException("Appointment not found")
        return {"deleted": True}
