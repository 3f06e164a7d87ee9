"""Patient endpoints."""

from typing import Any

from fastapi import APIRouter, Query, Response, status

from app.core.query import Pagination
from app.dependencies import Database
from app.schemas.patients import PatientUpdate, PatientUpsert
from app.services.patient_service import PatientService

router = APIRouter(prefix="/patients", tags=["Patients"])


@router.get("", summary="Search patients")
async def list_patients(
    db: Database,
    q: str | None = Query(None, description="Matches key, names, surnames or email"),
    page: int | None = Query(None),
    limit: int | None = Query(None),
) -> dict[str, Any]:
    """Search patients, ordered by surnames then names."""
    pagination = Pagination.from_query(page, limit)
    service = PatientService(db)
    data, total = await service.list_patients(pagination, q=q)
    return pagination.envelope(data, total)


@router.get("/{patient_id}", summary="Get patient")
async def get_patient(patient_id: str, db: Database) -> dict[str, Any]:
    service = PatientService(db)
    return {"ok": True, "data": await service.get_patient(patient_id)}


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create or update patient",
    responses={200: {"description": "Existing patient updated"}},
)
async def upsert_patient(data: PatientUpsert, response: Response, db: Database) -> dict[str, Any]:
    """
    Insert a patient keyed by ``_id``, or overwrite the sent fields of an existing one.

    Args:
        data: Patient fields
        response: Used to answer 200 when no new patient was inserted
        db: Database handle

    Returns:
        Whether the patient was inserted
    """
    service = PatientService(db)
    upserted = await service.upsert_patient(data)
    if not upserted:
        response.status_code = status.HTTP_200_OK
    return {"ok": True, "upserted": upserted}


@router.patch("/{patient_id}", summary="Update patient")
async def update_patient(patient_id: str, data: PatientUpdate, db: Database) -> dict[str, Any]:
    service = PatientService(db)
    return {"ok": True, "modified": await service.update_patient(patient_id, data)}


@router.delete("/{patient_id}", summary="Delete patient")
async def delete_patient(patient_id: str, db: Database) -> dict[str, Any]:
    """Delete a patient. Refused with 409 while appointments or a history reference it."""
    service = PatientService(db)
    return {"ok": True, "deleted": await service.delete_patient(patient_id)}
