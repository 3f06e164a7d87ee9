"""Clinical history endpoints."""

from typing import Any

from fastapi import APIRouter, Path, Query, status

from app.core.query import Pagination
from app.dependencies import Database
from app.schemas.clinical_histories import (
    ClinicalHistoryCreate,
    ClinicalHistoryUpdate,
    PerformedProcedurePatch,
    ProcedureAppend,
)
from app.services.clinical_history_service import ClinicalHistoryService

router = APIRouter(prefix="/clinical-histories", tags=["Clinical histories"])


@router.get("", summary="List clinical histories")
async def list_histories(
    db: Database,
    patient_id: str | None = Query(None),
    page: int | None = Query(None),
    limit: int | None = Query(None),
) -> dict[str, Any]:
    pagination = Pagination.from_query(page, limit)
    service = ClinicalHistoryService(db)
    data, total = await service.list_histories(pagination, patient_id=patient_id)
    return pagination.envelope(data, total)


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create clinical history")
async def create_history(data: ClinicalHistoryCreate, db: Database) -> dict[str, Any]:
    """Create a patient's history. 409 if the patient already has one."""
    service = ClinicalHistoryService(db)
    return {"ok": True, "id": await service.create_history(data)}


@router.post("/procedures", summary="Append performed procedures")
async def append_procedures(data: ProcedureAppend, db: Database) -> dict[str, Any]:
    """
    Append one ``procedure`` or several ``procedures`` to a patient's history.

    The history is created on first use.

    Args:
        data: Patient key and procedures
        db: Database handle

    Returns:
        Whether the history was created and how many procedures were added
    """
    service = ClinicalHistoryService(db)
    return {"ok": True, **await service.append_procedures(data)}


@router.get("/{patient_id}/procedures", summary="List performed procedures")
async def list_procedures(
    patient_id: str,
    db: Database,
    date_from: str | None = Query(None, alias="from", description="YYYY-MM-DD"),
    date_to: str | None = Query(None, alias="to", description="YYYY-MM-DD"),
) -> dict[str, Any]:
    """Procedures of a patient, optionally limited to a range of days."""
    service = ClinicalHistoryService(db)
    return {
        "ok": True,
        "data": await service.list_procedures(patient_id, date_from=date_from, date_to=date_to),
    }


@router.patch("/{patient_id}/procedures/{index}", summary="Update performed procedure")
async def patch_procedure(
    patient_id: str,
    data: PerformedProcedurePatch,
    db: Database,
    index: int = Path(..., ge=0),
) -> dict[str, Any]:
    """
    Merge the sent fields over the procedure at ``index``.

    Raises:
        NotFoundException: If the history or the position does not exist
    """
    service = ClinicalHistoryService(db)
    return {"ok": True, "modified": await service.patch_procedure(patient_id, index, data)}


@router.delete("/{patient_id}/procedures/{index}", summary="Delete performed procedure")
async def delete_procedure(
    patient_id: str,
    db: Database,
    index: int = Path(..., ge=0),
) -> dict[str, Any]:
    """Remove the procedure at ``index``; later procedures move up one position."""
    service = ClinicalHistoryService(db)
    return {"ok": True, "deleted": await service.delete_procedure(patient_id, index)}


@router.get("/{history_id}", summary="Get clinical history")
async def get_history(history_id: str, db: Database) -> dict[str, Any]:
    service = ClinicalHistoryService(db)
    return {"ok": True, "data": await service.get_history(history_id)}


@router.patch("/{history_id}", summary="Update clinical history")
async def update_history(
    history_id: str, data: ClinicalHistoryUpdate, db: Database
) -> dict[str, Any]:
    """Replace whole sections of a history."""
    service = ClinicalHistoryService(db)
    return {"ok": True, "modified": await service.update_history(history_id, data)}


@router.delete("/{history_id}", summary="Delete clinical history")
async def delete_history(history_id: str, db: Database) -> dict[str, Any]:
    service = ClinicalHistoryService(db)
    return {"ok": True, "deleted": await service.delete_history(history_id)}
