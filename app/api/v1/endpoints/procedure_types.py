"""Procedure type catalog endpoints."""

from typing import Any

from fastapi import APIRouter, Query, status

from app.core.query import Pagination, parse_bool
from app.dependencies import Database
from app.schemas.procedure_types import ProcedureTypeCreate, ProcedureTypeUpdate
from app.services.procedure_type_service import ProcedureTypeService

router = APIRouter(prefix="/procedure-types", tags=["Procedure types"])


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create procedure type")
async def create_procedure_type(data: ProcedureTypeCreate, db: Database) -> dict[str, Any]:
    service = ProcedureTypeService(db)
    return {"ok": True, "id": await service.create_procedure_type(data)}


@router.get("", summary="List procedure types")
async def list_procedure_types(
    db: Database,
    q: str | None = Query(None),
    active: str | None = Query(None, description="Boolean-ish: 1/0, true/false, yes/no"),
    page: int | None = Query(None),
    limit: int | None = Query(None),
) -> dict[str, Any]:
    """
    List procedure types by name.

    An unrecognized ``active`` value is ignored rather than rejected.
    """
    pagination = Pagination.from_query(page, limit)
    service = ProcedureTypeService(db)
    data, total = await service.list_procedure_types(pagination, q=q, active=parse_bool(active))
    return pagination.envelope(data, total)


@router.get("/{procedure_type_id}", summary="Get procedure type")
async def get_procedure_type(procedure_type_id: str, db: Database) -> dict[str, Any]:
    service = ProcedureTypeService(db)
    return {"ok": True, "data": await service.get_procedure_type(procedure_type_id)}


@router.patch("/{procedure_type_id}", summary="Update procedure type")
async def update_procedure_type(
    procedure_type_id: str, data: ProcedureTypeUpdate, db: Database
) -> dict[str, Any]:
    service = ProcedureTypeService(db)
    return {"ok": True, "modified": await service.update_procedure_type(procedure_type_id, data)}


@router.delete("/{procedure_type_id}", summary="Delete procedure type")
async def delete_procedure_type(
    procedure_type_id: str,
    db: Database,
    force: str | None = Query(None, description="1 to delete even if appointments reference it"),
) -> dict[str, Any]:
    """
    Delete a procedure type.

    Args:
        procedure_type_id: Procedure type ID
        db: Database handle
        force: Override the reference check

    Returns:
        Number of deleted documents

    Raises:
        ConflictException: If referenced by appointments and not forced
    """
    service = ProcedureTypeService(db)
    deleted = await service.delete_procedure_type(
        procedure_type_id, force=bool(parse_bool(force, False))
    )
    return {"ok": True, "deleted": deleted}
