"""Role catalog endpoints."""

from typing import Any

from fastapi import APIRouter, Query, status

from app.core.query import Pagination
from app.core.roles import ROLE_NAMES
from app.dependencies import Database
from app.schemas.roles import RoleCreate, RoleUpdate
from app.services.role_service import RoleService

router = APIRouter(prefix="/roles", tags=["Roles"])


@router.get("/catalog", summary="Official role names")
async def role_catalog() -> dict[str, Any]:
    """The closed set of role names users may hold."""
    return {"ok": True, "data": list(ROLE_NAMES)}


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create role")
async def create_role(data: RoleCreate, db: Database) -> dict[str, Any]:
    service = RoleService(db)
    return {"ok": True, "id": await service.create_role(data)}


@router.get("", summary="List roles")
async def list_roles(
    db: Database,
    q: str | None = Query(None),
    page: int | None = Query(None),
    limit: int | None = Query(None),
) -> dict[str, Any]:
    pagination = Pagination.from_query(page, limit)
    service = RoleService(db)
    data, total = await service.list_roles(pagination, q=q)
    return pagination.envelope(data, total)


@router.get("/{role_id}", summary="Get role")
async def get_role(role_id: str, db: Database) -> dict[str, Any]:
    service = RoleService(db)
    return {"ok": True, "data": await service.get_role(role_id)}


@router.patch("/{role_id}", summary="Update role")
async def update_role(role_id: str, data: RoleUpdate, db: Database) -> dict[str, Any]:
    """Update description and permissions. The name is immutable."""
    service = RoleService(db)
    return {"ok": True, "modified": await service.update_role(role_id, data)}


@router.delete("/{role_id}", summary="Delete role")
async def delete_role(role_id: str, db: Database) -> dict[str, Any]:
    """
    Delete a role.

    Refused with 409 and ``inUseBy`` counts while any user holds the role,
    whatever query flags are sent.
    """
    service = RoleService(db)
    return {"ok": True, "deleted": await service.delete_role(role_id)}
