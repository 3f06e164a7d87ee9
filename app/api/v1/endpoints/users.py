"""Staff user endpoints."""

from typing import Any

from fastapi import APIRouter, Query, status

from app.core.query import Pagination
from app.dependencies import Database
from app.schemas.users import UserCreate, UserUpdate
from app.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", summary="List users")
async def list_users(
    db: Database,
    search: str | None = Query(None),
    role: str | None = Query(None),
    status_filter: str | None = Query(None, alias="status"),
    page: int | None = Query(None),
    limit: int | None = Query(None),
) -> dict[str, Any]:
    """
    List staff users.

    Args:
        db: Database handle
        search: Text matched against names, surnames, email and role
        role: Exact role name
        status_filter: Exact status
        page: Page number
        limit: Items per page (max 200)

    Returns:
        Paginated envelope
    """
    pagination = Pagination.from_query(page, limit)
    service = UserService(db)
    data, total = await service.list_users(
        pagination,
        search=search,
        role=role,
        status=status_filter.strip().lower() if status_filter else None,
    )
    return pagination.envelope(data, total)


@router.get("/{user_id}", summary="Get user by ID")
async def get_user(user_id: str, db: Database) -> dict[str, Any]:
    """Get a single user."""
    service = UserService(db)
    return {"ok": True, "data": await service.get_user(user_id)}


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create user")
async def create_user(data: UserCreate, db: Database) -> dict[str, Any]:
    """Create a staff user. Role fields are reconciled against the catalog."""
    service = UserService(db)
    return {"ok": True, "id": await service.create_user(data)}


@router.patch("/{user_id}", summary="Update user")
async def update_user(user_id: str, data: UserUpdate, db: Database) -> dict[str, Any]:
    """Partially update a user, addressed by path id or by ``external_user_id``."""
    service = UserService(db)
    return {"ok": True, "modified": await service.update_user(user_id, data)}


@router.delete("/{user_id}", summary="Delete user")
async def delete_user(user_id: str, db: Database) -> dict[str, Any]:
    service = UserService(db)
    return {"ok": True, "deleted": await service.delete_user(user_id)}
