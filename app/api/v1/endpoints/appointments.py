"""Appointment endpoints."""

from typing import Any

from fastapi import APIRouter, Query, status

from app.core.query import Pagination, parse_bool
from app.dependencies import Database
from app.schemas.appointments import AppointmentCreate, AppointmentStatus, AppointmentUpdate
from app.services.appointment_service import AppointmentService

router = APIRouter(prefix="/appointments", tags=["Appointments"])

DEFAULT_LIMIT = 100
MAX_LIMIT = 500


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    tags=["Appointments"],
    summary="Create new appointment",
)
async def create_appointment(data: AppointmentCreate, db: Database) -> dict[str, Any]:
    """
    Create a new appointment.

    Args:
        data: Appointment creation data
        db: Database handle

    Returns:
        Identifier and stored total
    """
    service = AppointmentService(db)
    created = await service.create_appointment(data)
    return {"ok": True, **created}


@router.get(
    "",
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="List appointments",
)
async def list_appointments(
    db: Database,
    patient_id: str | None = Query(None),
    user_id: str | None = Query(None),
    status_filter: AppointmentStatus | None = Query(None, alias="status"),
    date_from: str | None = Query(None, alias="from", description="YYYY-MM-DD"),
    date_to: str | None = Query(None, alias="to", description="YYYY-MM-DD"),
    page: int | None = Query(None),
    limit: int | None = Query(None),
) -> dict[str, Any]:
    """
    List appointments with filtering, most recent first.

    Args:
        db: Database handle
        patient_id: Filter by patient
        user_id: Filter by attending user
        status_filter: Filter by status
        date_from: First day included
        date_to: Last day included
        page: Page number
        limit: Items per page

    Returns:
        Paginated list of appointments with ``patient_name``
    """
    pagination = Pagination.from_query(page, limit, default_limit=DEFAULT_LIMIT, max_limit=MAX_LIMIT)
    service = AppointmentService(db)
    data, total = await service.list_appointments(
        pagination,
        patient_id=patient_id,
        user_id=user_id,
        status=status_filter,
        date_from=date_from,
        date_to=date_to,
    )
    return pagination.envelope(data, total)


@router.get(
    "/upcoming",
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="List upcoming appointments",
)
async def list_upcoming_appointments(
    db: Database,
    user_id: str | None = Query(None),
    page: int | None = Query(None),
    limit: int | None = Query(None),
) -> dict[str, Any]:
    """List appointments from now on, soonest first."""
    pagination = Pagination.from_query(page, limit, default_limit=DEFAULT_LIMIT, max_limit=MAX_LIMIT)
    service = AppointmentService(db)
    data, total = await service.list_upcoming(pagination, user_id=user_id)
    return pagination.envelope(data, total)


@router.get(
    "/{appointment_id}",
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Get appointment by ID",
)
async def get_appointment(appointment_id: str, db: Database) -> dict[str, Any]:
    """
    Get a specific appointment by ID.

    Args:
        appointment_id: Appointment ID
        db: Database handle

    Returns:
        Appointment details

    Raises:
        BadRequestException: If the ID is malformed
        NotFoundException: If appointment not found
    """
    service = AppointmentService(db)
    return {"ok": True, "data": await service.get_appointment(appointment_id)}


@router.patch(
    "/{appointment_id}",
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Update appointment",
)
async def update_appointment(
    appointment_id: str,
    data: AppointmentUpdate,
    db: Database,
) -> dict[str, Any]:
    """
    Partially update an appointment.

    Args:
        appointment_id: Appointment ID
        data: Fields to update
        db: Database handle

    Returns:
        Number of modified documents
    """
    service = AppointmentService(db)
    return {"ok": True, "modified": await service.update_appointment(appointment_id, data)}


@router.delete(
    "/{appointment_id}",
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Cancel or delete appointment",
)
async def delete_appointment(
    appointment_id: str,
    db: Database,
    soft: str | None = Query(None, description="true to cancel instead of deleting"),
) -> dict[str, Any]:
    """
    Delete an appointment.

    With ``?soft=true`` the appointment is kept and its status set to Cancelled.
    """
    service = AppointmentService(db)
    result = await service.delete_appointment(appointment_id, soft=bool(parse_bool(soft, False)))
    return {"ok": True, **result}
