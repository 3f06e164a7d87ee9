"""Appointment schemas for request validation."""

from enum import Enum

from pydantic import AliasChoices, BaseModel, Field

from app.schemas.common import ObjectIdStr, PatchModel, TrimmedStr, UtcDatetime


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"


class LineItem(BaseModel):
    """Billed procedure within an appointment."""

    procedure_type_id: ObjectIdStr | None = None
    name: str = Field(..., min_length=1)
    unit_cost: float = Field(..., ge=0, validation_alias=AliasChoices("unit_cost", "cost"))
    quantity: int = Field(1, ge=1, validation_alias=AliasChoices("quantity", "qty"))


class AppointmentCreate(BaseModel):
    """Schema for creating an appointment.

    Without ``total`` the total is computed from the line items.
    """

    date: UtcDatetime
    patient_id: TrimmedStr = Field(..., description="Patient natural key")
    user_id: ObjectIdStr = Field(..., description="Attending staff user")
    status: AppointmentStatus = AppointmentStatus.PENDING
    reason: str | None = None
    line_items: list[LineItem] | None = None
    total: float | None = Field(None, ge=0)


class AppointmentUpdate(PatchModel):
    """Schema for partially updating an appointment.

    Sending ``line_items`` without ``total`` recomputes the total.
    """

    date: UtcDatetime | None = None
    patient_id: TrimmedStr | None = None
    user_id: ObjectIdStr | None = None
    status: AppointmentStatus | None = None
    reason: str | None = None
    line_items: list[LineItem] | None = None
    total: float | None = Field(None, ge=0)
