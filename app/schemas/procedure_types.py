"""Procedure type schemas for request validation."""

from pydantic import BaseModel, Field

from app.schemas.common import PatchModel, TrimmedStr


class ProcedureTypeCreate(BaseModel):
    """Schema for creating a procedure type."""

    name: TrimmedStr
    cost: float = Field(..., ge=0)
    active: bool = True


class ProcedureTypeUpdate(PatchModel):
    """Schema for partially updating a procedure type."""

    name: TrimmedStr | None = None
    cost: float | None = Field(None, ge=0)
    active: bool | None = None
