"""Role schemas for request validation."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.roles import RoleName
from app.schemas.common import PatchModel, TrimmedStr, blank_to_none


class RoleCreate(BaseModel):
    """Schema for creating a catalog role."""

    name: RoleName
    description: str | None = None
    permissions: list[TrimmedStr] = Field(default_factory=list)

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str | None) -> str | None:
        """Trim description."""
        return blank_to_none(v)


class RoleUpdate(PatchModel):
    """Schema for updating a role. The name cannot change."""

    model_config = ConfigDict(extra="forbid")

    description: str | None = None
    permissions: list[TrimmedStr] | None = None
