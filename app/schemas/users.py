"""Staff user schemas for request validation."""

from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, EmailStr, field_validator, model_validator

from app.core.roles import RoleName
from app.schemas.common import ObjectIdStr, PatchModel, TrimmedStr, blank_to_none


class UserStatus(str, Enum):
    """Account status."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


def _fold_case(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


StatusInput = Annotated[UserStatus, BeforeValidator(_fold_case)]

UPDATABLE_FIELDS = (
    "names",
    "surnames",
    "email",
    "status",
    "role_name",
    "role_id",
    "address",
    "phone",
    "specialty",
)


class UserCreate(BaseModel):
    """Schema for creating a staff user."""

    names: TrimmedStr
    surnames: TrimmedStr
    email: EmailStr
    status: StatusInput = UserStatus.ACTIVE
    role_name: RoleName | None = None
    role_id: ObjectIdStr | None = None
    address: str | None = None
    phone: str | None = None
    specialty: str | list[str] | None = None
    external_user_id: str | None = None

    @field_validator("address", "phone")
    @classmethod
    def strip_optional(cls, v: str | None) -> str | None:
        """Trim optional strings."""
        return blank_to_none(v)

    @model_validator(mode="after")
    def require_role(self):
        """A role must be given by name or by identifier."""
        if self.role_name is None and self.role_id is None:
            raise ValueError("role_name or role_id is required")
        return self


class UserUpdate(PatchModel):
    """Schema for partially updating a staff user.

    ``external_user_id`` selects the user to update instead of the path id.
    """

    external_user_id: str | None = None
    names: TrimmedStr | None = None
    surnames: TrimmedStr | None = None
    email: EmailStr | None = None
    status: StatusInput | None = None
    role_name: RoleName | None = None
    role_id: ObjectIdStr | None = None
    address: str | None = None
    phone: str | None = None
    specialty: str | list[str] | None = None

    @model_validator(mode="after")
    def require_updatable_field(self):
        """At least one field other than the selector must be sent."""
        if not any(getattr(self, name) is not None for name in UPDATABLE_FIELDS):
            raise ValueError("Nothing to update")
        return self

