"""Laboratory order schemas for request validation."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from app.schemas.common import ObjectIdStr, PatchModel, TrimmedStr, UtcDatetime, blank_to_none


class LabOrderStatus(str, Enum):
    """Laboratory order status enumeration."""

    PENDING = "Pending"
    IN_PRODUCTION = "InProduction"
    READY_TO_SHIP = "ReadyToShip"
    DELIVERED = "Delivered"
    REJECTED = "Rejected"


class Product(BaseModel):
    """Product requested from the laboratory."""

    product_type: TrimmedStr
    specifications: str | None = None
    quantity: int = Field(1, ge=1)

    @field_validator("specifications")
    @classmethod
    def strip_specifications(cls, v: str | None) -> str | None:
        """Trim specifications."""
        return blank_to_none(v)


class ProductPartial(BaseModel):
    """Fields of a product to merge over the stored one."""

    product_type: TrimmedStr | None = None
    specifications: str | None = None
    quantity: int | None = Field(None, ge=1)

    @field_validator("specifications")
    @classmethod
    def strip_specifications(cls, v: str | None) -> str | None:
        """Trim specifications."""
        return v.strip() if v is not None else None


class ProductPatchOp(BaseModel):
    """Merge-patch of the product at ``index``."""

    index: int = Field(..., ge=0)
    item: ProductPartial


class LabOrderCreate(BaseModel):
    """Schema for creating a laboratory order."""

    appointment_id: ObjectIdStr
    user_id: ObjectIdStr
    creation_date: UtcDatetime | None = None
    status: LabOrderStatus = LabOrderStatus.PENDING
    products: list[Product] = Field(..., min_length=1)
    notes: Any = None


ARRAY_OPERATIONS = ("set_products", "push_products", "product_patch", "product_delete_index")


class LabOrderUpdate(PatchModel):
    """Schema for updating a laboratory order.

    Besides ``status`` and ``notes``, at most one product operation may be sent:
    replace all, append, merge-patch by index or delete by index.
    """

    status: LabOrderStatus | None = None
    notes: Any = None
    set_products: list[Product] | None = Field(None, min_length=1)
    push_products: list[Product] | None = Field(None, min_length=1)
    product_patch: ProductPatchOp | None = None
    product_delete_index: int | None = Field(None, ge=0)

    @model_validator(mode="after")
    def single_array_operation(self):
        """Reject requests combining several product operations."""
        sent = [name for name in ARRAY_OPERATIONS if getattr(self, name) is not None]
        if len(sent) > 1:
            raise ValueError(f"Only one product operation per request, got {', '.join(sent)}")
        return self

    @property
    def notes_sent(self) -> bool:
        """Whether ``notes`` was present in the request, even as null."""
        return "notes" in self.model_fields_set
