"""Patient schemas for request validation.

Patients are keyed by a natural identifier (national ID) rather than a
generated ObjectId. The upsert body also accepts the field names of the
legacy intake form (``nombres``, ``tipo_sangre``...).
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.schemas.common import PatchModel, TrimmedStr, blank_to_none, title_case


def normalize_blood_type(value: str) -> str:
    """Upper-case a blood type and drop all whitespace."""
    return "".join(value.upper().split())


class PatientNormalizer(BaseModel):
    """Field normalization shared by upsert and patch."""

    @field_validator("names", "surnames", "gender", check_fields=False)
    @classmethod
    def normalize_title(cls, v: str | None) -> str | None:
        """Title-case personal names and gender."""
        return title_case(v) if v is not None else None

    @field_validator("blood_type", check_fields=False)
    @classmethod
    def normalize_blood(cls, v: str | None) -> str | None:
        """Normalize blood type."""
        return normalize_blood_type(v) if v is not None else None

    @field_validator("email", check_fields=False)
    @classmethod
    def lower_email(cls, v: str | None) -> str | None:
        """Lowercase email."""
        return v.strip().lower() if v is not None else None

    @field_validator("phone", "address", check_fields=False)
    @classmethod
    def strip_optional(cls, v: str | None) -> str | None:
        """Trim optional strings."""
        return blank_to_none(v)


class PatientUpsert(PatientNormalizer):
    """Schema for creating or replacing a patient's fields."""

    model_config = ConfigDict(populate_by_name=True)

    id: TrimmedStr = Field(..., validation_alias=AliasChoices("_id", "id"))
    names: TrimmedStr = Field(..., validation_alias=AliasChoices("names", "nombres"))
    surnames: TrimmedStr = Field(..., validation_alias=AliasChoices("surnames", "apellidos"))
    age: int = Field(..., ge=0, le=120, validation_alias=AliasChoices("age", "edad"))
    gender: TrimmedStr = Field(..., validation_alias=AliasChoices("gender", "genero"))
    phone: str | None = Field(None, validation_alias=AliasChoices("phone", "telefono"))
    address: str | None = Field(None, validation_alias=AliasChoices("address", "direccion"))
    email: EmailStr | None = Field(None, validation_alias=AliasChoices("email", "correo"))
    blood_type: TrimmedStr = Field(..., validation_alias=AliasChoices("blood_type", "tipo_sangre"))


class PatientUpdate(PatchModel, PatientNormalizer):
    """Schema for partially updating a patient."""

    names: TrimmedStr | None = None
    surnames: TrimmedStr | None = None
    age: int | None = Field(None, ge=0, le=120)
    gender: TrimmedStr | None = None
    phone: str | None = None
    address: str | None = None
    email: EmailStr | None = None
    blood_type: TrimmedStr | None = None
