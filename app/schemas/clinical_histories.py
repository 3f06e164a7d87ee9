"""Clinical history schemas for request validation."""

from typing import Any

from pydantic import AliasChoices, BaseModel, Field, model_validator

from app.schemas.common import PatchModel, TrimmedStr, UtcDatetime


class PerformedProcedure(BaseModel):
    """Treatment performed on a patient."""

    treatment: TrimmedStr
    date: UtcDatetime
    practitioner: str | None = None
    outcome: str | None = None


class PerformedProcedurePatch(PatchModel):
    """Partial performed procedure, merged over the stored entry."""

    treatment: TrimmedStr | None = None
    date: UtcDatetime | None = None
    practitioner: str | None = None
    outcome: str | None = None


class ClinicalHistoryCreate(BaseModel):
    """Schema for creating a patient's clinical history."""

    patient_id: TrimmedStr
    medical_history: list[Any] = Field(default_factory=list)
    allergies: list[Any] = Field(default_factory=list)
    prescriptions: list[Any] = Field(default_factory=list)
    procedures: list[PerformedProcedure] = Field(default_factory=list)


class ClinicalHistoryUpdate(PatchModel):
    """Schema for replacing whole sections of a clinical history."""

    patient_id: TrimmedStr | None = None
    medical_history: list[Any] | None = None
    allergies: list[Any] | None = None
    prescriptions: list[Any] | None = None
    procedures: list[PerformedProcedure] | None = None


class ProcedureAppend(BaseModel):
    """Append one or several performed procedures, creating the history if needed.

    ``treatments`` is accepted as a legacy alias of ``procedures``.
    """

    patient_id: TrimmedStr
    procedure: PerformedProcedure | None = None
    procedures: list[PerformedProcedure] | None = Field(
        None, validation_alias=AliasChoices("procedures", "treatments")
    )

    @model_validator(mode="after")
    def require_items(self):
        """Either ``procedure`` or a non-empty ``procedures`` is required."""
        if self.procedure is None and not self.procedures:
            raise ValueError("Must include 'procedure' or 'procedures'")
        return self

    @property
    def items(self) -> list[PerformedProcedure]:
        """Procedures to append, in order."""
        if self.procedures:
            return list(self.procedures)
        return [self.procedure] if self.procedure is not None else []
