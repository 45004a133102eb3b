"""Diagnosis Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - JSON field names are camelCase (diagnosisName), Python names snake_case
    - DiagnosisCreate: diagnosisName 1-500, justification 1-2000 (required);
      challengedDiagnosis <= 500, challengedJustification <= 2000 (optional)
    - DiagnosisUpdate: same bounds, every field optional; explicit null is
      rejected for diagnosisName/justification and clears a challenge field
    - Text is sanitized (core/sanitize.py) before its length is checked
    - Empty challenge strings are normalized to None
    - The same classes validate server requests and data-client payloads

Design Decisions:
    - Length checks in field_validator (not Field(max_length)) so messages read
      "Diagnosis name too long" instead of pydantic's generic wording
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from diagnosis_api.core.domain_types import (
    CHALLENGED_DIAGNOSIS_MAX, CHALLENGED_JUSTIFICATION_MAX,
    DIAGNOSIS_NAME_MAX, JUSTIFICATION_MAX,
)
from diagnosis_api.core.sanitize import sanitize_text


class CamelModel(BaseModel):
    """Base for every wire schema: camelCase aliases, snake_case attributes."""
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True,
    )


def _required_text(value: str | None, label: str, max_length: int) -> str:
    if value is None:
        raise ValueError(f"{label} cannot be null")
    value = sanitize_text(value)
    if not value:
        raise ValueError(f"{label} is required")
    if len(value) > max_length:
        raise ValueError(f"{label} too long")
    return value


def _optional_text(value: str | None, label: str, max_length: int) -> str | None:
    if value is None:
        return None
    value = sanitize_text(value)
    if len(value) > max_length:
        raise ValueError(f"{label} too long")
    return value or None


class DiagnosisCreate(CamelModel):
    """Body of POST /api/diagnoses/{clientId}."""
    diagnosis_name: str
    justification: str
    challenged_diagnosis: str | None = None
    challenged_justification: str | None = None

    @field_validator("diagnosis_name")
    @classmethod
    def check_diagnosis_name(cls, v: str) -> str:
        return _required_text(v, "Diagnosis name", DIAGNOSIS_NAME_MAX)

    @field_validator("justification")
    @classmethod
    def check_justification(cls, v: str) -> str:
        return _required_text(v, "Justification", JUSTIFICATION_MAX)

    @field_validator("challenged_diagnosis")
    @classmethod
    def check_challenged_diagnosis(cls, v: str | None) -> str | None:
        return _optional_text(v, "Challenged diagnosis", CHALLENGED_DIAGNOSIS_MAX)

    @field_validator("challenged_justification")
    @classmethod
    def check_challenged_justification(cls, v: str | None) -> str | None:
        return _optional_text(
            v, "Challenged justification", CHALLENGED_JUSTIFICATION_MAX,
        )

    def changes(self) -> dict:
        """Column values the caller sent; unset challenge fields stay untouched on update."""
        return self.model_dump(exclude_unset=True)


class DiagnosisUpdate(CamelModel):
    """Body of PUT /api/diagnoses/{id}. Only fields present in the JSON are applied."""
    diagnosis_name: str | None = None
    justification: str | None = None
    challenged_diagnosis: str | None = None
    challenged_justification: str | None = None

    @field_validator("diagnosis_name")
    @classmethod
    def check_diagnosis_name(cls, v: str | None) -> str:
        return _required_text(v, "Diagnosis name", DIAGNOSIS_NAME_MAX)

    @field_validator("justification")
    @classmethod
    def check_justification(cls, v: str | None) -> str:
        return _required_text(v, "Justification", JUSTIFICATION_MAX)

    @field_validator("challenged_diagnosis")
    @classmethod
    def check_challenged_diagnosis(cls, v: str | None) -> str | None:
        return _optional_text(v, "Challenged diagnosis", CHALLENGED_DIAGNOSIS_MAX)

    @field_validator("challenged_justification")
    @classmethod
    def check_challenged_justification(cls, v: str | None) -> str | None:
        return _optional_text(
            v, "Challenged justification", CHALLENGED_JUSTIFICATION_MAX,
        )

    def changes(self) -> dict:
        """Column values explicitly set by the caller (may be empty)."""
        return self.model_dump(exclude_unset=True)


class DiagnosisRead(CamelModel):
    """Diagnosis as returned by the API."""
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True,
    )

    id: str
    client_id: str
    diagnosis_name: str
    justification: str
    challenged_diagnosis: str | None = None
    challenged_justification: str | None = None
    predicted_date: datetime
    created_at: datetime
    updated_at: datetime
