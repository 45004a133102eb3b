"""Diagnosis ORM — one row per AI-suggested diagnosis, scoped to a client.

Invariants:
    - id is a generated CUID-shaped string, immutable
    - client_id is an indexed UUID string with no foreign key
    - predicted_date is set on insert and never touched by updates
    - updated_at refreshes on every UPDATE (onupdate)
    - challenge columns are nullable and independent of each other
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from diagnosis_api.core.domain_types import (
    CHALLENGED_DIAGNOSIS_MAX, CHALLENGED_JUSTIFICATION_MAX,
    DIAGNOSIS_NAME_MAX, JUSTIFICATION_MAX,
)
from diagnosis_api.core.identifiers import new_diagnosis_id
from diagnosis_api.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Diagnosis(Base):
    """AI-suggested diagnosis plus optional therapist challenge."""
    __tablename__ = "diagnoses"
    __table_args__ = (
        Index("ix_diagnoses_client_id_predicted_date", "client_id", "predicted_date"),
    )

    id: Mapped[str] = mapped_column(
        String(32), primary_key=True, default=new_diagnosis_id,
    )
    client_id: Mapped[str] = mapped_column(String(36), nullable=False)
    diagnosis_name: Mapped[str] = mapped_column(
        String(DIAGNOSIS_NAME_MAX), nullable=False,
    )
    justification: Mapped[str] = mapped_column(
        String(JUSTIFICATION_MAX), nullable=False,
    )
    challenged_diagnosis: Mapped[str | None] = mapped_column(
        String(CHALLENGED_DIAGNOSIS_MAX), nullable=True,
    )
    challenged_justification: Mapped[str | None] = mapped_column(
        String(CHALLENGED_JUSTIFICATION_MAX), nullable=True,
    )
    predicted_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
        default=_utcnow, onupdate=_utcnow,
    )
