"""Boundary Protocols — contract between the diagnosis service and its storage.

Invariants:
    - Services depend on DiagnosisStore, never on the SQLAlchemy repository class
    - Records are returned as objects exposing the DiagnosisRecord attributes
    - "Not found" is None (or False for exists/delete), never an exception

Design Decisions:
    - Protocol over ABC: structural subtyping, so tests pass in-memory fakes
"""

from datetime import datetime
from typing import Any, Protocol

from diagnosis_api.core.domain_types import ClientId, DiagnosisId


class DiagnosisRecord(Protocol):
    """Structural contract for a stored diagnosis row."""
    id: str
    client_id: str
    diagnosis_name: str
    justification: str
    challenged_diagnosis: str | None
    challenged_justification: str | None
    predicted_date: datetime
    created_at: datetime
    updated_at: datetime


class DiagnosisStore(Protocol):
    """Contract for diagnosis persistence — implemented by repositories/."""
    async def find_latest_by_client(
        self, client_id: ClientId,
    ) -> DiagnosisRecord | None: ...
    async def find_by_id(self, diagnosis_id: DiagnosisId) -> DiagnosisRecord | None: ...
    async def create(
        self, client_id: ClientId, fields: dict[str, Any],
    ) -> DiagnosisRecord: ...
    async def update(
        self, diagnosis_id: DiagnosisId, fields: dict[str, Any],
    ) -> DiagnosisRecord | None: ...
    async def upsert_latest_for_client(
        self, client_id: ClientId, fields: dict[str, Any],
    ) -> tuple[DiagnosisRecord, bool]: ...
    async def list_by_client(
        self, client_id: ClientId, skip: int, take: int,
    ) -> list[DiagnosisRecord]: ...
    async def count_by_client(self, client_id: ClientId) -> int: ...
    async def count_all(self) -> int: ...
    async def exists(self, diagnosis_id: DiagnosisId) -> bool: ...
    async def delete(self, diagnosis_id: DiagnosisId) -> bool: ...
