"""Diagnosis Service — create-or-update orchestration, lookups and history paging.

Invariants:
    - POST for a client never appends history: it updates the latest record
      when one exists (created=False) and creates one otherwise (created=True)
    - Missing records surface as ResourceNotFoundError, storage failures as
      DatabaseError (raised by the store, passed through unchanged)
    - History page/limit are clamped (core/pagination.py) before querying
    - HistoryPage.count is the number of items returned, total the number of
      items stored for the client
"""

from dataclasses import dataclass

from diagnosis_api.core.domain_types import ClientId, DiagnosisId
from diagnosis_api.core.errors import ErrorContext, ResourceNotFoundError
from diagnosis_api.core.pagination import (
    DEFAULT_PAGE, DEFAULT_PAGE_SIZE, clamp_page_window, count_pages,
)
from diagnosis_api.core.repository_protocols import DiagnosisRecord, DiagnosisStore
from diagnosis_api.schemas.diagnosis import DiagnosisCreate, DiagnosisUpdate

# Looked up by the service health probe; never generated by new_diagnosis_id().
HEALTH_PROBE_ID = DiagnosisId("test-id-that-should-not-exist")


@dataclass(frozen=True)
class HistoryPage:
    items: list[DiagnosisRecord]
    page: int
    limit: int
    total: int

    @property
    def count(self) -> int:
        return len(self.items)

    @property
    def total_pages(self) -> int:
        return count_pages(self.total, self.limit)


class DiagnosisService:
    """Business operations behind the /api/diagnoses routes."""

    def __init__(self, store: DiagnosisStore):
        self.store = store

    async def get_latest(self, client_id: ClientId) -> DiagnosisRecord:
        diagnosis = await self.store.find_latest_by_client(client_id)
        if diagnosis is None:
            raise ResourceNotFoundError(
                "No diagnosis found for this client",
                ErrorContext(client_id=client_id),
            )
        return diagnosis

    async def get_by_id(self, diagnosis_id: DiagnosisId) -> DiagnosisRecord:
        diagnosis = await self.store.find_by_id(diagnosis_id)
        if diagnosis is None:
            raise ResourceNotFoundError(
                "Diagnosis not found", ErrorContext(diagnosis_id=diagnosis_id),
            )
        return diagnosis

    async def upsert_by_client(
        self, client_id: ClientId, payload: DiagnosisCreate,
    ) -> tuple[DiagnosisRecord, bool]:
        """Create the client's first diagnosis or overwrite its latest one."""
        return await self.store.upsert_latest_for_client(
            client_id, payload.changes(),
        )

    async def update_by_id(
        self, diagnosis_id: DiagnosisId, payload: DiagnosisUpdate,
    ) -> DiagnosisRecord:
        diagnosis = await self.store.update(diagnosis_id, payload.changes())
        if diagnosis is None:
            raise ResourceNotFoundError(
                "Diagnosis not found", ErrorContext(diagnosis_id=diagnosis_id),
            )
        return diagnosis

    async def list_history(
        self,
        client_id: ClientId,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> HistoryPage:
        window = clamp_page_window(page, limit)
        items = await self.store.list_by_client(
            client_id, skip=window.offset, take=window.limit,
        )
        total = await self.store.count_by_client(client_id)
        return HistoryPage(
            items=items, page=window.page, limit=window.limit, total=total,
        )

    async def check_health(self) -> None:
        """Round-trip to storage; raises DatabaseError when it is unreachable."""
        await self.store.exists(HEALTH_PROBE_ID)
