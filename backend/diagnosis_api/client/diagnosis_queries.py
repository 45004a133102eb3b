"""Diagnosis Queries — cached reads and invalidating writes on top of DiagnosisApiClient.

Invariants:
    - Single-record reads stay fresh 5 minutes, history pages 2 minutes
    - Keys: ("diagnosis", clientId), ("diagnosis-history", clientId, page, limit),
      ("diagnosis-by-id", id)
    - Every successful write invalidates the client's "diagnosis" and
      "diagnosis-history" keys; update() also primes its "diagnosis-by-id" key
    - Empty identifiers skip the request and return None
"""

import logging

from diagnosis_api.client.api import DiagnosisApiClient
from diagnosis_api.client.query_cache import CacheKey, QueryCache
from diagnosis_api.core.pagination import DEFAULT_PAGE, DEFAULT_PAGE_SIZE
from diagnosis_api.schemas.diagnosis import (
    DiagnosisCreate, DiagnosisRead, DiagnosisUpdate,
)
from diagnosis_api.schemas.envelope import DiagnosisListEnvelope

logger = logging.getLogger(__name__)

RECORD_STALE_SECONDS = 5 * 60
HISTORY_STALE_SECONDS = 2 * 60


def latest_key(client_id: str) -> CacheKey:
    return ("diagnosis", client_id.lower())


def history_key(client_id: str, page: int, limit: int) -> CacheKey:
    return ("diagnosis-history", client_id.lower(), page, limit)


def by_id_key(diagnosis_id: str) -> CacheKey:
    return ("diagnosis-by-id", diagnosis_id)


class DiagnosisQueries:
    def __init__(self, api: DiagnosisApiClient, cache: QueryCache | None = None):
        self.api = api
        self.cache = cache or QueryCache()

    async def latest_diagnosis(self, client_id: str) -> DiagnosisRead | None:
        if not client_id:
            return None
        return await self.cache.get_or_fetch(
            latest_key(client_id), RECORD_STALE_SECONDS,
            lambda: self.api.get_latest_diagnosis(client_id),
        )

    async def diagnosis_history(
        self,
        client_id: str,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> DiagnosisListEnvelope | None:
        if not client_id:
            return None
        return await self.cache.get_or_fetch(
            history_key(client_id, page, limit), HISTORY_STALE_SECONDS,
            lambda: self.api.get_diagnosis_history(client_id, page, limit),
        )

    async def diagnosis_by_id(self, diagnosis_id: str) -> DiagnosisRead | None:
        if not diagnosis_id:
            return None
        return await self.cache.get_or_fetch(
            by_id_key(diagnosis_id), RECORD_STALE_SECONDS,
            lambda: self.api.get_diagnosis_by_id(diagnosis_id),
        )

    async def create_or_update(
        self, client_id: str, payload: DiagnosisCreate,
    ) -> DiagnosisRead:
        diagnosis = await self.api.create_or_update_diagnosis(client_id, payload)
        self._invalidate_client(diagnosis.client_id)
        logger.info(
            "Diagnosis saved",
            extra={"client_id": diagnosis.client_id, "diagnosis_id": diagnosis.id},
        )
        return diagnosis

    async def update(
        self, diagnosis_id: str, payload: DiagnosisUpdate,
    ) -> DiagnosisRead:
        diagnosis = await self.api.update_diagnosis(diagnosis_id, payload)
        self.cache.set(by_id_key(diagnosis.id), diagnosis)
        self._invalidate_client(diagnosis.client_id)
        logger.info(
            "Diagnosis updated",
            extra={"client_id": diagnosis.client_id, "diagnosis_id": diagnosis.id},
        )
        return diagnosis

    def _invalidate_client(self, client_id: str) -> None:
        self.cache.invalidate(latest_key(client_id))
        self.cache.invalidate(("diagnosis-history", client_id.lower()))
