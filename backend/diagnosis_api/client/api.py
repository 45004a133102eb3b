"""Diagnosis API Client — thin httpx wrapper over the REST surface.

Invariants:
    - One fixed overall timeout per request (settings.api_timeout_seconds by default)
    - get_latest_diagnosis() maps 404 to None; every other non-2xx raises ApiClientError
    - ApiClientError.message comes from the envelope details, then its error
      field, then the HTTP reason phrase
    - Payloads are the shared DiagnosisCreate / DiagnosisUpdate schemas,
      serialized by alias with unset fields omitted
"""

import logging

import httpx

from diagnosis_api.config import get_settings
from diagnosis_api.core.pagination import DEFAULT_PAGE, DEFAULT_PAGE_SIZE
from diagnosis_api.schemas.diagnosis import (
    DiagnosisCreate, DiagnosisRead, DiagnosisUpdate,
)
from diagnosis_api.schemas.envelope import (
    DiagnosisEnvelope, DiagnosisListEnvelope, ErrorDetail, ErrorEnvelope,
)

logger = logging.getLogger(__name__)


class ApiClientError(Exception):
    """Non-success HTTP answer from the diagnosis API."""

    def __init__(
        self,
        status_code: int,
        message: str,
        details: list[ErrorDetail] | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details or []

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiClientError":
        try:
            envelope = ErrorEnvelope.model_validate(response.json())
        except ValueError:
            # not JSON, or not an error envelope (proxy pages, empty bodies)
            envelope = None
        details = (envelope.details if envelope else None) or []
        error = envelope.error if envelope else None
        if details:
            message = ", ".join(f"{d.field}: {d.message}" for d in details)
        else:
            message = error or response.reason_phrase or "An unexpected error occurred"
        return cls(response.status_code, message, details)


class DiagnosisApiClient:
    """Async client for /api/diagnoses and /health."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self._http = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=timeout if timeout is not None else settings.api_timeout_seconds,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "DiagnosisApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        response = await self._http.request(method, url, **kwargs)
        if response.is_error:
            error = ApiClientError.from_response(response)
            logger.warning(
                f"API error {method} {url}: {error.message}",
                extra={"status_code": response.status_code, "path": url},
            )
            raise error
        return response

    async def health(self) -> dict:
        response = await self._request("GET", "/health")
        return response.json()

    async def get_latest_diagnosis(self, client_id: str) -> DiagnosisRead | None:
        """Latest diagnosis for the client, None when it has none yet."""
        try:
            response = await self._request("GET", f"/api/diagnoses/{client_id}")
        except ApiClientError as e:
            if e.status_code == httpx.codes.NOT_FOUND:
                return None
            raise
        return DiagnosisEnvelope.model_validate(response.json()).data

    async def create_or_update_diagnosis(
        self, client_id: str, payload: DiagnosisCreate,
    ) -> DiagnosisRead:
        response = await self._request(
            "POST", f"/api/diagnoses/{client_id}",
            json=payload.model_dump(by_alias=True, exclude_unset=True),
        )
        return self._require_data(response, "Failed to create/update diagnosis")

    async def update_diagnosis(
        self, diagnosis_id: str, payload: DiagnosisUpdate,
    ) -> DiagnosisRead:
        response = await self._request(
            "PUT", f"/api/diagnoses/{diagnosis_id}",
            json=payload.model_dump(by_alias=True, exclude_unset=True),
        )
        return self._require_data(response, "Failed to update diagnosis")

    async def get_diagnosis_by_id(self, diagnosis_id: str) -> DiagnosisRead:
        response = await self._request(
            "GET", f"/api/diagnoses/by-id/{diagnosis_id}",
        )
        return self._require_data(response, "Diagnosis not found")

    async def get_diagnosis_history(
        self,
        client_id: str,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> DiagnosisListEnvelope:
        response = await self._request(
            "GET", f"/api/diagnoses/{client_id}/history",
            params={"page": page, "limit": limit},
        )
        return DiagnosisListEnvelope.model_validate(response.json())

    @staticmethod
    def _require_data(response: httpx.Response, message: str) -> DiagnosisRead:
        envelope = DiagnosisEnvelope.model_validate(response.json())
        if envelope.data is None:
            raise ApiClientError(response.status_code, message)
        return envelope.data
