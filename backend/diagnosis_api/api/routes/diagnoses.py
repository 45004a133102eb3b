"""Diagnosis Routes — thin handlers for the /api/diagnoses resource.

Invariants:
    - Identifiers and bodies are validated before the service is called
    - POST /{clientId} answers 201 when it created a record, 200 when it updated one
    - Literal segments (/health, /by-id/...) are registered before /{clientId}
    - No route deletes a diagnosis
"""

from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from diagnosis_api.api.validation import valid_client_id, valid_diagnosis_id
from diagnosis_api.core.domain_types import ClientId, DiagnosisId
from diagnosis_api.core.pagination import DEFAULT_PAGE, DEFAULT_PAGE_SIZE
from diagnosis_api.infrastructure.database import get_db
from diagnosis_api.repositories.diagnosis_repository import DiagnosisRepository
from diagnosis_api.schemas.diagnosis import (
    DiagnosisCreate, DiagnosisRead, DiagnosisUpdate,
)
from diagnosis_api.schemas.envelope import (
    DiagnosisEnvelope, DiagnosisListEnvelope, PaginationInfo,
)
from diagnosis_api.services.diagnosis_service import DiagnosisService

router = APIRouter(prefix="/api/diagnoses", tags=["diagnoses"])


def get_diagnosis_service(
    db: AsyncSession = Depends(get_db),
) -> DiagnosisService:
    return DiagnosisService(DiagnosisRepository(db))


ServiceDep = Annotated[DiagnosisService, Depends(get_diagnosis_service)]
ClientIdDep = Annotated[ClientId, Depends(valid_client_id)]
DiagnosisIdDep = Annotated[DiagnosisId, Depends(valid_diagnosis_id)]


def _envelope(diagnosis, message: str) -> DiagnosisEnvelope:
    return DiagnosisEnvelope(
        data=DiagnosisRead.model_validate(diagnosis), message=message,
    )


@router.get("/health")
async def diagnosis_service_health(service: ServiceDep):
    """Service liveness — one storage round trip; storage failure surfaces as 500."""
    await service.check_health()
    return {
        "success": True,
        "message": "Diagnosis service is healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "diagnosis-api",
        "database": "connected",
    }


@router.get("/by-id/{id}", response_model=DiagnosisEnvelope)
async def get_diagnosis_by_id(
    diagnosis_id: DiagnosisIdDep, service: ServiceDep,
):
    """Fetch one diagnosis by its identifier."""
    diagnosis = await service.get_by_id(diagnosis_id)
    return _envelope(diagnosis, "Diagnosis retrieved successfully")


@router.get("/{clientId}/history", response_model=DiagnosisListEnvelope)
async def get_diagnosis_history(
    client_id: ClientIdDep,
    service: ServiceDep,
    page: int = Query(DEFAULT_PAGE),
    limit: int = Query(DEFAULT_PAGE_SIZE),
):
    """Paginated history for a client, newest first."""
    history = await service.list_history(client_id, page, limit)
    return DiagnosisListEnvelope(
        data=[DiagnosisRead.model_validate(d) for d in history.items],
        pagination=PaginationInfo(
            page=history.page,
            limit=history.limit,
            count=history.count,
            total=history.total,
            total_pages=history.total_pages,
        ),
        message="Diagnosis history retrieved successfully",
    )


@router.get("/{clientId}", response_model=DiagnosisEnvelope)
async def get_latest_diagnosis(client_id: ClientIdDep, service: ServiceDep):
    """Latest diagnosis for a client (404 when the client has none)."""
    diagnosis = await service.get_latest(client_id)
    return _envelope(diagnosis, "Diagnosis retrieved successfully")


@router.post(
    "/{clientId}", response_model=DiagnosisEnvelope,
    status_code=status.HTTP_201_CREATED,
)
async def create_or_update_diagnosis(
    client_id: ClientIdDep,
    body: DiagnosisCreate,
    response: Response,
    service: ServiceDep,
):
    """Create the client's diagnosis, or overwrite the latest one."""
    diagnosis, created = await service.upsert_by_client(client_id, body)
    if created:
        return _envelope(diagnosis, "Diagnosis created successfully")
    response.status_code = status.HTTP_200_OK
    return _envelope(diagnosis, "Diagnosis updated successfully")


@router.put("/{id}", response_model=DiagnosisEnvelope)
async def update_diagnosis(
    diagnosis_id: DiagnosisIdDep, body: DiagnosisUpdate, service: ServiceDep,
):
    """Update only the fields present in the body."""
    diagnosis = await service.update_by_id(diagnosis_id, body)
    return _envelope(diagnosis, "Diagnosis updated successfully")
