"""Response Envelopes — the {success, data?, error?, message?, pagination?} wire shape.

Invariants:
    - success is always present
    - Error envelopes never carry data
    - ErrorEnvelope is what every non-2xx answer carries; validation
      failures add details with error "Validation error"
"""

from diagnosis_api.schemas.diagnosis import CamelModel, DiagnosisRead


class ErrorDetail(CamelModel):
    field: str
    message: str


class PaginationInfo(CamelModel):
    """count = items in this page; total = items matching the client."""
    page: int
    limit: int
    count: int
    total: int
    total_pages: int


class DiagnosisEnvelope(CamelModel):
    success: bool = True
    data: DiagnosisRead | None = None
    message: str | None = None


class DiagnosisListEnvelope(CamelModel):
    success: bool = True
    data: list[DiagnosisRead] = []
    pagination: PaginationInfo | None = None
    message: str | None = None


class ErrorEnvelope(CamelModel):
    success: bool = False
    error: str
    code: str | None = None
    message: str | None = None
    details: list[ErrorDetail] | None = None
