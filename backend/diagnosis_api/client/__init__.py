"""Data Client — HTTP wrapper and read cache for the diagnosis API.

Invariants:
    - Requests use the same Pydantic schemas as server-side validation
    - Writes invalidate every cached read of the affected client
"""

from diagnosis_api.client.api import ApiClientError, DiagnosisApiClient
from diagnosis_api.client.diagnosis_queries import DiagnosisQueries
from diagnosis_api.client.query_cache import QueryCache

__all__ = [
    "ApiClientError",
    "DiagnosisApiClient",
    "DiagnosisQueries",
    "QueryCache",
]
