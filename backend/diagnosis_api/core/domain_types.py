"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - ClientId wraps a lower-cased UUID string
    - DiagnosisId wraps a CUID-shaped string
    - Diagnosis field bounds live here and nowhere else

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

ClientId = NewType("ClientId", str)
DiagnosisId = NewType("DiagnosisId", str)


# ─── Field Bounds ────────────────────────────────────────────────

DIAGNOSIS_NAME_MAX = 500
JUSTIFICATION_MAX = 2000
CHALLENGED_DIAGNOSIS_MAX = 500
CHALLENGED_JUSTIFICATION_MAX = 2000


# ─── Enums ───────────────────────────────────────────────────────

class HealthStatus(str, Enum):
    """Storage liveness as reported by the health endpoints."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class DiagnosisField(str, Enum):
    """Mutable diagnosis fields, snake_case as stored on the ORM model."""
    DIAGNOSIS_NAME = "diagnosis_name"
    JUSTIFICATION = "justification"
    CHALLENGED_DIAGNOSIS = "challenged_diagnosis"
    CHALLENGED_JUSTIFICATION = "challenged_justification"
