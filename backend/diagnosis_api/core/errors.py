"""Error Hierarchy — typed, categorized exceptions for all diagnosis service failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the {success: false, error, code} envelope
    - No internal details leaked in user-facing messages (DatabaseError carries
      only a generic message; the cause is logged where it is caught)

Design Decisions:
    - Single hierarchy with DiagnosisServiceError base: one FastAPI handler catches all
    - ErrorContext as dataclass: observability fields without coupling to logging
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"


@dataclass
class ErrorContext:
    """Context attached to an error for logs, never sent to clients."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    client_id: str | None = None
    diagnosis_id: str | None = None
    operation: str | None = None

    def to_log_extra(self) -> dict[str, Any]:
        return {
            key: value
            for key, value in (
                ("client_id", self.client_id),
                ("diagnosis_id", self.diagnosis_id),
                ("operation", self.operation),
            )
            if value is not None
        }


class DiagnosisServiceError(Exception):
    """Base exception for all diagnosis service errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to the standard REST error envelope."""
        return {
            "success": False,
            "error": self.message,
            "code": self.code,
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class ResourceNotFoundError(DiagnosisServiceError):
    """Requested diagnosis does not exist."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, context, 404,
        )


class NoFieldsToUpdateError(DiagnosisServiceError):
    """Update payload did not set any field."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "No fields to update", "NO_FIELDS_TO_UPDATE",
            ErrorCategory.VALIDATION, ErrorSeverity.WARNING, context, 400,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(DiagnosisServiceError):
    """Storage operation failed. Message is generic by construction."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.operation = operation
        super().__init__(
            message, "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, ctx, 500,
        )
        self.operation = operation
