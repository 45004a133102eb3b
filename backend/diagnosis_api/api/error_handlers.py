"""Error Handlers — global exception handlers producing the {success: false, ...} envelope.

Invariants:
    - DiagnosisServiceError → its http_status and to_response() body
    - RequestValidationError → 400 {"error": "Validation error", "details": [{field, message}]}
      where field omits the location prefix (clientId, diagnosisName, page)
    - Starlette HTTPException → envelope with the same status (404 → "Route not found")
    - Exception (catch-all) → 500, cause logged server-side only
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from diagnosis_api.core.errors import DiagnosisServiceError, ErrorSeverity

logger = logging.getLogger(__name__)

_LOCATIONS = frozenset({"path", "query", "body", "header", "cookie"})
_VALUE_ERROR_PREFIX = "Value error, "


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)
    _register_generic_error_handler(app)


def _register_domain_error_handler(app: FastAPI) -> None:

    @app.exception_handler(DiagnosisServiceError)
    async def domain_error_handler(request: Request, exc: DiagnosisServiceError):
        """Handle all diagnosis domain/infrastructure errors."""
        log = (
            logger.error if exc.severity == ErrorSeverity.CRITICAL
            else logger.warning
        )
        log(
            f"{exc.__class__.__name__}: {exc.message}",
            extra={
                **exc.context.to_log_extra(),
                "error_code": exc.code,
                "path": request.url.path,
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic and path validation errors."""
        details = build_validation_details(exc.errors())
        logger.warning(
            f"Validation error on {request.url.path}: "
            f"{[d['field'] for d in details]}",
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "error": "Validation error",
                "details": details,
            },
        )


def _register_http_error_handler(app: FastAPI) -> None:

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException,
    ):
        """Unknown routes and disallowed methods."""
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            error = "Route not found"
        else:
            error = str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": error},
            headers=getattr(exc, "headers", None),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "error": "Internal server error",
                "message": "An unexpected error occurred",
            },
        )


def build_validation_details(errors) -> list[dict]:
    """Flatten pydantic error dicts into [{field, message}]."""
    details = []
    for e in errors:
        loc = list(e.get("loc", ()))
        if loc and loc[0] in _LOCATIONS:
            loc = loc[1:]
        message = str(e.get("msg", "Validation failed"))
        if message.startswith(_VALUE_ERROR_PREFIX):
            message = message[len(_VALUE_ERROR_PREFIX):]
        details.append({
            "field": ".".join(str(part) for part in loc) or "validation",
            "message": message,
        })
    return details
