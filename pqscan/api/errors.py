"""Structured error responses for the pqscan API.

Provides a consistent error envelope across all endpoints:

    {
        "error": {
            "code": "PARSE_ERROR",
            "message": "Human-readable description",
            "details": {...optional context...}
        }
    }
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from pqscan.core.errors import AnalyzerError

logger = logging.getLogger(__name__)


# ── Error Schemas ────────────────────────────────────────────────────────────


class ErrorEnvelope(BaseModel):
    """Standard error response envelope."""

    code: str
    message: str
    details: dict[str, Any] | list[dict[str, Any]] | None = None


class ErrorResponse(BaseModel):
    """Top-level error response."""

    error: ErrorEnvelope


_STATUS_TO_CODE: dict[int, str] = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    422: "VALIDATION_ERROR",
    500: "INTERNAL_ERROR",
}


# ── Exception Handlers ──────────────────────────────────────────────────────


async def analyzer_error_handler(request: Request, exc: AnalyzerError) -> JSONResponse:
    """Map analyzer failures to their HTTP status with the kind-tagged envelope."""
    logger.warning(
        "%s %s failed: %s", request.method, request.url.path, exc.message,
        extra={"error_code": exc.code.value},
    )
    body = ErrorResponse(
        error=ErrorEnvelope(code=exc.code.value, message=exc.message, details=exc.details)
    )
    return JSONResponse(status_code=exc.http_status, content=body.model_dump())


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle FastAPI query/body validation errors with structured detail."""
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", [])),
            "message": err.get("msg", "Invalid value"),
            "type": err.get("type", "value_error"),
        }
        for err in exc.errors()
    ]
    body = ErrorResponse(
        error=ErrorEnvelope(
            code="VALIDATION_ERROR",
            message=f"Request validation failed: {len(details)} error(s)",
            details=details,
        )
    )
    return JSONResponse(status_code=422, content=body.model_dump())


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Handle HTTP exceptions with structured error envelope."""
    code = _STATUS_TO_CODE.get(exc.status_code, "INTERNAL_ERROR")
    body = ErrorResponse(
        error=ErrorEnvelope(code=code, message=str(exc.detail) if exc.detail else code)
    )
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions — log full traceback, return generic error."""
    logger.exception("Unhandled exception on %s %s: %s", request.method, request.url.path, exc)
    body = ErrorResponse(
        error=ErrorEnvelope(code="INTERNAL_ERROR", message="An internal server error occurred.")
    )
    return JSONResponse(status_code=500, content=body.model_dump())


def register_error_handlers(app: Any) -> None:
    """Register all structured error handlers on a FastAPI app."""
    app.add_exception_handler(AnalyzerError, analyzer_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
