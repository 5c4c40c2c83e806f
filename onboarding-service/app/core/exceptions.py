"""
Domain exceptions and global exception handlers for the FastAPI application.

Services raise the typed exceptions below without importing FastAPI; the
handlers translate every error into the standard response envelope::

    {
        "success": false,
        "message": "<human-readable description>",
        "status_code": 400,
        "data": null
    }

Each domain exception carries an :class:`ErrorKind` tag, so the HTTP layer
maps NotFound / Validation / BusinessRule / Internal 1:1 to a status code.
"""

import logging
from enum import Enum
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.resilience import CircuitBreakerError

logger = logging.getLogger(__name__)


# ────────────────────────────────────────────────────────────────────────────
# Domain exceptions  (raised by service layer, caught by handlers below)
# ────────────────────────────────────────────────────────────────────────────


class ErrorKind(str, Enum):
    """Tag carried by every domain error."""

    NOT_FOUND = "NotFound"
    VALIDATION = "Validation"
    BUSINESS_RULE = "BusinessRule"
    INTERNAL = "Internal"
    UNAUTHORIZED = "Unauthorized"
    FORBIDDEN = "Forbidden"


class AppException(Exception):
    """Base exception for all application-level errors."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, status_code: int, message: str, details: Any = None):
        self.status_code = status_code
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundException(AppException):
    """Referenced entity is absent (404)."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, resource: str, identifier: Any = None, message: Optional[str] = None):
        if message is None:
            message = f"{resource} with id '{identifier}' not found"
        super().__init__(status_code=404, message=message)


class ValidationException(AppException):
    """Malformed or out-of-range input, e.g. a bad enum code (400)."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, details: Any = None):
        super().__init__(status_code=400, message=message, details=details)


class BusinessRuleViolation(AppException):
    """Business rule was violated (400)."""

    kind = ErrorKind.BUSINESS_RULE

    def __init__(self, message: str):
        super().__init__(status_code=400, message=message)


class InternalError(AppException):
    """Persistence failure; the message never carries internal detail (500)."""

    kind = ErrorKind.INTERNAL

    def __init__(self, message: str = "An unexpected error occurred"):
        super().__init__(status_code=500, message=message)


class AuthenticationError(AppException):
    """Caller identity headers are missing or malformed (401)."""

    kind = ErrorKind.UNAUTHORIZED

    def __init__(self, message: str = "Authentication required"):
        super().__init__(status_code=401, message=message)


class PermissionDeniedError(AppException):
    """Caller's role may not perform the operation (403)."""

    kind = ErrorKind.FORBIDDEN

    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(status_code=403, message=message)


def _envelope(status_code: int, message: Any, details: Any = None) -> dict:
    content = {
        "success": False,
        "message": message,
        "status_code": status_code,
        "data": None,
    }
    if details is not None:
        content["details"] = details
    return content


# ────────────────────────────────────────────────────────────────────────────
# FastAPI exception handler registration
# ────────────────────────────────────────────────────────────────────────────


def add_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI application instance."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        """Handle domain-specific exceptions raised by the service layer."""
        return JSONResponse(
            status_code=exc.status_code,
            content=_envelope(exc.status_code, exc.message, exc.details),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Handle standard HTTP exceptions (e.g. 404 from path-not-found)."""
        return JSONResponse(
            status_code=exc.status_code,
            content=_envelope(exc.status_code, exc.detail),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """
        Handle Pydantic / FastAPI request-validation errors.

        Returns a 400 with a concise list of validation issues so the caller
        knows exactly which fields failed and why.
        """
        errors = []
        for err in exc.errors():
            loc = " -> ".join(str(part) for part in err["loc"])
            errors.append({"field": loc, "message": err["msg"]})
        return JSONResponse(
            status_code=400,
            content=_envelope(400, "Validation failed", errors),
        )

    @app.exception_handler(CircuitBreakerError)
    async def circuit_breaker_handler(
        request: Request, exc: CircuitBreakerError
    ) -> JSONResponse:
        """Fail fast with 503 while the database circuit is open."""
        logger.warning(
            "Rejected %s %s: circuit '%s' is open",
            request.method,
            request.url.path,
            exc.name,
        )
        return JSONResponse(
            status_code=503,
            content=_envelope(503, "Service temporarily unavailable. Please retry shortly."),
            headers={"Retry-After": str(int(exc.retry_after) + 1)},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unexpected exceptions."""
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=_envelope(500, "Internal Server Error. Please contact support."),
        )
