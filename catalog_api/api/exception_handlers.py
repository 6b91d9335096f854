"""Exception handlers mapping errors to HTTP responses."""

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from catalog_api.domain.exceptions import (
    AuthenticationError,
    ConflictError,
    DomainError,
    ForbiddenError,
    NotFoundError,
    TransientStoreError,
    ValidationError,
)

logger = structlog.get_logger()

# Checked in order; subclasses come before their bases
STATUS_CODES: list[tuple[type[DomainError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_400_BAD_REQUEST),
    (TransientStoreError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def status_code_for(exc: DomainError) -> int:
    """Get the HTTP status code for a domain error."""
    for error_type, status_code in STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def error_body(
    error_code: str,
    message: str,
    request: Request,
    details: list[dict] | None = None,
) -> dict:
    """Build the standard error response body."""
    return {
        "error_code": error_code,
        "message": message,
        "details": details or [],
        "request_id": getattr(request.state, "request_id", None),
    }


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Handle domain errors with consistent format."""
    status_code = status_code_for(exc)
    headers = None
    details: list[dict] = []

    if isinstance(exc, ValidationError):
        details = [{"field": field, "message": exc.message} for field in exc.fields]
    elif isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    elif isinstance(exc, TransientStoreError):
        logger.error(
            "Store unavailable",
            path=request.url.path,
            operation=exc.operation,
            cause=repr(exc.cause),
        )

    # Invalid identifiers are reported as plain misses
    error_code = "NOT_FOUND" if isinstance(exc, NotFoundError) else exc.error_code

    return JSONResponse(
        status_code=status_code,
        content=error_body(error_code, exc.message, request, details),
        headers=headers,
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
    else:
        error_code = "NOT_FOUND" if exc.status_code == 404 else "ERROR"
        message = str(detail)

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(error_code, message, request),
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the app."""
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
