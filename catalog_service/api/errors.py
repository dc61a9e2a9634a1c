"""Error responses for the REST API.

Domain errors are mapped to HTTP status codes here; the store has already
classified them, so only the ``ErrorKind`` is inspected.
"""

from typing import Any, NoReturn

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from catalog_service.domain import DomainError, ErrorKind

logger = structlog.get_logger()

# Error codes
VALIDATION_FAILED = "VALIDATION_FAILED"
INVALID_ID = "INVALID_ID"
INVALID_QUERY_PARAMETER = "INVALID_QUERY_PARAMETER"
INTERNAL_ERROR = "INTERNAL_ERROR"

_KIND_STATUS: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.NAME_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.SKU_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.INVALID_REFERENCE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INSUFFICIENT_STOCK: status.HTTP_409_CONFLICT,
}


def api_error(
    status_code: int,
    error_code: str,
    message: str,
    details: list[dict[str, Any]] | None = None,
) -> HTTPException:
    """Build an HTTPException carrying the standard error body fields."""
    return HTTPException(
        status_code=status_code,
        detail={
            "error_code": error_code,
            "message": message,
            "details": details or [],
        },
    )


def raise_domain_error(exc: DomainError, failure_message: str) -> NoReturn:
    """Translate a domain error into an HTTP error.

    Args:
        exc: Error raised by the store.
        failure_message: Generic message used for internal failures, e.g.
            "Failed to create category".

    Raises:
        HTTPException: Always.
    """
    status_code = _KIND_STATUS.get(exc.kind)
    if status_code is None:
        logger.error(
            failure_message,
            error=exc.message,
            cause=repr(exc.__cause__) if exc.__cause__ else None,
        )
        raise api_error(
            status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR, failure_message
        ) from exc

    details = []
    if "field" in exc.details:
        details.append({"field": exc.details["field"], "message": exc.message})
    raise api_error(status_code, exc.kind.value, exc.message, details) from exc


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _error_body(
    request: Request,
    error_code: str,
    message: str,
    details: list[Any] | None = None,
) -> dict[str, Any]:
    return {
        "error_code": error_code,
        "message": message,
        "details": details or [],
        "request_id": _request_id(request),
    }


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", [])
    else:
        error_code = "ERROR"
        message = str(detail)
        details = []

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, error_code, message, details),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Turn body decoding and field validation failures into 400 responses.

    Undecodable JSON gets the "Invalid request payload" prefix; every other
    failure is reported as "Validation failed" with one detail per field.
    """
    errors = exc.errors()
    details = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        details.append({"field": ".".join(loc) or None, "message": error.get("msg", "")})

    summary = "; ".join(
        f"{d['field']}: {d['message']}" if d["field"] else d["message"] for d in details
    )
    if any(error.get("type") == "json_invalid" for error in errors):
        message = f"Invalid request payload: {summary}"
    else:
        message = f"Validation failed: {summary}"

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(request, VALIDATION_FAILED, message, details),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions with consistent format.

    Runs outside the middleware stack, so the request ID header is set
    here as well.
    """
    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )

    request_id = _request_id(request)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(request, INTERNAL_ERROR, "An internal error occurred"),
        headers={"X-Request-ID": request_id} if request_id else None,
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the error handlers on the application."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
