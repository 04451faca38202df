"""
Custom exceptions and error handlers for the API.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from cinesearch.errors import (
    CineSearchError,
    RateLimited,
    SearchValidationError,
    UpstreamError,
    UpstreamUnavailable,
)
from api.logging_config import logger


class APIError(HTTPException):
    """Base API error with structured error response."""

    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.error = error
        self.message = message
        self.details = details
        super().__init__(status_code=status_code, detail=message, headers=headers)


class NotFoundError(APIError):
    """Resource not found error."""

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            status_code=404,
            error="not_found",
            message=f"{resource} with ID {identifier} not found",
            details={"resource": resource, "id": identifier},
        )


# A provider 404 is only a client-facing 404 where a route converts it to
# NotFoundError (movie detail). Everywhere else it is an upstream failure.
ERROR_STATUS = (
    (SearchValidationError, 400),
    (RateLimited, 429),
    (UpstreamError, 502),
)


def status_for(exc: CineSearchError) -> int:
    """HTTP status for a CineSearch error."""
    for error_class, status_code in ERROR_STATUS:
        if isinstance(exc, error_class):
            return status_code
    return 500


def _error_response(
    status_code: int,
    content: Dict[str, Any],
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions and return structured JSON response."""
    content = {
        "error": exc.error,
        "message": exc.message,
    }
    if exc.details:
        content["details"] = exc.details
    return _error_response(exc.status_code, content, exc.headers)


def rate_limited_response(exc: RateLimited) -> JSONResponse:
    """429 response with retry hints."""
    reset = max(int(exc.reset_after + 0.999), 1)
    return _error_response(
        429,
        {
            "error": exc.code,
            "message": exc.message,
            "details": {"limit": exc.limit, "count": exc.count, "retry_after": reset},
        },
        headers={
            "Retry-After": str(reset),
            "RateLimit-Limit": str(exc.limit),
            "RateLimit-Remaining": "0",
            "RateLimit-Reset": str(reset),
        },
    )


async def cinesearch_error_handler(request: Request, exc: CineSearchError) -> JSONResponse:
    """Translate domain errors into structured JSON responses."""
    if isinstance(exc, RateLimited):
        return rate_limited_response(exc)

    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(
            f"{request.method} {request.url.path} failed: {exc.code} "
            f"(upstream path={getattr(exc, 'path', '-')})"
        )
    if isinstance(exc, UpstreamError):
        return _error_response(
            status_code,
            {"error": UpstreamUnavailable.code, "message": UpstreamUnavailable.default_message},
        )
    return _error_response(status_code, {"error": exc.code, "message": exc.message})


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unhandled error for {request.method} {request.url.path}")
    return _error_response(
        500,
        {
            "error": "internal_error",
            "message": "An unexpected error occurred",
        },
    )
