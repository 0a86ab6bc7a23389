"""
Custom exception handlers for consistent API error responses.

Every error leaving the API is rendered as
``{"detail": ..., "error_code": ..., "path": ...}`` with the status code
carried by the exception.
"""

from fastapi import HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


class APIError(HTTPException):
    """Base API error with consistent structure"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class NotFoundError(APIError):
    """Resource not found error"""

    def __init__(
        self, detail: str = "Resource not found", error_code: str = "NOT_FOUND"
    ):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND, detail=detail, error_code=error_code
        )


class ValidationError(APIError):
    """Validation error"""

    def __init__(
        self, detail: str = "Validation failed", error_code: str = "VALIDATION_ERROR"
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code,
        )


class AuthenticationError(APIError):
    """Caller is unauthenticated or the permission gate refused the action"""

    def __init__(
        self, detail: str = "Authentication failed", error_code: str = "AUTH_FAILED"
    ):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code=error_code,
            headers={"WWW-Authenticate": "Bearer"},
        )


class GoneError(APIError):
    """Resource was already removed"""

    def __init__(self, detail: str = "Resource is gone", error_code: str = "GONE"):
        super().__init__(
            status_code=status.HTTP_410_GONE, detail=detail, error_code=error_code
        )


class PayloadTooLargeError(APIError):
    """Request carries more work than the endpoint accepts"""

    def __init__(
        self,
        detail: str = "Request payload too large",
        error_code: str = "PAYLOAD_TOO_LARGE",
    ):
        super().__init__(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=detail,
            error_code=error_code,
        )


def _error_location(error: Dict[str, Any]) -> str:
    # ("body", "review") -> "review"; keep the source for path/query params
    loc = [str(part) for part in error.get("loc", ())]
    if loc and loc[0] == "body":
        loc = loc[1:]
    return ".".join(loc) or "body"


def summarize_validation_errors(errors: List[Dict[str, Any]]) -> str:
    """Build a one-line message naming every invalid or missing field."""
    missing = [_error_location(e) for e in errors if e.get("type") == "missing"]
    invalid = [_error_location(e) for e in errors if e.get("type") != "missing"]

    parts = []
    if missing:
        parts.append(f"Missing parameter(s): {', '.join(missing)}")
    if invalid:
        parts.append(f"Invalid parameter(s): {', '.join(invalid)}")
    return "; ".join(parts) or "Validation failed"


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request validation failures as 400 Bad Request"""
    errors = list(exc.errors())
    detail = summarize_validation_errors(errors)
    logger.warning(f"Validation failed at {request.url.path}: {detail}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": detail,
            "error_code": "VALIDATION_ERROR",
            "path": str(request.url.path),
            "errors": jsonable_encoder(errors, exclude={"ctx", "url"}),
        },
    )


async def handle_api_error(request: Request, exc: APIError) -> JSONResponse:
    """Handle custom API errors"""
    logger.warning(
        f"{exc.error_code} at {request.url.path}: {exc.detail}"
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "error_code": exc.error_code,
            "path": str(request.url.path),
        },
        headers=exc.headers,
    )


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app"""
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(APIError, handle_api_error)
