"""Error handling and exception handlers for inspiradraw.

Every handler returns a structured JSON body with the request's
correlation ID and a stable error code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog
from litestar import Response
from litestar.status_codes import (
    HTTP_400_BAD_REQUEST,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_422_UNPROCESSABLE_ENTITY,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_503_SERVICE_UNAVAILABLE,
)

if TYPE_CHECKING:
    from litestar import Request
    from litestar.exceptions import HTTPException, ValidationException

    from inspiradraw.exceptions import (
        InvalidPasswordError,
        RoomExistsError,
        RoomNotFoundError,
        RoomValidationError,
        StoreUnavailableError,
    )

logger = structlog.get_logger(__name__)

HTTP_ERROR_CODES = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    422: "validation_error",
    429: "rate_limited",
    500: "internal_error",
    502: "bad_gateway",
    503: "service_unavailable",
}


@dataclass
class ErrorDetail:
    """Details about a specific error."""

    field: str | None = None
    message: str = ""
    code: str = "error"


@dataclass
class ErrorResponse:
    """Structured error response format."""

    status: str = "error"
    message: str = ""
    code: str = "internal_error"
    correlation_id: str | None = None
    details: list[ErrorDetail] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON response."""
        result: dict[str, Any] = {
            "status": self.status,
            "message": self.message,
            "code": self.code,
        }
        if self.correlation_id:
            result["correlation_id"] = self.correlation_id
        if self.details:
            result["details"] = [{"field": d.field, "message": d.message, "code": d.code} for d in self.details]
        return result


def get_correlation_id(request: Request) -> str | None:
    """Extract correlation ID from request state or headers."""
    correlation_id = request.state.get("correlation_id")
    if correlation_id:
        return correlation_id
    return request.headers.get("X-Correlation-ID") or request.headers.get("X-Request-ID")


def _json_error(
    request: Request,
    status_code: int,
    message: str,
    code: str,
    details: list[ErrorDetail] | None = None,
) -> Response[dict[str, Any]]:
    error_response = ErrorResponse(
        message=message,
        code=code,
        correlation_id=get_correlation_id(request),
        details=details or [],
    )
    return Response(content=error_response.to_dict(), status_code=status_code, media_type="application/json")


def validation_exception_handler(request: Request, exc: ValidationException) -> Response[dict[str, Any]]:
    """Handle request body validation errors with per-field details."""
    details: list[ErrorDetail] = []

    if exc.extra and isinstance(exc.extra, list):
        for error in exc.extra:
            if isinstance(error, dict):
                key = error.get("key")
                msg = error.get("message", str(error))
                details.append(ErrorDetail(field=key, message=msg, code="validation_error"))
            else:
                details.append(ErrorDetail(message=str(error), code="validation_error"))

    if not details:
        details.append(ErrorDetail(message=str(exc.detail), code="validation_error"))

    logger.warning(
        "Validation error",
        correlation_id=get_correlation_id(request),
        path=request.url.path,
        method=request.method,
        error_count=len(details),
    )
    return _json_error(request, HTTP_422_UNPROCESSABLE_ENTITY, "Validation failed", "validation_error", details)


def http_exception_handler(request: Request, exc: HTTPException) -> Response[dict[str, Any]]:
    """Handle HTTP exceptions with structured responses."""
    error_code = HTTP_ERROR_CODES.get(exc.status_code, "error")
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)

    log_method = logger.warning if exc.status_code < 500 else logger.error
    log_method(
        "HTTP exception",
        correlation_id=get_correlation_id(request),
        path=request.url.path,
        method=request.method,
        status_code=exc.status_code,
        error_code=error_code,
    )
    return _json_error(request, exc.status_code, message, error_code)


def room_validation_handler(request: Request, exc: RoomValidationError) -> Response[dict[str, Any]]:
    """Handle a missing or malformed room id or password."""
    logger.info("Room request rejected", path=request.url.path, field=exc.field, error=str(exc))
    return _json_error(
        request,
        HTTP_400_BAD_REQUEST,
        str(exc),
        "invalid_room_request",
        [ErrorDetail(field=exc.field, message=str(exc), code="invalid")],
    )


def room_not_found_handler(request: Request, exc: RoomNotFoundError) -> Response[dict[str, Any]]:
    """Handle RoomNotFoundError exceptions."""
    logger.warning("Room not found", room_id=exc.room_id, path=request.url.path)
    return _json_error(
        request,
        HTTP_404_NOT_FOUND,
        f"Room not found: {exc.room_id}",
        "room_not_found",
        [ErrorDetail(field="room_id", message=str(exc), code="not_found")],
    )


def room_exists_handler(request: Request, exc: RoomExistsError) -> Response[dict[str, Any]]:
    """Handle RoomExistsError exceptions."""
    logger.info("Room already exists", room_id=exc.room_id, path=request.url.path)
    return _json_error(request, HTTP_409_CONFLICT, str(exc), "room_exists")


def invalid_password_handler(request: Request, exc: InvalidPasswordError) -> Response[dict[str, Any]]:
    """Handle a wrong current password on a protected room."""
    logger.info("Invalid room password", room_id=exc.room_id, path=request.url.path)
    return _json_error(request, HTTP_403_FORBIDDEN, "Invalid password", "invalid_password")


def store_unavailable_handler(request: Request, exc: StoreUnavailableError) -> Response[dict[str, Any]]:
    """Handle credential store outages."""
    logger.error("Credential store unavailable", path=request.url.path, error=str(exc))
    return _json_error(
        request,
        HTTP_503_SERVICE_UNAVAILABLE,
        "Room storage is temporarily unavailable.",
        "store_unavailable",
    )


def generic_exception_handler(request: Request, exc: Exception) -> Response[dict[str, Any]]:
    """Handle unexpected exceptions with a generic error response.

    Logs the full exception but returns a safe message to the client.
    """
    logger.exception(
        "Unhandled exception",
        correlation_id=get_correlation_id(request),
        path=request.url.path,
        method=request.method,
        exc_info=exc,
    )
    return _json_error(
        request,
        HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred. Please try again later.",
        "internal_error",
    )


def get_exception_handlers() -> dict:
    """Get all exception handlers for the application.

    Returns:
        Dictionary mapping exception types to handler functions.

    Note:
        Uses deferred imports to avoid circular dependencies.
    """
    from litestar.exceptions import HTTPException, ValidationException

    from inspiradraw.exceptions import (
        InvalidPasswordError,
        RoomExistsError,
        RoomNotFoundError,
        RoomValidationError,
        StoreUnavailableError,
    )

    return {
        ValidationException: validation_exception_handler,
        HTTPException: http_exception_handler,
        RoomValidationError: room_validation_handler,
        RoomNotFoundError: room_not_found_handler,
        RoomExistsError: room_exists_handler,
        InvalidPasswordError: invalid_password_handler,
        StoreUnavailableError: store_unavailable_handler,
        Exception: generic_exception_handler,
    }
