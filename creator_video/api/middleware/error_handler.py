"""Error handling middleware and exception mapping."""

from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import RequestResponseEndpoint
from starlette.responses import Response

from creator_video.commons.telemetry.logger import get_logger
from creator_video.domain.exceptions import (
    DomainException,
    InvalidArgumentException,
    InvalidSignatureException,
    InvalidStateException,
    SessionClosedException,
    SessionExpiredException,
    SessionNotFoundException,
    VideoNotFoundException,
    ViewRejectedException,
)

logger = get_logger(__name__)

# Checked in order; subclasses before their bases
_DOMAIN_ERRORS: list[tuple[type[DomainException], int, str]] = [
    (VideoNotFoundException, status.HTTP_404_NOT_FOUND, "VIDEO_NOT_FOUND"),
    (SessionNotFoundException, status.HTTP_404_NOT_FOUND, "SESSION_NOT_FOUND"),
    (SessionClosedException, status.HTTP_400_BAD_REQUEST, "SESSION_CLOSED"),
    (InvalidStateException, status.HTTP_400_BAD_REQUEST, "INVALID_STATE"),
    (InvalidArgumentException, status.HTTP_400_BAD_REQUEST, "INVALID_ARGUMENT"),
    (InvalidSignatureException, status.HTTP_401_UNAUTHORIZED, "INVALID_SIGNATURE"),
    (SessionExpiredException, status.HTTP_410_GONE, "SESSION_EXPIRED"),
    (ViewRejectedException, status.HTTP_429_TOO_MANY_REQUESTS, "VIEW_REJECTED"),
]


def error_status(exc: Exception) -> tuple[int, str]:
    """Map an exception to its HTTP status code and error code.

    Args:
        exc: Raised exception.

    Returns:
        ``(status_code, error_code)``; unknown exceptions map to 500.
    """
    for exc_type, status_code, code in _DOMAIN_ERRORS:
        if isinstance(exc, exc_type):
            return status_code, code
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR"


def _error_details(exc: Exception) -> dict[str, Any]:
    if isinstance(exc, VideoNotFoundException | ViewRejectedException):
        return {"video_id": exc.video_id}
    if isinstance(exc, SessionNotFoundException | SessionExpiredException):
        return {"session_id": exc.session_id}
    if isinstance(exc, InvalidStateException):
        return {"status": str(getattr(exc.status, "value", exc.status)), "action": exc.action}
    if isinstance(exc, InvalidArgumentException):
        return {"field": exc.field}
    return {}


def _build_error_response(
    request: Request,
    code: str,
    message: str,
    status_code: int,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Build standardized error response.

    Args:
        request: HTTP request.
        code: Error code.
        message: Error message.
        status_code: HTTP status code.
        details: Additional details.

    Returns:
        JSON error response.
    """
    request_id = getattr(request.state, "request_id", "unknown")

    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
                "request_id": request_id,
            }
        },
    )


def _handle_exception(request: Request, exc: Exception) -> JSONResponse:
    status_code, code = error_status(exc)

    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.exception(f"Unexpected error: {exc}")
        return _build_error_response(
            request=request,
            code=code,
            message="An unexpected error occurred",
            status_code=status_code,
        )

    logger.warning(
        f"Request failed: {code}",
        extra={"error_code": code, "error_message": str(exc)},
    )
    message = str(exc)
    return _build_error_response(
        request=request,
        code=code,
        message=message,
        status_code=status_code,
        details=_error_details(exc),
    )


async def error_handler_middleware(
    request: Request,
    call_next: RequestResponseEndpoint,
) -> Response:
    """Middleware to catch and format all exceptions.

    Args:
        request: HTTP request.
        call_next: Next handler in chain.

    Returns:
        HTTP response.
    """
    try:
        return await call_next(request)
    except Exception as exc:
        return _handle_exception(request, exc)
