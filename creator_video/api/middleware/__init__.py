"""API middleware components."""

from creator_video.api.middleware.error_handler import (
    error_handler_middleware,
    error_status,
)
from creator_video.api.middleware.logging import LoggingMiddleware

__all__ = [
    "LoggingMiddleware",
    "error_handler_middleware",
    "error_status",
]
