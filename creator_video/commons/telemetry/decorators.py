"""Telemetry decorators for timing and exception logging."""

import functools
import inspect
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, ParamSpec, TypeVar, overload

from creator_video.commons.telemetry.logger import get_log_context, log_context_var

P = ParamSpec("P")
R = TypeVar("R")


@overload
def timed(
    func: Callable[P, Awaitable[R]],
) -> Callable[P, Awaitable[R]]: ...


@overload
def timed(
    *,
    logger: logging.Logger | None = None,
    level: int = logging.DEBUG,
    threshold_ms: float | None = None,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]: ...


def timed(
    func: Callable[P, Awaitable[R]] | None = None,
    *,
    logger: logging.Logger | None = None,
    level: int = logging.DEBUG,
    threshold_ms: float | None = None,
) -> Any:
    """Measure and log the duration of a coroutine function.

    Can be used with or without arguments:
        @timed
        async def handle(): ...

        @timed(level=logging.INFO, threshold_ms=250)
        async def reconcile(): ...

    Args:
        func: The coroutine function (when used without parentheses).
        logger: Optional logger. Defaults to the function's module logger.
        level: Log level for timing messages.
        threshold_ms: Only log if execution takes at least this long.

    Returns:
        Decorated function.
    """

    def decorator(fn: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        if not inspect.iscoroutinefunction(fn):
            raise TypeError(f"@timed requires a coroutine function, got {fn!r}")
        log = logger or logging.getLogger(fn.__module__)

        @functools.wraps(fn)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            start = time.perf_counter()
            try:
                return await fn(*args, **kwargs)
            finally:
                elapsed_ms = (time.perf_counter() - start) * 1000
                if threshold_ms is None or elapsed_ms >= threshold_ms:
                    log.log(
                        level,
                        f"{fn.__qualname__} completed",
                        extra={"duration_ms": round(elapsed_ms, 2)},
                    )

        return wrapper

    if func is not None:
        return decorator(func)
    return decorator


def log_exceptions(
    *,
    logger: logging.Logger | None = None,
    level: int = logging.ERROR,
    message: str | None = None,
    ignore: tuple[type[BaseException], ...] = (),
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Log exceptions escaping a coroutine function, then re-raise them.

    Args:
        logger: Optional logger instance.
        level: Log level for exceptions.
        message: Optional custom message.
        ignore: Exception types that are expected and not logged
            (domain errors the API maps to 4xx responses).

    Returns:
        Decorator.
    """

    def decorator(fn: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        log = logger or logging.getLogger(fn.__module__)

        @functools.wraps(fn)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return await fn(*args, **kwargs)
            except ignore:
                raise
            except Exception as e:
                log.log(
                    level,
                    message or f"Exception in {fn.__qualname__}",
                    exc_info=True,
                    extra={"exception_type": type(e).__name__},
                )
                raise

        return wrapper

    return decorator


class LogContext:
    """Context manager adding temporary keys to the logging context.

    Example:
        with LogContext(video_id=video.id, session_id=session.id):
            logger.info("View session started")
    """

    def __init__(self, **kwargs: Any) -> None:
        self.context = kwargs
        self._previous_context: dict[str, Any] = {}

    def __enter__(self) -> "LogContext":
        self._previous_context = get_log_context()
        log_context_var.set({**self._previous_context, **self.context})
        return self

    def __exit__(self, *args: Any) -> None:
        log_context_var.set(self._previous_context)
