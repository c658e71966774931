"""Structured logging with JSON output and request correlation."""

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any, ClassVar

# Request-scoped correlation id, set by the logging middleware
correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)

# Request-scoped key/value context (video_id, session_id, ...)
log_context_var: ContextVar[dict[str, Any]] = ContextVar("log_context")

# Attributes every LogRecord carries; anything else came in through ``extra``
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}

# Extra keys never written to the log in clear text
REDACTED_KEYS = frozenset({"signature", "secret", "authorization", "password"})
REDACTED_VALUE = "***"


def get_correlation_id() -> str | None:
    """Get the current correlation ID."""
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set the correlation ID for the current context.

    Args:
        correlation_id: Optional correlation ID. Generated if not provided.

    Returns:
        The correlation ID that was set.
    """
    cid = correlation_id or str(uuid.uuid4())
    correlation_id_var.set(cid)
    return cid


def get_log_context() -> dict[str, Any]:
    """Get a copy of the current logging context."""
    try:
        return log_context_var.get().copy()
    except LookupError:
        return {}


def set_log_context(**kwargs: Any) -> None:
    """Add key-value pairs to the logging context of the current request."""
    ctx = get_log_context()
    ctx.update(kwargs)
    log_context_var.set(ctx)


def clear_log_context() -> None:
    log_context_var.set({})


def _redact(key: str, value: Any) -> Any:
    return REDACTED_VALUE if key.lower() in REDACTED_KEYS else value


class JsonFormatter(logging.Formatter):
    """One JSON object per line, enriched with service and request context."""

    def __init__(
        self,
        *,
        service: str | None = None,
        environment: str | None = None,
        include_path: bool = True,
    ) -> None:
        """Initialize the JSON formatter.

        Args:
            service: Service name stamped on every line.
            environment: Deployment environment stamped on every line.
            include_path: Include file path and line number.
        """
        super().__init__()
        self.service = service
        self.environment = environment
        self.include_path = include_path

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }
        if self.service:
            log_data["service"] = self.service
        if self.environment:
            log_data["environment"] = self.environment
        if self.include_path:
            log_data["path"] = f"{record.pathname}:{record.lineno}"

        cid = get_correlation_id()
        if cid:
            log_data["correlation_id"] = cid

        log_data["message"] = record.getMessage()

        context = get_log_context()
        if context:
            log_data["context"] = {k: _redact(k, v) for k, v in context.items()}

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS:
                log_data[key] = _redact(key, value)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable single-line formatter for local development."""

    COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET: ClassVar[str] = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, UTC).strftime(
            "%Y-%m-%d %H:%M:%S"
        )
        color = self.COLORS.get(record.levelname, "")

        parts = [
            timestamp,
            f"{color}{record.levelname:8}{self.RESET}",
            f"[{record.name}]",
        ]

        cid = get_correlation_id()
        if cid:
            parts.append(f"[{cid[:8]}]")

        parts.append(record.getMessage())

        extras = {
            key: _redact(key, value)
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS
        }
        if extras:
            parts.append(" ".join(f"{k}={v}" for k, v in sorted(extras.items())))

        message = " ".join(parts)
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


def configure_logging(
    level: str = "INFO",
    format_type: str = "json",
    logger_name: str | None = None,
    *,
    service: str | None = None,
    environment: str | None = None,
) -> logging.Logger:
    """Configure and return a logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        format_type: Output format ('json' or 'text').
        logger_name: Optional logger name. Defaults to root logger.
        service: Service name for JSON output.
        environment: Environment name for JSON output.

    Returns:
        Configured logger instance.
    """
    numeric_level = getattr(logging, level.upper())
    logger = logging.getLogger(logger_name)
    logger.setLevel(numeric_level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    if format_type == "json":
        handler.setFormatter(JsonFormatter(service=service, environment=environment))
    else:
        handler.setFormatter(TextFormatter())

    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger by name (usually ``__name__``)."""
    return logging.getLogger(name)
