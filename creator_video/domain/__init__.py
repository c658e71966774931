"""Domain layer - business models and logic."""

from creator_video.domain.exceptions import (
    DomainException,
    InvalidArgumentException,
    InvalidSignatureException,
    InvalidStateException,
    SessionClosedException,
    SessionExpiredException,
    SessionNotFoundException,
    TransientUpstreamException,
    VideoNotFoundException,
    ViewRejectedException,
)
from creator_video.domain.lifecycle import (
    LifecycleEvent,
    ProviderOutcome,
    allowed_events,
    next_processing_status,
    next_status,
    settle,
)
from creator_video.domain.models import (
    ClientContext,
    DomainEvent,
    EventType,
    ProcessingStatus,
    SessionState,
    VideoRecord,
    VideoStatus,
    VideoViewedEvent,
    ViewSession,
)
from creator_video.domain.symbols import extract_trading_symbols
from creator_video.domain.value_objects import ViewerIdentity

__all__ = [
    # Exceptions
    "DomainException",
    "VideoNotFoundException",
    "SessionNotFoundException",
    "InvalidStateException",
    "SessionClosedException",
    "SessionExpiredException",
    "ViewRejectedException",
    "InvalidSignatureException",
    "InvalidArgumentException",
    "TransientUpstreamException",
    # Lifecycle
    "LifecycleEvent",
    "ProviderOutcome",
    "allowed_events",
    "next_processing_status",
    "next_status",
    "settle",
    "extract_trading_symbols",
    # Models
    "VideoRecord",
    "VideoStatus",
    "ProcessingStatus",
    "ViewSession",
    "SessionState",
    "ClientContext",
    "DomainEvent",
    "EventType",
    "VideoViewedEvent",
    # Value Objects
    "ViewerIdentity",
]
