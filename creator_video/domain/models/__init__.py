"""Domain models."""

from creator_video.domain.models.events import (
    DomainEvent,
    EventType,
    VideoViewedEvent,
    lifecycle_event,
)
from creator_video.domain.models.video import ProcessingStatus, VideoRecord, VideoStatus
from creator_video.domain.models.view_session import (
    COMPLETION_THRESHOLD_PERCENT,
    ClientContext,
    SessionState,
    ViewSession,
    clamp_percentage,
)

__all__ = [
    # Video
    "VideoRecord",
    "VideoStatus",
    "ProcessingStatus",
    # View sessions
    "ViewSession",
    "SessionState",
    "ClientContext",
    "COMPLETION_THRESHOLD_PERCENT",
    "clamp_percentage",
    # Events
    "DomainEvent",
    "EventType",
    "VideoViewedEvent",
    "lifecycle_event",
]
