"""Domain events emitted for downstream consumers."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """Kinds of domain events."""

    VIDEO_PROCESSING_STARTED = "video.processing_started"
    VIDEO_PROCESSING_COMPLETED = "video.processing_completed"
    VIDEO_PROCESSING_FAILED = "video.processing_failed"
    VIDEO_PUBLISHED = "video.published"
    VIDEO_UNPUBLISHED = "video.unpublished"
    VIDEO_VIEWED = "video.viewed"


class DomainEvent(BaseModel):
    """An immutable fact about a video.

    The ``id`` is deterministic for events that may be produced more than
    once (webhook redelivery, repeated complete calls) so the outbox can
    drop duplicates.
    """

    id: str = Field(description="Deterministic event id used for de-duplication")
    event_type: EventType
    video_id: str
    creator_id: str
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    payload: dict[str, Any] = Field(default_factory=dict)


class VideoViewedEvent(DomainEvent):
    """Emitted once per completed view session."""

    event_type: EventType = Field(default=EventType.VIDEO_VIEWED, frozen=True)

    @classmethod
    def for_session(
        cls,
        *,
        session_id: str,
        video_id: str,
        creator_id: str,
        viewer_key: str,
        user_id: str | None,
        watch_time_seconds: float,
        watch_percentage: float,
    ) -> "VideoViewedEvent":
        return cls(
            id=f"{EventType.VIDEO_VIEWED.value}:{session_id}",
            video_id=video_id,
            creator_id=creator_id,
            payload={
                "session_id": session_id,
                "viewer": viewer_key,
                "user_id": user_id,
                "watch_time_seconds": watch_time_seconds,
                "watch_percentage": watch_percentage,
            },
        )


def lifecycle_event(
    event_type: EventType,
    *,
    video_id: str,
    creator_id: str,
    discriminator: str,
    payload: dict[str, Any] | None = None,
) -> DomainEvent:
    """Build a lifecycle event whose id is stable for the same transition.

    Args:
        event_type: Kind of lifecycle event.
        video_id: Affected video.
        creator_id: Owner of the video.
        discriminator: Distinguishes repeated legitimate occurrences, e.g.
            the publish count for re-publishes.
        payload: Extra event data.
    """
    return DomainEvent(
        id=f"{event_type.value}:{video_id}:{discriminator}",
        event_type=event_type,
        video_id=video_id,
        creator_id=creator_id,
        payload=payload or {},
    )
