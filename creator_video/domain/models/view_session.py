"""View session domain model."""

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field

from creator_video.domain.value_objects.viewer_identity import ViewerIdentity

# A view counts as completed once this share of the video was watched
COMPLETION_THRESHOLD_PERCENT = 80.0


class SessionState(str, Enum):
    """Per-session state machine: open -> (update)* -> closed."""

    OPEN = "open"
    CLOSED = "closed"


def clamp_percentage(value: float) -> float:
    """Clamp a watch percentage into [0, 100]."""
    if value != value:  # NaN
        return 0.0
    return max(0.0, min(100.0, float(value)))


class ClientContext(BaseModel):
    """Request context captured when a session starts."""

    ip_address: str = Field(default="", description="Viewer IP address")
    user_agent: str | None = Field(default=None)
    country: str | None = Field(default=None)
    city: str | None = Field(default=None)
    device_type: str | None = Field(default=None)
    traffic_source: str | None = Field(default=None)


class ViewSession(BaseModel):
    """One playback attempt by one viewer.

    The session id is the idempotency key for update and complete calls.
    ``max_watch_time_seconds`` never decreases; ``watch_time_seconds`` may go
    back when the viewer seeks backwards.
    """

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Session id",
    )
    video_id: str = Field(description="Video being watched")
    user_id: str | None = Field(default=None)
    anonymous_id: str | None = Field(default=None)
    viewer_key: str = Field(description="Normalized viewer identity key")

    ip_address: str = Field(default="")
    user_agent: str | None = Field(default=None)
    country: str | None = Field(default=None)
    city: str | None = Field(default=None)
    device_type: str | None = Field(default=None)
    traffic_source: str | None = Field(default=None)

    watch_time_seconds: float = Field(default=0.0, ge=0)
    max_watch_time_seconds: float = Field(default=0.0, ge=0)
    watch_percentage: float = Field(default=0.0, ge=0, le=100)
    completed_view: bool = Field(default=False)
    liked: bool = Field(default=False)
    shared: bool = Field(default=False)

    state: SessionState = Field(default=SessionState.OPEN)
    update_count: int = Field(default=0, ge=0)

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    last_watched_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    closed_at: datetime | None = Field(default=None)

    @classmethod
    def start(
        cls,
        video_id: str,
        identity: ViewerIdentity,
        context: ClientContext,
    ) -> "ViewSession":
        """Create a fresh, zeroed session."""
        return cls(
            video_id=video_id,
            user_id=identity.user_id,
            anonymous_id=identity.anonymous_id,
            viewer_key=identity.key,
            ip_address=context.ip_address,
            user_agent=context.user_agent,
            country=context.country,
            city=context.city,
            device_type=context.device_type,
            traffic_source=context.traffic_source,
        )

    @property
    def identity(self) -> ViewerIdentity:
        return ViewerIdentity(user_id=self.user_id, anonymous_id=self.anonymous_id)

    @property
    def is_closed(self) -> bool:
        return self.state == SessionState.CLOSED

    @property
    def engaged(self) -> bool:
        """Whether the viewer liked or shared during this session."""
        return self.liked or self.shared

    def age_seconds(self, now: datetime | None = None) -> float:
        """Seconds elapsed since the session was created."""
        current = now or datetime.now(UTC)
        created = self.created_at
        if created.tzinfo is None:
            created = created.replace(tzinfo=UTC)
        return (current - created).total_seconds()

    def is_expired(self, ttl_seconds: float, now: datetime | None = None) -> bool:
        return self.age_seconds(now) > ttl_seconds
