"""DTOs for view tracking and engagement statistics."""

from datetime import datetime

from pydantic import BaseModel, Field


class StartViewRequest(BaseModel):
    """Request to open a view session.

    Client address and user agent come from the HTTP request itself.
    """

    user_id: str | None = Field(default=None, description="Signed-in viewer")
    anonymous_id: str | None = Field(
        default=None,
        description="Client-generated id for signed-out viewers; generated if absent",
    )
    country: str | None = None
    city: str | None = None
    device_type: str | None = None
    traffic_source: str | None = None


class StartViewResponse(BaseModel):
    """Result of opening a view session."""

    success: bool
    session_id: str | None = None
    duration_seconds: int | None = Field(
        default=None,
        description="Video duration, used by the player to compute percentages",
    )
    error_message: str | None = None


class UpdateViewRequest(BaseModel):
    """Periodic playback progress report."""

    watch_time_seconds: float = Field(ge=0, description="Current playback position")
    max_watch_time_seconds: float = Field(ge=0, description="Furthest position reached")
    watch_percentage: float = Field(description="Client-side percentage; clamped to 0-100")


class UpdateViewResponse(BaseModel):
    """Result of a progress report."""

    success: bool
    session_expired: bool = False
    error_message: str | None = None


class CompleteViewRequest(BaseModel):
    """Final report closing a view session."""

    final_watch_time_seconds: float = Field(ge=0)
    max_watch_time_seconds: float = Field(ge=0)
    completed: bool = Field(default=False, description="Player reached the end")
    liked: bool | None = None
    shared: bool | None = None


class ViewSummary(BaseModel):
    """What a closed session contributed."""

    session_id: str
    total_watch_time_seconds: float
    completion_rate: float = Field(ge=0, le=100, description="Watch percentage")
    completed_view: bool
    was_liked: bool
    was_shared: bool
    updated_view_count: int = Field(description="Video view count after this session")


class CompleteViewResponse(BaseModel):
    """Result of closing a view session."""

    success: bool
    summary: ViewSummary | None = None
    error_message: str | None = None


class VideoViewStats(BaseModel):
    """Aggregated view statistics for one video."""

    video_id: str
    total_views: int = Field(ge=0)
    unique_views: int = Field(ge=0)
    completed_views: int = Field(ge=0)
    average_watch_time: float = Field(ge=0, description="Seconds, trailing window")
    average_completion_rate: float = Field(
        ge=0, le=100, description="Mean watch percentage, trailing window"
    )
    likes: int = Field(ge=0)
    shares: int = Field(ge=0)
    engagement_rate: float = Field(ge=0, le=1)
    last_viewed_at: datetime | None = None
