"""DTOs for video lifecycle operations."""

from datetime import datetime

from pydantic import BaseModel, Field

from creator_video.domain.lifecycle import LifecycleEvent, allowed_events
from creator_video.domain.models.video import ProcessingStatus, VideoRecord, VideoStatus


class UnpublishRequest(BaseModel):
    """Request to withdraw a published video."""

    reason: str | None = Field(
        default=None,
        max_length=1000,
        description="Free-text reason shown to the creator",
    )


class VideoResponse(BaseModel):
    """Video representation returned by lifecycle endpoints."""

    id: str = Field(description="Internal UUID")
    creator_id: str = Field(description="Owner of the video")
    title: str
    description: str
    status: VideoStatus = Field(description="Lifecycle status")
    processing_status: ProcessingStatus = Field(description="Provider processing status")
    processing_error: str | None = None
    video_url: str | None = None
    thumbnail_url: str | None = None
    duration_seconds: int | None = None
    duration_formatted: str = Field(description="Duration as MM:SS or H:MM:SS")
    trading_symbols: list[str] = Field(default_factory=list)
    view_count: int = 0
    unique_view_count: int = 0
    average_watch_time: float = 0.0
    engagement_rate: float = 0.0
    published_at: datetime | None = None
    unpublished_at: datetime | None = None
    unpublish_reason: str | None = None
    publish_count: int = 0
    last_status_change: datetime | None = None
    allowed_events: list[LifecycleEvent] = Field(
        default_factory=list,
        description="Lifecycle events accepted from the current state",
    )

    @classmethod
    def from_record(cls, video: VideoRecord) -> "VideoResponse":
        return cls(
            id=video.id,
            creator_id=video.creator_id,
            title=video.title,
            description=video.description,
            status=video.status,
            processing_status=video.processing_status,
            processing_error=video.processing_error,
            video_url=video.video_url,
            thumbnail_url=video.thumbnail_url,
            duration_seconds=video.duration_seconds,
            duration_formatted=video.duration_formatted,
            trading_symbols=video.trading_symbols,
            view_count=video.view_count,
            unique_view_count=video.unique_view_count,
            average_watch_time=video.average_watch_time,
            engagement_rate=video.engagement_rate,
            published_at=video.published_at,
            unpublished_at=video.unpublished_at,
            unpublish_reason=video.unpublish_reason,
            publish_count=video.publish_count,
            last_status_change=video.last_status_change,
            allowed_events=allowed_events(video.status, video.processing_status),
        )
