"""Video record domain model."""

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field


class VideoStatus(str, Enum):
    """Lifecycle status of a video."""

    UPLOADING = "uploading"  # Asset handed to the provider
    PROCESSING = "processing"  # Provider is transcoding
    READY_TO_PUBLISH = "ready_to_publish"  # Transcoded, waiting for the creator
    PUBLISHED = "published"  # Visible to viewers
    UNPUBLISHED = "unpublished"  # Withdrawn by the creator
    PROCESSING_FAILED = "processing_failed"  # Provider reported an error


class ProcessingStatus(str, Enum):
    """State of the provider transcoding pipeline, independent of publish intent."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class VideoRecord(BaseModel):
    """Core entity representing one uploaded video.

    Lifecycle fields (``status``, ``processing_status`` and the timestamps
    around them) are written by the lifecycle and webhook services only.
    Counters are written by the engagement aggregator only.
    """

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Internal UUID for this video record",
    )
    creator_id: str = Field(description="Owner of the video")
    title: str = Field(default="", description="Video title")
    description: str = Field(default="", description="Video description")

    # Provider identifiers
    provider_public_id: str | None = Field(
        default=None,
        description="Public id of the asset at the transcoding provider",
    )
    video_url: str | None = Field(default=None, description="Playable asset URL")
    thumbnail_url: str | None = Field(default=None, description="Thumbnail URL")

    status: VideoStatus = Field(default=VideoStatus.UPLOADING)
    processing_status: ProcessingStatus = Field(default=ProcessingStatus.PENDING)
    processing_error: str | None = Field(default=None)
    processing_completed_at: datetime | None = Field(default=None)

    # Asset metadata
    duration_seconds: int | None = Field(default=None, ge=0)
    file_size_bytes: int | None = Field(default=None, ge=0)
    width: int | None = Field(default=None, ge=0)
    height: int | None = Field(default=None, ge=0)
    format: str | None = Field(default=None)
    tags: list[str] = Field(default_factory=list)
    trading_symbols: list[str] = Field(
        default_factory=list,
        description="Ticker-like tokens derived from the text on publish (approximate)",
    )

    # Engagement counters
    view_count: int = Field(default=0, ge=0)
    unique_view_count: int = Field(default=0, ge=0)
    average_watch_time: float = Field(default=0.0, ge=0)
    engagement_rate: float = Field(default=0.0, ge=0, le=1)

    # Publishing
    published_at: datetime | None = Field(default=None)
    unpublished_at: datetime | None = Field(default=None)
    unpublish_reason: str | None = Field(default=None)
    publish_count: int = Field(default=0, ge=0)
    last_status_change: datetime | None = Field(default=None)

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_processed(self) -> bool:
        """Check if the provider finished transcoding."""
        return self.processing_status == ProcessingStatus.COMPLETED

    @property
    def can_be_published(self) -> bool:
        return (
            self.status in {VideoStatus.READY_TO_PUBLISH, VideoStatus.UNPUBLISHED}
            and self.is_processed
        )

    @property
    def duration_formatted(self) -> str:
        """Get duration as MM:SS or H:MM:SS."""
        total = self.duration_seconds or 0
        hours, remainder = divmod(total, 3600)
        minutes, seconds = divmod(remainder, 60)
        if hours > 0:
            return f"{hours:d}:{minutes:02d}:{seconds:02d}"
        return f"{minutes:d}:{seconds:02d}"
