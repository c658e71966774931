"""Creator-facing lifecycle commands: publish, unpublish, republish."""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from creator_video.commons.telemetry import LogContext, get_logger, timed
from creator_video.domain.exceptions import InvalidStateException, VideoNotFoundException
from creator_video.domain.lifecycle import LifecycleEvent, next_status
from creator_video.domain.models.events import EventType, lifecycle_event
from creator_video.domain.models.video import VideoRecord, VideoStatus
from creator_video.domain.symbols import extract_trading_symbols
from creator_video.infrastructure.events.base import EventPublisherBase
from creator_video.infrastructure.repositories.videos import VideoRepository

ChangeBuilder = Callable[[VideoRecord, datetime], dict[str, Any]]

# One initial attempt plus one re-read after losing a race
_MAX_ATTEMPTS = 2


class VideoLifecycleService:
    """Applies creator commands to the video lifecycle state machine.

    Each command reads the video, computes the target status with
    ``next_status`` and writes it conditionally on the status it was computed
    from. A command that loses a race re-reads once and fails with
    ``InvalidStateException`` if it is no longer legal.
    """

    def __init__(
        self,
        videos: VideoRepository,
        publisher: EventPublisherBase,
    ) -> None:
        """Initialize lifecycle service.

        Args:
            videos: Video record repository.
            publisher: Domain event publisher.
        """
        self._videos = videos
        self._publisher = publisher
        self._logger = get_logger(__name__)

    async def get_video(self, video_id: str) -> VideoRecord:
        """Load a video.

        Raises:
            VideoNotFoundException: If the video does not exist.
        """
        video = await self._videos.get(video_id)
        if video is None:
            raise VideoNotFoundException(video_id)
        return video

    @timed
    async def publish(self, video_id: str) -> VideoRecord:
        """Make a transcoded video visible.

        Derives ``trading_symbols`` from title and description when none are
        stored yet.

        Raises:
            VideoNotFoundException: If the video does not exist.
            InvalidStateException: If the video is not ready_to_publish or
                unpublished, or transcoding has not completed.
        """
        video = await self._transition(
            video_id,
            LifecycleEvent.PUBLISH,
            "publish",
            _publish_changes,
        )
        await self._emit(video, EventType.VIDEO_PUBLISHED)
        return video

    @timed
    async def unpublish(self, video_id: str, reason: str | None = None) -> VideoRecord:
        """Withdraw a published video.

        Args:
            video_id: Video to unpublish.
            reason: Optional free-text reason, stored on the record.

        Raises:
            VideoNotFoundException: If the video does not exist.
            InvalidStateException: If the video is not published.
        """

        def changes(_video: VideoRecord, now: datetime) -> dict[str, Any]:
            return {
                "status": VideoStatus.UNPUBLISHED,
                "unpublished_at": now,
                "unpublish_reason": reason,
                "last_status_change": now,
            }

        video = await self._transition(
            video_id,
            LifecycleEvent.UNPUBLISH,
            "unpublish",
            changes,
        )
        await self._emit(video, EventType.VIDEO_UNPUBLISHED, {"reason": reason})
        return video

    @timed
    async def republish(self, video_id: str) -> VideoRecord:
        """Publish an unpublished video again.

        Raises:
            VideoNotFoundException: If the video does not exist.
            InvalidStateException: If the video is not unpublished.
        """
        video = await self._transition(
            video_id,
            LifecycleEvent.REPUBLISH,
            "republish",
            _publish_changes,
        )
        await self._emit(video, EventType.VIDEO_PUBLISHED, {"republished": True})
        return video

    async def _transition(
        self,
        video_id: str,
        event: LifecycleEvent,
        action: str,
        build_changes: ChangeBuilder,
    ) -> VideoRecord:
        with LogContext(video_id=video_id, lifecycle_event=event.value):
            for _ in range(_MAX_ATTEMPTS):
                video = await self.get_video(video_id)
                target = next_status(video.status, event, video.processing_status)
                if target is None:
                    raise InvalidStateException(
                        video.id,
                        video.status,
                        action,
                        _rejection_reason(video, event),
                    )

                now = datetime.now(UTC)
                changes = build_changes(video, now)
                changes["status"] = target
                applied = await self._videos.update_if(
                    video.id,
                    {"status": video.status, "processing_status": video.processing_status},
                    changes,
                )
                if applied:
                    self._logger.info(
                        f"Video {action}ed",
                        extra={"from_status": video.status.value, "to_status": target.value},
                    )
                    return video.model_copy(update={**changes, "updated_at": now})

                self._logger.info("Lifecycle write lost a race, re-reading video")

            raise InvalidStateException(
                video.id,
                video.status,
                action,
                "video was modified concurrently",
            )

    async def _emit(
        self,
        video: VideoRecord,
        event_type: EventType,
        payload: dict[str, Any] | None = None,
    ) -> None:
        await self._publisher.publish(
            lifecycle_event(
                event_type,
                video_id=video.id,
                creator_id=video.creator_id,
                discriminator=str(video.publish_count),
                payload={"status": video.status.value, **(payload or {})},
            )
        )


def _publish_changes(video: VideoRecord, now: datetime) -> dict[str, Any]:
    changes: dict[str, Any] = {
        "published_at": now,
        "publish_count": video.publish_count + 1,
        "unpublish_reason": None,
        "last_status_change": now,
    }
    if not video.trading_symbols:
        changes["trading_symbols"] = extract_trading_symbols(video.title, video.description)
    return changes


def _rejection_reason(video: VideoRecord, event: LifecycleEvent) -> str:
    if event in {LifecycleEvent.PUBLISH, LifecycleEvent.REPUBLISH}:
        if video.status == VideoStatus.PUBLISHED:
            return "video is already published"
        if video.can_be_published:
            return "only unpublished videos can be republished"
        if video.status in {VideoStatus.READY_TO_PUBLISH, VideoStatus.UNPUBLISHED}:
            return "processing has not completed"
        if event == LifecycleEvent.REPUBLISH:
            return "only unpublished videos can be republished"
        return "video is not ready to publish"
    return "only published videos can be unpublished"
