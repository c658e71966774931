"""Derivation of per-video engagement counters from view sessions."""

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

from creator_video.application.dtos.views import VideoViewStats
from creator_video.commons.settings.models import ViewTrackingSettings
from creator_video.commons.telemetry import LogContext, get_logger, timed
from creator_video.domain.exceptions import VideoNotFoundException
from creator_video.domain.models.view_session import ViewSession, clamp_percentage
from creator_video.infrastructure.repositories.videos import VideoRepository
from creator_video.infrastructure.repositories.view_sessions import ViewSessionRepository


def engagement_rate(engaged_sessions: int, view_count: int) -> float:
    """Share of views in which the viewer liked or shared, in [0, 1]."""
    if view_count <= 0:
        return 0.0
    return max(0.0, min(1.0, engaged_sessions / view_count))


def average_watch_time(sessions: Sequence[ViewSession]) -> float:
    """Mean watch time in seconds, 0 when there are no sessions."""
    if not sessions:
        return 0.0
    return sum(s.watch_time_seconds for s in sessions) / len(sessions)


def average_completion_rate(sessions: Sequence[ViewSession]) -> float:
    """Mean watch percentage, 0 when there are no sessions."""
    if not sessions:
        return 0.0
    return clamp_percentage(sum(s.watch_percentage for s in sessions) / len(sessions))


class EngagementAggregator:
    """Owns the engagement counters stored on ``VideoRecord``.

    ``view_count`` and ``unique_view_count`` move through atomic increments;
    ``average_watch_time`` and ``engagement_rate`` are recomputed from the
    session table and overwritten.
    """

    def __init__(
        self,
        videos: VideoRepository,
        sessions: ViewSessionRepository,
        settings: ViewTrackingSettings,
    ) -> None:
        self._videos = videos
        self._sessions = sessions
        self._settings = settings
        self._logger = get_logger(__name__)

    async def record_view(self, video_id: str, viewer_key: str) -> bool:
        """Count a new view session.

        Args:
            video_id: Video being watched.
            viewer_key: Normalized viewer identity.

        Returns:
            True if this was the viewer's first session on the video.
        """
        first_view = await self._sessions.add_unique_viewer(video_id, viewer_key)
        await self._videos.increment(
            video_id,
            view_count=1,
            unique_view_count=1 if first_view else 0,
        )
        return first_view

    async def recompute_engagement_rate(self, video_id: str) -> float:
        """Recompute and store ``engagement_rate`` from liked/shared sessions."""
        video = await self._videos.get(video_id)
        if video is None:
            raise VideoNotFoundException(video_id)

        engaged = await self._sessions.count_engaged(video_id)
        rate = engagement_rate(engaged, video.view_count)
        await self._videos.set_metrics(video_id, engagement_rate=rate)
        return rate

    async def recompute_average_watch_time(self, video_id: str) -> float:
        """Recompute and store ``average_watch_time`` over the trailing window."""
        sessions = await self._recent_sessions(video_id)
        average = average_watch_time(sessions)
        await self._videos.set_metrics(video_id, average_watch_time=average)
        self._logger.debug(
            "Average watch time recomputed",
            extra={"video_id": video_id, "sampled": len(sessions), "average": average},
        )
        return average

    async def compute_stats(self, video_id: str) -> VideoViewStats:
        """Aggregate view statistics for a video from its sessions.

        Raises:
            VideoNotFoundException: If the video does not exist.
        """
        if await self._videos.get(video_id) is None:
            raise VideoNotFoundException(video_id)

        total = await self._sessions.count_for_video(video_id)
        recent = await self._recent_sessions(video_id)
        latest = await self._sessions.latest_for_video(video_id)

        return VideoViewStats(
            video_id=video_id,
            total_views=total,
            unique_views=await self._sessions.count_unique_viewers(video_id),
            completed_views=await self._sessions.count_for_video(
                video_id, completed_view=True
            ),
            average_watch_time=average_watch_time(recent),
            average_completion_rate=average_completion_rate(recent),
            likes=await self._sessions.count_for_video(video_id, liked=True),
            shares=await self._sessions.count_for_video(video_id, shared=True),
            engagement_rate=engagement_rate(
                await self._sessions.count_engaged(video_id), total
            ),
            last_viewed_at=latest.last_watched_at if latest else None,
        )

    @timed
    async def reconcile(self, video_id: str) -> VideoViewStats:
        """Recompute every stored counter from the session table.

        Repairs drift left by crashes between a session write and its counter
        increment. Lifecycle fields are never touched.

        Raises:
            VideoNotFoundException: If the video does not exist.
        """
        with LogContext(video_id=video_id):
            stats = await self.compute_stats(video_id)
            await self._videos.set_metrics(
                video_id,
                view_count=stats.total_views,
                unique_view_count=min(stats.unique_views, stats.total_views),
                average_watch_time=stats.average_watch_time,
                engagement_rate=stats.engagement_rate,
            )
            self._logger.info(
                "Engagement counters reconciled",
                extra={
                    "view_count": stats.total_views,
                    "unique_view_count": stats.unique_views,
                },
            )
            return stats

    async def _recent_sessions(self, video_id: str) -> list[ViewSession]:
        since = datetime.now(UTC) - timedelta(days=self._settings.average_window_days)
        return await self._sessions.recent_for_video(
            video_id,
            since,
            limit=self._settings.average_sample_limit,
        )
