"""View session tracking: start, update and complete."""

from datetime import UTC, datetime, timedelta

from creator_video.application.dtos.views import (
    CompleteViewRequest,
    StartViewResponse,
    UpdateViewRequest,
    ViewSummary,
)
from creator_video.application.services.engagement import EngagementAggregator
from creator_video.commons.settings.models import ViewTrackingSettings
from creator_video.commons.telemetry import LogContext, get_logger
from creator_video.domain.exceptions import (
    SessionClosedException,
    SessionExpiredException,
    SessionNotFoundException,
    VideoNotFoundException,
    ViewRejectedException,
)
from creator_video.domain.models.events import VideoViewedEvent
from creator_video.domain.models.video import VideoRecord
from creator_video.domain.models.view_session import (
    ClientContext,
    SessionState,
    ViewSession,
    clamp_percentage,
)
from creator_video.domain.value_objects.viewer_identity import ViewerIdentity
from creator_video.infrastructure.events.base import EventPublisherBase
from creator_video.infrastructure.repositories.videos import VideoRepository
from creator_video.infrastructure.repositories.view_sessions import ViewSessionRepository

# Concurrent progress reports for one session; the loser re-reads and retries
_MAX_UPDATE_ATTEMPTS = 3


class ViewSessionTracker:
    """Tracks playback sessions and feeds the engagement aggregator.

    A session is ``open`` from start until complete closes it. Updates and
    the closing write are compare-and-set writes on ``update_count``, so
    concurrent reports for one session never lower
    ``max_watch_time_seconds`` or clear ``completed_view``.
    """

    def __init__(
        self,
        videos: VideoRepository,
        sessions: ViewSessionRepository,
        engagement: EngagementAggregator,
        publisher: EventPublisherBase,
        settings: ViewTrackingSettings,
    ) -> None:
        """Initialize view session tracker.

        Args:
            videos: Video record repository.
            sessions: View session repository.
            engagement: Engagement counter owner.
            publisher: Domain event publisher.
            settings: Expiry, completion and abuse thresholds.
        """
        self._videos = videos
        self._sessions = sessions
        self._engagement = engagement
        self._publisher = publisher
        self._settings = settings
        self._logger = get_logger(__name__)

    async def start(
        self,
        video_id: str,
        identity: ViewerIdentity,
        context: ClientContext,
    ) -> StartViewResponse:
        """Open a view session and count the view.

        Args:
            video_id: Video being watched.
            identity: Signed-in or anonymous viewer.
            context: Client address, user agent and attribution.

        Returns:
            The new session id and the video duration.

        Raises:
            VideoNotFoundException: If the video does not exist.
            ViewRejectedException: If the abuse heuristics refuse the session.
        """
        with LogContext(video_id=video_id, viewer=identity.key):
            video = await self._videos.get(video_id)
            if video is None:
                raise VideoNotFoundException(video_id)

            await self._check_abuse(video_id, identity, context)

            session = ViewSession.start(video.id, identity, context)
            await self._sessions.add(session)
            first_view = await self._engagement.record_view(video.id, identity.key)

            self._logger.info(
                "View session started",
                extra={"session_id": session.id, "unique_view": first_view},
            )
            return StartViewResponse(
                success=True,
                session_id=session.id,
                duration_seconds=video.duration_seconds,
            )

    async def update(self, session_id: str, request: UpdateViewRequest) -> ViewSession:
        """Record playback progress.

        Raises:
            SessionNotFoundException: If the session does not exist.
            SessionExpiredException: If the session is older than the TTL.
            SessionClosedException: If the session was already completed.
        """
        session = await self._load(session_id)
        for _ in range(_MAX_UPDATE_ATTEMPTS):
            if session.is_expired(self._settings.session_ttl_seconds):
                self._logger.info(
                    "Update for expired view session",
                    extra={"session_id": session_id, "video_id": session.video_id},
                )
                raise SessionExpiredException(session_id, session.age_seconds())
            if session.is_closed:
                raise SessionClosedException(session_id)

            percentage = clamp_percentage(request.watch_percentage)
            changes = {
                "watch_time_seconds": request.watch_time_seconds,
                "max_watch_time_seconds": max(
                    session.max_watch_time_seconds,
                    request.max_watch_time_seconds,
                ),
                "watch_percentage": percentage,
                "completed_view": session.completed_view
                or percentage >= self._settings.completion_threshold_percent,
                "last_watched_at": datetime.now(UTC),
            }
            applied = await self._sessions.update_if_open(
                session_id,
                changes,
                expected={"update_count": session.update_count},
                increments={"update_count": 1},
            )
            if applied:
                update_count = session.update_count + 1
                if update_count % self._settings.average_sample_every == 0:
                    await self._engagement.recompute_average_watch_time(session.video_id)
                return session.model_copy(update={**changes, "update_count": update_count})

            session = await self._load(session_id)

        raise RuntimeError(f"Could not record progress for session {session_id}")

    async def complete(self, session_id: str, request: CompleteViewRequest) -> ViewSummary:
        """Close a session with its final numbers.

        Completing an already closed session returns its stored summary and
        changes nothing. Expiry is not enforced here, so late completes land.

        Raises:
            SessionNotFoundException: If the session does not exist.
        """
        session = await self._load(session_id)
        with LogContext(session_id=session_id, video_id=session.video_id):
            video = await self._videos.get(session.video_id)
            duration = video.duration_seconds if video else None
            percentage = (
                clamp_percentage(request.final_watch_time_seconds / duration * 100)
                if duration
                else 0.0
            )

            for _ in range(_MAX_UPDATE_ATTEMPTS):
                if session.is_closed:
                    self._logger.debug("Complete for closed view session, returning summary")
                    return await self._summary(session)

                now = datetime.now(UTC)
                changes = {
                    "watch_time_seconds": request.final_watch_time_seconds,
                    "max_watch_time_seconds": max(
                        session.max_watch_time_seconds,
                        request.max_watch_time_seconds,
                    ),
                    "watch_percentage": percentage,
                    "completed_view": session.completed_view
                    or request.completed
                    or percentage >= self._settings.completion_threshold_percent,
                    "liked": session.liked if request.liked is None else request.liked,
                    "shared": session.shared if request.shared is None else request.shared,
                    "state": SessionState.CLOSED,
                    "closed_at": now,
                    "last_watched_at": now,
                }
                applied = await self._sessions.update_if_open(
                    session_id,
                    changes,
                    expected={"update_count": session.update_count},
                )
                if applied:
                    closed = session.model_copy(update=changes)
                    await self._on_closed(closed, video)
                    return await self._summary(closed)

                self._logger.debug("View session changed concurrently, re-reading")
                session = await self._load(session_id)

            raise RuntimeError(f"Could not complete view session {session_id}")

    async def _on_closed(self, closed: ViewSession, video: VideoRecord | None) -> None:
        if video is not None:
            await self._engagement.recompute_engagement_rate(video.id)
            await self._publisher.publish(
                VideoViewedEvent.for_session(
                    session_id=closed.id,
                    video_id=video.id,
                    creator_id=video.creator_id,
                    viewer_key=closed.viewer_key,
                    user_id=closed.user_id,
                    watch_time_seconds=closed.watch_time_seconds,
                    watch_percentage=closed.watch_percentage,
                )
            )
        self._logger.info(
            "View session completed",
            extra={
                "watch_percentage": round(closed.watch_percentage, 2),
                "completed_view": closed.completed_view,
            },
        )

    async def _load(self, session_id: str) -> ViewSession:
        session = await self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundException(session_id)
        return session

    async def _check_abuse(
        self,
        video_id: str,
        identity: ViewerIdentity,
        context: ClientContext,
    ) -> None:
        if self._settings.require_ip_address and not context.ip_address:
            self._reject(video_id, "missing client address")

        user_agent = (context.user_agent or "").lower()
        if any(
            p.lower() in user_agent for p in self._settings.bot_user_agent_patterns
        ):
            self._reject(video_id, "automated user agent")

        since = datetime.now(UTC) - timedelta(seconds=self._settings.fraud_window_seconds)
        recent = await self._sessions.count_recent_from_source(
            video_id,
            context.ip_address,
            context.user_agent,
            identity.key,
            since,
        )
        if recent >= self._settings.max_sessions_per_window:
            self._reject(video_id, "too many sessions from the same source")

    def _reject(self, video_id: str, reason: str) -> None:
        self._logger.warning("View session rejected", extra={"reason": reason})
        raise ViewRejectedException(video_id, reason)

    async def _summary(self, session: ViewSession) -> ViewSummary:
        video = await self._videos.get(session.video_id)
        return ViewSummary(
            session_id=session.id,
            total_watch_time_seconds=session.watch_time_seconds,
            completion_rate=session.watch_percentage,
            completed_view=session.completed_view,
            was_liked=session.liked,
            was_shared=session.shared,
            updated_view_count=video.view_count if video else 0,
        )
