"""Unit tests for ViewSessionTracker."""

from datetime import UTC, datetime, timedelta

import pytest

from creator_video.application.dtos.views import CompleteViewRequest, UpdateViewRequest
from creator_video.application.services.engagement import EngagementAggregator
from creator_video.application.services.view_tracking import ViewSessionTracker
from creator_video.commons.infrastructure.documentdb import MemoryDocumentDB
from creator_video.commons.settings.models import ViewTrackingSettings
from creator_video.domain.exceptions import (
    SessionClosedException,
    SessionExpiredException,
    SessionNotFoundException,
    VideoNotFoundException,
    ViewRejectedException,
)
from creator_video.domain.models.events import EventType
from creator_video.domain.models.video import ProcessingStatus, VideoRecord, VideoStatus
from creator_video.domain.models.view_session import ClientContext, SessionState, ViewSession
from creator_video.domain.value_objects.viewer_identity import ViewerIdentity
from creator_video.infrastructure.events.outbox import DocumentOutboxPublisher
from creator_video.infrastructure.repositories.videos import VideoRepository
from creator_video.infrastructure.repositories.view_sessions import ViewSessionRepository

BROWSER = "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_0) Safari/605.1.15"

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def document_db():
    return MemoryDocumentDB()


@pytest.fixture
def videos(document_db):
    return VideoRepository(document_db, "videos")


@pytest.fixture
def sessions(document_db):
    return ViewSessionRepository(document_db, "view_sessions", "unique_viewers")


@pytest.fixture
def outbox(document_db):
    return DocumentOutboxPublisher(document_db, "domain_events")


@pytest.fixture
def settings():
    return ViewTrackingSettings(max_sessions_per_window=3, average_sample_every=2)


@pytest.fixture
def tracker(videos, sessions, outbox, settings):
    engagement = EngagementAggregator(videos, sessions, settings)
    return ViewSessionTracker(videos, sessions, engagement, outbox, settings)


@pytest.fixture
async def video(videos):
    record = VideoRecord(
        creator_id="creator-1",
        title="Weekly outlook",
        status=VideoStatus.PUBLISHED,
        processing_status=ProcessingStatus.COMPLETED,
        duration_seconds=120,
    )
    await videos.add(record)
    return record


@pytest.fixture
def viewer():
    return ViewerIdentity(user_id="user-42")


@pytest.fixture
def context():
    return ClientContext(ip_address="203.0.113.7", user_agent=BROWSER)


async def _start(tracker, video, viewer, context) -> str:
    response = await tracker.start(video.id, viewer, context)
    return response.session_id


# =============================================================================
# Start
# =============================================================================


class TestStart:
    """Tests for opening view sessions."""

    async def test_start_counts_view(self, tracker, videos, sessions, video, viewer, context):
        response = await tracker.start(video.id, viewer, context)

        assert response.success is True
        assert response.duration_seconds == 120
        stored = await sessions.get(response.session_id)
        assert stored.state == SessionState.OPEN
        assert stored.viewer_key == "user:user-42"
        assert stored.ip_address == "203.0.113.7"

        record = await videos.get(video.id)
        assert record.view_count == 1
        assert record.unique_view_count == 1

    async def test_repeat_viewer_is_not_unique(self, tracker, videos, video, viewer, context):
        await tracker.start(video.id, viewer, context)
        await tracker.start(video.id, viewer, context)

        record = await videos.get(video.id)
        assert record.view_count == 2
        assert record.unique_view_count == 1

    async def test_distinct_viewers_are_unique(self, tracker, videos, video, context):
        await tracker.start(video.id, ViewerIdentity(user_id="a"), context)
        await tracker.start(video.id, ViewerIdentity(anonymous_id="device-1"), context)

        record = await videos.get(video.id)
        assert record.unique_view_count == 2
        assert record.unique_view_count <= record.view_count

    async def test_unknown_video(self, tracker, viewer, context):
        with pytest.raises(VideoNotFoundException):
            await tracker.start("missing", viewer, context)

    async def test_bot_user_agent_rejected(self, tracker, videos, video, viewer):
        context = ClientContext(ip_address="203.0.113.7", user_agent="Googlebot/2.1")

        with pytest.raises(ViewRejectedException):
            await tracker.start(video.id, viewer, context)

        record = await videos.get(video.id)
        assert record.view_count == 0

    async def test_bot_patterns_match_case_insensitively(self, videos, sessions, outbox, video, viewer):
        settings = ViewTrackingSettings(bot_user_agent_patterns=["HeadlessChrome"])
        engagement = EngagementAggregator(videos, sessions, settings)
        tracker = ViewSessionTracker(videos, sessions, engagement, outbox, settings)
        context = ClientContext(ip_address="203.0.113.7", user_agent="headlesschrome/120")

        with pytest.raises(ViewRejectedException):
            await tracker.start(video.id, viewer, context)

    async def test_missing_ip_rejected(self, tracker, video, viewer):
        with pytest.raises(ViewRejectedException) as exc_info:
            await tracker.start(video.id, viewer, ClientContext(user_agent=BROWSER))

        assert exc_info.value.reason == "missing client address"

    async def test_rate_limited_per_source(self, tracker, videos, video, viewer, context):
        for _ in range(3):
            await tracker.start(video.id, viewer, context)

        with pytest.raises(ViewRejectedException):
            await tracker.start(video.id, viewer, context)

        record = await videos.get(video.id)
        assert record.view_count == 3

    async def test_rate_limit_is_per_viewer(self, tracker, video, viewer, context):
        for _ in range(3):
            await tracker.start(video.id, viewer, context)

        response = await tracker.start(video.id, ViewerIdentity(user_id="other"), context)
        assert response.success is True


# =============================================================================
# Update
# =============================================================================


class TestUpdate:
    """Tests for playback progress reports."""

    async def test_update_records_progress(self, tracker, video, viewer, context):
        session_id = await _start(tracker, video, viewer, context)

        session = await tracker.update(
            session_id,
            UpdateViewRequest(watch_time_seconds=30, max_watch_time_seconds=30, watch_percentage=25),
        )

        assert session.watch_time_seconds == 30
        assert session.watch_percentage == 25
        assert session.update_count == 1
        assert session.completed_view is False

    async def test_max_watch_time_never_decreases(self, tracker, sessions, video, viewer, context):
        session_id = await _start(tracker, video, viewer, context)
        await tracker.update(
            session_id,
            UpdateViewRequest(watch_time_seconds=90, max_watch_time_seconds=90, watch_percentage=75),
        )

        await tracker.update(
            session_id,
            UpdateViewRequest(watch_time_seconds=10, max_watch_time_seconds=10, watch_percentage=8),
        )

        stored = await sessions.get(session_id)
        assert stored.watch_time_seconds == 10
        assert stored.max_watch_time_seconds == 90

    async def test_percentage_is_clamped(self, tracker, video, viewer, context):
        session_id = await _start(tracker, video, viewer, context)

        session = await tracker.update(
            session_id,
            UpdateViewRequest(watch_time_seconds=5, max_watch_time_seconds=5, watch_percentage=150),
        )
        assert session.watch_percentage == 100

        session = await tracker.update(
            session_id,
            UpdateViewRequest(watch_time_seconds=5, max_watch_time_seconds=5, watch_percentage=-3),
        )
        assert session.watch_percentage == 0

    async def test_completed_view_is_sticky(self, tracker, sessions, video, viewer, context):
        session_id = await _start(tracker, video, viewer, context)
        await tracker.update(
            session_id,
            UpdateViewRequest(watch_time_seconds=100, max_watch_time_seconds=100, watch_percentage=85),
        )

        await tracker.update(
            session_id,
            UpdateViewRequest(watch_time_seconds=5, max_watch_time_seconds=100, watch_percentage=4),
        )

        stored = await sessions.get(session_id)
        assert stored.completed_view is True

    async def test_expired_session_changes_nothing(self, tracker, sessions, videos, video, viewer):
        stale = ViewSession(
            video_id=video.id,
            user_id=viewer.user_id,
            viewer_key=viewer.key,
            ip_address="203.0.113.7",
            created_at=datetime.now(UTC) - timedelta(minutes=31),
        )
        await sessions.add(stale)

        with pytest.raises(SessionExpiredException) as exc_info:
            await tracker.update(
                stale.id,
                UpdateViewRequest(watch_time_seconds=60, max_watch_time_seconds=60, watch_percentage=50),
            )

        assert exc_info.value.age_seconds > 1800
        stored = await sessions.get(stale.id)
        assert stored.watch_time_seconds == 0
        assert stored.update_count == 0
        record = await videos.get(video.id)
        assert record.view_count == 0

    async def test_update_closed_session(self, tracker, video, viewer, context):
        session_id = await _start(tracker, video, viewer, context)
        await tracker.complete(
            session_id,
            CompleteViewRequest(final_watch_time_seconds=60, max_watch_time_seconds=60),
        )

        with pytest.raises(SessionClosedException):
            await tracker.update(
                session_id,
                UpdateViewRequest(watch_time_seconds=70, max_watch_time_seconds=70, watch_percentage=58),
            )

    async def test_update_unknown_session(self, tracker):
        with pytest.raises(SessionNotFoundException):
            await tracker.update(
                "missing",
                UpdateViewRequest(watch_time_seconds=1, max_watch_time_seconds=1, watch_percentage=1),
            )

    async def test_average_watch_time_sampled(self, tracker, videos, video, viewer, context):
        session_id = await _start(tracker, video, viewer, context)
        await tracker.update(
            session_id,
            UpdateViewRequest(watch_time_seconds=30, max_watch_time_seconds=30, watch_percentage=25),
        )
        assert (await videos.get(video.id)).average_watch_time == 0

        await tracker.update(
            session_id,
            UpdateViewRequest(watch_time_seconds=60, max_watch_time_seconds=60, watch_percentage=50),
        )
        assert (await videos.get(video.id)).average_watch_time == 60


# =============================================================================
# Complete
# =============================================================================


class TestComplete:
    """Tests for closing view sessions."""

    async def test_full_viewing_flow(self, tracker, sessions, video, viewer, context):
        session_id = await _start(tracker, video, viewer, context)
        await tracker.update(
            session_id,
            UpdateViewRequest(watch_time_seconds=30, max_watch_time_seconds=30, watch_percentage=25),
        )
        await tracker.update(
            session_id,
            UpdateViewRequest(watch_time_seconds=90, max_watch_time_seconds=90, watch_percentage=75),
        )

        summary = await tracker.complete(
            session_id,
            CompleteViewRequest(
                final_watch_time_seconds=100,
                max_watch_time_seconds=100,
                completed=False,
            ),
        )

        assert summary.completed_view is True
        assert summary.completion_rate == pytest.approx(83.33, abs=0.01)
        assert summary.total_watch_time_seconds == 100
        assert summary.updated_view_count == 1
        stored = await sessions.get(session_id)
        assert stored.state == SessionState.CLOSED
        assert stored.closed_at is not None

    async def test_short_view_is_not_completed(self, tracker, video, viewer, context):
        session_id = await _start(tracker, video, viewer, context)

        summary = await tracker.complete(
            session_id,
            CompleteViewRequest(final_watch_time_seconds=30, max_watch_time_seconds=30),
        )

        assert summary.completed_view is False
        assert summary.completion_rate == 25

    async def test_player_completed_flag(self, tracker, video, viewer, context):
        session_id = await _start(tracker, video, viewer, context)

        summary = await tracker.complete(
            session_id,
            CompleteViewRequest(
                final_watch_time_seconds=10,
                max_watch_time_seconds=10,
                completed=True,
            ),
        )

        assert summary.completed_view is True

    async def test_liked_view_updates_engagement(self, tracker, videos, video, context):
        first = await _start(tracker, video, ViewerIdentity(user_id="a"), context)
        second = await _start(tracker, video, ViewerIdentity(user_id="b"), context)

        await tracker.complete(
            first,
            CompleteViewRequest(final_watch_time_seconds=60, max_watch_time_seconds=60, liked=True),
        )
        await tracker.complete(
            second,
            CompleteViewRequest(final_watch_time_seconds=60, max_watch_time_seconds=60),
        )

        record = await videos.get(video.id)
        assert record.engagement_rate == 0.5

    async def test_complete_emits_viewed_event(self, tracker, outbox, video, viewer, context):
        session_id = await _start(tracker, video, viewer, context)

        await tracker.complete(
            session_id,
            CompleteViewRequest(final_watch_time_seconds=60, max_watch_time_seconds=60),
        )

        events = await outbox.pending()
        assert len(events) == 1
        assert events[0].event_type == EventType.VIDEO_VIEWED
        assert events[0].payload["session_id"] == session_id
        assert events[0].payload["viewer"] == "user:user-42"

    async def test_complete_is_idempotent(self, tracker, videos, outbox, video, viewer, context):
        session_id = await _start(tracker, video, viewer, context)
        request = CompleteViewRequest(
            final_watch_time_seconds=110,
            max_watch_time_seconds=110,
            shared=True,
        )

        first = await tracker.complete(session_id, request)
        before = await videos.get(video.id)
        second = await tracker.complete(
            session_id,
            CompleteViewRequest(final_watch_time_seconds=5, max_watch_time_seconds=5),
        )
        after = await videos.get(video.id)

        assert second == first
        assert after.view_count == before.view_count
        assert after.engagement_rate == before.engagement_rate
        assert len(await outbox.pending()) == 1

    async def test_progress_reported_during_complete_is_kept(
        self, tracker, videos, sessions, video, viewer, context
    ):
        session_id = await _start(tracker, video, viewer, context)
        original_get = videos.get
        interleaved = False

        async def get_after_progress(video_id):
            nonlocal interleaved
            if not interleaved:
                interleaved = True
                await tracker.update(
                    session_id,
                    UpdateViewRequest(
                        watch_time_seconds=110,
                        max_watch_time_seconds=110,
                        watch_percentage=92,
                    ),
                )
            return await original_get(video_id)

        videos.get = get_after_progress
        summary = await tracker.complete(
            session_id,
            CompleteViewRequest(
                final_watch_time_seconds=10,
                max_watch_time_seconds=10,
                completed=False,
            ),
        )

        stored = await sessions.get(session_id)
        assert stored.state == SessionState.CLOSED
        assert stored.completed_view is True
        assert stored.max_watch_time_seconds == 110
        assert summary.completed_view is True

    async def test_complete_keeps_stored_flags_when_omitted(
        self, tracker, sessions, video, viewer, context
    ):
        session_id = await _start(tracker, video, viewer, context)

        summary = await tracker.complete(
            session_id,
            CompleteViewRequest(final_watch_time_seconds=10, max_watch_time_seconds=10),
        )

        assert summary.was_liked is False
        assert summary.was_shared is False

    async def test_complete_without_duration(self, tracker, videos, viewer, context):
        record = VideoRecord(
            creator_id="creator-1",
            status=VideoStatus.PUBLISHED,
            processing_status=ProcessingStatus.COMPLETED,
        )
        await videos.add(record)
        session_id = await _start(tracker, record, viewer, context)

        summary = await tracker.complete(
            session_id,
            CompleteViewRequest(final_watch_time_seconds=45, max_watch_time_seconds=45),
        )

        assert summary.completion_rate == 0
        assert summary.completed_view is False

    async def test_complete_unknown_session(self, tracker):
        with pytest.raises(SessionNotFoundException):
            await tracker.complete(
                "missing",
                CompleteViewRequest(final_watch_time_seconds=1, max_watch_time_seconds=1),
            )
