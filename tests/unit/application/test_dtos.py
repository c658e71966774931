"""Unit tests for Application DTOs."""

import pytest
from pydantic import ValidationError

from creator_video.application.dtos.lifecycle import UnpublishRequest, VideoResponse
from creator_video.application.dtos.views import (
    CompleteViewRequest,
    StartViewRequest,
    UpdateViewRequest,
    VideoViewStats,
    ViewSummary,
)
from creator_video.application.dtos.webhooks import ProviderNotification
from creator_video.domain.lifecycle import LifecycleEvent
from creator_video.domain.models.video import ProcessingStatus, VideoRecord, VideoStatus


class TestUnpublishRequest:
    """Tests for UnpublishRequest DTO."""

    def test_reason_optional(self):
        assert UnpublishRequest().reason is None

    def test_reason_too_long(self):
        with pytest.raises(ValidationError):
            UnpublishRequest(reason="x" * 1001)


class TestVideoResponse:
    """Tests for VideoResponse DTO."""

    def test_from_record(self):
        video = VideoRecord(
            creator_id="creator-1",
            title="Intro",
            status=VideoStatus.READY_TO_PUBLISH,
            processing_status=ProcessingStatus.COMPLETED,
            duration_seconds=3725,
            view_count=4,
        )

        response = VideoResponse.from_record(video)

        assert response.id == video.id
        assert response.duration_formatted == "1:02:05"
        assert response.view_count == 4
        assert response.allowed_events == [LifecycleEvent.PUBLISH]

    def test_serialized_with_enum_values(self):
        video = VideoRecord(creator_id="creator-1", status=VideoStatus.PUBLISHED)

        data = VideoResponse.from_record(video).model_dump(mode="json")

        assert data["status"] == "published"
        assert data["processing_status"] == "pending"
        assert data["allowed_events"] == ["unpublish"]


class TestViewRequests:
    """Tests for view tracking request DTOs."""

    def test_start_request_all_optional(self):
        request = StartViewRequest()
        assert request.user_id is None
        assert request.anonymous_id is None

    def test_update_rejects_negative_watch_time(self):
        with pytest.raises(ValidationError):
            UpdateViewRequest(watch_time_seconds=-1, max_watch_time_seconds=0, watch_percentage=0)

    def test_update_accepts_out_of_range_percentage(self):
        request = UpdateViewRequest(
            watch_time_seconds=1,
            max_watch_time_seconds=1,
            watch_percentage=140,
        )
        assert request.watch_percentage == 140

    def test_complete_defaults(self):
        request = CompleteViewRequest(final_watch_time_seconds=10, max_watch_time_seconds=12)
        assert request.completed is False
        assert request.liked is None
        assert request.shared is None


class TestViewSummary:
    """Tests for ViewSummary and VideoViewStats."""

    def test_completion_rate_bounds(self):
        with pytest.raises(ValidationError):
            ViewSummary(
                session_id="s",
                total_watch_time_seconds=1,
                completion_rate=101,
                completed_view=True,
                was_liked=False,
                was_shared=False,
                updated_view_count=1,
            )

    def test_stats_engagement_rate_bounds(self):
        with pytest.raises(ValidationError):
            VideoViewStats(
                video_id="v",
                total_views=1,
                unique_views=1,
                completed_views=0,
                average_watch_time=0,
                average_completion_rate=0,
                likes=0,
                shares=0,
                engagement_rate=1.5,
            )


class TestProviderNotification:
    """Tests for ProviderNotification DTO."""

    def test_extra_fields_ignored(self):
        notification = ProviderNotification.model_validate(
            {
                "notification_type": "upload",
                "public_id": "creators/a",
                "version": 1712,
                "tags": ["x"],
            }
        )
        assert notification.public_id == "creators/a"
        assert not hasattr(notification, "version")

    def test_empty_public_id_rejected(self):
        with pytest.raises(ValidationError):
            ProviderNotification(notification_type="upload", public_id="")
