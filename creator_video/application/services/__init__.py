"""Application services for the video lifecycle and view tracking."""

from creator_video.application.services.engagement import (
    EngagementAggregator,
    average_completion_rate,
    average_watch_time,
    engagement_rate,
)
from creator_video.application.services.lifecycle import VideoLifecycleService
from creator_video.application.services.view_tracking import ViewSessionTracker
from creator_video.application.services.webhooks import (
    WebhookIngestionService,
    compute_signature,
)

__all__ = [
    "EngagementAggregator",
    "VideoLifecycleService",
    "ViewSessionTracker",
    "WebhookIngestionService",
    "average_completion_rate",
    "average_watch_time",
    "compute_signature",
    "engagement_rate",
]
