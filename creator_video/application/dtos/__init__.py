"""Data Transfer Objects for application layer."""

from creator_video.application.dtos.lifecycle import UnpublishRequest, VideoResponse
from creator_video.application.dtos.views import (
    CompleteViewRequest,
    CompleteViewResponse,
    StartViewRequest,
    StartViewResponse,
    UpdateViewRequest,
    UpdateViewResponse,
    VideoViewStats,
    ViewSummary,
)
from creator_video.application.dtos.webhooks import ProviderNotification, WebhookResult

__all__ = [
    # Lifecycle DTOs
    "UnpublishRequest",
    "VideoResponse",
    # View DTOs
    "StartViewRequest",
    "StartViewResponse",
    "UpdateViewRequest",
    "UpdateViewResponse",
    "CompleteViewRequest",
    "CompleteViewResponse",
    "ViewSummary",
    "VideoViewStats",
    # Webhook DTOs
    "ProviderNotification",
    "WebhookResult",
]
