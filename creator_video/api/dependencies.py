"""FastAPI dependency injection for services and settings."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from creator_video.application.services.engagement import EngagementAggregator
from creator_video.application.services.lifecycle import VideoLifecycleService
from creator_video.application.services.view_tracking import ViewSessionTracker
from creator_video.application.services.webhooks import WebhookIngestionService
from creator_video.commons.settings.loader import get_settings as _load_settings
from creator_video.commons.settings.models import Settings
from creator_video.infrastructure.factory import (
    InfrastructureFactory,
    get_factory,
    reset_factory,
)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Application settings loaded from config files and environment.
    """
    return _load_settings()


def get_infrastructure_factory(
    settings: Annotated[Settings, Depends(get_settings)],
) -> InfrastructureFactory:
    return get_factory(settings)


def get_lifecycle_service(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
) -> VideoLifecycleService:
    return VideoLifecycleService(
        videos=factory.get_video_repository(),
        publisher=factory.get_event_publisher(),
    )


def get_webhook_service(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> WebhookIngestionService:
    return WebhookIngestionService(
        videos=factory.get_video_repository(),
        publisher=factory.get_event_publisher(),
        settings=settings.webhook,
    )


def get_engagement_aggregator(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> EngagementAggregator:
    return EngagementAggregator(
        videos=factory.get_video_repository(),
        sessions=factory.get_view_session_repository(),
        settings=settings.view_tracking,
    )


def get_view_tracker(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
    engagement: Annotated[EngagementAggregator, Depends(get_engagement_aggregator)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ViewSessionTracker:
    """Get view session tracker with all dependencies.

    Args:
        factory: Infrastructure factory.
        engagement: Engagement aggregator sharing the same repositories.
        settings: Application settings.

    Returns:
        Configured view session tracker.
    """
    return ViewSessionTracker(
        videos=factory.get_video_repository(),
        sessions=factory.get_view_session_repository(),
        engagement=engagement,
        publisher=factory.get_event_publisher(),
        settings=settings.view_tracking,
    )


# Type aliases for cleaner route signatures
SettingsDep = Annotated[Settings, Depends(get_settings)]
FactoryDep = Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)]
LifecycleServiceDep = Annotated[VideoLifecycleService, Depends(get_lifecycle_service)]
WebhookServiceDep = Annotated[WebhookIngestionService, Depends(get_webhook_service)]
EngagementDep = Annotated[EngagementAggregator, Depends(get_engagement_aggregator)]
ViewTrackerDep = Annotated[ViewSessionTracker, Depends(get_view_tracker)]


async def init_services(settings: Settings) -> None:
    """Initialize infrastructure on startup.

    Args:
        settings: Application settings.
    """
    factory = get_factory(settings)

    # Connect and create indexes up front to fail fast
    await factory.ensure_indexes()


async def shutdown_services() -> None:
    """Shutdown all infrastructure services."""
    try:
        factory = get_factory()
        await factory.close_all()
    except ValueError:
        pass  # Factory not initialized
    finally:
        reset_factory()
        get_settings.cache_clear()
