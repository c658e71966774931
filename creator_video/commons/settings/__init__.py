"""Settings management module."""

from creator_video.commons.settings.loader import (
    SettingsLoader,
    get_settings,
    reset_settings,
)
from creator_video.commons.settings.models import (
    AppSettings,
    DocumentCollectionSettings,
    DocumentDBSettings,
    ServerSettings,
    Settings,
    TelemetrySettings,
    ViewTrackingSettings,
    WebhookSettings,
)

__all__ = [
    # Loader
    "SettingsLoader",
    "get_settings",
    "reset_settings",
    # Main settings
    "Settings",
    "AppSettings",
    "ServerSettings",
    # Storage
    "DocumentDBSettings",
    "DocumentCollectionSettings",
    # Domain behaviour
    "WebhookSettings",
    "ViewTrackingSettings",
    # Telemetry
    "TelemetrySettings",
]
