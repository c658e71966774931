"""Pydantic settings models for application configuration."""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseModel):
    """Application-level settings."""

    name: str = "creator-video-core"
    version: str = "0.1.0"
    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class ServerSettings(BaseModel):
    """HTTP server settings."""

    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    workers: int = Field(default=1, ge=1, le=32)
    reload: bool = False
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    api_prefix: str = "/v1"
    docs_enabled: bool = True


class DocumentCollectionSettings(BaseModel):
    """Document DB collection names."""

    videos: str = "videos"
    view_sessions: str = "view_sessions"
    unique_viewers: str = "unique_viewers"
    events: str = "domain_events"


class DocumentDBSettings(BaseModel):
    """Document database settings (MongoDB, or in-process memory for dev)."""

    provider: Literal["mongodb", "memory"] = "mongodb"
    host: str = "localhost"
    port: int = 27017
    username: str = ""
    password: str = ""
    database: str = "creator_video"
    auth_source: str = "admin"
    collections: DocumentCollectionSettings = Field(
        default_factory=DocumentCollectionSettings
    )


class WebhookSettings(BaseModel):
    """Provider webhook verification settings.

    An empty secret disables signature verification (development mode).
    """

    secret: str = ""
    signature_header: str = "X-Cld-Signature"


class ViewTrackingSettings(BaseModel):
    """View session and engagement settings."""

    session_ttl_seconds: int = Field(default=1800, ge=1)
    completion_threshold_percent: float = Field(default=80.0, ge=0, le=100)
    max_sessions_per_window: int = Field(default=10, ge=1)
    fraud_window_seconds: int = Field(default=3600, ge=1)
    bot_user_agent_patterns: list[str] = Field(
        default_factory=lambda: ["bot", "crawler", "spider", "scraper", "curl", "wget"]
    )
    require_ip_address: bool = True
    average_window_days: int = Field(default=7, ge=1)
    average_sample_limit: int = Field(default=100, ge=1)
    average_sample_every: int = Field(default=10, ge=1)


class TelemetrySettings(BaseModel):
    """Telemetry and observability settings."""

    enabled: bool = True
    log_format: Literal["json", "text"] = "json"
    log_level: str = "INFO"


class Settings(BaseSettings):
    """Root settings container with environment loading."""

    app: AppSettings = Field(default_factory=AppSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    document_db: DocumentDBSettings = Field(default_factory=DocumentDBSettings)
    webhook: WebhookSettings = Field(default_factory=WebhookSettings)
    view_tracking: ViewTrackingSettings = Field(default_factory=ViewTrackingSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CREATOR_VIDEO__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )
