"""DTOs for transcoding provider callbacks."""

from pydantic import BaseModel, ConfigDict, Field


class ProviderNotification(BaseModel):
    """Notification body posted by the transcoding provider.

    Unknown fields are ignored; the provider adds fields over time.
    """

    model_config = ConfigDict(extra="ignore")

    notification_type: str = Field(description="e.g. 'upload' or 'video_processing'")
    public_id: str = Field(min_length=1, description="Provider-side asset id")
    status: str | None = Field(default=None, description="Loosely-typed provider status")
    secure_url: str | None = None
    duration: float | None = Field(default=None, ge=0, description="Seconds")
    width: int | None = Field(default=None, ge=0)
    height: int | None = Field(default=None, ge=0)
    format: str | None = None
    resource_type: str | None = None
    bytes: int | None = Field(default=None, ge=0, description="Asset size")
    error: str | None = Field(default=None, description="Provider error message")


class WebhookResult(BaseModel):
    """Outcome of processing one notification."""

    processed: bool = Field(description="The notification was accepted")
    applied: bool = Field(description="The notification changed stored state")
