"""Transcoding provider webhook ingestion."""

import hashlib
import hmac
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from creator_video.application.dtos.webhooks import ProviderNotification, WebhookResult
from creator_video.commons.settings.models import WebhookSettings
from creator_video.commons.telemetry import LogContext, get_logger, log_exceptions, timed
from creator_video.domain.exceptions import (
    DomainException,
    InvalidArgumentException,
    InvalidSignatureException,
    TransientUpstreamException,
)
from creator_video.domain.lifecycle import (
    ProviderOutcome,
    next_processing_status,
    settle,
)
from creator_video.domain.models.events import EventType, lifecycle_event
from creator_video.domain.models.video import ProcessingStatus, VideoRecord, VideoStatus
from creator_video.infrastructure.events.base import EventPublisherBase
from creator_video.infrastructure.repositories.videos import VideoRepository

UPLOAD = "upload"
VIDEO_PROCESSING = "video_processing"

# Concurrent lifecycle writes are rare; after this many lost races the
# delivery fails and the provider redelivers it
_MAX_ATTEMPTS = 3

_PROCESSING_EVENTS: dict[ProcessingStatus, EventType] = {
    ProcessingStatus.IN_PROGRESS: EventType.VIDEO_PROCESSING_STARTED,
    ProcessingStatus.COMPLETED: EventType.VIDEO_PROCESSING_COMPLETED,
    ProcessingStatus.FAILED: EventType.VIDEO_PROCESSING_FAILED,
}


def compute_signature(secret: str, raw_body: bytes) -> str:
    """Hex HMAC-SHA256 of the raw request body."""
    return hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()


class WebhookIngestionService:
    """Verifies provider callbacks and applies them to video records.

    Deliveries are at-least-once and may arrive out of order. Each one is
    turned into a change-set computed against the current record; a
    redelivery computes an empty change-set and writes nothing.
    """

    def __init__(
        self,
        videos: VideoRepository,
        publisher: EventPublisherBase,
        settings: WebhookSettings,
    ) -> None:
        """Initialize webhook service.

        Args:
            videos: Video record repository.
            publisher: Domain event publisher.
            settings: Webhook verification settings.
        """
        self._videos = videos
        self._publisher = publisher
        self._settings = settings
        self._logger = get_logger(__name__)

    def verify_signature(self, raw_body: bytes, signature: str | None) -> None:
        """Check the body signature against the shared secret.

        Verification is skipped when no secret is configured.

        Raises:
            InvalidSignatureException: If the signature is missing or wrong.
        """
        if not self._settings.secret:
            self._logger.warning(
                "Webhook secret not configured, skipping signature verification"
            )
            return

        if not signature:
            raise InvalidSignatureException("Missing signature header")

        # Header values arrive latin-1 decoded; compare as bytes so any
        # non-ASCII input fails verification
        expected = compute_signature(self._settings.secret, raw_body).encode("ascii")
        received = signature.strip().lower().encode("utf-8")
        if not hmac.compare_digest(expected, received):
            raise InvalidSignatureException()

    def parse(self, raw_body: bytes) -> ProviderNotification:
        """Decode a notification body.

        Raises:
            InvalidArgumentException: If the body is not a valid notification.
        """
        try:
            return ProviderNotification.model_validate_json(raw_body)
        except ValidationError as e:
            raise InvalidArgumentException("body", _summarize(e)) from e

    @timed
    @log_exceptions(
        ignore=(DomainException,),
        message="Provider notification could not be applied",
    )
    async def handle(self, raw_body: bytes, signature: str | None) -> WebhookResult:
        """Verify, parse and apply one delivery.

        Args:
            raw_body: Exact request body bytes, as signed by the provider.
            signature: Value of the signature header.

        Returns:
            Whether the notification was processed and whether it changed state.
        """
        self.verify_signature(raw_body, signature)
        notification = self.parse(raw_body)
        return await self.process(notification)

    async def process(self, notification: ProviderNotification) -> WebhookResult:
        """Apply a verified notification to its video."""
        notification_type = notification.notification_type.strip().lower()
        with LogContext(
            public_id=notification.public_id,
            notification_type=notification_type,
        ):
            if notification_type not in {UPLOAD, VIDEO_PROCESSING}:
                self._logger.info(
                    "Ignoring unsupported notification type",
                    extra={"provider_status": notification.status},
                )
                return WebhookResult(processed=True, applied=False)

            outcome = ProviderOutcome.parse(notification.status)
            if notification_type == UPLOAD and outcome == ProviderOutcome.IN_PROGRESS:
                # Upload notifications only report final outcomes
                outcome = None

            video = await self._videos.find_by_public_id(notification.public_id)
            if video is None:
                self._logger.warning("Webhook for unknown provider asset, ignoring")
                return WebhookResult(processed=True, applied=False)

            for _ in range(_MAX_ATTEMPTS):
                changes = self._compute_changes(video, notification, outcome)
                if not changes:
                    self._logger.debug(
                        "Notification already applied",
                        extra={"video_id": video.id, "status": video.status.value},
                    )
                    return WebhookResult(processed=True, applied=False)

                applied = await self._videos.update_if(
                    video.id,
                    {"status": video.status, "processing_status": video.processing_status},
                    changes,
                )
                if applied:
                    await self._emit_events(video, changes)
                    self._logger.info(
                        "Provider notification applied",
                        extra={
                            "video_id": video.id,
                            "from_status": video.status.value,
                            "to_status": VideoStatus(
                                changes.get("status", video.status)
                            ).value,
                            "fields": sorted(changes),
                        },
                    )
                    return WebhookResult(processed=True, applied=True)

                reread = await self._videos.get(video.id)
                if reread is None:
                    self._logger.warning("Video disappeared while applying webhook")
                    return WebhookResult(processed=True, applied=False)
                video = reread

            raise RuntimeError(
                f"Could not apply notification for {notification.public_id}: "
                "concurrent updates"
            )

    def _compute_changes(
        self,
        video: VideoRecord,
        notification: ProviderNotification,
        outcome: ProviderOutcome | None,
    ) -> dict[str, Any]:
        changes = _asset_changes(video, notification)
        if outcome is None:
            return changes

        processing_status = next_processing_status(video.processing_status, outcome)
        status = settle(video.status, outcome.event, processing_status)
        now = datetime.now(UTC)

        if processing_status != video.processing_status:
            changes["processing_status"] = processing_status
            if processing_status == ProcessingStatus.COMPLETED:
                changes["processing_completed_at"] = now
                changes["processing_error"] = None
            elif processing_status == ProcessingStatus.FAILED:
                error = TransientUpstreamException(
                    notification.public_id,
                    notification.status or "error",
                )
                changes["processing_error"] = notification.error or str(error)

        if status != video.status:
            changes["status"] = status

        if "status" in changes or "processing_status" in changes:
            changes["last_status_change"] = now
        return changes

    async def _emit_events(self, video: VideoRecord, changes: dict[str, Any]) -> None:
        processing_status = changes.get("processing_status")
        event_type = _PROCESSING_EVENTS.get(processing_status) if processing_status else None
        if event_type is None:
            return

        await self._publisher.publish(
            lifecycle_event(
                event_type,
                video_id=video.id,
                creator_id=video.creator_id,
                discriminator=processing_status.value,
                payload={
                    "status": VideoStatus(changes.get("status", video.status)).value,
                    "processing_error": changes.get("processing_error"),
                },
            )
        )


def _asset_changes(
    video: VideoRecord,
    notification: ProviderNotification,
) -> dict[str, Any]:
    """Asset metadata from the notification that differs from the record."""
    candidates: dict[str, Any] = {
        "video_url": notification.secure_url,
        "duration_seconds": (
            round(notification.duration) if notification.duration is not None else None
        ),
        "file_size_bytes": notification.bytes,
        "width": notification.width,
        "height": notification.height,
        "format": notification.format,
    }
    return {
        field: value
        for field, value in candidates.items()
        if value is not None and getattr(video, field) != value
    }


def _summarize(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "body"
    return f"{location}: {first.get('msg', 'invalid')}"
