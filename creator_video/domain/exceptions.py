"""Domain exceptions for the creator video service."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from creator_video.domain.models.video import VideoStatus


class DomainException(Exception):
    """Base exception for domain errors."""


class VideoNotFoundException(DomainException):
    """Raised when a requested video is not found."""

    def __init__(self, video_id: str) -> None:
        self.video_id = video_id
        super().__init__(f"Video not found: {video_id}")


class SessionNotFoundException(DomainException):
    """Raised when a view session is not found."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"View session not found: {session_id}")


class InvalidStateException(DomainException):
    """Raised when a lifecycle precondition is violated."""

    def __init__(
        self,
        entity_id: str,
        status: VideoStatus | str,
        action: str,
        reason: str | None = None,
        *,
        entity: str = "video",
    ) -> None:
        self.entity_id = entity_id
        self.status = status
        self.action = action
        self.reason = reason
        status_value = getattr(status, "value", status)
        message = f"Cannot {action} {entity} {entity_id} in status '{status_value}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class SessionClosedException(InvalidStateException):
    """Raised when an update targets a session that was already completed."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(session_id, "closed", "update", entity="view session")


class SessionExpiredException(DomainException):
    """Raised when a view session is older than the allowed window.

    Clients must start a new session.
    """

    def __init__(self, session_id: str, age_seconds: float) -> None:
        self.session_id = session_id
        self.age_seconds = age_seconds
        super().__init__(
            f"View session {session_id} expired after {int(age_seconds)} seconds"
        )


class ViewRejectedException(DomainException):
    """Raised when the abuse heuristics refuse to start a view session."""

    def __init__(self, video_id: str, reason: str) -> None:
        self.video_id = video_id
        self.reason = reason
        super().__init__(f"View rejected for video {video_id}: {reason}")


class InvalidSignatureException(DomainException):
    """Raised when a provider webhook fails signature verification."""

    def __init__(self, reason: str = "Signature mismatch") -> None:
        self.reason = reason
        super().__init__(f"Invalid webhook signature: {reason}")


class InvalidArgumentException(DomainException):
    """Raised when a command carries an unusable argument."""

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid value for '{field}': {reason}")


class TransientUpstreamException(DomainException):
    """Provider-side processing failure reported through a webhook.

    Recorded on the video as ``processing_error``; the receiver never retries.
    """

    def __init__(self, public_id: str, status: str) -> None:
        self.public_id = public_id
        self.status = status
        super().__init__(f"Provider reported '{status}' for asset {public_id}")
