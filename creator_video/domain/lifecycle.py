"""Video lifecycle state machine.

Lifecycle and processing status are closed enums; every change goes through
the total functions below instead of ad hoc string comparisons.
"""

from enum import Enum

from creator_video.domain.models.video import ProcessingStatus, VideoStatus


class LifecycleEvent(str, Enum):
    """Events that can move a video between lifecycle states."""

    PROVIDER_PROCESSING = "provider_processing"
    PROVIDER_SUCCESS = "provider_success"
    PROVIDER_ERROR = "provider_error"
    PUBLISH = "publish"
    UNPUBLISH = "unpublish"
    REPUBLISH = "republish"


class ProviderOutcome(str, Enum):
    """Normalized status reported by the transcoding provider."""

    IN_PROGRESS = "in_progress"
    SUCCESS = "success"
    FAILURE = "failure"

    @classmethod
    def parse(cls, raw: str | None) -> "ProviderOutcome | None":
        """Map a loosely-typed provider status string; None when unrecognized."""
        if raw is None:
            return None
        return _PROVIDER_STATUS_ALIASES.get(raw.strip().lower())

    @property
    def event(self) -> LifecycleEvent:
        return _OUTCOME_EVENTS[self]


_PROVIDER_STATUS_ALIASES: dict[str, ProviderOutcome] = {
    "in_progress": ProviderOutcome.IN_PROGRESS,
    "processing": ProviderOutcome.IN_PROGRESS,
    "success": ProviderOutcome.SUCCESS,
    "complete": ProviderOutcome.SUCCESS,
    "completed": ProviderOutcome.SUCCESS,
    "error": ProviderOutcome.FAILURE,
    "failed": ProviderOutcome.FAILURE,
}

_OUTCOME_EVENTS: dict[ProviderOutcome, LifecycleEvent] = {
    ProviderOutcome.IN_PROGRESS: LifecycleEvent.PROVIDER_PROCESSING,
    ProviderOutcome.SUCCESS: LifecycleEvent.PROVIDER_SUCCESS,
    ProviderOutcome.FAILURE: LifecycleEvent.PROVIDER_ERROR,
}

# (from, event) -> to. Pairs not listed are rejected.
TRANSITIONS: dict[tuple[VideoStatus, LifecycleEvent], VideoStatus] = {
    (VideoStatus.UPLOADING, LifecycleEvent.PROVIDER_PROCESSING): VideoStatus.PROCESSING,
    (VideoStatus.UPLOADING, LifecycleEvent.PROVIDER_SUCCESS): VideoStatus.PROCESSING,
    (VideoStatus.PROCESSING, LifecycleEvent.PROVIDER_SUCCESS): VideoStatus.READY_TO_PUBLISH,
    (VideoStatus.UPLOADING, LifecycleEvent.PROVIDER_ERROR): VideoStatus.PROCESSING_FAILED,
    (VideoStatus.PROCESSING, LifecycleEvent.PROVIDER_ERROR): VideoStatus.PROCESSING_FAILED,
    (VideoStatus.READY_TO_PUBLISH, LifecycleEvent.PUBLISH): VideoStatus.PUBLISHED,
    (VideoStatus.UNPUBLISHED, LifecycleEvent.PUBLISH): VideoStatus.PUBLISHED,
    (VideoStatus.PUBLISHED, LifecycleEvent.UNPUBLISH): VideoStatus.UNPUBLISHED,
    (VideoStatus.UNPUBLISHED, LifecycleEvent.REPUBLISH): VideoStatus.PUBLISHED,
}

# Events whose target also requires finished transcoding
_REQUIRES_COMPLETED_PROCESSING = frozenset(
    {
        LifecycleEvent.PUBLISH,
        LifecycleEvent.REPUBLISH,
    }
)


def next_status(
    status: VideoStatus,
    event: LifecycleEvent,
    processing_status: ProcessingStatus | None = None,
) -> VideoStatus | None:
    """Total transition function.

    Args:
        status: Current lifecycle status.
        event: Event to apply.
        processing_status: Current processing status. When given, publish
            events are rejected unless transcoding completed, and the
            processing -> ready_to_publish step requires it too.

    Returns:
        The new status, or None when the event is not legal from ``status``.
    """
    target = TRANSITIONS.get((status, event))
    if target is None or processing_status is None:
        return target

    if (
        event in _REQUIRES_COMPLETED_PROCESSING
        or target == VideoStatus.READY_TO_PUBLISH
    ) and processing_status != ProcessingStatus.COMPLETED:
        return None
    return target


def settle(
    status: VideoStatus,
    event: LifecycleEvent,
    processing_status: ProcessingStatus | None = None,
) -> VideoStatus:
    """Apply a provider event until it stops changing the status.

    A success notification for an uploading asset moves it through
    processing into ready_to_publish in one application, so delivering the
    same notification again is a no-op.
    """
    current = status
    for _ in range(len(VideoStatus)):
        target = next_status(current, event, processing_status)
        if target is None or target == current:
            break
        current = target
    return current


def allowed_events(
    status: VideoStatus,
    processing_status: ProcessingStatus | None = None,
) -> list[LifecycleEvent]:
    """List the events accepted from ``status``, in declaration order."""
    return [
        event
        for event in LifecycleEvent
        if next_status(status, event, processing_status) is not None
    ]


def next_processing_status(
    current: ProcessingStatus,
    outcome: ProviderOutcome,
) -> ProcessingStatus:
    """Advance the processing status without ever moving it backwards.

    Out-of-order deliveries (an ``in_progress`` arriving after ``success``)
    leave the status where it is. ``failed`` is terminal for the asset.
    """
    if current in {ProcessingStatus.COMPLETED, ProcessingStatus.FAILED}:
        return current
    if outcome == ProviderOutcome.SUCCESS:
        return ProcessingStatus.COMPLETED
    if outcome == ProviderOutcome.FAILURE:
        return ProcessingStatus.FAILED
    return ProcessingStatus.IN_PROGRESS
