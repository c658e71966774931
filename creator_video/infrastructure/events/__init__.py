"""Domain event publishing."""

from creator_video.infrastructure.events.base import EventPublisherBase
from creator_video.infrastructure.events.outbox import DocumentOutboxPublisher

__all__ = [
    "EventPublisherBase",
    "DocumentOutboxPublisher",
]
