"""Abstract base class for domain event publishing."""

from abc import ABC, abstractmethod

from creator_video.domain.models.events import DomainEvent


class EventPublisherBase(ABC):
    """Publishes domain events at most once per event id.

    Implementations should handle:
    - Document outbox (a relay forwards stored events downstream)
    - Message brokers
    """

    @abstractmethod
    async def publish(self, event: DomainEvent) -> bool:
        """Publish an event.

        Args:
            event: Event with a deterministic id.

        Returns:
            True if the event was new, False if an event with the same id
            had already been published.
        """
