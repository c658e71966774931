"""Document-backed outbox for domain events."""

from datetime import UTC, datetime

from creator_video.commons.infrastructure.documentdb.base import DocumentDBBase
from creator_video.commons.telemetry import get_logger
from creator_video.domain.models.events import DomainEvent
from creator_video.infrastructure.events.base import EventPublisherBase


class DocumentOutboxPublisher(EventPublisherBase):
    """Stores events in an outbox collection keyed by event id.

    Redelivered webhooks and repeated complete calls produce the same event
    id, so the insert-if-absent write drops them.
    """

    def __init__(self, document_db: DocumentDBBase, collection: str) -> None:
        self._doc_db = document_db
        self._collection = collection
        self._logger = get_logger(__name__)

    async def publish(self, event: DomainEvent) -> bool:
        document = event.model_dump(mode="json")
        document["dispatched"] = False
        document["stored_at"] = datetime.now(UTC).isoformat()

        inserted = await self._doc_db.insert_if_absent(self._collection, document)
        if inserted:
            self._logger.info(
                "Domain event published",
                extra={
                    "event_id": event.id,
                    "event_type": event.event_type.value,
                    "video_id": event.video_id,
                },
            )
        else:
            self._logger.debug(
                "Duplicate domain event dropped",
                extra={"event_id": event.id},
            )
        return inserted

    async def pending(self, limit: int = 100) -> list[DomainEvent]:
        """Events not yet forwarded by a relay, oldest first."""
        docs = await self._doc_db.find(
            self._collection,
            {"dispatched": False},
            limit=limit,
            sort=[("occurred_at", 1)],
        )
        return [DomainEvent.model_validate(doc) for doc in docs]

    async def mark_dispatched(self, event_id: str) -> bool:
        return await self._doc_db.update_one(
            self._collection,
            {"id": event_id, "dispatched": False},
            {"dispatched": True, "dispatched_at": datetime.now(UTC).isoformat()},
        )
