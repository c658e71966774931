"""Video record persistence."""

from datetime import UTC, datetime
from typing import Any

from pydantic_core import to_jsonable_python

from creator_video.commons.infrastructure.documentdb.base import DocumentDBBase
from creator_video.commons.telemetry import get_logger
from creator_video.domain.models.video import VideoRecord


class VideoRepository:
    """Reads and conditionally writes ``VideoRecord`` documents.

    Documents are stored in their JSON form. Every write is one atomic
    ``update_one`` whose filters carry the caller's expectations about the
    current state.
    """

    def __init__(self, document_db: DocumentDBBase, collection: str) -> None:
        self._doc_db = document_db
        self._collection = collection
        self._logger = get_logger(__name__)

    async def ensure_indexes(self) -> None:
        await self._doc_db.create_index(
            self._collection,
            [("provider_public_id", 1)],
            name="provider_public_id_idx",
        )

    async def add(self, video: VideoRecord) -> str:
        """Persist a new video record.

        Args:
            video: Record to insert.

        Returns:
            Document ID.
        """
        doc_id = await self._doc_db.insert(self._collection, video.model_dump(mode="json"))
        self._logger.debug(
            "Video record stored",
            extra={"video_id": video.id, "status": video.status.value},
        )
        return doc_id

    async def get(self, video_id: str) -> VideoRecord | None:
        doc = await self._doc_db.find_by_id(self._collection, video_id)
        return VideoRecord.model_validate(doc) if doc else None

    async def find_by_public_id(self, public_id: str) -> VideoRecord | None:
        """Resolve a video from its transcoding provider public id."""
        doc = await self._doc_db.find_one(
            self._collection,
            {"provider_public_id": public_id},
        )
        return VideoRecord.model_validate(doc) if doc else None

    async def update_if(
        self,
        video_id: str,
        expected: dict[str, Any],
        changes: dict[str, Any],
    ) -> bool:
        """Apply ``changes`` only if the stored fields still equal ``expected``.

        Args:
            video_id: Video to update.
            expected: Field values the change was computed from, e.g.
                ``{"status": VideoStatus.PROCESSING}``.
            changes: Fields to set. ``updated_at`` is stamped automatically.

        Returns:
            True if the precondition held and the write happened.
        """
        filters = {"id": video_id, **to_jsonable_python(expected)}
        set_fields = to_jsonable_python({**changes, "updated_at": datetime.now(UTC)})
        applied = await self._doc_db.update_one(self._collection, filters, set_fields)
        if not applied:
            self._logger.debug(
                "Conditional video update lost",
                extra={"video_id": video_id, "expected": filters},
            )
        return applied

    async def set_metrics(self, video_id: str, **metrics: float | int) -> bool:
        """Overwrite derived engagement metrics."""
        return await self._doc_db.update_one(
            self._collection,
            {"id": video_id},
            to_jsonable_python({**metrics, "updated_at": datetime.now(UTC)}),
        )

    async def increment(self, video_id: str, **amounts: int) -> bool:
        """Atomically increment counters such as ``view_count``."""
        return await self._doc_db.update_one(
            self._collection,
            {"id": video_id},
            {"updated_at": to_jsonable_python(datetime.now(UTC))},
            increments=amounts,
        )
