"""View session and unique-viewer persistence."""

from datetime import datetime
from typing import Any

from pydantic_core import to_jsonable_python

from creator_video.commons.infrastructure.documentdb.base import DocumentDBBase
from creator_video.domain.models.view_session import SessionState, ViewSession


def unique_viewer_id(video_id: str, viewer_key: str) -> str:
    """Deterministic marker id for one (video, viewer) pair."""
    return f"{video_id}:{viewer_key}"


def _iso(moment: datetime) -> str:
    return str(to_jsonable_python(moment))


class ViewSessionRepository:
    """Stores view sessions and the unique-viewer markers derived from them."""

    def __init__(
        self,
        document_db: DocumentDBBase,
        sessions_collection: str,
        viewers_collection: str,
    ) -> None:
        self._doc_db = document_db
        self._sessions = sessions_collection
        self._viewers = viewers_collection

    async def ensure_indexes(self) -> None:
        await self._doc_db.create_index(
            self._sessions,
            [("video_id", 1), ("created_at", -1)],
            name="video_created_idx",
        )
        await self._doc_db.create_index(
            self._sessions,
            [("video_id", 1), ("ip_address", 1), ("viewer_key", 1), ("created_at", -1)],
            name="fraud_window_idx",
        )

    async def add(self, session: ViewSession) -> str:
        return await self._doc_db.insert(self._sessions, session.model_dump(mode="json"))

    async def get(self, session_id: str) -> ViewSession | None:
        doc = await self._doc_db.find_by_id(self._sessions, session_id)
        return ViewSession.model_validate(doc) if doc else None

    async def update_if_open(
        self,
        session_id: str,
        changes: dict[str, Any],
        expected: dict[str, Any] | None = None,
        increments: dict[str, int] | None = None,
    ) -> bool:
        """Write ``changes`` only while the session is still open.

        Args:
            session_id: Session to update.
            changes: Fields to set.
            expected: Extra field values the change was computed from.
            increments: Counters to increment in the same write.

        Returns:
            False when the session was closed, or ``expected`` no longer
            holds, by the time of the write.
        """
        filters = {
            "id": session_id,
            "state": SessionState.OPEN.value,
            **to_jsonable_python(expected or {}),
        }
        return await self._doc_db.update_one(
            self._sessions,
            filters,
            to_jsonable_python(changes),
            increments=increments,
        )

    async def count_recent_from_source(
        self,
        video_id: str,
        ip_address: str,
        user_agent: str | None,
        viewer_key: str,
        since: datetime,
    ) -> int:
        """Count sessions started by the same client tuple since ``since``."""
        return await self._doc_db.count(
            self._sessions,
            {
                "video_id": video_id,
                "ip_address": ip_address,
                "user_agent": user_agent,
                "viewer_key": viewer_key,
                "created_at": {"$gte": _iso(since)},
            },
        )

    async def recent_for_video(
        self,
        video_id: str,
        since: datetime,
        limit: int,
    ) -> list[ViewSession]:
        """Newest sessions of a video started since ``since``."""
        docs = await self._doc_db.find(
            self._sessions,
            {"video_id": video_id, "created_at": {"$gte": _iso(since)}},
            limit=limit,
            sort=[("created_at", -1)],
        )
        return [ViewSession.model_validate(doc) for doc in docs]

    async def latest_for_video(self, video_id: str) -> ViewSession | None:
        docs = await self._doc_db.find(
            self._sessions,
            {"video_id": video_id},
            limit=1,
            sort=[("last_watched_at", -1)],
        )
        return ViewSession.model_validate(docs[0]) if docs else None

    async def count_for_video(self, video_id: str, **conditions: Any) -> int:
        """Count a video's sessions, optionally narrowed by field equality."""
        return await self._doc_db.count(
            self._sessions,
            {"video_id": video_id, **to_jsonable_python(conditions)},
        )

    async def count_engaged(self, video_id: str) -> int:
        """Count sessions in which the viewer liked or shared."""
        return await self._doc_db.count(
            self._sessions,
            {"video_id": video_id, "$or": [{"liked": True}, {"shared": True}]},
        )

    async def add_unique_viewer(self, video_id: str, viewer_key: str) -> bool:
        """Record that ``viewer_key`` watched ``video_id``.

        Returns:
            True only for the first session of this viewer on this video.
        """
        return await self._doc_db.insert_if_absent(
            self._viewers,
            {
                "id": unique_viewer_id(video_id, viewer_key),
                "video_id": video_id,
                "viewer_key": viewer_key,
            },
        )

    async def count_unique_viewers(self, video_id: str) -> int:
        return await self._doc_db.count(self._viewers, {"video_id": video_id})
