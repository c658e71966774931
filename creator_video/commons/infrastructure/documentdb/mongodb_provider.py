"""MongoDB implementation of document database."""

import time
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from creator_video.commons.infrastructure.documentdb.base import (
    DocumentDBBase,
    HealthStatus,
)


def _to_mongo(document: dict[str, Any]) -> dict[str, Any]:
    """Store the domain ``id`` as MongoDB's ``_id``."""
    doc = document.copy()
    if "id" in doc:
        doc["_id"] = doc.pop("id")
    return doc


def _from_mongo(document: dict[str, Any]) -> dict[str, Any]:
    """Restore the domain ``id`` from MongoDB's ``_id``."""
    doc = dict(document)
    doc["id"] = str(doc.pop("_id"))
    return doc


def _translate_filters(filters: dict[str, Any]) -> dict[str, Any]:
    """Rewrite ``id`` to ``_id``, including inside ``$or`` branches."""
    translated: dict[str, Any] = {}
    for key, value in filters.items():
        if key == "$or":
            translated[key] = [_translate_filters(branch) for branch in value]
        elif key == "id":
            translated["_id"] = value
        else:
            translated[key] = value
    return translated


class MongoDBDocumentDB(DocumentDBBase):
    """MongoDB implementation of document database.

    Uses Motor for async operations. Domain ids are stored as string ``_id``
    values, which also makes ``insert_if_absent`` rely on the primary key
    uniqueness MongoDB already enforces.
    """

    def __init__(
        self,
        connection_string: str,
        database_name: str,
    ) -> None:
        """Initialize MongoDB client.

        Args:
            connection_string: MongoDB connection URI.
            database_name: Name of the database to use.
        """
        self._client: AsyncIOMotorClient[dict[str, Any]] = AsyncIOMotorClient(
            connection_string
        )
        self._db: AsyncIOMotorDatabase[dict[str, Any]] = self._client[database_name]
        self._database_name = database_name

    async def insert(
        self,
        collection: str,
        document: dict[str, Any],
    ) -> str:
        result = await self._db[collection].insert_one(_to_mongo(document))
        return str(result.inserted_id)

    async def insert_if_absent(
        self,
        collection: str,
        document: dict[str, Any],
    ) -> bool:
        try:
            await self._db[collection].insert_one(_to_mongo(document))
        except DuplicateKeyError:
            return False
        return True

    async def find_by_id(
        self,
        collection: str,
        document_id: str,
    ) -> dict[str, Any] | None:
        doc = await self._db[collection].find_one({"_id": document_id})
        return _from_mongo(doc) if doc else None

    async def find(
        self,
        collection: str,
        filters: dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        sort: list[tuple[str, int]] | None = None,
    ) -> list[dict[str, Any]]:
        cursor = self._db[collection].find(_translate_filters(filters))

        if sort:
            cursor = cursor.sort(sort)

        cursor = cursor.skip(skip).limit(limit)

        return [_from_mongo(doc) async for doc in cursor]

    async def find_one(
        self,
        collection: str,
        filters: dict[str, Any],
    ) -> dict[str, Any] | None:
        doc = await self._db[collection].find_one(_translate_filters(filters))
        return _from_mongo(doc) if doc else None

    async def update_one(
        self,
        collection: str,
        filters: dict[str, Any],
        set_fields: dict[str, Any] | None = None,
        increments: dict[str, int | float] | None = None,
    ) -> bool:
        update: dict[str, Any] = {}
        if set_fields:
            # _id is immutable in MongoDB
            update["$set"] = {k: v for k, v in set_fields.items() if k != "id"}
        if increments:
            update["$inc"] = increments
        if not update:
            raise ValueError("update_one requires set_fields or increments")

        result = await self._db[collection].update_one(
            _translate_filters(filters),
            update,
        )
        return bool(result.matched_count > 0)

    async def count(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
    ) -> int:
        if filters:
            count = await self._db[collection].count_documents(
                _translate_filters(filters)
            )
            return int(count)
        count = await self._db[collection].estimated_document_count()
        return int(count)

    async def create_index(
        self,
        collection: str,
        fields: list[tuple[str, int]],
        unique: bool = False,
        name: str | None = None,
    ) -> str:
        index_name = await self._db[collection].create_index(
            fields,
            unique=unique,
            name=name,
        )
        return str(index_name)

    async def health_check(self) -> HealthStatus:
        start = time.perf_counter()
        try:
            await self._client.admin.command("ping")
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=True,
                latency_ms=latency_ms,
                message="MongoDB is healthy",
                details={"database": self._database_name},
            )
        except Exception as e:
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=False,
                latency_ms=latency_ms,
                message=f"MongoDB health check failed: {e}",
                details={"database": self._database_name, "error": str(e)},
            )

    async def close(self) -> None:
        """Close the client connection."""
        self._client.close()
