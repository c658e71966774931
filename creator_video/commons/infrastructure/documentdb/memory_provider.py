"""In-process implementation of document database.

Backs the ``memory`` provider used for local development and tests. Each
operation runs under one asyncio lock, which gives the same single-document
atomicity MongoDB offers, within one process only.
"""

import asyncio
import copy
import time
from collections.abc import Callable
from typing import Any

from creator_video.commons.infrastructure.documentdb.base import (
    DocumentDBBase,
    HealthStatus,
)

_COMPARATORS: dict[str, Callable[[Any, Any], bool]] = {
    "$ne": lambda actual, expected: actual != expected,
    "$in": lambda actual, expected: actual in expected,
    "$nin": lambda actual, expected: actual not in expected,
    "$gt": lambda actual, expected: actual is not None and actual > expected,
    "$gte": lambda actual, expected: actual is not None and actual >= expected,
    "$lt": lambda actual, expected: actual is not None and actual < expected,
    "$lte": lambda actual, expected: actual is not None and actual <= expected,
}


def matches(document: dict[str, Any], filters: dict[str, Any]) -> bool:
    """Evaluate a MongoDB-style filter against a document.

    Args:
        document: Stored document.
        filters: Filters using equality, comparison operators and ``$or``.

    Returns:
        True if every clause holds.

    Raises:
        ValueError: If the filter uses an unsupported operator.
    """
    for key, condition in filters.items():
        if key == "$or":
            if not any(matches(document, branch) for branch in condition):
                return False
            continue

        actual = document.get(key)
        if isinstance(condition, dict) and condition and all(
            op.startswith("$") for op in condition
        ):
            for op, expected in condition.items():
                comparator = _COMPARATORS.get(op)
                if comparator is None:
                    raise ValueError(f"Unsupported filter operator: {op}")
                if not comparator(actual, expected):
                    return False
        elif actual != condition:
            return False
    return True


def _sort_documents(
    documents: list[dict[str, Any]],
    sort: list[tuple[str, int]],
) -> list[dict[str, Any]]:
    # Stable sorts applied from the least significant key; missing values first
    ordered = list(documents)
    for field, direction in reversed(sort):
        ordered.sort(
            key=lambda doc: (doc.get(field) is not None, doc.get(field)),
            reverse=direction < 0,
        )
    return ordered


class MemoryDocumentDB(DocumentDBBase):
    """Dictionary-backed document database.

    Documents are deep-copied on the way in and out so callers never share
    mutable state with the store.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._lock = asyncio.Lock()

    def _collection(self, name: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(name, {})

    async def insert(
        self,
        collection: str,
        document: dict[str, Any],
    ) -> str:
        """Insert a document.

        Raises:
            ValueError: If a document with the same id already exists.
        """
        async with self._lock:
            docs = self._collection(collection)
            doc_id = str(document["id"])
            if doc_id in docs:
                raise ValueError(f"Duplicate id in {collection}: {doc_id}")
            docs[doc_id] = copy.deepcopy(document)
            return doc_id

    async def insert_if_absent(
        self,
        collection: str,
        document: dict[str, Any],
    ) -> bool:
        async with self._lock:
            docs = self._collection(collection)
            doc_id = str(document["id"])
            if doc_id in docs:
                return False
            docs[doc_id] = copy.deepcopy(document)
            return True

    async def find_by_id(
        self,
        collection: str,
        document_id: str,
    ) -> dict[str, Any] | None:
        doc = self._collection(collection).get(document_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def find(
        self,
        collection: str,
        filters: dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        sort: list[tuple[str, int]] | None = None,
    ) -> list[dict[str, Any]]:
        found = [
            doc for doc in self._collection(collection).values() if matches(doc, filters)
        ]
        if sort:
            found = _sort_documents(found, sort)
        return [copy.deepcopy(doc) for doc in found[skip : skip + limit]]

    async def find_one(
        self,
        collection: str,
        filters: dict[str, Any],
    ) -> dict[str, Any] | None:
        found = await self.find(collection, filters, limit=1)
        return found[0] if found else None

    async def update_one(
        self,
        collection: str,
        filters: dict[str, Any],
        set_fields: dict[str, Any] | None = None,
        increments: dict[str, int | float] | None = None,
    ) -> bool:
        if not set_fields and not increments:
            raise ValueError("update_one requires set_fields or increments")

        async with self._lock:
            for doc in self._collection(collection).values():
                if not matches(doc, filters):
                    continue
                for key, value in (set_fields or {}).items():
                    if key != "id":
                        doc[key] = copy.deepcopy(value)
                for key, amount in (increments or {}).items():
                    doc[key] = doc.get(key, 0) + amount
                return True
            return False

    async def count(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
    ) -> int:
        return sum(
            1 for doc in self._collection(collection).values() if matches(doc, filters or {})
        )

    async def create_index(
        self,
        collection: str,
        fields: list[tuple[str, int]],
        unique: bool = False,
        name: str | None = None,
    ) -> str:
        """Indexes are not materialized; only the name is derived."""
        self._collection(collection)
        return name or "_".join(f"{field}_{direction}" for field, direction in fields)

    async def health_check(self) -> HealthStatus:
        start = time.perf_counter()
        total = sum(len(docs) for docs in self._collections.values())
        return HealthStatus(
            healthy=True,
            latency_ms=(time.perf_counter() - start) * 1000,
            message="In-memory document store is healthy",
            details={"documents": str(total)},
        )
