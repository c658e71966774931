"""Abstract base class for document database operations."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass
class HealthStatus:
    """Health check result."""

    healthy: bool
    latency_ms: float
    message: str | None = None
    details: dict[str, str] | None = None


class DocumentDBBase(ABC):
    """Abstract base class for document database operations.

    Documents carry their identity in an ``id`` field. Every mutation is a
    single-document atomic operation; callers express preconditions as
    filters instead of taking locks.

    Implementations:
    - MongoDB (Motor)
    - In-process memory store (development and tests)
    """

    @abstractmethod
    async def insert(
        self,
        collection: str,
        document: dict[str, Any],
    ) -> str:
        """Insert a document.

        Args:
            collection: Collection name.
            document: Document to insert.

        Returns:
            Document ID.
        """

    @abstractmethod
    async def insert_if_absent(
        self,
        collection: str,
        document: dict[str, Any],
    ) -> bool:
        """Insert a document unless one with the same ``id`` already exists.

        Args:
            collection: Collection name.
            document: Document to insert. Must carry a deterministic ``id``.

        Returns:
            True if this call inserted the document, False if it existed.
        """

    @abstractmethod
    async def find_by_id(
        self,
        collection: str,
        document_id: str,
    ) -> dict[str, Any] | None:
        """Find a document by ID.

        Args:
            collection: Collection name.
            document_id: Document ID to find.

        Returns:
            Document if found, None otherwise.
        """

    @abstractmethod
    async def find(
        self,
        collection: str,
        filters: dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        sort: list[tuple[str, int]] | None = None,
    ) -> list[dict[str, Any]]:
        """Find documents matching filters.

        Args:
            collection: Collection name.
            filters: Query filters (equality plus ``$in``, ``$ne``, ``$gt``,
                ``$gte``, ``$lt``, ``$lte`` and top-level ``$or``).
            skip: Number of documents to skip.
            limit: Maximum documents to return.
            sort: Sort specification [(field, direction)].
                  Direction: 1 for ascending, -1 for descending.

        Returns:
            List of matching documents.
        """

    @abstractmethod
    async def find_one(
        self,
        collection: str,
        filters: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Find a single document matching filters."""

    @abstractmethod
    async def update_one(
        self,
        collection: str,
        filters: dict[str, Any],
        set_fields: dict[str, Any] | None = None,
        increments: dict[str, int | float] | None = None,
    ) -> bool:
        """Atomically update the first document matching filters.

        The filters double as the precondition of a compare-and-set: when
        another writer changed a filtered field first, nothing matches and
        nothing is written.

        Args:
            collection: Collection name.
            filters: Query filters, usually ``id`` plus expected field values.
            set_fields: Fields to overwrite.
            increments: Numeric fields to increment.

        Returns:
            True if a document matched and was updated.
        """

    @abstractmethod
    async def count(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
    ) -> int:
        """Count documents matching filters."""

    @abstractmethod
    async def create_index(
        self,
        collection: str,
        fields: list[tuple[str, int]],
        unique: bool = False,
        name: str | None = None,
    ) -> str:
        """Create an index on the collection.

        Args:
            collection: Collection name.
            fields: Index fields [(field, direction)].
            unique: Whether index should be unique.
            name: Optional index name.

        Returns:
            Index name.
        """

    @abstractmethod
    async def health_check(self) -> HealthStatus:
        """Check service health.

        Returns:
            Health status with latency info.
        """

    async def close(self) -> None:  # noqa: B027
        """Release client resources. No-op by default."""
