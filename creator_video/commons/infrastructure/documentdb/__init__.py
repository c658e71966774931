"""Document database abstractions and implementations."""

from creator_video.commons.infrastructure.documentdb.base import (
    DocumentDBBase,
    HealthStatus,
)
from creator_video.commons.infrastructure.documentdb.memory_provider import (
    MemoryDocumentDB,
)
from creator_video.commons.infrastructure.documentdb.mongodb_provider import (
    MongoDBDocumentDB,
)

__all__ = [
    # Base classes
    "DocumentDBBase",
    "HealthStatus",
    # Implementations
    "MemoryDocumentDB",
    "MongoDBDocumentDB",
]
