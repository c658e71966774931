"""Infrastructure factory for creating service instances from configuration."""

from typing import Any, cast

from creator_video.commons.infrastructure.documentdb import (
    DocumentDBBase,
    MemoryDocumentDB,
    MongoDBDocumentDB,
)
from creator_video.commons.settings.models import Settings
from creator_video.commons.telemetry import get_logger
from creator_video.infrastructure.events import DocumentOutboxPublisher, EventPublisherBase
from creator_video.infrastructure.repositories import VideoRepository, ViewSessionRepository


class InfrastructureFactory:
    """Factory for creating infrastructure service instances.

    Creates concrete implementations based on configuration settings and
    caches one instance of each per factory.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize factory with settings.

        Args:
            settings: Application settings.
        """
        self._settings = settings
        self._instances: dict[str, Any] = {}
        self._logger = get_logger(__name__)

    @property
    def settings(self) -> Settings:
        return self._settings

    def get_document_db(self) -> DocumentDBBase:
        """Get document database instance.

        Returns:
            Configured document database provider.

        Raises:
            ValueError: If provider is not supported.
        """
        if "document_db" not in self._instances:
            doc_settings = self._settings.document_db
            if doc_settings.provider == "memory":
                self._instances["document_db"] = MemoryDocumentDB()
            elif doc_settings.provider == "mongodb":
                if doc_settings.username and doc_settings.password:
                    connection_string = (
                        f"mongodb://{doc_settings.username}:{doc_settings.password}"
                        f"@{doc_settings.host}:{doc_settings.port}"
                        f"/?authSource={doc_settings.auth_source}"
                    )
                else:
                    connection_string = f"mongodb://{doc_settings.host}:{doc_settings.port}"
                self._instances["document_db"] = MongoDBDocumentDB(
                    connection_string=connection_string,
                    database_name=doc_settings.database,
                )
            else:
                raise ValueError(f"Unsupported document DB provider: {doc_settings.provider}")
        return cast("DocumentDBBase", self._instances["document_db"])

    def get_video_repository(self) -> VideoRepository:
        if "video_repository" not in self._instances:
            self._instances["video_repository"] = VideoRepository(
                self.get_document_db(),
                self._settings.document_db.collections.videos,
            )
        return cast("VideoRepository", self._instances["video_repository"])

    def get_view_session_repository(self) -> ViewSessionRepository:
        if "view_session_repository" not in self._instances:
            collections = self._settings.document_db.collections
            self._instances["view_session_repository"] = ViewSessionRepository(
                self.get_document_db(),
                sessions_collection=collections.view_sessions,
                viewers_collection=collections.unique_viewers,
            )
        return cast("ViewSessionRepository", self._instances["view_session_repository"])

    def get_event_publisher(self) -> EventPublisherBase:
        if "event_publisher" not in self._instances:
            self._instances["event_publisher"] = DocumentOutboxPublisher(
                self.get_document_db(),
                self._settings.document_db.collections.events,
            )
        return cast("EventPublisherBase", self._instances["event_publisher"])

    async def ensure_indexes(self) -> None:
        """Create the indexes the repositories query by."""
        await self.get_video_repository().ensure_indexes()
        await self.get_view_session_repository().ensure_indexes()

    async def close_all(self) -> None:
        """Close all service connections."""
        for name, instance in self._instances.items():
            close = getattr(instance, "close", None)
            if close is None:
                continue
            try:
                await close()
            except Exception:
                self._logger.warning(f"Failed to close {name}", exc_info=True)

        self._instances.clear()


class _FactoryHolder:
    """Holder for the factory singleton to avoid global statements."""

    instance: InfrastructureFactory | None = None


def get_factory(settings: Settings | None = None) -> InfrastructureFactory:
    """Get or create the infrastructure factory singleton.

    Args:
        settings: Settings to use. Required on first call.

    Returns:
        Infrastructure factory instance.

    Raises:
        ValueError: If settings not provided on first call.
    """
    if _FactoryHolder.instance is None:
        if settings is None:
            raise ValueError("Settings required to initialize factory")
        _FactoryHolder.instance = InfrastructureFactory(settings)

    return _FactoryHolder.instance


def reset_factory() -> None:
    """Reset the factory singleton (for testing)."""
    _FactoryHolder.instance = None
