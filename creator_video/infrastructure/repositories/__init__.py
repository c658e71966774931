"""Repositories over the document database."""

from creator_video.infrastructure.repositories.videos import VideoRepository
from creator_video.infrastructure.repositories.view_sessions import (
    ViewSessionRepository,
    unique_viewer_id,
)

__all__ = [
    "VideoRepository",
    "ViewSessionRepository",
    "unique_viewer_id",
]
