"""API layer - REST endpoints."""

from creator_video.api.main import app, create_app

__all__ = [
    "app",
    "create_app",
]
