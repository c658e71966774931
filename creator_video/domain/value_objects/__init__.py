"""Domain value objects."""

from creator_video.domain.value_objects.viewer_identity import ViewerIdentity

__all__ = [
    "ViewerIdentity",
]
