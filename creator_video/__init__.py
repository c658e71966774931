"""Creator video core: video lifecycle, provider webhooks and view tracking."""

__version__ = "0.1.0"
