"""Live reload for development mode."""

from docshelf.live.reload import LiveReloadManager

__all__ = ["LiveReloadManager"]
