"""Route blueprints exposed via Flask."""

from .tracks import tracks_bp
from .playlist import playlist_bp
from .sync import sync_bp
from .uploads import upload_bp
from .health import health_bp

__all__ = [
    "tracks_bp",
    "playlist_bp",
    "sync_bp",
    "upload_bp",
    "health_bp",
]
