"""Playlist domain: one persistence strategy per deployment, never both."""

from .base import PlaylistStore, unique_track_ids, validate_playlist_name
from .database import DatabasePlaylistStore
from .documents import DocumentPlaylistStore


def build_playlist_store(settings, catalog, gateway=None) -> PlaylistStore:
    """Select the playlist store configured by ``settings.playlist_storage``."""
    if settings.playlist_storage == "object_store":
        if gateway is None:
            raise RuntimeError("PLAYLIST_STORAGE=object_store requires a configured bucket")
        return DocumentPlaylistStore(gateway, catalog, prefix=settings.playlist_document_prefix)
    return DatabasePlaylistStore(catalog)


__all__ = [
    "PlaylistStore",
    "DatabasePlaylistStore",
    "DocumentPlaylistStore",
    "build_playlist_store",
    "unique_track_ids",
    "validate_playlist_name",
]
