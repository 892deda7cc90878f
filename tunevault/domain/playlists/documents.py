"""
Object-store-as-database playlists.

Each playlist is one JSON document at ``{prefix}{name}.json`` holding an array
of serialized tracks; the set of playlists is whatever the bucket lists under
the prefix. Updates are read-modify-write with last-writer-wins semantics.
Membership is deduplicated by the track's stable key, so re-applying the same
``add_members`` call leaves the document unchanged.
"""

from __future__ import annotations

import contextlib
import json
import logging
from typing import Iterable, List, Optional

from tunevault.domain.catalog.repository import CatalogStore
from tunevault.domain.playlists.base import PlaylistId, PlaylistStore, unique_track_ids, validate_playlist_name
from tunevault.errors import NotFoundError, UpstreamIOError, ValidationError
from tunevault.infrastructure.object_store import ObjectStoreGateway
from tunevault.models.dto import PlaylistView, TrackView


logger = logging.getLogger(__name__)

DOCUMENT_SUFFIX = ".json"


class DocumentPlaylistStore(PlaylistStore):
    def __init__(self, gateway: ObjectStoreGateway, catalog: CatalogStore, prefix: str = "playlists/"):
        self.gateway = gateway
        self.catalog = catalog
        self.prefix = prefix

    def _name(self, name: PlaylistId) -> str:
        cleaned = validate_playlist_name(name)
        if "/" in cleaned:
            raise ValidationError("Playlist names cannot contain '/'")
        return cleaned

    def document_key(self, name: str) -> str:
        return f"{self.prefix}{name}{DOCUMENT_SUFFIX}"

    def _read(self, name: str) -> Optional[List[TrackView]]:
        key = self.document_key(name)
        try:
            stream = self.gateway.get_object(key)
        except NotFoundError:
            return None
        with contextlib.closing(stream):
            raw = stream.read()
        try:
            payload = json.loads(raw.decode("utf-8") or "[]")
        except (UnicodeDecodeError, ValueError) as exc:
            # Refuse to go on: a later write would clobber a document we failed to parse
            logger.error("Playlist document %r is corrupt: %s", key, exc)
            raise UpstreamIOError(f"Playlist document for {name!r} is unreadable") from exc
        if not isinstance(payload, list):
            raise UpstreamIOError(f"Playlist document for {name!r} is unreadable")

        tracks: List[TrackView] = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            source_key = item.get("source_key")
            if not source_key:
                continue
            # The URL is re-derived rather than trusted from the stored copy
            tracks.append(
                TrackView(
                    id=item.get("id"),
                    source_key=source_key,
                    title=item.get("title") or source_key,
                    artist=item.get("artist") or "Unknown Artist",
                    playable_url=self.catalog.playable_url(source_key),
                )
            )
        return tracks

    def _write(self, name: str, tracks: List[TrackView]) -> None:
        body = json.dumps([t.model_dump(mode="json") for t in tracks], ensure_ascii=False)
        self.gateway.put_object(self.document_key(name), body.encode("utf-8"), "application/json")

    def _view(self, name: str, tracks: List[TrackView]) -> PlaylistView:
        return PlaylistView(id=name, name=name, tracks=tracks)

    def find_by_name(self, name: str) -> Optional[PlaylistView]:
        name = self._name(name)
        tracks = self._read(name)
        return None if tracks is None else self._view(name, tracks)

    def get(self, playlist_id: PlaylistId) -> PlaylistView:
        playlist = self.find_by_name(playlist_id)
        if playlist is None:
            raise NotFoundError(f"Playlist {playlist_id} not found")
        return playlist

    def create_or_get_by_name(self, name: str) -> PlaylistView:
        name = self._name(name)
        tracks = self._read(name)
        if tracks is None:
            tracks = []
            self._write(name, tracks)
            logger.info("Created playlist document %r", self.document_key(name))
        return self._view(name, tracks)

    def add_members(self, playlist_id: PlaylistId, track_ids: Iterable[int]) -> PlaylistView:
        name = self._name(playlist_id)
        ids = unique_track_ids(track_ids)
        tracks = self._read(name)
        if tracks is None:
            raise NotFoundError(f"Playlist {playlist_id} not found")

        present = {t.source_key for t in tracks}
        added = 0
        for row in self.catalog.get_many(ids):
            if row.source_key in present:
                continue
            tracks.append(self.catalog.to_view(row))
            present.add(row.source_key)
            added += 1
        if added:
            self._write(name, tracks)
            logger.info("Added %d track(s) to playlist document %r", added, name)
        return self._view(name, tracks)

    def replace_contents(self, name: str, track_ids: Iterable[int]) -> PlaylistView:
        name = self._name(name)
        tracks = [self.catalog.to_view(row) for row in self.catalog.get_many(unique_track_ids(track_ids))]
        self._write(name, tracks)
        logger.info("Replaced playlist document %r with %d track(s)", name, len(tracks))
        return self._view(name, tracks)

    def list_all(self) -> List[PlaylistView]:
        playlists: List[PlaylistView] = []
        for summary in self.gateway.list_objects(self.prefix):
            key = summary.key
            if not key.startswith(self.prefix) or not key.endswith(DOCUMENT_SUFFIX):
                continue
            name = key[len(self.prefix):-len(DOCUMENT_SUFFIX)]
            if not name or "/" in name:
                continue
            tracks = self._read(name)
            if tracks is not None:
                playlists.append(self._view(name, tracks))
        return sorted(playlists, key=lambda p: p.name)


__all__ = ["DocumentPlaylistStore"]
