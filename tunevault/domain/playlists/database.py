from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy.exc import IntegrityError

from tunevault.database.db_manager import db, Playlist, PlaylistTrack
from tunevault.domain.catalog.repository import CatalogStore
from tunevault.domain.playlists.base import PlaylistId, PlaylistStore, unique_track_ids, validate_playlist_name
from tunevault.errors import ConflictError, NotFoundError
from tunevault.models.dto import PlaylistView


logger = logging.getLogger(__name__)


class DatabasePlaylistStore(PlaylistStore):
    """Playlists as rows, membership in ``playlist_tracks``.

    ``UNIQUE(playlist_id, track_id)`` keeps membership a set even when two
    requests add the same track at once; the losing commit is rolled back and
    the missing members are recomputed once against the fresh state.
    """

    def __init__(self, catalog: CatalogStore):
        self.catalog = catalog

    def _load(self, playlist_id: PlaylistId) -> Optional[Playlist]:
        try:
            pk = int(playlist_id)
        except (TypeError, ValueError):
            return None
        return db.session.get(Playlist, pk)

    def _require(self, playlist_id: PlaylistId) -> Playlist:
        playlist = self._load(playlist_id)
        if playlist is None:
            raise NotFoundError(f"Playlist {playlist_id} not found")
        return playlist

    def _view(self, playlist: Playlist) -> PlaylistView:
        entries = sorted(playlist.entries, key=lambda e: e.position)
        return PlaylistView(
            id=playlist.id,
            name=playlist.name,
            tracks=[self.catalog.to_view(entry.track) for entry in entries],
        )

    def _by_name(self, name: str) -> Optional[Playlist]:
        return Playlist.query.filter_by(name=name).first()

    def find_by_name(self, name: str) -> Optional[PlaylistView]:
        playlist = self._by_name(validate_playlist_name(name))
        return self._view(playlist) if playlist else None

    def get(self, playlist_id: PlaylistId) -> PlaylistView:
        return self._view(self._require(playlist_id))

    def _create_or_get(self, name: str) -> Playlist:
        existing = self._by_name(name)
        if existing is not None:
            return existing
        playlist = Playlist(name=name)
        db.session.add(playlist)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            existing = self._by_name(name)
            if existing is None:
                raise ConflictError(f"Playlist {name!r} could not be created") from None
            logger.debug("Playlist %r created concurrently; using existing row", name)
            return existing
        logger.info("Created playlist %r (id=%s)", name, playlist.id)
        return playlist

    def create_or_get_by_name(self, name: str) -> PlaylistView:
        return self._view(self._create_or_get(validate_playlist_name(name)))

    def add_members(self, playlist_id: PlaylistId, track_ids: Iterable[int]) -> PlaylistView:
        ids = unique_track_ids(track_ids)
        playlist = self._require(playlist_id)
        self.catalog.get_many(ids)

        for attempt in (1, 2):
            present = {entry.track_id for entry in playlist.entries}
            next_position = max((entry.position for entry in playlist.entries), default=-1) + 1
            missing = [tid for tid in ids if tid not in present]
            if not missing:
                return self._view(playlist)

            for offset, track_id in enumerate(missing):
                db.session.add(
                    PlaylistTrack(playlist=playlist, track_id=track_id, position=next_position + offset)
                )
            playlist.updated_at = datetime.utcnow()
            try:
                db.session.commit()
            except IntegrityError:
                db.session.rollback()
                logger.info(
                    "Concurrent membership change on playlist %s (attempt %d); recomputing",
                    playlist_id, attempt,
                )
                playlist = self._require(playlist_id)
                continue

            logger.info("Added %d track(s) to playlist %r", len(missing), playlist.name)
            return self._view(playlist)

        raise ConflictError(f"Playlist {playlist_id} changed concurrently; retry the request")

    def replace_contents(self, name: str, track_ids: Iterable[int]) -> PlaylistView:
        name = validate_playlist_name(name)
        ids = unique_track_ids(track_ids)
        self.catalog.get_many(ids)

        playlist = self._create_or_get(name)
        # Flush the deletes first so re-adding a kept track does not trip the unique key
        playlist.entries.clear()
        db.session.flush()
        for position, track_id in enumerate(ids):
            db.session.add(PlaylistTrack(playlist=playlist, track_id=track_id, position=position))
        playlist.updated_at = datetime.utcnow()
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ConflictError(f"Playlist {name!r} changed concurrently; retry the request") from None
        logger.info("Replaced contents of playlist %r with %d track(s)", name, len(ids))
        return self._view(playlist)

    def list_all(self) -> List[PlaylistView]:
        return [self._view(p) for p in Playlist.query.order_by(Playlist.name.asc()).all()]


__all__ = ["DatabasePlaylistStore"]
