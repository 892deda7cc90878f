from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.exc import IntegrityError, OperationalError

from tunevault.database.db_manager import db, Track, UNKNOWN_ARTIST
from tunevault.domain.catalog.filename_parser import DEFAULT_EXTENSIONS, DEFAULT_MARKERS, parse_object_key
from tunevault.domain.catalog.urls import build_playable_url
from tunevault.errors import ConflictError, NotFoundError, UpstreamIOError, ValidationError
from tunevault.models.dto import TrackView


logger = logging.getLogger(__name__)


class CatalogStore:
    """Durable mapping from stable key (object key) to track metadata.

    The unique constraint on ``tracks.source_key`` is the last line of defense
    against duplicates: ``insert`` translates its violation into ConflictError.
    Ordering of ``list_all`` is by title, then source key, using the
    database's binary (case-sensitive) collation.
    """

    def __init__(
        self,
        public_base_url: str,
        markers: Sequence[str] = DEFAULT_MARKERS,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    ):
        self.public_base_url = public_base_url
        self.markers = tuple(markers)
        self.extensions = tuple(extensions)

    # -- reads -------------------------------------------------------------

    def find_by_source_key(self, source_key: str) -> Optional[Track]:
        return Track.query.filter_by(source_key=source_key).first()

    def get_by_id(self, track_id: int) -> Optional[Track]:
        return db.session.get(Track, track_id)

    def get_many(self, track_ids: Iterable[int]) -> List[Track]:
        """Resolve ids in the given order; NotFoundError on the first unknown id."""
        ids = list(track_ids)
        rows = {t.id: t for t in Track.query.filter(Track.id.in_(ids)).all()} if ids else {}
        missing = [tid for tid in ids if tid not in rows]
        if missing:
            raise NotFoundError(f"Track {missing[0]} not found")
        return [rows[tid] for tid in ids]

    def list_all(self) -> List[Track]:
        return Track.query.order_by(Track.title.asc(), Track.source_key.asc()).all()

    # -- writes ------------------------------------------------------------

    def insert(self, source_key: str, title: str, artist: str = UNKNOWN_ARTIST) -> Track:
        if not source_key:
            raise ValidationError("source_key is required")
        track = Track(source_key=source_key, title=title, artist=artist or UNKNOWN_ARTIST)
        db.session.add(track)
        try:
            db.session.commit()
        except IntegrityError as exc:
            db.session.rollback()
            raise ConflictError(f"Track {source_key!r} already exists") from exc
        except OperationalError as exc:
            db.session.rollback()
            logger.error("Catalog insert of %r failed: %s", source_key, exc)
            raise UpstreamIOError("Catalog store unavailable") from exc
        return track

    def insert_parsed(self, source_key: str) -> Track:
        parsed = parse_object_key(source_key, self.markers, self.extensions)
        return self.insert(source_key, parsed.title, parsed.artist)

    def ensure_track(self, source_key: str) -> Tuple[Track, bool]:
        """Return the track for ``source_key``, creating it if absent.

        The boolean is True when this call created the entry. Losing an insert
        race to a concurrent writer counts as "already present".
        """
        existing = self.find_by_source_key(source_key)
        if existing is not None:
            return existing, False
        try:
            return self.insert_parsed(source_key), True
        except ConflictError:
            logger.debug("Track %r inserted concurrently; re-fetching", source_key)
            existing = self.find_by_source_key(source_key)
            if existing is None:
                raise
            return existing, False

    # -- views -------------------------------------------------------------

    def playable_url(self, source_key: str) -> str:
        return build_playable_url(self.public_base_url, source_key)

    def to_view(self, track: Track) -> TrackView:
        return TrackView(
            id=track.id,
            source_key=track.source_key,
            title=track.title,
            artist=track.artist,
            playable_url=self.playable_url(track.source_key),
        )


__all__ = ["CatalogStore"]
