"""Upload audio files to the bucket, catalog them and attach them to a playlist.

The object key is the uploaded file name (path components dropped), which is
also the catalog's stable key; titles and artists come from the same filename
parser the synchronizer uses, so an uploaded file and a later sync of the same
object agree on the catalog entry.

An upload is not atomic. If a put fails part way, the files stored before it
stay in the bucket and the catalog but are not attached to the playlist, and
the request fails with UpstreamIOError. Retrying the whole request completes
it: storing, cataloguing and attaching are all idempotent per object key.
"""

from __future__ import annotations

import dataclasses
import logging
import mimetypes
import posixpath
from typing import BinaryIO, Optional, Sequence, Union

from tunevault.domain.catalog.repository import CatalogStore
from tunevault.domain.catalog.synchronizer import has_media_extension
from tunevault.domain.playlists.base import PlaylistStore, validate_playlist_name
from tunevault.errors import ValidationError
from tunevault.infrastructure.object_store import ObjectStoreGateway
from tunevault.models.dto import UploadResult
from tunevault.observability.metrics import record_upload


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class IncomingFile:
    filename: str
    data: Union[bytes, BinaryIO]
    content_type: Optional[str] = None


class UploadService:
    def __init__(
        self,
        gateway: ObjectStoreGateway,
        catalog: CatalogStore,
        playlists: PlaylistStore,
        *,
        key_prefix: str = "",
        default_playlist: str = "New Upload",
    ):
        self.gateway = gateway
        self.catalog = catalog
        self.playlists = playlists
        self.key_prefix = key_prefix
        self.default_playlist = default_playlist

    def object_key(self, filename: str) -> str:
        base = posixpath.basename((filename or "").replace("\\", "/")).strip()
        if not base:
            raise ValidationError("Uploaded file has no name")
        if not has_media_extension(base, self.catalog.extensions):
            allowed = ", ".join(self.catalog.extensions)
            raise ValidationError(f"{base!r} is not a supported audio file ({allowed})")
        return f"{self.key_prefix}{base}"

    @staticmethod
    def _content_type(incoming: IncomingFile, key: str) -> str:
        if incoming.content_type and incoming.content_type != "application/octet-stream":
            return incoming.content_type
        guessed, _ = mimetypes.guess_type(key)
        return guessed or "application/octet-stream"

    def upload(self, files: Sequence[IncomingFile], playlist_name: Optional[str] = None) -> UploadResult:
        name = validate_playlist_name(playlist_name or self.default_playlist)
        if not files:
            raise ValidationError("At least one file is required")
        # Validate every name before the first byte is sent
        keys = [self.object_key(f.filename) for f in files]

        logger.info("Uploading %d file(s) to playlist %r", len(files), name, extra={"playlist": name})
        tracks = []
        for incoming, key in zip(files, keys):
            # Failures propagate; a put is never retried
            self.gateway.put_object(key, incoming.data, self._content_type(incoming, key))
            track, created = self.catalog.ensure_track(key)
            if not created:
                logger.info("Object %r was already catalogued as track %s", key, track.id)
            tracks.append(track)
        record_upload(len(tracks))

        playlist = self.playlists.create_or_get_by_name(name)
        playlist = self.playlists.add_members(playlist.id, [t.id for t in tracks])
        return UploadResult(playlist=playlist, tracks=[self.catalog.to_view(t) for t in tracks])


__all__ = ["IncomingFile", "UploadService"]
