#!/usr/bin/env python
"""
Pydantic records exchanged between the object store, the catalog, the
playlist stores and the HTTP layer.

Database rows never leave the stores; callers receive these views instead,
with playable URLs derived at read time.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ObjectSummary(BaseModel):
    """One entry of a bucket listing."""

    model_config = ConfigDict(frozen=True)

    key: str
    size: int = Field(default=0, ge=0)
    last_modified: Optional[datetime] = None


class TrackView(BaseModel):
    """Catalog entry as exposed to clients and stored in playlist documents."""

    id: Optional[int] = None
    source_key: str
    title: str
    artist: str = "Unknown Artist"
    playable_url: str


class PlaylistView(BaseModel):
    # Integer id in database mode, the playlist name in document mode
    id: Union[int, str]
    name: str
    tracks: List[TrackView] = Field(default_factory=list)

    @property
    def track_ids(self) -> List[Optional[int]]:
        return [track.id for track in self.tracks]


class SyncResult(BaseModel):
    added_count: int = 0
    skipped_count: int = 0
    conflict_count: int = 0
    ignored_count: int = 0
    listed_count: int = 0

    @property
    def message(self) -> str:
        if self.listed_count == 0:
            return "Bucket is empty"
        return f"Sync complete! Added {self.added_count} new songs."


class UploadResult(BaseModel):
    playlist: PlaylistView
    tracks: List[TrackView]

    @property
    def uploaded_count(self) -> int:
        return len(self.tracks)


__all__ = ["ObjectSummary", "TrackView", "PlaylistView", "SyncResult", "UploadResult"]
