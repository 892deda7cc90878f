from __future__ import annotations

from typing import Iterable, List, Optional, Union

from tunevault.errors import ValidationError
from tunevault.models.dto import PlaylistView

MAX_NAME_LENGTH = 255

PlaylistId = Union[int, str]


def validate_playlist_name(name: Optional[str]) -> str:
    if name is not None and not isinstance(name, str):
        raise ValidationError("Playlist name must be a string")
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Playlist name is required")
    if len(cleaned) > MAX_NAME_LENGTH:
        raise ValidationError(f"Playlist name exceeds {MAX_NAME_LENGTH} characters")
    return cleaned


def unique_track_ids(track_ids: Iterable[object]) -> List[int]:
    """Coerce to ints, drop repeats, keep first-seen order."""
    seen: List[int] = []
    for raw in track_ids or []:
        if isinstance(raw, bool):
            raise ValidationError(f"Invalid track id: {raw!r}")
        try:
            track_id = int(raw)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid track id: {raw!r}") from None
        if track_id not in seen:
            seen.append(track_id)
    return seen


class PlaylistStore:
    """Interface for playlist persistence.

    Membership is a set: a track appears at most once per playlist, while
    insertion order is kept for display. ``add_members`` merges and is safe to
    retry; ``replace_contents`` is the only operation that drops members.
    """

    def find_by_name(self, name: str) -> Optional[PlaylistView]:  # pragma: no cover - interface
        raise NotImplementedError

    def get(self, playlist_id: PlaylistId) -> PlaylistView:  # pragma: no cover - interface
        raise NotImplementedError

    def create_or_get_by_name(self, name: str) -> PlaylistView:  # pragma: no cover - interface
        raise NotImplementedError

    def add_members(self, playlist_id: PlaylistId, track_ids: Iterable[int]) -> PlaylistView:  # pragma: no cover - interface
        raise NotImplementedError

    def replace_contents(self, name: str, track_ids: Iterable[int]) -> PlaylistView:  # pragma: no cover - interface
        raise NotImplementedError

    def list_all(self) -> List[PlaylistView]:  # pragma: no cover - interface
        raise NotImplementedError


__all__ = ["PlaylistStore", "PlaylistId", "validate_playlist_name", "unique_track_ids"]
