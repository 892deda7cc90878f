"""Derive display metadata (artist, title) from a bucket object key.

Files land in the bucket named ``"Artist - Title.mp3"``, often with a tag
that the capture tool appends (``"(SPOTISAVER)"``). The split happens on the
first ``-`` only: artist names rarely contain it, titles often do
(``"Artist - Song - Remix"``).

The function is pure. Both the sync path and the upload path call it, and the
catalog's deduplication relies on it returning the same result for the same key.
"""

from __future__ import annotations

import posixpath
from typing import Iterable, NamedTuple

from tunevault.database.db_manager import UNKNOWN_ARTIST

SEPARATOR = "-"
DEFAULT_MARKERS = ("(SPOTISAVER)",)
DEFAULT_EXTENSIONS = (".mp3",)


class ParsedName(NamedTuple):
    title: str
    artist: str


def strip_extension(name: str, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> str:
    lowered = name.lower()
    for ext in extensions:
        ext = ext.lower()
        if ext and lowered.endswith(ext):
            return name[: -len(ext)]
    return name


def clean_object_name(
    raw_key: str,
    markers: Iterable[str] = DEFAULT_MARKERS,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
) -> str:
    name = posixpath.basename(raw_key or "")
    for marker in markers:
        if marker:
            name = name.replace(marker, "")
    return strip_extension(name.strip(), extensions).strip()


def parse_object_key(
    raw_key: str,
    markers: Iterable[str] = DEFAULT_MARKERS,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
) -> ParsedName:
    cleaned = clean_object_name(raw_key, markers, extensions)
    if not cleaned:
        # Nothing left after cleaning (".mp3", a bare marker): keep the raw name
        fallback = posixpath.basename(raw_key or "").strip() or (raw_key or "").strip()
        return ParsedName(title=fallback, artist=UNKNOWN_ARTIST)

    if SEPARATOR in cleaned:
        artist, _, title = cleaned.partition(SEPARATOR)
        artist, title = artist.strip(), title.strip()
        if artist and title:
            return ParsedName(title=title, artist=artist)
        # "- Song" or "Artist -": a dangling separator is not a split
        cleaned = cleaned.strip(SEPARATOR + " \t") or cleaned

    return ParsedName(title=cleaned, artist=UNKNOWN_ARTIST)


__all__ = ["ParsedName", "parse_object_key", "clean_object_name", "strip_extension"]
