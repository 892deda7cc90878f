"""Catalog domain: filename parsing, URL derivation, store and synchronizer."""

from .filename_parser import ParsedName, parse_object_key
from .repository import CatalogStore
from .synchronizer import Synchronizer, has_media_extension
from .urls import build_playable_url, object_key_from_url

__all__ = [
    "ParsedName",
    "parse_object_key",
    "CatalogStore",
    "Synchronizer",
    "has_media_extension",
    "build_playable_url",
    "object_key_from_url",
]
