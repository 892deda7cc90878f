"""Playable URL derivation.

The key is percent-encoded as a single path segment with the same safe set as
JavaScript's ``encodeURIComponent``, which is how public bucket URLs were
generated when the objects were first catalogued. ``/`` inside a key is
encoded too, so the URL always decodes back to the exact key.
"""

from __future__ import annotations

from urllib.parse import quote, unquote

# Unreserved characters left alone by encodeURIComponent besides alphanumerics
_SAFE = "-_.!~*'()"


def encode_key(key: str) -> str:
    return quote(key, safe=_SAFE, encoding="utf-8")


def build_playable_url(public_base: str, key: str) -> str:
    base = (public_base or "").rstrip("/")
    return f"{base}/{encode_key(key)}"


def object_key_from_url(public_base: str, url: str) -> str:
    """Inverse of build_playable_url."""
    prefix = (public_base or "").rstrip("/") + "/"
    if not url.startswith(prefix):
        raise ValueError(f"URL is not under {prefix!r}")
    return unquote(url[len(prefix):], encoding="utf-8")


__all__ = ["encode_key", "build_playable_url", "object_key_from_url"]
