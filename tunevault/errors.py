"""Error taxonomy shared by the catalog, playlist and object-store layers.

Every error carries a stable machine-readable ``code`` and the HTTP status the
adapter layer maps it to. Messages are safe to show to clients; anything that
may contain internals (credentials, connection strings, provider payloads)
belongs in the log, not in ``message``.
"""

from __future__ import annotations


class TuneVaultError(Exception):
    code = "internal_error"
    status = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)
        self.message = message or self.code

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class NotFoundError(TuneVaultError):
    """Referenced playlist, track or object does not exist."""

    code = "not_found"
    status = 404


class ConflictError(TuneVaultError):
    """Duplicate stable key on insert."""

    code = "conflict"
    status = 409


class ValidationError(TuneVaultError):
    """Missing or malformed input, raised before any I/O."""

    code = "validation_error"
    status = 400


class UpstreamIOError(TuneVaultError):
    """Object store or metadata store unavailable."""

    code = "upstream_unavailable"
    status = 502


__all__ = [
    "TuneVaultError",
    "NotFoundError",
    "ConflictError",
    "ValidationError",
    "UpstreamIOError",
]
