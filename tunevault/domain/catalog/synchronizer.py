"""
One-way, insert-only reconciliation of the bucket listing into the catalog.

For every listed object with a recognized media extension, the synchronizer
creates a catalog entry if none exists for its key. Existing entries are never
touched, even when the object behind them changed: titles corrected by hand
must survive a re-sync. The new-vs-existing decision comes from the catalog
alone, never from listing order, so any provider ordering gives the same
result.

There is no lock around a sync. Two concurrent runs may both see a key as
absent; the catalog's unique key makes one insert fail with ConflictError,
which is counted as a benign skip here.
"""

from __future__ import annotations

import logging
import time
from typing import Iterable, Optional, Sequence

from tunevault.domain.catalog.filename_parser import DEFAULT_EXTENSIONS, parse_object_key
from tunevault.domain.catalog.repository import CatalogStore
from tunevault.errors import ConflictError, UpstreamIOError
from tunevault.infrastructure.object_store import ObjectStoreGateway
from tunevault.models.dto import ObjectSummary, SyncResult
from tunevault.observability.metrics import record_sync_result


logger = logging.getLogger(__name__)


def has_media_extension(key: str, extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> bool:
    lowered = key.lower()
    return any(lowered.endswith(ext.lower()) for ext in extensions if ext)


class Synchronizer:
    def __init__(
        self,
        catalog: CatalogStore,
        gateway: Optional[ObjectStoreGateway] = None,
        *,
        prefix: Optional[str] = None,
    ):
        self.catalog = catalog
        self.gateway = gateway
        self.prefix = prefix

    def sync(self, listing: Iterable[ObjectSummary]) -> SyncResult:
        result = SyncResult()
        started = time.monotonic()

        for entry in listing:
            result.listed_count += 1
            key = entry.key
            if not has_media_extension(key, self.catalog.extensions):
                result.ignored_count += 1
                continue

            if self.catalog.find_by_source_key(key) is not None:
                result.skipped_count += 1
                continue

            parsed = parse_object_key(key, self.catalog.markers, self.catalog.extensions)
            try:
                self.catalog.insert(key, parsed.title, parsed.artist)
            except ConflictError:
                # Another writer inserted the same key between our check and insert
                logger.info("Skipping %r: inserted concurrently by another writer", key)
                result.conflict_count += 1
                continue

            result.added_count += 1
            logger.debug("Catalogued %r as %r by %r", key, parsed.title, parsed.artist)

        duration = time.monotonic() - started
        record_sync_result(result.added_count, result.conflict_count, duration)
        logger.info(
            "Sync finished in %.2fs: listed=%d added=%d existing=%d conflicts=%d ignored=%d",
            duration,
            result.listed_count,
            result.added_count,
            result.skipped_count,
            result.conflict_count,
            result.ignored_count,
        )
        return result

    def sync_bucket(self) -> SyncResult:
        """Pull the full listing from the gateway and reconcile it."""
        if self.gateway is None:
            raise UpstreamIOError("Object store is not configured")
        listing = self.gateway.list_objects(self.prefix)
        logger.info("Listed %d objects from bucket %s", len(listing), self.gateway.bucket)
        return self.sync(listing)


__all__ = ["Synchronizer", "has_media_extension"]
