from __future__ import annotations

from typing import Optional

from flask import Blueprint, Response
from prometheus_client import Counter, Histogram, generate_latest

metrics_blueprint = Blueprint("metrics_bp", __name__)

CONTENT_TYPE_LATEST = "text/plain; version=0.0.4; charset=utf-8"

SYNC_RUNS = Counter(
    "tunevault_sync_runs_total",
    "Total number of catalog synchronizations run.",
)
TRACKS_ADDED = Counter(
    "tunevault_tracks_added_total",
    "Total number of catalog entries created by synchronization.",
)
SYNC_CONFLICTS = Counter(
    "tunevault_sync_conflicts_total",
    "Inserts that lost a race on the stable key and were skipped.",
)
SYNC_DURATION = Histogram(
    "tunevault_sync_duration_seconds",
    "Wall time of a full catalog synchronization.",
    buckets=(0.1, 0.5, 1, 2, 5, 10, 30, 60, float("inf")),
)
UPLOADS = Counter(
    "tunevault_uploads_total",
    "Total number of audio objects uploaded through the API.",
)
UPSTREAM_ERRORS = Counter(
    "tunevault_upstream_errors_total",
    "Object store failures by operation.",
    ["operation"],
)


def record_sync_result(added: int, conflicts: int = 0, duration_seconds: Optional[float] = None) -> None:
    SYNC_RUNS.inc()
    if added:
        TRACKS_ADDED.inc(added)
    if conflicts:
        SYNC_CONFLICTS.inc(conflicts)
    if duration_seconds is not None:
        SYNC_DURATION.observe(duration_seconds)


def record_upload(count: int = 1) -> None:
    UPLOADS.inc(count)


def record_upstream_error(operation: str) -> None:
    UPSTREAM_ERRORS.labels(operation=operation).inc()


@metrics_blueprint.route("/metrics")
def metrics_endpoint() -> Response:
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
