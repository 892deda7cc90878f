from __future__ import annotations

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text

from tunevault.database.db_manager import db

health_bp = Blueprint("health_bp", __name__)


@health_bp.route("/healthz")
def healthz():
    status = 200
    checks = {}

    try:
        db.session.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception:
        current_app.logger.exception("Database health check failed")
        status = 503
        checks["database"] = "error"

    gateway = current_app.extensions.get("object_store")
    checks["object_store"] = "configured" if gateway is not None else "unavailable"
    checks["playlist_storage"] = current_app.extensions["app_settings"].playlist_storage

    overall = "ok" if status == 200 else "degraded"
    return jsonify({"status": overall, "checks": checks}), status


@health_bp.route("/readyz")
def readyz():
    ready = current_app.extensions.get("object_store") is not None
    payload = {"status": "ready" if ready else "blocked"}
    return jsonify(payload), 200 if ready else 503
