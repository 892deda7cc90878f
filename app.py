import atexit
import os
import logging
from datetime import datetime
from typing import Any, Mapping, Optional
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Flask specific imports ---
from flask import Flask, request, jsonify, g
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

# --- Configuration and domain wiring ---
from config import Config
from tunevault.database.db_manager import initialize_database, dispose_database
from tunevault.domain.catalog import CatalogStore, Synchronizer
from tunevault.domain.playlists import build_playlist_store
from tunevault.domain.uploads import UploadService
from tunevault.errors import TuneVaultError
from tunevault.infrastructure.object_store import S3ObjectStoreGateway
from tunevault.interfaces.http.routes import (
    tracks_bp,
    playlist_bp,
    sync_bp,
    upload_bp,
    health_bp,
)
from tunevault.observability import configure_structured_logging, metrics_blueprint, init_tracing
from tunevault.settings import AppSettings, load_app_settings


logger = logging.getLogger(__name__)


def configure_logging(log_dir: str) -> str:
    """
    Configure root logging with:
      - FileHandler (INFO+) to a new file per run: log-YYYY-MM-DD-HH-MM-SS
      - StreamHandler (WARNING+) to console when ENABLE_CONSOLE_LOGS is set
      - Werkzeug/Flask loggers routed to root (no extra console spam)

    Returns the path to the created log file.
    """
    os.makedirs(log_dir, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
    log_filename = f"log-{timestamp}"
    log_path = os.path.join(log_dir, log_filename)

    root = logging.getLogger()
    root.setLevel(logging.INFO)

    # Preserve structured handlers; remove existing FileHandlers to avoid duplicates
    root.handlers = [h for h in root.handlers if not isinstance(h, logging.FileHandler)]

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # File: INFO and above
    file_handler = logging.FileHandler(log_path, encoding='utf-8')
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    if Config.ENABLE_CONSOLE_LOGS:
        console_handler = logging.StreamHandler()
        # If console logging is enabled, keep it concise: warnings and above
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    # Quiet Flask/Werkzeug own console handlers; let them propagate to root
    for name in ("werkzeug", "flask.app"):
        _l = logging.getLogger(name)
        _l.setLevel(logging.INFO)
        _l.handlers = []
        _l.propagate = True
    # botocore logs request bodies at DEBUG
    logging.getLogger("botocore").setLevel(logging.WARNING)

    return log_path


def build_object_store(settings: AppSettings) -> Optional[S3ObjectStoreGateway]:
    """Create the bucket gateway, or None when no bucket is configured."""
    if not settings.bucket:
        return None
    return S3ObjectStoreGateway.from_settings(settings)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(TuneVaultError)
    def _handle_domain_error(exc: TuneVaultError):
        if exc.status >= 500:
            app.logger.error("Request failed: %s", exc, exc_info=exc.__cause__ or exc)
        else:
            app.logger.info("Request rejected (%s): %s", exc.code, exc.message)
        return jsonify(exc.to_dict()), exc.status

    @app.errorhandler(HTTPException)
    def _handle_http_error(exc: HTTPException):
        code = (exc.name or "error").lower().replace(" ", "_")
        return jsonify({"error": code, "message": exc.description}), exc.code

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        # Details stay in the log; the client only sees a stable code
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "internal_error", "message": "Internal server error"}), 500


def create_app(overrides: Optional[Mapping[str, Any]] = None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    configure_structured_logging(app)
    init_tracing(app)

    @app.before_request
    def _assign_request_id():
        g.request_id = request.headers.get('X-Request-ID') or uuid4().hex

    @app.after_request
    def _inject_request_id(response):
        if getattr(g, 'request_id', None):
            response.headers.setdefault('X-Request-ID', g.request_id)
        return response

    allowed_origins = sorted({
        origin.strip()
        for origin in app.config.get('CORS_ALLOWED_ORIGINS', [])
        if origin and origin.strip() and origin.strip() != "*"
    })
    CORS(app, resources={r"/api/*": {"origins": allowed_origins}})

    _register_error_handlers(app)

    # Initialize database
    initialize_database(app)

    settings = load_app_settings(app.config)
    app.extensions['app_settings'] = settings

    object_store = build_object_store(settings)
    if object_store is None:
        app.logger.warning("R2_BUCKET_NAME not set; sync and uploads are unavailable.")
    else:
        app.logger.info("Object store ready: bucket=%s endpoint=%s", object_store.bucket, settings.resolved_endpoint_url)
    app.extensions['object_store'] = object_store

    # Build domain services to keep wiring at the app boundary
    catalog = CatalogStore(
        public_base_url=settings.public_base_url,
        markers=settings.decorative_markers,
        extensions=settings.media_extensions,
    )
    playlist_store = build_playlist_store(settings, catalog, object_store)
    app.logger.info("Playlist storage: %s", settings.playlist_storage)

    app.extensions['catalog'] = catalog
    app.extensions['playlist_store'] = playlist_store
    app.extensions['synchronizer'] = Synchronizer(catalog, object_store)
    app.extensions['upload_service'] = (
        UploadService(
            object_store,
            catalog,
            playlist_store,
            key_prefix=settings.upload_key_prefix,
            default_playlist=settings.default_upload_playlist,
        )
        if object_store is not None
        else None
    )

    # --- Register Blueprints ---
    app.register_blueprint(tracks_bp)
    app.register_blueprint(playlist_bp)
    app.register_blueprint(sync_bp)
    app.register_blueprint(upload_bp)
    app.register_blueprint(metrics_blueprint)
    app.register_blueprint(health_bp)

    return app


def shutdown(app: Flask) -> None:
    """Release process-wide handles created by create_app."""
    object_store = app.extensions.get('object_store')
    if object_store is not None:
        object_store.close()
    dispose_database(app)


if __name__ == '__main__':
    # Configure logging:
    # - In debug with reloader: only in the child process to avoid duplicate files
    # - In non-debug: always configure here
    debug_mode = bool(Config.DEBUG)
    if debug_mode:
        if os.environ.get('WERKZEUG_RUN_MAIN') == 'true':
            log_file_path = configure_logging(Config.LOG_DIR)
            logger.info("File logging initialized at %s", log_file_path)
    else:
        log_file_path = configure_logging(Config.LOG_DIR)
        logger.info("File logging initialized at %s", log_file_path)

    if not Config.R2_PUBLIC_URL:
        logger.warning("R2_PUBLIC_URL is not set; playable URLs will be relative.")

    # Create the app instance here
    app = create_app()
    atexit.register(shutdown, app)
    # Route app.logger through root handlers, keep levels consistent
    app.logger.handlers = []
    app.logger.setLevel(logging.INFO)
    app.logger.propagate = True
    logger.info("Starting Flask application...")
    app.run(debug=Config.DEBUG, host='0.0.0.0', port=Config.PORT, threaded=True)
