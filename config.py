#!/usr/bin/env python
# config.py
import os
from typing import List

# This assumes config.py is at the root of your project
basedir = os.path.abspath(os.path.dirname(__file__))


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _get_csv_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name)
    source = raw if raw is not None else default
    return [token.strip() for token in source.split(",") if token and token.strip()]


class Config:
    # Catalog database. Tables are created at startup.
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'instance', 'tunevault.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Object store (Cloudflare R2 or any S3-compatible endpoint)
    R2_ACCOUNT_ID = os.environ.get('R2_ACCOUNT_ID')
    R2_ACCESS_KEY_ID = os.environ.get('R2_ACCESS_KEY_ID')
    R2_SECRET_ACCESS_KEY = os.environ.get('R2_SECRET_ACCESS_KEY')
    R2_BUCKET_NAME = os.environ.get('R2_BUCKET_NAME')
    # Overrides the endpoint derived from R2_ACCOUNT_ID (MinIO, AWS, ...)
    S3_ENDPOINT_URL = os.environ.get('S3_ENDPOINT_URL')
    S3_REGION = os.getenv('S3_REGION', 'auto')
    # Public base URL that serves bucket objects; playable URLs hang off it
    R2_PUBLIC_URL = os.getenv('R2_PUBLIC_URL', '')

    # Catalog derivation
    MEDIA_EXTENSIONS = _get_csv_list('MEDIA_EXTENSIONS', '.mp3')
    FILENAME_DECORATIVE_MARKERS = _get_csv_list('FILENAME_DECORATIVE_MARKERS', '(SPOTISAVER)')

    # Playlists: 'database' or 'object_store' (JSON documents in the bucket)
    PLAYLIST_STORAGE = os.getenv('PLAYLIST_STORAGE', 'database')
    PLAYLIST_DOCUMENT_PREFIX = os.getenv('PLAYLIST_DOCUMENT_PREFIX', 'playlists/')

    # Uploads
    UPLOAD_KEY_PREFIX = os.getenv('UPLOAD_KEY_PREFIX', '')
    DEFAULT_UPLOAD_PLAYLIST = os.getenv('DEFAULT_UPLOAD_PLAYLIST', 'New Upload')
    MAX_CONTENT_LENGTH = max(1, _get_int('MAX_UPLOAD_MB', 200)) * 1024 * 1024

    # HTTP
    CORS_ALLOWED_ORIGINS = _get_csv_list('CORS_ALLOWED_ORIGINS', 'http://localhost:3000')
    PORT = _get_int('PORT', 5000)

    # Runtime behavior
    # Turn Flask debug on/off from env; default off to avoid noisy console
    DEBUG = _get_bool('DEBUG', False)
    # Control console logging; when disabled, logs go only to file
    ENABLE_CONSOLE_LOGS = _get_bool('ENABLE_CONSOLE_LOGS', False)
    LOG_DIR = os.getenv('LOG_DIR', os.path.join(basedir, 'logs'))

    # Tracing (optional, requires the otel extra)
    OTEL_EXPORTER_OTLP_ENDPOINT = os.getenv('OTEL_EXPORTER_OTLP_ENDPOINT')
    OTEL_EXPORTER_OTLP_HEADERS = os.getenv('OTEL_EXPORTER_OTLP_HEADERS')
    OTEL_EXPORTER_OTLP_INSECURE = _get_bool('OTEL_EXPORTER_OTLP_INSECURE', True)
    OTEL_SERVICE_NAME = os.getenv('OTEL_SERVICE_NAME', 'tunevault')
