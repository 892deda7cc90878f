#!/usr/bin/env python
"""
Centralized settings schema for the catalog, object store and playlists.

Validates the flat upper-case configuration (config.Config merged with the
Flask app config) into a typed AppSettings and derives the object-store
endpoint from the R2 account id when no explicit endpoint is configured.
"""

from __future__ import annotations

from typing import Any, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from config import Config


def _split_csv(value: Optional[object]) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [token.strip() for token in value.split(",") if token.strip()]
    if isinstance(value, (list, tuple, set)):
        return [str(token).strip() for token in value if str(token).strip()]
    return [str(value).strip()]


def _normalize_extensions(value: Optional[object]) -> List[str]:
    """Lower-case, dot-prefixed, unique, order-preserving."""
    normalized: List[str] = []
    for token in _split_csv(value):
        ext = token.lower()
        if not ext.startswith("."):
            ext = "." + ext
        if ext not in normalized:
            normalized.append(ext)
    return normalized or [".mp3"]


class AppSettings(BaseModel):
    """Typed view of the runtime configuration."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    # Object store
    bucket: Optional[str] = None
    account_id: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    endpoint_url: Optional[str] = None
    region: str = "auto"
    public_base_url: str = ""

    # Catalog derivation
    media_extensions: List[str] = Field(default_factory=lambda: [".mp3"])
    decorative_markers: List[str] = Field(default_factory=lambda: ["(SPOTISAVER)"])

    # Playlists
    playlist_storage: Literal["database", "object_store"] = "database"
    playlist_document_prefix: str = "playlists/"

    # Uploads
    upload_key_prefix: str = ""
    default_upload_playlist: str = "New Upload"

    @field_validator("media_extensions", mode="before")
    @classmethod
    def _coerce_extensions(cls, value: object) -> List[str]:
        return _normalize_extensions(value)

    @field_validator("decorative_markers", mode="before")
    @classmethod
    def _coerce_markers(cls, value: object) -> List[str]:
        return _split_csv(value)

    @field_validator("playlist_storage", mode="before")
    @classmethod
    def _coerce_storage(cls, value: object) -> str:
        token = str(value or "database").strip().lower().replace("-", "_")
        aliases = {"db": "database", "sql": "database", "bucket": "object_store", "documents": "object_store"}
        return aliases.get(token, token)

    @field_validator("playlist_document_prefix", "upload_key_prefix", mode="before")
    @classmethod
    def _coerce_prefix(cls, value: object) -> str:
        prefix = str(value or "").strip().lstrip("/")
        if prefix and not prefix.endswith("/"):
            prefix += "/"
        return prefix

    @field_validator("public_base_url", mode="before")
    @classmethod
    def _strip_public_base(cls, value: object) -> str:
        return str(value or "").strip().rstrip("/")

    @property
    def resolved_endpoint_url(self) -> Optional[str]:
        if self.endpoint_url:
            return self.endpoint_url
        if self.account_id:
            return f"https://{self.account_id}.r2.cloudflarestorage.com"
        return None


def load_app_settings(config: Optional[Mapping[str, Any]] = None) -> AppSettings:
    """Build settings from a Flask-style config mapping (defaults to Config)."""

    def _get(key: str) -> Any:
        if config is not None and key in config:
            return config[key]
        return getattr(Config, key, None)

    data = {
        "bucket": _get("R2_BUCKET_NAME"),
        "account_id": _get("R2_ACCOUNT_ID"),
        "access_key_id": _get("R2_ACCESS_KEY_ID"),
        "secret_access_key": _get("R2_SECRET_ACCESS_KEY"),
        "endpoint_url": _get("S3_ENDPOINT_URL"),
        "region": _get("S3_REGION") or "auto",
        "public_base_url": _get("R2_PUBLIC_URL"),
        "media_extensions": _get("MEDIA_EXTENSIONS"),
        "decorative_markers": _get("FILENAME_DECORATIVE_MARKERS"),
        "playlist_storage": _get("PLAYLIST_STORAGE"),
        "playlist_document_prefix": _get("PLAYLIST_DOCUMENT_PREFIX"),
        "upload_key_prefix": _get("UPLOAD_KEY_PREFIX"),
        "default_upload_playlist": _get("DEFAULT_UPLOAD_PLAYLIST") or "New Upload",
    }
    return AppSettings.model_validate(data)


__all__ = [
    "AppSettings",
    "load_app_settings",
]
