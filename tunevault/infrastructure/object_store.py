"""
Object store gateway.

The catalog needs exactly three things from the bucket: a listing, a put and a
get. ObjectStoreGateway is that contract; S3ObjectStoreGateway implements it
with a boto3 S3 client, which covers Cloudflare R2 (zero egress, S3-compatible)
as well as AWS S3 and MinIO.

All three calls are fallible I/O. Provider failures are translated into
UpstreamIOError (NotFoundError for a missing key) so nothing above this module
handles botocore exceptions.
"""

from __future__ import annotations

import logging
from typing import Any, BinaryIO, Dict, List, Optional, Union

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from tunevault.errors import NotFoundError, UpstreamIOError
from tunevault.models.dto import ObjectSummary
from tunevault.observability.metrics import record_upstream_error

logger = logging.getLogger(__name__)

_MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}


class ObjectStoreGateway:
    """Interface for the bucket the catalog is derived from."""

    bucket: Optional[str] = None

    def list_objects(self, prefix: Optional[str] = None) -> List[ObjectSummary]:  # pragma: no cover - interface
        raise NotImplementedError

    def put_object(self, key: str, data: Union[bytes, BinaryIO], content_type: str) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def get_object(self, key: str) -> BinaryIO:  # pragma: no cover - interface
        raise NotImplementedError

    def close(self) -> None:
        return None


class S3ObjectStoreGateway(ObjectStoreGateway):
    """boto3-backed gateway bound to one bucket.

    SDK-level retries are disabled: a listing gets one explicit retry here, and
    a put is never retried because a silent second attempt can duplicate an
    upload under some provider semantics.
    """

    LIST_ATTEMPTS = 2

    def __init__(self, client: Any, bucket: str):
        if not bucket:
            raise ValueError("An object store bucket name is required")
        self.s3_client = client
        self.bucket = bucket

    @classmethod
    def from_settings(cls, settings) -> "S3ObjectStoreGateway":
        client = boto3.client(
            "s3",
            endpoint_url=settings.resolved_endpoint_url,
            aws_access_key_id=settings.access_key_id,
            aws_secret_access_key=settings.secret_access_key,
            region_name=settings.region,
            config=BotoConfig(retries={"total_max_attempts": 1, "mode": "standard"}),
        )
        return cls(client, settings.bucket)

    def _list_once(self, prefix: Optional[str]) -> List[ObjectSummary]:
        kwargs: Dict[str, Any] = {"Bucket": self.bucket}
        if prefix:
            kwargs["Prefix"] = prefix

        summaries: List[ObjectSummary] = []
        paginator = self.s3_client.get_paginator("list_objects_v2")
        for page in paginator.paginate(**kwargs):
            for obj in page.get("Contents", []):
                summaries.append(
                    ObjectSummary(
                        key=obj["Key"],
                        size=obj.get("Size", 0),
                        last_modified=obj.get("LastModified"),
                    )
                )
        return summaries

    def list_objects(self, prefix: Optional[str] = None) -> List[ObjectSummary]:
        last_error: Optional[Exception] = None
        for attempt in range(1, self.LIST_ATTEMPTS + 1):
            try:
                return self._list_once(prefix)
            except (ClientError, BotoCoreError) as exc:
                last_error = exc
                logger.warning(
                    "Listing bucket %s (prefix=%r) failed on attempt %d/%d: %s",
                    self.bucket, prefix, attempt, self.LIST_ATTEMPTS, exc,
                    extra={"bucket": self.bucket},
                )
        record_upstream_error("list")
        raise UpstreamIOError("Object store listing failed") from last_error

    def put_object(self, key: str, data: Union[bytes, BinaryIO], content_type: str) -> None:
        try:
            self.s3_client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as exc:
            logger.error(
                "Upload of %r to bucket %s failed: %s", key, self.bucket, exc,
                extra={"bucket": self.bucket, "object_key": key},
            )
            record_upstream_error("put")
            raise UpstreamIOError(f"Upload of {key!r} failed") from exc
        logger.info(
            "Stored object %r in bucket %s", key, self.bucket,
            extra={"bucket": self.bucket, "object_key": key},
        )

    def get_object(self, key: str) -> BinaryIO:
        try:
            response = self.s3_client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code in _MISSING_KEY_CODES:
                raise NotFoundError(f"Object {key!r} not found") from exc
            logger.error("Fetching %r from bucket %s failed: %s", key, self.bucket, exc)
            record_upstream_error("get")
            raise UpstreamIOError(f"Fetching {key!r} failed") from exc
        except BotoCoreError as exc:
            logger.error("Fetching %r from bucket %s failed: %s", key, self.bucket, exc)
            record_upstream_error("get")
            raise UpstreamIOError(f"Fetching {key!r} failed") from exc
        return response["Body"]

    def close(self) -> None:
        close = getattr(self.s3_client, "close", None)
        if callable(close):
            close()


__all__ = ["ObjectStoreGateway", "S3ObjectStoreGateway"]
