"""R2 (S3-compatible) blob store adapter."""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from config import require_blob_store_settings, settings

logger = logging.getLogger(__name__)

MISSING_OBJECT_ERROR_CODES = {"NoSuchKey", "NotFound", "404"}


class BlobStoreConfigurationError(ValueError):
    """Raised when required R2 settings are absent."""


class BlobStore:
    """Signed read URLs and object deletion against one bucket."""

    def __init__(self, client: Any, bucket: str):
        self.client = client
        self.bucket = bucket

    def sign_read_url(self, key: str, ttl_seconds: Optional[int] = None) -> str:
        """Return a time-limited GET URL for ``key``. Never mutates the store."""
        expires_in = int(ttl_seconds or settings.BLOB_READ_URL_TTL_SECONDS or 90)
        return self.client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket, "Key": key},
            ExpiresIn=max(expires_in, 1),
        )

    def delete_object(self, key: str) -> None:
        """Delete ``key``; an already-absent object counts as deleted."""
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code in MISSING_OBJECT_ERROR_CODES:
                logger.info("Blob %s already absent from bucket %s", key, self.bucket)
                return
            raise
        logger.info("Deleted blob %s from bucket %s", key, self.bucket)


_blob_store: Optional[BlobStore] = None
_blob_store_lock = threading.Lock()


def _build_blob_store() -> BlobStore:
    try:
        values = require_blob_store_settings()
    except ValueError as exc:
        raise BlobStoreConfigurationError(str(exc)) from exc

    client = boto3.client(
        "s3",
        endpoint_url=values["R2_ENDPOINT"],
        aws_access_key_id=values["R2_ACCESS_KEY_ID"],
        aws_secret_access_key=values["R2_SECRET_ACCESS_KEY"],
        region_name=values["R2_REGION"],
        config=Config(signature_version="s3v4", s3={"addressing_style": "path"}),
    )
    return BlobStore(client=client, bucket=values["R2_BUCKET"])


def get_blob_store() -> BlobStore:
    """Return the process-wide blob store, building it on first use."""
    global _blob_store
    if _blob_store is not None:
        return _blob_store
    with _blob_store_lock:
        if _blob_store is None:
            _blob_store = _build_blob_store()
    return _blob_store


def reset_blob_store() -> None:
    """Drop the cached client (process shutdown and tests)."""
    global _blob_store
    with _blob_store_lock:
        _blob_store = None
