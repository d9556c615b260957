"""
Blob stores that hold generated illustrations and hand out public URLs.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from tale_weaver.common import StorageError, TaleWeaverSettings


class BlobStore(Protocol):
    """Minimal storage contract used by the illustration generator."""

    def upload(self, key: str, data: bytes, content_type: str) -> None:
        ...

    def get_public_url(self, key: str) -> str:
        ...


class S3BlobStore:
    """
    Store illustrations in an S3-compatible bucket.

    Parameters
    ----------
    bucket:
        Already-provisioned bucket name.
    prefix:
        Optional key prefix (e.g. ``"stories/"``) prepended to every object key.
    public_base_url:
        Base URL the bucket is publicly served from. Needed for non-AWS providers
        such as Cloudflare R2 or Supabase Storage; AWS virtual-hosted URLs are used
        otherwise.
    region:
        Bucket region, used for the client and the default public URL.
    endpoint_url:
        Custom S3 endpoint for S3-compatible providers.
    client:
        Optional pre-configured boto3 S3 client. Mainly useful for testing.
    """

    def __init__(
        self,
        bucket: str,
        *,
        prefix: str = "",
        public_base_url: str | None = None,
        region: str | None = None,
        endpoint_url: str | None = None,
        client: Any | None = None,
    ) -> None:
        if not bucket or not bucket.strip():
            raise ValueError("bucket must be a non-empty string.")

        self._bucket = bucket.strip()
        self._prefix = prefix
        self._public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self._region = region or "us-east-1"
        self._client = client or boto3.client(
            "s3",
            region_name=self._region,
            endpoint_url=endpoint_url,
        )

    @property
    def bucket(self) -> str:
        return self._bucket

    def _object_key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def upload(self, key: str, data: bytes, content_type: str) -> None:
        try:
            self._client.put_object(
                Bucket=self._bucket,
                Key=self._object_key(key),
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError("Failed to upload image") from exc

    def get_public_url(self, key: str) -> str:
        object_key = self._object_key(key)
        if self._public_base_url:
            return f"{self._public_base_url}/{object_key}"
        return f"https://{self._bucket}.s3.{self._region}.amazonaws.com/{object_key}"


class LocalBlobStore:
    """
    Store illustrations in a local directory, for development and offline runs.
    """

    def __init__(self, root: str | Path, *, public_base_url: str | None = None) -> None:
        self._root = Path(root).expanduser()
        self._public_base_url = public_base_url.rstrip("/") if public_base_url else None

    @property
    def root(self) -> Path:
        return self._root

    def upload(self, key: str, data: bytes, content_type: str) -> None:
        target = self._root / key
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            raise StorageError("Failed to upload image") from exc

    def get_public_url(self, key: str) -> str:
        if self._public_base_url:
            return f"{self._public_base_url}/{key}"
        return (self._root / key).resolve().as_uri()


def build_blob_store(settings: TaleWeaverSettings) -> BlobStore:
    """
    Instantiate the blob store selected by ``settings.storage_backend``.
    """
    if settings.storage_backend == "s3":
        return S3BlobStore(
            settings.storage_bucket,
            prefix=settings.storage_prefix,
            public_base_url=settings.storage_public_base_url,
            region=settings.storage_region,
            endpoint_url=settings.storage_endpoint_url,
        )
    if settings.storage_backend == "local":
        return LocalBlobStore(
            settings.local_storage_dir,
            public_base_url=settings.storage_public_base_url,
        )
    raise ValueError(f"Unsupported storage backend '{settings.storage_backend}'.")
