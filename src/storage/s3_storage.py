# src/storage/s3_storage.py - v1
"""S3-compatible object storage (STORAGE_BACKEND=s3).

Supports AWS S3, MinIO and other S3-compatible services such as the S3
endpoint of Supabase Storage. Requires 'boto3' package: pip install boto3.
"""

from __future__ import annotations

import logging
import mimetypes
from collections.abc import Callable
from typing import Any, TypeVar
from urllib.parse import quote

from robodoc.storage.base_storage import BaseObjectStorage
from robodoc.storage.errors import (
    BucketNotFoundError,
    ObjectExistsError,
    ObjectNotFoundError,
    StorageError,
    StoragePermissionError,
    TransientStorageError,
)
from robodoc.storage.models import StorageEntry

logger = logging.getLogger(__name__)

T = TypeVar("T")

_NOT_FOUND_CODES = {"NoSuchKey", "NotFound", "404"}
_EXISTS_CODES = {"PreconditionFailed", "412", "ConditionalRequestConflict"}
_DENIED_CODES = {"AccessDenied", "Forbidden", "403", "InvalidAccessKeyId", "SignatureDoesNotMatch"}


class S3ObjectStorage(BaseObjectStorage):
    """Store objects in an S3-compatible bucket."""

    def __init__(
        self,
        bucket: str,
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        region: str | None = None,
        public_base_url: str = "",
    ) -> None:
        """Initialize S3 storage.

        Args:
            bucket: S3 bucket name.
            endpoint_url: Custom endpoint for MinIO/compatible storage.
            access_key: Access key id (boto3 default chain if not set).
            secret_key: Secret access key.
            region: Region (optional, uses boto3 default if not set).
            public_base_url: Prefix for public URLs. Derived from the
                endpoint (path style) or AWS virtual-host style if empty.
        """
        try:
            import boto3
        except ImportError as e:
            raise ImportError(
                "boto3 package required for S3 storage: pip install boto3"
            ) from e

        kwargs: dict = {}
        if region:
            kwargs["region_name"] = region
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        if access_key:
            kwargs["aws_access_key_id"] = access_key
        if secret_key:
            kwargs["aws_secret_access_key"] = secret_key

        super().__init__(bucket)
        self._s3 = boto3.client("s3", **kwargs)
        self._endpoint_url = (endpoint_url or "").rstrip("/")
        self._region = region or ""
        self._public_base_url = public_base_url.rstrip("/")

    @staticmethod
    def _key(path: str) -> str:
        return path.strip("/")

    def _call(self, operation: Callable[..., T], path: str, **kwargs: Any) -> T:
        """Run a boto3 call, translating botocore failures into StorageError kinds."""
        from botocore.exceptions import BotoCoreError, ClientError

        try:
            return operation(**kwargs)
        except ClientError as e:
            raise self._translate(e, path) from e
        except BotoCoreError as e:
            raise TransientStorageError(str(e), path=path) from e

    def _translate(self, error: Any, path: str) -> StorageError:
        response = getattr(error, "response", None) or {}
        code = str(response.get("Error", {}).get("Code", ""))
        status = str(response.get("ResponseMetadata", {}).get("HTTPStatusCode", ""))
        message = response.get("Error", {}).get("Message") or str(error)

        if code == "NoSuchBucket":
            return BucketNotFoundError(self.bucket, message)
        if code in _NOT_FOUND_CODES or status == "404":
            return ObjectNotFoundError(message, path=path)
        if code in _EXISTS_CODES or status == "412":
            return ObjectExistsError(message, path=path)
        if code in _DENIED_CODES or status == "403":
            return StoragePermissionError(message, path=path)
        return TransientStorageError(message, path=path)

    async def list(self, path: str, limit: int = 200) -> list[StorageEntry]:
        """List direct children of a prefix (simulates directory listing)."""
        prefix = self._key(path)
        if prefix:
            prefix += "/"

        response = self._call(
            self._s3.list_objects_v2,
            path,
            Bucket=self.bucket,
            Prefix=prefix,
            Delimiter="/",
            MaxKeys=limit,
        )

        entries: list[StorageEntry] = []
        for cp in response.get("CommonPrefixes", []):
            name = cp["Prefix"][len(prefix):].rstrip("/")
            if name:
                entries.append(StorageEntry(name=name))

        for obj in response.get("Contents", []):
            name = obj["Key"][len(prefix):]
            if not name or name.startswith("."):
                continue
            last_modified = obj.get("LastModified")
            entries.append(
                StorageEntry(
                    name=name,
                    metadata={
                        "size": obj.get("Size", 0),
                        "mimetype": _guess_mime(name),
                        "last_modified": last_modified.isoformat()
                        if hasattr(last_modified, "isoformat")
                        else last_modified,
                        "etag": obj.get("ETag"),
                    },
                )
            )

        entries.sort(key=lambda entry: entry.name)
        return entries[:limit]

    async def upload(
        self,
        path: str,
        data: bytes,
        content_type: str,
        overwrite: bool = False,
    ) -> None:
        """Put an object; IfNoneMatch='*' makes the create non-overwriting."""
        kwargs: dict[str, Any] = {
            "Bucket": self.bucket,
            "Key": self._key(path),
            "Body": data,
            "ContentType": content_type,
        }
        if not overwrite:
            kwargs["IfNoneMatch"] = "*"
        self._call(self._s3.put_object, path, **kwargs)
        logger.debug("S3 upload: s3://%s/%s (%d bytes)", self.bucket, self._key(path), len(data))

    async def download(self, path: str) -> bytes:
        response = self._call(
            self._s3.get_object, path, Bucket=self.bucket, Key=self._key(path)
        )
        return response["Body"].read()

    async def update(self, path: str, data: bytes, content_type: str) -> None:
        """Overwrite an existing object; a missing object is a not-found error."""
        self._call(self._s3.head_object, path, Bucket=self.bucket, Key=self._key(path))
        self._call(
            self._s3.put_object,
            path,
            Bucket=self.bucket,
            Key=self._key(path),
            Body=data,
            ContentType=content_type,
        )
        logger.debug("S3 update: s3://%s/%s (%d bytes)", self.bucket, self._key(path), len(data))

    def get_public_url(self, path: str) -> str:
        key = quote(self._key(path), safe="/")
        if self._public_base_url:
            return f"{self._public_base_url}/{key}"
        if self._endpoint_url:
            return f"{self._endpoint_url}/{self.bucket}/{key}"
        region = self._region or "us-east-1"
        return f"https://{self.bucket}.s3.{region}.amazonaws.com/{key}"

    async def create_signed_url(self, path: str, ttl_seconds: int) -> str | None:
        return self._call(
            self._s3.generate_presigned_url,
            path,
            ClientMethod="get_object",
            Params={"Bucket": self.bucket, "Key": self._key(path)},
            ExpiresIn=ttl_seconds,
        )


def _guess_mime(name: str) -> str:
    return mimetypes.guess_type(name)[0] or "application/octet-stream"
