# src/storage/local_storage.py - v1
"""Local filesystem object storage (default backend).

Objects live under {root}/{bucket}/{path}. Used for development, offline
demos and tests; it cannot sign URLs.
"""

from __future__ import annotations

import logging
import mimetypes
from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import quote

from robodoc.storage.base_storage import BaseObjectStorage
from robodoc.storage.errors import (
    BucketNotFoundError,
    ObjectExistsError,
    ObjectNotFoundError,
    StoragePermissionError,
    TransientStorageError,
)
from robodoc.storage.models import StorageEntry

logger = logging.getLogger(__name__)


class LocalObjectStorage(BaseObjectStorage):
    """Store objects on the local filesystem."""

    def __init__(
        self,
        root: str | Path,
        bucket: str,
        public_base_url: str = "",
        create_bucket: bool = False,
    ) -> None:
        """Initialize with a root directory and bucket name.

        Args:
            root: Directory holding one sub-directory per bucket.
            bucket: Bucket (sub-directory) name.
            public_base_url: Prefix for public URLs. Empty = file:// URIs.
            create_bucket: Create the bucket directory if missing.
        """
        super().__init__(bucket)
        self._root = Path(root).expanduser()
        self._public_base_url = public_base_url.rstrip("/")
        if create_bucket:
            self.bucket_dir.mkdir(parents=True, exist_ok=True)

    @property
    def bucket_dir(self) -> Path:
        return self._root / self.bucket

    def _resolve(self, path: str) -> Path:
        """Resolve a bucket-relative path, refusing escapes from the bucket."""
        if not self.bucket_dir.is_dir():
            raise BucketNotFoundError(self.bucket)
        base = self.bucket_dir.resolve()
        target = (base / path.strip("/")).resolve()
        if target != base and base not in target.parents:
            raise StoragePermissionError(f"Path escapes bucket: {path}", path=path)
        return target

    async def list(self, path: str, limit: int = 200) -> list[StorageEntry]:
        """List direct children; a missing folder lists as empty."""
        folder = self._resolve(path)
        if not folder.is_dir():
            return []
        entries: list[StorageEntry] = []
        for child in sorted(folder.iterdir(), key=lambda p: p.name):
            if child.name.startswith("."):
                continue
            if child.is_dir():
                entries.append(StorageEntry(name=child.name))
            else:
                stat = child.stat()
                entries.append(
                    StorageEntry(
                        name=child.name,
                        metadata={
                            "size": stat.st_size,
                            "mimetype": mimetypes.guess_type(child.name)[0]
                            or "application/octet-stream",
                            "last_modified": datetime.fromtimestamp(
                                stat.st_mtime, tz=timezone.utc
                            ).isoformat(),
                        },
                    )
                )
            if len(entries) >= limit:
                break
        return entries

    async def upload(
        self,
        path: str,
        data: bytes,
        content_type: str,
        overwrite: bool = False,
    ) -> None:
        """Write an object; exclusive create unless overwrite is set."""
        target = self._resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise TransientStorageError(f"Cannot create folder for {path}: {e}", path=path) from e
        mode = "wb" if overwrite else "xb"
        try:
            with open(target, mode) as fh:
                fh.write(data)
        except FileExistsError as e:
            raise ObjectExistsError(f"The resource already exists: {path}", path=path) from e
        except OSError as e:
            raise TransientStorageError(str(e), path=path) from e
        logger.debug("Local upload: %s (%d bytes, %s)", target, len(data), content_type)

    async def download(self, path: str) -> bytes:
        target = self._resolve(path)
        if not target.is_file():
            raise ObjectNotFoundError(f"Object not found: {path}", path=path)
        return target.read_bytes()

    async def update(self, path: str, data: bytes, content_type: str) -> None:
        """Overwrite an existing object; missing objects are not created."""
        target = self._resolve(path)
        if not target.is_file():
            raise ObjectNotFoundError(f"Object not found: {path}", path=path)
        try:
            target.write_bytes(data)
        except OSError as e:
            raise TransientStorageError(str(e), path=path) from e
        logger.debug("Local update: %s (%d bytes, %s)", target, len(data), content_type)

    def get_public_url(self, path: str) -> str:
        key = path.strip("/")
        if self._public_base_url:
            return f"{self._public_base_url}/{quote(key, safe='/')}"
        return (self.bucket_dir / key).absolute().as_uri()

    async def create_signed_url(self, path: str, ttl_seconds: int) -> str | None:
        """The filesystem has no signing; callers fall back to public URLs."""
        return None
