# src/storage/base_storage.py - v1
"""Abstract object storage interface.

Paths are relative to the bucket. Implementations raise the kinds from
robodoc.storage.errors instead of their native exceptions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from robodoc.storage.models import StorageEntry


class BaseObjectStorage(ABC):
    """Unified interface for object storage backends."""

    def __init__(self, bucket: str) -> None:
        self.bucket = bucket

    @abstractmethod
    async def list(self, path: str, limit: int = 200) -> list[StorageEntry]:
        """List direct children of a folder, sorted by name."""

    @abstractmethod
    async def upload(
        self,
        path: str,
        data: bytes,
        content_type: str,
        overwrite: bool = False,
    ) -> None:
        """Create an object. Raises ObjectExistsError if overwrite is False and it exists."""

    @abstractmethod
    async def download(self, path: str) -> bytes:
        """Read an object. Raises ObjectNotFoundError if it does not exist."""

    @abstractmethod
    async def update(self, path: str, data: bytes, content_type: str) -> None:
        """Overwrite an existing object in place."""

    @abstractmethod
    def get_public_url(self, path: str) -> str:
        """Return the public URL of an object (no existence check)."""

    @abstractmethod
    async def create_signed_url(self, path: str, ttl_seconds: int) -> str | None:
        """Return a time-limited URL, or None when the backend cannot sign."""
