# src/storage/errors.py - v1
"""Structured storage errors.

Backends translate their native failures into these kinds so callers can
branch on the class instead of parsing status codes or message text.
"""

from __future__ import annotations

from typing import Literal

ErrorKind = Literal["not_found", "already_exists", "permission_denied", "transient"]


class StorageError(Exception):
    """Base class for all storage backend failures."""

    kind: ErrorKind = "transient"

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path


class ObjectNotFoundError(StorageError):
    """The object (or prefix) does not exist."""

    kind: ErrorKind = "not_found"


class BucketNotFoundError(ObjectNotFoundError):
    """The storage container itself does not exist."""

    def __init__(self, bucket: str, message: str | None = None) -> None:
        super().__init__(message or f"Bucket not found: {bucket}")
        self.bucket = bucket


class ObjectExistsError(StorageError):
    """A non-overwriting create hit an existing object."""

    kind: ErrorKind = "already_exists"


class StoragePermissionError(StorageError):
    """The backend refused the operation."""

    kind: ErrorKind = "permission_denied"


class TransientStorageError(StorageError):
    """Network or service failure; the operator may repeat the action."""

    kind: ErrorKind = "transient"
