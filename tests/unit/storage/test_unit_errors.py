# tests/unit/storage/test_unit_errors.py - v1
"""Tests for storage/errors.py - structured error kinds."""

from __future__ import annotations

from robodoc.storage.errors import (
    BucketNotFoundError,
    ObjectExistsError,
    ObjectNotFoundError,
    StorageError,
    StoragePermissionError,
    TransientStorageError,
)


class TestErrorKinds:
    def test_kinds(self):
        assert ObjectNotFoundError("x").kind == "not_found"
        assert ObjectExistsError("x").kind == "already_exists"
        assert StoragePermissionError("x").kind == "permission_denied"
        assert TransientStorageError("x").kind == "transient"

    def test_all_are_storage_errors(self):
        for cls in (ObjectNotFoundError, ObjectExistsError, StoragePermissionError,
                    TransientStorageError):
            assert issubclass(cls, StorageError)

    def test_message_and_path(self):
        e = ObjectExistsError("The resource already exists", path="SCARA/1/a.jpg")
        assert e.message == "The resource already exists"
        assert e.path == "SCARA/1/a.jpg"
        assert str(e) == "The resource already exists"


class TestBucketNotFound:
    def test_is_not_found(self):
        e = BucketNotFoundError("robodoc")
        assert isinstance(e, ObjectNotFoundError)
        assert e.kind == "not_found"
        assert e.bucket == "robodoc"
        assert "robodoc" in e.message

    def test_custom_message(self):
        e = BucketNotFoundError("robodoc", "The specified bucket does not exist")
        assert e.message == "The specified bucket does not exist"
