# tests/unit/session/test_finalize.py - v1
"""Tests for session/finalize.py - edit-only manifest update."""

from __future__ import annotations

import json
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from robodoc.config.checklists import find_context
from robodoc.core.models import Photo
from robodoc.session import transitions as t
from robodoc.session.finalize import (
    ManifestMissingError,
    ManifestReadError,
    ManifestWriteError,
    build_session_manifest,
    finalize_manifest,
)
from robodoc.storage.errors import (
    BucketNotFoundError,
    StoragePermissionError,
    TransientStorageError,
)
from robodoc.storage.local_storage import LocalObjectStorage

MANIFEST = "SCARA/2525/Incoming/manifest.json"


@pytest.fixture
def session(fixed_now, sample_checklists):
    s = t.start(t.new_session(), "2525", "SCARA", fixed_now)
    s = t.select_context(s, find_context("Incoming"), sample_checklists)
    photo = Photo(
        name="2525_Incoming_Inspect_Arm_1_x.jpg",
        path="SCARA/2525/Incoming/2525_Incoming_Inspect_Arm_1_x.jpg",
        captured_at=fixed_now + timedelta(minutes=1),
        size_bytes=42,
    )
    return t.next_step(t.next_step(t.record_photo(s, "1", photo)))


class TestBuildSessionManifest:
    def test_from_session(self, session, fixed_now):
        m = build_session_manifest(
            session, "robodoc", fixed_now + timedelta(minutes=5), "robodoc-prototype"
        )
        assert m.storage.base_path == "SCARA/2525/Incoming"
        assert m.workflow.started_at == "2026-10-17T08:30:00.250Z"
        assert m.summary.all_required_steps_completed is True
        assert m.steps[0].photos[0].size_bytes == 42


class TestFinalizeManifest:
    @pytest.mark.asyncio
    async def test_missing_manifest_is_not_created(self, session, storage, fixed_now):
        with pytest.raises(ManifestMissingError) as exc_info:
            await finalize_manifest(session, storage, fixed_now, "robodoc-prototype")
        assert exc_info.value.message == (
            f"Manifest update skipped: {MANIFEST} does not exist yet. "
            "Create it once (with insert permission), then future runs can edit it."
        )
        assert exc_info.value.manifest_path == MANIFEST
        assert not (storage.bucket_dir / MANIFEST).exists()

    @pytest.mark.asyncio
    async def test_updates_existing(self, session, storage, seed, fixed_now):
        seed(storage, "SCARA/2525/Incoming")
        manifest = await finalize_manifest(session, storage, fixed_now, "robodoc-prototype")
        stored = json.loads(await storage.download(MANIFEST))
        assert stored["workflow"]["id"] == manifest.workflow.id
        assert stored["summary"]["total_photos"] == 1
        assert stored["storage"]["bucket"] == "robodoc"

    @pytest.mark.asyncio
    async def test_identity_is_stable(self, session, storage, seed, fixed_now):
        seed(storage, "SCARA/2525/Incoming")
        first = await finalize_manifest(session, storage, fixed_now, "robodoc-prototype")
        later = session.model_copy(update={"workflow_started_at": fixed_now + timedelta(days=1)})
        second = await finalize_manifest(
            later, storage, fixed_now + timedelta(days=1), "robodoc-prototype"
        )
        assert second.workflow.id == first.workflow.id
        assert second.workflow.started_at == first.workflow.started_at
        assert second.workflow.completed_at != first.workflow.completed_at

    @pytest.mark.asyncio
    async def test_malformed_existing_overwritten(self, session, storage, seed, fixed_now):
        seed(storage, "SCARA/2525/Incoming", b"<<garbage>>")
        manifest = await finalize_manifest(session, storage, fixed_now, "robodoc-prototype")
        stored = json.loads(await storage.download(MANIFEST))
        assert stored["workflow"]["id"] == manifest.workflow.id

    @pytest.mark.asyncio
    async def test_read_failure(self, session, fixed_now):
        storage = MagicMock(bucket="robodoc")
        storage.download = AsyncMock(side_effect=TransientStorageError("timeout"))
        storage.update = AsyncMock()
        with pytest.raises(ManifestReadError, match="Manifest read failed: timeout"):
            await finalize_manifest(session, storage, fixed_now, "robodoc-prototype")
        storage.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_bucket_is_read_failure(self, session, fixed_now):
        storage = MagicMock(bucket="robodoc")
        storage.download = AsyncMock(side_effect=BucketNotFoundError("robodoc"))
        storage.update = AsyncMock()
        with pytest.raises(ManifestReadError) as exc_info:
            await finalize_manifest(session, storage, fixed_now, "robodoc-prototype")
        assert not isinstance(exc_info.value, ManifestMissingError)
        assert 'bucket "robodoc" not found' in exc_info.value.message
        assert "STORAGE_BUCKET" in exc_info.value.message
        storage.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_local_bucket(self, session, tmp_path, fixed_now):
        storage = LocalObjectStorage(tmp_path / "nowhere", "robodoc")
        with pytest.raises(ManifestReadError, match='bucket "robodoc" not found'):
            await finalize_manifest(session, storage, fixed_now, "robodoc-prototype")

    @pytest.mark.asyncio
    async def test_write_failure(self, session, fixed_now):
        storage = MagicMock(bucket="robodoc")
        storage.download = AsyncMock(return_value=b"{}")
        storage.update = AsyncMock(side_effect=StoragePermissionError("denied"))
        with pytest.raises(ManifestWriteError, match="Manifest update failed: denied"):
            await finalize_manifest(session, storage, fixed_now, "robodoc-prototype")

    @pytest.mark.asyncio
    async def test_update_content_type(self, session, fixed_now):
        storage = MagicMock(bucket="robodoc")
        storage.download = AsyncMock(return_value=b"{}")
        storage.update = AsyncMock()
        await finalize_manifest(session, storage, fixed_now, "robodoc-prototype")
        path, data, content_type = storage.update.call_args.args
        assert path == MANIFEST
        assert content_type == "application/json"
        assert json.loads(data)["integrity"]["generated_by"] == "robodoc-prototype"
