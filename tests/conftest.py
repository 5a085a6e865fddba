# tests/conftest.py - v1
"""Shared test fixtures for all unit and integration tests.

Provides a controllable clock, a small checklist, local filesystem storage
under tmp_path and a ready-made SessionController. No network access.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from robodoc.config.settings import Settings
from robodoc.core.models import ChecklistStep, PhotoFile
from robodoc.session.controller import SessionController
from robodoc.session.previews import PreviewRegistry
from robodoc.storage.local_storage import LocalObjectStorage


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


# === FIXTURES: Time ===


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 10, 17, 8, 30, 0, 250000, tzinfo=timezone.utc)


@pytest.fixture
def clock(fixed_now: datetime) -> FakeClock:
    return FakeClock(fixed_now)


# === FIXTURES: Checklists ===


@pytest.fixture
def sample_checklist() -> list[ChecklistStep]:
    """One required and one optional step."""
    return [
        ChecklistStep(id=1, label="Inspect Arm", required=True),
        ChecklistStep(id=2, label="Check Cables", required=False),
    ]


@pytest.fixture
def sample_checklists(sample_checklist: list[ChecklistStep]) -> dict:
    return {"Incoming": {"SCARA": sample_checklist}}


@pytest.fixture
def photo_file() -> PhotoFile:
    return PhotoFile(filename="IMG_0001.jpg", content=b"\xff\xd8\xff\xe0fake-jpeg", content_type="image/jpeg")


# === FIXTURES: Storage ===


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        storage_backend="local",
        storage_bucket="robodoc",
        local_storage_root=tmp_path / "storage",
    )


@pytest.fixture
def storage(tmp_path: Path) -> LocalObjectStorage:
    return LocalObjectStorage(root=tmp_path / "storage", bucket="robodoc", create_bucket=True)


@pytest.fixture
def previews(tmp_path: Path) -> PreviewRegistry:
    registry = PreviewRegistry(tmp_path / "previews")
    yield registry
    registry.close()


@pytest.fixture
def controller(
    storage: LocalObjectStorage,
    settings: Settings,
    sample_checklists: dict,
    previews: PreviewRegistry,
    clock: FakeClock,
) -> SessionController:
    return SessionController(
        storage,
        settings,
        checklists=sample_checklists,
        previews=previews,
        clock=clock,
    )


def seed_manifest(storage: LocalObjectStorage, base: str, content: bytes = b"{}") -> Path:
    """Create the manifest object out of band, as an administrator would."""
    path = storage.bucket_dir / base / "manifest.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


@pytest.fixture
def seed():
    return seed_manifest
