# src/storage/models.py - v1
"""Storage domain models: listing entries and the workflow Manifest.

The Manifest is written as manifest.json next to the photos of a
(robot type, serial, context) folder. schema_version is "1.0".
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

SCHEMA_VERSION = "1.0"


class StorageEntry(BaseModel):
    """One entry of a folder listing.

    Folders carry no metadata; files carry backend metadata (size,
    mimetype, last_modified, ...).
    """

    name: str
    metadata: dict[str, Any] | None = None

    @property
    def is_folder(self) -> bool:
        return self.metadata is None

    @property
    def is_file(self) -> bool:
        return self.metadata is not None

    @property
    def size(self) -> int:
        if not self.metadata:
            return 0
        return int(self.metadata.get("size") or 0)

    @property
    def mime_type(self) -> str:
        if not self.metadata:
            return ""
        return str(self.metadata.get("mimetype") or "")


def folder_names(entries: list[StorageEntry] | None) -> list[str]:
    return [entry.name for entry in entries or [] if entry.is_folder]


def file_entries(entries: list[StorageEntry] | None) -> list[StorageEntry]:
    return [entry for entry in entries or [] if entry.is_file]


# --- Manifest ---


class ManifestWorkflow(BaseModel):
    id: str
    type: str
    status: Literal["completed"] = "completed"
    started_at: str
    completed_at: str


class ManifestRobot(BaseModel):
    serial: str
    type: str


class ManifestStorage(BaseModel):
    bucket: str
    base_path: str


class ManifestChecklist(BaseModel):
    total_steps: int
    required_steps: int
    completed_required_steps: int


class ManifestPhoto(BaseModel):
    file_name: str
    path: str
    captured_at: str
    size_bytes: int
    mime_type: str


class ManifestStep(BaseModel):
    step_id: str
    label: str
    required: bool
    photos: list[ManifestPhoto] = Field(default_factory=list)


class ManifestSummary(BaseModel):
    total_photos: int
    all_required_steps_completed: bool
    notes: str | None = None


class ManifestIntegrity(BaseModel):
    generated_by: str
    generated_at: str


class Manifest(BaseModel):
    """Full manifest of a finished guided run, written to manifest.json."""

    schema_version: str = SCHEMA_VERSION
    workflow: ManifestWorkflow
    robot: ManifestRobot
    storage: ManifestStorage
    checklist: ManifestChecklist
    steps: list[ManifestStep]
    summary: ManifestSummary
    integrity: ManifestIntegrity


class ExistingWorkflowIdentity(BaseModel):
    """Identity fields read back from a previously written manifest."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    started_at: str | None = None

    @field_validator("id", "started_at", mode="before")
    @classmethod
    def coerce_scalar(cls, v: object) -> str | None:
        """Each field stands alone: numbers become strings, anything else is dropped."""
        if isinstance(v, bool) or not isinstance(v, (str, int, float)):
            return None
        return str(v)


class ExistingManifest(BaseModel):
    """Lenient view of a stored manifest; only identity fields matter."""

    model_config = ConfigDict(extra="ignore")

    workflow: ExistingWorkflowIdentity | None = None
