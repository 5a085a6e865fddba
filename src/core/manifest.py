# src/core/manifest.py - v1
"""Manifest construction and merge with a previously stored manifest.

A manifest is built fresh from the session at finish time. When a manifest
already exists at the target path, its workflow id and start time win over
the fresh values (first finalize establishes identity); every other field
is replaced.
"""

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Mapping, Sequence
from datetime import datetime

from pydantic import ValidationError

from robodoc.core.completeness import compute_completeness, has_photo
from robodoc.core.models import ChecklistStep, Photo
from robodoc.core.naming import isoformat_z, to_workflow_type
from robodoc.storage import layout
from robodoc.storage.models import (
    ExistingManifest,
    Manifest,
    ManifestChecklist,
    ManifestIntegrity,
    ManifestPhoto,
    ManifestRobot,
    ManifestStep,
    ManifestStorage,
    ManifestSummary,
    ManifestWorkflow,
)

logger = logging.getLogger(__name__)


def create_workflow_id() -> str:
    return str(uuid.uuid4())


def build_manifest(
    *,
    robot_serial: str,
    robot_type: str,
    context_key: str,
    checklist: Sequence[ChecklistStep],
    photos_by_step: Mapping[str, Sequence[Photo]],
    workflow_started_at: datetime | None,
    bucket: str,
    completed_at: datetime,
    generated_by: str,
    generated_at: datetime | None = None,
) -> Manifest:
    """Build a Manifest snapshot from session state.

    Args:
        robot_serial: Robot serial number.
        robot_type: Robot type (SCARA, IVR).
        context_key: Workflow context key.
        checklist: Ordered checklist steps.
        photos_by_step: Uploaded photos per step id, in capture order.
        workflow_started_at: Identification time; completed_at if unknown.
        bucket: Storage bucket name.
        completed_at: Finish time.
        generated_by: Producer tag written to integrity.generated_by.
        generated_at: Generation time (defaults to completed_at).

    Returns:
        Manifest with a fresh workflow id.
    """
    completeness = compute_completeness(checklist, photos_by_step)
    completed_required = sum(
        1 for step in checklist if step.required and has_photo(photos_by_step, step.id)
    )

    steps = [
        ManifestStep(
            step_id=str(step.id),
            label=step.label,
            required=step.required,
            photos=[
                ManifestPhoto(
                    file_name=photo.name,
                    path=photo.path,
                    captured_at=isoformat_z(photo.captured_at),
                    size_bytes=photo.size_bytes,
                    mime_type=photo.mime_type,
                )
                for photo in photos_by_step.get(step.id, ())
            ],
        )
        for step in checklist
    ]

    return Manifest(
        workflow=ManifestWorkflow(
            id=create_workflow_id(),
            type=to_workflow_type(context_key),
            status="completed",
            started_at=isoformat_z(workflow_started_at or completed_at),
            completed_at=isoformat_z(completed_at),
        ),
        robot=ManifestRobot(serial=robot_serial, type=robot_type),
        storage=ManifestStorage(
            bucket=bucket,
            base_path=layout.base_path(robot_type, robot_serial, context_key),
        ),
        checklist=ManifestChecklist(
            total_steps=len(checklist),
            required_steps=completeness.required_count,
            completed_required_steps=completed_required,
        ),
        steps=steps,
        summary=ManifestSummary(
            total_photos=completeness.total_photos,
            all_required_steps_completed=completeness.complete,
            notes=None,
        ),
        integrity=ManifestIntegrity(
            generated_by=generated_by,
            generated_at=isoformat_z(generated_at or completed_at),
        ),
    )


def merge_existing_manifest(manifest: Manifest, existing: bytes | str | None) -> Manifest:
    """Carry workflow id and start time over from an existing manifest.

    Content that is not a JSON object is discarded and the fresh manifest
    is returned unchanged; it never raises for malformed input.
    """
    if not existing:
        return manifest
    try:
        data = json.loads(existing)
        parsed = ExistingManifest.model_validate(data)
    except (ValueError, ValidationError) as e:
        logger.warning("Existing manifest is malformed, overwriting it: %s", e)
        return manifest

    if parsed.workflow is None:
        return manifest

    workflow = manifest.workflow.model_copy(
        update={
            "id": parsed.workflow.id or manifest.workflow.id,
            "started_at": parsed.workflow.started_at or manifest.workflow.started_at,
        }
    )
    return manifest.model_copy(update={"workflow": workflow})


def serialize_manifest(manifest: Manifest) -> bytes:
    """Pretty-printed UTF-8 JSON."""
    return manifest.model_dump_json(indent=2).encode("utf-8")


def parse_manifest(raw: bytes | str) -> Manifest:
    """Strictly parse a stored manifest."""
    return Manifest.model_validate_json(raw)
