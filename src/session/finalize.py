# src/session/finalize.py - v1
"""Edit-only manifest finalize.

The manifest object must already exist: creating it needs a broader write
permission than updating it, so this flow only ever reads and updates.

  1. build a fresh manifest from the session
  2. read {base_path}/manifest.json (missing -> ManifestMissingError)
  3. keep workflow id and started_at of the stored manifest, if readable
  4. update the object in place (failure -> ManifestWriteError)
"""

from __future__ import annotations

import logging
from datetime import datetime

from robodoc.core.manifest import build_manifest, merge_existing_manifest, serialize_manifest
from robodoc.session.state import Session
from robodoc.storage import layout
from robodoc.storage.base_storage import BaseObjectStorage
from robodoc.storage.errors import BucketNotFoundError, ObjectNotFoundError, StorageError
from robodoc.storage.models import Manifest

logger = logging.getLogger(__name__)


class ManifestFinalizeError(Exception):
    """Finalize did not happen; session state is left as it was."""

    def __init__(self, message: str, manifest_path: str) -> None:
        super().__init__(message)
        self.message = message
        self.manifest_path = manifest_path


class ManifestMissingError(ManifestFinalizeError):
    """No manifest exists yet at the target path."""


class ManifestReadError(ManifestFinalizeError):
    """The existing manifest could not be read."""


class ManifestWriteError(ManifestFinalizeError):
    """The in-place update failed."""


def build_session_manifest(
    session: Session,
    bucket: str,
    completed_at: datetime,
    generated_by: str,
) -> Manifest:
    return build_manifest(
        robot_serial=session.robot_serial,
        robot_type=session.robot_type,
        context_key=session.context_key,
        checklist=session.checklist,
        photos_by_step=session.photos_by_step,
        workflow_started_at=session.workflow_started_at,
        bucket=bucket,
        completed_at=completed_at,
        generated_by=generated_by,
    )


async def finalize_manifest(
    session: Session,
    storage: BaseObjectStorage,
    completed_at: datetime,
    generated_by: str,
) -> Manifest:
    """Update the manifest of the session's folder.

    Args:
        session: Session to describe.
        storage: Storage backend (bucket taken from it).
        completed_at: Finish time.
        generated_by: Producer tag for integrity.generated_by.

    Returns:
        The manifest as written.

    Raises:
        ManifestMissingError: No manifest exists yet; nothing is written.
        ManifestReadError: Reading the existing manifest failed.
        ManifestWriteError: The update failed.
    """
    manifest = build_session_manifest(session, storage.bucket, completed_at, generated_by)
    manifest_path = layout.manifest_path(session.base_path)

    try:
        existing = await storage.download(manifest_path)
    except BucketNotFoundError as e:
        logger.error("Bucket %s not found reading %s", e.bucket, manifest_path)
        raise ManifestReadError(
            f'Manifest read failed: bucket "{e.bucket}" not found. Create it in the '
            "storage backend or set STORAGE_BUCKET to an existing bucket.",
            manifest_path,
        ) from e
    except ObjectNotFoundError as e:
        logger.warning("Manifest missing at %s: %s", manifest_path, e)
        raise ManifestMissingError(
            f"Manifest update skipped: {manifest_path} does not exist yet. "
            "Create it once (with insert permission), then future runs can edit it.",
            manifest_path,
        ) from e
    except StorageError as e:
        logger.error("Manifest read failed at %s: %s", manifest_path, e)
        raise ManifestReadError(f"Manifest read failed: {e.message}", manifest_path) from e

    manifest = merge_existing_manifest(manifest, existing)

    try:
        await storage.update(
            manifest_path, serialize_manifest(manifest), layout.MANIFEST_CONTENT_TYPE
        )
    except StorageError as e:
        logger.error("Manifest update failed at %s: %s", manifest_path, e)
        raise ManifestWriteError(f"Manifest update failed: {e.message}", manifest_path) from e

    logger.info(
        "Manifest updated: %s (workflow_id=%s, photos=%d)",
        manifest_path, manifest.workflow.id, manifest.summary.total_photos,
    )
    return manifest
