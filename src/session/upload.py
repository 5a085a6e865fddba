# src/session/upload.py - v1
"""Photo upload pipeline.

Name allocation happens before the upload is awaited, while the step is
marked as uploading, so index allocation for one step never races.
"""

from __future__ import annotations

import logging
from datetime import datetime

from pydantic import BaseModel

from robodoc.core.models import ChecklistStep, Photo, PhotoFile
from robodoc.core.naming import format_step_for_name, generate_file_name
from robodoc.session.previews import PreviewRegistry
from robodoc.session.state import Session
from robodoc.session.transitions import next_photo_index
from robodoc.storage import layout
from robodoc.storage.base_storage import BaseObjectStorage
from robodoc.storage.errors import BucketNotFoundError, StorageError

logger = logging.getLogger(__name__)


class UploadTarget(BaseModel):
    """Where one upload will be written."""

    step_id: str
    index: int
    file_name: str
    path: str


def prepare_upload(session: Session, step: ChecklistStep, now: datetime) -> UploadTarget:
    """Allocate the object name and path for the next photo of a step."""
    index = next_photo_index(session, step.id)
    file_name = generate_file_name(
        session.robot_serial,
        session.context_key,
        format_step_for_name(step.label),
        index,
        now,
    )
    return UploadTarget(
        step_id=step.id,
        index=index,
        file_name=file_name,
        path=layout.object_path(
            session.robot_type, session.robot_serial, session.context_key, file_name
        ),
    )


async def upload_photo(
    target: UploadTarget,
    file: PhotoFile,
    storage: BaseObjectStorage,
    previews: PreviewRegistry | None,
    now: datetime,
) -> Photo:
    """Create the object and describe it as a Photo.

    Raises:
        StorageError: If the create fails (including an existing object).
    """
    await storage.upload(target.path, file.content, file.mime_type, overwrite=False)
    url = storage.get_public_url(target.path)
    preview_url: str | None = None
    if previews is not None:
        try:
            preview_url = previews.create(file.content, file.mime_type)
        except OSError as e:
            # The object is stored; only the local preview is missing.
            logger.warning("Preview unavailable for %s: %s", target.path, e)
    logger.info("Uploaded %s (%d bytes)", target.path, file.size)
    return Photo(
        name=target.file_name,
        path=target.path,
        url=url,
        preview_url=preview_url,
        captured_at=now,
        size_bytes=file.size,
        mime_type=file.mime_type,
    )


def describe_upload_error(error: StorageError, bucket: str) -> str:
    """Operator-facing text; a missing bucket gets an actionable hint."""
    if isinstance(error, BucketNotFoundError):
        return (
            f'Bucket "{bucket}" not found. Create it in the storage backend '
            "or set STORAGE_BUCKET to an existing bucket."
        )
    return error.message
