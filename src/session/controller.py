# src/session/controller.py - v1
"""Guided capture controller.

Owns the current Session together with the storage client, the preview
registry and a clock. Its methods are the operator actions of the capture
screens; the can_* properties tell a front-end which controls to disable.
Failures never raise out of an action: they land in upload_error or
manifest_error for display.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from robodoc.config.checklists import Checklists, find_context, load_checklists
from robodoc.config.settings import MISSING_STORAGE_MESSAGE, Settings
from robodoc.core.models import ChecklistStep, Completeness, Photo, PhotoFile, Screen
from robodoc.logging.context import clear_context, set_session_context, set_step_context
from robodoc.session import transitions
from robodoc.session.finalize import ManifestFinalizeError, finalize_manifest
from robodoc.session.previews import PreviewRegistry
from robodoc.session.state import Session
from robodoc.session.upload import describe_upload_error, prepare_upload, upload_photo
from robodoc.storage import layout
from robodoc.storage.base_storage import BaseObjectStorage
from robodoc.storage.errors import StorageError
from robodoc.storage.models import Manifest

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionController:
    """Drive one operator through Identify, Context, Checklist and Summary."""

    def __init__(
        self,
        storage: BaseObjectStorage | None,
        settings: Settings | None = None,
        checklists: Checklists | None = None,
        previews: PreviewRegistry | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize the controller.

        Args:
            storage: Storage backend. None disables uploads and finish.
            settings: Application settings (bucket name, notice duration).
            checklists: Checklist configuration. Loaded from
                settings.checklists_file (or built-ins) if None.
            previews: Preview handle registry. A private one if None.
            clock: Source of "now"; injectable for tests.
        """
        self.settings = settings or Settings()
        self._storage = storage
        self._checklists = (
            checklists if checklists is not None else load_checklists(self.settings.checklists_file)
        )
        self._previews = previews if previews is not None else PreviewRegistry()
        self._clock = clock
        # Bumped whenever photos are discarded; late upload results are dropped.
        self._generation = 0
        self._saved_at: datetime | None = None

        self.session: Session = transitions.new_session()
        self.upload_error = ""
        self.manifest_error = ""

    # --- Derived state ---

    @property
    def bucket(self) -> str:
        return self._storage.bucket if self._storage else self.settings.storage_bucket

    @property
    def screen(self) -> Screen:
        return self.session.screen

    @property
    def completeness(self) -> Completeness:
        return self.session.completeness

    @property
    def active_step(self) -> ChecklistStep | None:
        return transitions.active_step(self.session)

    @property
    def upload_target(self) -> str:
        """Folder the current run uploads into, for display."""
        s = self.session
        return layout.display_path(self.bucket, s.robot_type, s.robot_serial, s.context_key)

    @property
    def save_success(self) -> bool:
        """True for a short while after a successful finish."""
        if self._saved_at is None:
            return False
        notice = timedelta(seconds=self.settings.success_notice_seconds)
        return self._clock() - self._saved_at < notice

    def can_start(self, robot_serial: str, robot_type: str) -> bool:
        return transitions.can_start(robot_serial, robot_type)

    @property
    def can_go_next(self) -> bool:
        return transitions.can_go_next(self.session)

    @property
    def can_upload(self) -> bool:
        step = self.active_step
        return (
            self.session.screen == Screen.CHECKLIST
            and step is not None
            and not transitions.is_uploading(self.session, step.id)
        )

    @property
    def can_finish(self) -> bool:
        return self.session.screen == Screen.SUMMARY and not self.session.uploading_step_ids

    def is_uploading(self, step_id: str) -> bool:
        return transitions.is_uploading(self.session, step_id)

    # --- Navigation ---

    def start(self, robot_serial: str, robot_type: str) -> bool:
        before = self.session
        self.session = transitions.start(self.session, robot_serial, robot_type, self._clock())
        if self.session is before:
            return False
        set_session_context(self.session.robot_serial, self.session.robot_type)
        logger.info("Started documentation for %s %s", robot_type, self.session.robot_serial)
        return True

    def back_to_identify(self) -> None:
        self.session = transitions.back_to_identify(self.session)

    def select_context(self, context_key: str) -> bool:
        """Load the checklist of an enabled context; discards any photos."""
        context = find_context(context_key)
        if context is None:
            logger.warning("Unknown context: %s", context_key)
            return False
        before = self.session
        self.session = transitions.select_context(self.session, context, self._checklists)
        if self.session is before:
            return False
        self._discard_photos(before)
        set_session_context(
            self.session.robot_serial, self.session.robot_type, self.session.context_key
        )
        logger.info(
            "Context %s selected: %d steps", context.key, len(self.session.checklist)
        )
        return True

    def next(self) -> None:
        self.session = transitions.next_step(self.session)

    def previous(self) -> None:
        self.session = transitions.previous_step(self.session)

    def back_to_checklist(self) -> None:
        self.session = transitions.back_to_checklist(self.session)

    def cancel(self) -> None:
        """Abandon the run and return to identification."""
        self._reset()
        self.manifest_error = ""
        logger.info("Session cancelled")

    # --- Upload ---

    async def upload(self, file: PhotoFile | None) -> Photo | None:
        """Upload a photo for the active step.

        Returns:
            The recorded Photo, or None if nothing was recorded (no file,
            no active step, upload already in flight for the step, or a
            failure reported in upload_error).
        """
        step = self.active_step
        if file is None or step is None or self.session.screen != Screen.CHECKLIST:
            return None
        if transitions.is_uploading(self.session, step.id):
            logger.warning("Upload already in flight for step %s; ignored", step.id)
            return None

        self.upload_error = ""
        if self._storage is None:
            self.upload_error = MISSING_STORAGE_MESSAGE
            return None

        now = self._clock()
        target = prepare_upload(self.session, step, now)
        generation = self._generation
        self.session = transitions.mark_uploading(self.session, step.id)

        set_step_context(step.id)
        try:
            photo = await upload_photo(target, file, self._storage, self._previews, now)
        except StorageError as e:
            self.upload_error = describe_upload_error(e, self.bucket)
            logger.error("Upload failed for %s: %s", target.path, e)
            return None
        finally:
            set_step_context(None)
            # A reset session carries no marker from this upload.
            if generation == self._generation:
                self.session = transitions.clear_uploading(self.session, step.id)

        if generation != self._generation:
            # The run was reset or re-scoped while the upload was in flight.
            self._previews.revoke(photo.preview_url)
            logger.info("Discarding late upload result %s", target.path)
            return None

        self.session = transitions.record_photo(self.session, step.id, photo)
        return photo

    # --- Finish ---

    async def finish(self) -> Manifest | None:
        """Finalize the manifest and reset the session on success."""
        self.manifest_error = ""
        if not self.can_finish:
            return None
        if self._storage is None:
            self.manifest_error = MISSING_STORAGE_MESSAGE
            return None

        try:
            manifest = await finalize_manifest(
                self.session,
                self._storage,
                completed_at=self._clock(),
                generated_by=self.settings.manifest_generated_by,
            )
        except ManifestFinalizeError as e:
            self.manifest_error = e.message
            return None

        self._saved_at = self._clock()
        self._reset()
        return manifest

    # --- Resources ---

    def close(self) -> None:
        """Release all preview handles."""
        self._previews.close()

    def _discard_photos(self, session: Session) -> None:
        self._generation += 1
        for photo in session.all_photos():
            self._previews.revoke(photo.preview_url)

    def _reset(self) -> None:
        self._discard_photos(self.session)
        self.session = transitions.reset(self.session)
        self.upload_error = ""
        clear_context()
