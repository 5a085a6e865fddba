# src/dashboard/browser.py - v1
"""Read-only browser over the upload hierarchy.

Four cascading levels: robot type -> serial -> context -> files. A level is
listed only once its parent is selected; selecting a value clears every
level below it. Image files get preview URLs resolved in a background
task, which is invalidated whenever the folder selection changes.
"""

from __future__ import annotations

import asyncio
import logging
import mimetypes

from robodoc.config.settings import MISSING_STORAGE_MESSAGE, Settings
from robodoc.storage import layout
from robodoc.storage.base_storage import BaseObjectStorage
from robodoc.storage.errors import StorageError
from robodoc.storage.models import StorageEntry, file_entries, folder_names

logger = logging.getLogger(__name__)


def is_image(entry: StorageEntry) -> bool:
    mime = entry.mime_type or mimetypes.guess_type(entry.name)[0] or ""
    return mime.startswith("image/")


class DashboardBrowser:
    """Cascading folder/file selection with lazy listing."""

    def __init__(self, storage: BaseObjectStorage | None, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        self._storage = storage

        self.robot_types: list[str] = []
        self.serials: list[str] = []
        self.contexts: list[str] = []
        self.files: list[StorageEntry] = []

        self.selected_type = ""
        self.selected_serial = ""
        self.selected_context = ""

        self.previews: dict[str, str] = {}
        self.preview_task: asyncio.Task | None = None
        # Bumped on every folder selection change; stale listings and previews are dropped.
        self._generation = 0

        self.loading = False
        self.opening_file = ""
        self.error = ""

    @property
    def bucket(self) -> str:
        return self._storage.bucket if self._storage else self.settings.storage_bucket

    @property
    def active_path(self) -> str:
        return layout.display_path(
            self.bucket, self.selected_type, self.selected_serial, self.selected_context
        )

    async def _list(self, path: str, failure: str) -> list[StorageEntry] | None:
        """List a folder, recording failures in self.error."""
        if self._storage is None:
            self.error = MISSING_STORAGE_MESSAGE
            return None
        self.loading = True
        self.error = ""
        try:
            return await self._storage.list(path, limit=self.settings.storage_list_limit)
        except StorageError as e:
            self.error = e.message or failure
            logger.error("%s (%s): %s", failure, path or "/", e)
            return None
        finally:
            self.loading = False

    # --- Levels ---

    async def load_robot_types(self) -> list[str]:
        entries = await self._list("", "Failed to load folders.")
        self.robot_types = folder_names(entries)
        return self.robot_types

    async def select_type(self, name: str) -> list[str]:
        self._invalidate_previews()
        self.selected_type = name
        self.selected_serial = ""
        self.selected_context = ""
        self.serials, self.contexts, self.files = [], [], []
        if not name:
            return self.serials
        generation = self._generation
        entries = await self._list(layout.join(name), "Failed to load serial folders.")
        if generation != self._generation:
            return []
        self.serials = folder_names(entries)
        return self.serials

    async def select_serial(self, name: str) -> list[str]:
        self._invalidate_previews()
        self.selected_serial = name
        self.selected_context = ""
        self.contexts, self.files = [], []
        if not (self.selected_type and name):
            return self.contexts
        generation = self._generation
        entries = await self._list(
            layout.join(self.selected_type, name), "Failed to load context folders."
        )
        if generation != self._generation:
            return []
        self.contexts = folder_names(entries)
        return self.contexts

    async def select_context(self, name: str) -> list[StorageEntry]:
        self._invalidate_previews()
        self.selected_context = name
        self.files = []
        if not (self.selected_type and self.selected_serial and name):
            return self.files
        generation = self._generation
        entries = await self._list(
            layout.base_path(self.selected_type, self.selected_serial, name),
            "Failed to load files.",
        )
        if generation != self._generation:
            return []
        self.files = file_entries(entries)
        if any(is_image(entry) for entry in self.files):
            self.preview_task = asyncio.create_task(self.resolve_previews())
        return self.files

    # --- URLs ---

    def _object_path(self, file_name: str) -> str:
        return layout.object_path(
            self.selected_type, self.selected_serial, self.selected_context, file_name
        )

    async def _resolve_url(self, path: str) -> str | None:
        """Signed URL first; public URL when signing is unavailable or fails."""
        signed: str | None = None
        try:
            signed = await self._storage.create_signed_url(
                path, self.settings.signed_url_ttl_seconds
            )
        except StorageError as e:
            logger.warning("Signing failed for %s, falling back to public URL: %s", path, e)
        if signed:
            return signed
        return self._storage.get_public_url(path) or None

    async def open_file(self, file_name: str) -> str | None:
        """Return a URL to open a file of the selected folder."""
        if self._storage is None:
            self.error = MISSING_STORAGE_MESSAGE
            return None
        self.error = ""
        self.opening_file = file_name
        try:
            url = await self._resolve_url(self._object_path(file_name))
            if not url:
                self.error = "Could not create a URL for this file."
            return url
        finally:
            self.opening_file = ""

    async def resolve_previews(self) -> dict[str, str]:
        """Resolve preview URLs for all image files of the selected folder."""
        generation = self._generation
        images = [entry.name for entry in self.files if is_image(entry)]
        urls = await asyncio.gather(
            *(self._resolve_url(self._object_path(name)) for name in images)
        )
        if generation != self._generation:
            return {}
        self.previews = {name: url for name, url in zip(images, urls) if url}
        logger.debug("Resolved %d previews for %s", len(self.previews), self.active_path)
        return self.previews

    def _invalidate_previews(self) -> None:
        self._generation += 1
        self.previews = {}
        if self.preview_task is not None and not self.preview_task.done():
            self.preview_task.cancel()
        self.preview_task = None
