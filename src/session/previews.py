# src/session/previews.py - v1
"""Local preview handles for freshly captured photos.

Each handle is a temporary file exposed as a file:// URI. Handles must be
revoked when the photos they show are discarded, or they accumulate for
the lifetime of the process.
"""

from __future__ import annotations

import logging
import mimetypes
import shutil
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


class PreviewRegistry:
    """Allocate and revoke preview handles."""

    def __init__(self, directory: str | Path | None = None) -> None:
        self._dir: Path | None = Path(directory) if directory else None
        self._owns_dir = directory is None
        self._handles: dict[str, Path] = {}

    def _ensure_dir(self) -> Path:
        if self._dir is None:
            self._dir = Path(tempfile.mkdtemp(prefix="robodoc-previews-"))
        self._dir.mkdir(parents=True, exist_ok=True)
        return self._dir

    def create(self, data: bytes, mime_type: str = "image/jpeg") -> str:
        """Write a preview and return its URI."""
        suffix = mimetypes.guess_extension(mime_type) or ".bin"
        with tempfile.NamedTemporaryFile(
            dir=self._ensure_dir(), suffix=suffix, delete=False
        ) as fh:
            fh.write(data)
            path = Path(fh.name)
        uri = path.as_uri()
        self._handles[uri] = path
        return uri

    def revoke(self, uri: str | None) -> None:
        if not uri:
            return
        path = self._handles.pop(uri, None)
        if path is not None:
            path.unlink(missing_ok=True)

    def revoke_all(self) -> None:
        for uri in list(self._handles):
            self.revoke(uri)

    def close(self) -> None:
        """Revoke everything and remove the directory if this registry created it."""
        self.revoke_all()
        if self._owns_dir and self._dir is not None:
            shutil.rmtree(self._dir, ignore_errors=True)
            self._dir = None

    def __contains__(self, uri: object) -> bool:
        return uri in self._handles

    def __len__(self) -> int:
        return len(self._handles)
