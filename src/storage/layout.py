# src/storage/layout.py - v1
"""Object path layout inside the bucket.

Photos:   {robot_type}/{robot_serial}/{context_key}/{object_name}
Manifest: {robot_type}/{robot_serial}/{context_key}/manifest.json
"""

from __future__ import annotations

MANIFEST_FILENAME = "manifest.json"
MANIFEST_CONTENT_TYPE = "application/json"


def join(*parts: str) -> str:
    """Join non-empty path parts with '/'."""
    return "/".join(part.strip("/") for part in parts if part and part.strip("/"))


def base_path(robot_type: str, robot_serial: str, context_key: str) -> str:
    """Return the folder of one (robot type, serial, context) run."""
    return join(robot_type, robot_serial, context_key)


def object_path(robot_type: str, robot_serial: str, context_key: str, object_name: str) -> str:
    return join(base_path(robot_type, robot_serial, context_key), object_name)


def manifest_path(base: str) -> str:
    return join(base, MANIFEST_FILENAME)


def display_path(bucket: str, *parts: str) -> str:
    """Human-readable folder path, always ending in '/'."""
    path = join(bucket, *parts)
    return f"{path}/"
