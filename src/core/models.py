# src/core/models.py - v1
"""Core domain models shared by the session, storage and dashboard layers.

ChecklistStep, Photo, PhotoFile, Completeness, ContextOption and the
Screen enumeration of the guided workflow.
"""

from __future__ import annotations

from datetime import datetime
from enum import IntEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator

RobotType = Literal["SCARA", "IVR"]

DEFAULT_MIME_TYPE = "image/jpeg"


class Screen(IntEnum):
    """Screens of the guided capture workflow, in navigation order."""

    IDENTIFY = 0
    CONTEXT_SELECT = 1
    CHECKLIST = 2
    SUMMARY = 3


class ChecklistStep(BaseModel):
    """One documentation item within a context checklist."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    required: bool = False

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: object) -> str:
        """Checklist files use numeric and string ids interchangeably."""
        return str(v)


class ContextOption(BaseModel):
    """A lifecycle phase the operator can document."""

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    enabled: bool = True


class PhotoFile(BaseModel):
    """A captured image handed to the upload pipeline."""

    filename: str
    content: bytes
    content_type: str = ""

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def mime_type(self) -> str:
        return self.content_type or DEFAULT_MIME_TYPE


class Photo(BaseModel):
    """An uploaded photo attached to a checklist step."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    url: str = ""
    preview_url: str | None = None
    captured_at: datetime
    size_bytes: int
    mime_type: str = DEFAULT_MIME_TYPE


class Completeness(BaseModel):
    """Derived progress of a checklist run."""

    required_count: int = 0
    missing_count: int = 0
    total_photos: int = 0
    complete: bool = False

    @property
    def completed_count(self) -> int:
        return self.required_count - self.missing_count

