# src/session/state.py - v1
"""Session state of one guided capture run.

A Session is an immutable value: every transition in
robodoc.session.transitions returns a new Session, and the owning
controller keeps the current one.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from robodoc.config.checklists import DEFAULT_ROBOT_TYPE
from robodoc.core.completeness import compute_completeness
from robodoc.core.models import ChecklistStep, Completeness, Photo, Screen
from robodoc.storage import layout


class Session(BaseModel):
    """Identification, context, checklist progress and uploaded photos."""

    model_config = ConfigDict(frozen=True)

    screen: Screen = Screen.IDENTIFY
    robot_serial: str = ""
    robot_type: str = DEFAULT_ROBOT_TYPE
    context_key: str = ""
    workflow_started_at: datetime | None = None
    checklist: tuple[ChecklistStep, ...] = ()
    current_step_index: int = 0
    photos_by_step: dict[str, tuple[Photo, ...]] = Field(default_factory=dict)
    # Steps with an upload in flight; at most one upload per step.
    uploading_step_ids: frozenset[str] = frozenset()

    @property
    def completeness(self) -> Completeness:
        return compute_completeness(self.checklist, self.photos_by_step)

    @property
    def base_path(self) -> str:
        return layout.base_path(self.robot_type, self.robot_serial, self.context_key)

    @property
    def is_last_step(self) -> bool:
        return self.current_step_index >= len(self.checklist) - 1

    def photos_for(self, step_id: str) -> tuple[Photo, ...]:
        return self.photos_by_step.get(step_id, ())

    def all_photos(self) -> list[Photo]:
        return [photo for photos in self.photos_by_step.values() for photo in photos]
