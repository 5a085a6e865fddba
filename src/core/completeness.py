# src/core/completeness.py - v1
"""Checklist completeness, recomputed from checklist and photos on demand."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from robodoc.core.models import ChecklistStep, Completeness, Photo


def has_photo(photos_by_step: Mapping[str, Sequence[Photo]], step_id: str) -> bool:
    return len(photos_by_step.get(step_id, ())) > 0


def compute_completeness(
    checklist: Sequence[ChecklistStep],
    photos_by_step: Mapping[str, Sequence[Photo]],
) -> Completeness:
    """Derive completeness for a checklist run.

    A checklist without required steps is never complete, so an empty or
    misconfigured checklist cannot pass silently.
    """
    required = [step for step in checklist if step.required]
    missing = [step for step in required if not has_photo(photos_by_step, step.id)]
    total_photos = sum(len(photos) for photos in photos_by_step.values())
    return Completeness(
        required_count=len(required),
        missing_count=len(missing),
        total_photos=total_photos,
        complete=len(required) > 0 and not missing,
    )
