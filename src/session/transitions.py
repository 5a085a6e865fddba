# src/session/transitions.py - v1
"""Screen transitions of the guided workflow.

Identify -> ContextSelect -> Checklist -> Summary, plus reset.

Every function takes a Session and returns a Session. An action that is
not allowed in the current state (see the can_* predicates, which drive
the enabled state of the controls) returns the session unchanged.
"""

from __future__ import annotations

import logging
from datetime import datetime

from robodoc.config.checklists import ROBOT_TYPES, Checklists, get_checklist_for
from robodoc.core.completeness import has_photo
from robodoc.core.models import ChecklistStep, ContextOption, Photo, Screen
from robodoc.session.state import Session

logger = logging.getLogger(__name__)


def new_session() -> Session:
    return Session()


def reset(session: Session | None = None) -> Session:
    """Clear every session field back to its initial value."""
    return new_session()


# --- Identify ---


def can_start(robot_serial: str, robot_type: str) -> bool:
    return bool(robot_serial.strip()) and robot_type in ROBOT_TYPES


def start(session: Session, robot_serial: str, robot_type: str, now: datetime) -> Session:
    """Identify the robot and move on to context selection."""
    if session.screen != Screen.IDENTIFY or not can_start(robot_serial, robot_type):
        return session
    return session.model_copy(
        update={
            "robot_serial": robot_serial.strip(),
            "robot_type": robot_type,
            "workflow_started_at": now,
            "screen": Screen.CONTEXT_SELECT,
        }
    )


# --- Context selection ---


def back_to_identify(session: Session) -> Session:
    if session.screen != Screen.CONTEXT_SELECT:
        return session
    return session.model_copy(update={"screen": Screen.IDENTIFY})


def select_context(
    session: Session,
    context: ContextOption,
    checklists: Checklists | None = None,
) -> Session:
    """Load the checklist of an enabled context; clears all photos."""
    if session.screen != Screen.CONTEXT_SELECT or not context.enabled:
        return session
    checklist = get_checklist_for(context.key, session.robot_type, checklists)
    if not checklist:
        logger.warning(
            "No checklist configured for context=%s type=%s", context.key, session.robot_type
        )
    return session.model_copy(
        update={
            "context_key": context.key,
            "checklist": tuple(checklist),
            "current_step_index": 0,
            "photos_by_step": {},
            "uploading_step_ids": frozenset(),
            "screen": Screen.CHECKLIST,
        }
    )


# --- Checklist ---


def active_step(session: Session) -> ChecklistStep | None:
    if 0 <= session.current_step_index < len(session.checklist):
        return session.checklist[session.current_step_index]
    return None


def is_uploading(session: Session, step_id: str) -> bool:
    return step_id in session.uploading_step_ids


def can_go_next(session: Session) -> bool:
    """Next is disabled while the active step is uploading or lacks a required photo."""
    if session.screen != Screen.CHECKLIST:
        return False
    step = active_step(session)
    if step is None:
        return True
    if is_uploading(session, step.id):
        return False
    return not (step.required and not has_photo(session.photos_by_step, step.id))


def next_step(session: Session) -> Session:
    """Advance one step, or open the summary from the last step."""
    if not can_go_next(session):
        return session
    if session.current_step_index < len(session.checklist) - 1:
        return session.model_copy(update={"current_step_index": session.current_step_index + 1})
    return session.model_copy(update={"screen": Screen.SUMMARY})


def previous_step(session: Session) -> Session:
    """Go back one step, or to context selection from the first step."""
    if session.screen != Screen.CHECKLIST:
        return session
    if session.current_step_index > 0:
        return session.model_copy(update={"current_step_index": session.current_step_index - 1})
    return session.model_copy(update={"screen": Screen.CONTEXT_SELECT})


# --- Summary ---


def back_to_checklist(session: Session) -> Session:
    """Return to the checklist at the last visited step."""
    if session.screen != Screen.SUMMARY:
        return session
    return session.model_copy(update={"screen": Screen.CHECKLIST})


# --- Uploads ---


def next_photo_index(session: Session, step_id: str) -> int:
    """1 + photos already recorded for the step; photos are never removed."""
    return len(session.photos_for(step_id)) + 1


def mark_uploading(session: Session, step_id: str) -> Session:
    return session.model_copy(
        update={"uploading_step_ids": session.uploading_step_ids | {step_id}}
    )


def clear_uploading(session: Session, step_id: str) -> Session:
    return session.model_copy(
        update={"uploading_step_ids": session.uploading_step_ids - {step_id}}
    )


def record_photo(session: Session, step_id: str, photo: Photo) -> Session:
    """Append a photo to its step (capture order) and clear the upload marker."""
    photos = dict(session.photos_by_step)
    photos[step_id] = (*session.photos_for(step_id), photo)
    return session.model_copy(
        update={
            "photos_by_step": photos,
            "uploading_step_ids": session.uploading_step_ids - {step_id},
        }
    )
