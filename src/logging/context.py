# src/logging/context.py - v1
"""Contextual logging support: attach robot, context and step to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per guided run.
_robot_serial: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "robot_serial", default=None
)
_robot_type: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "robot_type", default=None
)
_context_key: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "context_key", default=None
)
_step_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "step_id", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    robot_serial: str | None = None
    robot_type: str | None = None
    context_key: str | None = None
    step_id: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        robot_serial=_robot_serial.get(),
        robot_type=_robot_type.get(),
        context_key=_context_key.get(),
        step_id=_step_id.get(),
    )


def set_session_context(
    robot_serial: str | None,
    robot_type: str | None,
    context_key: str | None = None,
) -> None:
    """Set run-level context (on identification and context selection)."""
    _robot_serial.set(robot_serial or None)
    _robot_type.set(robot_type or None)
    _context_key.set(context_key or None)


def set_step_context(step_id: str | None) -> None:
    """Set step-level context (per upload)."""
    _step_id.set(step_id)


def clear_context() -> None:
    """Reset all context variables."""
    _robot_serial.set(None)
    _robot_type.set(None)
    _context_key.set(None)
    _step_id.set(None)
