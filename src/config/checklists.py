# src/config/checklists.py - v1
"""Declarative workflow contexts and checklist configuration.

Checklists are keyed by context, then robot type. A robot type without a
dedicated variant uses the default (SCARA) variant of its context; an
unconfigured context yields an empty checklist.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import TypeAdapter

from robodoc.core.models import ChecklistStep, ContextOption

logger = logging.getLogger(__name__)

ROBOT_TYPES: tuple[str, ...] = ("SCARA", "IVR")
DEFAULT_ROBOT_TYPE = "SCARA"

# Only enabled contexts can be selected; the rest are placeholders.
CONTEXTS: list[ContextOption] = [
    ContextOption(key="Incoming", label="Incoming Goods", enabled=True),
    ContextOption(key="Analysis", label="Analysis", enabled=False),
    ContextOption(key="Assembly", label="Assembly", enabled=False),
    ContextOption(key="Delivery", label="Delivery", enabled=False),
]

Checklists = dict[str, dict[str, list[ChecklistStep]]]

_CHECKLISTS_ADAPTER = TypeAdapter(Checklists)

_RAW_DEFAULT_CHECKLISTS: dict[str, dict[str, list[dict]]] = {
    "Incoming": {
        "SCARA": [
            {"id": 1, "label": "Packaging (outer box)", "required": True},
            {"id": 2, "label": "Shipping label", "required": True},
            {"id": 3, "label": "Robot overview", "required": True},
            {"id": 4, "label": "Type plate – serial number", "required": True},
            {"id": 5, "label": "Arm and joints", "required": True},
            {"id": 6, "label": "Cables and connectors", "required": False},
            {"id": 7, "label": "Accessories (if any)", "required": False},
        ],
        "IVR": [
            {"id": 1, "label": "Packaging (outer box)", "required": True},
            {"id": 2, "label": "Shipping label", "required": True},
            {"id": 3, "label": "Robot overview", "required": True},
            {"id": 4, "label": "Type plate – serial number", "required": True},
            {"id": 5, "label": "Camera module", "required": True},
            {"id": 6, "label": "Gripper (end effector)", "required": False},
            {"id": 7, "label": "Cables and connectors", "required": False},
        ],
    },
}

DEFAULT_CHECKLISTS: Checklists = _CHECKLISTS_ADAPTER.validate_python(
    _RAW_DEFAULT_CHECKLISTS
)


def load_checklists(path: Path | None = None) -> Checklists:
    """Load checklist configuration.

    Args:
        path: JSON file shaped like {context: {robot_type: [step, ...]}}.
            None returns the built-in checklists.

    Returns:
        Validated checklist mapping.

    Raises:
        pydantic.ValidationError: If the file does not match the shape.
    """
    if path is None:
        return DEFAULT_CHECKLISTS
    data = json.loads(Path(path).expanduser().read_text(encoding="utf-8"))
    checklists = _CHECKLISTS_ADAPTER.validate_python(data)
    logger.info("Loaded checklists for %d contexts from %s", len(checklists), path)
    return checklists


def get_checklist_for(
    context: str,
    robot_type: str,
    checklists: Checklists | None = None,
) -> list[ChecklistStep]:
    """Return the checklist for (context, robot type)."""
    by_context = (checklists if checklists is not None else DEFAULT_CHECKLISTS).get(context)
    if not by_context:
        return []
    steps = by_context.get(robot_type) or by_context.get(DEFAULT_ROBOT_TYPE) or []
    return list(steps)


def find_context(key: str) -> ContextOption | None:
    """Look up a context option by key."""
    for ctx in CONTEXTS:
        if ctx.key == key:
            return ctx
    return None
