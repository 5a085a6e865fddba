# tests/unit/logging/test_unit_context.py - v1
"""Tests for logging/context.py - contextual logging variables."""

from __future__ import annotations

from robodoc.logging.context import (
    clear_context,
    get_context,
    set_session_context,
    set_step_context,
)


class TestLogContext:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_initial_state(self):
        ctx = get_context()
        assert ctx.robot_serial is None
        assert ctx.robot_type is None
        assert ctx.context_key is None
        assert ctx.step_id is None

    def test_set_session_context(self):
        set_session_context("2525", "SCARA")
        ctx = get_context()
        assert ctx.robot_serial == "2525"
        assert ctx.robot_type == "SCARA"
        assert ctx.context_key is None

    def test_empty_strings_become_none(self):
        set_session_context("", "", "")
        assert get_context().as_dict() == {}

    def test_set_step_context(self):
        set_step_context("4")
        assert get_context().step_id == "4"
        set_step_context(None)
        assert get_context().step_id is None

    def test_as_dict_filters_none(self):
        set_session_context("2525", "IVR", "Incoming")
        d = get_context().as_dict()
        assert d == {"robot_serial": "2525", "robot_type": "IVR", "context_key": "Incoming"}

    def test_clear(self):
        set_session_context("2525", "SCARA", "Incoming")
        set_step_context("1")
        clear_context()
        ctx = get_context()
        assert ctx.robot_serial is None
        assert ctx.step_id is None
