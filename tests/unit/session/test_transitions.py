# tests/unit/session/test_transitions.py - v1
"""Tests for session/transitions.py - screen navigation rules."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from robodoc.config.checklists import find_context
from robodoc.core.models import ContextOption, Photo, Screen
from robodoc.session import transitions as t
from robodoc.session.state import Session

NOW = datetime(2026, 10, 17, 8, 30, tzinfo=timezone.utc)
INCOMING = ContextOption(key="Incoming", label="Incoming Goods", enabled=True)
ASSEMBLY = ContextOption(key="Assembly", label="Assembly", enabled=False)


def _photo(name: str = "p.jpg") -> Photo:
    return Photo(name=name, path=f"SCARA/2525/Incoming/{name}", captured_at=NOW, size_bytes=1)


@pytest.fixture
def at_context() -> Session:
    return t.start(t.new_session(), "  2525 ", "SCARA", NOW)


@pytest.fixture
def at_checklist(at_context, sample_checklists) -> Session:
    return t.select_context(at_context, INCOMING, sample_checklists)


# ---------------------------------------------------------------------------
# Identify
# ---------------------------------------------------------------------------

class TestIdentify:
    def test_initial(self):
        s = t.new_session()
        assert s.screen == Screen.IDENTIFY
        assert s.robot_type == "SCARA"
        assert s.robot_serial == ""

    @pytest.mark.parametrize(
        "serial, robot_type, expected",
        [("2525", "SCARA", True), ("2525", "IVR", True), ("   ", "SCARA", False),
         ("", "IVR", False), ("2525", "DELTA", False)],
    )
    def test_can_start(self, serial, robot_type, expected):
        assert t.can_start(serial, robot_type) is expected

    def test_start_trims_serial(self, at_context):
        assert at_context.screen == Screen.CONTEXT_SELECT
        assert at_context.robot_serial == "2525"
        assert at_context.workflow_started_at == NOW

    def test_start_blank_serial_is_noop(self):
        s = t.new_session()
        assert t.start(s, "  ", "SCARA", NOW) is s

    def test_start_only_from_identify(self, at_context):
        assert t.start(at_context, "9999", "IVR", NOW) is at_context

    def test_back_to_identify_keeps_identity(self, at_context):
        s = t.back_to_identify(at_context)
        assert s.screen == Screen.IDENTIFY
        assert s.robot_serial == "2525"


# ---------------------------------------------------------------------------
# Context selection
# ---------------------------------------------------------------------------

class TestSelectContext:
    def test_loads_checklist(self, at_checklist):
        assert at_checklist.screen == Screen.CHECKLIST
        assert at_checklist.context_key == "Incoming"
        assert [s.id for s in at_checklist.checklist] == ["1", "2"]
        assert at_checklist.current_step_index == 0
        assert at_checklist.base_path == "SCARA/2525/Incoming"

    def test_disabled_context_is_noop(self, at_context):
        assert t.select_context(at_context, ASSEMBLY) is at_context

    def test_only_from_context_select(self, at_checklist):
        assert t.select_context(at_checklist, INCOMING) is at_checklist

    def test_reselect_clears_photos(self, at_checklist, sample_checklists):
        s = t.record_photo(at_checklist, "1", _photo())
        s = t.previous_step(s)
        assert s.screen == Screen.CONTEXT_SELECT
        s = t.select_context(s, INCOMING, sample_checklists)
        assert s.photos_by_step == {}
        assert s.uploading_step_ids == frozenset()

    def test_builtin_checklist_for_ivr(self):
        s = t.start(t.new_session(), "77", "IVR", NOW)
        s = t.select_context(s, find_context("Incoming"))
        assert len(s.checklist) == 7
        assert s.checklist[4].label == "Camera module"


# ---------------------------------------------------------------------------
# Checklist navigation
# ---------------------------------------------------------------------------

class TestChecklistNavigation:
    def test_required_step_blocks_next(self, at_checklist):
        assert t.can_go_next(at_checklist) is False
        assert t.next_step(at_checklist) is at_checklist

    def test_photo_unblocks_next(self, at_checklist):
        s = t.record_photo(at_checklist, "1", _photo())
        assert t.can_go_next(s) is True
        s = t.next_step(s)
        assert s.current_step_index == 1
        assert t.active_step(s).id == "2"

    def test_optional_step_allows_next_to_summary(self, at_checklist):
        s = t.next_step(t.record_photo(at_checklist, "1", _photo()))
        assert s.is_last_step is True
        s = t.next_step(s)
        assert s.screen == Screen.SUMMARY

    def test_uploading_blocks_next(self, at_checklist):
        s = t.record_photo(at_checklist, "1", _photo())
        s = t.mark_uploading(s, "1")
        assert t.is_uploading(s, "1") is True
        assert t.can_go_next(s) is False

    def test_previous_from_first_step(self, at_checklist):
        s = t.previous_step(at_checklist)
        assert s.screen == Screen.CONTEXT_SELECT

    def test_previous_step(self, at_checklist):
        s = t.next_step(t.record_photo(at_checklist, "1", _photo()))
        s = t.previous_step(s)
        assert s.current_step_index == 0
        assert s.screen == Screen.CHECKLIST

    def test_empty_checklist_goes_straight_to_summary(self, at_context):
        s = t.select_context(at_context, INCOMING, {"Incoming": {"SCARA": []}})
        assert t.active_step(s) is None
        assert t.can_go_next(s) is True
        assert t.next_step(s).screen == Screen.SUMMARY

    def test_next_outside_checklist_is_noop(self, at_context):
        assert t.next_step(at_context) is at_context


# ---------------------------------------------------------------------------
# Summary and reset
# ---------------------------------------------------------------------------

class TestSummary:
    def test_back_to_checklist_at_last_step(self, at_checklist):
        s = t.next_step(t.record_photo(at_checklist, "1", _photo()))
        s = t.next_step(s)
        s = t.back_to_checklist(s)
        assert s.screen == Screen.CHECKLIST
        assert s.current_step_index == 1

    def test_back_to_checklist_only_from_summary(self, at_checklist):
        assert t.back_to_checklist(at_checklist) is at_checklist

    def test_reset(self, at_checklist):
        s = t.reset(t.record_photo(at_checklist, "1", _photo()))
        assert s == Session()


# ---------------------------------------------------------------------------
# Photos
# ---------------------------------------------------------------------------

class TestPhotos:
    def test_record_appends_in_order(self, at_checklist):
        s = t.record_photo(at_checklist, "1", _photo("a.jpg"))
        s = t.record_photo(s, "1", _photo("b.jpg"))
        assert [p.name for p in s.photos_for("1")] == ["a.jpg", "b.jpg"]
        assert at_checklist.photos_for("1") == ()

    def test_next_photo_index(self, at_checklist):
        assert t.next_photo_index(at_checklist, "1") == 1
        s = t.record_photo(at_checklist, "1", _photo())
        assert t.next_photo_index(s, "1") == 2
        assert t.next_photo_index(s, "2") == 1

    def test_record_clears_uploading(self, at_checklist):
        s = t.mark_uploading(at_checklist, "1")
        s = t.record_photo(s, "1", _photo())
        assert s.uploading_step_ids == frozenset()

    def test_clear_uploading(self, at_checklist):
        s = t.mark_uploading(t.mark_uploading(at_checklist, "1"), "2")
        s = t.clear_uploading(s, "1")
        assert s.uploading_step_ids == frozenset({"2"})

    def test_completeness_follows_photos(self, at_checklist):
        assert at_checklist.completeness.complete is False
        s = t.record_photo(at_checklist, "2", _photo())
        assert s.completeness.complete is False
        s = t.record_photo(s, "1", _photo())
        assert s.completeness.complete is True
        assert s.completeness.total_photos == 2
        assert len(s.all_photos()) == 2
