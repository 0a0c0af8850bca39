"""Unit tests for focuscycle_cli.models.session.state.

``SessionState`` arithmetic is checked with plain integers; the
``SessionStateManager`` always writes under *tmp_path*.
"""

from __future__ import annotations

import json
import stat
from pathlib import Path

import pytest
from pydantic import ValidationError

from focuscycle_cli.models.session.state import (
    SessionState,
    SessionStateManager,
    WorkActivity,
)

MINUTE_MS = 60_000


def _running(start: int = 1_000_000, minutes: int = 25, **kwargs) -> SessionState:
    return SessionState(
        enabled=True,
        phase="work",
        running=True,
        start_time=start,
        remaining_duration_ms=minutes * MINUTE_MS,
        original_duration_ms=minutes * MINUTE_MS,
        **kwargs,
    )


# ---------------------------------------------------------------------------
# SessionState
# ---------------------------------------------------------------------------


class TestSessionState:
    def test_defaults(self):
        state = SessionState()
        assert state.enabled is False
        assert state.phase == "idle"
        assert state.session_number == 1
        assert state.has_countdown is False

    def test_session_number_follows_cycle_count(self):
        assert SessionState(cycle_count=3).session_number == 4

    def test_remaining_while_running(self):
        state = _running()
        assert state.remaining_at(1_000_000 + 5 * MINUTE_MS) == 20 * MINUTE_MS

    def test_remaining_never_negative(self):
        state = _running()
        assert state.remaining_at(1_000_000 + 90 * MINUTE_MS) == 0

    def test_remaining_while_paused_ignores_now(self):
        state = _running(paused=True, paused_at=1_000_000 + 4 * MINUTE_MS)
        assert state.remaining_at_pause() == 21 * MINUTE_MS
        assert state.remaining_at(10**13) == 21 * MINUTE_MS

    def test_remaining_after_resume_uses_current_budget(self):
        # resumed with 21 minutes left at t=2_000_000, paused again 1 minute later
        state = SessionState(
            enabled=True,
            phase="work",
            running=True,
            paused=True,
            start_time=2_000_000,
            remaining_duration_ms=21 * MINUTE_MS,
            original_duration_ms=25 * MINUTE_MS,
            paused_at=2_000_000 + MINUTE_MS,
        )
        assert state.remaining_at_pause() == 20 * MINUTE_MS

    def test_remaining_for_stopped_phase(self):
        state = _running()
        state.running = False
        assert state.remaining_at(0) == 25 * MINUTE_MS
        state.finished = True
        assert state.remaining_at(0) == 0

    def test_remaining_without_countdown(self):
        assert SessionState(enabled=True).remaining_at(123) == 0

    def test_clear_countdown(self):
        state = _running(paused=True, paused_at=5, finished=True, break_pending=True)
        state.clear_countdown()
        assert state.running is False
        assert state.paused is False
        assert state.start_time is None
        assert state.remaining_duration_ms is None
        assert state.original_duration_ms is None
        assert state.paused_at is None
        assert state.finished is False
        assert state.break_pending is False

    def test_copy_is_independent(self):
        state = _running()
        clone = state.copy()
        clone.cycle_count = 5
        assert state.cycle_count == 0

    def test_dict_round_trip_keeps_activity(self):
        state = _running(current_work_activity=WorkActivity("Review PR", "auth module"))
        restored = SessionState.from_dict(state.to_dict())
        assert restored == state
        assert isinstance(restored.current_work_activity, WorkActivity)

    def test_from_dict_rejects_unknown_phase(self):
        with pytest.raises(ValueError, match="Unknown phase"):
            SessionState.from_dict({"phase": "nap"})

    def test_from_dict_rejects_negative_counters(self):
        with pytest.raises(ValueError):
            SessionState.from_dict({"cycle_count": -1})

    def test_from_dict_rejects_unknown_fields(self):
        with pytest.raises(TypeError):
            SessionState.from_dict({"status": "active"})

    def test_from_dict_rejects_wrong_types(self):
        with pytest.raises(ValidationError):
            SessionState.from_dict({"running": True, "start_time": "yesterday"})

    def test_disabled_keeps_counters_and_reset_date(self):
        previous = _running(cycle_count=2, total_sessions=9, last_reset_date="2025-10-09")
        cleared = SessionState.disabled(previous)
        assert cleared.enabled is False
        assert cleared.running is False
        assert cleared.start_time is None
        assert cleared.cycle_count == 2
        assert cleared.total_sessions == 9
        assert cleared.last_reset_date == "2025-10-09"

    def test_disabled_without_previous(self):
        assert SessionState.disabled() == SessionState()


# ---------------------------------------------------------------------------
# SessionStateManager
# ---------------------------------------------------------------------------


class TestSessionStateManager:
    @pytest.fixture()
    def manager(self, tmp_path: Path) -> SessionStateManager:
        return SessionStateManager(tmp_path / "state")

    def test_creates_state_dir(self, tmp_path: Path):
        SessionStateManager(tmp_path / "nested" / "state")
        assert (tmp_path / "nested" / "state").is_dir()

    def test_default_dir_uses_user_data_dir(self, isolated_dirs):
        manager = SessionStateManager()
        assert manager.state_file == isolated_dirs / "data" / "state" / "session.json"

    def test_load_missing_returns_none(self, manager):
        assert manager.load() is None

    def test_save_and_load(self, manager):
        state = _running(cycle_count=1, current_work_activity=WorkActivity("Docs"))
        manager.save(state)
        assert manager.load() == state

    def test_saved_file_is_plain_json(self, manager):
        manager.save(_running())
        data = json.loads(manager.state_file.read_text(encoding="utf-8"))
        assert data["phase"] == "work"
        assert data["remaining_duration_ms"] == 25 * MINUTE_MS

    def test_saved_file_is_private(self, manager):
        manager.save(_running())
        mode = stat.S_IMODE(manager.state_file.stat().st_mode)
        assert mode == 0o600

    def test_no_temp_file_left_behind(self, manager):
        manager.save(_running())
        assert sorted(p.name for p in manager.state_dir.iterdir()) == ["session.json"]

    @pytest.mark.parametrize(
        "content",
        ["", "{broken", "[]", '{"phase": "nap"}', '{"cycle_count": -2}', '{"bogus": 1}'],
    )
    def test_corrupt_file_returns_none(self, manager, content):
        manager.state_file.write_text(content, encoding="utf-8")
        assert manager.load() is None

    @pytest.mark.parametrize(
        "content",
        [
            '{"enabled": true, "phase": "work", "running": true, "start_time": "yesterday"}',
            '{"enabled": true, "cycle_count": "many"}',
            '{"enabled": true, "current_work_activity": "Write docs"}',
            '{"enabled": true, "break_type": "medium"}',
        ],
    )
    def test_wrong_field_types_return_none(self, manager, content):
        manager.state_file.write_text(content, encoding="utf-8")
        assert manager.load() is None
