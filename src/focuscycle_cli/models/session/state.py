"""Session state with persistent storage."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields, replace
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import TypeAdapter, ValidationError

from .constants import PHASE_IDLE

SessionPhase = Literal["idle", "work", "break"]
BreakType = Literal["short", "long"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkActivity:
    """What the user is working on during a work phase."""

    name: str
    description: str = ""


@dataclass
class SessionState:
    """Durable snapshot of the work/break cycle."""

    enabled: bool = False
    phase: SessionPhase = PHASE_IDLE
    running: bool = False
    paused: bool = False
    cycle_count: int = 0
    total_sessions: int = 0
    start_time: int | None = None  # epoch ms
    remaining_duration_ms: int | None = None
    original_duration_ms: int | None = None
    paused_at: int | None = None  # epoch ms
    current_work_activity: WorkActivity | None = None
    last_reset_date: str | None = None  # YYYY-MM-DD
    break_type: BreakType | None = None
    finished: bool = False
    break_pending: bool = False

    @property
    def session_number(self) -> int:
        """Number of the work session in progress or up next."""
        return self.cycle_count + 1

    @property
    def has_countdown(self) -> bool:
        return (
            self.start_time is not None
            and self.remaining_duration_ms is not None
            and self.original_duration_ms is not None
        )

    def remaining_at_pause(self) -> int:
        """Remaining budget frozen at ``paused_at``."""
        if not self.has_countdown or self.paused_at is None:
            return self.remaining_duration_ms or 0
        return self.remaining_duration_ms - (self.paused_at - self.start_time)

    def remaining_at(self, now_ms: int) -> int:
        """Milliseconds left in the current countdown as of ``now_ms``."""
        if not self.has_countdown:
            return 0
        if self.paused:
            return max(0, self.remaining_at_pause())
        if not self.running:
            return 0 if self.finished else self.remaining_duration_ms
        return max(0, self.remaining_duration_ms - (now_ms - self.start_time))

    def clear_countdown(self) -> None:
        self.running = False
        self.paused = False
        self.start_time = None
        self.remaining_duration_ms = None
        self.original_duration_ms = None
        self.paused_at = None
        self.finished = False
        self.break_pending = False

    def copy(self) -> SessionState:
        return replace(self)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> SessionState:
        """Create from dictionary, rejecting unknown fields, phases and wrong types."""
        if not isinstance(data, dict):
            raise TypeError(f"Expected an object, got {type(data).__name__}")
        unknown = set(data) - {f.name for f in fields(cls)}
        if unknown:
            raise TypeError(f"Unknown snapshot fields: {', '.join(sorted(unknown))}")
        phase = data.get("phase", PHASE_IDLE)
        if phase not in ("idle", "work", "break"):
            raise ValueError(f"Unknown phase: {phase!r}")
        state = _snapshot_adapter().validate_python(data)
        if state.cycle_count < 0 or state.total_sessions < 0:
            raise ValueError("Session counters must not be negative")
        return state

    @classmethod
    def disabled(cls, previous: SessionState | None = None) -> SessionState:
        """Cleared snapshot written when the feature is turned off.

        Counters and the last reset date survive so they can be inspected.
        """
        if previous is None:
            return cls()
        return cls(
            cycle_count=previous.cycle_count,
            total_sessions=previous.total_sessions,
            last_reset_date=previous.last_reset_date,
        )


@lru_cache(maxsize=1)
def _snapshot_adapter() -> TypeAdapter[SessionState]:
    return TypeAdapter(SessionState)


class SessionStateManager:
    """Manages session state persistence in a JSON file."""

    def __init__(self, state_dir: Path | None = None):
        """Initialize state manager."""
        if state_dir is None:
            from platformdirs import user_data_dir

            state_dir = Path(user_data_dir("focuscycle_cli")) / "state"

        self.state_dir = state_dir
        self.state_dir.mkdir(parents=True, exist_ok=True)
        self.state_file = self.state_dir / "session.json"

    def save(self, state: SessionState) -> None:
        """Write the snapshot atomically (temp file + rename)."""
        tmp_file = self.state_file.with_suffix(".json.tmp")
        with open(tmp_file, "w", encoding="utf-8") as f:
            json.dump(state.to_dict(), f, indent=2)
        tmp_file.chmod(0o600)
        tmp_file.replace(self.state_file)

    def load(self) -> SessionState | None:
        """Load the snapshot. Returns None if the file is missing or invalid."""
        if not self.state_file.exists():
            return None

        try:
            with open(self.state_file, encoding="utf-8") as f:
                data = json.load(f)
            return SessionState.from_dict(data)
        except (json.JSONDecodeError, ValidationError, TypeError, ValueError) as e:
            logger.warning("Ignoring corrupt session snapshot %s: %s", self.state_file, e)
            return None
