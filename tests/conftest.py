"""Shared test fixtures and configuration.

Provides a deterministic clock and scheduler for the session controller, and
isolates every test from the real config, data and log directories.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

import pytest

from focuscycle_cli.models.config_models import SessionConfig
from focuscycle_cli.models.session.controller import SessionController
from focuscycle_cli.models.session.notifications import ActivityEntry, SessionEvent
from focuscycle_cli.models.session.state import SessionStateManager

# 2025-10-09T12:00:00Z
START_MS = 1_760_011_200_000
MINUTE_MS = 60_000


# ---------------------------------------------------------------------------
# Filesystem isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path: Path):
    """Point config, data and log directories at *tmp_path*.

    Also resets the logger singleton and the cached ConfigService so each
    test starts clean.
    """
    import focuscycle_cli.utils.logger as logger_mod
    from focuscycle_cli.services.config_service import get_config_service

    config_dir = tmp_path / "config"
    data_dir = tmp_path / "data"
    log_dir = tmp_path / "log"

    logger_mod._logger = None
    app_logger = logging.getLogger("focuscycle_cli")
    app_logger.handlers.clear()
    app_logger.propagate = True
    get_config_service.cache_clear()

    with (
        patch("focuscycle_cli.services.config_service.user_config_dir", return_value=str(config_dir)),
        patch("platformdirs.user_data_dir", return_value=str(data_dir)),
        patch("focuscycle_cli.utils.logger.user_log_dir", return_value=str(log_dir)),
    ):
        yield tmp_path

    for handler in app_logger.handlers:
        handler.close()
    app_logger.handlers.clear()
    app_logger.propagate = True
    logger_mod._logger = None
    get_config_service.cache_clear()


@pytest.fixture()
def tmp_config(isolated_dirs):
    """Provide a real ConfigService backed by the temporary config directory."""
    from focuscycle_cli.services.config_service import ConfigService

    return ConfigService(isolated_dirs / "config")


# ---------------------------------------------------------------------------
# Deterministic time
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced wall clock. ``today`` is the UTC date of ``now``."""

    def __init__(self, now_ms: int = START_MS):
        self.now = now_ms

    def now_ms(self) -> int:
        return self.now

    def today(self) -> str:
        return datetime.fromtimestamp(self.now / 1000, tz=timezone.utc).date().isoformat()

    def advance(self, ms: int) -> None:
        self.now += ms


@dataclass
class ManualTimer:
    due_ms: int
    seq: int
    callback: Callable[[], None]
    cancelled: bool = False
    fired: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler driven by a FakeClock; ``advance`` fires due callbacks in order."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.timers: list[ManualTimer] = []
        self._seq = 0

    def call_later(self, delay_sec: float, callback: Callable[[], None]) -> ManualTimer:
        self._seq += 1
        timer = ManualTimer(
            due_ms=self.clock.now + round(max(0.0, delay_sec) * 1000),
            seq=self._seq,
            callback=callback,
        )
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[ManualTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def advance(self, ms: int) -> None:
        target = self.clock.now + ms
        while True:
            due = [t for t in self.pending if t.due_ms <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.due_ms, t.seq))
            self.clock.now = max(self.clock.now, timer.due_ms)
            timer.fired = True
            timer.callback()
        self.clock.now = target

    def advance_minutes(self, minutes: float) -> None:
        self.advance(round(minutes * MINUTE_MS))

    def fire_cancelled(self) -> None:
        """Run callbacks that were cancelled, as a late-firing timer would."""
        for timer in [t for t in self.timers if t.cancelled and not t.fired]:
            timer.fired = True
            timer.callback()


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------


class MemoryActivityLog:
    """In-memory ActivityLog; set ``fail`` to make every call raise."""

    def __init__(self):
        self.entries: list[ActivityEntry] = []
        self.fail = False

    def append(self, entry: ActivityEntry) -> None:
        if self.fail:
            raise RuntimeError("activity log unavailable")
        entry.id = len(self.entries) + 1
        self.entries.append(entry)

    def recent(self, source: str, limit: int) -> list[ActivityEntry]:
        if self.fail:
            raise RuntimeError("activity log unavailable")
        matching = [e for e in self.entries if e.source == source]
        return list(reversed(matching))[:limit]

    @property
    def labels(self) -> list[str]:
        return [e.label for e in self.entries]


class RecordingNotifier:
    """Collects emitted events; set ``fail`` to make notify raise."""

    def __init__(self):
        self.events: list[SessionEvent] = []
        self.fail = False

    def notify(self, event: SessionEvent) -> None:
        if self.fail:
            raise RuntimeError("notification channel closed")
        self.events.append(event)

    @property
    def names(self) -> list[str]:
        return [e.name for e in self.events]

    def named(self, name: str) -> list[SessionEvent]:
        return [e for e in self.events if e.name == name]


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def scheduler(clock: FakeClock) -> ManualScheduler:
    return ManualScheduler(clock)


@pytest.fixture()
def store(tmp_path: Path) -> SessionStateManager:
    return SessionStateManager(tmp_path / "state")


@pytest.fixture()
def activity_log() -> MemoryActivityLog:
    return MemoryActivityLog()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def make_controller(clock, scheduler, store, activity_log, notifier):
    """Factory building a controller over the shared fixtures.

    Keyword arguments override ``SessionConfig`` fields; the grace delay
    defaults to zero so phase boundaries land on whole minutes.
    """

    def _make(**overrides) -> SessionController:
        overrides.setdefault("grace_delay_sec", 0)
        return SessionController(
            config=SessionConfig(**overrides),
            store=store,
            activity_log=activity_log,
            notifier=notifier,
            scheduler=scheduler,
            clock=clock,
        )

    return _make
