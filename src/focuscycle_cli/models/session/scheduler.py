"""Clock and deferred-callback scheduling for the session controller.

All controller time values are integer epoch milliseconds taken from a
``Clock``. Timers are plain deferred callbacks: nothing here blocks.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from typing import Protocol

logger = logging.getLogger(__name__)


class Clock(Protocol):
    """Source of wall-clock time."""

    def now_ms(self) -> int: ...

    def today(self) -> str: ...


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Runs ``callback`` once after ``delay_sec`` seconds."""

    def call_later(self, delay_sec: float, callback: Callable[[], None]) -> TimerHandle: ...


class SystemClock:
    """Wall clock backed by ``time.time`` and the local calendar date."""

    def now_ms(self) -> int:
        return int(time.time() * 1000)

    def today(self) -> str:
        return date.today().isoformat()


class AsyncioScheduler:
    """Schedules callbacks on an asyncio event loop via ``loop.call_later``."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay_sec: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, delay_sec), callback)


@dataclass
class DeferredTimer:
    """Handle for a deadline that is recorded but never fired in-process."""

    deadline_sec: float
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class DeferredScheduler:
    """Scheduler for one-shot commands that exit before any deadline.

    Deadlines are kept for inspection only. The next process to start picks
    the countdown back up from the persisted snapshot.
    """

    def __init__(self) -> None:
        self.timers: list[DeferredTimer] = []

    def call_later(self, delay_sec: float, callback: Callable[[], None]) -> DeferredTimer:
        timer = DeferredTimer(deadline_sec=time.monotonic() + max(0.0, delay_sec))
        self.timers.append(timer)
        logger.debug("Deferred timer recorded for %.1fs from now", delay_sec)
        return timer
