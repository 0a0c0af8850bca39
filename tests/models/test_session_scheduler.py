"""Tests for the clock and scheduler implementations."""

from __future__ import annotations

import asyncio
import time
from datetime import date

import pytest

from focuscycle_cli.models.config_models import SessionConfig
from focuscycle_cli.models.session.controller import SessionController
from focuscycle_cli.models.session.scheduler import (
    AsyncioScheduler,
    DeferredScheduler,
    SystemClock,
)
from focuscycle_cli.models.session.state import SessionState


class TestSystemClock:
    def test_now_ms_tracks_time(self):
        before = int(time.time() * 1000)
        now = SystemClock().now_ms()
        after = int(time.time() * 1000)
        assert before <= now <= after

    def test_today_is_iso_date(self):
        assert SystemClock().today() == date.today().isoformat()


class TestDeferredScheduler:
    def test_records_without_firing(self):
        scheduler = DeferredScheduler()
        fired = []
        scheduler.call_later(0, lambda: fired.append(True))
        assert fired == []
        assert len(scheduler.timers) == 1

    def test_cancel_marks_timer(self):
        scheduler = DeferredScheduler()
        timer = scheduler.call_later(60, lambda: None)
        timer.cancel()
        assert scheduler.timers == [timer]
        assert timer.cancelled is True

    def test_negative_delay_clamped(self):
        before = time.monotonic()
        timer = DeferredScheduler().call_later(-5, lambda: None)
        assert timer.deadline_sec >= before


class TestAsyncioScheduler:
    @pytest.mark.asyncio
    async def test_callback_fires(self):
        scheduler = AsyncioScheduler()
        fired = asyncio.Event()
        scheduler.call_later(0.01, fired.set)
        await asyncio.wait_for(fired.wait(), timeout=1)

    @pytest.mark.asyncio
    async def test_cancel_prevents_callback(self):
        scheduler = AsyncioScheduler()
        fired = []
        handle = scheduler.call_later(0.01, lambda: fired.append(True))
        handle.cancel()
        await asyncio.sleep(0.05)
        assert fired == []

    @pytest.mark.asyncio
    async def test_controller_completes_restored_work_on_loop(self, store, activity_log, notifier):
        clock = SystemClock()
        store.save(
            SessionState(
                enabled=True,
                phase="work",
                running=True,
                start_time=clock.now_ms(),
                remaining_duration_ms=50,
                original_duration_ms=25 * 60_000,
                last_reset_date=clock.today(),
            )
        )

        ctrl = SessionController(
            config=SessionConfig(grace_delay_sec=0.01),
            store=store,
            activity_log=activity_log,
            notifier=notifier,
            scheduler=AsyncioScheduler(),
            clock=clock,
        )
        await asyncio.sleep(0.3)

        assert ctrl.state.cycle_count == 1
        assert ctrl.state.phase == "break"
        assert ctrl.state.running is True
        assert notifier.names[:2] == ["work_complete", "break_start"]
        ctrl.shutdown()
