"""Work/break session controller.

Owns the phase state machine, countdown scheduling, pause/resume arithmetic,
the restore-on-start protocol and the auto-logging policy. All mutation
happens synchronously inside the public methods or inside a scheduled
callback; every callback is guarded by a generation number so one that fires
after being cancelled does nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from focuscycle_cli.models.config_models import SessionConfig

from .constants import (
    ACTION_ABANDON,
    ACTION_ADVANCE,
    ACTION_DISABLE,
    ACTION_ENABLE,
    ACTION_PAUSE,
    ACTION_RESET,
    ACTION_RESUME,
    ACTION_SKIP_ACTIVITY,
    ACTION_START_WORK,
    ACTION_SUBMIT_ACTIVITY,
    BREAK_LONG,
    BREAK_SHORT,
    DUPLICATE_LOOKBACK,
    EVENT_BACK_TO_WORK,
    EVENT_BREAK_START,
    EVENT_DAILY_RESET,
    EVENT_SESSION_ABANDONED,
    EVENT_TICK,
    EVENT_WORK_COMPLETE,
    LOG_SOURCE,
    MAX_ACTIVITY_NAME_LENGTH,
    PARTIAL_WORK_THRESHOLD_MS,
    PHASE_BREAK,
    PHASE_IDLE,
    PHASE_WORK,
    REASON_ABANDONED,
    REASON_ALREADY_ENABLED,
    REASON_ALREADY_PAUSED,
    REASON_ALREADY_RUNNING,
    REASON_AWAITING_ACKNOWLEDGEMENT,
    REASON_AWAITING_ACTIVITY,
    REASON_BREAK_COMPLETED,
    REASON_BREAK_STARTED,
    REASON_DISABLED,
    REASON_ENABLED,
    REASON_INVALID_ACTIVITY,
    REASON_NO_PENDING_ACTIVITY,
    REASON_NOT_ENABLED,
    REASON_NOT_PAUSED,
    REASON_NOT_RUNNING,
    REASON_NOTHING_TO_ADVANCE,
    REASON_PAUSE_NOT_ALLOWED,
    REASON_PAUSED,
    REASON_RESET,
    REASON_RESUMED,
    REASON_STARTED,
    REASON_WORK_COMPLETED,
    TAG_ABANDONED,
    TAG_BREAK,
    TAG_INTERRUPTED,
    TAG_PARTIAL,
    TAG_RESET,
    TAG_SESSION,
    TAG_WORK,
)
from .notifications import ActivityEntry, ActivityLog, NotificationPort, SessionEvent
from .scheduler import Clock, Scheduler, SystemClock, TimerHandle
from .state import SessionState, SessionStateManager, WorkActivity

RestoreOutcome = Literal["none", "disabled", "resumed", "paused", "expired"]
DescribePartialWork = Callable[[int], "WorkActivity | None"]


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a controller operation.

    Rejected transitions come back with ``accepted=False`` and a reason
    instead of raising.
    """

    action: str
    accepted: bool
    reason: str
    state: SessionState


class SessionController:
    """Drives the repeating Work -> Break cycle."""

    def __init__(
        self,
        *,
        config: SessionConfig,
        store: SessionStateManager,
        activity_log: ActivityLog | None,
        notifier: NotificationPort | None,
        scheduler: Scheduler,
        clock: Clock | None = None,
        logger: logging.Logger | None = None,
    ):
        self._config = config
        self._store = store
        self._activity_log = activity_log
        self._notifier = notifier
        self._scheduler = scheduler
        self._clock = clock or SystemClock()
        self._logger = logger or logging.getLogger(__name__)

        self._state = SessionState()
        self._phase_timer: TimerHandle | None = None
        self._tick_timer: TimerHandle | None = None
        self._phase_generation = 0
        self._tick_generation = 0
        self._awaiting_activity = False
        self.restore_outcome: RestoreOutcome = "none"

        self._restore()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state.copy()

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def awaiting_activity(self) -> bool:
        return self._awaiting_activity

    @property
    def session_number(self) -> int:
        return self._state.session_number

    def now_ms(self) -> int:
        return self._clock.now_ms()

    def remaining_ms(self) -> int:
        return self._state.remaining_at(self._clock.now_ms())

    # ------------------------------------------------------------------
    # Restore-on-start
    # ------------------------------------------------------------------

    def _restore(self) -> None:
        loaded = self._store.load()
        if loaded is None:
            self._logger.info("No session snapshot found, starting disabled")
            self.restore_outcome = "disabled"
            return

        self._state = loaded
        state = self._state
        if not state.enabled:
            self.restore_outcome = "disabled"
            return

        self.check_daily_reset()

        if not state.running:
            return

        if not state.has_countdown:
            self._logger.warning("Snapshot marked running without a countdown, stopping it")
            state.clear_countdown()
            self._persist()
            return

        if state.paused:
            self.restore_outcome = "paused"
            self._logger.info(
                "Restored paused %s phase: remaining=%dms",
                state.phase,
                state.remaining_at_pause(),
            )
            return

        now = self._clock.now_ms()
        elapsed = now - state.start_time
        time_left = state.remaining_duration_ms - elapsed

        if time_left <= 0:
            state.running = False
            state.finished = True
            self._persist()
            self.restore_outcome = "expired"
            self._logger.info(
                "%s phase ran out while away (%dms ago), awaiting acknowledgement",
                state.phase,
                -time_left,
            )
            return

        state.remaining_duration_ms = time_left
        state.start_time = now
        self._schedule_phase_end(time_left)
        if state.phase == PHASE_WORK:
            self._start_ticks()
        self._persist()
        self.restore_outcome = "resumed"
        self._logger.info("Restored %s phase: remaining=%dms", state.phase, time_left)

    # ------------------------------------------------------------------
    # Enable / disable
    # ------------------------------------------------------------------

    def enable(self) -> ActionResult:
        if self._state.enabled:
            return self._result(ACTION_ENABLE, False, REASON_ALREADY_ENABLED)

        self._cancel_timers()
        self._awaiting_activity = False
        self._state = SessionState(
            enabled=True,
            phase=PHASE_IDLE,
            last_reset_date=self._clock.today(),
        )
        self._persist()
        self._logger.info("Session timer enabled")
        return self._result(ACTION_ENABLE, True, REASON_ENABLED)

    def disable(self) -> ActionResult:
        if not self._state.enabled:
            return self._result(ACTION_DISABLE, False, REASON_NOT_ENABLED)

        self._cancel_timers()
        self._awaiting_activity = False
        if self._state.phase == PHASE_WORK and self._state.finished:
            # Ran out while away; it still counts
            session_number = self._record_completed_work()
            self._logger.info("Work period completed before disable: session=%d", session_number)
        elif self._state.phase == PHASE_WORK and self._state.running:
            self._log(
                "Session ended",
                "Work session interrupted",
                [TAG_SESSION, TAG_INTERRUPTED],
            )

        self._state = SessionState.disabled(self._state)
        self._persist()
        self._logger.info("Session timer disabled")
        return self._result(ACTION_DISABLE, True, REASON_DISABLED)

    # ------------------------------------------------------------------
    # Work phase
    # ------------------------------------------------------------------

    def start_work(
        self,
        activity: WorkActivity | None = None,
        *,
        skip_activity: bool = False,
    ) -> ActionResult:
        """Start the next work period.

        With auto-logging on and no activity given, the start is deferred
        until ``submit_activity`` or ``skip_activity`` is called.
        """
        rejection = self._start_rejection()
        if rejection:
            return self._result(ACTION_START_WORK, False, rejection)

        if activity is None and not skip_activity and self._config.auto_log:
            self._awaiting_activity = True
            self._logger.info("Work start deferred until an activity is described")
            return self._result(ACTION_START_WORK, True, REASON_AWAITING_ACTIVITY)

        self._begin_work(activity)
        return self._result(ACTION_START_WORK, True, REASON_STARTED)

    def submit_activity(self, name: str, description: str = "") -> ActionResult:
        if not self._awaiting_activity:
            return self._result(ACTION_SUBMIT_ACTIVITY, False, REASON_NO_PENDING_ACTIVITY)

        clean_name = _sanitize_text(name)[:MAX_ACTIVITY_NAME_LENGTH]
        if not clean_name:
            return self._result(ACTION_SUBMIT_ACTIVITY, False, REASON_INVALID_ACTIVITY)

        rejection = self._start_rejection()
        if rejection:
            self._awaiting_activity = False
            return self._result(ACTION_SUBMIT_ACTIVITY, False, rejection)

        self._begin_work(WorkActivity(name=clean_name, description=description.strip()))
        return self._result(ACTION_SUBMIT_ACTIVITY, True, REASON_STARTED)

    def skip_activity(self) -> ActionResult:
        if not self._awaiting_activity:
            return self._result(ACTION_SKIP_ACTIVITY, False, REASON_NO_PENDING_ACTIVITY)

        rejection = self._start_rejection()
        if rejection:
            self._awaiting_activity = False
            return self._result(ACTION_SKIP_ACTIVITY, False, rejection)

        self._begin_work(None)
        return self._result(ACTION_SKIP_ACTIVITY, True, REASON_STARTED)

    def _start_rejection(self) -> str | None:
        state = self._state
        if not state.enabled:
            return REASON_NOT_ENABLED
        if state.running:
            return REASON_ALREADY_RUNNING
        if state.phase == PHASE_WORK and state.finished:
            return REASON_AWAITING_ACKNOWLEDGEMENT
        return None

    def _begin_work(self, activity: WorkActivity | None) -> None:
        self._cancel_timers()
        self._awaiting_activity = False

        state = self._state
        duration_ms = self._config.work_duration_ms
        state.clear_countdown()
        state.phase = PHASE_WORK
        state.running = True
        state.current_work_activity = activity
        state.break_type = None
        state.original_duration_ms = duration_ms
        state.remaining_duration_ms = duration_ms
        state.start_time = self._clock.now_ms()

        self._schedule_phase_end(duration_ms)
        self._start_ticks()
        self._persist()
        self._logger.info(
            "Work period started: session=%d duration=%dmin activity=%s",
            state.session_number,
            self._config.work_duration_min,
            activity.name if activity else None,
        )

    def _record_completed_work(self) -> int:
        """Count and log the work period that just ended; returns its number."""
        state = self._state
        duration_min = (state.original_duration_ms or self._config.work_duration_ms) // 60_000

        state.cycle_count += 1
        state.total_sessions += 1
        session_number = state.cycle_count

        activity = state.current_work_activity
        if activity is not None:
            self._log(
                activity.name,
                activity.description or f"Completed {duration_min} minute work session",
                [TAG_SESSION, TAG_WORK],
            )
        else:
            self._log(
                f"Work period #{session_number} completed",
                f"Completed {duration_min} minute focused work session",
                [TAG_SESSION, TAG_WORK],
            )

        state.current_work_activity = None
        return session_number

    def _complete_work(self) -> None:
        self._cancel_timers()
        state = self._state
        session_number = self._record_completed_work()

        state.clear_countdown()
        state.break_pending = True
        self._persist()
        self._logger.info("Work period completed: session=%d", session_number)
        self._notify(EVENT_WORK_COMPLETE, {"session_number": session_number})

        grace_sec = self._config.grace_delay_sec
        if grace_sec > 0:
            self._phase_timer = self._guarded_call_later(grace_sec, self._start_break)
        else:
            self._start_break()

    # ------------------------------------------------------------------
    # Break phase
    # ------------------------------------------------------------------

    def _start_break(self) -> None:
        self._cancel_timers()
        state = self._state
        is_long = self._config.is_long_break(state.cycle_count)
        duration_min = self._config.break_duration_for(state.cycle_count)
        duration_ms = duration_min * 60_000

        state.clear_countdown()
        state.phase = PHASE_BREAK
        state.running = True
        state.break_type = BREAK_LONG if is_long else BREAK_SHORT
        state.original_duration_ms = duration_ms
        state.remaining_duration_ms = duration_ms
        state.start_time = self._clock.now_ms()

        self._schedule_phase_end(duration_ms)
        self._persist()
        self._logger.info(
            "Break started: type=%s duration=%dmin after %d sessions",
            state.break_type,
            duration_min,
            state.cycle_count,
        )
        self._notify(
            EVENT_BREAK_START,
            {
                "break_type": state.break_type,
                "duration_min": duration_min,
                "sound": (
                    self._config.long_break_sound
                    if is_long
                    else self._config.short_break_sound
                ),
            },
        )

    def _end_break(self) -> None:
        self._cancel_timers()
        state = self._state
        break_type = state.break_type or BREAK_SHORT

        if self._config.log_breaks:
            label = "Long break completed" if break_type == BREAK_LONG else "Break completed"
            self._log(
                label,
                "Finished rest period, ready for next work session",
                [TAG_SESSION, TAG_BREAK, f"{break_type}-break"],
            )

        state.clear_countdown()
        self._persist()
        self._logger.info("Break completed: type=%s", break_type)
        self._notify(EVENT_BACK_TO_WORK, {"sound": self._config.resume_sound})

        if self._config.auto_start:
            self._begin_work(None)

    # ------------------------------------------------------------------
    # Pause / resume / abandon
    # ------------------------------------------------------------------

    def pause(self) -> ActionResult:
        state = self._state
        if not state.enabled:
            return self._result(ACTION_PAUSE, False, REASON_NOT_ENABLED)
        if not state.running:
            return self._result(ACTION_PAUSE, False, REASON_NOT_RUNNING)
        if state.paused:
            return self._result(ACTION_PAUSE, False, REASON_ALREADY_PAUSED)
        if not self._config.pause_allowed:
            return self._result(ACTION_PAUSE, False, REASON_PAUSE_NOT_ALLOWED)

        self._cancel_timers()
        state.paused = True
        state.paused_at = self._clock.now_ms()
        self._persist()
        self._logger.info(
            "%s phase paused: remaining=%dms", state.phase, state.remaining_at_pause()
        )
        return self._result(ACTION_PAUSE, True, REASON_PAUSED)

    def resume(self) -> ActionResult:
        state = self._state
        if not state.enabled:
            return self._result(ACTION_RESUME, False, REASON_NOT_ENABLED)
        if not state.paused:
            return self._result(ACTION_RESUME, False, REASON_NOT_PAUSED)

        self.check_daily_reset()

        remaining = max(0, state.remaining_at_pause())
        state.remaining_duration_ms = remaining
        state.start_time = self._clock.now_ms()
        state.paused = False
        state.paused_at = None

        self._schedule_phase_end(remaining)
        if state.phase == PHASE_WORK:
            self._start_ticks()
        self._persist()
        self._logger.info("%s phase resumed: remaining=%dms", state.phase, remaining)
        return self._result(ACTION_RESUME, True, REASON_RESUMED)

    def abandon(self, describe: DescribePartialWork | None = None) -> ActionResult:
        """Stop the running phase early and go back to a stopped work phase.

        ``describe`` is called with the elapsed milliseconds when enough work
        was done to be worth logging; returning a ``WorkActivity`` logs it as
        partial work instead of the generic abandoned entry.
        """
        state = self._state
        if not state.enabled:
            return self._result(ACTION_ABANDON, False, REASON_NOT_ENABLED)
        if not state.running:
            return self._result(ACTION_ABANDON, False, REASON_NOT_RUNNING)

        remaining = state.remaining_at(self._clock.now_ms())
        elapsed_ms = (state.original_duration_ms or 0) - remaining
        self._cancel_timers()
        self._awaiting_activity = False

        was_working = state.phase == PHASE_WORK
        abandoned_session = state.session_number if was_working else state.cycle_count

        partial: WorkActivity | None = None
        if (
            was_working
            and self._config.auto_log
            and elapsed_ms > PARTIAL_WORK_THRESHOLD_MS
            and describe is not None
        ):
            partial = describe(elapsed_ms)

        if partial is not None:
            self._log(
                partial.name,
                partial.description
                or f"Partial work ({elapsed_ms // 60_000} min) before abandoning "
                f"session {abandoned_session}",
                [TAG_SESSION, TAG_PARTIAL],
            )
        else:
            self._log(
                f"Session {abandoned_session} abandoned",
                f"Session interrupted, restarting at session {state.session_number}",
                [TAG_SESSION, TAG_ABANDONED],
            )

        state.clear_countdown()
        state.phase = PHASE_WORK
        state.current_work_activity = None
        self._persist()
        self._logger.info(
            "Session %d abandoned after %dms (%s phase)",
            abandoned_session,
            elapsed_ms,
            PHASE_WORK if was_working else PHASE_BREAK,
        )
        self._notify(EVENT_SESSION_ABANDONED, {"session_number": abandoned_session})
        return self._result(ACTION_ABANDON, True, REASON_ABANDONED)

    # ------------------------------------------------------------------
    # Acknowledgement, counters, toggling
    # ------------------------------------------------------------------

    def advance(self) -> ActionResult:
        """Carry out a transition that is waiting on the user."""
        state = self._state
        if not state.enabled:
            return self._result(ACTION_ADVANCE, False, REASON_NOT_ENABLED)

        if state.phase == PHASE_WORK and state.finished:
            self._complete_work()
            return self._result(ACTION_ADVANCE, True, REASON_WORK_COMPLETED)
        if state.break_pending:
            self._start_break()
            return self._result(ACTION_ADVANCE, True, REASON_BREAK_STARTED)
        if state.phase == PHASE_BREAK and state.finished:
            self._end_break()
            return self._result(ACTION_ADVANCE, True, REASON_BREAK_COMPLETED)

        return self._result(ACTION_ADVANCE, False, REASON_NOTHING_TO_ADVANCE)

    def check_daily_reset(self) -> bool:
        """Zero the session counter once per calendar day.

        ``total_sessions`` is left alone.
        """
        state = self._state
        if not state.enabled or not self._config.auto_reset_daily:
            return False

        today = self._clock.today()
        if state.last_reset_date == today:
            return False

        previous = state.last_reset_date
        state.cycle_count = 0
        state.last_reset_date = today
        self._log(
            "Session counter reset",
            "Daily reset: starting a fresh cycle",
            [TAG_SESSION, TAG_RESET],
        )
        self._persist()
        self._logger.info("Daily reset: %s -> %s", previous, today)
        self._notify(EVENT_DAILY_RESET, {})
        return True

    def reset_counters(self) -> ActionResult:
        state = self._state
        if not state.enabled:
            return self._result(ACTION_RESET, False, REASON_NOT_ENABLED)

        state.cycle_count = 0
        state.total_sessions = 0
        self._log(
            "Session counter reset",
            "Starting fresh cycle",
            [TAG_SESSION, TAG_RESET],
        )
        self._persist()
        self._logger.info("Session counters reset")
        return self._result(ACTION_RESET, True, REASON_RESET)

    def toggle(self, describe: DescribePartialWork | None = None) -> ActionResult:
        """One-button control: enable, abandon the running phase, or start work."""
        if not self._state.enabled:
            return self.enable()
        if self._state.running:
            return self.abandon(describe)
        return self.start_work()

    def reconfigure(self, config: SessionConfig) -> None:
        """Apply a validated config. Durations take effect from the next phase."""
        self._config = config
        self._logger.info("Session config updated")
        if self._state.running and not self._state.paused and self._state.phase == PHASE_WORK:
            self._start_ticks()
        else:
            self._cancel_ticks()

    def shutdown(self) -> None:
        """Cancel pending timers; the persisted snapshot is left as is."""
        self._cancel_timers()

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def _guarded_call_later(self, delay_sec: float, callback: Callable[[], None]) -> TimerHandle:
        generation = self._phase_generation

        def fire() -> None:
            if generation != self._phase_generation:
                self._logger.debug("Ignoring stale phase timer")
                return
            self._phase_timer = None
            callback()

        return self._scheduler.call_later(delay_sec, fire)

    def _schedule_phase_end(self, delay_ms: int) -> None:
        self._cancel_phase_timer()
        self._phase_timer = self._guarded_call_later(delay_ms / 1000, self._on_phase_deadline)

    def _on_phase_deadline(self) -> None:
        state = self._state
        if not state.enabled or not state.running or state.paused:
            return
        if state.phase == PHASE_WORK:
            self._complete_work()
        elif state.phase == PHASE_BREAK:
            self._end_break()

    def _start_ticks(self) -> None:
        self._cancel_ticks()
        state = self._state
        if not (
            self._config.ticks_enabled
            and state.enabled
            and state.running
            and not state.paused
            and state.phase == PHASE_WORK
        ):
            return

        generation = self._tick_generation
        interval = self._config.tick_interval_sec

        def tick() -> None:
            if generation != self._tick_generation:
                return
            if not (self._state.running and not self._state.paused):
                return
            self._notify(EVENT_TICK, {"sound": self._config.tick_sound})
            self._tick_timer = self._scheduler.call_later(interval, tick)

        self._tick_timer = self._scheduler.call_later(interval, tick)

    def _cancel_phase_timer(self) -> None:
        self._phase_generation += 1
        if self._phase_timer is not None:
            self._phase_timer.cancel()
            self._phase_timer = None

    def _cancel_ticks(self) -> None:
        self._tick_generation += 1
        if self._tick_timer is not None:
            self._tick_timer.cancel()
            self._tick_timer = None

    def _cancel_timers(self) -> None:
        self._cancel_phase_timer()
        self._cancel_ticks()

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------

    def _persist(self) -> None:
        self._store.save(self._state)

    def _log(self, label: str, description: str, tags: list[str]) -> bool:
        """Write an activity entry unless logging is off or it is a duplicate."""
        if not self._config.auto_log or self._activity_log is None:
            return False

        entry = ActivityEntry(
            label=label,
            description=description,
            timestamp=self._clock.now_ms(),
            source=LOG_SOURCE,
            tags=tags,
        )
        try:
            recent = self._activity_log.recent(LOG_SOURCE, DUPLICATE_LOOKBACK)
            fingerprint = entry.fingerprint
            if any(previous.fingerprint == fingerprint for previous in recent):
                self._logger.info("Skipping duplicate activity entry: %s", label)
                return False
            self._activity_log.append(entry)
        except Exception as e:
            self._logger.warning("Activity log write failed for %r: %s", label, e)
            return False

        self._logger.info("Logged activity: %s", label)
        return True

    def _notify(self, name: str, payload: dict) -> None:
        if self._notifier is None:
            return
        try:
            self._notifier.notify(SessionEvent(name=name, payload=payload))
        except Exception as e:
            self._logger.warning("Notification %s failed: %s", name, e)

    def _result(self, action: str, accepted: bool, reason: str) -> ActionResult:
        return ActionResult(
            action=action,
            accepted=accepted,
            reason=reason,
            state=self._state.copy(),
        )


def _sanitize_text(text: str) -> str:
    return " ".join(text.split())
