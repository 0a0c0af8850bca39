"""Phase, action, reason and event constants used by the session controller."""

from __future__ import annotations

PHASE_IDLE = "idle"
PHASE_WORK = "work"
PHASE_BREAK = "break"

BREAK_SHORT = "short"
BREAK_LONG = "long"

ACTION_ENABLE = "enable"
ACTION_DISABLE = "disable"
ACTION_START_WORK = "start_work"
ACTION_SUBMIT_ACTIVITY = "submit_activity"
ACTION_SKIP_ACTIVITY = "skip_activity"
ACTION_PAUSE = "pause"
ACTION_RESUME = "resume"
ACTION_ABANDON = "abandon"
ACTION_ADVANCE = "advance"
ACTION_RESET = "reset_counters"
ACTION_TOGGLE = "toggle"

REASON_ENABLED = "enabled"
REASON_DISABLED = "disabled"
REASON_STARTED = "started"
REASON_AWAITING_ACTIVITY = "awaiting_activity"
REASON_PAUSED = "paused"
REASON_RESUMED = "resumed"
REASON_ABANDONED = "abandoned"
REASON_WORK_COMPLETED = "work_completed"
REASON_BREAK_STARTED = "break_started"
REASON_BREAK_COMPLETED = "break_completed"
REASON_RESET = "reset"

REASON_NOT_ENABLED = "not_enabled"
REASON_ALREADY_ENABLED = "already_enabled"
REASON_ALREADY_RUNNING = "already_running"
REASON_NOT_RUNNING = "not_running"
REASON_ALREADY_PAUSED = "already_paused"
REASON_NOT_PAUSED = "not_paused"
REASON_PAUSE_NOT_ALLOWED = "pause_not_allowed"
REASON_AWAITING_ACKNOWLEDGEMENT = "awaiting_acknowledgement"
REASON_NO_PENDING_ACTIVITY = "no_pending_activity"
REASON_NOTHING_TO_ADVANCE = "nothing_to_advance"
REASON_INVALID_ACTIVITY = "invalid_activity"

EVENT_WORK_COMPLETE = "work_complete"
EVENT_BREAK_START = "break_start"
EVENT_BACK_TO_WORK = "back_to_work"
EVENT_SESSION_ABANDONED = "session_abandoned"
EVENT_DAILY_RESET = "daily_reset"
EVENT_TICK = "tick"

LOG_SOURCE = "session-timer"
TAG_SESSION = "pomodoro"
TAG_WORK = "work"
TAG_BREAK = "break"
TAG_PARTIAL = "partial"
TAG_ABANDONED = "abandoned"
TAG_INTERRUPTED = "interrupted"
TAG_RESET = "reset"

DUPLICATE_LOOKBACK = 10
PARTIAL_WORK_THRESHOLD_MS = 2 * 60_000
MAX_ACTIVITY_NAME_LENGTH = 120
