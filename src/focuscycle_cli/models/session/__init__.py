"""Work/break interval timer: state machine, persistence and activity log."""

from .controller import ActionResult, SessionController
from .history import HistoryLogger
from .keyboard import KeyboardHandler
from .notifications import ActivityEntry, NotificationPort, SessionEvent
from .scheduler import AsyncioScheduler, DeferredScheduler, SystemClock
from .state import SessionState, SessionStateManager, WorkActivity
from .ui import RichNotifier, TimerDisplay, describe_restore, describe_status

__all__ = [
    "ActionResult",
    "ActivityEntry",
    "AsyncioScheduler",
    "DeferredScheduler",
    "HistoryLogger",
    "KeyboardHandler",
    "NotificationPort",
    "RichNotifier",
    "SessionController",
    "SessionEvent",
    "SessionState",
    "SessionStateManager",
    "SystemClock",
    "TimerDisplay",
    "WorkActivity",
    "describe_restore",
    "describe_status",
]
