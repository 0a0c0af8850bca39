"""Wiring for the session controller.

Commands never construct the controller themselves; they ask this module for
one wired to the persisted snapshot, the activity database, console
notifications and the right kind of scheduler.
"""

from __future__ import annotations

from pathlib import Path

from rich.console import Console

from focuscycle_cli.models.config_models import AppConfig
from focuscycle_cli.models.session.controller import SessionController
from focuscycle_cli.models.session.history import HistoryLogger
from focuscycle_cli.models.session.scheduler import (
    AsyncioScheduler,
    Clock,
    DeferredScheduler,
    Scheduler,
)
from focuscycle_cli.models.session.state import SessionStateManager
from focuscycle_cli.models.session.ui import RichNotifier
from focuscycle_cli.services.config_service import get_config_service
from focuscycle_cli.utils.logger import get_logger
from focuscycle_cli.utils.ui.console import get_console


def build_controller(
    *,
    interactive: bool = False,
    config: AppConfig | None = None,
    console: Console | None = None,
    data_dir: Path | None = None,
    scheduler: Scheduler | None = None,
    clock: Clock | None = None,
) -> SessionController:
    """Create a controller restored from the persisted snapshot.

    One-shot commands exit long before any deadline, so they get a scheduler
    that only records timers and a zero grace delay: a completed work phase
    moves straight into its break within the same command. ``interactive``
    hosts run on an asyncio loop and keep the configured grace delay.
    """
    app_config = config or get_config_service().config
    session_config = app_config.session
    if interactive:
        scheduler = scheduler or AsyncioScheduler()
    else:
        scheduler = scheduler or DeferredScheduler()
        session_config = session_config.model_copy(update={"grace_delay_sec": 0.0})

    store = SessionStateManager(data_dir / "state" if data_dir else None)
    history = get_history_logger(data_dir)
    notifier = RichNotifier(
        console or get_console(), muted=app_config.output.sounds_muted
    )

    return SessionController(
        config=session_config,
        store=store,
        activity_log=history,
        notifier=notifier,
        scheduler=scheduler,
        clock=clock,
        logger=get_logger().getChild("session"),
    )


def get_history_logger(data_dir: Path | None = None) -> HistoryLogger:
    return HistoryLogger(data_dir / "activity_log.db" if data_dir else None)
