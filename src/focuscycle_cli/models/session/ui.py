"""Terminal rendering for the session timer: status lines, alerts, live screen."""

import math

from rich.align import Align
from rich.console import Console, Group
from rich.layout import Layout
from rich.text import Text

from focuscycle_cli.models.config_models import SessionConfig

from .constants import (
    BREAK_LONG,
    EVENT_BACK_TO_WORK,
    EVENT_BREAK_START,
    EVENT_DAILY_RESET,
    EVENT_SESSION_ABANDONED,
    EVENT_TICK,
    EVENT_WORK_COMPLETE,
    PHASE_BREAK,
    PHASE_WORK,
)
from .notifications import SessionEvent
from .state import SessionState

SESSION_ICON = "🍅"


def _minutes_left(remaining_ms: int) -> int:
    return max(0, math.ceil(remaining_ms / 60_000))


def _long_break_hint(config: SessionConfig, session_number: int) -> str:
    if not config.long_break_enabled:
        return "Short breaks only"
    sessions_remaining = config.long_break_interval - (
        session_number % config.long_break_interval
    )
    if sessions_remaining == config.long_break_interval:
        return "Long break next!"
    plural = "" if sessions_remaining == 1 else "s"
    return f"{sessions_remaining} more session{plural} until long break"


def describe_status(state: SessionState, config: SessionConfig, now_ms: int) -> str:
    """One-line status text for the current snapshot."""
    if not state.enabled:
        return "Session timer disabled"

    if state.break_pending:
        return f"Work session {state.cycle_count} complete, break is ready to start"

    if state.finished:
        if state.phase == PHASE_WORK:
            return f"Work session {state.session_number} finished while away, ready for break"
        return "Break finished while away, ready for next work session"

    remaining = state.remaining_at(now_ms)
    minutes = _minutes_left(remaining)

    if state.paused:
        if state.phase == PHASE_WORK:
            return f"Paused - Work Session {state.session_number} - {minutes}m left"
        return f"Paused - Break - {minutes}m left"

    if not state.running:
        next_session = state.session_number
        next_break = "long break" if config.is_long_break(next_session) else "break"
        return (
            f"Ready to start session {next_session} "
            f"({config.work_duration_min}min work, then {next_break})"
        )

    if state.phase == PHASE_WORK:
        hint = _long_break_hint(config, state.session_number)
        return f"Work Session {state.session_number} - {minutes}m left | {hint}"

    break_label = "Long Break" if state.break_type == BREAK_LONG else "Short Break"
    return f"{break_label} - {minutes}m left | {state.cycle_count} sessions completed"


def describe_restore(outcome: str, state: SessionState, now_ms: int) -> str | None:
    """Message shown once when a persisted phase was picked back up."""
    if outcome == "resumed":
        minutes = _minutes_left(state.remaining_at(now_ms))
        return f"Session restored! {minutes} minutes remaining in {state.phase} period."
    if outcome == "expired":
        if state.phase == PHASE_WORK:
            return "Work session completed while away. Run 'focuscycle session advance' to start the break."
        return "Break completed while away. Run 'focuscycle session advance' to continue."
    return None


class RichNotifier:
    """Prints session alerts to the console and rings the bell for sound cues."""

    def __init__(self, console: Console, muted: bool = False):
        self.console = console
        self.muted = muted

    def notify(self, event: SessionEvent) -> None:
        payload = event.payload
        if event.name == EVENT_WORK_COMPLETE:
            self.console.print(
                f"{SESSION_ICON} [bold green]Work complete![/bold green] "
                f"Session {payload.get('session_number')} done."
            )
        elif event.name == EVENT_BREAK_START:
            kind = "Long break" if payload.get("break_type") == BREAK_LONG else "Short break"
            self.console.print(
                f"{SESSION_ICON} [bold cyan]{kind} time![/bold cyan] "
                f"Relax for {payload.get('duration_min')} minutes."
            )
            self._play(payload.get("sound"))
        elif event.name == EVENT_BACK_TO_WORK:
            self.console.print(f"{SESSION_ICON} [bold yellow]Back to work![/bold yellow]")
            self._play(payload.get("sound"))
        elif event.name == EVENT_SESSION_ABANDONED:
            self.console.print(
                f"{SESSION_ICON} [yellow]Session {payload.get('session_number')} abandoned.[/yellow]"
            )
        elif event.name == EVENT_DAILY_RESET:
            self.console.print(f"{SESSION_ICON} [dim]New day, session counter reset.[/dim]")
        elif event.name == EVENT_TICK:
            self._play(payload.get("sound"))

    def _play(self, sound: str | None) -> None:
        if self.muted or not sound or sound == "none":
            return
        self.console.bell()


class TimerDisplay:
    """Builds the full-screen layout used by ``session watch``."""

    def create_layout(self, state: SessionState, config: SessionConfig, now_ms: int) -> Layout:
        layout = Layout()
        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=3),
        )

        if not state.enabled:
            title, color = "DISABLED", "dim"
        elif state.paused:
            title, color = "PAUSED", "yellow"
        elif state.phase == PHASE_BREAK and state.running:
            title, color = "BREAK", "green"
        elif state.running:
            title, color = f"WORK SESSION {state.session_number}", "cyan"
        else:
            title, color = "READY", "white"

        header_text = Text(f"{SESSION_ICON}  {title}", style=f"bold {color}", justify="center")
        layout["header"].update(Align.center(header_text, vertical="middle"))
        layout["body"].update(
            Align.center(self._create_body(state, config, now_ms), vertical="middle")
        )
        layout["footer"].update(Align.center(self._create_footer(state), vertical="middle"))
        return layout

    def _create_body(self, state: SessionState, config: SessionConfig, now_ms: int) -> Group:
        components = []

        if state.current_work_activity is not None and state.phase == PHASE_WORK:
            components.append(
                Text(state.current_work_activity.name[:50], style="bold white", justify="center")
            )
            components.append(Text(""))

        remaining_sec = state.remaining_at(now_ms) // 1000
        mins, secs = divmod(remaining_sec, 60)
        if state.paused:
            timer_color = "yellow"
        elif remaining_sec < 60:
            timer_color = "red"
        else:
            timer_color = "cyan"
        components.append(Text(f"{mins:02d}:{secs:02d}", style=f"bold {timer_color}", justify="center"))
        components.append(Text(""))

        total_ms = state.original_duration_ms or 0
        if total_ms > 0:
            progress_pct = min(100, int((total_ms - remaining_sec * 1000) / total_ms * 100))
            bar_width = 40
            filled = int(bar_width * progress_pct / 100)
            bar = "▓" * filled + "░" * (bar_width - filled)
            components.append(Text(f"{bar}  {progress_pct}%", style="dim", justify="center"))
            components.append(Text(""))

        components.append(
            Text(describe_status(state, config, now_ms), style="dim", justify="center")
        )
        return Group(*components)

    def _create_footer(self, state: SessionState) -> Text:
        if state.paused:
            hints = "'r' resume  •  'a' abandon  •  'q' quit"
        elif state.running:
            hints = "'p' pause  •  'a' abandon  •  'q' quit"
        else:
            hints = "'s' start  •  'n' advance  •  'q' quit"
        return Text(hints, style="dim", justify="center")
