"""Session timer commands: start, pause, resume and watch work/break cycles."""

import asyncio

import typer
from rich.live import Live
from rich.prompt import Prompt

from focuscycle_cli.commands.decorators import AppError, command_wrapper
from focuscycle_cli.models.session.constants import (
    REASON_AWAITING_ACTIVITY,
    REASON_BREAK_COMPLETED,
    REASON_BREAK_STARTED,
    REASON_WORK_COMPLETED,
)
from focuscycle_cli.models.session.controller import ActionResult, SessionController
from focuscycle_cli.models.session.keyboard import KeyboardHandler
from focuscycle_cli.models.session.state import WorkActivity
from focuscycle_cli.models.session.ui import TimerDisplay, describe_restore, describe_status
from focuscycle_cli.services.config_service import get_config_service
from focuscycle_cli.services.session_service import build_controller
from focuscycle_cli.utils.exit_codes import ERROR_INVALID_STATE
from focuscycle_cli.utils.ui.console import get_console
from focuscycle_cli.utils.ui.formatters import (
    format_info,
    format_output,
    format_success,
    format_warning,
)

console = get_console()
app = typer.Typer(help="Work/break session timer")

WATCH_POLL_SEC = 0.25

REJECTION_MESSAGES = {
    "not_enabled": "Session timer is disabled. Run 'focuscycle session enable' first.",
    "already_enabled": "Session timer is already enabled.",
    "already_running": "A phase is already running.",
    "not_running": "Nothing is running.",
    "already_paused": "The session is already paused.",
    "not_paused": "The session is not paused.",
    "pause_not_allowed": "Pausing is turned off in the session settings.",
    "awaiting_acknowledgement": (
        "The last work session finished while away. "
        "Run 'focuscycle session advance' first."
    ),
    "no_pending_activity": "No work start is waiting for an activity.",
    "nothing_to_advance": "Nothing is waiting to advance.",
    "invalid_activity": "Activity name must not be empty.",
}


def _controller(interactive: bool = False) -> SessionController:
    config_service = get_config_service()
    for message in config_service.load_errors:
        format_warning(message)

    controller = build_controller(interactive=interactive, config=config_service.config)
    restored = describe_restore(
        controller.restore_outcome, controller.state, controller.now_ms()
    )
    if restored:
        format_info(restored)
    return controller


def _status_line(controller: SessionController) -> str:
    return describe_status(controller.state, controller.config, controller.now_ms())


def _check(result: ActionResult) -> ActionResult:
    if not result.accepted:
        raise AppError(
            REJECTION_MESSAGES.get(result.reason, result.reason),
            exit_code=ERROR_INVALID_STATE,
        )
    return result


def _ask_partial_work(elapsed_ms: int) -> WorkActivity | None:
    minutes = elapsed_ms // 60_000
    name = Prompt.ask(
        f"You worked {minutes} minutes. What did you work on? (blank to skip)",
        default="",
        show_default=False,
        console=console,
    ).strip()
    if not name:
        return None
    return WorkActivity(name=name)


def _start(controller: SessionController, activity: str | None, description: str, skip: bool):
    if activity:
        return controller.start_work(WorkActivity(name=activity, description=description))
    if skip:
        return controller.start_work(skip_activity=True)

    result = _check(controller.start_work())
    if result.reason != REASON_AWAITING_ACTIVITY:
        return result

    name = Prompt.ask(
        "What will you work on? (blank to skip)",
        default="",
        show_default=False,
        console=console,
    ).strip()
    if name:
        return controller.submit_activity(name, description)
    return controller.skip_activity()


@app.command("enable")
@command_wrapper
def enable_session() -> None:
    """Turn the session timer on and reset its counters."""
    controller = _controller()
    _check(controller.enable())
    format_success("Session timer enabled")
    console.print(_status_line(controller))


@app.command("disable")
@command_wrapper
def disable_session() -> None:
    """Turn the session timer off, stopping any running phase."""
    controller = _controller()
    _check(controller.disable())
    format_success("Session timer disabled")


@app.command("start")
@command_wrapper
def start_session(
    activity: str | None = typer.Option(
        None, "--activity", "-a", help="What you will work on"
    ),
    description: str = typer.Option("", "--description", "-d", help="Activity details"),
    skip: bool = typer.Option(False, "--skip", help="Start without naming an activity"),
) -> None:
    """Start the next work period."""
    controller = _controller()
    _check(_start(controller, activity, description, skip))
    format_success(f"Work session {controller.session_number} started")
    console.print(_status_line(controller))


@app.command("pause")
@command_wrapper
def pause_session() -> None:
    """Pause the running phase."""
    controller = _controller()
    _check(controller.pause())
    format_success("Paused")
    console.print(_status_line(controller))


@app.command("resume")
@command_wrapper
def resume_session() -> None:
    """Resume a paused phase with the time it had left."""
    controller = _controller()
    _check(controller.resume())
    format_success("Resumed")
    console.print(_status_line(controller))


@app.command("abandon")
@command_wrapper
def abandon_session(
    activity: str | None = typer.Option(
        None, "--activity", "-a", help="Log partial work under this name"
    ),
    no_prompt: bool = typer.Option(
        False, "--no-prompt", help="Do not ask what was worked on"
    ),
) -> None:
    """Stop the running phase early without counting it."""
    controller = _controller()

    def describe(elapsed_ms: int) -> WorkActivity | None:
        if activity:
            return WorkActivity(name=activity)
        if no_prompt:
            return None
        return _ask_partial_work(elapsed_ms)

    _check(controller.abandon(describe))
    format_warning(f"Session abandoned. Next up: session {controller.session_number}")


@app.command("advance")
@command_wrapper
def advance_session() -> None:
    """Carry out a transition that finished while nothing was watching."""
    controller = _controller()
    result = _check(controller.advance())
    messages = {
        REASON_WORK_COMPLETED: "Work session logged, break started",
        REASON_BREAK_STARTED: "Break started",
        REASON_BREAK_COMPLETED: "Break finished",
    }
    format_success(messages[result.reason])
    console.print(_status_line(controller))


@app.command("reset")
@command_wrapper
def reset_session(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Reset the session counters."""
    if not yes and not typer.confirm("Reset the session counters?"):
        format_info("Cancelled")
        raise typer.Exit(0)

    controller = _controller()
    _check(controller.reset_counters())
    format_success("Session counter reset")


@app.command("toggle")
@command_wrapper
def toggle_session() -> None:
    """Enable, start, or abandon depending on the current state."""
    controller = _controller()
    result = controller.toggle(describe=_ask_partial_work)
    if result.reason == REASON_AWAITING_ACTIVITY:
        result = _start(controller, None, "", skip=False)
    _check(result)
    console.print(_status_line(controller))


@app.command("status")
@command_wrapper
def session_status(
    output: str = typer.Option("pretty", "--output", "-o", help="Output format (pretty, json)"),
) -> None:
    """Show the current phase and time left."""
    controller = _controller()
    state = controller.state
    status = _status_line(controller)

    if output == "json":
        data = state.to_dict()
        data["remaining_ms"] = controller.remaining_ms()
        data["status"] = status
        format_output(data, "json")
        return

    console.print(f"[bold]{status}[/bold]")
    format_output(
        {
            "enabled": state.enabled,
            "phase": state.phase,
            "running": state.running,
            "paused": state.paused,
            "session": state.session_number,
            "completed_today": state.cycle_count,
            "completed_total": state.total_sessions,
            "activity": state.current_work_activity.name
            if state.current_work_activity
            else None,
        }
    )


def _handle_watch_key(controller: SessionController, key: str, describe) -> None:
    if key == "p":
        controller.pause()
    elif key == "r":
        controller.resume()
    elif key == "a":
        controller.abandon(describe)
    elif key == "s":
        controller.start_work(skip_activity=True)
    elif key == "n":
        controller.advance()


@app.command("watch")
@command_wrapper
async def watch_session() -> None:
    """Show a live timer that advances phases automatically."""
    controller = _controller(interactive=True)
    display = TimerDisplay()
    keyboard = KeyboardHandler()
    config = controller.config

    def render():
        return display.create_layout(controller.state, config, controller.now_ms())

    try:
        with Live(render(), console=console, refresh_per_second=4, screen=True) as live:

            def describe(elapsed_ms: int) -> WorkActivity | None:
                # The prompt needs the normal screen and line-buffered input
                live.stop()
                keyboard.stop()
                try:
                    return _ask_partial_work(elapsed_ms)
                finally:
                    keyboard.start()
                    live.start(refresh=True)

            while True:
                key = keyboard.get_key()
                if key == "q":
                    break
                if key:
                    _handle_watch_key(controller, key, describe)

                live.update(render())
                await asyncio.sleep(WATCH_POLL_SEC)
    except (KeyboardInterrupt, asyncio.CancelledError):
        # Ctrl-C ends the watch; the snapshot keeps the countdown
        console.print("[dim]Stopped watching[/dim]")
    finally:
        keyboard.stop()
        controller.shutdown()

    console.print(_status_line(controller))
