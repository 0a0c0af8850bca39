"""Activity log commands."""

from datetime import datetime

import typer

from focuscycle_cli.commands.decorators import command_wrapper
from focuscycle_cli.models.session.constants import LOG_SOURCE
from focuscycle_cli.services.session_service import get_history_logger
from focuscycle_cli.utils.ui.formatters import format_output, format_success

app = typer.Typer(help="Activity log written by the session timer")


@app.command("list")
@command_wrapper
def list_entries(
    limit: int = typer.Option(20, "--limit", "-n", min=1, help="Number of entries"),
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """List the most recent activity entries."""
    entries = get_history_logger().recent(LOG_SOURCE, limit)
    rows = [
        {
            "id": entry.id,
            "time": datetime.fromtimestamp(entry.timestamp / 1000).strftime("%Y-%m-%d %H:%M"),
            "label": entry.label,
            "description": entry.description,
            "tags": entry.tags,
        }
        for entry in entries
    ]
    format_output(rows, output)


@app.command("summary")
@command_wrapper
def daily_summary(
    day: str | None = typer.Option(None, "--day", help="Date as YYYY-MM-DD (default: today)"),
) -> None:
    """Count the work sessions logged on one day."""
    format_output(get_history_logger().get_daily_summary(day))


@app.command("prune")
@command_wrapper
def prune_entries(
    days: int = typer.Option(90, "--days", min=1, help="Keep entries newer than this"),
) -> None:
    """Delete old activity entries."""
    deleted = get_history_logger().delete_old_entries(days)
    format_success(f"Deleted {deleted} entries older than {days} days")
