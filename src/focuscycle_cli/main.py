"""Main entry point for focuscycle."""

import typer

from focuscycle_cli import __version__
from focuscycle_cli.commands import config, log, session
from focuscycle_cli.utils.ui.console import get_console

app = typer.Typer(
    name="focuscycle",
    help="Work/break interval timer with an activity log",
    no_args_is_help=True,
)

console = get_console(highlight=False)

app.add_typer(session.app, name="session", help="Work/break session timer")
app.add_typer(config.app, name="config", help="Configuration management")
app.add_typer(log.app, name="log", help="Activity log")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]focuscycle[/bold] version [cyan]{__version__}[/cyan]")


if __name__ == "__main__":
    app()
