"""Configuration management commands."""

import typer

from focuscycle_cli.commands.decorators import AppError, command_wrapper
from focuscycle_cli.services.config_service import get_config_service
from focuscycle_cli.utils.exit_codes import ERROR_INVALID_ARGS
from focuscycle_cli.utils.ui.console import get_console
from focuscycle_cli.utils.ui.formatters import (
    format_info,
    format_output,
    format_success,
    format_warning,
)

app = typer.Typer(help="Configuration management commands")
console = get_console()


def _parse_value(value: str) -> str | int | float | bool:
    """Convert a command-line string to the type it most likely means."""
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if value.isdigit():
        return int(value)
    try:
        return float(value)
    except ValueError:
        return value


@app.command("show")
@command_wrapper
def show_config(
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """Show the current configuration."""
    config_service = get_config_service()
    for message in config_service.load_errors:
        format_warning(message)
    format_output(config_service.config.model_dump(), output)


@app.command("get")
@command_wrapper
def get_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., session.work_duration_min)"),
) -> None:
    """Get a configuration value."""
    value = get_config_service().get(key)
    if value is None:
        raise AppError(f"Configuration key '{key}' not found", exit_code=ERROR_INVALID_ARGS)
    if hasattr(value, "model_dump"):
        format_output(value.model_dump())
    else:
        console.print(value)


@app.command("set")
@command_wrapper
def set_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., session.work_duration_min)"),
    value: str = typer.Argument(..., help="Configuration value"),
) -> None:
    """Set a configuration value."""
    parsed_value = _parse_value(value)
    get_config_service().set(key, parsed_value)
    format_success(f"Configuration '{key}' set to '{parsed_value}'")


@app.command("reset")
@command_wrapper
def reset_config(
    key: str | None = typer.Argument(None, help="Configuration key to reset"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Reset configuration to defaults."""
    if not yes:
        target = f"'{key}'" if key else "entire configuration"
        if not typer.confirm(f"Are you sure you want to reset {target}?"):
            format_info("Cancelled")
            raise typer.Exit(0)

    get_config_service().reset_config(key)
    if key:
        format_success(f"Configuration '{key}' reset to default")
    else:
        format_success("Configuration reset to defaults")
