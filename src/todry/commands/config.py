"""Configuration management commands."""

from typing import Optional

import typer
from pydantic import ValidationError as PydanticValidationError

from todry.config import get_config_manager
from todry.models import ValidationError
from todry.services.session_service import get_session
from todry.utils.typer_helpers import SuggestingGroup
from todry.utils.ui.console import get_console
from todry.utils.ui.formatters import format_error, format_output, format_success

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Configuration management commands")
console = get_console()


def _parse_value(value: str) -> str | int | float | bool | None:
    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if lowered in ("null", "none"):
        return None
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


@app.command("view")
@command_wrapper(auth_required=False)
def view_config(
    output: str = typer.Option("yaml", "--output", "-o", help="Output format"),
) -> None:
    """View current configuration."""
    format_output(get_config_manager().config.model_dump(), output)


@app.command("get")
@command_wrapper(auth_required=False)
def get_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., undo.task_window)"),
) -> None:
    """Get a configuration value."""
    value = get_config_manager().get(key)
    if value is None and key != "storage.path":
        raise ValidationError(f"Configuration key '{key}' not found")
    console.print(value)


@app.command("set")
@command_wrapper(auth_required=False)
def set_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., undo.task_window)"),
    value: str = typer.Argument(..., help="Configuration value"),
) -> None:
    """Set a configuration value."""
    parsed_value = _parse_value(value)
    try:
        get_config_manager().set(key, parsed_value)
    except KeyError as e:
        raise ValidationError(f"Configuration key '{key}' not found") from e
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid value for '{key}': {value}") from e
    format_success(f"Configuration '{key}' set to '{parsed_value}'")


@app.command("reset")
@command_wrapper(auth_required=False)
def reset_config(
    key: Optional[str] = typer.Argument(None, help="Configuration key to reset"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Reset configuration to defaults."""
    if not yes:
        msg = "entire configuration" if not key else f"'{key}'"
        confirm = typer.confirm(f"Are you sure you want to reset {msg}?")
        if not confirm:
            format_error("Cancelled")
            raise typer.Exit(0)

    try:
        get_config_manager().reset(key)
    except KeyError as e:
        raise ValidationError(f"Configuration key '{key}' not found") from e

    if key:
        format_success(f"Configuration '{key}' reset to default")
    else:
        format_success("Configuration reset to defaults")


@app.command("theme")
@command_wrapper(auth_required=False)
def theme(
    value: Optional[str] = typer.Argument(None, help="dark, light or toggle (omit to show)"),
) -> None:
    """Show or change the colour theme preference."""
    session = get_session()
    if value is None:
        console.print(session.theme())
        return
    if value == "toggle":
        new_theme = session.toggle_theme()
    else:
        new_theme = session.set_theme(value)
    format_success(f"Theme set to {new_theme}")
