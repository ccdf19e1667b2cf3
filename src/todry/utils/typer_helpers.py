"""Typer helper utilities."""

from difflib import get_close_matches

import click
import typer
from typer.core import TyperGroup

from todry.utils.ui.console import get_console

# Words from the web front end that people type out of habit.
COMMAND_ALIASES = {
    "space": "spaces",
    "categories": "spaces",
    "category": "spaces",
    "task": "tasks",
    "todo": "tasks",
    "todos": "tasks",
    "trash": "archive",
    "backup": "data",
}


class SuggestingGroup(TyperGroup):
    """Custom Typer group that suggests commands on typos.

    Known aliases resolve silently; anything else close to a real command
    gets a "Did you mean this?" hint.
    """

    def get_command(self, ctx, cmd_name):
        command = super().get_command(ctx, cmd_name)
        if command is None and cmd_name in COMMAND_ALIASES:
            command = super().get_command(ctx, COMMAND_ALIASES[cmd_name])
        return command

    def resolve_command(self, ctx, args):
        """Override to provide command suggestions on errors."""
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError as e:
            if args:
                attempted = args[0]
                available_commands = list(self.commands.keys())

                suggestions = get_close_matches(
                    attempted, available_commands, n=3, cutoff=0.6
                )

                if suggestions:
                    console = get_console()
                    console.print(
                        f'[red]Error:[/red] unknown command "{attempted}" for "{ctx.info_name}"'
                    )
                    console.print()
                    if len(suggestions) == 1:
                        console.print("[yellow]Did you mean this?[/yellow]")
                    else:
                        console.print("[yellow]Did you mean one of these?[/yellow]")
                    for suggestion in suggestions:
                        console.print(f"        {suggestion}")
                    raise typer.Exit(1) from e
            raise
