"""Main entry point for the Todry CLI."""

import typer

from todry import __version__
from todry.commands import archive, auth, config, data, spaces, tasks
from todry.commands.decorators import command_wrapper
from todry.commands.utils import show_notice
from todry.config import get_config_manager
from todry.models import Priority
from todry.services.session_service import get_session
from todry.utils.typer_helpers import SuggestingGroup
from todry.utils.ui.console import apply_color_setting, get_console
from todry.utils.ui.formatters import format_info, format_success

app = typer.Typer(
    name="todry",
    cls=SuggestingGroup,
    help="Tasks grouped into spaces, with an archive and one-step undo",
    no_args_is_help=True,
)

console = get_console()


@app.callback()
def main_callback() -> None:
    """Apply output settings before any command runs."""
    apply_color_setting(get_config_manager().config.output.color)


app.add_typer(auth.app, name="auth", help="Authentication commands")
app.add_typer(tasks.app, name="tasks", help="Task management commands")
app.add_typer(spaces.app, name="spaces", help="Space management commands")
app.add_typer(archive.app, name="archive", help="Archived tasks and spaces")
app.add_typer(data.app, name="data", help="Backup and restore")
app.add_typer(config.app, name="config", help="Configuration management")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]Todry[/bold] version [cyan]{__version__}[/cyan]")


@app.command()
@command_wrapper
def undo() -> None:
    """Restore the most recently archived task or space, if still offered."""
    session = get_session()
    entry = session.undo.consume_undo()
    if entry is None:
        format_info("Nothing to undo")
        return
    if entry.kind == "task":
        format_success(f"Restored task: {entry.task.text}")
    else:
        format_success(f"Restored space: {entry.category}")


@app.command()
@command_wrapper
def dismiss() -> None:
    """Drop the pending undo offer and hide the notice."""
    get_session().undo.dismiss()


@app.command("add")
def add(
    text: str = typer.Argument(..., help="What needs doing"),
    space: str | None = typer.Option(None, "--space", "-s", help="Space to file it under"),
    priority: Priority = typer.Option(
        Priority.MEDIUM, "--priority", "-p", case_sensitive=False, help="Priority"
    ),
    due: str | None = typer.Option(None, "--due", help="today, tomorrow, weekend or YYYY-MM-DD"),
) -> None:
    """Quick add a task (same as 'todry tasks add')."""
    tasks.add_task(
        text=text, description=None, space=space, priority=priority, due=due, output=None
    )


@app.command("ls")
def ls(
    space: str = typer.Option("All", "--space", "-s", help="Only tasks in this space"),
    search: str = typer.Option("", "--search", "-q", help="Case-insensitive text search"),
) -> None:
    """List tasks (same as 'todry tasks list')."""
    tasks.list_tasks(space=space, search=search, open_only=False, output=None, json_opt=False)


@app.command()
@command_wrapper
def notice() -> None:
    """Show the current notice, if any."""
    session = get_session()
    if session.undo.notice is None:
        format_info("No notice")
        return
    show_notice(session)


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
