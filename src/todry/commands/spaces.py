"""Space (category) management commands."""

import typer

from todry.services.session_service import get_session
from todry.utils.typer_helpers import SuggestingGroup
from todry.utils.ui.formatters import format_output, format_stats_table, format_success

from .decorators import command_wrapper
from .utils import output_format, show_notice

app = typer.Typer(cls=SuggestingGroup, help="Space management commands")


@app.command("add")
@command_wrapper
def add_space(
    name: str = typer.Argument(..., help="Space name"),
) -> None:
    """Create a space at the end of the list."""
    created = get_session().repository.create_category(name)
    format_success(f"Space created: {created}")


@app.command("list")
@command_wrapper
def list_spaces(
    output: str | None = typer.Option(None, "--output", "-o", help="Output format"),
    json_opt: bool = typer.Option(
        False, "--json", help="Output as JSON (alias for --output json)"
    ),
) -> None:
    """List spaces with task counts and progress."""
    session = get_session()
    stats = session.repository.stats_by_category()
    fmt = output_format(session, output, json_opt)
    if fmt == "table":
        format_stats_table(stats)
        show_notice(session)
    else:
        format_output([s.model_dump() for s in stats], fmt)


@app.command("rm")
@command_wrapper
def delete_space(
    name: str = typer.Argument(..., help="Space name"),
) -> None:
    """Archive a space. Its tasks move to the first remaining space."""
    session = get_session()
    repository = session.repository
    moved = sum(1 for t in repository.tasks if t.category == name)
    fallback = repository.fallback_for(name)
    repository.delete_category(name)
    if moved:
        format_success(f"Moved {moved} task(s) to '{fallback}'")
    show_notice(session)
