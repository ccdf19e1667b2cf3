"""Archive commands: list, restore and permanently delete."""

import typer

from todry.services.session_service import get_session
from todry.utils.typer_helpers import SuggestingGroup
from todry.utils.ui.formatters import (
    format_archive,
    format_error,
    format_output,
    task_to_dict,
)
from todry.utils.uuid_utils import resolve_task_ref

from .decorators import command_wrapper
from .utils import output_format, show_notice

app = typer.Typer(cls=SuggestingGroup, help="Archived tasks and spaces")


def _resolve_archived(task_ref: str) -> str:
    repository = get_session().repository
    return resolve_task_ref(task_ref, [t.id for t in repository.archived_tasks])


@app.command("list")
@command_wrapper
def list_archive(
    output: str | None = typer.Option(None, "--output", "-o", help="Output format"),
    json_opt: bool = typer.Option(
        False, "--json", help="Output as JSON (alias for --output json)"
    ),
) -> None:
    """Show archived tasks and spaces."""
    session = get_session()
    repository = session.repository
    fmt = output_format(session, output, json_opt)
    if fmt == "table":
        format_archive(repository.archived_tasks, repository.archived_categories)
    else:
        format_output(
            {
                "tasks": [task_to_dict(t) for t in repository.archived_tasks],
                "categories": repository.archived_categories,
            },
            fmt,
        )


@app.command("restore")
@command_wrapper
def restore(
    ref: str = typer.Argument(..., help="Archived task ID (or prefix), or a space name"),
    space: bool = typer.Option(False, "--space", "-s", help="REF names an archived space"),
) -> None:
    """Bring an archived task or space back."""
    session = get_session()
    if space:
        session.repository.restore_category(ref)
    else:
        session.repository.restore_task(_resolve_archived(ref))
    show_notice(session)


@app.command("purge")
@command_wrapper
def purge(
    ref: str = typer.Argument(..., help="Archived task ID (or prefix), or a space name"),
    space: bool = typer.Option(False, "--space", "-s", help="REF names an archived space"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Permanently delete an archived task or space."""
    session = get_session()
    target = ref if space else _resolve_archived(ref)
    if not yes:
        what = f"space '{ref}'" if space else f"task {target}"
        if not typer.confirm(f"Permanently delete {what}? This cannot be undone."):
            format_error("Cancelled")
            raise typer.Exit(0)

    if space:
        session.repository.purge_category(target)
    else:
        session.repository.purge_task(target)
    show_notice(session)
