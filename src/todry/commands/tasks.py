"""Task management commands."""

import typer

from todry.models import ALL_SPACES, Priority
from todry.services.session_service import get_session
from todry.utils.typer_helpers import SuggestingGroup
from todry.utils.ui.formatters import (
    format_output,
    format_success,
    format_task_detail,
    format_tasks_table,
    format_warning,
    task_to_dict,
)
from todry.utils.uuid_utils import resolve_task_ref

from .decorators import command_wrapper
from .utils import due_option, output_format, show_notice

app = typer.Typer(cls=SuggestingGroup, help="Task management commands")


def _resolve(task_ref: str) -> str:
    repository = get_session().repository
    return resolve_task_ref(task_ref, [t.id for t in repository.tasks])


@app.command("add")
@command_wrapper
def add_task(
    text: str = typer.Argument(..., help="What needs doing"),
    description: str | None = typer.Option(None, "--description", "-d", help="Longer notes"),
    space: str | None = typer.Option(
        None, "--space", "-s", help="Space to file it under (default: first space)"
    ),
    priority: Priority = typer.Option(
        Priority.MEDIUM, "--priority", "-p", case_sensitive=False, help="Priority"
    ),
    due: str | None = typer.Option(
        None, "--due", help="today, tomorrow, weekend or YYYY-MM-DD[THH:MM]"
    ),
    output: str | None = typer.Option(None, "--output", "-o", help="Output format"),
) -> None:
    """Add a task to the top of the list."""
    session = get_session()
    task = session.repository.create_task(
        text,
        description=description,
        category=space,
        priority=priority,
        due_date=due_option(due) if due is not None else None,
    )
    fmt = output_format(session, output)
    if fmt == "table":
        format_success(f"Task added to '{task.category}': {task.text}")
    else:
        format_output(task_to_dict(task), fmt)


@app.command("list")
@command_wrapper
def list_tasks(
    space: str = typer.Option(ALL_SPACES, "--space", "-s", help="Only tasks in this space"),
    search: str = typer.Option("", "--search", "-q", help="Case-insensitive text search"),
    open_only: bool = typer.Option(False, "--open", help="Hide completed tasks"),
    output: str | None = typer.Option(None, "--output", "-o", help="Output format"),
    json_opt: bool = typer.Option(
        False, "--json", help="Output as JSON (alias for --output json)"
    ),
) -> None:
    """List tasks, newest first."""
    session = get_session()
    repository = session.repository
    repository.set_view(space, search)
    tasks = repository.visible_tasks()
    if open_only:
        tasks = [t for t in tasks if not t.completed]

    fmt = output_format(session, output, json_opt)
    if fmt == "table":
        title = None if space == ALL_SPACES else space
        format_tasks_table(tasks, title=title)
        show_notice(session)
    else:
        format_output([task_to_dict(t) for t in tasks], fmt)


@app.command("show")
@command_wrapper
def show_task(
    task_id: str = typer.Argument(..., help="Task ID or unique prefix"),
    output: str | None = typer.Option(None, "--output", "-o", help="Output format"),
) -> None:
    """Show one task in detail."""
    session = get_session()
    task = session.repository.get_task(_resolve(task_id))
    fmt = output_format(session, output)
    if fmt == "table":
        format_task_detail(task)
    else:
        format_output(task_to_dict(task), fmt)


@app.command("edit")
@command_wrapper
def edit_task(
    task_id: str = typer.Argument(..., help="Task ID or unique prefix"),
    text: str | None = typer.Option(None, "--text", "-t", help="New text"),
    description: str | None = typer.Option(
        None, "--description", "-d", help="New notes (empty string clears them)"
    ),
    space: str | None = typer.Option(None, "--space", "-s", help="Move to another space"),
    priority: Priority | None = typer.Option(
        None, "--priority", "-p", case_sensitive=False, help="New priority"
    ),
    due: str | None = typer.Option(None, "--due", help="New due date, or 'none' to clear"),
) -> None:
    """Edit a task's fields."""
    fields = {
        name: value
        for name, value in (
            ("text", text),
            ("description", description),
            ("category", space),
            ("priority", priority),
        )
        if value is not None
    }
    if due is not None:
        fields["due_date"] = due_option(due)
    if not fields:
        format_warning("Nothing to change")
        return

    resolved_id = _resolve(task_id)
    task = get_session().repository.update_task(resolved_id, **fields)
    format_success(f"Task updated: {task.text}")


@app.command("done")
@command_wrapper
def complete_task(
    task_id: str = typer.Argument(..., help="Task ID or unique prefix"),
) -> None:
    """Mark a task done, or open again if it already is."""
    task = get_session().repository.toggle_complete(_resolve(task_id))
    if task.completed:
        format_success(f"Completed: {task.text}")
    else:
        format_success(f"Reopened: {task.text}")


@app.command("due")
@command_wrapper
def set_due(
    task_id: str = typer.Argument(..., help="Task ID or unique prefix"),
    when: str = typer.Argument(..., help="today, tomorrow, weekend, none or YYYY-MM-DD"),
) -> None:
    """Set or clear a task's due date."""
    due_date = due_option(when)
    task = get_session().repository.set_due_date(_resolve(task_id), due_date)
    if task.due_date is None:
        format_success(f"Due date cleared: {task.text}")
    else:
        format_success(f"Due {task.due_date.date().isoformat()}: {task.text}")


@app.command("rm")
@command_wrapper
def delete_task(
    task_id: str = typer.Argument(..., help="Task ID or unique prefix"),
) -> None:
    """Archive a task. It can be restored with 'todry undo' or 'todry archive restore'."""
    session = get_session()
    session.repository.delete_task(_resolve(task_id))
    show_notice(session)


@app.command("move")
@command_wrapper
def move_task(
    task_id: str = typer.Argument(..., help="Task ID or unique prefix"),
    position: int = typer.Argument(..., help="New position, 1 is the top"),
) -> None:
    """Move a task to another position in the full list."""
    tasks = get_session().repository.move_task(_resolve(task_id), position - 1)
    format_tasks_table(tasks)
