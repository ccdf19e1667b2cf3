"""Output formatters for different formats."""

import json
from datetime import datetime
from typing import Any

import yaml
from rich.table import Table
from rich.text import Text

from todry.models import CategoryStat, Priority, Task
from todry.utils.dates import local_zone, relative_time
from todry.utils.ui.console import get_console
from todry.utils.uuid_utils import shortest_unique_prefixes

console = get_console()

PRIORITY_STYLES = {
    Priority.HIGH: "bold red",
    Priority.MEDIUM: "yellow",
    Priority.LOW: "green",
}

PROGRESS_WIDTH = 20


def format_output(data: Any, output_format: str = "table") -> None:
    """Format and display output based on format."""
    if output_format == "json":
        print(json.dumps(data, indent=2, default=str, ensure_ascii=False))
    elif output_format == "yaml":
        print(yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True))
    elif isinstance(data, list):
        format_dict_table(data)
    elif isinstance(data, dict):
        format_single_item(data)
    else:
        console.print(data)


def format_dict_table(items: list[dict]) -> None:
    """Format a list of dictionaries as a table."""
    if not items:
        console.print("[yellow]No items found[/yellow]")
        return

    columns = list(items[0].keys())
    table = Table(show_header=True, header_style="bold magenta")
    for col in columns:
        table.add_column(col.replace("_", " ").title())
    for item in items:
        table.add_row(*(_cell(item.get(col)) for col in columns))

    console.print(table)


def format_single_item(item: dict) -> None:
    """Format a single item as key-value pairs."""
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")

    for key, value in item.items():
        table.add_row(key.replace("_", " ").title(), _cell(value))

    console.print(table)


def _cell(value: Any) -> str:
    if isinstance(value, bool):
        return "✓" if value else "✗"
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    if value is None:
        return "-"
    return str(value)


def format_error(message: str) -> None:
    """Format and display an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def format_success(message: str) -> None:
    """Format and display a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def format_warning(message: str) -> None:
    """Format and display a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def format_info(message: str) -> None:
    """Format and display an info message."""
    console.print(f"[bold blue]Info:[/bold blue] {message}")


# ============================================================================
# Tasks and spaces
# ============================================================================


def task_to_dict(task: Task) -> dict[str, Any]:
    """Wire form of a task, as written to storage and backups."""
    return task.model_dump(mode="json", by_alias=True, exclude_none=True)


def format_due(due: datetime | None, now: datetime | None = None) -> Text:
    """Render a due date, red when it has passed."""
    if due is None:
        return Text("-", style="dim")
    local = due.astimezone(local_zone())
    now = now or datetime.now(local_zone())
    fmt = "%a %d %b" if (local.hour, local.minute) == (0, 0) else "%a %d %b %H:%M"
    label = local.strftime(fmt)
    return Text(label, style="red" if local < now else "cyan")


def format_tasks_table(tasks: list[Task], title: str | None = None) -> None:
    """Print tasks as a table with short ids usable in other commands."""
    if not tasks:
        console.print("[yellow]No tasks found[/yellow]")
        return

    prefixes = shortest_unique_prefixes([t.id for t in tasks])
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("", width=1)
    table.add_column("Task")
    table.add_column("Space", style="cyan")
    table.add_column("Priority")
    table.add_column("Due")
    table.add_column("Created", style="dim")

    for task in tasks:
        text = Text(task.text, style="strike dim" if task.completed else "")
        table.add_row(
            prefixes[task.id],
            "✓" if task.completed else "○",
            text,
            task.category,
            Text(task.priority.value, style=PRIORITY_STYLES[task.priority]),
            format_due(task.due_date),
            relative_time(task.created_at),
        )

    console.print(table)


def format_task_detail(task: Task) -> None:
    """Print every field of one task."""
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_row("ID", task.id)
    table.add_row("Task", task.text)
    table.add_row("Description", task.description or "-")
    table.add_row("Status", "completed" if task.completed else "open")
    table.add_row("Space", task.category)
    table.add_row("Priority", Text(task.priority.value, style=PRIORITY_STYLES[task.priority]))
    table.add_row("Due", format_due(task.due_date))
    table.add_row("Created", f"{task.created_at.isoformat()} ({relative_time(task.created_at)})")
    console.print(table)


def progress_bar(progress: float, width: int = PROGRESS_WIDTH) -> str:
    filled = round(progress / 100 * width)
    return "█" * filled + "░" * (width - filled)


def format_stats_table(stats: list[CategoryStat], active: str | None = None) -> None:
    """Print spaces with their task counts and progress bars."""
    if not stats:
        console.print("[yellow]No spaces yet. Create one with 'todry spaces add'.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Space")
    table.add_column("Tasks", justify="right")
    table.add_column("Done", justify="right")
    table.add_column("Progress")

    for stat in stats:
        name = f"[bold]{stat.name}[/bold] ◂" if stat.name == active else stat.name
        table.add_row(
            name,
            str(stat.count),
            str(stat.completed),
            f"[green]{progress_bar(stat.progress)}[/green] {stat.progress:.0f}%",
        )

    console.print(table)


def format_archive(tasks: list[Task], categories: list[str]) -> None:
    """Print archived tasks and spaces, most recently archived first."""
    if not tasks and not categories:
        console.print("[yellow]Archive is empty[/yellow]")
        return

    if categories:
        table = Table(title="Archived spaces", show_header=False)
        table.add_column("Space", style="cyan")
        for name in categories:
            table.add_row(name)
        console.print(table)

    if tasks:
        prefixes = shortest_unique_prefixes([t.id for t in tasks])
        table = Table(title="Archived tasks", show_header=True, header_style="bold magenta")
        table.add_column("ID", style="dim", no_wrap=True)
        table.add_column("Task")
        table.add_column("Space", style="cyan")
        table.add_column("Created", style="dim")
        for task in tasks:
            table.add_row(prefixes[task.id], task.text, task.category, relative_time(task.created_at))
        console.print(table)


def format_notice(message: str, undoable: bool, seconds_left: float) -> None:
    """Print the transient notice left by the last action."""
    if undoable:
        console.print(
            f"[bold yellow]{message}[/bold yellow] "
            f"[dim](run 'todry undo' within {max(seconds_left, 0):.0f}s to restore)[/dim]"
        )
    else:
        console.print(f"[bold green]{message}[/bold green]")
