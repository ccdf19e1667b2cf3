"""Backup commands (export, import)."""

from pathlib import Path

import typer

from todry.services.backup_service import BackupCodec, backup_filename
from todry.services.session_service import get_session
from todry.utils.typer_helpers import SuggestingGroup
from todry.utils.ui.formatters import format_error, format_info, format_success

from .decorators import command_wrapper
from .utils import show_notice

app = typer.Typer(cls=SuggestingGroup, help="Backup and restore")


@app.command("export")
@command_wrapper
def export_data(
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file path (default: todry-backup-YYYY-MM-DD.json)",
    ),
) -> None:
    """
    Export active tasks and spaces to a JSON backup.

    Examples:
        todry data export
        todry data export --output ~/backups/todry.json
    """
    session = get_session()
    repository = session.repository
    path = output or Path(backup_filename())
    BackupCodec().write_backup(path, repository.tasks, repository.categories)
    format_info(f"{len(repository.tasks)} task(s), {len(repository.categories)} space(s) -> {path}")
    session.undo.announce("Backup saved!")
    show_notice(session)


@app.command("import")
@command_wrapper
def import_data(
    path: Path = typer.Argument(..., help="Backup file to import"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """
    Replace tasks and/or spaces with the contents of a backup.

    Only the collections present in the file are replaced. The archive is
    kept.
    """
    session = get_session()
    backup = BackupCodec().read_backup(path)
    replaced = [
        name
        for name, value in (("tasks", backup.tasks), ("spaces", backup.categories))
        if value is not None
    ]
    if not replaced:
        format_info("Backup holds neither tasks nor spaces; nothing to import")
        return
    if not yes:
        if not typer.confirm(f"Replace your {' and '.join(replaced)} with the backup?"):
            format_error("Cancelled")
            raise typer.Exit(0)

    session.repository.apply_backup(backup)
    format_success(f"Imported {' and '.join(replaced)} from {path}")
    session.undo.announce("Backup restored!")
    show_notice(session)
