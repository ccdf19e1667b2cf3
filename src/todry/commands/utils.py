"""Helpers shared by command modules."""

import time
from datetime import datetime

from todry.services.session_service import Session
from todry.utils.dates import parse_due
from todry.utils.exit_codes import ERROR_INVALID_ARGS
from todry.utils.ui.formatters import format_notice

from .decorators import AppError


def output_format(session: Session, output: str | None, json_opt: bool = False) -> str:
    """Explicit ``--output`` wins, then ``--json``, then the configured default."""
    if output:
        return output
    if json_opt:
        return "json"
    return session.config.output.format


def due_option(value: str) -> datetime | None:
    try:
        return parse_due(value)
    except ValueError as e:
        raise AppError(
            f"Unrecognised due date '{value}' (use today, tomorrow, weekend, none or YYYY-MM-DD)",
            exit_code=ERROR_INVALID_ARGS,
        ) from e


def show_notice(session: Session) -> None:
    """Print the notice left by the last action, if it is still showing."""
    notice = session.undo.notice
    if notice is not None:
        format_notice(notice.message, notice.undoable, notice.expires_at - time.time())
