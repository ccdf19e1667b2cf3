"""Decorators for command functions."""

import functools
import time
import traceback
from collections.abc import Callable

import typer

from todry.models import NotAuthenticatedError, TodryError
from todry.services.session_service import get_session
from todry.utils.exit_codes import ERROR_GENERAL, exit_code_for, get_exit_code_name
from todry.utils.logger import get_logger
from todry.utils.ui.formatters import format_error


def _require_auth() -> None:
    """Require a signed-in user."""
    if not get_session().is_authenticated:
        raise NotAuthenticatedError("Not logged in. Use 'todry auth login' or 'todry auth signup'.")


class AppError(Exception):
    """Custom application error with exit code."""

    def __init__(self, message: str, exit_code: int = ERROR_GENERAL):
        super().__init__(message)
        self.exit_code = exit_code


def command_wrapper(_func: Callable | None = None, *, auth_required: bool = True):
    """Decorator to wrap command functions with common functionality.

    Domain errors become a printed message and a semantic exit code. After a
    successful command the pending undo offer is saved for the next process.
    """

    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger()
            cmd = func.__name__
            start = time.monotonic()
            logger.info("command started: %s", cmd)
            try:
                if auth_required:
                    _require_auth()

                result = func(*args, **kwargs)
                get_session().save()

                elapsed = time.monotonic() - start
                logger.info("command completed: %s (%.3fs)", cmd, elapsed)
                return result

            except (AppError, TodryError) as e:
                elapsed = time.monotonic() - start
                code = e.exit_code if isinstance(e, AppError) else exit_code_for(e)
                logger.error(
                    "command failed: %s (%.3fs) - %s: %s [%s]",
                    cmd,
                    elapsed,
                    type(e).__name__,
                    str(e),
                    get_exit_code_name(code),
                )
                format_error(str(e))
                raise typer.Exit(code=code) from e

            except typer.Exit:
                # Re-raise Typer's own exits (like --help or explicit Exit(0))
                raise

            except Exception as e:
                elapsed = time.monotonic() - start
                logger.error(
                    "command failed: %s (%.3fs) - %s\n%s",
                    cmd,
                    elapsed,
                    str(e),
                    traceback.format_exc(),
                )
                format_error(f"An unexpected error occurred: {str(e)}")
                raise typer.Exit(code=ERROR_GENERAL) from e

        return wrapper

    if _func is None:
        return decorator
    return decorator(_func)
