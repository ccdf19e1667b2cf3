"""
Exit codes for the Todry CLI.

Semantic exit codes let scripts tell a rejected input from a missing item.
"""

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or validation error
ERROR_INVALID_ARGS = 2

# Authentication failure (not logged in, invalid credentials, etc.)
ERROR_AUTH_FAILURE = 3

# Resource not found
ERROR_NOT_FOUND = 5


def get_exit_code_name(code: int) -> str:
    """Get the name of an exit code for display purposes."""
    code_names = {
        SUCCESS: "SUCCESS",
        ERROR_GENERAL: "ERROR_GENERAL",
        ERROR_INVALID_ARGS: "ERROR_INVALID_ARGS",
        ERROR_AUTH_FAILURE: "ERROR_AUTH_FAILURE",
        ERROR_NOT_FOUND: "ERROR_NOT_FOUND",
    }
    return code_names.get(code, f"UNKNOWN({code})")


def exit_code_for(error: Exception) -> int:
    """Map a Todry error to its exit code."""
    from todry.models.exceptions import (
        InvalidCredentialsError,
        NotAuthenticatedError,
        NotFoundError,
        UserNotFoundError,
        ValidationError,
    )

    if isinstance(error, (NotAuthenticatedError, InvalidCredentialsError, UserNotFoundError)):
        return ERROR_AUTH_FAILURE
    if isinstance(error, NotFoundError):
        return ERROR_NOT_FOUND
    if isinstance(error, ValidationError):
        return ERROR_INVALID_ARGS
    return ERROR_GENERAL
