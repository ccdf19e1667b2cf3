"""Custom exceptions for Todry.

Every failure raised by the core is a reported condition: validation runs
before any mutation, so catching one of these means state is unchanged.
"""


class TodryError(Exception):
    """Base exception for all Todry errors."""


class ValidationError(TodryError):
    """Raised when input is rejected before any mutation takes place."""


class EmptyTextError(ValidationError):
    """Raised when a task text is blank after trimming."""


class EmptyNameError(ValidationError):
    """Raised when a space name is blank after trimming."""


class DuplicateNameError(ValidationError):
    """Raised when a space with the same name is already active."""


class DuplicateUsernameError(ValidationError):
    """Raised when signing up with a username that is already taken."""


class InvalidCredentialsError(ValidationError):
    """Raised for malformed credentials or a fingerprint mismatch."""


class FilteredReorderError(ValidationError):
    """Raised when reordering while a space filter or search is active."""


class NotFoundError(TodryError):
    """Raised when an id or name is absent from the expected collection."""


class TaskNotFoundError(NotFoundError):
    """Raised when a task id is unknown."""


class CategoryNotFoundError(NotFoundError):
    """Raised when a space name is unknown."""


class UserNotFoundError(NotFoundError):
    """Raised when no user matches the given username."""


class MalformedBackupError(TodryError):
    """Raised when a backup document cannot be parsed."""


class NotAuthenticatedError(TodryError):
    """Raised when an operation needs a logged-in user and there is none."""
