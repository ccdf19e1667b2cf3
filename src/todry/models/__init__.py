"""Todry domain models.

This package contains the Pydantic models for the core entities and the
exception hierarchy shared by every layer.
"""

from .core import (
    ALL_SPACES,
    DEFAULT_CATEGORY,
    Backup,
    CategoryStat,
    PendingUndo,
    Priority,
    Task,
    TaskUpdate,
    UndoEntry,
    User,
    ViewState,
)
from .exceptions import (
    CategoryNotFoundError,
    DuplicateNameError,
    DuplicateUsernameError,
    EmptyNameError,
    EmptyTextError,
    FilteredReorderError,
    InvalidCredentialsError,
    MalformedBackupError,
    NotAuthenticatedError,
    NotFoundError,
    TaskNotFoundError,
    TodryError,
    UserNotFoundError,
    ValidationError,
)

__all__ = [
    # Constants
    "ALL_SPACES",
    "DEFAULT_CATEGORY",
    # Task models
    "Task",
    "TaskUpdate",
    "Priority",
    "CategoryStat",
    "ViewState",
    # Undo and backup
    "UndoEntry",
    "PendingUndo",
    "Backup",
    # User model
    "User",
    # Errors
    "TodryError",
    "ValidationError",
    "EmptyTextError",
    "EmptyNameError",
    "DuplicateNameError",
    "DuplicateUsernameError",
    "InvalidCredentialsError",
    "FilteredReorderError",
    "NotFoundError",
    "TaskNotFoundError",
    "CategoryNotFoundError",
    "UserNotFoundError",
    "MalformedBackupError",
    "NotAuthenticatedError",
]
