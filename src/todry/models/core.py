"""Core domain models.

Field names are snake_case in Python and camelCase on the wire, so data
written by the web app (and its backups) loads unchanged.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Pseudo-space meaning "no space filter".
ALL_SPACES = "All"

# Space that orphaned tasks fall back to when no other space exists.
DEFAULT_CATEGORY = "General"


class Priority(str, Enum):
    """Task priority levels."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class User(_WireModel):
    """A registered user.

    Attributes:
        id: Unique identifier, also the storage partition key
        username: Display name, unique ignoring case
        password_fingerprint: Non-secure derived value of the password
        created_at: Signup timestamp
    """

    id: str
    username: str
    password_fingerprint: str = Field(alias="passwordFingerprint")
    created_at: datetime = Field(alias="createdAt")


class Task(_WireModel):
    """A task ("objective").

    Attributes:
        id: Unique identifier
        text: Main task text, never blank
        description: Optional longer notes
        completed: Completion status
        category: Name of the space the task belongs to
        priority: Low, Medium or High
        due_date: Optional due timestamp
        created_at: Creation timestamp, never changes
    """

    id: str
    text: str
    description: str | None = None
    completed: bool = False
    category: str
    priority: Priority = Priority.MEDIUM
    due_date: datetime | None = Field(default=None, alias="dueDate")
    created_at: datetime = Field(alias="createdAt")

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("text must not be blank")
        return value


class TaskUpdate(BaseModel):
    """Partial update for a task.

    Only fields explicitly set are applied, so passing ``due_date=None``
    clears the due date while omitting it leaves it alone. ``id``,
    ``created_at`` and ``completed`` cannot be changed this way.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    text: str | None = None
    description: str | None = None
    category: str | None = None
    priority: Priority | None = None
    due_date: datetime | None = Field(default=None, alias="dueDate")


class CategoryStat(BaseModel):
    """Per-space task count and completion percentage."""

    name: str
    count: int = 0
    completed: int = 0
    progress: float = Field(default=0.0, ge=0.0, le=100.0)


class ViewState(BaseModel):
    """The currently displayed filter."""

    category: str = ALL_SPACES
    search: str = ""

    @property
    def is_filtered(self) -> bool:
        return self.category != ALL_SPACES or bool(self.search)


class UndoEntry(_WireModel):
    """A reversible deletion: either a task or a space."""

    kind: Literal["task", "category"]
    task: Task | None = None
    category: str | None = None

    @classmethod
    def for_task(cls, task: Task) -> UndoEntry:
        return cls(kind="task", task=task)

    @classmethod
    def for_category(cls, name: str) -> UndoEntry:
        return cls(kind="category", category=name)

    @property
    def key(self) -> str:
        """Task id or space name identifying the archived item."""
        if self.kind == "task":
            return self.task.id if self.task else ""
        return self.category or ""

    @property
    def label(self) -> str:
        if self.kind == "task":
            return "Task archived"
        return f"'{self.category}' archived"


class PendingUndo(BaseModel):
    """Persisted form of the undo slot."""

    entry: UndoEntry
    expires_at: float


class Backup(BaseModel):
    """A backup document.

    ``None`` means the field was absent, which leaves the corresponding
    collection untouched on import. Task ids and space names must be
    unique, and space names are trimmed and may not be blank or "All".
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    tasks: list[Task] | None = None
    categories: list[str] | None = None
    exported_at: datetime | None = Field(default=None, alias="exportedAt")

    @field_validator("tasks")
    @classmethod
    def _unique_task_ids(cls, value: list[Task] | None) -> list[Task] | None:
        if value is None:
            return value
        seen: set[str] = set()
        for task in value:
            if task.id in seen:
                raise ValueError(f"duplicate task id '{task.id}'")
            seen.add(task.id)
        return value

    @field_validator("categories")
    @classmethod
    def _valid_space_names(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return value
        names = [name.strip() for name in value]
        seen: set[str] = set()
        for name in names:
            if not name:
                raise ValueError("space names must not be blank")
            if name == ALL_SPACES:
                raise ValueError(f"'{ALL_SPACES}' is reserved and cannot be a space name")
            if name in seen:
                raise ValueError(f"duplicate space name '{name}'")
            seen.add(name)
        return names
