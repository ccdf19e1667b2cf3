"""Per-user task and space repository.

A ``TaskRepository`` owns the four ordered collections of one user (active
tasks, active spaces, archived tasks, archived spaces) and is the only
thing that mutates them. Every mutation validates first, then changes the
in-memory lists, then writes the affected collections back to storage
before returning, so a failed call never leaves partial state behind.

Ordering policy:

- new and restored tasks go to the front of the active list (newest first);
- archived tasks and spaces go to the front of the archive;
- new spaces are appended, restored spaces go to the front.

Invariants:

- every active task's ``category`` names an active space;
- no task id and no space name is both active and archived.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

from pydantic import ValidationError as PydanticValidationError

from todry.models import (
    ALL_SPACES,
    DEFAULT_CATEGORY,
    Backup,
    CategoryNotFoundError,
    CategoryStat,
    DuplicateNameError,
    EmptyNameError,
    EmptyTextError,
    FilteredReorderError,
    Priority,
    Task,
    TaskNotFoundError,
    TaskUpdate,
    UndoEntry,
    ValidationError,
    ViewState,
)
from todry.repositories.repository import StorageBackend
from todry.services.feedback_service import FeedbackCue, FeedbackDispatcher
from todry.utils.dates import now_utc
from todry.utils.uuid_utils import generate_task_id

TASKS = "tasks"
CATEGORIES = "categories"
ARCHIVED_TASKS = "archived_tasks"
ARCHIVED_CATEGORIES = "archived_categories"
COLLECTIONS = (TASKS, CATEGORIES, ARCHIVED_TASKS, ARCHIVED_CATEGORIES)

logger = logging.getLogger(__name__)


def collection_key(user_id: str, collection: str) -> str:
    """Storage key of one of a user's collections."""
    return f"todry_{user_id}_{collection}"


@dataclass(frozen=True)
class RepositoryEvent:
    """Something moved in or out of the archive."""

    kind: Literal["archived", "restored", "purged"]
    entry: UndoEntry


RepositoryListener = Callable[[RepositoryEvent], None]


class TaskRepository:
    """Tasks and spaces of a single user."""

    def __init__(
        self,
        storage: StorageBackend,
        user_id: str,
        *,
        tasks: list[Task] | None = None,
        categories: list[str] | None = None,
        archived_tasks: list[Task] | None = None,
        archived_categories: list[str] | None = None,
        feedback: FeedbackDispatcher | None = None,
    ):
        self.storage = storage
        self.user_id = user_id
        self.feedback = feedback or FeedbackDispatcher()
        self.view = ViewState()
        self._tasks: list[Task] = list(tasks or [])
        self._categories: list[str] = list(categories or [])
        self._archived_tasks: list[Task] = list(archived_tasks or [])
        self._archived_categories: list[str] = list(archived_categories or [])
        self._listeners: list[RepositoryListener] = []

    @classmethod
    def load(
        cls,
        storage: StorageBackend,
        user_id: str,
        *,
        feedback: FeedbackDispatcher | None = None,
    ) -> TaskRepository:
        """Load a user's collections. Missing collections load as empty."""

        def read(collection: str) -> list[Any]:
            return storage.read(collection_key(user_id, collection)) or []

        repository = cls(
            storage,
            user_id,
            tasks=[Task.model_validate(item) for item in read(TASKS)],
            categories=[str(name) for name in read(CATEGORIES)],
            archived_tasks=[Task.model_validate(item) for item in read(ARCHIVED_TASKS)],
            archived_categories=[str(name) for name in read(ARCHIVED_CATEGORIES)],
            feedback=feedback,
        )
        logger.debug(
            "loaded user %s: %d tasks, %d spaces, %d archived tasks, %d archived spaces",
            user_id,
            len(repository._tasks),
            len(repository._categories),
            len(repository._archived_tasks),
            len(repository._archived_categories),
        )
        return repository

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    @property
    def categories(self) -> list[str]:
        return list(self._categories)

    @property
    def archived_tasks(self) -> list[Task]:
        return list(self._archived_tasks)

    @property
    def archived_categories(self) -> list[str]:
        return list(self._archived_categories)

    def get_task(self, task_id: str) -> Task:
        return self._tasks[self._index_of(self._tasks, task_id)]

    def get_archived_task(self, task_id: str) -> Task:
        return self._archived_tasks[self._index_of(self._archived_tasks, task_id)]

    def is_archived(self, entry: UndoEntry) -> bool:
        """Whether the task or space named by ``entry`` is still in the archive."""
        if entry.kind == "task":
            return any(t.id == entry.key for t in self._archived_tasks)
        return entry.key in self._archived_categories

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def subscribe(self, listener: RepositoryListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: RepositoryListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, kind: Literal["archived", "restored", "purged"], entry: UndoEntry) -> None:
        event = RepositoryEvent(kind, entry)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:  # pylint: disable=broad-exception-catch
                logger.warning("repository listener failed on %s %s: %s", kind, entry.key, e)

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def create_task(
        self,
        text: str,
        description: str | None = None,
        category: str | None = None,
        priority: Priority | str = Priority.MEDIUM,
        due_date: datetime | None = None,
    ) -> Task:
        """Create a task at the top of the list.

        ``category=None`` files the task under the first space, or under
        ``General`` when there are no spaces yet.

        Raises:
            EmptyTextError: If ``text`` is blank
            CategoryNotFoundError: If ``category`` is not an active space
        """
        clean_text = (text or "").strip()
        if not clean_text:
            raise EmptyTextError("Task text cannot be empty")
        category_name = self._resolve_category(category)
        task_priority = _coerce_priority(priority)

        task = Task(
            id=generate_task_id(),
            text=clean_text,
            description=_clean_description(description),
            completed=False,
            category=category_name,
            priority=task_priority,
            due_date=due_date,
            created_at=now_utc(),
        )

        touched = self._activate_category(category_name)
        self._tasks.insert(0, task)
        self._flush(TASKS, *touched)
        logger.info("created task %s in '%s'", task.id, category_name)
        self.feedback.emit(FeedbackCue.TASK_CREATED)
        return task

    def update_task(self, task_id: str, updates: TaskUpdate | None = None, **fields: Any) -> Task:
        """Apply a partial update.

        Either pass a ``TaskUpdate`` or keyword fields (``text``,
        ``description``, ``category``, ``priority``, ``due_date``).

        Raises:
            TaskNotFoundError: If the task is not active
            EmptyTextError: If the new text is blank
            CategoryNotFoundError: If the new space is not active
            ValidationError: If a field is unknown or cannot be changed
        """
        if updates is None:
            try:
                updates = TaskUpdate(**fields)
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid task update: {e}") from e

        index = self._index_of(self._tasks, task_id)
        changes = updates.model_dump(exclude_unset=True)
        for required in ("text", "category", "priority"):
            if changes.get(required, "") is None:
                del changes[required]

        if "text" in changes:
            changes["text"] = changes["text"].strip()
            if not changes["text"]:
                raise EmptyTextError("Task text cannot be empty")
        if "description" in changes:
            changes["description"] = _clean_description(changes["description"])
        touched: tuple[str, ...] = ()
        if "category" in changes:
            changes["category"] = self._resolve_category(changes["category"])
            touched = self._activate_category(changes["category"])

        updated = self._tasks[index].model_copy(update=changes)
        self._tasks[index] = updated
        self._flush(TASKS, *touched)
        logger.debug("updated task %s: %s", task_id, sorted(changes))
        return updated

    def set_due_date(self, task_id: str, due_date: datetime | None) -> Task:
        """Set or clear a task's due date."""
        return self.update_task(task_id, TaskUpdate(due_date=due_date))

    def toggle_complete(self, task_id: str) -> Task:
        """Flip completion. Completing (not reopening) emits the celebration cue."""
        index = self._index_of(self._tasks, task_id)
        task = self._tasks[index]
        updated = task.model_copy(update={"completed": not task.completed})
        self._tasks[index] = updated
        self._flush(TASKS)
        logger.info("task %s %s", task_id, "completed" if updated.completed else "reopened")
        if updated.completed:
            self.feedback.emit(FeedbackCue.TASK_COMPLETED)
        return updated

    def delete_task(self, task_id: str) -> Task:
        """Move a task to the front of the archive.

        Raises:
            TaskNotFoundError: If the task is not active
        """
        index = self._index_of(self._tasks, task_id)
        task = self._tasks.pop(index)
        self._archived_tasks.insert(0, task)
        self._flush(TASKS, ARCHIVED_TASKS)
        logger.info("archived task %s", task_id)
        self.feedback.emit(FeedbackCue.TASK_DELETED)
        self._notify("archived", UndoEntry.for_task(task))
        return task

    def restore_task(self, task_id: str) -> Task:
        """Move an archived task back to the top of the active list.

        A task whose space has since been archived is refiled under the
        current fallback space.

        Raises:
            TaskNotFoundError: If the task is not archived
        """
        index = self._index_of(self._archived_tasks, task_id)
        task = self._archived_tasks[index]
        touched: tuple[str, ...] = ()
        if task.category not in self._categories:
            fallback = self.fallback_for(task.category)
            logger.info(
                "restored task %s refiled from '%s' to '%s'", task_id, task.category, fallback
            )
            task = task.model_copy(update={"category": fallback})
            touched = self._activate_category(fallback)

        del self._archived_tasks[index]
        self._tasks.insert(0, task)
        self._flush(TASKS, ARCHIVED_TASKS, *touched)
        logger.info("restored task %s", task_id)
        self._notify("restored", UndoEntry.for_task(task))
        return task

    def purge_task(self, task_id: str) -> Task:
        """Permanently remove a task from the archive."""
        index = self._index_of(self._archived_tasks, task_id)
        task = self._archived_tasks.pop(index)
        self._flush(ARCHIVED_TASKS)
        logger.info("purged task %s", task_id)
        self._notify("purged", UndoEntry.for_task(task))
        return task

    # ------------------------------------------------------------------
    # Spaces
    # ------------------------------------------------------------------

    def create_category(self, name: str) -> str:
        """Append a new space.

        Raises:
            EmptyNameError: If ``name`` is blank
            DuplicateNameError: If an active space has exactly this name
            ValidationError: If ``name`` is the reserved "All" filter
        """
        clean_name = (name or "").strip()
        if not clean_name:
            raise EmptyNameError("Space name cannot be empty")
        if clean_name == ALL_SPACES:
            raise ValidationError(f"'{ALL_SPACES}' is reserved for the unfiltered view")
        if clean_name in self._categories:
            raise DuplicateNameError(f"Space already exists: {clean_name}")

        touched = self._activate_category(clean_name)
        self._flush(*touched)
        logger.info("created space '%s'", clean_name)
        return clean_name

    def delete_category(self, name: str) -> str:
        """Archive a space and refile its tasks.

        Tasks in the space move to the first other active space, or to
        ``General`` when there is none. If the space was being viewed, the
        view goes back to all tasks.

        Raises:
            CategoryNotFoundError: If ``name`` is not an active space
            ValidationError: If ``name`` is ``General``, it is the only
                space and still holds tasks
        """
        if name not in self._categories:
            raise CategoryNotFoundError(f"Space not found: {name}")
        fallback = self.fallback_for(name)
        orphaned = [i for i, task in enumerate(self._tasks) if task.category == name]
        if fallback == name and orphaned:
            raise ValidationError(
                f"Cannot archive '{name}' while it is the only space holding tasks"
            )

        self._categories.remove(name)
        self._archived_categories.insert(0, name)
        touched = {CATEGORIES, ARCHIVED_CATEGORIES}
        if orphaned:
            touched.update(self._activate_category(fallback))
            for i in orphaned:
                self._tasks[i] = self._tasks[i].model_copy(update={"category": fallback})
            touched.add(TASKS)
        if self.view.category == name:
            self.view = ViewState(category=ALL_SPACES, search=self.view.search)

        self._flush(*touched)
        logger.info(
            "archived space '%s', moved %d task(s) to '%s'", name, len(orphaned), fallback
        )
        self._notify("archived", UndoEntry.for_category(name))
        return name

    def restore_category(self, name: str) -> str:
        """Move an archived space back to the front of the space list.

        Tasks that were refiled when it was archived stay where they are.

        Raises:
            CategoryNotFoundError: If ``name`` is not archived
            DuplicateNameError: If a space with that name is active again
        """
        if name not in self._archived_categories:
            raise CategoryNotFoundError(f"Archived space not found: {name}")
        if name in self._categories:
            raise DuplicateNameError(f"Space already exists: {name}")

        self._archived_categories.remove(name)
        self._categories.insert(0, name)
        self._flush(CATEGORIES, ARCHIVED_CATEGORIES)
        logger.info("restored space '%s'", name)
        self._notify("restored", UndoEntry.for_category(name))
        return name

    def purge_category(self, name: str) -> str:
        """Permanently remove a space from the archive."""
        if name not in self._archived_categories:
            raise CategoryNotFoundError(f"Archived space not found: {name}")
        self._archived_categories.remove(name)
        self._flush(ARCHIVED_CATEGORIES)
        logger.info("purged space '%s'", name)
        self._notify("purged", UndoEntry.for_category(name))
        return name

    def fallback_for(self, name: str) -> str:
        """Space that would take over the tasks of ``name`` if it were archived."""
        return next((c for c in self._categories if c != name), DEFAULT_CATEGORY)

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def stats_by_category(self) -> list[CategoryStat]:
        """Task count and completion percentage for every active space."""
        stats = []
        for name in self._categories:
            in_space = [t for t in self._tasks if t.category == name]
            done = sum(1 for t in in_space if t.completed)
            progress = 0.0 if not in_space else done / len(in_space) * 100
            stats.append(
                CategoryStat(name=name, count=len(in_space), completed=done, progress=progress)
            )
        return stats

    def filter(self, category: str = ALL_SPACES, search: str = "") -> list[Task]:
        """Active tasks in ``category`` (or all) whose text contains ``search``.

        The search ignores case. Active-list order is preserved.
        """
        needle = (search or "").lower()
        return [
            t
            for t in self._tasks
            if (category == ALL_SPACES or t.category == category) and needle in t.text.lower()
        ]

    def set_view(self, category: str = ALL_SPACES, search: str = "") -> ViewState:
        if category != ALL_SPACES and category not in self._categories:
            raise CategoryNotFoundError(f"Space not found: {category}")
        self.view = ViewState(category=category, search=search or "")
        return self.view

    def visible_tasks(self) -> list[Task]:
        return self.filter(self.view.category, self.view.search)

    def reorder(self, task_ids: list[str]) -> list[Task]:
        """Replace the canonical task order.

        Only allowed on the unfiltered view, where the displayed list is the
        whole list; ``task_ids`` must contain every active id exactly once.

        Raises:
            FilteredReorderError: If a space filter or search is active
            ValidationError: If ``task_ids`` is not a permutation of the active ids
        """
        if self.view.is_filtered:
            raise FilteredReorderError("Clear the space filter and search before reordering")
        by_id = {t.id: t for t in self._tasks}
        if len(task_ids) != len(by_id) or set(task_ids) != set(by_id):
            raise ValidationError("Reorder must list every active task exactly once")

        self._tasks = [by_id[task_id] for task_id in task_ids]
        self._flush(TASKS)
        return self.tasks

    def move_task(self, task_id: str, position: int) -> list[Task]:
        """Move one task to ``position`` (0 is the top) in the full list."""
        self._index_of(self._tasks, task_id)
        order = [t.id for t in self._tasks if t.id != task_id]
        position = max(0, min(position, len(order)))
        order.insert(position, task_id)
        return self.reorder(order)

    # ------------------------------------------------------------------
    # Backup
    # ------------------------------------------------------------------

    def apply_backup(self, backup: Backup) -> None:
        """Overwrite whichever collections the backup supplies.

        Archived items that collide with imported ones are dropped from the
        archive so nothing is active and archived at once.
        """
        touched: set[str] = set()
        if backup.tasks is not None:
            self._tasks = list(backup.tasks)
            imported_ids = {t.id for t in self._tasks}
            self._archived_tasks = [t for t in self._archived_tasks if t.id not in imported_ids]
            touched.update({TASKS, ARCHIVED_TASKS})
        if backup.categories is not None:
            self._categories = list(backup.categories)
            self._archived_categories = [
                c for c in self._archived_categories if c not in self._categories
            ]
            touched.update({CATEGORIES, ARCHIVED_CATEGORIES})
            if self.view.category not in (ALL_SPACES, *self._categories):
                self.view = ViewState(category=ALL_SPACES, search=self.view.search)

        self._flush(*touched)
        logger.info(
            "applied backup: tasks=%s spaces=%s",
            "replaced" if backup.tasks is not None else "kept",
            "replaced" if backup.categories is not None else "kept",
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _index_of(tasks: list[Task], task_id: str) -> int:
        for index, task in enumerate(tasks):
            if task.id == task_id:
                return index
        raise TaskNotFoundError(f"Task not found: {task_id}")

    def _resolve_category(self, category: str | None) -> str:
        if category is None:
            return self._categories[0] if self._categories else DEFAULT_CATEGORY
        if category in self._categories or category == DEFAULT_CATEGORY:
            return category
        raise CategoryNotFoundError(f"Space not found: {category}")

    def _activate_category(self, name: str) -> tuple[str, ...]:
        """Make sure ``name`` is an active space; return the collections touched."""
        if name in self._categories:
            return ()
        self._categories.append(name)
        if name in self._archived_categories:
            self._archived_categories.remove(name)
            return (CATEGORIES, ARCHIVED_CATEGORIES)
        return (CATEGORIES,)

    def _flush(self, *collections: str) -> None:
        for collection in COLLECTIONS:
            if collection in collections:
                self.storage.write(
                    collection_key(self.user_id, collection), self._serialize(collection)
                )

    def _serialize(self, collection: str) -> list[Any]:
        if collection == TASKS:
            return [_dump_task(t) for t in self._tasks]
        if collection == ARCHIVED_TASKS:
            return [_dump_task(t) for t in self._archived_tasks]
        if collection == CATEGORIES:
            return list(self._categories)
        return list(self._archived_categories)


def _dump_task(task: Task) -> dict[str, Any]:
    return task.model_dump(mode="json", by_alias=True, exclude_none=True)


def _clean_description(description: str | None) -> str | None:
    if description is None:
        return None
    return description.strip() or None


def _coerce_priority(priority: Priority | str) -> Priority:
    try:
        return Priority(priority)
    except ValueError as e:
        choices = ", ".join(p.value for p in Priority)
        raise ValidationError(f"Unknown priority '{priority}' (choose {choices})") from e
