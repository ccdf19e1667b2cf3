"""Single-slot undo buffer and transient notices.

Deleting a task or a space offers a one-tap undo for a few seconds. Only
one offer exists at a time: a newer deletion replaces it, and so does any
other notice (restored, permanently deleted, backup saved). When the offer
expires the item simply stays in the archive.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from todry.models import PendingUndo, UndoEntry
from todry.repositories.task_repository import RepositoryEvent, TaskRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notice:
    """What the front end should currently show."""

    message: str
    undoable: bool
    expires_at: float


class UndoBuffer:
    """Holds at most one reversible deletion for a limited time.

    Expiry is tracked two ways. A wall-clock deadline is always kept, so an
    expired offer is never honoured even if nothing was scheduled. When an
    asyncio loop is available, a timer is also scheduled on it so the
    notice disappears on its own; scheduling a new one cancels the old.
    """

    def __init__(
        self,
        repository: TaskRepository,
        *,
        task_window: float = 4.0,
        category_window: float = 4.0,
        notice_window: float = 3.0,
        clock: Callable[[], float] = time.time,
        loop: asyncio.AbstractEventLoop | None = None,
    ):
        self.repository = repository
        self.task_window = task_window
        self.category_window = category_window
        self.notice_window = notice_window
        self._clock = clock
        self._loop = loop
        self._pending: UndoEntry | None = None
        self._notice: Notice | None = None
        self._handle: asyncio.TimerHandle | None = None
        self._consuming = False
        repository.subscribe(self._on_event)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def pending(self) -> UndoEntry | None:
        """The entry that ``consume_undo`` would restore, if still offered."""
        self._refresh()
        return self._pending

    @property
    def notice(self) -> Notice | None:
        self._refresh()
        return self._notice

    @property
    def timer_active(self) -> bool:
        return self._handle is not None

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def record_deletion(self, entry: UndoEntry) -> None:
        """Offer undo for ``entry``, replacing any earlier offer."""
        window = self.task_window if entry.kind == "task" else self.category_window
        self._pending = entry
        self._show(entry.label, window, undoable=True)
        logger.debug("undo offered for %s %s (%.1fs)", entry.kind, entry.key, window)

    def consume_undo(self) -> UndoEntry | None:
        """Restore the pending entry and clear the slot.

        Returns:
            The restored entry, or None when nothing is offered
        """
        entry = self.pending
        if entry is None:
            return None
        self._clear()

        self._consuming = True
        try:
            if entry.kind == "task":
                self.repository.restore_task(entry.key)
            else:
                self.repository.restore_category(entry.key)
        finally:
            self._consuming = False
        logger.info("undid deletion of %s %s", entry.kind, entry.key)
        return entry

    def dismiss(self) -> None:
        """Hide the notice and drop the offer without restoring anything."""
        if self._pending is not None:
            logger.debug("undo dismissed for %s %s", self._pending.kind, self._pending.key)
        self._clear()

    def announce(self, message: str) -> Notice:
        """Show a short confirmation. Any pending undo offer is withdrawn."""
        self._pending = None
        return self._show(message, self.notice_window, undoable=False)

    def close(self) -> None:
        """Cancel timers and stop observing the repository."""
        self._clear()
        self.repository.unsubscribe(self._on_event)

    # ------------------------------------------------------------------
    # Persistence across processes
    # ------------------------------------------------------------------

    def snapshot(self) -> PendingUndo | None:
        entry = self.pending
        if entry is None or self._notice is None:
            return None
        return PendingUndo(entry=entry, expires_at=self._notice.expires_at)

    def restore_snapshot(self, snapshot: PendingUndo | None) -> None:
        """Re-offer a saved entry if its deadline has not passed."""
        if snapshot is None:
            return
        remaining = snapshot.expires_at - self._clock()
        if remaining <= 0:
            return
        self._pending = snapshot.entry
        self._show(snapshot.entry.label, remaining, undoable=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _on_event(self, event: RepositoryEvent) -> None:
        if event.kind == "archived":
            self.record_deletion(event.entry)
        elif not self._consuming:
            self.announce(_confirmation(event))

    def _show(self, message: str, window: float, *, undoable: bool) -> Notice:
        self._cancel_timer()
        self._notice = Notice(message, undoable, self._clock() + window)
        loop = self._loop or _running_loop()
        if loop is not None:
            self._handle = loop.call_later(window, self._expire)
        return self._notice

    def _refresh(self) -> None:
        if self._notice is not None and self._clock() >= self._notice.expires_at:
            self._expire()
        # Reviving a space or importing a backup can take the item out of the
        # archive without an event.
        if self._pending is not None and not self.repository.is_archived(self._pending):
            logger.debug(
                "undo offer dropped, %s %s left the archive", self._pending.kind, self._pending.key
            )
            self._clear()

    def _expire(self) -> None:
        self._handle = None
        if self._pending is not None:
            logger.debug("undo offer expired for %s %s", self._pending.kind, self._pending.key)
        self._pending = None
        self._notice = None

    def _clear(self) -> None:
        self._cancel_timer()
        self._pending = None
        self._notice = None

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


def _confirmation(event: RepositoryEvent) -> str:
    if event.kind == "purged":
        return "Permanently deleted"
    if event.entry.kind == "task":
        return "Task restored"
    return f"'{event.entry.category}' restored"
