"""Login barrier between the identity store and a user's data.

A ``Session`` holds at most one active user. Logging in builds a fresh
repository and undo buffer for that user; logging out tears both down.
Data of two users is never loaded at the same time.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from pydantic import ValidationError as PydanticValidationError

from todry.config import Config, get_config_manager
from todry.models import NotAuthenticatedError, PendingUndo, User, ValidationError
from todry.repositories.repository import StorageBackend
from todry.repositories.task_repository import TaskRepository, collection_key
from todry.services.feedback_service import FeedbackCue, FeedbackDispatcher
from todry.services.identity_service import IdentityStore
from todry.services.undo_service import UndoBuffer

THEME_KEY = "todry_theme"
THEMES = ("dark", "light")
DEFAULT_THEME = "dark"
PENDING_UNDO = "pending_undo"

Theme = Literal["dark", "light"]

logger = logging.getLogger(__name__)


class Session:
    """The currently signed-in user and their live repository."""

    def __init__(
        self,
        storage: StorageBackend,
        config: Config | None = None,
        *,
        feedback: FeedbackDispatcher | None = None,
    ):
        self.storage = storage
        self.config = config or Config()
        self.feedback = feedback or FeedbackDispatcher()
        self.identity = IdentityStore(
            storage, min_password_length=self.config.auth.min_password_length
        )
        self._user: User | None = None
        self._repository: TaskRepository | None = None
        self._undo: UndoBuffer | None = None

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def user(self) -> User | None:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    def signup(self, username: str, password: str) -> User:
        user = self.identity.register(username, password)
        self._activate(user)
        return user

    def login(self, username: str, password: str) -> User:
        user = self.identity.authenticate(username, password)
        self._activate(user)
        return user

    def logout(self) -> None:
        """Drop the active user's data and clear the session pointer."""
        if self._user is not None:
            self.storage.remove(self._undo_key(self._user))
        self._teardown()
        self.identity.logout()

    def resume(self) -> User | None:
        """Re-activate whoever the session pointer names, if anyone."""
        user = self.identity.current_user()
        if user is not None and (self._user is None or self._user.id != user.id):
            self._activate(user)
        return self._user

    # ------------------------------------------------------------------
    # Per-user state
    # ------------------------------------------------------------------

    @property
    def repository(self) -> TaskRepository:
        if self._repository is None:
            raise NotAuthenticatedError("Not logged in. Use 'todry auth login' first.")
        return self._repository

    @property
    def undo(self) -> UndoBuffer:
        if self._undo is None:
            raise NotAuthenticatedError("Not logged in. Use 'todry auth login' first.")
        return self._undo

    def save(self) -> None:
        """Persist the pending undo offer so the next process can honour it."""
        if self._user is None or self._undo is None:
            return
        key = self._undo_key(self._user)
        snapshot = self._undo.snapshot()
        if snapshot is None:
            self.storage.remove(key)
        else:
            self.storage.write(key, snapshot.model_dump(mode="json", by_alias=True))

    # ------------------------------------------------------------------
    # Theme
    # ------------------------------------------------------------------

    def theme(self) -> Theme:
        value = self.storage.read(THEME_KEY)
        return value if value in THEMES else DEFAULT_THEME

    def set_theme(self, theme: str) -> Theme:
        if theme not in THEMES:
            raise ValidationError(f"Unknown theme '{theme}' (choose dark, light)")
        self.storage.write(THEME_KEY, theme)
        return theme  # type: ignore[return-value]

    def toggle_theme(self) -> Theme:
        """Flip between dark and light and play the click cue."""
        theme = self.set_theme("light" if self.theme() == "dark" else "dark")
        self.feedback.emit(FeedbackCue.UI_CLICK)
        return theme

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _activate(self, user: User) -> None:
        self._teardown()
        repository = TaskRepository.load(self.storage, user.id, feedback=self.feedback)
        windows = self.config.undo
        undo = UndoBuffer(
            repository,
            task_window=windows.task_window,
            category_window=windows.category_window,
            notice_window=windows.notice_window,
        )
        undo.restore_snapshot(self._load_snapshot(user))
        self._user = user
        self._repository = repository
        self._undo = undo
        logger.debug("session active for %s", user.username)

    def _teardown(self) -> None:
        if self._undo is not None:
            self._undo.close()
        self._user = None
        self._repository = None
        self._undo = None

    def _load_snapshot(self, user: User) -> PendingUndo | None:
        data = self.storage.read(self._undo_key(user))
        if data is None:
            return None
        try:
            return PendingUndo.model_validate(data)
        except PydanticValidationError as e:
            logger.warning("discarding unreadable undo snapshot for %s: %s", user.id, e)
            return None

    @staticmethod
    def _undo_key(user: User) -> str:
        return collection_key(user.id, PENDING_UNDO)


@lru_cache(maxsize=1)
def get_session(profile: str = "default") -> Session:
    """Session for the CLI process, resumed from the stored session pointer."""
    from todry.adapters.sqlite import SqliteStorage
    from todry.utils.ui.feedback import console_feedback_sink

    config = get_config_manager(profile).config
    session = Session(
        SqliteStorage(config.storage.path),
        config,
        feedback=FeedbackDispatcher([console_feedback_sink]),
    )
    session.resume()
    return session
