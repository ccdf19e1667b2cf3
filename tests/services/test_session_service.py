"""Unit tests for Session (login barrier, theme, undo persistence)."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from todry.adapters.sqlite import DatabaseConnection
from todry.config import Config
from todry.models import NotAuthenticatedError, ValidationError
from todry.services.feedback_service import FeedbackCue, FeedbackDispatcher
from todry.services.session_service import THEME_KEY, Session, get_session


class TestLoginBarrier:
    def test_nothing_available_before_login(self, session):
        assert session.user is None
        with pytest.raises(NotAuthenticatedError):
            session.repository
        with pytest.raises(NotAuthenticatedError):
            session.undo

    def test_signup_activates_user(self, session):
        user = session.signup("alice", "secret")

        assert session.user == user
        assert session.repository.user_id == user.id
        assert session.undo.repository is session.repository

    def test_switching_users_swaps_data(self, session):
        session.signup("alice", "secret")
        session.repository.create_task("Alice's task")
        session.logout()

        session.signup("bob", "secret")
        assert session.repository.tasks == []
        session.logout()

        session.login("ALICE", "secret")
        assert [t.text for t in session.repository.tasks] == ["Alice's task"]

    def test_logout_drops_everything(self, session):
        session.signup("alice", "secret")
        session.logout()

        assert session.user is None
        assert session.identity.current_user() is None
        with pytest.raises(NotAuthenticatedError):
            session.repository

    def test_resume_picks_up_pointer(self, storage):
        first = Session(storage, Config())
        user = first.signup("alice", "secret")
        first.repository.create_task("Persisted")

        second = Session(storage, Config())
        assert second.resume() == user
        assert [t.text for t in second.repository.tasks] == ["Persisted"]

    def test_resume_without_pointer(self, session):
        assert session.resume() is None

    def test_min_password_length_from_config(self, storage):
        config = Config()
        config.auth.min_password_length = 10
        with pytest.raises(ValidationError):
            Session(storage, config).signup("alice", "short-pw")


class TestUndoPersistence:
    def test_pending_undo_survives_process_restart(self, storage):
        first = Session(storage, Config())
        first.signup("alice", "secret")
        task = first.repository.create_task("Gone")
        first.repository.delete_task(task.id)
        first.save()

        second = Session(storage, Config())
        second.resume()

        assert second.undo.consume_undo().key == task.id
        assert second.repository.tasks[0].id == task.id

    def test_save_clears_consumed_offer(self, storage):
        first = Session(storage, Config())
        user = first.signup("alice", "secret")
        task = first.repository.create_task("Gone")
        first.repository.delete_task(task.id)
        first.save()
        first.undo.dismiss()
        first.save()

        assert storage.read(f"todry_{user.id}_pending_undo") is None

    def test_unreadable_snapshot_is_discarded(self, storage):
        first = Session(storage, Config())
        user = first.signup("alice", "secret")
        storage.write(f"todry_{user.id}_pending_undo", {"garbage": True})

        second = Session(storage, Config())
        second.resume()

        assert second.undo.pending is None

    def test_save_without_user_is_noop(self, session, storage):
        session.save()
        assert storage.keys() == []


class TestTheme:
    def test_default_is_dark(self, session):
        assert session.theme() == "dark"

    def test_set_and_toggle(self, session, storage):
        session.set_theme("light")
        assert storage.read(THEME_KEY) == "light"
        assert session.toggle_theme() == "dark"

    def test_toggle_plays_click_cue(self, storage):
        cues = []
        session = Session(storage, Config(), feedback=FeedbackDispatcher([cues.append]))

        session.toggle_theme()
        session.set_theme("dark")

        assert cues == [FeedbackCue.UI_CLICK]

    def test_unknown_theme_rejected(self, session):
        with pytest.raises(ValidationError):
            session.set_theme("sepia")

    def test_theme_is_global(self, session):
        session.signup("alice", "secret")
        session.set_theme("light")
        session.logout()
        assert session.theme() == "light"


class TestGetSession:
    def test_uses_configured_sqlite_path(self, tmp_path):
        get_session.cache_clear()
        db_path = tmp_path / "custom.db"
        with patch("todry.services.session_service.get_config_manager") as mock_manager:
            mock_manager.return_value.config = Config(storage={"path": str(db_path)})
            session = get_session()
        try:
            assert session.storage.db_path == str(db_path)
            assert session.user is None
        finally:
            DatabaseConnection.close_connection()
            get_session.cache_clear()
