"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from real filesystem state.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from unittest.mock import patch

import pytest

from todry.adapters.memory import InMemoryStorage
from todry.config import Config
from todry.models import Task
from todry.repositories.task_repository import TaskRepository
from todry.services.feedback_service import FeedbackDispatcher
from todry.services.session_service import Session


# ---------------------------------------------------------------------------
# Filesystem isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path):
    """Point log, config and data directories at *tmp_path*."""
    import todry.config as config_module
    import todry.utils.logger as logger_module

    tmpdir = str(tmp_path)
    config_module._config_manager = None
    logger_module._logger = None
    with patch("todry.utils.logger.user_log_dir", return_value=tmpdir):
        with patch("todry.config.user_config_dir", return_value=tmpdir):
            with patch("todry.adapters.sqlite.connection.user_data_dir", return_value=tmpdir):
                yield tmp_path
    config_module._config_manager = None
    app_logger = logging.getLogger("todry")
    for handler in list(app_logger.handlers):
        handler.close()
        app_logger.removeHandler(handler)
    app_logger.propagate = True
    logger_module._logger = None


# ---------------------------------------------------------------------------
# Storage and domain objects
# ---------------------------------------------------------------------------


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def feedback():
    return FeedbackDispatcher()


@pytest.fixture
def repo(storage, feedback):
    """An empty repository for user ``u1``."""
    return TaskRepository.load(storage, "u1", feedback=feedback)


@pytest.fixture
def session(storage):
    return Session(storage, Config())


def _make_task(task_id: str = "task_1", text: str = "Write report", **fields) -> Task:
    data = {
        "id": task_id,
        "text": text,
        "category": "Work",
        "created_at": datetime(2025, 3, 1, 9, 0, tzinfo=UTC),
    }
    data.update(fields)
    return Task(**data)


@pytest.fixture
def make_task():
    """Factory for standalone tasks with fixed timestamps."""
    return _make_task
