"""Fixtures for command tests: a logged-out session on in-memory storage."""

from __future__ import annotations

from contextlib import ExitStack
from unittest.mock import patch

import pytest

from todry.adapters.memory import InMemoryStorage
from todry.config import Config
from todry.services.session_service import Session

SESSION_USERS = [
    "todry.commands.decorators.get_session",
    "todry.commands.auth.get_session",
    "todry.commands.tasks.get_session",
    "todry.commands.spaces.get_session",
    "todry.commands.archive.get_session",
    "todry.commands.data.get_session",
    "todry.commands.config.get_session",
    "todry.main.get_session",
]


@pytest.fixture
def cli_session():
    """Patch every command module to use one in-memory session."""
    session = Session(InMemoryStorage(), Config())
    with ExitStack() as stack:
        for target in SESSION_USERS:
            stack.enter_context(patch(target, return_value=session))
        yield session


@pytest.fixture
def logged_in(cli_session):
    cli_session.signup("alice", "secret")
    return cli_session
