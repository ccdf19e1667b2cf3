"""User registration, login and the current-session pointer.

The password fingerprint is a demo hash, not a security feature. It must
only be stable: the same password always yields the same value, and it
matches what the web app stores, so existing user tables
keep working.
"""

from __future__ import annotations

import logging

from todry.models import (
    DuplicateUsernameError,
    InvalidCredentialsError,
    User,
    UserNotFoundError,
)
from todry.repositories.repository import StorageBackend
from todry.utils.dates import now_utc
from todry.utils.uuid_utils import generate_uuid

USERS_KEY = "todry_users"
CURRENT_USER_KEY = "todry_current_user"
DEFAULT_MIN_PASSWORD_LENGTH = 4

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"

logger = logging.getLogger(__name__)


def fingerprint(password: str) -> str:
    """Derive the non-secure password fingerprint.

    A 31-multiplier rolling hash over UTF-16 code units, wrapped to a signed
    32-bit integer and written in base 36.
    """
    value = 0
    encoded = password.encode("utf-16-le")
    for i in range(0, len(encoded), 2):
        code_unit = encoded[i] | (encoded[i + 1] << 8)
        value = (value * 31 + code_unit) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return _to_base36(value)


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    value = abs(value)
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return sign + "".join(reversed(digits))


class IdentityStore:
    """Registers and authenticates users against the global users table."""

    def __init__(
        self,
        storage: StorageBackend,
        *,
        min_password_length: int = DEFAULT_MIN_PASSWORD_LENGTH,
    ):
        self.storage = storage
        self.min_password_length = min_password_length

    def list_users(self) -> list[User]:
        return [User.model_validate(item) for item in self.storage.read(USERS_KEY) or []]

    def find(self, username: str) -> User | None:
        """Look a user up by name, ignoring case."""
        wanted = username.strip().lower()
        return next((u for u in self.list_users() if u.username.lower() == wanted), None)

    def register(self, username: str, password: str) -> User:
        """Create a user and start a session for them.

        Raises:
            InvalidCredentialsError: If either field is blank, the username
                contains whitespace or the password is too short
            DuplicateUsernameError: If the username is taken (ignoring case)
        """
        self._require_both(username, password)
        if any(ch.isspace() for ch in username):
            raise InvalidCredentialsError("Username cannot contain spaces")
        if len(password) < self.min_password_length:
            raise InvalidCredentialsError(
                f"Password must be at least {self.min_password_length} characters"
            )
        users = self.list_users()
        if any(u.username.lower() == username.lower() for u in users):
            raise DuplicateUsernameError("Username already exists")

        user = User(
            id=generate_uuid(),
            username=username,
            password_fingerprint=fingerprint(password),
            created_at=now_utc(),
        )
        self.storage.write(USERS_KEY, [_dump_user(u) for u in [*users, user]])
        self._start_session(user)
        logger.info("registered user %s (%s)", user.username, user.id)
        return user

    def authenticate(self, username: str, password: str) -> User:
        """Check credentials and start a session.

        Raises:
            InvalidCredentialsError: If either field is blank or the password is wrong
            UserNotFoundError: If no user has this name
        """
        self._require_both(username, password)
        user = self.find(username)
        if user is None:
            raise UserNotFoundError(f"No such user: {username.strip()}")
        if user.password_fingerprint != fingerprint(password):
            logger.info("failed login for %s", user.username)
            raise InvalidCredentialsError("Invalid username or password")

        self._start_session(user)
        logger.info("user %s logged in", user.username)
        return user

    def logout(self) -> None:
        current = self.current_user()
        self.storage.remove(CURRENT_USER_KEY)
        if current is not None:
            logger.info("user %s logged out", current.username)

    def current_user(self) -> User | None:
        data = self.storage.read(CURRENT_USER_KEY)
        if data is None:
            return None
        return User.model_validate(data)

    def _start_session(self, user: User) -> None:
        self.storage.write(CURRENT_USER_KEY, _dump_user(user))

    @staticmethod
    def _require_both(username: str, password: str) -> None:
        if not (username or "").strip() or not (password or "").strip():
            raise InvalidCredentialsError("Username and password required")


def _dump_user(user: User) -> dict:
    return user.model_dump(mode="json", by_alias=True)
