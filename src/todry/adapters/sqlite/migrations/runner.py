"""Migration framework for the SQLite store.

Migrations are sequential and forward-only. Each applied version is
recorded in ``schema_version`` and pending ones run on connection.
"""

from __future__ import annotations

import logging
import sqlite3
from abc import ABC, abstractmethod

from todry.utils.dates import now_iso

logger = logging.getLogger(__name__)


class Migration(ABC):
    """Base class for database migrations."""

    @property
    @abstractmethod
    def version(self) -> int:
        """Migration version number (sequential)."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of the migration."""

    @abstractmethod
    def up(self, connection: sqlite3.Connection) -> None:
        """Execute forward migration."""


class MigrationRunner:
    """Applies pending migrations to a connection."""

    def __init__(self, connection: sqlite3.Connection):
        self.connection = connection
        self._ensure_version_table()

    def _ensure_version_table(self) -> None:
        self.connection.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY,
                description TEXT NOT NULL,
                applied_at DATETIME NOT NULL
            )
        """)
        self.connection.commit()

    def get_current_version(self) -> int:
        """Return the highest applied version, 0 for a fresh database."""
        cursor = self.connection.execute("SELECT MAX(version) FROM schema_version")
        result = cursor.fetchone()[0]
        return result if result is not None else 0

    def run_migration(self, migration: Migration) -> None:
        """Run a single migration inside a transaction.

        Raises:
            ValueError: If the migration is not newer than the current version
            RuntimeError: If the migration itself fails (changes are rolled back)
        """
        current_version = self.get_current_version()
        if migration.version <= current_version:
            raise ValueError(
                f"Migration version {migration.version} is not greater than "
                f"current version {current_version}"
            )

        try:
            migration.up(self.connection)
            self.connection.execute(
                "INSERT INTO schema_version (version, description, applied_at) VALUES (?, ?, ?)",
                (migration.version, migration.description, now_iso()),
            )
            self.connection.commit()
        except sqlite3.Error as e:
            self.connection.rollback()
            raise RuntimeError(f"Migration {migration.version} failed: {str(e)}") from e

        logger.info("applied migration %d: %s", migration.version, migration.description)

    def run_migrations(self, migrations: list[Migration]) -> int:
        """Run all pending migrations in version order.

        Returns:
            Number of migrations applied
        """
        current_version = self.get_current_version()
        pending = [
            m for m in sorted(migrations, key=lambda m: m.version)
            if m.version > current_version
        ]
        for migration in pending:
            self.run_migration(migration)
        return len(pending)

    def get_migration_history(self) -> list[dict]:
        cursor = self.connection.execute(
            "SELECT version, description, applied_at FROM schema_version ORDER BY version"
        )
        return [
            {"version": row[0], "description": row[1], "applied_at": row[2]}
            for row in cursor.fetchall()
        ]
