"""Database connection management for the local SQLite store.

This module provides a singleton connection manager, ensuring a single
connection per process, WAL mode and an up-to-date schema.
"""

from __future__ import annotations

import atexit
import logging
import os
import sqlite3
from pathlib import Path

from platformdirs import user_data_dir

from todry.adapters.sqlite.migrations import ALL_MIGRATIONS, MigrationRunner

DEFAULT_DB_NAME = "todry.db"

logger = logging.getLogger(__name__)


def default_db_path() -> Path:
    """Location of the store when no path is configured."""
    return Path(user_data_dir("todry")) / DEFAULT_DB_NAME


class DatabaseConnection:
    """Singleton connection manager for the local SQLite store.

    Provides:
    - Single connection per process (connection reuse)
    - WAL mode
    - Automatic directory creation
    - Owner-only file permissions
    - Graceful cleanup on exit
    """

    _instance: DatabaseConnection | None = None
    _connection: sqlite3.Connection | None = None
    _db_path: Path | None = None

    def __new__(cls) -> DatabaseConnection:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    def get_connection(cls, db_path: str | Path | None = None) -> sqlite3.Connection:
        """Get or create the database connection.

        Args:
            db_path: Path to database file. If None, uses default location.

        Returns:
            sqlite3.Connection with migrations applied
        """
        instance = cls()
        db_path = default_db_path() if db_path is None else Path(db_path)

        if instance._connection is not None and instance._db_path == db_path:
            return instance._connection

        if instance._connection is not None:
            instance._connection.close()

        db_path.parent.mkdir(parents=True, exist_ok=True)
        is_new_database = not db_path.exists()

        connection = sqlite3.connect(str(db_path), timeout=30.0)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA journal_mode = WAL")

        if is_new_database:
            os.chmod(db_path, 0o600)
            logger.info("created store at %s", db_path)

        MigrationRunner(connection).run_migrations(ALL_MIGRATIONS)

        instance._connection = connection
        instance._db_path = db_path
        atexit.register(cls.close_connection)
        return connection

    @classmethod
    def close_connection(cls) -> None:
        """Close the database connection, committing pending work."""
        instance = cls()
        if instance._connection is None:
            return
        try:
            instance._connection.commit()
            instance._connection.close()
        except sqlite3.Error as e:
            logger.warning("error closing store: %s", e)
        finally:
            instance._connection = None
            instance._db_path = None

    @classmethod
    def get_db_path(cls) -> Path | None:
        return cls()._db_path


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """Helper function to get the database connection."""
    return DatabaseConnection.get_connection(db_path)
