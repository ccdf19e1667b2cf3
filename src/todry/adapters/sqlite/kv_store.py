"""SQLite implementation of StorageBackend."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any

from todry.adapters.sqlite.connection import get_connection
from todry.repositories.repository import StorageBackend
from todry.utils.dates import now_iso


class SqliteStorage(StorageBackend):
    """Key-value storage in the local SQLite file.

    Every write is committed before returning, so a later read from any
    process observes it.
    """

    def __init__(self, db_path: str | Path | None = None):
        """Initialize SQLite storage.

        Args:
            db_path: Optional database file path. If None, uses default location.
        """
        self.db_path = db_path
        self._connection: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = get_connection(self.db_path)
        return self._connection

    def read(self, key: str) -> Any | None:
        row = self.connection.execute(
            "SELECT value FROM kv_store WHERE key = ?", (key,)
        ).fetchone()
        if row is None:
            return None
        return json.loads(row["value"])

    def write(self, key: str, value: Any) -> None:
        self.connection.execute(
            """
            INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                           updated_at = excluded.updated_at
            """,
            (key, json.dumps(value), now_iso()),
        )
        self.connection.commit()

    def remove(self, key: str) -> None:
        self.connection.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        self.connection.commit()

    def keys(self, prefix: str = "") -> list[str]:
        cursor = self.connection.execute(
            "SELECT key FROM kv_store WHERE substr(key, 1, ?) = ? ORDER BY key",
            (len(prefix), prefix),
        )
        return [row["key"] for row in cursor.fetchall()]
