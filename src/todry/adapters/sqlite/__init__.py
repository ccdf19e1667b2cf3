"""SQLite adapter module - Local database storage implementation."""

from todry.adapters.sqlite.connection import DatabaseConnection, get_connection
from todry.adapters.sqlite.kv_store import SqliteStorage

__all__ = [
    "SqliteStorage",
    "DatabaseConnection",
    "get_connection",
]
