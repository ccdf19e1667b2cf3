"""Adapters module - StorageBackend implementations.

- sqlite: Local SQLite database storage
- memory: Process-local dictionary storage
"""

from .memory import InMemoryStorage
from .sqlite import SqliteStorage

__all__ = [
    "SqliteStorage",
    "InMemoryStorage",
]
