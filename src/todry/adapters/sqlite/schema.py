"""Database schema definitions for the local SQLite store.

The store is a single key-value table. Each row holds one JSON document:
a user's task list, a user's space list, the global users table and so on.
"""

from __future__ import annotations

# Schema version tracking
SCHEMA_VERSION = 1

# Key-value documents
CREATE_KV_STORE_TABLE = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at DATETIME NOT NULL
)
"""

CREATE_KV_STORE_UPDATED_INDEX = """
CREATE INDEX IF NOT EXISTS idx_kv_store_updated_at ON kv_store(updated_at)
"""

ALL_TABLES = [
    CREATE_KV_STORE_TABLE,
]

ALL_INDEXES = [
    CREATE_KV_STORE_UPDATED_INDEX,
]
