"""Initial schema: the key-value document table."""

import sqlite3

from todry.adapters.sqlite import schema
from .runner import Migration


class KeyValueStoreMigration(Migration):
    """Migration 001: create the kv_store table."""

    @property
    def version(self) -> int:
        return 1

    @property
    def description(self) -> str:
        return "Key-value document store"

    def up(self, connection: sqlite3.Connection) -> None:
        for table_sql in schema.ALL_TABLES:
            connection.execute(table_sql)
        for index_sql in schema.ALL_INDEXES:
            connection.execute(index_sql)


initial_migration = KeyValueStoreMigration()
