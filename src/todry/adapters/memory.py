"""In-memory implementation of StorageBackend."""

from __future__ import annotations

import json
from typing import Any

from todry.repositories.repository import StorageBackend


class InMemoryStorage(StorageBackend):
    """Dictionary-backed storage for tests and throwaway sessions.

    Values are round-tripped through JSON on write so callers can never
    mutate stored state through a shared reference, and so anything that
    would fail to persist in SQLite fails here as well.
    """

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.write(key, value)

    def read(self, key: str) -> Any | None:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def write(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self, prefix: str = "") -> list[str]:
        return sorted(k for k in self._data if k.startswith(prefix))
