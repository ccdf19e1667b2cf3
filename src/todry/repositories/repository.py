"""Storage abstraction layer for Todry.

This module defines the abstract base class (interface) for the storage
substrate, following the hexagonal architecture (Ports & Adapters) pattern.

The substrate is a plain key-value store of JSON documents. Keys are scoped
per user by the callers (``todry_<user_id>_tasks`` and so on), so a backend
never needs to know about users, tasks or spaces.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class StorageBackend(ABC):
    """Abstract base class for key-value persistence.

    Implementations must be read-your-writes consistent: a value passed to
    ``write`` is what the next ``read`` of the same key returns.
    """

    @abstractmethod
    def read(self, key: str) -> Any | None:
        """Read a JSON value.

        Args:
            key: Storage key

        Returns:
            The decoded value, or None if the key has never been written

        Raises:
            NotImplementedError: Must be implemented by concrete adapter
        """
        raise NotImplementedError("StorageBackend.read() must be implemented by adapter")

    @abstractmethod
    def write(self, key: str, value: Any) -> None:
        """Write a JSON-serialisable value, replacing any previous value.

        Args:
            key: Storage key
            value: Value to store

        Raises:
            NotImplementedError: Must be implemented by concrete adapter
        """
        raise NotImplementedError("StorageBackend.write() must be implemented by adapter")

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove a key. Removing a missing key is not an error.

        Raises:
            NotImplementedError: Must be implemented by concrete adapter
        """
        raise NotImplementedError("StorageBackend.remove() must be implemented by adapter")

    @abstractmethod
    def keys(self, prefix: str = "") -> list[str]:
        """List stored keys starting with ``prefix``.

        Raises:
            NotImplementedError: Must be implemented by concrete adapter
        """
        raise NotImplementedError("StorageBackend.keys() must be implemented by adapter")
