"""Repository layer.

``StorageBackend`` is the port every storage adapter implements;
``TaskRepository`` owns one user's tasks and spaces on top of it.
"""

from .repository import StorageBackend
from .task_repository import RepositoryEvent, TaskRepository, collection_key

__all__ = [
    "StorageBackend",
    "TaskRepository",
    "RepositoryEvent",
    "collection_key",
]
