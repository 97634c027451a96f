"""
Storage Services Package

Provides abstract interfaces and concrete implementations for local data.
Sheet collections are mirrored in memory; tasks and habits go to JSON files.
"""

from expenseman.services.storage.interface import (
    AuditStorageInterface,
    CollectionStore,
    InvalidEntityError,
    MutationError,
    NotFoundError,
    StorageError,
)
from expenseman.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryCollectionStore,
)
from expenseman.services.storage.json_file import JsonFileCollectionStore

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "CollectionStore",
    # Exceptions
    "InvalidEntityError",
    "MutationError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "InMemoryAuditStorage",
    "InMemoryCollectionStore",
    "JsonFileCollectionStore",
]
