"""Services package."""

from expenseman.services.sheets import (
    ConfigurationError,
    GoogleSheetsSource,
    NetworkError,
    SheetSource,
    SheetsError,
    TransportError,
)
from expenseman.services.storage import (
    AuditStorageInterface,
    CollectionStore,
    InMemoryAuditStorage,
    InMemoryCollectionStore,
    InvalidEntityError,
    JsonFileCollectionStore,
    MutationError,
    NotFoundError,
    StorageError,
)

__all__ = [
    # Sheet services
    "ConfigurationError",
    "GoogleSheetsSource",
    "NetworkError",
    "SheetSource",
    "SheetsError",
    "TransportError",
    # Storage services
    "AuditStorageInterface",
    "CollectionStore",
    "InMemoryAuditStorage",
    "InMemoryCollectionStore",
    "InvalidEntityError",
    "JsonFileCollectionStore",
    "MutationError",
    "NotFoundError",
    "StorageError",
]
