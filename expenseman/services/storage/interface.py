"""
Abstract Storage Interface

DESIGN DECISION: Local data lives behind an abstract interface.
This allows us to:
1. Mirror sheet collections in memory for fast optimistic edits
2. Persist tasks and habits to a file (or anything else) later
3. Use in-memory storage for testing

The interface is intentionally simple - we're not building an ORM.
Just the CRUD operations the dashboard needs.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from expenseman.models.audit import AuditEvent


ModelT = TypeVar("ModelT", bound=BaseModel)


class CollectionStore(ABC, Generic[ModelT]):
    """
    Abstract interface for one collection of entities keyed by ``id``.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    async def list(self) -> list[ModelT]:
        """
        Return every item in insertion order.
        """
        pass

    @abstractmethod
    async def add(self, data: dict[str, Any]) -> ModelT:
        """
        Create a new item with a generated id.

        Args:
            data: Field values (any ``id`` is ignored)

        Returns:
            The stored item

        Raises:
            InvalidEntityError: If the data does not validate
        """
        pass

    @abstractmethod
    async def update(self, item_id: str, updates: dict[str, Any]) -> ModelT:
        """
        Merge updates into an existing item.

        Args:
            item_id: Id of the item to update
            updates: Field values to overwrite

        Returns:
            The updated item

        Raises:
            NotFoundError: If no item has this id
            InvalidEntityError: If the merged item does not validate
        """
        pass

    @abstractmethod
    async def delete(self, item_id: str) -> bool:
        """
        Delete an item by id.

        Returns:
            True if something was deleted
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """
        Get the most recent audit events (newest first).
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class MutationError(StorageError):
    """An add/update/delete against a store failed."""
    pass


class NotFoundError(MutationError):
    """Entity not found in storage."""
    pass


class InvalidEntityError(MutationError):
    """Entity data failed validation."""
    pass
