"""
In-Memory Storage

Sheet-derived collections are mirrored here so the dashboard can edit
them optimistically. Every successful sync replaces the mirror with
fresh sheet data, so edits made here only last until the next sync.
"""

from collections import deque
from typing import Any, Optional
from uuid import uuid4

from pydantic import ValidationError

from expenseman.models.audit import AuditEvent
from expenseman.services.storage.interface import (
    AuditStorageInterface,
    CollectionStore,
    InvalidEntityError,
    ModelT,
    NotFoundError,
)


class InMemoryCollectionStore(CollectionStore[ModelT]):
    """
    Collection kept in a Python list.

    Items are validated with the collection's pydantic model on every
    write, and a write only becomes visible once ``_commit`` succeeds.
    """

    def __init__(
        self,
        model: type[ModelT],
        items: Optional[list[ModelT]] = None,
        name: Optional[str] = None,
    ):
        self._model = model
        self._items: list[ModelT] = list(items or [])
        self.name = name or model.__name__.lower()

    def replace_all(self, items: list[ModelT]) -> None:
        """Reset the collection (used when a sync cycle publishes)."""
        self._items = list(items)

    def _validate(self, data: dict[str, Any]) -> ModelT:
        try:
            return self._model.model_validate(data)
        except ValidationError as e:
            raise InvalidEntityError(f"Invalid {self.name} data: {e}") from e

    def _index_of(self, item_id: str) -> int:
        for idx, item in enumerate(self._items):
            if item.id == item_id:
                return idx
        return -1

    def _commit(self, items: list[ModelT]) -> None:
        """Make a new item list current. Persistent subclasses write first."""
        self._items = items

    async def list(self) -> list[ModelT]:
        return list(self._items)

    async def add(self, data: dict[str, Any]) -> ModelT:
        fields = {k: v for k, v in data.items() if k != "id"}
        item = self._validate({**fields, "id": str(uuid4())})
        self._commit([*self._items, item])
        return item

    async def update(self, item_id: str, updates: dict[str, Any]) -> ModelT:
        idx = self._index_of(item_id)
        if idx == -1:
            raise NotFoundError(f"{self.name} item not found: {item_id}")

        updated = self._validate({
            **self._items[idx].model_dump(),
            **updates,
            "id": item_id,
        })
        items = list(self._items)
        items[idx] = updated
        self._commit(items)
        return updated

    async def delete(self, item_id: str) -> bool:
        idx = self._index_of(item_id)
        if idx == -1:
            return False
        self._commit(self._items[:idx] + self._items[idx + 1:])
        return True


class InMemoryAuditStorage(AuditStorageInterface):
    """Bounded audit log kept in memory (oldest events are dropped)."""

    def __init__(self, max_events: int = 1000):
        self._events: deque[AuditEvent] = deque(maxlen=max_events)

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        events = list(self._events)
        events.reverse()
        return events[:limit]
