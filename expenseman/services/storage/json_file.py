"""
JSON File Storage

Tasks and habits have no spreadsheet origin, so they are persisted
locally, one JSON file per collection. The sync engine reads them on
every cycle and never overwrites them.

TRADEOFFS:
- Whole-file rewrite on every change (fine for a few hundred items)
- A corrupt file is treated as empty rather than blocking the app
"""

from pathlib import Path
from typing import Optional, Union

import structlog
from pydantic import TypeAdapter, ValidationError

from expenseman.services.storage.interface import ModelT, StorageError
from expenseman.services.storage.memory import InMemoryCollectionStore


logger = structlog.get_logger(__name__)


class JsonFileCollectionStore(InMemoryCollectionStore[ModelT]):
    """
    Collection persisted as a JSON array on disk.

    The file is read once at construction and rewritten before each
    mutation becomes visible.
    """

    def __init__(
        self,
        model: type[ModelT],
        path: Union[str, Path],
        name: Optional[str] = None,
    ):
        self._path = Path(path)
        self._adapter = TypeAdapter(list[model])
        super().__init__(model, name=name)
        self._items = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> list[ModelT]:
        if not self._path.exists():
            return []
        try:
            return self._adapter.validate_json(self._path.read_bytes())
        except (ValidationError, ValueError, OSError) as e:
            logger.warning(
                "local_store_unreadable",
                path=str(self._path),
                error=str(e),
            )
            return []

    def _commit(self, items: list[ModelT]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_bytes(self._adapter.dump_json(items, indent=2))
        except OSError as e:
            raise StorageError(f"Failed to save {self.name} to {self._path}: {e}") from e
        self._items = items
