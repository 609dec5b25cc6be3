"""Key-value persisted collections.

A ``CollectionStore`` keeps one JSON-encoded list of records per collection
key on top of an opaque text backend. Reads return the whole collection and
writes overwrite it; there are no partial updates and no schema checks.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Iterable, Protocol, TypeVar

from classquiz.constants.storage_constants import STORAGE_NAMESPACE
from classquiz.core.errors import StoreCorruptedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StorageBackend(Protocol):
    """Opaque text store addressed by key."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryBackend:
    """Dictionary-backed storage, used for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class FileBackend:
    """Stores each key as ``<key>.json`` inside a data directory."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir).expanduser().resolve()
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        path = self._path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        self._path_for(key).write_text(value, encoding="utf-8")

    def remove_item(self, key: str) -> None:
        self._path_for(key).unlink(missing_ok=True)


class CollectionStore:
    """Whole-collection reads and writes of JSON records."""

    def __init__(self, backend: StorageBackend, namespace: str = STORAGE_NAMESPACE) -> None:
        self._backend = backend
        self._namespace = namespace

    def _qualify(self, key: str) -> str:
        return f"{self._namespace}_{key}" if self._namespace else key

    def has(self, key: str) -> bool:
        return self._backend.get_item(self._qualify(key)) is not None

    def get(self, key: str) -> list[dict[str, Any]]:
        """Return the stored records for ``key``, or an empty list when absent."""
        raw = self._backend.get_item(self._qualify(key))
        if raw is None:
            return []
        try:
            records = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StoreCorruptedError(key, str(exc)) from exc
        if not isinstance(records, list):
            raise StoreCorruptedError(key, f"expected a list, found {type(records).__name__}")
        return records

    def set(self, key: str, records: list[dict[str, Any]]) -> None:
        self._backend.set_item(self._qualify(key), json.dumps(records))

    def remove(self, key: str) -> None:
        self._backend.remove_item(self._qualify(key))

    def load(self, key: str, factory: Callable[[dict[str, Any]], T]) -> list[T]:
        return [factory(record) for record in self.get(key)]

    def save(self, key: str, items: Iterable[Any]) -> None:
        self.set(key, [item.to_record() for item in items])
