"""
In-Memory Storage Implementation

Used by the test suite and by the 'memory' storage backend.
Values are kept serialized so they round-trip exactly as they
would through the JSON file store.
"""

import json
from typing import Any, Optional

from fintrack.services.storage.interface import KeyValueStoreInterface, StorageError


class InMemoryKeyValueStore(KeyValueStoreInterface):
    """Ephemeral key-value store backed by a dict of JSON strings."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        try:
            self._data[key] = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for '{key}' is not JSON-serializable: {e}")

    def remove(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def keys(self) -> list[str]:
        return sorted(self._data)
