"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for the device's
key-value storage. This allows us to:
1. Persist to a JSON file on disk in the app
2. Use in-memory storage for testing
3. Keep the identity and ledger stores decoupled from the medium

The interface is intentionally simple - string keys, JSON values.
Schemas are enforced one layer up, in the record codec.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class KeyValueStoreInterface(ABC):
    """
    Abstract interface for persistent key-value storage.

    Values are JSON-serializable (dicts, lists, strings, numbers,
    booleans, None). Every write is immediate and synchronous.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """
        Read the value stored under a key.

        Args:
            key: Storage key

        Returns:
            A fresh copy of the stored value, or None if the key is absent
        """
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """
        Store a value under a key, replacing any previous value.

        Args:
            key: Storage key
            value: JSON-serializable value

        Raises:
            StorageError: If the value cannot be serialized or written
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            True if the key existed
        """
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """All keys currently stored, sorted."""
        pass

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class MalformedStoredDataError(StorageError):
    """Stored value does not match the expected schema."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Malformed data under '{key}': {reason}")


class StorageWriteError(StorageError):
    """The backing medium rejected a write."""
    pass
