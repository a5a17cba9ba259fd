"""Services package."""

from fintrack.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStoreInterface,
    MalformedStoredDataError,
    StorageError,
    StorageWriteError,
)

__all__ = [
    # Storage services
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStoreInterface",
    "MalformedStoredDataError",
    "StorageError",
    "StorageWriteError",
]
