"""Storage backends and the stored-record codec."""

from fintrack.services.storage.interface import (
    KeyValueStoreInterface,
    MalformedStoredDataError,
    StorageError,
    StorageWriteError,
)
from fintrack.services.storage.json_file import JsonFileKeyValueStore
from fintrack.services.storage.memory import InMemoryKeyValueStore
from fintrack.services.storage.records import (
    decode_record_list,
    load_record,
    load_record_list,
    save_record,
    save_record_list,
)

__all__ = [
    "KeyValueStoreInterface",
    "MalformedStoredDataError",
    "StorageError",
    "StorageWriteError",
    "JsonFileKeyValueStore",
    "InMemoryKeyValueStore",
    "decode_record_list",
    "load_record",
    "load_record_list",
    "save_record",
    "save_record_list",
]
