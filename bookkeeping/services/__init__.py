"""Services package."""

from bookkeeping.services.storage import (
    ConnectionError,
    DuplicateError,
    GoogleSheetsClient,
    GoogleSheetsKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    NotFoundError,
    StorageError,
    load_json_list,
    save_json_list,
    user_key,
)

__all__ = [
    "ConnectionError",
    "DuplicateError",
    "GoogleSheetsClient",
    "GoogleSheetsKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "NotFoundError",
    "StorageError",
    "load_json_list",
    "save_json_list",
    "user_key",
]
