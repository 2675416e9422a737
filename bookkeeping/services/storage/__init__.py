"""
Storage Services Package

Provides the key-value store interface and its implementations.
The local JSON file is the default backend; Google Sheets is optional.
"""

from bookkeeping.services.storage.interface import (
    ConnectionError,
    DuplicateError,
    KeyValueStore,
    NotFoundError,
    StorageError,
    user_key,
)
from bookkeeping.services.storage.local import (
    JsonFileKeyValueStore,
    MemoryKeyValueStore,
)
from bookkeeping.services.storage.codec import (
    CORRUPT_SUFFIX,
    load_json_list,
    save_json_list,
)
from bookkeeping.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsKeyValueStore,
)

__all__ = [
    # Interface
    "KeyValueStore",
    "user_key",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # Local implementations
    "JsonFileKeyValueStore",
    "MemoryKeyValueStore",
    # Codec
    "CORRUPT_SUFFIX",
    "load_json_list",
    "save_json_list",
    # Google Sheets implementation
    "GoogleSheetsClient",
    "GoogleSheetsKeyValueStore",
]
