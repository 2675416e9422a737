"""
Abstract Storage Interface

DESIGN DECISION: All persistence goes through a tiny key-value contract.
This allows us to:
1. Keep the JSON layout of the original browser storage (one key per collection)
2. Use in-memory storage for testing
3. Swap the local JSON file for Google Sheets without touching business logic

The interface is intentionally simple - get, set, remove. Values are raw
strings; encoding and decoding live in the codec module.
"""

from abc import ABC, abstractmethod
from typing import Optional


def user_key(collection: str, username: str) -> str:
    """Storage key of a per-account collection, e.g. 'transactions_amin'."""
    return f"{collection}_{username}"


class KeyValueStore(ABC):
    """
    Abstract interface for key-value storage.

    All operations are synchronous and take effect immediately.
    There are no transactions: each set() replaces the whole value.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the raw value stored under a key.

        Args:
            key: Logical storage key

        Returns:
            The stored string, or None if the key is absent

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store a raw value, replacing any previous one.

        Args:
            key: Logical storage key
            value: Raw string (normally JSON)

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """
        Remove a key. Removing an absent key is not an error.

        Raises:
            StorageError: If the backend cannot be written
        """
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """List all stored keys (used by diagnostics and tests)."""
        pass

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
