"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Use a directory of JSON files for the desktop app
2. Use in-memory storage for testing
3. Swap in another backend later
4. Keep the state manager decoupled from storage implementation

The interface is intentionally tiny - a key-value mirror of the three
collections, modelled on browser local storage. It does not validate
what it stores and the last write for a key wins.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class KeyValueStoreInterface(ABC):
    """
    Abstract interface for the key-value persistence layer.

    Values are JSON-compatible (lists, dicts, strings, numbers).
    """

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """
        Read the value stored under a key.

        Args:
            key: Collection name (e.g. 'expenses')

        Returns:
            The deserialized value, or None if nothing is stored

        Raises:
            CorruptDataError: If the stored value cannot be parsed
        """
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """
        Replace the value stored under a key.

        Args:
            key: Collection name
            value: JSON-compatible value
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptDataError(StorageError):
    """Stored data could not be parsed."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(message)
