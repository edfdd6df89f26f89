"""
Storage Services Package

Provides the abstract key-value interface and its implementations.
The JSON file store backs the app; the in-memory store backs tests.
"""

from expense_tracker.services.storage.interface import (
    CorruptDataError,
    KeyValueStoreInterface,
    StorageError,
)
from expense_tracker.services.storage.json_file import JsonFileStore
from expense_tracker.services.storage.memory import InMemoryStore

__all__ = [
    # Interface
    "KeyValueStoreInterface",
    # Exceptions
    "CorruptDataError",
    "StorageError",
    # Implementations
    "InMemoryStore",
    "JsonFileStore",
]
