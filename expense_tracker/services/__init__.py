"""Services package."""

from expense_tracker.services.storage import (
    CorruptDataError,
    InMemoryStore,
    JsonFileStore,
    KeyValueStoreInterface,
    StorageError,
)

__all__ = [
    # Storage services
    "CorruptDataError",
    "InMemoryStore",
    "JsonFileStore",
    "KeyValueStoreInterface",
    "StorageError",
]
