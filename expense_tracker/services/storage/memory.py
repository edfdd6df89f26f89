"""In-memory key-value store, used by tests and when no data directory is wanted."""

import json
from typing import Any, Optional

from expense_tracker.services.storage.interface import (
    CorruptDataError,
    KeyValueStoreInterface,
)


class InMemoryStore(KeyValueStoreInterface):
    """
    Keeps serialized JSON text per key.

    Values are serialized on write, so callers can never mutate stored
    state through a reference they still hold, and raw() exposes the
    exact text for byte-for-byte comparisons.
    """

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: dict[str, str] = {}
        self.write_count = 0
        for key, value in (initial or {}).items():
            self._data[key] = json.dumps(value)

    def get(self, key: str) -> Optional[Any]:
        text = self._data.get(key)
        if text is None:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise CorruptDataError(key, f"Stored '{key}' is not valid JSON: {e}")

    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)
        self.write_count += 1

    def raw(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def put_raw(self, key: str, text: str) -> None:
        """Store text as-is (lets tests plant corrupt data)."""
        self._data[key] = text

    def keys(self) -> list[str]:
        return list(self._data)
