"""
JSON File Storage Implementation

DESIGN DECISION: Each collection is stored as its own JSON file in a
data directory (expenses.json, budgets.json, customCategories.json).
This mirrors browser local storage, where the three collections are
independently keyed values:
1. Users can read or back up their data with any text editor
2. No database setup required
3. A write to one collection never rewrites the others

TRADEOFFS:
- Whole-collection rewrites on every mutation (fine for personal use)
- No transactions across files (a rename writes three files in sequence)
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Union

from expense_tracker.services.storage.interface import (
    CorruptDataError,
    KeyValueStoreInterface,
)


class JsonFileStore(KeyValueStoreInterface):
    """
    Directory-backed key-value store.

    The directory is created on first write, so a fresh install starts
    with empty collections.
    """

    def __init__(self, directory: Union[str, Path]):
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def _path_for(self, key: str) -> Path:
        return self._directory / f"{key}.json"

    def get(self, key: str) -> Optional[Any]:
        path = self._path_for(key)
        if not path.exists():
            return None

        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CorruptDataError(key, f"Stored '{key}' is not valid JSON: {e}")

    def set(self, key: str, value: Any) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self._path_for(key)

        # Write to a temp file and swap it in so a crash mid-write
        # never leaves a truncated collection behind.
        fd, tmp_name = tempfile.mkstemp(
            dir=self._directory, prefix=f".{key}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(value, f, ensure_ascii=False)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
