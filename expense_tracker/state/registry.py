"""
Category Registry

Owns the ordered set of category labels: the fixed presets first,
then user-defined custom categories in the order they were added.

INVARIANT: labels are unique across presets and custom categories.

The registry only manages labels. Propagating a rename into expenses
and budgets is the state manager's job, so that all three collections
change together or not at all.
"""

from typing import Iterable, Iterator, Optional

from expense_tracker.models import PRESET_CATEGORIES


class CategoryRegistry:
    """Ordered, duplicate-free set of category labels."""

    def __init__(self, presets: Optional[Iterable[str]] = None):
        self._presets: tuple[str, ...] = tuple(
            PRESET_CATEGORIES if presets is None else presets
        )
        self._labels: list[str] = list(self._presets)

    def initialize(self, custom: Iterable[str] = ()) -> list[str]:
        """
        Reset to presets followed by the given custom categories.

        Blank labels and labels already present are skipped.
        """
        self._labels = list(self._presets)
        for label in custom:
            if isinstance(label, str) and label and label not in self._labels:
                self._labels.append(label)
        return self.categories

    @property
    def categories(self) -> list[str]:
        return list(self._labels)

    @property
    def presets(self) -> tuple[str, ...]:
        return self._presets

    @property
    def custom_categories(self) -> list[str]:
        """Registry labels that are not presets, in registry order."""
        return [label for label in self._labels if label not in self._presets]

    def is_preset(self, label: str) -> bool:
        return label in self._presets

    def __contains__(self, label: object) -> bool:
        return label in self._labels

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._labels))

    def __len__(self) -> int:
        return len(self._labels)

    def add(self, label: str) -> bool:
        """Append a custom category. Returns False for blank or duplicate labels."""
        if not label or label in self._labels:
            return False
        self._labels.append(label)
        return True

    def can_rename(self, old_label: str, new_label: str) -> bool:
        return bool(new_label) and new_label not in self._labels and old_label in self._labels

    def rename(self, old_label: str, new_label: str) -> bool:
        """Replace old_label with new_label in place."""
        if not self.can_rename(old_label, new_label):
            return False
        index = self._labels.index(old_label)
        self._labels[index] = new_label
        return True

    def delete(self, label: str) -> bool:
        """Remove a custom category. Presets and unknown labels are refused."""
        if self.is_preset(label) or label not in self._labels:
            return False
        self._labels.remove(label)
        return True
