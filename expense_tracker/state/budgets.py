"""Budget Table - one spending limit per category."""

from decimal import Decimal
from typing import Iterable, Optional, Union

from expense_tracker.models import Budget


class BudgetTable:
    """
    Budgets keyed by category, kept in the order they were first set.

    Input checking belongs to the form layer (see
    expense_tracker.validation.parse_budget_limit); the table stores
    whatever limit it is given.
    """

    def __init__(self, budgets: Iterable[Budget] = ()):
        self._budgets: list[Budget] = []
        for budget in budgets:
            self.upsert(budget.category, budget.limit)

    @property
    def budgets(self) -> list[Budget]:
        return list(self._budgets)

    def __len__(self) -> int:
        return len(self._budgets)

    def _index_of(self, category: str) -> Optional[int]:
        for index, budget in enumerate(self._budgets):
            if budget.category == category:
                return index
        return None

    def get(self, category: str) -> Optional[Budget]:
        index = self._index_of(category)
        return None if index is None else self._budgets[index]

    def limit_for(self, category: str) -> Decimal:
        """The limit for a category, 0 when none is set."""
        budget = self.get(category)
        return budget.limit if budget else Decimal(0)

    def upsert(self, category: str, limit: Union[Decimal, int, float, str]) -> Budget:
        """Set the limit for a category, replacing any existing one in place."""
        budget = Budget(category=category, limit=limit)
        index = self._index_of(category)
        if index is None:
            self._budgets.append(budget)
        else:
            self._budgets[index] = budget
        return budget

    def clear(self, category: str) -> Budget:
        """Unset a budget. Zero is the "no budget" marker."""
        return self.upsert(category, Decimal(0))

    def rename_category_references(self, old_label: str, new_label: str) -> bool:
        """
        Rekey the budget for old_label to new_label.

        A leftover budget already keyed by new_label (from a deleted
        category) is dropped so each category keeps at most one budget.
        Returns True if a budget was rekeyed.
        """
        index = self._index_of(old_label)
        if index is None:
            return False

        budget = self._budgets[index]
        stale = self._index_of(new_label)
        self._budgets[index] = budget.model_copy(update={"category": new_label})
        if stale is not None:
            del self._budgets[stale]
        return True
