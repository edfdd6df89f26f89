"""Expense Ledger - the ordered list of expense records."""

from datetime import date
from decimal import Decimal
from typing import Iterable, Iterator, Optional, Union
from uuid import UUID, uuid4

from expense_tracker.models import Expense


class ExpenseLedger:
    """
    Expenses in entry order.

    Presenting newest-first is a view concern; the ledger itself
    always appends at the end.
    """

    def __init__(self, expenses: Iterable[Expense] = ()):
        self._expenses: list[Expense] = list(expenses)

    @property
    def expenses(self) -> list[Expense]:
        return list(self._expenses)

    def __len__(self) -> int:
        return len(self._expenses)

    def __iter__(self) -> Iterator[Expense]:
        return iter(list(self._expenses))

    def get(self, expense_id: UUID) -> Optional[Expense]:
        for expense in self._expenses:
            if expense.id == expense_id:
                return expense
        return None

    def append(
        self,
        description: str,
        amount: Union[Decimal, int, float, str],
        category: str,
        expense_date: date,
    ) -> Expense:
        """Record a new expense under a freshly generated id."""
        expense_id = uuid4()
        while self.get(expense_id) is not None:
            expense_id = uuid4()

        expense = Expense(
            id=expense_id,
            description=description,
            amount=amount,
            category=category,
            date=expense_date,
        )
        self._expenses.append(expense)
        return expense

    def delete_by_id(self, expense_id: UUID) -> bool:
        """Remove an expense. Returns False if the id is unknown."""
        for index, expense in enumerate(self._expenses):
            if expense.id == expense_id:
                del self._expenses[index]
                return True
        return False

    def rename_category_references(self, old_label: str, new_label: str) -> int:
        """
        Move every expense in old_label to new_label.

        Only the category changes; id, description, amount and date are kept.
        Returns the number of expenses updated.
        """
        updated = 0
        for index, expense in enumerate(self._expenses):
            if expense.category == old_label:
                self._expenses[index] = expense.model_copy(update={"category": new_label})
                updated += 1
        return updated
