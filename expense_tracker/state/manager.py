"""
Expense State Manager

The single owner of the tracker's three collections: the expense
ledger, the budget table and the category registry.

FLOW for every mutation:
1. Apply the change in memory
2. Write the affected collection(s) to the key-value store
3. Notify subscribers with a StateChange

Rejected and no-op mutations return False and touch nothing: no
write, no notification. Rejections are never raised as exceptions.

The store is read once, at construction. After that the in-memory
collections are the source of truth and the store is a mirror.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Callable, Iterable, Optional, Union
from uuid import UUID

import structlog
from pydantic import BaseModel, ValidationError

from expense_tracker.models import (
    BUDGETS_KEY,
    CUSTOM_CATEGORIES_KEY,
    EXPENSES_KEY,
    Budget,
    BudgetStatus,
    CategoryTotal,
    Expense,
    StateChange,
    StateChangeBuilder,
)
from expense_tracker.queries import (
    budget_overview,
    budget_status,
    category_totals,
    expenses_to_csv,
    sorted_by_amount_descending,
)
from expense_tracker.services.storage import CorruptDataError, KeyValueStoreInterface
from expense_tracker.state.budgets import BudgetTable
from expense_tracker.state.ledger import ExpenseLedger
from expense_tracker.state.registry import CategoryRegistry


StateListener = Callable[[StateChange], None]


class ExpenseStateManager:
    """
    Owns expenses, budgets and categories for one session.

    Pass the same instance to every consumer; its mutation methods are
    the only write path to the collections.
    """

    def __init__(
        self,
        store: KeyValueStoreInterface,
        presets: Optional[Iterable[str]] = None,
        allow_preset_rename: bool = True,
    ):
        """
        Load collections from the store.

        Args:
            store: Persistence mirror for the three collections
            presets: Built-in categories (defaults to PRESET_CATEGORIES)
            allow_preset_rename: If False, renaming a preset is rejected

        Raises:
            CorruptDataError: If a stored collection cannot be parsed or
                holds records of the wrong shape
        """
        self._store = store
        self._allow_preset_rename = allow_preset_rename
        self._listeners: list[StateListener] = []
        self._logger = structlog.get_logger()

        self._registry = CategoryRegistry(presets)
        self._registry.initialize(self._load_labels(CUSTOM_CATEGORIES_KEY))
        self._ledger = ExpenseLedger(self._load_records(EXPENSES_KEY, Expense))
        self._budgets = BudgetTable(self._load_records(BUDGETS_KEY, Budget))

        self._logger.info(
            "state_loaded",
            expenses=len(self._ledger),
            budgets=len(self._budgets),
            categories=len(self._registry),
        )

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def _load_list(self, key: str) -> list[Any]:
        value = self._store.get(key)
        if value is None:
            return []
        if not isinstance(value, list):
            raise CorruptDataError(key, f"Stored '{key}' is not a list")
        return value

    def _load_labels(self, key: str) -> list[str]:
        labels = self._load_list(key)
        if not all(isinstance(label, str) for label in labels):
            raise CorruptDataError(key, f"Stored '{key}' must only hold text labels")
        return labels

    def _load_records(self, key: str, model: type[BaseModel]) -> list:
        try:
            return [model.model_validate(item) for item in self._load_list(key)]
        except ValidationError as e:
            raise CorruptDataError(key, f"Stored '{key}' holds an invalid record: {e}") from e

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def expenses(self) -> list[Expense]:
        return self._ledger.expenses

    @property
    def budgets(self) -> list[Budget]:
        return self._budgets.budgets

    @property
    def categories(self) -> list[str]:
        return self._registry.categories

    @property
    def preset_categories(self) -> tuple[str, ...]:
        return self._registry.presets

    @property
    def custom_categories(self) -> list[str]:
        return self._registry.custom_categories

    def is_preset(self, label: str) -> bool:
        return self._registry.is_preset(label)

    def get_budget(self, category: str) -> Optional[Budget]:
        return self._budgets.get(category)

    # -------------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------------

    def subscribe(self, listener: StateListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, change: StateChange) -> None:
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception as e:
                # The change is already applied and saved; one broken
                # listener must not keep the others from hearing about it.
                self._logger.error(
                    "state_listener_failed",
                    kind=change.kind.value,
                    error=str(e),
                    exc_info=True,
                )

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def _persist_expenses(self) -> None:
        self._store.set(
            EXPENSES_KEY,
            [expense.model_dump(mode="json") for expense in self._ledger],
        )

    def _persist_budgets(self) -> None:
        self._store.set(
            BUDGETS_KEY,
            [budget.model_dump(mode="json") for budget in self._budgets.budgets],
        )

    def _persist_categories(self) -> None:
        self._store.set(CUSTOM_CATEGORIES_KEY, self._registry.custom_categories)

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    def add_expense(
        self,
        description: str,
        amount: Union[Decimal, int, float, str],
        category: str,
        expense_date: Union[date, str],
    ) -> Expense:
        expense = self._ledger.append(description, amount, category, expense_date)
        self._persist_expenses()
        self._notify(StateChangeBuilder.expense_added(
            expense_id=expense.id,
            category=expense.category,
            amount=str(expense.amount),
        ))
        return expense

    def delete_expense(self, expense_id: UUID) -> bool:
        if not self._ledger.delete_by_id(expense_id):
            self._logger.debug("expense_delete_ignored", expense_id=str(expense_id))
            return False
        self._persist_expenses()
        self._notify(StateChangeBuilder.expense_deleted(expense_id))
        return True

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    def set_budget(
        self,
        category: str,
        limit: Union[Decimal, int, float, str],
    ) -> Budget:
        budget = self._budgets.upsert(category, limit)
        self._persist_budgets()
        self._notify(StateChangeBuilder.budget_set(
            category=budget.category,
            limit=str(budget.limit),
        ))
        return budget

    def clear_budget(self, category: str) -> Budget:
        return self.set_budget(category, Decimal(0))

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    def add_category(self, label: str) -> bool:
        if not self._registry.add(label):
            self._logger.debug("category_add_rejected", category=label)
            return False
        self._persist_categories()
        self._notify(StateChangeBuilder.category_added(label))
        return True

    def rename_category(self, old_label: str, new_label: str) -> bool:
        """
        Rename a category in the registry, the ledger and the budget table.

        Either all three change or none do. Rejected when new_label is
        blank or already exists, when old_label is unknown, or when
        old_label is a preset and preset renames are disabled.
        """
        if self._registry.is_preset(old_label) and not self._allow_preset_rename:
            self._logger.debug(
                "category_rename_rejected",
                old_category=old_label,
                new_category=new_label,
                reason="preset",
            )
            return False

        if not self._registry.can_rename(old_label, new_label):
            self._logger.debug(
                "category_rename_rejected",
                old_category=old_label,
                new_category=new_label,
            )
            return False

        self._registry.rename(old_label, new_label)
        expenses_updated = self._ledger.rename_category_references(old_label, new_label)
        budget_updated = self._budgets.rename_category_references(old_label, new_label)

        self._persist_categories()
        self._persist_expenses()
        self._persist_budgets()

        self._notify(StateChangeBuilder.category_renamed(
            old_label=old_label,
            new_label=new_label,
            expenses_updated=expenses_updated,
            budget_updated=budget_updated,
        ))
        return True

    def delete_category(self, label: str) -> bool:
        """
        Remove a custom category.

        Presets cannot be deleted. Expenses and budgets that use the
        label keep it; they are not reassigned.
        """
        if not self._registry.delete(label):
            self._logger.debug("category_delete_rejected", category=label)
            return False
        self._persist_categories()
        self._notify(StateChangeBuilder.category_deleted(label))
        return True

    # -------------------------------------------------------------------------
    # Derived figures
    # -------------------------------------------------------------------------

    def category_totals(self) -> dict[str, Decimal]:
        return category_totals(self._ledger)

    def budget_status(self, category: str) -> BudgetStatus:
        return budget_status(category, self._ledger, self._budgets.budgets)

    def budget_overview(self) -> list[BudgetStatus]:
        return budget_overview(
            self._registry.categories, self._ledger, self._budgets.budgets
        )

    def category_breakdown(self) -> list[CategoryTotal]:
        return sorted_by_amount_descending(self.category_totals())

    def export_csv(self) -> str:
        return expenses_to_csv(self._ledger)
