"""Application state: the owned collections and their manager."""

from expense_tracker.state.budgets import BudgetTable
from expense_tracker.state.ledger import ExpenseLedger
from expense_tracker.state.manager import ExpenseStateManager, StateListener
from expense_tracker.state.registry import CategoryRegistry

__all__ = [
    "BudgetTable",
    "CategoryRegistry",
    "ExpenseLedger",
    "ExpenseStateManager",
    "StateListener",
]
