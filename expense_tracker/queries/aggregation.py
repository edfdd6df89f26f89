"""
Aggregation Engine

DESIGN DECISION: Aggregates are DERIVED, never stored.
Every figure on screen (category totals, budget progress, chart
shares) is recomputed from the ledger and budget table on each read.
The collections are small, so there is no cache to invalidate.

All functions here are pure: they take records and return models.
"""

from decimal import Decimal
from typing import Iterable, Mapping

from expense_tracker.models import Budget, BudgetStatus, CategoryTotal, Expense


ZERO = Decimal(0)
HUNDRED = Decimal(100)


def category_totals(expenses: Iterable[Expense]) -> dict[str, Decimal]:
    """
    Sum expense amounts per category.

    Keys appear in order of first appearance in the ledger.
    Categories with no expenses are absent, not zero.
    """
    totals: dict[str, Decimal] = {}
    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, ZERO) + expense.amount
    return totals


def total_spent(expenses: Iterable[Expense]) -> Decimal:
    return sum((expense.amount for expense in expenses), ZERO)


def _limit_for(category: str, budgets: Iterable[Budget]) -> Decimal:
    for budget in budgets:
        if budget.category == category:
            return budget.limit
    return ZERO


def _status(category: str, spent: Decimal, limit: Decimal) -> BudgetStatus:
    # No budget means 0%, whatever was spent
    percentage = spent / limit * HUNDRED if limit > 0 else ZERO
    return BudgetStatus(
        category=category,
        spent=spent,
        limit=limit,
        remaining=limit - spent,
        percentage=percentage,
    )


def budget_status(
    category: str,
    expenses: Iterable[Expense],
    budgets: Iterable[Budget],
) -> BudgetStatus:
    """Spending against the budget for one category."""
    spent = category_totals(expenses).get(category, ZERO)
    return _status(category, spent, _limit_for(category, budgets))


def budget_overview(
    categories: Iterable[str],
    expenses: Iterable[Expense],
    budgets: Iterable[Budget],
) -> list[BudgetStatus]:
    """Budget status for every category, in the order given."""
    totals = category_totals(expenses)
    budgets = list(budgets)
    return [
        _status(category, totals.get(category, ZERO), _limit_for(category, budgets))
        for category in categories
    ]


def sorted_by_amount_descending(totals: Mapping[str, Decimal]) -> list[CategoryTotal]:
    """
    Category totals, largest first, for chart rendering.

    Ties keep the order of the input mapping (sorted() is stable).
    Each entry carries its share of the overall total.
    """
    overall = sum(totals.values(), ZERO)
    entries = [
        CategoryTotal(
            category=category,
            amount=amount,
            share=amount / overall * HUNDRED if overall > 0 else ZERO,
        )
        for category, amount in totals.items()
    ]
    return sorted(entries, key=lambda entry: entry.amount, reverse=True)
