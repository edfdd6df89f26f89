"""Derived figures and exports computed from the tracker's collections."""

from expense_tracker.queries.aggregation import (
    budget_overview,
    budget_status,
    category_totals,
    sorted_by_amount_descending,
    total_spent,
)
from expense_tracker.queries.export import CSV_HEADER, expenses_to_csv

__all__ = [
    "CSV_HEADER",
    "budget_overview",
    "budget_status",
    "category_totals",
    "expenses_to_csv",
    "sorted_by_amount_descending",
    "total_spent",
]
