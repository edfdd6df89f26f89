"""
Data Models Package

This package contains all Pydantic models used in the AI Expense Tracker.
All data flowing through the system must conform to these schemas.
"""

from expense_tracker.models.expense import (
    PRESET_CATEGORIES,
    AssistantReply,
    Budget,
    BudgetStatus,
    CategoryTotal,
    ChatMessage,
    ChatRole,
    Expense,
    ExpenseDraft,
    ImageUpload,
    ValidationIssue,
    ValidationResult,
)
from expense_tracker.models.events import (
    BUDGETS_KEY,
    CUSTOM_CATEGORIES_KEY,
    EXPENSES_KEY,
    ChangeKind,
    StateChange,
    StateChangeBuilder,
)

__all__ = [
    # Expense models
    "PRESET_CATEGORIES",
    "AssistantReply",
    "Budget",
    "BudgetStatus",
    "CategoryTotal",
    "ChatMessage",
    "ChatRole",
    "Expense",
    "ExpenseDraft",
    "ImageUpload",
    "ValidationIssue",
    "ValidationResult",
    # State change models
    "BUDGETS_KEY",
    "CUSTOM_CATEGORIES_KEY",
    "EXPENSES_KEY",
    "ChangeKind",
    "StateChange",
    "StateChangeBuilder",
]
