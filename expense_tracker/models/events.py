"""
State Change Events for AI Expense Tracker

Every successful mutation of the tracker's collections produces one
StateChange. Listeners (the UI, the audit logger) subscribe to the
state manager and receive these after the change has been persisted.

DESIGN DECISION: Rejected and no-op mutations produce no event.
A listener can therefore treat every event as "something on screen
is now stale".
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


# Keys of the persisted collections
EXPENSES_KEY = "expenses"
BUDGETS_KEY = "budgets"
CUSTOM_CATEGORIES_KEY = "customCategories"


class ChangeKind(str, Enum):
    """Types of state changes."""
    EXPENSE_ADDED = "expense_added"
    EXPENSE_DELETED = "expense_deleted"
    BUDGET_SET = "budget_set"
    CATEGORY_ADDED = "category_added"
    CATEGORY_RENAMED = "category_renamed"
    CATEGORY_DELETED = "category_deleted"


class StateChange(BaseModel):
    """A single applied and persisted mutation."""

    change_id: UUID = Field(
        default_factory=uuid4,
        description="Unique change identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the change was applied (UTC)"
    )
    kind: ChangeKind
    collections: frozenset[str] = Field(
        ...,
        description="Persisted keys written by this change"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    def to_log_dict(self) -> dict:
        """Convert to dictionary for structured logging."""
        return {
            "change_id": str(self.change_id),
            "timestamp": self.timestamp.isoformat(),
            "kind": self.kind.value,
            "collections": sorted(self.collections),
            "details": self.details,
        }


class StateChangeBuilder:
    """
    Helper for building StateChange objects.

    Keeps the details payload of each kind consistent.
    """

    @staticmethod
    def expense_added(expense_id: UUID, category: str, amount: str) -> StateChange:
        return StateChange(
            kind=ChangeKind.EXPENSE_ADDED,
            collections=frozenset({EXPENSES_KEY}),
            details={
                "expense_id": str(expense_id),
                "category": category,
                "amount": amount,
            },
        )

    @staticmethod
    def expense_deleted(expense_id: UUID) -> StateChange:
        return StateChange(
            kind=ChangeKind.EXPENSE_DELETED,
            collections=frozenset({EXPENSES_KEY}),
            details={"expense_id": str(expense_id)},
        )

    @staticmethod
    def budget_set(category: str, limit: str) -> StateChange:
        return StateChange(
            kind=ChangeKind.BUDGET_SET,
            collections=frozenset({BUDGETS_KEY}),
            details={"category": category, "limit": limit},
        )

    @staticmethod
    def category_added(label: str) -> StateChange:
        return StateChange(
            kind=ChangeKind.CATEGORY_ADDED,
            collections=frozenset({CUSTOM_CATEGORIES_KEY}),
            details={"category": label},
        )

    @staticmethod
    def category_renamed(
        old_label: str,
        new_label: str,
        expenses_updated: int,
        budget_updated: bool,
    ) -> StateChange:
        return StateChange(
            kind=ChangeKind.CATEGORY_RENAMED,
            collections=frozenset(
                {CUSTOM_CATEGORIES_KEY, EXPENSES_KEY, BUDGETS_KEY}
            ),
            details={
                "old_category": old_label,
                "new_category": new_label,
                "expenses_updated": expenses_updated,
                "budget_updated": budget_updated,
            },
        )

    @staticmethod
    def category_deleted(label: str) -> StateChange:
        return StateChange(
            kind=ChangeKind.CATEGORY_DELETED,
            collections=frozenset({CUSTOM_CATEGORIES_KEY}),
            details={"category": label},
        )
