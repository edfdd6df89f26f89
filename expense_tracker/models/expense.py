"""
Core Data Models for AI Expense Tracker

These models define the schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Round-trip cleanly through the JSON key-value store
3. Keep derived figures (totals, budget status) separate from stored records

DESIGN DECISION: Stored records (Expense, Budget) are frozen.
The only sanctioned change to a stored record is the category rename
cascade, which replaces the record with an updated copy.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_serializer,
    field_validator,
)


# Built-in categories, in display order. They can never be deleted.
PRESET_CATEGORIES: tuple[str, ...] = ("Food", "Subscriptions", "Transportation")


def _to_decimal(value):
    """Route floats through str so 0.1 stays 0.1."""
    if isinstance(value, float):
        return Decimal(str(value))
    return value


def _plain_decimal(value: Decimal) -> Decimal:
    """Drop exponents and trailing zeros: 1E+3 becomes 1000, 500.0 becomes 500."""
    if not value:
        return Decimal(0)
    return Decimal(format(value.normalize(), "f"))


# =============================================================================
# STORED RECORDS
# =============================================================================

class Expense(BaseModel):
    """
    A single expense in the ledger.

    Created by the ledger with a fresh id. Ledger order is entry order,
    not date order.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique expense ID"
    )
    description: str = Field(
        ...,
        description="What the money was spent on"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount spent"
    )
    category: str = Field(
        ...,
        description="Category label (not required to exist in the registry)"
    )
    date: date

    @field_validator('amount', mode='before')
    @classmethod
    def coerce_amount(cls, v):
        return _to_decimal(v)

    @field_validator('amount')
    @classmethod
    def normalize_amount(cls, v: Decimal) -> Decimal:
        return _plain_decimal(v)

    @field_serializer('amount', when_used='json')
    def serialize_amount(self, v: Decimal) -> str:
        return format(v, "f")


class Budget(BaseModel):
    """
    Spending limit for one category.

    A limit of zero means "no budget set".
    """
    model_config = ConfigDict(frozen=True)

    category: str = Field(
        ...,
        description="Category this limit applies to (natural key)"
    )
    limit: Decimal = Field(
        ...,
        ge=0,
        description="Spending limit; 0 means unset"
    )

    @field_validator('limit', mode='before')
    @classmethod
    def coerce_limit(cls, v):
        return _to_decimal(v)

    @field_validator('limit')
    @classmethod
    def normalize_limit(cls, v: Decimal) -> Decimal:
        return _plain_decimal(v)

    @field_serializer('limit', when_used='json')
    def serialize_limit(self, v: Decimal) -> str:
        return format(v, "f")

    @property
    def is_set(self) -> bool:
        return self.limit > 0


# =============================================================================
# DERIVED FIGURES
# =============================================================================

class BudgetStatus(BaseModel):
    """
    Spending against the budget for one category.

    percentage is the raw figure and may exceed 100 when over budget;
    display_percentage is clamped for progress bars.
    """

    category: str
    spent: Decimal
    limit: Decimal
    remaining: Decimal
    percentage: Decimal

    @computed_field
    @property
    def is_over_budget(self) -> bool:
        return self.percentage > 100

    @property
    def display_percentage(self) -> Decimal:
        return min(self.percentage, Decimal(100))

    @property
    def has_budget(self) -> bool:
        return self.limit > 0


class CategoryTotal(BaseModel):
    """Total spent in one category and its share of all spending."""

    category: str
    amount: Decimal
    share: Decimal = Field(
        default=Decimal(0),
        description="Percentage of overall spending (0-100)"
    )


# =============================================================================
# FORM VALIDATION MODELS
# =============================================================================

class ExpenseDraft(BaseModel):
    """Parsed, validated input from the expense form."""
    model_config = ConfigDict(str_strip_whitespace=True)

    description: str = Field(..., min_length=1)
    amount: Decimal = Field(..., ge=0)
    category: str = Field(..., min_length=1)
    date: date


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'out_of_range')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Result of validating a form submission."""

    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    draft: Optional[ExpenseDraft] = None

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def first_message(self) -> Optional[str]:
        return self.issues[0].message if self.issues else None


# =============================================================================
# AI COLLABORATOR MODELS
# =============================================================================

class ChatRole(str, Enum):
    """Who wrote a chat message."""
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """
    One turn of the assistant conversation.

    Held in UI session state only; never persisted.
    """

    role: ChatRole
    text: str


class AssistantReply(BaseModel):
    """
    Outcome of one AI request as seen by the UI.

    On failure, error_message holds a fixed user-facing message and
    text/image_data_uri are empty.
    """

    success: bool
    text: Optional[str] = None
    image_data_uri: Optional[str] = None
    error_message: Optional[str] = None

    @classmethod
    def failed(cls, message: str) -> "AssistantReply":
        return cls(success=False, error_message=message)


class ImageUpload(BaseModel):
    """Represents an uploaded image before it is sent for editing."""

    filename: str
    mime_type: str
    size_bytes: int = Field(ge=0)

    @field_validator('mime_type')
    @classmethod
    def normalize_mime_type(cls, v: str) -> str:
        return v.strip().lower()
