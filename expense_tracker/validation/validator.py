"""
Form Input Validation

DESIGN DECISION: The state manager trusts its callers.
Everything a user types is checked HERE, before it reaches the
ledger, budget table or registry:

- Expense form: every field required, amount must be a finite
  non-negative number, date must be a calendar date
- Budget input: empty means "clear", anything non-numeric or
  negative is ignored
- Category labels: trimmed, blank labels dropped

Validation never raises for bad user input. It returns either a
ValidationResult listing the issues or None for "ignore this input".
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from expense_tracker.config import get_settings
from expense_tracker.models import (
    ExpenseDraft,
    ImageUpload,
    ValidationIssue,
    ValidationResult,
)


MISSING_FIELDS_MESSAGE = "Please fill out all fields"


def _parse_amount(raw: Union[str, int, float, Decimal, None]) -> Optional[Decimal]:
    """Parse a number typed by the user. Returns None if it isn't finite."""
    if raw is None:
        return None
    if isinstance(raw, float):
        raw = str(raw)
    try:
        value = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite():
        return None
    return value


def _parse_date(raw: Union[str, date, None]) -> Optional[date]:
    if isinstance(raw, date):
        return raw
    if not raw:
        return None
    try:
        return date.fromisoformat(str(raw).strip())
    except ValueError:
        return None


def _is_blank(raw) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


def validate_expense_form(
    description: Optional[str],
    amount: Union[str, int, float, Decimal, None],
    category: Optional[str],
    expense_date: Union[str, date, None],
) -> ValidationResult:
    """
    Validate the "Add New Expense" form.

    Returns a ValidationResult; when valid, result.draft holds the
    parsed values ready for ExpenseStateManager.add_expense.
    """
    fields = {
        "description": description,
        "amount": amount,
        "category": category,
        "date": expense_date,
    }
    missing = [name for name, value in fields.items() if _is_blank(value)]
    if missing:
        return ValidationResult(
            is_valid=False,
            issues=[
                ValidationIssue(
                    field=name,
                    issue_type="missing",
                    message=MISSING_FIELDS_MESSAGE,
                )
                for name in missing
            ],
        )

    issues: list[ValidationIssue] = []

    parsed_amount = _parse_amount(amount)
    if parsed_amount is None:
        issues.append(ValidationIssue(
            field="amount",
            issue_type="invalid_format",
            message="Amount must be a number",
        ))
    elif parsed_amount < 0:
        issues.append(ValidationIssue(
            field="amount",
            issue_type="out_of_range",
            message="Amount cannot be negative",
        ))

    parsed_date = _parse_date(expense_date)
    if parsed_date is None:
        issues.append(ValidationIssue(
            field="date",
            issue_type="invalid_format",
            message="Date must be in YYYY-MM-DD format",
        ))

    if issues:
        return ValidationResult(is_valid=False, issues=issues)

    return ValidationResult(
        is_valid=True,
        draft=ExpenseDraft(
            description=description,
            amount=parsed_amount,
            category=category,
            date=parsed_date,
        ),
    )


def parse_budget_limit(raw: Union[str, int, float, Decimal, None]) -> Optional[Decimal]:
    """
    Parse the value typed into a budget field.

    Empty input clears the budget (returns 0). Non-numeric, negative
    or non-finite input returns None and should be ignored.
    """
    if _is_blank(raw):
        return Decimal(0)
    value = _parse_amount(raw)
    if value is None or value < 0:
        return None
    return value


def normalize_category_label(raw: Optional[str]) -> Optional[str]:
    """Trim a category label typed by the user. Blank labels become None."""
    if raw is None:
        return None
    label = raw.strip()
    return label or None


def validate_image_upload(upload: ImageUpload) -> ValidationResult:
    """Check an uploaded image against the configured formats and size limit."""
    settings = get_settings().app
    issues: list[ValidationIssue] = []

    if upload.mime_type not in settings.supported_formats_list:
        issues.append(ValidationIssue(
            field="mime_type",
            issue_type="unsupported",
            message=(
                f"Unsupported image type: {upload.mime_type}. "
                f"Allowed: {', '.join(settings.supported_formats_list)}"
            ),
        ))

    if upload.size_bytes > settings.max_upload_size_bytes:
        issues.append(ValidationIssue(
            field="size_bytes",
            issue_type="out_of_range",
            message=f"Image is larger than {settings.max_upload_size_mb} MB",
        ))

    return ValidationResult(is_valid=not issues, issues=issues)
