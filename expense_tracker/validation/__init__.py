"""Form input validation package."""

from expense_tracker.validation.validator import (
    MISSING_FIELDS_MESSAGE,
    normalize_category_label,
    parse_budget_limit,
    validate_expense_form,
    validate_image_upload,
)

__all__ = [
    "MISSING_FIELDS_MESSAGE",
    "normalize_category_label",
    "parse_budget_limit",
    "validate_expense_form",
    "validate_image_upload",
]
