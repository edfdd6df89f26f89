"""CSV export of the ledger."""

from typing import Iterable

from expense_tracker.models import Expense


CSV_HEADER = ("ID", "Description", "Amount", "Category", "Date")


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def expenses_to_csv(expenses: Iterable[Expense]) -> str:
    """
    Render expenses as CSV text, one row per expense in ledger order.

    Only the description is quoted (with embedded quotes doubled);
    amounts are written as plain decimals (never 1E+3) and the other
    columns as-is. Rows are joined with a bare newline and there is no
    trailing newline.
    """
    lines = [",".join(CSV_HEADER)]
    for expense in expenses:
        lines.append(",".join([
            str(expense.id),
            _quote(expense.description),
            format(expense.amount, "f"),
            expense.category,
            expense.date.isoformat(),
        ]))
    return "\n".join(lines)
