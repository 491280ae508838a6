"""Recurrence rules for carrying items forward into later months"""

from typing import Iterable

from budget_nikal.domain.models import ExpenseKind


def carries_forward(kind: ExpenseKind, recurring: bool) -> bool:
    """
    Whether an expense is copied into a newly created month.

    Recurring REGULAR expenses are copied. Loans are materialized from the
    loan records themselves, and card bills stay bound to their statement.
    """
    if kind is ExpenseKind.REGULAR:
        return recurring
    if kind in (ExpenseKind.LOAN, ExpenseKind.CARD_BILL):
        return False
    raise ValueError(f"Unhandled expense kind: {kind}")


def already_present(label: str, existing: Iterable) -> bool:
    """
    True when a recurring row with the same label is already in the month.

    ``existing`` rows expose ``label`` (or ``source`` for incomes) and
    ``recurring``.
    """
    for row in existing:
        row_label = getattr(row, "label", None)
        if row_label is None:
            row_label = getattr(row, "source", None)
        if row.recurring and row_label == label:
            return True
    return False
