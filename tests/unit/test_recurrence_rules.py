"""Unit tests for carry-forward rules"""

from types import SimpleNamespace
from budget_nikal.domain.models import ExpenseKind
from budget_nikal.domain.recurrence import already_present, carries_forward

def test_only_recurring_regular_expenses_carry_forward():
    assert carries_forward(ExpenseKind.REGULAR, True)
    assert not carries_forward(ExpenseKind.REGULAR, False)
    assert not carries_forward(ExpenseKind.CARD_BILL, True)
    assert not carries_forward(ExpenseKind.LOAN, True)


def test_already_present_matches_recurring_rows_by_label():
    rows = [
        SimpleNamespace(label="Rent", recurring=True),
        SimpleNamespace(label="Groceries", recurring=False),
    ]

    assert already_present("Rent", rows)
    assert not already_present("Groceries", rows)
    assert not already_present("Internet", rows)

def test_already_present_reads_income_source():
    assert already_present("Salary", [SimpleNamespace(label=None, source="Salary", recurring=True)])
    assert already_present("Salary", [SimpleNamespace(source="Salary", recurring=True)])
