"""Unit tests for monthly totals"""

from datetime import date
from decimal import Decimal
from budget_nikal.domain.aggregator import available_limit, compute_totals, pending_statement_due
from budget_nikal.domain.models import ExpenseItem, ExpenseKind, IncomeItem, StatementSnapshot, Status


def card_bill(amount: str, status: Status = Status.PENDING) -> ExpenseItem:
    return ExpenseItem(amount=Decimal(amount), kind=ExpenseKind.CARD_BILL, status=status)


def regular(amount: str, status: Status = Status.PENDING) -> ExpenseItem:
    return ExpenseItem(amount=Decimal(amount), kind=ExpenseKind.REGULAR, status=status)


def test_paid_income_and_paid_card_bills():
    totals = compute_totals(
        incomes=[IncomeItem(amount=Decimal("180000"), status=Status.DONE)],
        expenses=[card_bill("45000", Status.DONE), card_bill("32000", Status.DONE)],
    )

    assert totals.income_total == Decimal("180000.00")
    assert totals.cards_total == Decimal("77000.00")
    assert totals.after_card_payments == Decimal("103000.00")
    assert totals.pending_card_bills == Decimal("0.00")
    assert totals.balance == Decimal("103000.00")
    assert totals.need == Decimal("0.00")


def test_nothing_paid_yet():
    expenses = [regular(a) for a in ("25000", "9500", "15000", "12000", "20000", "10000")]
    totals = compute_totals(
        incomes=[IncomeItem(amount=Decimal("180000"), status=Status.PENDING)],
        expenses=expenses,
    )

    assert totals.pending_non_card_expenses == Decimal("91500.00")
    assert totals.non_card_expenses_total == Decimal("91500.00")
    assert totals.balance == Decimal("0.00")
    assert totals.need == Decimal("91500.00")
    assert totals.cards_total == Decimal("0.00")


def test_cards_total_unaffected_by_status_toggle():
    incomes = [IncomeItem(amount=Decimal("100000"), status=Status.DONE)]
    pending = compute_totals(incomes, [card_bill("45000")])
    paid = compute_totals(incomes, [card_bill("45000", Status.DONE)])

    assert pending.cards_total == paid.cards_total == Decimal("45000.00")
    assert pending.pending_card_bills == Decimal("45000.00")
    assert paid.pending_card_bills == Decimal("0.00")
    assert paid.balance - pending.balance == Decimal("-45000.00")


def test_loans_count_as_non_card_expenses():
    totals = compute_totals(
        incomes=[],
        expenses=[ExpenseItem(amount=Decimal("7500"), kind=ExpenseKind.LOAN), card_bill("100")],
    )

    assert totals.non_card_expenses_total == Decimal("7500.00")
    assert totals.total_expenses == Decimal("7600.00")


def test_need_is_never_negative():
    totals = compute_totals(
        incomes=[IncomeItem(amount=Decimal("50000"), status=Status.DONE)],
        expenses=[regular("100")],
    )

    assert totals.balance == Decimal("50000.00")
    assert totals.need == Decimal("0.00")


def test_need_is_shortfall_against_pending():
    totals = compute_totals(
        incomes=[IncomeItem(amount=Decimal("10000"), status=Status.DONE)],
        expenses=[regular("4000", Status.DONE), card_bill("9000"), regular("2500")],
    )

    assert totals.balance == Decimal("6000.00")
    assert totals.need == Decimal("5500.00")


def test_accepts_string_statuses_like_orm_rows():
    """ORM rows store plain strings for status and kind"""
    totals = compute_totals(
        incomes=[IncomeItem(amount=Decimal("10"), status="done")],
        expenses=[ExpenseItem(amount=Decimal("4"), kind="CARD_BILL", status="done")],
        balance_used=Decimal("3"),
    )

    assert totals.balance == Decimal("6.00")
    assert totals.balance_used == Decimal("3.00")


def test_statements_due_counts_pending_only():
    statements = [
        StatementSnapshot(total_due=Decimal("1000"), due_date=date(2024, 3, 30)),
        StatementSnapshot(total_due=Decimal("500"), due_date=date(2024, 3, 15), status=Status.DONE),
    ]

    assert pending_statement_due(statements) == Decimal("1000.00")
    assert compute_totals([], [], statements).statements_due == Decimal("1000.00")


def test_available_limit_subtracts_due_in_month_and_cash_out():
    statements = [
        StatementSnapshot(total_due=Decimal("4000"), due_date=date(2024, 3, 30)),
        StatementSnapshot(total_due=Decimal("9999"), due_date=date(2024, 4, 29)),
    ]

    limit = available_limit(Decimal("20000"), statements, 2024, 3, cash_out_taken=Decimal("5000"))

    assert limit == Decimal("11000.00")


def test_available_limit_without_configured_limit():
    assert available_limit(None, [], 2024, 3) is None
