"""Budget aggregation - derived monthly totals from a snapshot of line items"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from budget_nikal.domain.models import BudgetTotals, ExpenseKind, Status
from budget_nikal.domain.money import ZERO, clamp_to_zero, money_sum, quantize
from budget_nikal.utils.date_utils import month_bounds


def compute_totals(
    incomes: Sequence,
    expenses: Sequence,
    statements_due_in_month: Sequence = (),
    balance_used: Decimal = ZERO,
) -> BudgetTotals:
    """
    Derive every monthly total from the current item set.

    Items are duck-typed: anything with ``amount`` and ``status`` (plus
    ``kind`` for expenses) works, so ORM rows and domain dataclasses are
    interchangeable.

    Definitions:
    - card totals (``cards_total``) count CARD_BILL rows regardless of status,
      so marking a bill paid does not move them
    - ``balance`` is realized cash: paid income minus paid expenses of every kind
    - ``need`` is the shortfall of realized cash against everything still
      pending, never negative
    """
    income_rows = [(quantize(i.amount), Status(i.status)) for i in incomes]
    card_rows = []
    non_card_rows = []
    for expense in expenses:
        row = (quantize(expense.amount), Status(expense.status))
        kind = ExpenseKind(expense.kind)
        if kind is ExpenseKind.CARD_BILL:
            card_rows.append(row)
        elif kind in (ExpenseKind.REGULAR, ExpenseKind.LOAN):
            non_card_rows.append(row)
        else:
            raise ValueError(f"Unhandled expense kind: {kind}")

    income_total = _total(income_rows)
    paid_income_total = _total(income_rows, Status.DONE)
    cards_total = _total(card_rows)
    non_card_expenses_total = _total(non_card_rows)
    pending_card_bills = _total(card_rows, Status.PENDING)
    pending_non_card_expenses = _total(non_card_rows, Status.PENDING)
    paid_card_expenses = _total(card_rows, Status.DONE)
    paid_non_card_expenses = _total(non_card_rows, Status.DONE)

    balance = paid_income_total - paid_card_expenses - paid_non_card_expenses
    need = clamp_to_zero((pending_card_bills + pending_non_card_expenses) - balance)

    return BudgetTotals(
        income_total=income_total,
        paid_income_total=paid_income_total,
        cards_total=cards_total,
        non_card_expenses_total=non_card_expenses_total,
        pending_card_bills=pending_card_bills,
        pending_non_card_expenses=pending_non_card_expenses,
        paid_card_expenses=paid_card_expenses,
        paid_non_card_expenses=paid_non_card_expenses,
        total_expenses=quantize(cards_total + non_card_expenses_total),
        after_card_payments=quantize(income_total - cards_total),
        balance=quantize(balance),
        need=need,
        statements_due=pending_statement_due(statements_due_in_month),
        balance_used=quantize(balance_used or ZERO),
    )


def pending_statement_due(statements: Iterable) -> Decimal:
    """Sum of total due across statements that are still pending"""
    return money_sum(s.total_due for s in statements if Status(s.status) is Status.PENDING)


def available_limit(
    total_limit: Optional[Decimal],
    statements: Iterable,
    year: int,
    month: int,
    cash_out_taken: Decimal = ZERO,
) -> Optional[Decimal]:
    """
    Live available limit of one card for the viewed month.

    ``total_limit`` minus the pending total due of the card's statements whose
    due date falls in the month, minus cash-out already withdrawn this month.
    Returns None for cards without a configured limit.
    """
    if total_limit is None:
        return None

    first_day, last_day = month_bounds(year, month)
    due_in_month = [s for s in statements if _due_between(s.due_date, first_day, last_day)]
    return quantize(total_limit - pending_statement_due(due_in_month) - cash_out_taken)


def _due_between(due_date: date, first_day: date, last_day: date) -> bool:
    return first_day <= due_date <= last_day


def _total(rows, status: Optional[Status] = None) -> Decimal:
    return money_sum(amount for amount, row_status in rows if status is None or row_status is status)
