"""Statement ledger - total due mutations driven by CARD_BILL expense events"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional, Protocol

from budget_nikal.domain.models import Status
from budget_nikal.domain.money import ZERO, clamp_to_zero, quantize

logger = logging.getLogger(__name__)


class LedgerEntry(Protocol):
    """Anything carrying a statement's mutable ledger fields (ORM row or dataclass)"""

    total_due: Decimal
    status: str
    paid_date: Optional[date]


def link_expense(statement: LedgerEntry, amount: Decimal) -> None:
    """A new CARD_BILL expense adds its amount to the statement's total due"""
    before = statement.total_due
    statement.total_due = quantize(before + amount)
    _log_mutation("link", statement, before)


def mark_expense_paid(statement: LedgerEntry, amount: Decimal, paid_on: Optional[date] = None) -> None:
    """Paid money leaves the due bucket; the statement is settled as of ``paid_on``"""
    before = statement.total_due
    statement.total_due = clamp_to_zero(before - amount)
    statement.status = Status.DONE.value
    statement.paid_date = paid_on or date.today()
    _log_mutation("paid", statement, before)


def unmark_expense_paid(statement: LedgerEntry, amount: Decimal) -> None:
    """
    Reverse ``mark_expense_paid``.

    The owning budget's cash-out counter must be reset by the caller as well;
    un-paying a card bill invalidates that month's cash-out plan.
    """
    before = statement.total_due
    statement.total_due = quantize(before + amount)
    statement.status = Status.PENDING.value
    statement.paid_date = None
    _log_mutation("unpaid", statement, before)


def unlink_expense(
    statement: LedgerEntry,
    amount: Decimal,
    was_already_paid: bool,
    has_other_links: bool,
) -> None:
    """
    Remove a deleted CARD_BILL expense's contribution.

    A pending expense still sits in ``total_due`` and is subtracted. A paid one
    was already subtracted when it was paid, so only the paid state is undone.
    A statement left with no linked expenses is reset to its pristine state.
    """
    before = statement.total_due
    if was_already_paid:
        statement.status = Status.PENDING.value
        statement.paid_date = None
    else:
        statement.total_due = clamp_to_zero(before - amount)

    if not has_other_links:
        reset_statement(statement)
    _log_mutation("unlink", statement, before)


def reset_statement(statement: LedgerEntry) -> None:
    statement.total_due = ZERO
    statement.status = Status.PENDING.value
    statement.paid_date = None


def _log_mutation(step: str, statement: LedgerEntry, before: Decimal) -> None:
    logger.debug(
        "Statement ledger %s",
        step,
        extra={
            "step": f"ledger_{step}",
            "statement_id": str(getattr(statement, "id", "")),
            "total_due_before": str(before),
            "total_due_after": str(statement.total_due),
        },
    )
