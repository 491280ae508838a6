"""Domain models - pure Python dataclasses representing budgeting entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from budget_nikal.domain.money import ZERO


class Status(str, Enum):
    """Payment status shared by incomes, expenses and statements"""

    PENDING = "pending"
    DONE = "done"


class ExpenseKind(str, Enum):
    """Closed set of expense kinds; CARD_BILL and LOAN rows are system-managed"""

    REGULAR = "REGULAR"
    CARD_BILL = "CARD_BILL"
    LOAN = "LOAN"


@dataclass
class CreditCard:
    """Billing configuration of a credit card"""

    id: str
    nickname: str
    day_difference: int
    first_statement_date: Optional[date] = None
    billing_cycle_days: Optional[int] = None
    statement_day: Optional[int] = None  # legacy day-of-month fallback
    total_limit: Optional[Decimal] = None


@dataclass
class CyclePrediction:
    """Statement/due date pair for one billing cycle"""

    statement_date: date
    due_date: date


@dataclass
class IncomeItem:
    amount: Decimal
    status: Status = Status.PENDING
    source: str = ""


@dataclass
class ExpenseItem:
    amount: Decimal
    kind: ExpenseKind = ExpenseKind.REGULAR
    status: Status = Status.PENDING
    label: str = ""


@dataclass
class StatementSnapshot:
    """Statement figures needed for aggregation and availability"""

    total_due: Decimal
    due_date: date
    status: Status = Status.PENDING
    card_id: Optional[str] = None


@dataclass
class BudgetTotals:
    """Derived totals for one budget month"""

    income_total: Decimal = ZERO
    paid_income_total: Decimal = ZERO
    cards_total: Decimal = ZERO
    non_card_expenses_total: Decimal = ZERO
    pending_card_bills: Decimal = ZERO
    pending_non_card_expenses: Decimal = ZERO
    paid_card_expenses: Decimal = ZERO
    paid_non_card_expenses: Decimal = ZERO
    total_expenses: Decimal = ZERO
    after_card_payments: Decimal = ZERO
    balance: Decimal = ZERO
    need: Decimal = ZERO
    statements_due: Decimal = ZERO
    balance_used: Decimal = ZERO


@dataclass
class CardAvailability:
    """Live withdrawal capacity of a card for the viewed month"""

    card_id: str
    nickname: str
    available_limit: Optional[Decimal]
    due_date: Optional[date] = None


@dataclass
class Withdrawal:
    """Single card withdrawal in a cash-out plan"""

    card_id: str
    amount: Decimal


@dataclass
class CashOutSuggestion:
    need: Decimal
    cards: List[CardAvailability] = field(default_factory=list)
    withdrawals: List[Withdrawal] = field(default_factory=list)

    @property
    def uncovered(self) -> Decimal:
        covered = sum((w.amount for w in self.withdrawals), ZERO)
        return max(ZERO, self.need - covered)
