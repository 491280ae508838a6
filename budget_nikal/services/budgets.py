"""Budget month use cases: month overview and income/expense lifecycle"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from budget_nikal.domain import ledger
from budget_nikal.domain.aggregator import compute_totals
from budget_nikal.domain.cash_out import is_cash_out_label
from budget_nikal.domain.exceptions import NotFoundError, ValidationError
from budget_nikal.domain.models import BudgetTotals, ExpenseKind, Status
from budget_nikal.domain.money import ZERO, positive_money
from budget_nikal.infrastructure.database.models import Budget, CardStatement, Expense, Income
from budget_nikal.infrastructure.database.repositories import (
    BudgetRepository,
    ExpenseRepository,
    IncomeRepository,
    StatementRepository,
)
from budget_nikal.services.recurrence import RecurrenceService
from budget_nikal.services.statements import StatementService
from budget_nikal.utils.date_utils import check_year_month

logger = logging.getLogger(__name__)


@dataclass
class MonthOverview:
    """Everything shown for one budget month"""

    budget: Budget
    incomes: List[Income]
    expenses: List[Expense]
    statements: List[CardStatement]
    totals: BudgetTotals


def _required_label(value: Optional[str], field: str) -> str:
    label = (value or "").strip()
    if not label:
        raise ValidationError(f"{field} is required")
    return label


def _paid_date_for(status: Status) -> Optional[date]:
    return date.today() if status is Status.DONE else None


def _reject_cash_out(income: Income) -> None:
    if income.is_cash_out or is_cash_out_label(income.source):
        raise ValidationError("Cash-out rows are managed by the cash-out plan; reset the plan to undo them")


class BudgetService:
    """Month overview plus create/edit/toggle/delete of line items"""

    def __init__(self, db: Session):
        self.db = db
        self.budgets = BudgetRepository(db)
        self.incomes = IncomeRepository(db)
        self.expenses = ExpenseRepository(db)
        self.statements = StatementRepository(db)
        self.statement_service = StatementService(db)
        self.recurrence = RecurrenceService(db)

    def get_or_create_budget(self, user_id: str, year: int, month: int) -> Budget:
        check_year_month(year, month)
        budget = self.budgets.get(user_id, year, month)
        if budget is None:
            budget = self.budgets.create(user_id, year, month)
            logger.info(
                "Budget created",
                extra={"step": "budget_created", "user_id": user_id, "year": year, "month": month},
            )
        return budget

    def month_overview(self, user_id: str, year: int, month: int) -> MonthOverview:
        """
        Load one month and derive its totals.

        Lazily creates the budget and any missing statement of the user's cards.
        """
        budget = self.get_or_create_budget(user_id, year, month)
        self.statement_service.ensure_month_statements(user_id, year, month)

        incomes = self.incomes.list_for_budget(budget.id)
        expenses = self.expenses.list_for_budget(budget.id)
        statements = self.statement_service.statements_due_in_month(user_id, year, month)
        totals = compute_totals(incomes, expenses, statements, balance_used=budget.balance_used or ZERO)

        return MonthOverview(
            budget=budget,
            incomes=incomes,
            expenses=expenses,
            statements=statements,
            totals=totals,
        )

    # Incomes

    def create_income(
        self,
        user_id: str,
        year: int,
        month: int,
        source: str,
        amount,
        recurring: bool = False,
    ) -> Income:
        source = _required_label(source, "source")
        amount = positive_money(amount)
        budget = self.get_or_create_budget(user_id, year, month)

        income = self.incomes.create(
            budget.id,
            source=source,
            amount=amount,
            recurring=bool(recurring),
            status=Status.PENDING.value,
            paid_date=None,
        )
        if recurring:
            self.recurrence.propagate_to_future_months(user_id, year, month, income)
        return income

    def update_income(self, user_id: str, income_id: uuid.UUID, source: str, amount, recurring: bool) -> Income:
        income = self._income(user_id, income_id)
        _reject_cash_out(income)

        became_recurring = bool(recurring) and not income.recurring
        income.source = _required_label(source, "source")
        income.amount = positive_money(amount)
        income.recurring = bool(recurring)
        self.db.flush()

        if became_recurring:
            budget = income.budget
            self.recurrence.propagate_to_future_months(user_id, budget.year, budget.month, income)
        return income

    def set_income_status(self, user_id: str, income_id: uuid.UUID, status: Status) -> Income:
        income = self._income(user_id, income_id)
        _reject_cash_out(income)
        income.status = status.value
        income.paid_date = _paid_date_for(status)
        self.db.flush()
        return income

    def delete_income(self, user_id: str, income_id: uuid.UUID) -> None:
        income = self._income(user_id, income_id)
        _reject_cash_out(income)
        self.incomes.delete(income)

    # Expenses

    def create_expense(
        self,
        user_id: str,
        year: int,
        month: int,
        label: str,
        amount,
        recurring: bool = False,
        statement_id: Optional[uuid.UUID] = None,
    ) -> Expense:
        """
        Create an expense. With ``statement_id`` it becomes a CARD_BILL and its
        amount is added to that statement's total due.
        """
        label = _required_label(label, "label")
        amount = positive_money(amount)
        budget = self.get_or_create_budget(user_id, year, month)

        kind = ExpenseKind.REGULAR
        statement = None
        if statement_id is not None:
            statement = self.statements.get_for_user(user_id, statement_id)
            if statement is None:
                raise NotFoundError("Card statement", statement_id)
            ledger.link_expense(statement, amount)
            kind = ExpenseKind.CARD_BILL

        expense = self.expenses.create(
            budget.id,
            label=label,
            amount=amount,
            recurring=bool(recurring),
            status=Status.PENDING.value,
            paid_date=None,
            kind=kind.value,
            linked_card_statement_id=statement.id if statement is not None else None,
            linked_loan_id=None,
        )

        if recurring and kind is ExpenseKind.REGULAR:
            self.recurrence.propagate_to_future_months(user_id, year, month, expense)
        return expense

    def update_expense(self, user_id: str, expense_id: uuid.UUID, label: str, amount, recurring: bool) -> Expense:
        """Manual edit; only REGULAR expenses are user-editable"""
        expense = self._expense(user_id, expense_id)
        if ExpenseKind(expense.kind) is not ExpenseKind.REGULAR:
            raise ValidationError(f"{expense.kind} expenses are managed automatically and cannot be edited")

        became_recurring = bool(recurring) and not expense.recurring
        expense.label = _required_label(label, "label")
        expense.amount = positive_money(amount)
        expense.recurring = bool(recurring)
        self.db.flush()

        if became_recurring:
            budget = expense.budget
            self.recurrence.propagate_to_future_months(user_id, budget.year, budget.month, expense)
        return expense

    def set_expense_status(self, user_id: str, expense_id: uuid.UUID, status: Status) -> Expense:
        """
        Toggle an expense between pending and done.

        Paying a CARD_BILL moves its amount out of the statement's total due;
        un-paying it puts the amount back and voids the month's cash-out
        counter.
        """
        expense = self._expense(user_id, expense_id)
        previous = Status(expense.status)
        kind = ExpenseKind(expense.kind)

        if kind is ExpenseKind.CARD_BILL:
            statement = self._linked_statement(expense)
            if statement is not None and previous is not status:
                if status is Status.DONE:
                    ledger.mark_expense_paid(statement, expense.amount)
                else:
                    ledger.unmark_expense_paid(statement, expense.amount)
                    self._reset_balance_used(expense.budget_id)
        elif kind in (ExpenseKind.REGULAR, ExpenseKind.LOAN):
            pass
        else:
            raise ValueError(f"Unhandled expense kind: {kind}")

        expense.status = status.value
        expense.paid_date = _paid_date_for(status)
        self.db.flush()
        return expense

    def delete_expense(self, user_id: str, expense_id: uuid.UUID) -> None:
        """Delete an expense, reversing a CARD_BILL's statement contribution first"""
        expense = self._expense(user_id, expense_id)
        kind = ExpenseKind(expense.kind)

        if kind is ExpenseKind.CARD_BILL:
            statement = self._linked_statement(expense)
            if statement is not None:
                was_paid = Status(expense.status) is Status.DONE
                ledger.unlink_expense(
                    statement,
                    expense.amount,
                    was_already_paid=was_paid,
                    has_other_links=self.expenses.count_other_statement_links(statement.id, expense.id) > 0,
                )
                if was_paid:
                    self._reset_balance_used(expense.budget_id)
        elif kind in (ExpenseKind.REGULAR, ExpenseKind.LOAN):
            pass
        else:
            raise ValueError(f"Unhandled expense kind: {kind}")

        self.expenses.delete(expense)

    # Helpers

    def _income(self, user_id: str, income_id: uuid.UUID) -> Income:
        income = self.incomes.get_for_user(user_id, income_id)
        if income is None:
            raise NotFoundError("Income", income_id)
        return income

    def _expense(self, user_id: str, expense_id: uuid.UUID) -> Expense:
        expense = self.expenses.get_for_user(user_id, expense_id)
        if expense is None:
            raise NotFoundError("Expense", expense_id)
        return expense

    def _linked_statement(self, expense: Expense) -> Optional[CardStatement]:
        if expense.linked_card_statement_id is None:
            return None
        return self.statements.get_by_id(expense.linked_card_statement_id)

    def _reset_balance_used(self, budget_id: uuid.UUID) -> None:
        budget = self.budgets.get_by_id(budget_id)
        if budget is not None:
            budget.balance_used = Decimal("0.00")
            logger.info(
                "Cash-out counter voided",
                extra={"step": "balance_used_reset", "budget_id": str(budget_id)},
            )
