"""Recurrence use cases: next-month creation and forward propagation of recurring items"""

import logging
from typing import List, Union

from sqlalchemy.orm import Session

from budget_nikal.domain.exceptions import DuplicateMonthError
from budget_nikal.domain.models import ExpenseKind, Status
from budget_nikal.domain.recurrence import already_present, carries_forward
from budget_nikal.infrastructure.database.models import Budget, Expense, Income, Loan
from budget_nikal.infrastructure.database.repositories import (
    BudgetRepository,
    CardRepository,
    ExpenseRepository,
    IncomeRepository,
    LoanRepository,
)
from budget_nikal.infrastructure.observability.logging import log_month_created
from budget_nikal.infrastructure.observability.metrics import months_created_counter
from budget_nikal.services.statements import StatementService
from budget_nikal.utils.date_utils import check_year_month, next_month

logger = logging.getLogger(__name__)


class RecurrenceService:
    """Copy recurring incomes, expenses and loan installments into later months"""

    def __init__(self, db: Session):
        self.db = db
        self.budgets = BudgetRepository(db)
        self.cards = CardRepository(db)
        self.loans = LoanRepository(db)
        self.incomes = IncomeRepository(db)
        self.expenses = ExpenseRepository(db)
        self.statement_service = StatementService(db)

    def create_next_month(self, user_id: str, year: int, month: int) -> Budget:
        """
        Create the budget following (year, month).

        Copies recurring incomes and recurring REGULAR expenses of the source
        month, materializes every loan as a LOAN expense and pre-creates each
        card's statement for the new month.

        Raises:
            DuplicateMonthError: the next month already has a budget
        """
        check_year_month(year, month)
        next_year, next_month_number = next_month(year, month)
        if self.budgets.get(user_id, next_year, next_month_number) is not None:
            raise DuplicateMonthError(next_year, next_month_number)

        new_budget = self.budgets.create(user_id, next_year, next_month_number)

        source = self.budgets.get(user_id, year, month)
        if source is not None:
            for income in self.incomes.list_for_budget(source.id):
                if income.recurring and not income.is_cash_out:
                    self._copy_income(new_budget, income)
            for expense in self.expenses.list_for_budget(source.id):
                if carries_forward(ExpenseKind(expense.kind), expense.recurring):
                    self._copy_expense(new_budget, expense)

        for loan in self.loans.list_for_user(user_id):
            self._add_loan_expense(new_budget, loan)

        for card in self.cards.list_for_user(user_id):
            self.statement_service.ensure_statement(card, next_year, next_month_number)

        months_created_counter.inc()
        log_month_created(user_id, str(new_budget.id), next_year, next_month_number)
        return new_budget

    def propagate_to_future_months(
        self,
        user_id: str,
        from_year: int,
        from_month: int,
        item: Union[Income, Expense],
    ) -> List[Budget]:
        """
        Insert a newly recurring item into every budget strictly after the source month.

        A month that already holds a recurring row with the same label is
        skipped, so retries and races with next-month creation do not duplicate.
        Returns the budgets that received a copy.
        """
        touched = []
        for budget in self.budgets.list_after(user_id, from_year, from_month):
            if isinstance(item, Income):
                existing = self.incomes.list_for_budget(budget.id)
                if already_present(item.source, existing):
                    continue
                self._copy_income(budget, item)
            else:
                existing = self.expenses.list_for_budget(budget.id)
                if already_present(item.label, existing):
                    continue
                self._copy_expense(budget, item)
            touched.append(budget)

        if touched:
            logger.info(
                "Recurring item propagated",
                extra={
                    "step": "recurring_propagated",
                    "user_id": user_id,
                    "item_id": str(item.id),
                    "months": len(touched),
                },
            )
        return touched

    def materialize_loan(self, user_id: str, loan: Loan) -> List[Budget]:
        """Add the loan's installment to every existing month from its next due date onward"""
        touched = []
        due = loan.next_due_date
        for budget in self.budgets.list_from(user_id, due.year, due.month):
            if self._add_loan_expense(budget, loan):
                touched.append(budget)
        return touched

    def _add_loan_expense(self, budget: Budget, loan: Loan) -> bool:
        if self.expenses.has_loan_expense(budget.id, loan.id):
            return False
        self.expenses.create(
            budget.id,
            label=loan.name,
            amount=loan.installment_amount,
            recurring=True,
            status=Status.PENDING.value,
            paid_date=None,
            kind=ExpenseKind.LOAN.value,
            linked_card_statement_id=None,
            linked_loan_id=loan.id,
        )
        return True

    def _copy_income(self, budget: Budget, income: Income) -> Income:
        return self.incomes.create(
            budget.id,
            source=income.source,
            amount=income.amount,
            recurring=True,
            status=Status.PENDING.value,
            paid_date=None,
        )

    def _copy_expense(self, budget: Budget, expense: Expense) -> Expense:
        return self.expenses.create(
            budget.id,
            label=expense.label,
            amount=expense.amount,
            recurring=True,
            status=Status.PENDING.value,
            paid_date=None,
            kind=ExpenseKind.REGULAR.value,
            linked_card_statement_id=None,
            linked_loan_id=None,
        )
