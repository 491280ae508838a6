"""Data access layer for budgeting entities"""

import uuid
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import or_, tuple_
from sqlalchemy.orm import Session

from budget_nikal.domain.cash_out import CASH_OUT_PREFIX
from budget_nikal.domain.models import ExpenseKind, Status
from budget_nikal.infrastructure.database.models import Budget, CardStatement, CreditCard, Expense, Income, Loan
from budget_nikal.utils.date_utils import month_bounds


class CardRepository:
    """Repository for credit cards"""

    def __init__(self, db: Session):
        self.db = db

    def list_for_user(self, user_id: str) -> List[CreditCard]:
        return (
            self.db.query(CreditCard)
            .filter(CreditCard.user_id == user_id)
            .order_by(CreditCard.created_at, CreditCard.nickname)
            .all()
        )

    def get_for_user(self, user_id: str, card_id: uuid.UUID) -> Optional[CreditCard]:
        return (
            self.db.query(CreditCard)
            .filter(CreditCard.id == card_id, CreditCard.user_id == user_id)
            .first()
        )

    def create(self, user_id: str, **fields) -> CreditCard:
        card = CreditCard(user_id=user_id, **fields)
        self.db.add(card)
        self.db.flush()
        return card

    def delete(self, card: CreditCard) -> None:
        """Delete a card with its statements, clearing links that point at them"""
        statement_ids = [s.id for s in card.statements]
        if statement_ids:
            self.db.query(Expense).filter(Expense.linked_card_statement_id.in_(statement_ids)).update(
                {Expense.linked_card_statement_id: None}, synchronize_session="fetch"
            )
        self.db.query(Income).filter(Income.source_card_id == card.id).update(
            {Income.source_card_id: None}, synchronize_session="fetch"
        )
        self.db.delete(card)
        self.db.flush()


class StatementRepository:
    """Repository for card statements"""

    def __init__(self, db: Session):
        self.db = db

    def get_for_user(self, user_id: str, statement_id: uuid.UUID) -> Optional[CardStatement]:
        return (
            self.db.query(CardStatement)
            .join(CreditCard, CardStatement.card_id == CreditCard.id)
            .filter(CardStatement.id == statement_id, CreditCard.user_id == user_id)
            .first()
        )

    def get_by_id(self, statement_id: uuid.UUID) -> Optional[CardStatement]:
        return self.db.get(CardStatement, statement_id)

    def find_for_month(self, card_id: uuid.UUID, year: int, month: int) -> Optional[CardStatement]:
        """Statement stored for the card's (year, month)"""
        return (
            self.db.query(CardStatement)
            .filter(CardStatement.card_id == card_id, CardStatement.year == year, CardStatement.month == month)
            .first()
        )

    def find_by_due_date(self, card_id: uuid.UUID, due_date: date) -> Optional[CardStatement]:
        return (
            self.db.query(CardStatement)
            .filter(CardStatement.card_id == card_id, CardStatement.due_date == due_date)
            .order_by(CardStatement.created_at)
            .first()
        )

    def find_due_in_month(self, card_id: uuid.UUID, year: int, month: int) -> Optional[CardStatement]:
        """First statement of the card whose due date falls in the month"""
        first_day, last_day = month_bounds(year, month)
        return (
            self.db.query(CardStatement)
            .filter(
                CardStatement.card_id == card_id,
                CardStatement.due_date >= first_day,
                CardStatement.due_date <= last_day,
            )
            .order_by(CardStatement.due_date, CardStatement.created_at)
            .first()
        )

    def list_due_in_month_for_user(self, user_id: str, year: int, month: int) -> List[CardStatement]:
        first_day, last_day = month_bounds(year, month)
        return (
            self.db.query(CardStatement)
            .join(CreditCard, CardStatement.card_id == CreditCard.id)
            .filter(
                CreditCard.user_id == user_id,
                CardStatement.due_date >= first_day,
                CardStatement.due_date <= last_day,
            )
            .order_by(CardStatement.due_date, CreditCard.nickname)
            .all()
        )

    def list_for_card(self, card_id: uuid.UUID) -> List[CardStatement]:
        """All statements of a card, newest first"""
        return (
            self.db.query(CardStatement)
            .filter(CardStatement.card_id == card_id)
            .order_by(CardStatement.year.desc(), CardStatement.month.desc(), CardStatement.due_date.desc())
            .all()
        )

    def create(
        self,
        card_id: uuid.UUID,
        year: int,
        month: int,
        statement_date: date,
        due_date: date,
    ) -> CardStatement:
        """New statement with zeroed financial fields"""
        statement = CardStatement(
            card_id=card_id,
            year=year,
            month=month,
            statement_date=statement_date,
            due_date=due_date,
            total_due=Decimal("0.00"),
            minimum_due=Decimal("0.00"),
            available_limit=Decimal("0.00"),
            status=Status.PENDING.value,
            paid_date=None,
        )
        self.db.add(statement)
        self.db.flush()
        return statement


class LoanRepository:
    """Repository for loans"""

    def __init__(self, db: Session):
        self.db = db

    def list_for_user(self, user_id: str) -> List[Loan]:
        return self.db.query(Loan).filter(Loan.user_id == user_id).order_by(Loan.created_at, Loan.name).all()

    def get_for_user(self, user_id: str, loan_id: uuid.UUID) -> Optional[Loan]:
        return self.db.query(Loan).filter(Loan.id == loan_id, Loan.user_id == user_id).first()

    def create(self, user_id: str, name: str, installment_amount: Decimal, next_due_date: date) -> Loan:
        loan = Loan(
            user_id=user_id,
            name=name,
            installment_amount=installment_amount,
            next_due_date=next_due_date,
            recurring=True,
        )
        self.db.add(loan)
        self.db.flush()
        return loan

    def delete(self, loan: Loan) -> None:
        self.db.query(Expense).filter(Expense.linked_loan_id == loan.id).update(
            {Expense.linked_loan_id: None}, synchronize_session="fetch"
        )
        self.db.delete(loan)
        self.db.flush()


class BudgetRepository:
    """Repository for monthly budgets"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str, year: int, month: int) -> Optional[Budget]:
        return (
            self.db.query(Budget)
            .filter(Budget.user_id == user_id, Budget.year == year, Budget.month == month)
            .first()
        )

    def get_by_id(self, budget_id: uuid.UUID) -> Optional[Budget]:
        return self.db.get(Budget, budget_id)

    def create(self, user_id: str, year: int, month: int) -> Budget:
        budget = Budget(user_id=user_id, year=year, month=month, balance_used=Decimal("0.00"))
        self.db.add(budget)
        self.db.flush()
        return budget

    def list_after(self, user_id: str, year: int, month: int) -> List[Budget]:
        """Budgets strictly later than (year, month), oldest first"""
        return (
            self.db.query(Budget)
            .filter(Budget.user_id == user_id, tuple_(Budget.year, Budget.month) > tuple_(year, month))
            .order_by(Budget.year, Budget.month)
            .all()
        )

    def list_from(self, user_id: str, year: int, month: int) -> List[Budget]:
        """Budgets at or after (year, month), oldest first"""
        return (
            self.db.query(Budget)
            .filter(Budget.user_id == user_id, tuple_(Budget.year, Budget.month) >= tuple_(year, month))
            .order_by(Budget.year, Budget.month)
            .all()
        )


class IncomeRepository:
    """Repository for income line items"""

    def __init__(self, db: Session):
        self.db = db

    def list_for_budget(self, budget_id: uuid.UUID) -> List[Income]:
        return self.db.query(Income).filter(Income.budget_id == budget_id).order_by(Income.created_at).all()

    def get_for_user(self, user_id: str, income_id: uuid.UUID) -> Optional[Income]:
        return (
            self.db.query(Income)
            .join(Budget, Income.budget_id == Budget.id)
            .filter(Income.id == income_id, Budget.user_id == user_id)
            .first()
        )

    def create(self, budget_id: uuid.UUID, **fields) -> Income:
        income = Income(budget_id=budget_id, **fields)
        self.db.add(income)
        self.db.flush()
        return income

    def delete(self, income: Income) -> None:
        self.db.delete(income)
        self.db.flush()

    def find_cash_out(self, budget_id: uuid.UUID, card_id: uuid.UUID, label: str) -> Optional[Income]:
        """
        Existing withdrawal row for a card, by typed link first.

        The label only matches rows not linked to any card, so cards sharing a
        nickname never pick up each other's withdrawals.
        """
        linked = (
            self.db.query(Income)
            .filter(
                Income.budget_id == budget_id,
                Income.is_cash_out.is_(True),
                Income.source_card_id == card_id,
            )
            .order_by(Income.created_at)
            .first()
        )
        if linked is not None:
            return linked
        return (
            self.db.query(Income)
            .filter(
                Income.budget_id == budget_id,
                Income.source_card_id.is_(None),
                Income.source == label,
            )
            .order_by(Income.created_at)
            .first()
        )

    def list_cash_outs(self, budget_id: uuid.UUID) -> List[Income]:
        return (
            self.db.query(Income)
            .filter(
                Income.budget_id == budget_id,
                or_(Income.is_cash_out.is_(True), Income.source.startswith(CASH_OUT_PREFIX, autoescape=True)),
            )
            .all()
        )


class ExpenseRepository:
    """Repository for expense line items"""

    def __init__(self, db: Session):
        self.db = db

    def list_for_budget(self, budget_id: uuid.UUID) -> List[Expense]:
        return self.db.query(Expense).filter(Expense.budget_id == budget_id).order_by(Expense.created_at).all()

    def get_for_user(self, user_id: str, expense_id: uuid.UUID) -> Optional[Expense]:
        return (
            self.db.query(Expense)
            .join(Budget, Expense.budget_id == Budget.id)
            .filter(Expense.id == expense_id, Budget.user_id == user_id)
            .first()
        )

    def create(self, budget_id: uuid.UUID, **fields) -> Expense:
        expense = Expense(budget_id=budget_id, **fields)
        self.db.add(expense)
        self.db.flush()
        return expense

    def delete(self, expense: Expense) -> None:
        self.db.delete(expense)
        self.db.flush()

    def count_other_statement_links(self, statement_id: uuid.UUID, exclude_id: uuid.UUID) -> int:
        return (
            self.db.query(Expense)
            .filter(
                Expense.kind == ExpenseKind.CARD_BILL.value,
                Expense.linked_card_statement_id == statement_id,
                Expense.id != exclude_id,
            )
            .count()
        )

    def has_loan_expense(self, budget_id: uuid.UUID, loan_id: uuid.UUID) -> bool:
        return (
            self.db.query(Expense)
            .filter(
                Expense.budget_id == budget_id,
                Expense.kind == ExpenseKind.LOAN.value,
                Expense.linked_loan_id == loan_id,
            )
            .first()
            is not None
        )
