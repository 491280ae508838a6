"""Credit card and loan management use cases"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from budget_nikal.config import settings
from budget_nikal.domain.exceptions import NotFoundError, ValidationError
from budget_nikal.domain.models import CardAvailability
from budget_nikal.domain.money import positive_money, to_money
from budget_nikal.infrastructure.database.models import CreditCard, Loan
from budget_nikal.infrastructure.database.repositories import BudgetRepository, CardRepository, LoanRepository
from budget_nikal.services.recurrence import RecurrenceService
from budget_nikal.services.statements import StatementService
from budget_nikal.utils.date_utils import check_year_month

logger = logging.getLogger(__name__)


@dataclass
class CardFields:
    """User-editable card configuration"""

    nickname: str
    day_difference: int
    issuer: Optional[str] = None
    last4: Optional[str] = None
    statement_day: Optional[int] = None
    due_day: Optional[int] = None
    first_statement_date: Optional[date] = None
    billing_cycle_days: Optional[int] = None
    total_limit: Optional[Decimal] = None


def _normalize_card(fields: CardFields) -> dict:
    nickname = (fields.nickname or "").strip()
    if not nickname:
        raise ValidationError("nickname is required")
    if fields.day_difference is None or fields.day_difference < 0:
        raise ValidationError("day_difference must be zero or more days")
    if fields.first_statement_date is None and fields.statement_day is None:
        raise ValidationError("Either first_statement_date or statement_day is required")

    statement_day = fields.statement_day
    if statement_day is None:
        statement_day = fields.first_statement_date.day
    if not 1 <= statement_day <= 31:
        raise ValidationError("statement_day must be between 1 and 31")

    due_day = fields.due_day
    if due_day is None and fields.first_statement_date is not None:
        due_day = (fields.first_statement_date + timedelta(days=fields.day_difference)).day
    if due_day is not None and not 1 <= due_day <= 31:
        raise ValidationError("due_day must be between 1 and 31")

    billing_cycle_days = fields.billing_cycle_days or settings.default_billing_cycle_days
    if billing_cycle_days <= 0:
        raise ValidationError("billing_cycle_days must be positive")

    if fields.last4 is not None and (len(fields.last4) != 4 or not fields.last4.isdigit()):
        raise ValidationError("last4 must be exactly four digits")

    total_limit = None if fields.total_limit is None else to_money(fields.total_limit, "total_limit")
    if total_limit is not None and total_limit < 0:
        raise ValidationError("total_limit cannot be negative")

    return {
        "nickname": nickname,
        "issuer": fields.issuer,
        "last4": fields.last4,
        "statement_day": statement_day,
        "due_day": due_day,
        "day_difference": fields.day_difference,
        "first_statement_date": fields.first_statement_date,
        "billing_cycle_days": billing_cycle_days,
        "total_limit": total_limit,
    }


class CardService:
    """Credit card CRUD and availability listing"""

    def __init__(self, db: Session):
        self.db = db
        self.cards = CardRepository(db)
        self.budgets = BudgetRepository(db)
        self.statement_service = StatementService(db)

    def list_with_availability(self, user_id: str, year: int, month: int) -> List[tuple[CreditCard, CardAvailability]]:
        check_year_month(year, month)
        budget = self.budgets.get(user_id, year, month)
        availability = {
            c.card_id: c for c in self.statement_service.card_availability(user_id, year, month, budget)
        }
        return [(card, availability[str(card.id)]) for card in self.cards.list_for_user(user_id)]

    def create(self, user_id: str, fields: CardFields) -> CreditCard:
        card = self.cards.create(user_id, **_normalize_card(fields))
        logger.info("Credit card created", extra={"step": "card_created", "user_id": user_id, "card_id": str(card.id)})
        return card

    def update(self, user_id: str, card_id: uuid.UUID, fields: CardFields) -> CreditCard:
        card = self.get(user_id, card_id)
        for name, value in _normalize_card(fields).items():
            setattr(card, name, value)
        self.db.flush()
        return card

    def delete(self, user_id: str, card_id: uuid.UUID) -> None:
        self.cards.delete(self.get(user_id, card_id))

    def get(self, user_id: str, card_id: uuid.UUID) -> CreditCard:
        card = self.cards.get_for_user(user_id, card_id)
        if card is None:
            raise NotFoundError("Credit card", card_id)
        return card


class LoanService:
    """Loan CRUD; loans are always recurring"""

    def __init__(self, db: Session):
        self.db = db
        self.loans = LoanRepository(db)
        self.recurrence = RecurrenceService(db)

    def list_for_user(self, user_id: str) -> List[Loan]:
        return self.loans.list_for_user(user_id)

    def create(self, user_id: str, name: str, installment_amount, next_due_date: date) -> Loan:
        name = (name or "").strip()
        if not name:
            raise ValidationError("name is required")
        if next_due_date is None:
            raise ValidationError("next_due_date is required")

        loan = self.loans.create(user_id, name, positive_money(installment_amount, "installment_amount"), next_due_date)
        self.recurrence.materialize_loan(user_id, loan)
        return loan

    def update(self, user_id: str, loan_id: uuid.UUID, name: str, installment_amount, next_due_date: date) -> Loan:
        loan = self.get(user_id, loan_id)
        name = (name or "").strip()
        if not name:
            raise ValidationError("name is required")
        if next_due_date is None:
            raise ValidationError("next_due_date is required")

        loan.name = name
        loan.installment_amount = positive_money(installment_amount, "installment_amount")
        loan.next_due_date = next_due_date
        self.db.flush()
        return loan

    def delete(self, user_id: str, loan_id: uuid.UUID) -> None:
        self.loans.delete(self.get(user_id, loan_id))

    def get(self, user_id: str, loan_id: uuid.UUID) -> Loan:
        loan = self.loans.get_for_user(user_id, loan_id)
        if loan is None:
            raise NotFoundError("Loan", loan_id)
        return loan
