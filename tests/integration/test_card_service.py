"""Integration tests for card and loan management"""

from datetime import date
from decimal import Decimal
import pytest
from sqlalchemy.orm import Session
from budget_nikal.domain.exceptions import NotFoundError, ValidationError
from budget_nikal.infrastructure.database.models import CardStatement, Expense
from budget_nikal.services.budgets import BudgetService
from budget_nikal.services.cards import CardFields, CardService, LoanService
from budget_nikal.services.statements import StatementService


def test_create_derives_days_from_anchor(db: Session, user_id):
    card = CardService(db).create(
        user_id,
        CardFields(nickname="  JS Bank ", day_difference=20, first_statement_date=date(2024, 1, 10)),
    )

    assert card.nickname == "JS Bank"
    assert card.statement_day == 10
    assert card.due_day == 30
    assert card.billing_cycle_days == 30


def test_legacy_card_with_statement_day_only(db: Session, user_id):
    card = CardService(db).create(user_id, CardFields(nickname="Legacy", day_difference=15, statement_day=31))

    statement = StatementService(db).ensure_statement(card, 2023, 2)

    assert card.first_statement_date is None
    assert statement.statement_date == date(2023, 2, 28)
    assert statement.due_date == date(2023, 3, 15)


@pytest.mark.parametrize(
    "fields",
    [
        CardFields(nickname="", day_difference=20, statement_day=5),
        CardFields(nickname="No schedule", day_difference=20),
        CardFields(nickname="Bad day", day_difference=20, statement_day=32),
        CardFields(nickname="Bad last4", day_difference=20, statement_day=5, last4="12a4"),
        CardFields(nickname="Negative", day_difference=-1, statement_day=5),
        CardFields(nickname="Bad limit", day_difference=20, statement_day=5, total_limit=Decimal("-1")),
    ],
)
def test_invalid_card_configuration(db: Session, user_id, fields):
    with pytest.raises(ValidationError):
        CardService(db).create(user_id, fields)


def test_list_with_availability(db: Session, make_card, user_id):
    make_card("JS Bank", total_limit="20000.00")
    make_card("Meezan", total_limit=None)

    rows = CardService(db).list_with_availability(user_id, 2024, 3)

    limits = {card.nickname: availability.available_limit for card, availability in rows}
    assert limits == {"JS Bank": Decimal("20000.00"), "Meezan": None}


def test_delete_card_keeps_card_bills(db: Session, make_card, user_id):
    card = make_card()
    statement = StatementService(db).ensure_statement(card, 2024, 3)
    bill = BudgetService(db).create_expense(user_id, 2024, 3, "JS Bank", "4000.00", statement_id=statement.id)

    CardService(db).delete(user_id, card.id)
    db.expire_all()

    assert db.query(CardStatement).count() == 0
    kept = db.get(Expense, bill.id)
    assert kept is not None
    assert kept.linked_card_statement_id is None


def test_update_foreign_card(db: Session, make_card, user_id):
    card = make_card(user="user_2")

    with pytest.raises(NotFoundError):
        CardService(db).update(user_id, card.id, CardFields(nickname="Mine now", day_difference=1, statement_day=1))


def test_loan_update_and_delete(db: Session, user_id):
    service = LoanService(db)
    loan = service.create(user_id, "Car loan", "7500.00", date(2024, 3, 5))

    updated = service.update(user_id, loan.id, "Car loan", "8000.00", date(2024, 4, 5))
    assert updated.installment_amount == Decimal("8000.00")
    assert updated.recurring is True

    service.delete(user_id, loan.id)
    assert service.list_for_user(user_id) == []


def test_loan_requires_positive_installment(db: Session, user_id):
    with pytest.raises(ValidationError):
        LoanService(db).create(user_id, "Car loan", "0", date(2024, 3, 5))
