"""Integration tests for statement creation and card availability"""

from datetime import date
from decimal import Decimal
import pytest
from sqlalchemy.orm import Session
from budget_nikal.domain.exceptions import NotFoundError
from budget_nikal.infrastructure.database.models import CardStatement
from budget_nikal.services.budgets import BudgetService
from budget_nikal.services.statements import StatementService


def test_ensure_statement_creates_zeroed_statement(db: Session, make_card):
    card = make_card()

    statement = StatementService(db).ensure_statement(card, 2024, 3)

    assert statement.statement_date == date(2024, 3, 10)
    assert statement.due_date == date(2024, 3, 30)
    assert statement.total_due == Decimal("0.00")
    assert statement.minimum_due == Decimal("0.00")
    assert statement.status == "pending"
    assert (statement.year, statement.month) == (2024, 3)


def test_ensure_statement_is_idempotent(db: Session, make_card):
    card = make_card()
    service = StatementService(db)

    first = service.ensure_statement(card, 2024, 3)
    second = service.ensure_statement(card, 2024, 3)

    assert first.id == second.id
    assert db.query(CardStatement).filter(CardStatement.card_id == card.id).count() == 1


def test_month_statements_cover_every_card(db: Session, make_card, user_id):
    make_card("JS Bank")
    make_card("Meezan", total_limit="50000.00")
    make_card("Other user", user="user_2")

    statements = StatementService(db).ensure_month_statements(user_id, 2024, 5)

    assert len(statements) == 2
    due = StatementService(db).statements_due_in_month(user_id, 2024, 5)
    assert {s.card.nickname for s in due} == {"JS Bank", "Meezan"}


def test_card_history_adds_previous_and_current_month(db: Session, make_card, user_id):
    card = make_card()

    history = StatementService(db).card_history(user_id, card.id, 2024, 4)

    assert [(s.year, s.month) for s in history] == [(2024, 4), (2024, 3)]


def test_card_history_of_foreign_card(db: Session, make_card):
    card = make_card(user="user_2")

    with pytest.raises(NotFoundError):
        StatementService(db).card_history("user_1", card.id, 2024, 4)


def test_availability_subtracts_pending_due(db: Session, make_card, user_id):
    card = make_card(total_limit="20000.00")
    statement = StatementService(db).ensure_statement(card, 2024, 3)
    BudgetService(db).create_expense(user_id, 2024, 3, "JS Bank bill", "4000.00", statement_id=statement.id)

    [availability] = StatementService(db).card_availability(user_id, 2024, 3, None)

    assert availability.available_limit == Decimal("16000.00")
    assert availability.due_date == date(2024, 3, 30)
    assert availability.nickname == "JS Bank"


def test_availability_without_limit(db: Session, make_card, user_id):
    make_card(total_limit=None)

    [availability] = StatementService(db).card_availability(user_id, 2024, 3, None)

    assert availability.available_limit is None


def long_cycle_card(make_card):
    """Due on 2025-01-30 and then 2025-03-01, so no due date lands in February"""
    return make_card(first_statement_date=date(2025, 1, 30), billing_cycle_days=30, day_difference=0)


def test_skipped_month_viewed_repeatedly_keeps_one_statement(db: Session, make_card, user_id):
    card = long_cycle_card(make_card)
    budgets = BudgetService(db)

    for _ in range(3):
        budgets.month_overview(user_id, 2025, 2)

    statements = db.query(CardStatement).filter(CardStatement.card_id == card.id).all()
    assert len(statements) == 1
    assert statements[0].due_date == date(2025, 1, 30)
    assert len(budgets.month_overview(user_id, 2025, 1).statements) == 1
    assert db.query(CardStatement).filter(CardStatement.card_id == card.id).count() == 1


def test_skipped_month_after_its_cycle_month_reuses_statement(db: Session, make_card):
    card = long_cycle_card(make_card)
    service = StatementService(db)

    january = service.ensure_statement(card, 2025, 1)
    february = service.ensure_statement(card, 2025, 2)
    service.ensure_statement(card, 2025, 2)

    assert february.id == january.id
    assert db.query(CardStatement).filter(CardStatement.card_id == card.id).count() == 1


def test_month_after_skipped_month_gets_its_own_statement(db: Session, make_card):
    card = long_cycle_card(make_card)
    service = StatementService(db)

    service.ensure_statement(card, 2025, 2)
    march = service.ensure_statement(card, 2025, 3)

    assert march.due_date == date(2025, 3, 1)
    assert db.query(CardStatement).filter(CardStatement.card_id == card.id).count() == 2
