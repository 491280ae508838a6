"""Credit card and loan endpoints"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from budget_nikal.api.dependencies import get_request_id, get_user_id, parse_id, unit_of_work
from budget_nikal.api.v1.budgets import statement_schema
from budget_nikal.api.v1.schemas import (
    CardCreate,
    CardSchema,
    LoanCreate,
    LoanSchema,
    MessageResponse,
    StatementSchema,
)
from budget_nikal.infrastructure.database.session import get_db
from budget_nikal.services.cards import CardFields, CardService, LoanService
from budget_nikal.services.statements import StatementService

router = APIRouter()


def _month_or_today(year: Optional[int], month: Optional[int]) -> tuple[int, int]:
    today = date.today()
    return year or today.year, month or today.month


def _card_fields(body: CardCreate) -> CardFields:
    return CardFields(**body.model_dump())


@router.get("/cards", response_model=List[CardSchema])
def list_cards(
    request: Request,
    year: Optional[int] = Query(None, ge=1, le=9998),
    month: Optional[int] = Query(None, ge=1, le=12),
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """
    User's cards with their live available limit for the viewed month.

    Defaults to the current month.
    """
    year, month = _month_or_today(year, month)
    with unit_of_work(db, get_request_id(request)):
        rows = CardService(db).list_with_availability(user_id, year, month)

    cards = []
    for card, availability in rows:
        schema = CardSchema.model_validate(card)
        schema.available_limit = availability.available_limit
        cards.append(schema)
    return cards


@router.post("/cards", response_model=CardSchema)
def create_card(
    body: CardCreate,
    request: Request,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    with unit_of_work(db, get_request_id(request)):
        card = CardService(db).create(user_id, _card_fields(body))
    return CardSchema.model_validate(card)


@router.patch("/cards/{card_id}", response_model=CardSchema)
def update_card(
    card_id: str,
    body: CardCreate,
    request: Request,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    with unit_of_work(db, get_request_id(request)):
        card = CardService(db).update(user_id, parse_id(card_id, "card"), _card_fields(body))
    return CardSchema.model_validate(card)


@router.delete("/cards/{card_id}", response_model=MessageResponse)
def delete_card(
    card_id: str,
    request: Request,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Delete a card and its statements; linked card bills keep their rows"""
    with unit_of_work(db, get_request_id(request)):
        CardService(db).delete(user_id, parse_id(card_id, "card"))
    return MessageResponse(message="Credit card deleted successfully")


@router.get("/cards/{card_id}/statements", response_model=List[StatementSchema])
def list_card_statements(
    card_id: str,
    request: Request,
    year: Optional[int] = Query(None, ge=1, le=9998),
    month: Optional[int] = Query(None, ge=1, le=12),
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """All statements of a card, newest first; the viewed and previous month are created if missing"""
    year, month = _month_or_today(year, month)
    with unit_of_work(db, get_request_id(request)):
        statements = StatementService(db).card_history(user_id, parse_id(card_id, "card"), year, month)
    return [statement_schema(s) for s in statements]


@router.get("/loans", response_model=List[LoanSchema])
def list_loans(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    return [LoanSchema.model_validate(loan) for loan in LoanService(db).list_for_user(user_id)]


@router.post("/loans", response_model=LoanSchema)
def create_loan(
    body: LoanCreate,
    request: Request,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Create a loan and add its installment to every existing month from its next due date"""
    with unit_of_work(db, get_request_id(request)):
        loan = LoanService(db).create(user_id, body.name, body.installment_amount, body.next_due_date)
    return LoanSchema.model_validate(loan)


@router.patch("/loans/{loan_id}", response_model=LoanSchema)
def update_loan(
    loan_id: str,
    body: LoanCreate,
    request: Request,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    with unit_of_work(db, get_request_id(request)):
        loan = LoanService(db).update(
            user_id, parse_id(loan_id, "loan"), body.name, body.installment_amount, body.next_due_date
        )
    return LoanSchema.model_validate(loan)


@router.delete("/loans/{loan_id}", response_model=MessageResponse)
def delete_loan(
    loan_id: str,
    request: Request,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    with unit_of_work(db, get_request_id(request)):
        LoanService(db).delete(user_id, parse_id(loan_id, "loan"))
    return MessageResponse(message="Loan deleted successfully")
