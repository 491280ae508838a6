"""Budget month endpoints: totals, new line items and next-month rollover"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request
from sqlalchemy.orm import Session

from budget_nikal.api.dependencies import get_request_id, get_user_id, unit_of_work
from budget_nikal.api.v1.schemas import (
    BudgetSchema,
    ExpenseCreate,
    ExpenseSchema,
    IncomeCreate,
    IncomeSchema,
    MessageResponse,
    MonthResponse,
    StatementSchema,
    TotalsSchema,
)
from budget_nikal.infrastructure.database.models import CardStatement
from budget_nikal.infrastructure.database.session import get_db
from budget_nikal.services.budgets import BudgetService
from budget_nikal.services.recurrence import RecurrenceService

router = APIRouter()

YearPath = Annotated[int, Path(ge=1, le=9998, description="Calendar year")]
MonthPath = Annotated[int, Path(ge=1, le=12, description="Calendar month (1-12)")]


def statement_schema(statement: CardStatement) -> StatementSchema:
    schema = StatementSchema.model_validate(statement)
    schema.card_nickname = statement.card.nickname if statement.card else None
    return schema


@router.get("/budgets/{year}/{month}", response_model=MonthResponse)
def get_month(
    request: Request,
    year: YearPath,
    month: MonthPath,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """
    Budget month with its items, the card statements due in it and derived totals.

    Creates the budget and any missing card statement on first view.
    """
    with unit_of_work(db, get_request_id(request)):
        overview = BudgetService(db).month_overview(user_id, year, month)

    return MonthResponse(
        budget=BudgetSchema.model_validate(overview.budget),
        incomes=[IncomeSchema.model_validate(i) for i in overview.incomes],
        expenses=[ExpenseSchema.model_validate(e) for e in overview.expenses],
        card_statements=[statement_schema(s) for s in overview.statements],
        totals=TotalsSchema.model_validate(overview.totals),
    )


@router.post("/budgets/{year}/{month}/incomes", response_model=IncomeSchema)
def create_income(
    body: IncomeCreate,
    request: Request,
    year: YearPath,
    month: MonthPath,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Add an income; recurring incomes are copied into existing later months"""
    with unit_of_work(db, get_request_id(request)):
        income = BudgetService(db).create_income(
            user_id, year, month, source=body.source, amount=body.amount, recurring=body.recurring
        )
    return IncomeSchema.model_validate(income)


@router.post("/budgets/{year}/{month}/expenses", response_model=ExpenseSchema)
def create_expense(
    body: ExpenseCreate,
    request: Request,
    year: YearPath,
    month: MonthPath,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Add an expense; a ``statement_id`` makes it a card bill on that statement"""
    with unit_of_work(db, get_request_id(request)):
        expense = BudgetService(db).create_expense(
            user_id,
            year,
            month,
            label=body.label,
            amount=body.amount,
            recurring=body.recurring,
            statement_id=body.statement_id,
        )
    return ExpenseSchema.model_validate(expense)


@router.post("/budgets/{year}/{month}/create-next", response_model=MessageResponse)
def create_next_month(
    request: Request,
    year: YearPath,
    month: MonthPath,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Roll recurring items, loans and card cycles into the following month"""
    with unit_of_work(db, get_request_id(request)):
        budget = RecurrenceService(db).create_next_month(user_id, year, month)
    return MessageResponse(message="Next month created successfully", budget=BudgetSchema.model_validate(budget))
