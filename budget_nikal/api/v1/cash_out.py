"""Cash-out planner endpoints"""

from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from budget_nikal.api.dependencies import get_request_id, get_user_id, unit_of_work
from budget_nikal.api.v1.budgets import MonthPath, YearPath
from budget_nikal.api.v1.schemas import (
    BudgetSchema,
    CardAvailabilitySchema,
    CashOutRequest,
    CashOutSuggestionResponse,
    MessageResponse,
    WithdrawalSchema,
)
from budget_nikal.domain.models import Withdrawal
from budget_nikal.infrastructure.database.session import get_db
from budget_nikal.services.cash_out import CashOutService

router = APIRouter()


def _withdrawals(body: CashOutRequest) -> List[Withdrawal]:
    return [Withdrawal(card_id=str(w.card_id), amount=w.amount) for w in body.withdrawals]


@router.get("/budgets/{year}/{month}/cash-out", response_model=CashOutSuggestionResponse)
def suggest_cash_out(
    request: Request,
    year: YearPath,
    month: MonthPath,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """
    Current need, each card's live available limit and the suggested plan.

    Limits are recomputed on every call so manual overrides can be checked
    against fresh figures.
    """
    with unit_of_work(db, get_request_id(request)):
        suggestion = CashOutService(db).suggest(user_id, year, month)

    return CashOutSuggestionResponse(
        need=suggestion.need,
        uncovered=suggestion.uncovered,
        cards=[CardAvailabilitySchema.model_validate(c) for c in suggestion.cards],
        withdrawals=[WithdrawalSchema.model_validate(w) for w in suggestion.withdrawals],
    )


@router.post("/budgets/{year}/{month}/cash-out/validate", response_model=MessageResponse)
def validate_cash_out(
    body: CashOutRequest,
    request: Request,
    year: YearPath,
    month: MonthPath,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Check a draft plan against live limits without applying it"""
    with unit_of_work(db, get_request_id(request)):
        CashOutService(db).validate(user_id, year, month, _withdrawals(body))
    return MessageResponse(message="Cash-out plan is within available limits")


@router.post("/budgets/{year}/{month}/cash-out", response_model=MessageResponse)
def apply_cash_out(
    body: CashOutRequest,
    request: Request,
    year: YearPath,
    month: MonthPath,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Apply withdrawals; repeated applications accumulate per card"""
    with unit_of_work(db, get_request_id(request)):
        budget = CashOutService(db).apply_plan(user_id, year, month, _withdrawals(body))
    return MessageResponse(message="Cash-out plan applied successfully", budget=BudgetSchema.model_validate(budget))


@router.delete("/budgets/{year}/{month}/cash-out", response_model=MessageResponse)
def reset_cash_out(
    request: Request,
    year: YearPath,
    month: MonthPath,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Remove every cash-out row of the month and zero the running total"""
    with unit_of_work(db, get_request_id(request)):
        budget = CashOutService(db).reset_plan(user_id, year, month)
    return MessageResponse(message="Cash-out plan reset successfully", budget=BudgetSchema.model_validate(budget))
