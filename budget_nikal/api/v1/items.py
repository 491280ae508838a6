"""Income and expense item endpoints: edit, status toggle and delete"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from budget_nikal.api.dependencies import get_request_id, get_user_id, parse_id, unit_of_work
from budget_nikal.api.v1.schemas import (
    ExpenseSchema,
    ExpenseUpdate,
    IncomeCreate,
    IncomeSchema,
    MessageResponse,
    StatusUpdate,
)
from budget_nikal.infrastructure.database.session import get_db
from budget_nikal.services.budgets import BudgetService

router = APIRouter()


@router.patch("/incomes/{income_id}", response_model=IncomeSchema)
def update_income(
    income_id: str,
    body: IncomeCreate,
    request: Request,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    with unit_of_work(db, get_request_id(request)):
        income = BudgetService(db).update_income(
            user_id, parse_id(income_id, "income"), body.source, body.amount, body.recurring
        )
    return IncomeSchema.model_validate(income)


@router.patch("/incomes/{income_id}/status", response_model=IncomeSchema)
def update_income_status(
    income_id: str,
    body: StatusUpdate,
    request: Request,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    with unit_of_work(db, get_request_id(request)):
        income = BudgetService(db).set_income_status(user_id, parse_id(income_id, "income"), body.status)
    return IncomeSchema.model_validate(income)


@router.delete("/incomes/{income_id}", response_model=MessageResponse)
def delete_income(
    income_id: str,
    request: Request,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    with unit_of_work(db, get_request_id(request)):
        BudgetService(db).delete_income(user_id, parse_id(income_id, "income"))
    return MessageResponse(message="Income deleted successfully")


@router.patch("/expenses/{expense_id}", response_model=ExpenseSchema)
def update_expense(
    expense_id: str,
    body: ExpenseUpdate,
    request: Request,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Edit a REGULAR expense; card bills and loan installments are rejected"""
    with unit_of_work(db, get_request_id(request)):
        expense = BudgetService(db).update_expense(
            user_id, parse_id(expense_id, "expense"), body.label, body.amount, body.recurring
        )
    return ExpenseSchema.model_validate(expense)


@router.patch("/expenses/{expense_id}/status", response_model=ExpenseSchema)
def update_expense_status(
    expense_id: str,
    body: StatusUpdate,
    request: Request,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Toggle pending/done; card bills also settle or reopen their statement"""
    with unit_of_work(db, get_request_id(request)):
        expense = BudgetService(db).set_expense_status(user_id, parse_id(expense_id, "expense"), body.status)
    return ExpenseSchema.model_validate(expense)


@router.delete("/expenses/{expense_id}", response_model=MessageResponse)
def delete_expense(
    expense_id: str,
    request: Request,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Delete an expense; a card bill's statement contribution is reversed in the same transaction"""
    with unit_of_work(db, get_request_id(request)):
        BudgetService(db).delete_expense(user_id, parse_id(expense_id, "expense"))
    return MessageResponse(message="Expense deleted successfully")
