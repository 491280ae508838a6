"""Pydantic schemas for API request/response validation"""

import uuid
from datetime import date
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from budget_nikal.domain.models import ExpenseKind, Status

# Two fractional digits exactly; more precision is rejected, not truncated
MoneyAmount = Annotated[Decimal, Field(gt=0, max_digits=12, decimal_places=2)]


class IncomeCreate(BaseModel):
    """Request body for POST /v1/budgets/{year}/{month}/incomes and PATCH /v1/incomes/{id}"""

    source: str = Field(..., min_length=1, max_length=200)
    amount: MoneyAmount
    recurring: bool = False


class ExpenseCreate(BaseModel):
    """Request body for POST /v1/budgets/{year}/{month}/expenses"""

    label: str = Field(..., min_length=1, max_length=200)
    amount: MoneyAmount
    recurring: bool = False
    statement_id: Optional[uuid.UUID] = Field(None, description="Links the expense to a card statement as a CARD_BILL")


class ExpenseUpdate(BaseModel):
    """Request body for PATCH /v1/expenses/{id}"""

    label: str = Field(..., min_length=1, max_length=200)
    amount: MoneyAmount
    recurring: bool = False


class StatusUpdate(BaseModel):
    status: Status


class IncomeSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    budget_id: uuid.UUID
    source: str
    amount: Decimal
    recurring: bool
    status: Status
    paid_date: Optional[date] = None
    is_cash_out: bool = False
    source_card_id: Optional[uuid.UUID] = None


class ExpenseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    budget_id: uuid.UUID
    label: str
    amount: Decimal
    recurring: bool
    status: Status
    paid_date: Optional[date] = None
    kind: ExpenseKind
    linked_card_statement_id: Optional[uuid.UUID] = None
    linked_loan_id: Optional[uuid.UUID] = None


class StatementSchema(BaseModel):
    """Card statement with its card's nickname"""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    card_id: uuid.UUID
    card_nickname: Optional[str] = None
    year: int
    month: int
    statement_date: date
    due_date: date
    total_due: Decimal
    minimum_due: Decimal
    status: Status
    paid_date: Optional[date] = None


class BudgetSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: str
    year: int
    month: int
    balance_used: Decimal


class TotalsSchema(BaseModel):
    """Derived monthly totals"""

    model_config = ConfigDict(from_attributes=True)

    income_total: Decimal
    paid_income_total: Decimal
    cards_total: Decimal
    non_card_expenses_total: Decimal
    pending_card_bills: Decimal
    pending_non_card_expenses: Decimal
    paid_card_expenses: Decimal
    paid_non_card_expenses: Decimal
    total_expenses: Decimal
    after_card_payments: Decimal
    balance: Decimal
    need: Decimal
    statements_due: Decimal
    balance_used: Decimal


class MonthResponse(BaseModel):
    """Response for GET /v1/budgets/{year}/{month}"""

    budget: BudgetSchema
    incomes: List[IncomeSchema]
    expenses: List[ExpenseSchema]
    card_statements: List[StatementSchema]
    totals: TotalsSchema


class CardCreate(BaseModel):
    """Request body for POST /v1/cards and PATCH /v1/cards/{id}"""

    nickname: str = Field(..., min_length=1, max_length=100)
    issuer: Optional[str] = Field(None, max_length=100)
    last4: Optional[str] = Field(None, min_length=4, max_length=4)
    statement_day: Optional[int] = Field(None, ge=1, le=31)
    due_day: Optional[int] = Field(None, ge=1, le=31)
    day_difference: int = Field(..., ge=0, description="Days from statement date to due date")
    first_statement_date: Optional[date] = None
    billing_cycle_days: Optional[int] = Field(None, gt=0)
    total_limit: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)


class CardSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    nickname: str
    issuer: Optional[str] = None
    last4: Optional[str] = None
    statement_day: Optional[int] = None
    due_day: Optional[int] = None
    day_difference: int
    first_statement_date: Optional[date] = None
    billing_cycle_days: Optional[int] = None
    total_limit: Optional[Decimal] = None
    available_limit: Optional[Decimal] = None


class LoanCreate(BaseModel):
    """Request body for POST /v1/loans and PATCH /v1/loans/{id}"""

    name: str = Field(..., min_length=1, max_length=100)
    installment_amount: MoneyAmount
    next_due_date: date


class LoanSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    installment_amount: Decimal
    next_due_date: date
    recurring: bool


class WithdrawalSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    card_id: uuid.UUID
    amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)


class CashOutRequest(BaseModel):
    """Request body for POST /v1/budgets/{year}/{month}/cash-out"""

    withdrawals: List[WithdrawalSchema]


class CardAvailabilitySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    card_id: uuid.UUID
    nickname: str
    available_limit: Optional[Decimal] = None
    due_date: Optional[date] = None


class CashOutSuggestionResponse(BaseModel):
    """Response for GET /v1/budgets/{year}/{month}/cash-out"""

    need: Decimal
    uncovered: Decimal
    cards: List[CardAvailabilitySchema]
    withdrawals: List[WithdrawalSchema]


class MessageResponse(BaseModel):
    message: str
    budget: Optional[BudgetSchema] = None
