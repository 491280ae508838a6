"""Cash-out plan use cases: suggest, validate, apply and reset withdrawals"""

import uuid
from datetime import date
from decimal import Decimal
from typing import Dict, List, Sequence

from sqlalchemy.orm import Session

from budget_nikal.config import settings
from budget_nikal.domain import cash_out
from budget_nikal.domain.exceptions import NotFoundError
from budget_nikal.domain.models import CardAvailability, CashOutSuggestion, Status, Withdrawal
from budget_nikal.domain.money import ZERO, money_sum, quantize
from budget_nikal.infrastructure.database.models import Budget, Income
from budget_nikal.infrastructure.database.repositories import BudgetRepository, CardRepository, IncomeRepository
from budget_nikal.infrastructure.observability.logging import log_cash_out
from budget_nikal.infrastructure.observability.metrics import record_cash_out, cash_out_reset_counter
from budget_nikal.services.budgets import BudgetService
from budget_nikal.services.statements import StatementService


class CashOutService:
    """Cover a month's shortfall with withdrawals against card limits"""

    def __init__(self, db: Session):
        self.db = db
        self.budgets = BudgetRepository(db)
        self.cards = CardRepository(db)
        self.incomes = IncomeRepository(db)
        self.budget_service = BudgetService(db)
        self.statement_service = StatementService(db)

    def availability(self, user_id: str, year: int, month: int) -> Dict[str, CardAvailability]:
        budget = self.budget_service.get_or_create_budget(user_id, year, month)
        self.statement_service.ensure_month_statements(user_id, year, month)
        return {
            c.card_id: c for c in self.statement_service.card_availability(user_id, year, month, budget)
        }

    def suggest(self, user_id: str, year: int, month: int) -> CashOutSuggestion:
        """Current need, live card limits and the suggested withdrawal plan"""
        need = self.budget_service.month_overview(user_id, year, month).totals.need
        cards = list(self.availability(user_id, year, month).values())
        return CashOutSuggestion(
            need=need,
            cards=cards,
            withdrawals=cash_out.suggest_plan(need, cards, settings.cash_out_tie_threshold),
        )

    def validate(self, user_id: str, year: int, month: int, withdrawals: Sequence[Withdrawal]) -> None:
        """
        Raises:
            LimitExceededError: a withdrawal is above its card's live available limit
        """
        cash_out.validate_withdrawals(withdrawals, self.availability(user_id, year, month))

    def apply_plan(self, user_id: str, year: int, month: int, withdrawals: Sequence[Withdrawal]) -> Budget:
        """
        Record withdrawals as DONE incomes and add them to the budget's running total.

        A card that already has a cash-out row this month gets the new amount
        added to that row instead of a second row.
        """
        self.validate(user_id, year, month, withdrawals)
        budget = self.budget_service.get_or_create_budget(user_id, year, month)

        applied: List[Decimal] = []
        for withdrawal in withdrawals:
            amount = quantize(withdrawal.amount)
            if amount <= ZERO:
                continue

            card = self.cards.get_for_user(user_id, uuid.UUID(str(withdrawal.card_id)))
            if card is None:
                raise NotFoundError("Credit card", withdrawal.card_id)

            label = cash_out.cash_out_label(card.nickname)
            existing = self.incomes.find_cash_out(budget.id, card.id, label)
            if existing is not None:
                existing.amount = quantize(existing.amount + amount)
                existing.is_cash_out = True
                existing.recurring = False
                if existing.source_card_id is None:
                    existing.source_card_id = card.id
            else:
                self.incomes.create(
                    budget.id,
                    source=label,
                    amount=amount,
                    recurring=False,
                    status=Status.DONE.value,
                    paid_date=date.today(),
                    is_cash_out=True,
                    source_card_id=card.id,
                )
            applied.append(amount)

        total = money_sum(applied)
        budget.balance_used = quantize((budget.balance_used or ZERO) + total)
        self.db.flush()

        record_cash_out(total)
        log_cash_out(user_id, str(budget.id), "applied", total, len(applied), budget.balance_used)
        return budget

    def reset_plan(self, user_id: str, year: int, month: int) -> Budget:
        """Delete every cash-out row of the month and zero the running total"""
        budget = self.budgets.get(user_id, year, month)
        if budget is None:
            raise NotFoundError("Budget", f"{year}-{month:02d}")

        removed: List[Income] = self.incomes.list_cash_outs(budget.id)
        for income in removed:
            self.db.delete(income)
        budget.balance_used = Decimal("0.00")
        self.db.flush()

        cash_out_reset_counter.inc()
        log_cash_out(user_id, str(budget.id), "reset", money_sum(i.amount for i in removed), len(removed), ZERO)
        return budget
