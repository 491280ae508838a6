"""Statement ledger use cases: lazy statement creation and live card availability"""

import logging
import uuid
from decimal import Decimal
from typing import Dict, List

from sqlalchemy.orm import Session

from budget_nikal.config import settings
from budget_nikal.domain import billing_cycle
from budget_nikal.domain.aggregator import available_limit
from budget_nikal.domain.cash_out import cash_out_label
from budget_nikal.domain.exceptions import CycleComputationError, NotFoundError
from budget_nikal.domain.models import CardAvailability, CreditCard as CardConfig
from budget_nikal.domain.money import ZERO, money_sum
from budget_nikal.infrastructure.database.models import Budget, CardStatement, CreditCard
from budget_nikal.infrastructure.database.repositories import (
    CardRepository,
    IncomeRepository,
    StatementRepository,
)
from budget_nikal.infrastructure.observability.metrics import (
    cycle_prediction_failures_counter,
    statements_created_counter,
)
from budget_nikal.utils.date_utils import previous_month

logger = logging.getLogger(__name__)


def to_cycle_config(card: CreditCard) -> CardConfig:
    """Billing configuration of a stored card"""
    return CardConfig(
        id=str(card.id),
        nickname=card.nickname,
        day_difference=card.day_difference,
        first_statement_date=card.first_statement_date,
        billing_cycle_days=card.billing_cycle_days,
        statement_day=card.statement_day,
        total_limit=card.total_limit,
    )


class StatementService:
    """Get-or-create statements per card and month, and compute live limits"""

    def __init__(self, db: Session):
        self.db = db
        self.cards = CardRepository(db)
        self.statements = StatementRepository(db)
        self.incomes = IncomeRepository(db)

    def ensure_statement(self, card: CreditCard, year: int, month: int) -> CardStatement:
        """
        Idempotent get-or-create of the card's statement due in (year, month).

        The row stored for (card, year, month) is canonical; otherwise the first
        statement whose due date lands in the month. When neither exists, dates
        come from the billing cycle predictor and the financial fields start at
        zero. A month skipped by a long cycle maps onto the earlier cycle, so a
        statement already holding that cycle's due date is reused.

        Raises:
            CycleComputationError: card configuration cannot place a cycle in the month
        """
        existing = self.statements.find_for_month(card.id, year, month) or self.statements.find_due_in_month(
            card.id, year, month
        )
        if existing is not None:
            return existing

        try:
            prediction = billing_cycle.predict_cycle(
                to_cycle_config(card), year, month, max_iterations=settings.cycle_max_iterations
            )
        except CycleComputationError:
            cycle_prediction_failures_counter.inc()
            raise

        same_cycle = self.statements.find_by_due_date(card.id, prediction.due_date)
        if same_cycle is not None:
            return same_cycle

        statement = self.statements.create(
            card_id=card.id,
            year=year,
            month=month,
            statement_date=prediction.statement_date,
            due_date=prediction.due_date,
        )
        statements_created_counter.inc()
        logger.info(
            "Statement created",
            extra={
                "step": "statement_created",
                "card_id": str(card.id),
                "year": year,
                "month": month,
                "statement_date": prediction.statement_date.isoformat(),
                "due_date": prediction.due_date.isoformat(),
            },
        )
        return statement

    def ensure_month_statements(self, user_id: str, year: int, month: int) -> List[CardStatement]:
        """Make sure every card of the user has a statement for the month"""
        return [self.ensure_statement(card, year, month) for card in self.cards.list_for_user(user_id)]

    def statements_due_in_month(self, user_id: str, year: int, month: int) -> List[CardStatement]:
        return self.statements.list_due_in_month_for_user(user_id, year, month)

    def card_history(self, user_id: str, card_id: uuid.UUID, year: int, month: int) -> List[CardStatement]:
        """Ensure the previous and the viewed month exist, then list all statements newest first"""
        card = self.cards.get_for_user(user_id, card_id)
        if card is None:
            raise NotFoundError("Credit card", card_id)

        prev_year, prev_month = previous_month(year, month)
        self.ensure_statement(card, prev_year, prev_month)
        self.ensure_statement(card, year, month)
        return self.statements.list_for_card(card.id)

    def card_availability(self, user_id: str, year: int, month: int, budget: Budget | None) -> List[CardAvailability]:
        """
        Live available limit of every card of the user for the viewed month.

        Recomputed from the current statements and cash-out rows on each call.
        """
        cash_out_by_card = self._cash_out_by_card(budget)
        result = []
        for card in self.cards.list_for_user(user_id):
            statements = self.statements.list_for_card(card.id)
            due_statement = self.statements.find_due_in_month(card.id, year, month)
            result.append(
                CardAvailability(
                    card_id=str(card.id),
                    nickname=card.nickname,
                    available_limit=available_limit(
                        card.total_limit,
                        statements,
                        year,
                        month,
                        cash_out_taken=cash_out_by_card.get(card.id, ZERO),
                    ),
                    due_date=due_statement.due_date if due_statement else None,
                )
            )
        return result

    def _cash_out_by_card(self, budget: Budget | None) -> Dict[uuid.UUID, Decimal]:
        if budget is None:
            return {}

        # Rows written before the typed link existed are matched by label,
        # unless several cards share that nickname
        card_ids_by_label: Dict[str, List[uuid.UUID]] = {}
        for card in self.cards.list_for_user(budget.user_id):
            card_ids_by_label.setdefault(cash_out_label(card.nickname), []).append(card.id)

        taken: Dict[uuid.UUID, List[Decimal]] = {}
        for income in self.incomes.list_cash_outs(budget.id):
            card_id = income.source_card_id
            if card_id is None and len(card_ids_by_label.get(income.source, [])) == 1:
                card_id = card_ids_by_label[income.source][0]
            if card_id is not None:
                taken.setdefault(card_id, []).append(income.amount)
        return {card_id: money_sum(amounts) for card_id, amounts in taken.items()}
