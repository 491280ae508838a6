"""Billing cycle prediction - statement and due dates for a target month"""

import logging
from datetime import date, timedelta

from budget_nikal.domain.exceptions import CycleComputationError, ValidationError
from budget_nikal.domain.models import CreditCard, CyclePrediction
from budget_nikal.utils.date_utils import add_months, clamped_date, month_bounds

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 1000


def predict_cycle(
    card: CreditCard,
    target_year: int,
    target_month: int,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> CyclePrediction:
    """
    Predict the statement/due date pair whose due date falls in the target month.

    Uses the anchor-based walk whenever the card has both a first statement
    date and a cycle length; otherwise falls back to the legacy
    day-of-month configuration.

    Raises:
        CycleComputationError: anchor walk did not converge (e.g. zero-length cycle)
        ValidationError: card has neither an anchor date nor a statement day
    """
    if card.first_statement_date is not None and card.billing_cycle_days is not None:
        return _predict_from_anchor(card, target_year, target_month, max_iterations)

    if card.statement_day is None:
        raise ValidationError(
            f"Card {card.nickname!r} needs a first statement date or a statement day"
        )
    return _predict_from_statement_day(card, target_year, target_month)


def _predict_from_anchor(
    card: CreditCard,
    target_year: int,
    target_month: int,
    max_iterations: int,
) -> CyclePrediction:
    """
    Walk cycles from the anchor until the due date lands in the target month.

    The due date of a cycle is its statement date plus ``day_difference``,
    which may exceed the cycle length. When one more cycle would jump over the
    whole target month (a cycle longer than the month), the earlier cycle is
    kept.
    """
    first_day, last_day = month_bounds(target_year, target_month)
    step = timedelta(days=card.billing_cycle_days)
    offset = timedelta(days=card.day_difference)

    statement_date = card.first_statement_date
    for _ in range(max_iterations):
        due_date = statement_date + offset

        if due_date < first_day:
            if step.days > 0 and due_date + step > last_day:
                logger.warning(
                    "No due date of card %s falls in %d-%02d; keeping cycle due %s",
                    card.id,
                    target_year,
                    target_month,
                    due_date.isoformat(),
                )
                return CyclePrediction(statement_date=statement_date, due_date=due_date)
            statement_date += step
        elif due_date > last_day:
            statement_date -= step
        else:
            return CyclePrediction(statement_date=statement_date, due_date=due_date)

    raise CycleComputationError(
        f"Could not place a due date of card {card.nickname!r} in "
        f"{target_year}-{target_month:02d} within {max_iterations} cycles "
        f"(cycle length {card.billing_cycle_days} days)"
    )


def _predict_from_statement_day(card: CreditCard, target_year: int, target_month: int) -> CyclePrediction:
    # Due date may roll into the following month
    statement_date = clamped_date(target_year, target_month, card.statement_day)
    return CyclePrediction(
        statement_date=statement_date,
        due_date=statement_date + timedelta(days=card.day_difference),
    )


def predict_next_month_dates(statement_date: date, day_difference: int) -> CyclePrediction:
    """Advance a statement date by one calendar month and derive its due date"""
    next_statement = add_months(statement_date, 1)
    return CyclePrediction(
        statement_date=next_statement,
        due_date=next_statement + timedelta(days=day_difference),
    )


def calculate_day_difference(statement_date: date, due_date: date) -> int:
    return (due_date - statement_date).days
