"""Cash-out allocation - covering a shortfall with available card limits"""

from decimal import Decimal
from typing import Dict, Iterable, List, Sequence

from budget_nikal.domain.exceptions import LimitExceededError, NotFoundError, ValidationError
from budget_nikal.domain.models import CardAvailability, Withdrawal
from budget_nikal.domain.money import ZERO, quantize

CASH_OUT_PREFIX = "Cash-out – "
DEFAULT_TIE_THRESHOLD = Decimal("0.10")


def cash_out_label(nickname: str) -> str:
    """Display label of the income row that records a withdrawal from a card"""
    return f"{CASH_OUT_PREFIX}{nickname}"


def is_cash_out_label(source: str) -> bool:
    return source.startswith(CASH_OUT_PREFIX)


def prioritize_cards(
    cards: Iterable[CardAvailability],
    tie_threshold: Decimal = DEFAULT_TIE_THRESHOLD,
) -> List[CardAvailability]:
    """
    Order cards for withdrawal.

    Larger available limit first. Cards whose limit is within ``tie_threshold``
    of a larger card's limit form a group led by that card; inside a group the
    card with the later due date comes first, since its balance can wait
    longest before repayment. Cards without positive availability are dropped.
    """
    usable = [c for c in cards if c.available_limit is not None and c.available_limit > ZERO]
    by_limit = sorted(usable, key=lambda c: (-c.available_limit, _due_key(c), c.card_id))

    ordered: List[CardAvailability] = []
    group: List[CardAvailability] = []
    for card in by_limit:
        if group and group[0].available_limit - card.available_limit > group[0].available_limit * tie_threshold:
            ordered.extend(_by_later_due(group))
            group = []
        group.append(card)
    ordered.extend(_by_later_due(group))

    return ordered


def suggest_plan(
    need: Decimal,
    cards: Iterable[CardAvailability],
    tie_threshold: Decimal = DEFAULT_TIE_THRESHOLD,
) -> List[Withdrawal]:
    """
    Greedily cover ``need`` from the prioritized cards.

    Each card gives ``min(remaining need, available limit)``; allocation stops
    once the need is covered or cards run out. Any remainder stays uncovered.
    """
    remaining = quantize(need)
    withdrawals: List[Withdrawal] = []
    if remaining <= ZERO:
        return withdrawals

    for card in prioritize_cards(cards, tie_threshold):
        if remaining <= ZERO:
            break
        amount = quantize(min(remaining, card.available_limit))
        withdrawals.append(Withdrawal(card_id=card.card_id, amount=amount))
        remaining -= amount

    return withdrawals


def validate_withdrawals(
    withdrawals: Sequence[Withdrawal],
    availability: Dict[str, CardAvailability],
) -> None:
    """
    Check a (possibly hand-edited) plan against live card availability.

    Raises:
        ValidationError: negative amount or the same card listed twice
        NotFoundError: card is not one of the user's cards
        LimitExceededError: amount is above the card's available limit
    """
    seen = set()
    for withdrawal in withdrawals:
        if withdrawal.amount < ZERO:
            raise ValidationError(f"Withdrawal amount for card {withdrawal.card_id} cannot be negative")
        if withdrawal.card_id in seen:
            raise ValidationError(f"Card {withdrawal.card_id} appears more than once in the plan")
        seen.add(withdrawal.card_id)

        card = availability.get(withdrawal.card_id)
        if card is None:
            raise NotFoundError("Credit card", withdrawal.card_id)

        limit = card.available_limit if card.available_limit is not None else ZERO
        if withdrawal.amount > limit:
            raise LimitExceededError(card.card_id, withdrawal.amount, limit)


def _due_key(card: CardAvailability) -> int:
    # Later due dates sort first; unknown due dates last
    return -card.due_date.toordinal() if card.due_date else 0


def _by_later_due(group: List[CardAvailability]) -> List[CardAvailability]:
    return sorted(group, key=lambda c: (_due_key(c), -c.available_limit, c.card_id))
