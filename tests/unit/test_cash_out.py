"""Unit tests for cash-out prioritization, suggestion and validation"""

import pytest
from datetime import date
from decimal import Decimal
from budget_nikal.domain.cash_out import (
    cash_out_label,
    is_cash_out_label,
    prioritize_cards,
    suggest_plan,
    validate_withdrawals,
)
from budget_nikal.domain.exceptions import LimitExceededError, NotFoundError, ValidationError
from budget_nikal.domain.models import CardAvailability, CashOutSuggestion, Withdrawal


def card(card_id: str, limit, due: date = None) -> CardAvailability:
    return CardAvailability(
        card_id=card_id,
        nickname=card_id.upper(),
        available_limit=Decimal(limit) if limit is not None else None,
        due_date=due,
    )


def test_label_round_trip():
    assert cash_out_label("JS Bank") == "Cash-out – JS Bank"
    assert is_cash_out_label("Cash-out – JS Bank")
    assert not is_cash_out_label("Salary")


def test_larger_limit_first():
    ordered = prioritize_cards([card("a", "5000"), card("b", "20000"), card("c", "12000")])
    assert [c.card_id for c in ordered] == ["b", "c", "a"]


def test_near_equal_limits_prefer_later_due_date():
    ordered = prioritize_cards(
        [
            card("early", "10000", date(2024, 3, 5)),
            card("late", "9500", date(2024, 3, 28)),
            card("small", "3000", date(2024, 3, 30)),
        ]
    )
    assert [c.card_id for c in ordered] == ["late", "early", "small"]


def test_tie_threshold_is_configurable():
    cards = [card("early", "10000", date(2024, 3, 5)), card("late", "9500", date(2024, 3, 28))]

    ordered = prioritize_cards(cards, tie_threshold=Decimal("0.01"))

    assert [c.card_id for c in ordered] == ["early", "late"]


def test_unknown_due_date_sorts_last_within_group():
    ordered = prioritize_cards([card("nodue", "10000"), card("due", "10000", date(2024, 3, 1))])
    assert [c.card_id for c in ordered] == ["due", "nodue"]


def test_exhausted_and_unlimited_cards_are_skipped():
    ordered = prioritize_cards([card("zero", "0"), card("none", None), card("neg", "-50"), card("ok", "10")])
    assert [c.card_id for c in ordered] == ["ok"]


def test_suggest_plan_is_greedy():
    withdrawals = suggest_plan(Decimal("25000"), [card("a", "20000"), card("b", "8000"), card("c", "3000")])

    assert withdrawals == [
        Withdrawal(card_id="a", amount=Decimal("20000.00")),
        Withdrawal(card_id="b", amount=Decimal("5000.00")),
    ]


def test_suggest_plan_leaves_remainder_uncovered():
    cards = [card("a", "1000"), card("b", "500")]
    withdrawals = suggest_plan(Decimal("2000"), cards)

    suggestion = CashOutSuggestion(need=Decimal("2000.00"), cards=cards, withdrawals=withdrawals)

    assert sum(w.amount for w in withdrawals) == Decimal("1500.00")
    assert suggestion.uncovered == Decimal("500.00")


def test_no_need_no_withdrawals():
    assert suggest_plan(Decimal("0"), [card("a", "1000")]) == []


def test_validate_accepts_plan_within_limits():
    availability = {"a": card("a", "1000"), "b": card("b", "500")}
    validate_withdrawals(
        [Withdrawal(card_id="a", amount=Decimal("1000")), Withdrawal(card_id="b", amount=Decimal("0"))],
        availability,
    )


def test_validate_rejects_over_limit():
    availability = {"a": card("a", "1000")}

    with pytest.raises(LimitExceededError) as exc_info:
        validate_withdrawals([Withdrawal(card_id="a", amount=Decimal("1000.01"))], availability)

    assert exc_info.value.card_id == "a"
    assert exc_info.value.available == Decimal("1000")


def test_validate_treats_missing_limit_as_zero():
    with pytest.raises(LimitExceededError):
        validate_withdrawals([Withdrawal(card_id="a", amount=Decimal("1"))], {"a": card("a", None)})


def test_validate_rejects_unknown_card():
    with pytest.raises(NotFoundError):
        validate_withdrawals([Withdrawal(card_id="ghost", amount=Decimal("1"))], {})


def test_validate_rejects_negative_and_duplicate():
    availability = {"a": card("a", "1000")}

    with pytest.raises(ValidationError, match="negative"):
        validate_withdrawals([Withdrawal(card_id="a", amount=Decimal("-1"))], availability)
    with pytest.raises(ValidationError, match="more than once"):
        validate_withdrawals(
            [Withdrawal(card_id="a", amount=Decimal("1")), Withdrawal(card_id="a", amount=Decimal("2"))],
            availability,
        )
