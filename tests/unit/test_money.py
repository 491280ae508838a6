"""Unit tests for fixed-point money parsing"""

import pytest
from decimal import Decimal
from budget_nikal.domain.exceptions import ValidationError
from budget_nikal.domain.money import clamp_to_zero, money_sum, positive_money, quantize, to_money


def test_to_money_normalizes_to_two_places():
    assert to_money("45000") == Decimal("45000.00")
    assert to_money(120) == Decimal("120.00")
    assert to_money(Decimal("9.5")) == Decimal("9.50")
    assert str(to_money("9.5")) == "9.50"


def test_to_money_accepts_trailing_zeros_beyond_cents():
    assert to_money("12.500") == Decimal("12.50")


@pytest.mark.parametrize("value", ["12.345", "0.001", Decimal("1.999")])
def test_to_money_rejects_sub_cent_precision(value):
    with pytest.raises(ValidationError, match="more than two decimal places"):
        to_money(value)


@pytest.mark.parametrize("value", [None, "", "abc", 1.5, True, "NaN", "Infinity"])
def test_to_money_rejects_malformed_values(value):
    with pytest.raises(ValidationError):
        to_money(value)


def test_positive_money_rejects_zero_and_negative():
    with pytest.raises(ValidationError, match="greater than zero"):
        positive_money("0")
    with pytest.raises(ValidationError):
        positive_money("-10.00", "installment_amount")


def test_money_sum_ignores_none_and_stays_exact():
    # 0.1 + 0.2 style drift must not appear
    assert money_sum([Decimal("0.10"), Decimal("0.20"), None]) == Decimal("0.30")
    assert money_sum([]) == Decimal("0.00")


def test_quantize_rounds_half_up():
    assert quantize(Decimal("1.005")) == Decimal("1.01")
    assert quantize(Decimal("2.004")) == Decimal("2.00")


def test_clamp_to_zero():
    assert clamp_to_zero(Decimal("-5.00")) == Decimal("0.00")
    assert clamp_to_zero(Decimal("5.00")) == Decimal("5.00")
