"""Fixed-point money helpers.

All monetary values are ``Decimal`` with exactly two fractional digits.
Values never pass through ``float``: inputs with more precision are rejected
and results of arithmetic are quantized to cents, rounding half-up.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable

from budget_nikal.domain.exceptions import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value, field: str = "amount") -> Decimal:
    """
    Parse a user-supplied amount into a 2-digit Decimal.

    Accepts ``Decimal``, ``int`` and numeric strings. Floats are refused since
    they cannot be trusted to carry an exact cent value.

    Raises:
        ValidationError: value is missing, not numeric, not finite, or has
            more than two fractional digits
    """
    if value is None or value == "":
        raise ValidationError(f"{field} is required")
    if isinstance(value, bool) or isinstance(value, float):
        raise ValidationError(f"{field} must be a decimal string or integer")

    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValidationError(f"{field} is not a valid number: {value!r}") from e

    if not amount.is_finite():
        raise ValidationError(f"{field} must be finite")
    if amount.as_tuple().exponent < -2 and amount != amount.quantize(CENT):
        raise ValidationError(f"{field} has more than two decimal places: {value}")

    return amount.quantize(CENT)


def positive_money(value, field: str = "amount") -> Decimal:
    amount = to_money(value, field)
    if amount <= ZERO:
        raise ValidationError(f"{field} must be greater than zero")
    return amount


def quantize(value: Decimal) -> Decimal:
    """Round an intermediate result to cents (half-up)"""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def money_sum(values: Iterable[Decimal]) -> Decimal:
    total = ZERO
    for value in values:
        total += value if value is not None else ZERO
    return quantize(total)


def clamp_to_zero(value: Decimal) -> Decimal:
    return quantize(max(ZERO, value))
