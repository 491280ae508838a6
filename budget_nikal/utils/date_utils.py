"""Calendar month helpers"""

import calendar
from datetime import date
from typing import Tuple

from budget_nikal.domain.exceptions import ValidationError


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last day of a month (inclusive)"""
    return date(year, month, 1), date(year, month, days_in_month(year, month))


def clamped_date(year: int, month: int, day: int) -> date:
    """Build a date, clamping ``day`` to the last valid day of the month"""
    return date(year, month, min(max(day, 1), days_in_month(year, month)))


def next_month(year: int, month: int) -> Tuple[int, int]:
    if month == 12:
        return year + 1, 1
    return year, month + 1


def previous_month(year: int, month: int) -> Tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def add_months(value: date, months: int) -> date:
    """Shift a date by whole months, clamping to the target month's length"""
    index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(index, 12)
    return clamped_date(year, month + 1, value.day)


def check_year_month(year: int, month: int) -> None:
    """Reject calendar months that cannot exist"""
    if not 1 <= month <= 12:
        raise ValidationError(f"Invalid month: {month}")
    if not 1 <= year <= 9998:
        raise ValidationError(f"Invalid year: {year}")
