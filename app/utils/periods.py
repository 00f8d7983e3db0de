"""
NaijaTax Compliance - Tax Period Helpers

Validation of (month, year) periods for persisted records and the statutory
remittance deadlines that hang off them.

Deadlines (day of the month following the period):
- PAYE: 10th
- VAT: 21st
- WHT: 21st

Annual income tax (the year after the tax year):
- PIT: March 31
- CIT: June 30
"""

import math
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from app.config import settings
from app.utils.error_handling import (
    InvalidAmountException,
    InvalidMonthException,
    InvalidTaxYearException,
)


PAYE_DEADLINE_DAY = 10
VAT_DEADLINE_DAY = 21
WHT_DEADLINE_DAY = 21

# (month, day) in the year after the tax year
PIT_DEADLINE = (3, 31)
CIT_DEADLINE = (6, 30)


def validate_month(month: Any) -> int:
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        raise InvalidMonthException(month)
    return month


def validate_tax_year(year: Any) -> int:
    """Year must sit in the window supported for persisted records."""
    if (
        isinstance(year, bool)
        or not isinstance(year, int)
        or not settings.payroll_min_year <= year <= settings.payroll_max_year
    ):
        raise InvalidTaxYearException(year, settings.payroll_min_year, settings.payroll_max_year)
    return year


def validate_period(month: Any, year: Any) -> None:
    validate_month(month)
    validate_tax_year(year)


def validate_amount(amount: Any, field: str = "amount") -> Decimal:
    """Coerce to Decimal, rejecting NaN, infinities and negatives."""
    if isinstance(amount, bool) or amount is None:
        raise InvalidAmountException(amount, field=field)
    if isinstance(amount, float) and not math.isfinite(amount):
        raise InvalidAmountException(amount, field=field)
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise InvalidAmountException(amount, field=field)
    if not value.is_finite() or value < 0:
        raise InvalidAmountException(amount, field=field)
    return value


def next_month_deadline(month: int, year: int, day: int) -> date:
    """``day`` of the month after (month, year); December rolls into January."""
    if month == 12:
        return date(year + 1, 1, day)
    return date(year, month + 1, day)


def paye_deadline(month: int, year: int) -> date:
    return next_month_deadline(month, year, PAYE_DEADLINE_DAY)


def vat_deadline(month: int, year: int) -> date:
    return next_month_deadline(month, year, VAT_DEADLINE_DAY)


def wht_deadline(month: int, year: int) -> date:
    return next_month_deadline(month, year, WHT_DEADLINE_DAY)


def cit_deadline(tax_year: int) -> date:
    return date(tax_year + 1, *CIT_DEADLINE)


def pit_deadline(tax_year: int) -> date:
    return date(tax_year + 1, *PIT_DEADLINE)


def next_monthly_deadline(as_of: date, day: int) -> date:
    """First ``day``-of-month deadline falling on or after ``as_of``."""
    if as_of.day <= day:
        return date(as_of.year, as_of.month, day)
    return next_month_deadline(as_of.month, as_of.year, day)


def next_annual_deadline(as_of: date, month_day: tuple) -> date:
    """First (month, day) deadline falling on or after ``as_of``."""
    deadline = date(as_of.year, *month_day)
    if deadline < as_of:
        deadline = date(as_of.year + 1, *month_day)
    return deadline


def month_bounds(month: int, year: int) -> tuple:
    """First day of the month and first day of the next month."""
    start = date(year, month, 1)
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return start, end
