"""
NaijaTax Compliance - ITF Calculator Service

Industrial Training Fund levy: 1% of total gross payroll, payable by
companies (never by business names / sole proprietors) whose annual turnover
is at least ₦50,000,000 OR whose active headcount is at least 5. Either
condition alone makes the company liable.

ITF is a secondary figure on the payroll schedule. When the turnover lookup
fails, the liability falls back to zero and the failure is logged, so payroll
generation is never blocked by it.
"""

import logging
from decimal import Decimal
from typing import Awaitable, Callable

from app.services.tax_calculators.regime import ZERO, get_regime, round_kobo
from app.utils.owner import OwnerRef

logger = logging.getLogger(__name__)


class ITFCalculator:
    """ITF liability rules."""

    @staticmethod
    def is_liable(annual_turnover: Decimal, headcount: int, tax_year: int) -> bool:
        regime = get_regime(tax_year)
        return (
            annual_turnover >= regime.itf_turnover_threshold
            or headcount >= regime.itf_headcount_threshold
        )

    @classmethod
    def calculate_itf(
        cls,
        total_gross_payroll: Decimal,
        annual_turnover: Decimal,
        headcount: int,
        tax_year: int,
    ) -> Decimal:
        if total_gross_payroll <= 0:
            return ZERO
        if not cls.is_liable(annual_turnover, headcount, tax_year):
            return ZERO
        return round_kobo(total_gross_payroll * get_regime(tax_year).itf_rate / 100)

    @classmethod
    async def calculate_for_owner(
        cls,
        owner: OwnerRef,
        total_gross_payroll: Decimal,
        headcount: int,
        tax_year: int,
        turnover_lookup: Callable[[], Awaitable[Decimal]],
    ) -> Decimal:
        """
        ITF for an owner's payroll period.

        ``turnover_lookup`` is only awaited for companies. Any failure in it
        yields zero liability.
        """
        if not owner.is_company:
            return ZERO
        try:
            annual_turnover = await turnover_lookup()
        except Exception as e:
            logger.warning(f"ITF turnover lookup failed for {owner}, using zero liability: {e}")
            return ZERO
        return cls.calculate_itf(total_gross_payroll, annual_turnover, headcount, tax_year)
