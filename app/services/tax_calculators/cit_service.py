"""
NaijaTax Compliance - CIT Calculator Service

Company Income Tax (CIT) calculation.

CIT Rates (Nigeria Tax Act 2025, from 2026):
- Turnover ≤ ₦50,000,000: 0% (small company, also exempt from the levy)
- Turnover ₦50,000,001 - ₦500,000,000: 30% (medium)
- Turnover > ₦500,000,000: 30% (large)

Development Levy on assessable profit (non-small companies):
2026: 4%, 2027: 3.5%, 2028: 3%, 2029: 2.5%, 2030 onwards: 2%

Legacy (pre-2026) CIT:
- Turnover < ₦25,000,000: 0%
- Turnover < ₦100,000,000: 20%
- Otherwise: 30%
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from app.services.tax_calculators.regime import (
    LEGACY_TAX_YEAR,
    ZERO,
    get_regime,
    normalize_tax_year,
    round_kobo,
)


class CompanySize(str, Enum):
    """Company size classification for CIT purposes."""
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


@dataclass
class CITRate:
    """CIT rate structure. ``turnover_max`` is inclusive when ``inclusive``."""
    size: CompanySize
    turnover_max: Optional[Decimal]
    rate: Decimal
    inclusive: bool = True

    def matches(self, turnover: Decimal) -> bool:
        if self.turnover_max is None:
            return True
        if self.inclusive:
            return turnover <= self.turnover_max
        return turnover < self.turnover_max


CIT_RATES = {
    2026: [
        CITRate(CompanySize.SMALL, Decimal("50000000"), Decimal("0")),
        CITRate(CompanySize.MEDIUM, Decimal("500000000"), Decimal("30")),
        CITRate(CompanySize.LARGE, None, Decimal("30")),
    ],
    LEGACY_TAX_YEAR: [
        CITRate(CompanySize.SMALL, Decimal("25000000"), Decimal("0"), inclusive=False),
        CITRate(CompanySize.MEDIUM, Decimal("100000000"), Decimal("20"), inclusive=False),
        CITRate(CompanySize.LARGE, None, Decimal("30")),
    ],
}


class CITCalculator:
    """Company Income Tax calculator."""

    @staticmethod
    def get_rate(turnover: Decimal, tax_year: int) -> CITRate:
        for rate_info in CIT_RATES[normalize_tax_year(tax_year)]:
            if rate_info.matches(turnover):
                return rate_info
        raise LookupError(f"No CIT rate covers turnover {turnover}")

    @staticmethod
    def get_company_size(turnover: Decimal, tax_year: int) -> CompanySize:
        return CITCalculator.get_rate(turnover, tax_year).size

    @staticmethod
    def calculate_cit(
        gross_turnover: Decimal,
        assessable_profit: Decimal,
        tax_year: int,
    ) -> Dict[str, Any]:
        """
        Calculate CIT and development levy for a year.

        Losses give zero tax; small companies pay neither CIT nor the levy.
        """
        turnover = round_kobo(gross_turnover)
        profit = round_kobo(assessable_profit)
        rate_info = CITCalculator.get_rate(turnover, tax_year)
        taxable_profit = max(ZERO, profit)

        cit = round_kobo(taxable_profit * rate_info.rate / 100)

        levy_rate = ZERO
        if rate_info.size != CompanySize.SMALL:
            levy_rate = get_regime(tax_year).development_levy_rate(tax_year)
        development_levy = round_kobo(taxable_profit * levy_rate / 100)

        return {
            "tax_year": tax_year,
            "gross_turnover": turnover,
            "assessable_profit": profit,
            "company_size": rate_info.size.value,
            "cit_rate": rate_info.rate,
            "cit": cit,
            "development_levy_rate": levy_rate,
            "development_levy": development_levy,
            "total_tax_liability": cit + development_levy,
        }

    @staticmethod
    def get_cit_thresholds(tax_year: int) -> List[Dict[str, Any]]:
        return [
            {
                "size": rate_info.size.value,
                "turnover_max": rate_info.turnover_max,
                "rate": rate_info.rate,
            }
            for rate_info in CIT_RATES[normalize_tax_year(tax_year)]
        ]
