"""
NaijaTax Compliance - Tax Regime Configuration

Band tables and statutory constants, versioned by tax regime. The 2026
reform (Nigeria Tax Act 2025) replaced the CRA-based PITA scheme, so every
rule that moved is looked up from the regime of the tax year instead of
being hard-coded in a calculator.

2026 annual PIT bands:
- First ₦800,000: 0%
- Next ₦2,200,000: 15%
- Next ₦9,000,000: 18%
- Next ₦13,000,000: 21%
- Next ₦25,000,000: 23%
- Above ₦50,000,000: 25%

Legacy (2024) annual PIT bands, applied after CRA:
- First ₦300,000: 7%
- Next ₦300,000: 11%
- Next ₦500,000: 15%
- Next ₦500,000: 19%
- Next ₦1,600,000: 21%
- Above ₦3,200,000: 24%
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Tuple

from app.utils.error_handling import InvalidTaxYearException


KOBO = Decimal("0.01")
ZERO = Decimal("0")
MONTHS_IN_YEAR = Decimal("12")

TAX_REFORM_YEAR = 2026
LEGACY_TAX_YEAR = 2024
MIN_SUPPORTED_YEAR = 2000
MAX_SUPPORTED_YEAR = 2100


def round_kobo(amount: Decimal) -> Decimal:
    """Round a naira amount to 2 decimal places, half up."""
    return Decimal(amount).quantize(KOBO, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class TaxBand:
    """
    One slice of a progressive schedule.

    ``width`` is the amount of income taxed at ``rate`` (percent); None marks
    the open-ended top band.
    """
    width: Optional[Decimal]
    rate: Decimal

    def calculate_tax(self, remaining_income: Decimal) -> Tuple[Decimal, Decimal]:
        """Return (income taxed in this band, tax for this band)."""
        if remaining_income <= 0:
            return ZERO, ZERO
        taxed = remaining_income if self.width is None else min(remaining_income, self.width)
        return taxed, taxed * self.rate / 100


def apply_bands(income: Decimal, bands: Tuple[TaxBand, ...]) -> Tuple[Decimal, List[Dict[str, Decimal]]]:
    """
    Slice ``income`` across ordered bands and sum the tax.

    Returns the unrounded total and a per-band breakdown of occupied bands.
    """
    remaining = max(ZERO, Decimal(income))
    total = ZERO
    lower = ZERO
    breakdown = []
    for band in bands:
        if remaining <= 0:
            break
        taxed, tax = band.calculate_tax(remaining)
        breakdown.append({
            "lower": lower,
            "upper": None if band.width is None else lower + band.width,
            "rate": band.rate,
            "taxable_amount": taxed,
            "tax": round_kobo(tax),
        })
        total += tax
        remaining -= taxed
        if band.width is not None:
            lower += band.width
    return total, breakdown


@dataclass(frozen=True)
class TaxRegime:
    """Statutory rates and thresholds in force for a tax year."""

    tax_year: int
    pit_bands: Tuple[TaxBand, ...]

    # Payroll deductions (percent of monthly gross)
    employee_pension_rate: Decimal = Decimal("8")
    employer_pension_rate: Decimal = Decimal("10")
    nhf_rate: Decimal = Decimal("2.5")
    nhf_annual_income_cap: Optional[Decimal] = None
    nhis_rate: Decimal = Decimal("5")

    # Legacy Consolidated Relief Allowance
    cra_applies: bool = False
    cra_fixed_amount: Decimal = Decimal("200000")
    cra_minimum_percent: Decimal = Decimal("1")
    cra_percent: Decimal = Decimal("20")

    # Rent relief (annual): rate of rent paid, capped
    rent_relief_percent: Decimal = ZERO
    rent_relief_cap: Decimal = ZERO

    # Minimum tax for low earners (annual gross below the ceiling)
    minimum_tax_income_ceiling: Decimal = Decimal("300000")
    minimum_tax_percent: Decimal = Decimal("1")

    # VAT
    vat_rate: Decimal = Decimal("7.5")
    vat_exemption_turnover: Decimal = Decimal("25000000")

    # ITF: OR-gate on turnover and headcount
    itf_rate: Decimal = Decimal("1")
    itf_turnover_threshold: Decimal = Decimal("50000000")
    itf_headcount_threshold: int = 5

    # Development levy on assessable profit of non-small companies (percent by year)
    development_levy_schedule: Dict[int, Decimal] = field(default_factory=dict)

    @property
    def is_reform_regime(self) -> bool:
        return self.tax_year >= TAX_REFORM_YEAR

    def development_levy_rate(self, year: int) -> Decimal:
        """Levy in force for ``year``; the last scheduled rate persists."""
        applicable = [y for y in self.development_levy_schedule if y <= year]
        if not applicable:
            return ZERO
        return self.development_levy_schedule[max(applicable)]


REGIME_2026 = TaxRegime(
    tax_year=2026,
    pit_bands=(
        TaxBand(Decimal("800000"), Decimal("0")),
        TaxBand(Decimal("2200000"), Decimal("15")),
        TaxBand(Decimal("9000000"), Decimal("18")),
        TaxBand(Decimal("13000000"), Decimal("21")),
        TaxBand(Decimal("25000000"), Decimal("23")),
        TaxBand(None, Decimal("25")),
    ),
    rent_relief_percent=Decimal("20"),
    rent_relief_cap=Decimal("500000"),
    development_levy_schedule={
        2026: Decimal("4"),
        2027: Decimal("3.5"),
        2028: Decimal("3"),
        2029: Decimal("2.5"),
        2030: Decimal("2"),
    },
)

REGIME_2024 = TaxRegime(
    tax_year=2024,
    pit_bands=(
        TaxBand(Decimal("300000"), Decimal("7")),
        TaxBand(Decimal("300000"), Decimal("11")),
        TaxBand(Decimal("500000"), Decimal("15")),
        TaxBand(Decimal("500000"), Decimal("19")),
        TaxBand(Decimal("1600000"), Decimal("21")),
        TaxBand(None, Decimal("24")),
    ),
    nhf_annual_income_cap=Decimal("2500000"),
    cra_applies=True,
)

REGIMES = {
    REGIME_2026.tax_year: REGIME_2026,
    REGIME_2024.tax_year: REGIME_2024,
}


def normalize_tax_year(year: int) -> int:
    """Map a calendar year onto the regime year whose rules apply to it."""
    if year < MIN_SUPPORTED_YEAR or year > MAX_SUPPORTED_YEAR:
        raise InvalidTaxYearException(year, MIN_SUPPORTED_YEAR, MAX_SUPPORTED_YEAR)
    return TAX_REFORM_YEAR if year >= TAX_REFORM_YEAR else LEGACY_TAX_YEAR


def get_regime(year: int) -> TaxRegime:
    """Regime in force for a calendar year."""
    return REGIMES[normalize_tax_year(year)]
