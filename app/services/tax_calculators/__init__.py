"""
NaijaTax Compliance - Tax Calculators Package

Pure tax calculation for the Nigerian tax system, versioned by regime.

Modules:
- regime: band tables and statutory constants per tax regime (2026 / legacy)
- deductions: pension, NHF, NHIS, CRA and rent relief
- paye_service: monthly PAYE, annual PIT and the payroll pipeline
- vat_service: VAT at 7.5% and the net VAT position
- wht_service: WHT rates by payment type and residency
- itf_service: ITF levy (1% of payroll) with its turnover/headcount gate
- cit_service: CIT by company size plus development levy
"""

from decimal import Decimal

from app.services.tax_calculators.regime import (
    TaxBand,
    TaxRegime,
    apply_bands,
    get_regime,
    normalize_tax_year,
    round_kobo,
)
from app.services.tax_calculators.paye_service import PAYECalculator, PayrollBreakdown
from app.services.tax_calculators.vat_service import VATCalculator, VATPosition, VATStatus
from app.services.tax_calculators.wht_service import WHTCalculator
from app.services.tax_calculators.itf_service import ITFCalculator
from app.services.tax_calculators.cit_service import CITCalculator, CompanySize


# ===========================================
# CONVENIENCE FUNCTIONS
# ===========================================

def calculate_vat(amount: Decimal, is_exempt: bool = False) -> Decimal:
    """VAT on an amount (7.5%, or 0 if exempt)."""
    return VATCalculator.calculate_vat(amount, is_exempt=is_exempt)


def calculate_annual_pit(annual_income: Decimal, tax_year: int = 2026) -> Decimal:
    """Annual PIT on taxable income using the bands of ``tax_year``."""
    return PAYECalculator.calculate_annual_pit(annual_income, tax_year)


def calculate_monthly_paye(
    gross_salary: Decimal,
    tax_year: int = 2026,
    has_pension: bool = True,
    has_nhf: bool = True,
    has_nhis: bool = True,
) -> PayrollBreakdown:
    """Monthly payroll breakdown for one employee."""
    return PAYECalculator.calculate_payroll(
        gross_salary,
        tax_year,
        has_pension=has_pension,
        has_nhf=has_nhf,
        has_nhis=has_nhis,
    )


def calculate_tax_after_wht_credit(tax_liability: Decimal, wht_credits: Decimal) -> Decimal:
    """Final liability after WHT credit, never below zero."""
    return WHTCalculator.calculate_tax_after_wht_credit(tax_liability, wht_credits)


__all__ = [
    "TaxBand",
    "TaxRegime",
    "apply_bands",
    "get_regime",
    "normalize_tax_year",
    "round_kobo",
    "PAYECalculator",
    "PayrollBreakdown",
    "VATCalculator",
    "VATPosition",
    "VATStatus",
    "WHTCalculator",
    "ITFCalculator",
    "CITCalculator",
    "CompanySize",
    "calculate_vat",
    "calculate_annual_pit",
    "calculate_monthly_paye",
    "calculate_tax_after_wht_credit",
]
