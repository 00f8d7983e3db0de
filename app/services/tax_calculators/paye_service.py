"""
NaijaTax Compliance - PAYE Calculator Service

PAYE (Pay As You Earn) and annual PIT calculation.

Monthly PAYE:
1. taxable = gross - pension - NHF - NHIS (- CRA before 2026) (- rent relief from 2026)
2. annualise (x12), apply the regime's PIT bands, divide by 12
3. minimum tax: where annual gross is under ₦300,000, PAYE is at least 1% of gross

Net salary = gross - employee pension - NHF - NHIS - PAYE.
Employer pension is an employer cost and never reduces net pay.

Everything here is a pure function of validated inputs; callers reject
negative or non-finite amounts before calling.
"""

from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, Dict

from app.services.tax_calculators.deductions import (
    calculate_cra,
    calculate_employee_pension,
    calculate_employer_pension,
    calculate_nhf,
    calculate_nhis,
    calculate_rent_relief,
)
from app.services.tax_calculators.regime import (
    MONTHS_IN_YEAR,
    ZERO,
    apply_bands,
    get_regime,
    normalize_tax_year,
    round_kobo,
)


@dataclass
class PayrollBreakdown:
    """One month of pay for one employee."""
    gross_salary: Decimal
    tax_year: int
    employee_pension: Decimal
    employer_pension: Decimal
    nhf: Decimal
    nhis: Decimal
    cra: Decimal
    rent_relief: Decimal
    taxable_income: Decimal
    paye: Decimal
    net_salary: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class PAYECalculator:
    """
    PAYE / PIT calculator for the Nigerian tax system.

    Rates and bands come from the regime of the tax year (see regime.py).
    """

    @staticmethod
    def calculate_taxable_income(
        gross_salary: Decimal,
        pension: Decimal,
        nhf: Decimal,
        nhis: Decimal,
        tax_year: int,
        cra: Decimal = ZERO,
        rent_relief: Decimal = ZERO,
    ) -> Decimal:
        """
        Monthly taxable income, floored at zero.

        CRA only reduces taxable income before the 2026 reform and rent
        relief only from it.
        """
        regime = get_regime(tax_year)
        reliefs = pension + nhf + nhis
        if regime.cra_applies:
            reliefs += cra
        else:
            reliefs += rent_relief
        return round_kobo(max(ZERO, gross_salary - reliefs))

    @staticmethod
    def calculate_annual_pit(annual_taxable_income: Decimal, tax_year: int) -> Decimal:
        """Band tax on an annual figure, rounded to kobo."""
        regime = get_regime(tax_year)
        total, _ = apply_bands(annual_taxable_income, regime.pit_bands)
        return round_kobo(total)

    @staticmethod
    def calculate_pit_breakdown(annual_taxable_income: Decimal, tax_year: int) -> Dict[str, Any]:
        """Annual PIT with the per-band breakdown and effective rate."""
        regime = get_regime(tax_year)
        total, bands = apply_bands(annual_taxable_income, regime.pit_bands)
        total = round_kobo(total)
        effective_rate = ZERO
        if annual_taxable_income > 0:
            effective_rate = round_kobo(total / annual_taxable_income * 100)
        return {
            "tax_year": tax_year,
            "annual_taxable_income": round_kobo(annual_taxable_income),
            "annual_tax": total,
            "monthly_tax": round_kobo(total / MONTHS_IN_YEAR),
            "effective_rate": effective_rate,
            "bands": bands,
        }

    @staticmethod
    def calculate_minimum_tax(gross_salary: Decimal, tax_year: int) -> Decimal:
        """Monthly minimum tax, zero unless annual gross is under the ceiling."""
        regime = get_regime(tax_year)
        if gross_salary <= 0:
            return ZERO
        if gross_salary * MONTHS_IN_YEAR >= regime.minimum_tax_income_ceiling:
            return ZERO
        return round_kobo(gross_salary * regime.minimum_tax_percent / 100)

    @classmethod
    def calculate_paye(cls, taxable_income: Decimal, gross_salary: Decimal, tax_year: int) -> Decimal:
        """
        Monthly PAYE.

        The monthly taxable income is annualised before banding since the
        band thresholds are annual figures.
        """
        regime = get_regime(tax_year)
        band_tax = ZERO
        if taxable_income > 0:
            annual_tax, _ = apply_bands(taxable_income * MONTHS_IN_YEAR, regime.pit_bands)
            band_tax = round_kobo(annual_tax / MONTHS_IN_YEAR)
        return max(band_tax, cls.calculate_minimum_tax(gross_salary, tax_year))

    @staticmethod
    def calculate_net_salary(
        gross_salary: Decimal,
        employee_pension: Decimal,
        nhf: Decimal,
        nhis: Decimal,
        paye: Decimal,
    ) -> Decimal:
        return round_kobo(gross_salary - employee_pension - nhf - nhis - paye)

    @classmethod
    def calculate_payroll(
        cls,
        gross_salary: Decimal,
        tax_year: int,
        has_pension: bool = True,
        has_nhf: bool = True,
        has_nhis: bool = True,
        annual_rent_paid: Decimal = ZERO,
    ) -> PayrollBreakdown:
        """
        Full monthly payroll pipeline for one employee.

        Benefit flags gate each deduction here, at the call site, so the
        deduction functions stay flag-agnostic.
        """
        gross = round_kobo(gross_salary)
        regime_year = normalize_tax_year(tax_year)

        employee_pension = calculate_employee_pension(gross, regime_year) if has_pension else ZERO
        employer_pension = calculate_employer_pension(gross, regime_year) if has_pension else ZERO
        nhf = calculate_nhf(gross, regime_year) if has_nhf else ZERO
        nhis = calculate_nhis(gross, regime_year) if has_nhis else ZERO
        cra = calculate_cra(gross, regime_year)
        rent_relief = calculate_rent_relief(annual_rent_paid or ZERO, regime_year)

        taxable_income = cls.calculate_taxable_income(
            gross, employee_pension, nhf, nhis, regime_year, cra=cra, rent_relief=rent_relief,
        )
        paye = cls.calculate_paye(taxable_income, gross, regime_year)
        net_salary = cls.calculate_net_salary(gross, employee_pension, nhf, nhis, paye)

        return PayrollBreakdown(
            gross_salary=gross,
            tax_year=tax_year,
            employee_pension=employee_pension,
            employer_pension=employer_pension,
            nhf=nhf,
            nhis=nhis,
            cra=cra,
            rent_relief=rent_relief,
            taxable_income=taxable_income,
            paye=paye,
            net_salary=net_salary,
        )
