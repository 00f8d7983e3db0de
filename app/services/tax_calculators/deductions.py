"""
NaijaTax Compliance - Statutory Deduction Calculators

Pure functions of (monthly gross salary, tax year). The employee's benefit
flags (has_pension, has_nhf, has_nhis) are checked by the caller, which skips
the call and uses zero when a flag is off.

- Employee pension: 8% of gross
- Employer pension: 10% of gross (employer cost, never deducted from net pay)
- NHF: 2.5% of gross; legacy regime caps the base at ₦2,500,000 a year
- NHIS: 5% of gross
- CRA (legacy only): ₦200,000 or 1% of gross, whichever is higher, plus 20%
  of gross, on an annual basis. Zero from the 2026 reform year.
- Rent relief (2026+): 20% of annual rent paid, capped at ₦500,000
"""

from decimal import Decimal

from app.services.tax_calculators.regime import MONTHS_IN_YEAR, ZERO, get_regime, round_kobo


def calculate_employee_pension(gross_salary: Decimal, tax_year: int) -> Decimal:
    regime = get_regime(tax_year)
    return round_kobo(gross_salary * regime.employee_pension_rate / 100)


def calculate_employer_pension(gross_salary: Decimal, tax_year: int) -> Decimal:
    regime = get_regime(tax_year)
    return round_kobo(gross_salary * regime.employer_pension_rate / 100)


def calculate_nhf(gross_salary: Decimal, tax_year: int) -> Decimal:
    """NHF on monthly gross, with the regime's annual income cap if any."""
    regime = get_regime(tax_year)
    base = gross_salary
    cap = regime.nhf_annual_income_cap
    if cap is not None and gross_salary * MONTHS_IN_YEAR > cap:
        base = cap / MONTHS_IN_YEAR
    return round_kobo(base * regime.nhf_rate / 100)


def calculate_nhis(gross_salary: Decimal, tax_year: int) -> Decimal:
    regime = get_regime(tax_year)
    return round_kobo(gross_salary * regime.nhis_rate / 100)


def calculate_cra(gross_salary: Decimal, tax_year: int) -> Decimal:
    """
    Monthly Consolidated Relief Allowance.

    Year-conditioned, not flag-conditioned: evaluates to zero for every year
    under the 2026 regime.
    """
    regime = get_regime(tax_year)
    if not regime.cra_applies:
        return ZERO
    annual_gross = gross_salary * MONTHS_IN_YEAR
    fixed = max(regime.cra_fixed_amount, annual_gross * regime.cra_minimum_percent / 100)
    annual_cra = fixed + annual_gross * regime.cra_percent / 100
    return round_kobo(annual_cra / MONTHS_IN_YEAR)


def calculate_rent_relief(annual_rent_paid: Decimal, tax_year: int) -> Decimal:
    """Monthly share of the annual rent relief."""
    regime = get_regime(tax_year)
    if regime.rent_relief_percent <= 0 or not annual_rent_paid or annual_rent_paid <= 0:
        return ZERO
    annual_relief = min(annual_rent_paid * regime.rent_relief_percent / 100, regime.rent_relief_cap)
    return round_kobo(annual_relief / MONTHS_IN_YEAR)
