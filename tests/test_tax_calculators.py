"""
NaijaTax Compliance - Tax Calculator Tests

Unit tests for the pure calculators under both the 2026 reform and the
legacy regime.
"""

import uuid
from decimal import Decimal

import pytest

from app.models.tax import WHTPayeeType, WHTPaymentType
from app.models.user import AccountType
from app.services.tax_calculators import (
    CITCalculator,
    CompanySize,
    ITFCalculator,
    PAYECalculator,
    VATCalculator,
    VATStatus,
    WHTCalculator,
    apply_bands,
    calculate_annual_pit,
    calculate_monthly_paye,
    calculate_vat,
    get_regime,
    normalize_tax_year,
)
from app.services.tax_calculators.deductions import (
    calculate_cra,
    calculate_nhf,
    calculate_rent_relief,
)
from app.services.tax_calculators.regime import REGIME_2024, REGIME_2026
from app.utils.error_handling import InvalidTaxYearException
from app.utils.owner import OwnerRef


def _piecewise_tax(income: Decimal, bands) -> Decimal:
    """Reference band tax as a sum over [lower, upper) intervals."""
    total = Decimal("0")
    lower = Decimal("0")
    for band in bands:
        upper = None if band.width is None else lower + band.width
        top = income if upper is None else min(income, upper)
        if top > lower:
            total += (top - lower) * band.rate / 100
        if upper is None:
            break
        lower = upper
    return total


class TestRegimes:
    """Test regime selection by tax year."""

    def test_reform_years_use_2026_rules(self):
        assert normalize_tax_year(2026) == 2026
        assert normalize_tax_year(2031) == 2026
        assert get_regime(2030) is REGIME_2026

    def test_pre_reform_years_use_legacy_rules(self):
        assert normalize_tax_year(2025) == 2024
        assert normalize_tax_year(2010) == 2024
        assert get_regime(2024) is REGIME_2024

    @pytest.mark.parametrize("year", [1999, 2101, -1])
    def test_out_of_range_year_rejected(self, year):
        with pytest.raises(InvalidTaxYearException):
            normalize_tax_year(year)

    def test_development_levy_schedule(self):
        assert REGIME_2026.development_levy_rate(2026) == Decimal("4")
        assert REGIME_2026.development_levy_rate(2027) == Decimal("3.5")
        assert REGIME_2026.development_levy_rate(2030) == Decimal("2")
        # Last scheduled rate persists
        assert REGIME_2026.development_levy_rate(2040) == Decimal("2")
        assert REGIME_2024.development_levy_rate(2024) == Decimal("0")


class TestBands:
    """Test progressive band slicing."""

    @pytest.mark.parametrize("income", [
        "0", "800000", "800001", "3000000", "5070000",
        "12000000", "25000000", "50000000", "75000000",
    ])
    def test_2026_bands_match_piecewise_sum(self, income):
        income = Decimal(income)
        total, _ = apply_bands(income, REGIME_2026.pit_bands)
        assert total == _piecewise_tax(income, REGIME_2026.pit_bands)

    @pytest.mark.parametrize("income", ["250000", "573999.96", "1700000", "3200000", "9000000"])
    def test_legacy_bands_match_piecewise_sum(self, income):
        income = Decimal(income)
        total, _ = apply_bands(income, REGIME_2024.pit_bands)
        assert total == _piecewise_tax(income, REGIME_2024.pit_bands)

    def test_first_800k_is_tax_free(self):
        assert calculate_annual_pit(Decimal("800000"), 2026) == Decimal("0.00")

    def test_2026_annual_pit(self):
        assert calculate_annual_pit(Decimal("3000000"), 2026) == Decimal("330000.00")
        assert calculate_annual_pit(Decimal("12000000"), 2026) == Decimal("1950000.00")
        assert calculate_annual_pit(Decimal("60000000"), 2026) == Decimal("12930000.00")

    def test_breakdown_lists_only_occupied_bands(self):
        result = PAYECalculator.calculate_pit_breakdown(Decimal("3000000"), 2026)
        assert len(result["bands"]) == 2
        assert result["annual_tax"] == Decimal("330000.00")
        assert result["monthly_tax"] == Decimal("27500.00")
        assert result["effective_rate"] == Decimal("11.00")

    def test_negative_income_is_untaxed(self):
        total, breakdown = apply_bands(Decimal("-5000"), REGIME_2026.pit_bands)
        assert total == Decimal("0")
        assert breakdown == []


class TestDeductions:
    """Test statutory deductions and reliefs."""

    def test_nhf_cap_applies_under_legacy_regime(self):
        # ₦6m/year is over the ₦2.5m cap, so NHF is on ₦2.5m/12
        assert calculate_nhf(Decimal("500000"), 2024) == Decimal("5208.33")

    def test_nhf_uncapped_under_2026_regime(self):
        assert calculate_nhf(Decimal("500000"), 2026) == Decimal("12500.00")

    def test_cra_only_under_legacy_regime(self):
        assert calculate_cra(Decimal("100000"), 2024) == Decimal("36666.67")
        assert calculate_cra(Decimal("100000"), 2026) == Decimal("0")

    def test_rent_relief(self):
        assert calculate_rent_relief(Decimal("1000000"), 2026) == Decimal("16666.67")

    def test_rent_relief_is_capped(self):
        assert calculate_rent_relief(Decimal("5000000"), 2026) == Decimal("41666.67")

    def test_no_rent_relief_before_reform(self):
        assert calculate_rent_relief(Decimal("1000000"), 2024) == Decimal("0")


class TestPAYECalculation:
    """Test the monthly payroll pipeline."""

    def test_500k_salary_2026(self):
        """₦500,000/month with pension, NHF and NHIS under the 2026 rules."""
        result = PAYECalculator.calculate_payroll(Decimal("500000"), 2026)

        assert result.employee_pension == Decimal("40000.00")
        assert result.employer_pension == Decimal("50000.00")
        assert result.nhf == Decimal("12500.00")
        assert result.nhis == Decimal("25000.00")
        assert result.cra == Decimal("0")
        assert result.taxable_income == Decimal("422500.00")
        assert result.paye == Decimal("58550.00")
        assert result.net_salary == Decimal("363950.00")

    def test_net_salary_identity(self):
        result = calculate_monthly_paye(Decimal("750000"), 2026)
        assert result.net_salary == (
            result.gross_salary - result.employee_pension - result.nhf - result.nhis - result.paye
        )

    def test_employer_pension_not_deducted_from_net(self):
        result = PAYECalculator.calculate_payroll(Decimal("500000"), 2026)
        assert result.net_salary + result.employee_pension + result.nhf + result.nhis + result.paye == Decimal("500000.00")

    def test_legacy_salary_with_cra(self):
        """₦100,000/month in 2024 with CRA."""
        result = PAYECalculator.calculate_payroll(Decimal("100000"), 2024)

        assert result.employee_pension == Decimal("8000.00")
        assert result.nhf == Decimal("2500.00")
        assert result.nhis == Decimal("5000.00")
        assert result.cra == Decimal("36666.67")
        assert result.taxable_income == Decimal("47833.33")
        assert result.paye == Decimal("4261.67")

    def test_2025_uses_legacy_regime(self):
        result = PAYECalculator.calculate_payroll(Decimal("100000"), 2025)
        assert result.tax_year == 2025
        assert result.cra == Decimal("36666.67")

    def test_later_year_keeps_its_own_label(self):
        """2028 is taxed under the 2026 rules but stays labelled 2028."""
        result = PAYECalculator.calculate_payroll(Decimal("500000"), 2028)
        assert result.tax_year == 2028
        assert result.paye == Decimal("58550.00")

    def test_pit_breakdown_reports_requested_year(self):
        breakdown = PAYECalculator.calculate_pit_breakdown(Decimal("5000000"), 2029)
        assert breakdown["tax_year"] == 2029
        assert breakdown["annual_tax"] == PAYECalculator.calculate_annual_pit(Decimal("5000000"), 2026)

    def test_benefit_flags_gate_deductions(self):
        result = PAYECalculator.calculate_payroll(
            Decimal("500000"), 2026, has_pension=False, has_nhf=False, has_nhis=False,
        )
        assert result.employee_pension == Decimal("0")
        assert result.employer_pension == Decimal("0")
        assert result.nhf == Decimal("0")
        assert result.nhis == Decimal("0")
        assert result.taxable_income == Decimal("500000.00")

    def test_rent_relief_reduces_taxable_income(self):
        without = PAYECalculator.calculate_payroll(Decimal("500000"), 2026)
        with_rent = PAYECalculator.calculate_payroll(
            Decimal("500000"), 2026, annual_rent_paid=Decimal("1000000"),
        )
        assert with_rent.rent_relief == Decimal("16666.67")
        assert with_rent.taxable_income == without.taxable_income - Decimal("16666.67")
        assert with_rent.paye < without.paye

    def test_minimum_tax_for_low_earners(self):
        """Annual gross under ₦300,000 pays at least 1% of gross."""
        result = PAYECalculator.calculate_payroll(
            Decimal("20000"), 2026, has_pension=False, has_nhf=False, has_nhis=False,
        )
        assert result.paye == Decimal("200.00")

    def test_minimum_tax_under_legacy_regime(self):
        result = PAYECalculator.calculate_payroll(
            Decimal("20000"), 2024, has_pension=False, has_nhf=False, has_nhis=False,
        )
        assert result.taxable_income == Decimal("0.00")
        assert result.paye == Decimal("200.00")

    def test_no_minimum_tax_at_ceiling(self):
        assert PAYECalculator.calculate_minimum_tax(Decimal("25000"), 2026) == Decimal("0")

    def test_zero_salary(self):
        result = PAYECalculator.calculate_payroll(Decimal("0"), 2026)
        assert result.paye == Decimal("0")
        assert result.net_salary == Decimal("0.00")

    def test_taxable_income_never_negative(self):
        taxable = PAYECalculator.calculate_taxable_income(
            Decimal("1000"), Decimal("800"), Decimal("500"), Decimal("500"), 2026,
        )
        assert taxable == Decimal("0.00")


class TestVATCalculation:
    """Test VAT calculations and the exemption interaction."""

    def test_vat_rate_is_7_5_percent(self):
        assert calculate_vat(Decimal("100000.00")) == Decimal("7500.00")

    def test_vat_exempt_items(self):
        assert calculate_vat(Decimal("50000.00"), is_exempt=True) == Decimal("0.00")

    def test_exempt_category(self):
        assert VATCalculator.is_exempt_category("basic_food")
        assert VATCalculator.is_exempt_category("Medical_Services")
        assert not VATCalculator.is_exempt_category("office_supplies")
        assert not VATCalculator.is_exempt_category(None)

    def test_exempt_business_without_output_vat(self):
        position = VATCalculator.calculate_position(
            Decimal("0"), Decimal("5000"), Decimal("20000000"),
        )
        assert position.status == VATStatus.EXEMPT
        assert position.is_vat_exempt
        assert not position.input_vat_claimable
        assert position.effective_input_vat == Decimal("0.00")
        assert position.net_vat == Decimal("0.00")
        assert not position.compliance_warning

    def test_exempt_business_charging_vat_warns(self):
        position = VATCalculator.calculate_position(
            Decimal("10000"), Decimal("2000"), Decimal("20000000"),
        )
        assert position.compliance_warning
        assert position.warning_message
        assert position.input_vat_claimable
        assert position.net_vat == Decimal("8000.00")
        assert position.status == VATStatus.PAYABLE

    def test_registered_business_refundable(self):
        position = VATCalculator.calculate_position(
            Decimal("5000"), Decimal("8000"), Decimal("30000000"),
        )
        assert not position.is_vat_exempt
        assert position.net_vat == Decimal("-3000.00")
        assert position.status == VATStatus.REFUNDABLE

    def test_registered_business_zero(self):
        position = VATCalculator.calculate_position(
            Decimal("5000"), Decimal("5000"), Decimal("30000000"),
        )
        assert position.status == VATStatus.ZERO

    def test_exemption_threshold_is_exclusive(self):
        assert VATCalculator.is_small_business_exempt(Decimal("24999999.99"))
        assert not VATCalculator.is_small_business_exempt(Decimal("25000000"))


class TestWHTCalculation:
    """Test WHT rates by payment type and residency."""

    def test_professional_services_resident(self):
        result = WHTCalculator.calculate_wht(Decimal("100000"), WHTPaymentType.PROFESSIONAL_SERVICES)
        assert result["wht_rate"] == Decimal("5")
        assert result["wht_amount"] == Decimal("5000.00")
        assert result["net_amount"] == Decimal("95000.00")

    def test_professional_services_non_resident(self):
        result = WHTCalculator.calculate_wht(
            Decimal("100000"), WHTPaymentType.PROFESSIONAL_SERVICES, is_resident=False,
        )
        assert result["wht_amount"] == Decimal("10000.00")

    def test_directors_fees(self):
        assert WHTCalculator.get_wht_rate(WHTPaymentType.DIRECTORS_FEES) == Decimal("15")
        assert WHTCalculator.get_wht_rate(WHTPaymentType.DIRECTORS_FEES, False) == Decimal("20")

    def test_construction(self):
        assert WHTCalculator.get_wht_rate("construction") == Decimal("2")
        assert WHTCalculator.get_wht_rate("construction", False) == Decimal("5")

    def test_payee_type_is_reported(self):
        result = WHTCalculator.calculate_wht(
            Decimal("1000"), WHTPaymentType.RENT, WHTPayeeType.INDIVIDUAL,
        )
        assert result["payee_type"] == "individual"
        assert result["wht_amount"] == Decimal("100.00")

    def test_tax_after_credit_never_negative(self):
        assert WHTCalculator.calculate_tax_after_wht_credit(Decimal("1000"), Decimal("400")) == Decimal("600.00")
        assert WHTCalculator.calculate_tax_after_wht_credit(Decimal("1000"), Decimal("4000")) == Decimal("0.00")


class TestCITCalculation:
    """Test CIT and development levy."""

    def test_small_company_exempt(self):
        result = CITCalculator.calculate_cit(Decimal("50000000"), Decimal("10000000"), 2026)
        assert result["company_size"] == CompanySize.SMALL.value
        assert result["cit"] == Decimal("0.00")
        assert result["development_levy"] == Decimal("0.00")

    def test_medium_company_2026(self):
        result = CITCalculator.calculate_cit(Decimal("100000000"), Decimal("20000000"), 2026)
        assert result["cit"] == Decimal("6000000.00")
        assert result["development_levy"] == Decimal("800000.00")
        assert result["total_tax_liability"] == Decimal("6800000.00")

    def test_levy_steps_down(self):
        result = CITCalculator.calculate_cit(Decimal("100000000"), Decimal("20000000"), 2028)
        assert result["development_levy"] == Decimal("600000.00")
        result = CITCalculator.calculate_cit(Decimal("100000000"), Decimal("20000000"), 2031)
        assert result["development_levy"] == Decimal("400000.00")

    def test_legacy_medium_company(self):
        result = CITCalculator.calculate_cit(Decimal("50000000"), Decimal("10000000"), 2024)
        assert result["company_size"] == "medium"
        assert result["cit"] == Decimal("2000000.00")
        assert result["development_levy"] == Decimal("0.00")

    def test_legacy_small_threshold_is_exclusive(self):
        assert CITCalculator.get_company_size(Decimal("24999999"), 2024) == CompanySize.SMALL
        assert CITCalculator.get_company_size(Decimal("25000000"), 2024) == CompanySize.MEDIUM

    def test_loss_gives_zero_tax(self):
        result = CITCalculator.calculate_cit(Decimal("100000000"), Decimal("-5000000"), 2026)
        assert result["cit"] == Decimal("0.00")
        assert result["total_tax_liability"] == Decimal("0.00")


class TestITFCalculation:
    """Test the ITF OR-gate and its fail-safe."""

    def test_headcount_alone_makes_liable(self):
        assert ITFCalculator.is_liable(Decimal("10000000"), 5, 2026)

    def test_turnover_alone_makes_liable(self):
        assert ITFCalculator.is_liable(Decimal("60000000"), 1, 2026)

    def test_neither_threshold_met(self):
        assert not ITFCalculator.is_liable(Decimal("10000000"), 4, 2026)

    def test_itf_is_one_percent_of_payroll(self):
        assert ITFCalculator.calculate_itf(Decimal("1000000"), Decimal("0"), 5, 2026) == Decimal("10000.00")

    @pytest.mark.asyncio
    async def test_business_never_pays_itf(self):
        owner = OwnerRef(AccountType.BUSINESS, uuid.uuid4())

        async def lookup():
            return Decimal("90000000")

        itf = await ITFCalculator.calculate_for_owner(owner, Decimal("1000000"), 10, 2026, lookup)
        assert itf == Decimal("0")

    @pytest.mark.asyncio
    async def test_company_liable_on_turnover(self):
        owner = OwnerRef(AccountType.COMPANY, uuid.uuid4())

        async def lookup():
            return Decimal("60000000")

        itf = await ITFCalculator.calculate_for_owner(owner, Decimal("1000000"), 1, 2026, lookup)
        assert itf == Decimal("10000.00")

    @pytest.mark.asyncio
    async def test_failed_turnover_lookup_gives_zero(self):
        owner = OwnerRef(AccountType.COMPANY, uuid.uuid4())

        async def lookup():
            raise RuntimeError("turnover unavailable")

        itf = await ITFCalculator.calculate_for_owner(owner, Decimal("1000000"), 10, 2026, lookup)
        assert itf == Decimal("0")
