"""
NaijaTax Compliance - Remittance Service Tests

Tests for WHT, CIT and PIT remittance tracking.
"""

from datetime import date
from decimal import Decimal

import pytest

from app.models.invoice import InvoiceStatus
from app.models.tax import CITRemittance, CreditTaxType, PITRemittance, RemittanceStatus, WHTPaymentType
from app.services.expense_service import ExpenseService
from app.services.invoice_service import InvoiceService
from app.services.remittance_service import RemittanceService, open_status
from app.services.wht_credit_ledger import WHTCreditLedgerService
from app.utils.error_handling import (
    InvalidAmountException,
    InvalidMonthException,
    InvalidTaxYearException,
    NotFoundException,
)


async def _books(db_session, owner, year, turnover, deductible):
    await InvoiceService(db_session).create_invoice(
        owner, "Customer Ltd", date(year, 2, 1), Decimal(turnover), status=InvoiceStatus.PAID,
    )
    await ExpenseService(db_session).create_expense(owner, date(year, 2, 10), "Operating costs", Decimal(deductible))


class TestOpenStatus:

    def test_pending_until_deadline(self):
        assert open_status(date(2026, 2, 21), today=date(2026, 2, 21)) == RemittanceStatus.PENDING

    def test_overdue_after_deadline(self):
        assert open_status(date(2026, 2, 21), today=date(2026, 2, 22)) == RemittanceStatus.OVERDUE


class TestWHTRemittance:
    """Test monthly WHT remittances."""

    @pytest.mark.asyncio
    async def test_file_sets_deadline(self, db_session, company_owner):
        service = RemittanceService(db_session)

        remittance = await service.file_wht_remittance(company_owner, 5, 2099, Decimal("250000"))
        assert remittance.total_wht == Decimal("250000.00")
        assert remittance.remittance_deadline == date(2099, 6, 21)
        assert remittance.status == RemittanceStatus.PENDING

    @pytest.mark.asyncio
    async def test_refiling_updates_open_month(self, db_session, company_owner):
        service = RemittanceService(db_session)
        await service.file_wht_remittance(company_owner, 5, 2099, Decimal("250000"))

        remittance = await service.file_wht_remittance(company_owner, 5, 2099, Decimal("300000.555"))
        assert remittance.total_wht == Decimal("300000.56")
        assert len(await service.list_wht_remittances(company_owner, 2099)) == 1

    @pytest.mark.asyncio
    async def test_remitted_month_is_frozen(self, db_session, company_owner):
        service = RemittanceService(db_session)
        await service.file_wht_remittance(company_owner, 5, 2099, Decimal("250000"))

        remitted = await service.mark_wht_remitted(
            company_owner, 5, 2099, date(2099, 6, 15), reference="WHT-2099-05", receipt_url="https://x/r.pdf",
        )
        assert remitted.status == RemittanceStatus.REMITTED
        assert remitted.remittance_date == date(2099, 6, 15)
        assert remitted.receipt_url == "https://x/r.pdf"

        remittance = await service.file_wht_remittance(company_owner, 5, 2099, Decimal("999999"))
        assert remittance.status == RemittanceStatus.REMITTED
        assert remittance.total_wht == Decimal("250000.00")
        assert remittance.remittance_reference == "WHT-2099-05"

    @pytest.mark.asyncio
    async def test_past_deadline_is_overdue(self, db_session, company_owner):
        remittance = await RemittanceService(db_session).file_wht_remittance(
            company_owner, 1, 2026, Decimal("1000"),
        )
        assert remittance.remittance_deadline == date(2026, 2, 21)
        assert remittance.status == RemittanceStatus.OVERDUE

    @pytest.mark.asyncio
    async def test_december_rolls_into_january(self, db_session, company_owner):
        remittance = await RemittanceService(db_session).file_wht_remittance(
            company_owner, 12, 2099, Decimal("1000"),
        )
        assert remittance.remittance_deadline == date(2100, 1, 21)

    @pytest.mark.asyncio
    async def test_invalid_input_rejected(self, db_session, company_owner):
        service = RemittanceService(db_session)
        with pytest.raises(InvalidAmountException):
            await service.file_wht_remittance(company_owner, 5, 2099, Decimal("-1"))
        with pytest.raises(InvalidMonthException):
            await service.file_wht_remittance(company_owner, 13, 2099, Decimal("1"))
        with pytest.raises(InvalidTaxYearException):
            await service.file_wht_remittance(company_owner, 5, 2020, Decimal("1"))

    @pytest.mark.asyncio
    async def test_scoped_to_owner(self, db_session, company_owner, business_owner):
        service = RemittanceService(db_session)
        await service.file_wht_remittance(company_owner, 5, 2099, Decimal("250000"))

        assert await service.list_wht_remittances(business_owner) == []
        with pytest.raises(NotFoundException):
            await service.mark_wht_remitted(business_owner, 5, 2099, date(2099, 6, 15))

    @pytest.mark.asyncio
    async def test_mark_missing_remittance(self, db_session, company_owner):
        with pytest.raises(NotFoundException):
            await RemittanceService(db_session).mark_wht_remitted(company_owner, 5, 2099, date(2099, 6, 1))


class TestCITRemittance:
    """Test annual CIT remittances for companies."""

    @pytest.mark.asyncio
    async def test_file_snapshots_cit_after_credit(self, db_session, company_owner):
        await _books(db_session, company_owner, 2099, "100000000", "40000000")
        ledger = WHTCreditLedgerService(db_session)
        await ledger.record_wht_deduction(
            company_owner,
            payer_name="Shell Nigeria",
            payment_type=WHTPaymentType.PROFESSIONAL_SERVICES,
            gross_amount=Decimal("10000000"),
            payment_date=date(2099, 4, 1),
        )

        remittance = await RemittanceService(db_session).file_income_tax_remittance(company_owner, 2099)

        assert isinstance(remittance, CITRemittance)
        assert remittance.tax_liability == Decimal("20400000.00")
        assert remittance.wht_credit_applied == Decimal("500000.00")
        assert remittance.tax_payable == Decimal("19900000.00")
        assert remittance.remittance_deadline == date(2100, 6, 30)
        assert remittance.status == RemittanceStatus.PENDING

        application = await ledger.get_application(company_owner.entity_id, 2099, CreditTaxType.CIT)
        assert application.credit_applied == Decimal("500000.00")
        assert await ledger.get_available_credits(company_owner.entity_id, 2099) == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_refiling_is_stable(self, db_session, company_owner):
        await _books(db_session, company_owner, 2099, "100000000", "40000000")
        await WHTCreditLedgerService(db_session).add_credit(company_owner.entity_id, 2099, Decimal("500000"))
        service = RemittanceService(db_session)

        first = await service.file_income_tax_remittance(company_owner, 2099)
        second = await service.file_income_tax_remittance(company_owner, 2099)

        assert first.id == second.id
        assert second.tax_payable == Decimal("19900000.00")
        assert len(await service.list_income_tax_remittances(company_owner)) == 1

    @pytest.mark.asyncio
    async def test_remitted_year_is_frozen(self, db_session, company_owner):
        await _books(db_session, company_owner, 2099, "100000000", "40000000")
        service = RemittanceService(db_session)
        await service.file_income_tax_remittance(company_owner, 2099)
        await service.mark_income_tax_remitted(company_owner, 2099, date(2100, 6, 1), reference="CIT-2099")

        await _books(db_session, company_owner, 2099, "50000000", "1000")
        remittance = await service.file_income_tax_remittance(company_owner, 2099)

        assert remittance.status == RemittanceStatus.REMITTED
        assert remittance.tax_payable == Decimal("20400000.00")
        assert remittance.remittance_reference == "CIT-2099"

    @pytest.mark.asyncio
    async def test_mark_missing_remittance(self, db_session, company_owner):
        with pytest.raises(NotFoundException):
            await RemittanceService(db_session).mark_income_tax_remitted(company_owner, 2099, date(2100, 6, 1))


class TestPITRemittance:
    """Test annual PIT remittances for businesses."""

    @pytest.mark.asyncio
    async def test_file_snapshots_pit(self, db_session, business_owner):
        await _books(db_session, business_owner, 2099, "5000000", "1000000")

        remittance = await RemittanceService(db_session).file_income_tax_remittance(business_owner, 2099)

        assert isinstance(remittance, PITRemittance)
        assert remittance.tax_liability == Decimal("510000.00")
        assert remittance.wht_credit_applied == Decimal("0.00")
        assert remittance.tax_payable == Decimal("510000.00")
        assert remittance.remittance_deadline == date(2100, 3, 31)
        assert remittance.status == RemittanceStatus.PENDING

    @pytest.mark.asyncio
    async def test_mark_pit_remitted(self, db_session, business_owner):
        await _books(db_session, business_owner, 2099, "5000000", "1000000")
        service = RemittanceService(db_session)
        await service.file_income_tax_remittance(business_owner, 2099)

        remitted = await service.mark_income_tax_remitted(
            business_owner, 2099, date(2100, 3, 1), reference="PIT-2099", notes="Paid at LIRS",
        )
        assert remitted.status == RemittanceStatus.REMITTED
        assert remitted.notes == "Paid at LIRS"

    @pytest.mark.asyncio
    async def test_company_and_business_years_are_separate(self, db_session, company_owner, business_owner):
        await _books(db_session, business_owner, 2099, "5000000", "1000000")
        service = RemittanceService(db_session)
        await service.file_income_tax_remittance(business_owner, 2099)

        assert await service.list_income_tax_remittances(company_owner) == []
        assert len(await service.list_income_tax_remittances(business_owner)) == 1
