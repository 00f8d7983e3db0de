"""
NaijaTax Compliance - Remittance Service

Remittance tracking for monthly WHT and annual income tax:
- WHT: tax the owner withheld from its own suppliers, due by the 21st of the
  following month
- CIT (companies): the year's tax payable, due June 30 of the following year
- PIT (businesses): the year's tax payable, due March 31 of the following year

PAYE and VAT remittances live with the payroll and VAT services.

An open remittance is PENDING until its deadline passes, then OVERDUE. Once
marked REMITTED it is frozen: filing the period again leaves it untouched.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, List, Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.tax import CITRemittance, PITRemittance, RemittanceStatus, WHTRemittance
from app.services.income_tax_service import IncomeTaxService
from app.services.tax_calculators.regime import round_kobo
from app.utils.error_handling import NotFoundException
from app.utils.owner import OwnerRef
from app.utils.periods import (
    cit_deadline,
    pit_deadline,
    validate_amount,
    validate_period,
    validate_tax_year,
    wht_deadline,
)

logger = logging.getLogger(__name__)

IncomeTaxRemittance = Union[CITRemittance, PITRemittance]


def open_status(deadline: date, today: Optional[date] = None) -> RemittanceStatus:
    """Status of a remittance that has not been paid yet."""
    today = today or date.today()
    return RemittanceStatus.OVERDUE if today > deadline else RemittanceStatus.PENDING


class RemittanceService:
    """Service for WHT, CIT and PIT remittances."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ===========================================
    # WHT
    # ===========================================

    async def get_wht_remittance(self, owner: OwnerRef, month: int, year: int) -> Optional[WHTRemittance]:
        result = await self.db.execute(
            select(WHTRemittance)
            .where(*owner.filters(WHTRemittance))
            .where(WHTRemittance.month == month)
            .where(WHTRemittance.year == year)
        )
        return result.scalar_one_or_none()

    async def list_wht_remittances(self, owner: OwnerRef, year: Optional[int] = None) -> List[WHTRemittance]:
        query = select(WHTRemittance).where(*owner.filters(WHTRemittance))
        if year:
            query = query.where(WHTRemittance.year == year)
        result = await self.db.execute(query.order_by(WHTRemittance.year, WHTRemittance.month))
        return list(result.scalars().all())

    async def file_wht_remittance(self, owner: OwnerRef, month: int, year: int, total_wht: Any) -> WHTRemittance:
        """Record the WHT withheld in a month; a remitted month is left untouched."""
        validate_period(month, year)
        total_wht = round_kobo(validate_amount(total_wht, field="total_wht"))
        deadline = wht_deadline(month, year)

        remittance = await self.get_wht_remittance(owner, month, year)
        if remittance is None:
            remittance = WHTRemittance(
                **owner.assignments(),
                month=month,
                year=year,
                remittance_deadline=deadline,
            )
            self.db.add(remittance)
        elif remittance.status == RemittanceStatus.REMITTED:
            return remittance

        remittance.total_wht = total_wht
        remittance.status = open_status(deadline)
        await self.db.commit()
        await self.db.refresh(remittance)

        logger.info(f"Filed NGN {total_wht} WHT for {month:02d}/{year} for {owner}")
        return remittance

    async def mark_wht_remitted(
        self,
        owner: OwnerRef,
        month: int,
        year: int,
        remittance_date: date,
        reference: Optional[str] = None,
        notes: Optional[str] = None,
        receipt_url: Optional[str] = None,
    ) -> WHTRemittance:
        remittance = await self.get_wht_remittance(owner, month, year)
        if remittance is None:
            raise NotFoundException("WHT remittance", message=f"No WHT remittance for {month:02d}/{year}")

        self._mark_remitted(remittance, remittance_date, reference, notes, receipt_url)
        await self.db.commit()
        await self.db.refresh(remittance)

        logger.info(f"WHT for {month:02d}/{year} marked remitted for {owner}")
        return remittance

    # ===========================================
    # CIT / PIT
    # ===========================================

    @staticmethod
    def income_tax_model(owner: OwnerRef):
        """CITRemittance for companies, PITRemittance for businesses."""
        return CITRemittance if owner.is_company else PITRemittance

    @staticmethod
    def income_tax_deadline(owner: OwnerRef, tax_year: int) -> date:
        return cit_deadline(tax_year) if owner.is_company else pit_deadline(tax_year)

    async def get_income_tax_remittance(self, owner: OwnerRef, tax_year: int) -> Optional[IncomeTaxRemittance]:
        model = self.income_tax_model(owner)
        result = await self.db.execute(
            select(model)
            .where(*owner.filters(model))
            .where(model.tax_year == tax_year)
        )
        return result.scalar_one_or_none()

    async def list_income_tax_remittances(self, owner: OwnerRef) -> List[IncomeTaxRemittance]:
        model = self.income_tax_model(owner)
        result = await self.db.execute(
            select(model).where(*owner.filters(model)).order_by(model.tax_year)
        )
        return list(result.scalars().all())

    async def file_income_tax_remittance(self, owner: OwnerRef, tax_year: int) -> IncomeTaxRemittance:
        """
        Snapshot the year's CIT (company) or PIT (business) as a remittance.

        Filing applies the year's WHT credit in the ledger so the filed tax
        payable matches the credit recorded against it. A remitted year is
        left untouched.
        """
        validate_tax_year(tax_year)
        existing = await self.get_income_tax_remittance(owner, tax_year)
        if existing is not None and existing.status == RemittanceStatus.REMITTED:
            return existing

        income_tax = IncomeTaxService(self.db)
        if owner.is_company:
            summary = await income_tax.get_cit_summary(owner, tax_year, apply_credits=True)
            liability = summary["total_tax_liability"]
        else:
            summary = await income_tax.get_pit_summary(owner, tax_year, apply_credits=True)
            liability = summary["annual_tax"]

        deadline = self.income_tax_deadline(owner, tax_year)
        remittance = await self.get_income_tax_remittance(owner, tax_year)
        if remittance is None:
            remittance = self.income_tax_model(owner)(
                **owner.assignments(),
                tax_year=tax_year,
                remittance_deadline=deadline,
            )
            self.db.add(remittance)

        remittance.tax_liability = round_kobo(Decimal(str(liability)))
        remittance.wht_credit_applied = round_kobo(Decimal(str(summary["wht_credit_applied"])))
        remittance.tax_payable = round_kobo(Decimal(str(summary["tax_payable"])))
        remittance.status = open_status(deadline)
        await self.db.commit()
        await self.db.refresh(remittance)

        logger.info(f"Filed {self._income_tax_label(owner)} for {tax_year} for {owner}: NGN {remittance.tax_payable}")
        return remittance

    async def mark_income_tax_remitted(
        self,
        owner: OwnerRef,
        tax_year: int,
        remittance_date: date,
        reference: Optional[str] = None,
        notes: Optional[str] = None,
        receipt_url: Optional[str] = None,
    ) -> IncomeTaxRemittance:
        label = self._income_tax_label(owner)
        remittance = await self.get_income_tax_remittance(owner, tax_year)
        if remittance is None:
            raise NotFoundException(f"{label} remittance", message=f"No {label} remittance for {tax_year}")

        self._mark_remitted(remittance, remittance_date, reference, notes, receipt_url)
        await self.db.commit()
        await self.db.refresh(remittance)

        logger.info(f"{label} for {tax_year} marked remitted for {owner}")
        return remittance

    # ===========================================
    # HELPERS
    # ===========================================

    @staticmethod
    def _income_tax_label(owner: OwnerRef) -> str:
        return "CIT" if owner.is_company else "PIT"

    @staticmethod
    def _mark_remitted(remittance, remittance_date, reference, notes, receipt_url) -> None:
        remittance.status = RemittanceStatus.REMITTED
        remittance.remittance_date = remittance_date
        remittance.remittance_reference = reference
        remittance.notes = notes
        remittance.receipt_url = receipt_url
