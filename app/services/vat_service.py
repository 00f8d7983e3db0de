"""
NaijaTax Compliance - VAT Service

Period and yearly VAT positions, derived on read from invoices (output VAT)
and expenses (input VAT), plus VAT remittance tracking.

Output VAT: VAT on paid, non-exempt invoices issued in the period.
Input VAT: VAT on expenses recorded in the period.
Turnover for the small business exemption: paid + pending invoice subtotals
for the calendar year.

Nothing here persists a summary; a VATRemittance snapshots the position only
when the period is filed.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.expense import Expense
from app.models.invoice import Invoice, InvoiceStatus
from app.models.tax import RemittanceStatus, VATRemittance
from app.services.entity_service import EntityService
from app.services.tax_calculators.regime import ZERO, round_kobo
from app.services.tax_calculators.vat_service import VATCalculator, VATPosition, VATStatus
from app.utils.error_handling import NotFoundException
from app.utils.owner import OwnerRef
from app.utils.periods import month_bounds, validate_period, validate_tax_year, vat_deadline

logger = logging.getLogger(__name__)


class VATService:
    """Service for VAT positions and remittances."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ===========================================
    # AGGREGATES
    # ===========================================

    async def get_output_vat(self, owner: OwnerRef, start: date, end: date) -> Decimal:
        result = await self.db.execute(
            select(func.coalesce(func.sum(Invoice.vat_amount), 0))
            .where(*owner.filters(Invoice))
            .where(Invoice.status == InvoiceStatus.PAID)
            .where(Invoice.vat_exempt.is_(False))
            .where(Invoice.issue_date >= start)
            .where(Invoice.issue_date < end)
        )
        return Decimal(str(result.scalar() or 0))

    async def get_input_vat(self, owner: OwnerRef, start: date, end: date) -> Decimal:
        result = await self.db.execute(
            select(func.coalesce(func.sum(Expense.vat_amount), 0))
            .where(*owner.filters(Expense))
            .where(Expense.expense_date >= start)
            .where(Expense.expense_date < end)
        )
        return Decimal(str(result.scalar() or 0))

    # ===========================================
    # SUMMARIES
    # ===========================================

    async def calculate_period_position(self, owner: OwnerRef, month: int, year: int) -> VATPosition:
        validate_period(month, year)
        start, end = month_bounds(month, year)
        output_vat = await self.get_output_vat(owner, start, end)
        input_vat = await self.get_input_vat(owner, start, end)
        turnover = await EntityService(self.db).calculate_annual_turnover(owner, year)
        return VATCalculator.calculate_position(output_vat, input_vat, turnover, year)

    async def get_period_summary(self, owner: OwnerRef, month: int, year: int) -> Dict[str, Any]:
        position = await self.calculate_period_position(owner, month, year)
        return {
            "month": month,
            "year": year,
            "remittance_deadline": vat_deadline(month, year),
            **position.to_dict(),
        }

    async def get_yearly_summary(self, owner: OwnerRef, year: int) -> Dict[str, Any]:
        """
        Year totals plus the twelve monthly positions.

        The year's net VAT is the sum of monthly nets so that exempt months
        with non-claimable input VAT stay at zero.
        """
        validate_tax_year(year)
        turnover = await EntityService(self.db).calculate_annual_turnover(owner, year)

        months = []
        total_output = ZERO
        total_input = ZERO
        total_net = ZERO
        for month in range(1, 13):
            start, end = month_bounds(month, year)
            output_vat = await self.get_output_vat(owner, start, end)
            input_vat = await self.get_input_vat(owner, start, end)
            position = VATCalculator.calculate_position(output_vat, input_vat, turnover, year)
            months.append({"month": month, **position.to_dict()})
            total_output += position.output_vat
            total_input += position.input_vat
            total_net += position.net_vat

        is_exempt = VATCalculator.is_small_business_exempt(turnover, year)
        status = VATCalculator.classify(total_net)
        if is_exempt and total_output == 0:
            status = VATStatus.EXEMPT

        return {
            "year": year,
            "annual_turnover": round_kobo(turnover),
            "is_vat_exempt": is_exempt,
            "total_output_vat": round_kobo(total_output),
            "total_input_vat": round_kobo(total_input),
            "net_vat": round_kobo(total_net),
            "status": status,
            "compliance_warning": is_exempt and total_output > 0,
            "months": months,
        }

    # ===========================================
    # REMITTANCE TRACKING
    # ===========================================

    async def get_vat_remittance(self, owner: OwnerRef, month: int, year: int) -> Optional[VATRemittance]:
        result = await self.db.execute(
            select(VATRemittance)
            .where(*owner.filters(VATRemittance))
            .where(VATRemittance.month == month)
            .where(VATRemittance.year == year)
        )
        return result.scalar_one_or_none()

    async def list_vat_remittances(self, owner: OwnerRef, year: Optional[int] = None) -> List[VATRemittance]:
        query = select(VATRemittance).where(*owner.filters(VATRemittance))
        if year:
            query = query.where(VATRemittance.year == year)
        result = await self.db.execute(query.order_by(VATRemittance.year, VATRemittance.month))
        return list(result.scalars().all())

    async def upsert_vat_remittance(self, owner: OwnerRef, month: int, year: int) -> VATRemittance:
        """Snapshot the current period position; a remitted period is left untouched."""
        position = await self.calculate_period_position(owner, month, year)
        remittance = await self.get_vat_remittance(owner, month, year)
        deadline = vat_deadline(month, year)

        if remittance is None:
            remittance = VATRemittance(
                **owner.assignments(),
                month=month,
                year=year,
                remittance_deadline=deadline,
            )
            self.db.add(remittance)
        elif remittance.status == RemittanceStatus.REMITTED:
            return remittance

        remittance.output_vat = position.output_vat
        remittance.input_vat = position.effective_input_vat
        remittance.net_vat = position.net_vat
        remittance.status = (
            RemittanceStatus.OVERDUE if date.today() > deadline else RemittanceStatus.PENDING
        )
        await self.db.commit()
        await self.db.refresh(remittance)
        return remittance

    async def mark_vat_remitted(
        self,
        owner: OwnerRef,
        month: int,
        year: int,
        remittance_date: date,
        reference: Optional[str] = None,
    ) -> VATRemittance:
        remittance = await self.get_vat_remittance(owner, month, year)
        if remittance is None:
            raise NotFoundException("VAT remittance", message=f"No VAT remittance for {month:02d}/{year}")

        remittance.status = RemittanceStatus.REMITTED
        remittance.remittance_date = remittance_date
        remittance.remittance_reference = reference
        await self.db.commit()
        await self.db.refresh(remittance)

        logger.info(f"VAT for {month:02d}/{year} marked remitted for {owner}")
        return remittance
