"""
NaijaTax Compliance - Income Tax Service

Annual income tax summaries from the books:
- CIT for companies: turnover from paid invoices, profit after deductible
  expenses, CIT + development levy, WHT credit offset
- PIT for businesses (business names / sole proprietors): the annual PIT
  bands applied to business profit, WHT credit offset

Summaries preview the WHT credit without touching the ledger. Passing
apply_credits records the offset; re-applying for the same year replaces the
previous figure, so the result is the same however often it runs.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.expense import Expense
from app.models.invoice import Invoice, InvoiceStatus
from app.models.tax import CreditTaxType
from app.models.user import AccountType
from app.services.tax_calculators.cit_service import CITCalculator
from app.services.tax_calculators.paye_service import PAYECalculator
from app.services.tax_calculators.regime import ZERO, round_kobo
from app.services.tax_calculators.wht_service import WHTCalculator
from app.services.wht_credit_ledger import WHTCreditLedgerService
from app.utils.error_handling import InvalidAccountTypeException
from app.utils.owner import OwnerRef
from app.utils.periods import validate_tax_year

logger = logging.getLogger(__name__)


class IncomeTaxService:
    """CIT and PIT summaries with WHT credit offset."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.credit_ledger = WHTCreditLedgerService(db)

    async def get_paid_turnover(self, owner: OwnerRef, year: int) -> Decimal:
        result = await self.db.execute(
            select(func.coalesce(func.sum(Invoice.subtotal), 0))
            .where(*owner.filters(Invoice))
            .where(Invoice.status == InvoiceStatus.PAID)
            .where(Invoice.issue_date >= date(year, 1, 1))
            .where(Invoice.issue_date < date(year + 1, 1, 1))
        )
        return Decimal(str(result.scalar() or 0))

    async def get_deductible_expenses(self, owner: OwnerRef, year: int) -> Decimal:
        result = await self.db.execute(
            select(func.coalesce(func.sum(Expense.amount), 0))
            .where(*owner.filters(Expense))
            .where(Expense.is_tax_deductible.is_(True))
            .where(Expense.expense_date >= date(year, 1, 1))
            .where(Expense.expense_date < date(year + 1, 1, 1))
        )
        return Decimal(str(result.scalar() or 0))

    async def _offset_credits(
        self,
        owner: OwnerRef,
        year: int,
        liability: Decimal,
        tax_type: CreditTaxType,
        apply_credits: bool = False,
    ) -> Dict[str, Any]:
        credit_applied = ZERO
        committed = False
        try:
            offset = await self.credit_ledger.calculate_tax_after_credit(
                owner.entity_id, year, liability, tax_type, commit=apply_credits,
            )
            credit_applied = offset["credit_applied"]
            committed = offset["credits_committed"]
        except Exception as e:
            await self.db.rollback()
            logger.error(f"WHT credit ledger unavailable for {owner} ({year}), no credit applied: {e}")
        return {
            "wht_credit_applied": credit_applied,
            "tax_payable": WHTCalculator.calculate_tax_after_wht_credit(liability, credit_applied),
            "credits_committed": committed,
        }

    async def get_cit_summary(self, owner: OwnerRef, year: int, apply_credits: bool = False) -> Dict[str, Any]:
        if owner.account_type != AccountType.COMPANY:
            raise InvalidAccountTypeException(owner.account_type.value, allowed=[AccountType.COMPANY.value])
        validate_tax_year(year)

        turnover = await self.get_paid_turnover(owner, year)
        expenses = await self.get_deductible_expenses(owner, year)
        cit = CITCalculator.calculate_cit(turnover, turnover - expenses, year)
        cit["deductible_expenses"] = round_kobo(expenses)
        cit.update(await self._offset_credits(
            owner, year, cit["total_tax_liability"], CreditTaxType.CIT, apply_credits=apply_credits,
        ))
        return cit

    async def get_pit_summary(self, owner: OwnerRef, year: int, apply_credits: bool = False) -> Dict[str, Any]:
        if owner.account_type != AccountType.BUSINESS:
            raise InvalidAccountTypeException(owner.account_type.value, allowed=[AccountType.BUSINESS.value])
        validate_tax_year(year)

        turnover = await self.get_paid_turnover(owner, year)
        expenses = await self.get_deductible_expenses(owner, year)
        profit = round_kobo(max(ZERO, turnover - expenses))

        summary = PAYECalculator.calculate_pit_breakdown(profit, year)
        summary.update({
            "gross_turnover": round_kobo(turnover),
            "deductible_expenses": round_kobo(expenses),
            "business_profit": profit,
        })
        summary.update(await self._offset_credits(
            owner, year, summary["annual_tax"], CreditTaxType.PIT, apply_credits=apply_credits,
        ))
        return summary
