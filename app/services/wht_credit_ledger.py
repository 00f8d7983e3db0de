"""
WHT Credit Ledger Service
Tracks withholding tax suffered at source and offsets it against final tax

Features:
- Record WHT deducted by payers (rate from payment type, payee type, residency)
- Running credit total per taxpayer and tax year
- Read-only credit previews, and idempotent credit application per
  (taxpayer, year, tax type)
- TIN validation for payer TINs
"""

import logging
import re
import uuid
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.tax import (
    CreditTaxType,
    WHTCredit,
    WHTCreditApplication,
    WHTCreditStatus,
    WHTPayeeType,
    WHTPaymentType,
    WHTRecord,
)
from app.services.tax_calculators.regime import ZERO, round_kobo
from app.services.tax_calculators.wht_service import WHTCalculator
from app.utils.error_handling import ValidationException
from app.utils.owner import OwnerRef
from app.utils.periods import validate_amount, validate_tax_year

logger = logging.getLogger(__name__)


class WHTCreditLedgerService:
    """
    Service for WHT deductions and the credits they create.

    Credits are keyed by taxpayer id (the company or business id for
    owner deductions, the employee id for employees) and tax year.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    # ===========================================
    # RECORDING
    # ===========================================

    async def record_wht_deduction(
        self,
        owner: OwnerRef,
        payer_name: str,
        payment_type: WHTPaymentType,
        gross_amount: Decimal,
        payment_date: date,
        payee_type: Optional[WHTPayeeType] = None,
        is_resident: bool = True,
        payer_tin: Optional[str] = None,
        certificate_number: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> WHTRecord:
        """Record WHT withheld from a payment to the owner and credit it."""
        gross_amount = validate_amount(gross_amount, field="gross_amount")
        tax_year = validate_tax_year(payment_date.year)

        if payer_tin and not self._validate_tin(payer_tin):
            raise ValidationException(f"Invalid TIN format: {payer_tin}", field="payer_tin")

        if payee_type is None:
            payee_type = WHTPayeeType.COMPANY if owner.is_company else WHTPayeeType.INDIVIDUAL

        calc = WHTCalculator.calculate_wht(gross_amount, payment_type, payee_type, is_resident)

        record = WHTRecord(
            **owner.assignments(),
            payer_name=payer_name,
            payer_tin=payer_tin,
            payment_type=payment_type,
            payee_type=payee_type,
            is_resident=is_resident,
            payment_date=payment_date,
            tax_year=tax_year,
            gross_amount=calc["gross_amount"],
            wht_rate=calc["wht_rate"],
            wht_amount=calc["wht_amount"],
            net_amount=calc["net_amount"],
            certificate_number=certificate_number,
            notes=notes,
        )
        self.db.add(record)
        await self.db.flush()

        self.db.add(WHTCredit(
            taxpayer_id=owner.entity_id,
            tax_year=tax_year,
            wht_record_id=record.id,
            amount=calc["wht_amount"],
        ))
        await self.db.commit()
        await self.db.refresh(record)

        logger.info(f"Recorded WHT of NGN {record.wht_amount} from {payer_name} for {owner}")
        return record

    async def add_credit(self, taxpayer_id: uuid.UUID, tax_year: int, amount: Decimal) -> WHTCredit:
        """Add a credit with no underlying record (e.g. an employee's certificate)."""
        amount = validate_amount(amount)
        credit = WHTCredit(
            taxpayer_id=taxpayer_id,
            tax_year=validate_tax_year(tax_year),
            amount=round_kobo(amount),
        )
        self.db.add(credit)
        await self.db.commit()
        await self.db.refresh(credit)
        return credit

    # ===========================================
    # QUERIES
    # ===========================================

    async def list_records(self, owner: OwnerRef, tax_year: Optional[int] = None) -> List[WHTRecord]:
        query = select(WHTRecord).where(*owner.filters(WHTRecord))
        if tax_year:
            query = query.where(WHTRecord.tax_year == tax_year)
        result = await self.db.execute(query.order_by(WHTRecord.payment_date.desc()))
        return list(result.scalars().all())

    async def list_credits(self, taxpayer_id: uuid.UUID, tax_year: Optional[int] = None) -> List[WHTCredit]:
        query = select(WHTCredit).where(WHTCredit.taxpayer_id == taxpayer_id)
        if tax_year:
            query = query.where(WHTCredit.tax_year == tax_year)
        result = await self.db.execute(query.order_by(WHTCredit.created_at))
        return list(result.scalars().all())

    async def get_total_credits(self, taxpayer_id: uuid.UUID, tax_year: int) -> Decimal:
        """All credit ever recorded for the year, applied or not."""
        result = await self.db.execute(
            select(func.coalesce(func.sum(WHTCredit.amount), 0))
            .where(WHTCredit.taxpayer_id == taxpayer_id)
            .where(WHTCredit.tax_year == tax_year)
        )
        return Decimal(str(result.scalar() or 0))

    async def get_applied_credits(
        self,
        taxpayer_id: uuid.UUID,
        tax_year: int,
        exclude_tax_type: Optional[CreditTaxType] = None,
    ) -> Decimal:
        query = (
            select(func.coalesce(func.sum(WHTCreditApplication.credit_applied), 0))
            .where(WHTCreditApplication.taxpayer_id == taxpayer_id)
            .where(WHTCreditApplication.tax_year == tax_year)
        )
        if exclude_tax_type is not None:
            query = query.where(WHTCreditApplication.tax_type != exclude_tax_type)
        result = await self.db.execute(query)
        return Decimal(str(result.scalar() or 0))

    async def get_available_credits(self, taxpayer_id: uuid.UUID, tax_year: int) -> Decimal:
        """Credit not yet applied against any liability for the year."""
        total = await self.get_total_credits(taxpayer_id, tax_year)
        applied = await self.get_applied_credits(taxpayer_id, tax_year)
        return round_kobo(max(ZERO, total - applied))

    async def get_application(
        self,
        taxpayer_id: uuid.UUID,
        tax_year: int,
        tax_type: CreditTaxType,
    ) -> Optional[WHTCreditApplication]:
        result = await self.db.execute(
            select(WHTCreditApplication)
            .where(WHTCreditApplication.taxpayer_id == taxpayer_id)
            .where(WHTCreditApplication.tax_year == tax_year)
            .where(WHTCreditApplication.tax_type == tax_type)
        )
        return result.scalar_one_or_none()

    # ===========================================
    # APPLICATION
    # ===========================================

    async def _credit_pool(
        self,
        taxpayer_id: uuid.UUID,
        tax_year: int,
        tax_type: CreditTaxType,
    ) -> Tuple[Decimal, Decimal]:
        """Total credit for the year and the part other tax types have taken."""
        total = await self.get_total_credits(taxpayer_id, tax_year)
        used_elsewhere = await self.get_applied_credits(taxpayer_id, tax_year, exclude_tax_type=tax_type)
        return total, used_elsewhere

    async def preview_credits(
        self,
        taxpayer_id: uuid.UUID,
        tax_year: int,
        liability: Decimal,
        tax_type: CreditTaxType,
    ) -> Decimal:
        """Credit that applying would set against the liability. Nothing is written."""
        liability = validate_amount(liability, field="liability")
        total, used_elsewhere = await self._credit_pool(taxpayer_id, tax_year, tax_type)
        return round_kobo(min(max(ZERO, total - used_elsewhere), liability))

    async def apply_credits(
        self,
        taxpayer_id: uuid.UUID,
        tax_year: int,
        liability: Decimal,
        tax_type: CreditTaxType,
    ) -> Decimal:
        """
        Apply credit against a liability and return the amount applied.

        The pool for a tax type excludes only what other tax types have
        already taken, so re-applying for the same (taxpayer, year, type)
        replaces the previous figure rather than adding to it.
        """
        liability = validate_amount(liability, field="liability")
        total, used_elsewhere = await self._credit_pool(taxpayer_id, tax_year, tax_type)
        credit_applied = round_kobo(min(max(ZERO, total - used_elsewhere), liability))

        application = await self.get_application(taxpayer_id, tax_year, tax_type)
        if application is None:
            application = WHTCreditApplication(
                taxpayer_id=taxpayer_id,
                tax_year=tax_year,
                tax_type=tax_type,
            )
            self.db.add(application)
        application.liability_before_credit = round_kobo(liability)
        application.credit_applied = credit_applied

        fully_consumed = total > 0 and used_elsewhere + credit_applied >= total
        new_status = WHTCreditStatus.APPLIED if fully_consumed else WHTCreditStatus.AVAILABLE
        for credit in await self.list_credits(taxpayer_id, tax_year):
            credit.status = new_status

        await self.db.commit()

        logger.info(
            f"Applied NGN {credit_applied} WHT credit against {tax_type.value} "
            f"for taxpayer {taxpayer_id} ({tax_year})"
        )
        return credit_applied

    async def calculate_tax_after_credit(
        self,
        taxpayer_id: uuid.UUID,
        tax_year: int,
        liability: Decimal,
        tax_type: CreditTaxType,
        commit: bool = False,
    ) -> Dict[str, Any]:
        """
        Liability before and after WHT credit.

        By default the credit is only previewed; with ``commit`` it is
        recorded against the liability in the ledger.
        """
        if commit:
            credit_applied = await self.apply_credits(taxpayer_id, tax_year, liability, tax_type)
        else:
            credit_applied = await self.preview_credits(taxpayer_id, tax_year, liability, tax_type)
        return {
            "liability_before_credit": round_kobo(liability),
            "credit_applied": credit_applied,
            "liability_after_credit": WHTCalculator.calculate_tax_after_wht_credit(liability, credit_applied),
            "credits_committed": commit,
        }

    # ===========================================
    # HELPERS
    # ===========================================

    def _validate_tin(self, tin: str) -> bool:
        """Validate Nigerian TIN format"""
        # Nigerian TIN is 10-14 digits, dashes and spaces allowed
        clean_tin = re.sub(r"[\s\-]", "", tin)
        return clean_tin.isdigit() and 10 <= len(clean_tin) <= 14
