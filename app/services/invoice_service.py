"""
NaijaTax Compliance - Invoice Service

Sales invoice management. VAT is computed at creation from the subtotal,
unless the invoice is for an exempt supply.
"""

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.invoice import Invoice, InvoiceStatus
from app.services.tax_calculators.vat_service import VATCalculator
from app.utils.error_handling import BusinessRuleException, NotFoundException
from app.utils.owner import OwnerRef
from app.utils.periods import validate_amount

logger = logging.getLogger(__name__)


class InvoiceService:
    """Service for invoice operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ===========================================
    # INVOICE NUMBER GENERATION
    # ===========================================

    async def generate_invoice_number(self, owner: OwnerRef, issue_date: date) -> str:
        """
        Generate invoice number for the owner.

        Format: INV-YYYYMM-NNNN (e.g., INV-202601-0001)
        """
        prefix = f"INV-{issue_date.year}{issue_date.month:02d}"

        result = await self.db.execute(
            select(func.count(Invoice.id))
            .where(*owner.filters(Invoice))
            .where(Invoice.invoice_number.like(f"{prefix}%"))
        )
        count = result.scalar() or 0
        return f"{prefix}-{count + 1:04d}"

    # ===========================================
    # CRUD OPERATIONS
    # ===========================================

    async def list_invoices(
        self,
        owner: OwnerRef,
        status: Optional[InvoiceStatus] = None,
        year: Optional[int] = None,
    ) -> List[Invoice]:
        query = select(Invoice).where(*owner.filters(Invoice))
        if status:
            query = query.where(Invoice.status == status)
        if year:
            query = query.where(
                Invoice.issue_date >= date(year, 1, 1),
                Invoice.issue_date < date(year + 1, 1, 1),
            )
        result = await self.db.execute(query.order_by(Invoice.issue_date.desc()))
        return list(result.scalars().all())

    async def get_invoice(self, owner: OwnerRef, invoice_id: uuid.UUID) -> Invoice:
        result = await self.db.execute(
            select(Invoice)
            .where(Invoice.id == invoice_id)
            .where(*owner.filters(Invoice))
        )
        invoice = result.scalar_one_or_none()
        if not invoice:
            raise NotFoundException("Invoice", invoice_id)
        return invoice

    async def create_invoice(
        self,
        owner: OwnerRef,
        customer_name: str,
        issue_date: date,
        subtotal: Decimal,
        vat_exempt: bool = False,
        customer_tin: Optional[str] = None,
        description: Optional[str] = None,
        due_date: Optional[date] = None,
        status: InvoiceStatus = InvoiceStatus.PENDING,
    ) -> Invoice:
        """Create an invoice, computing VAT and total from the subtotal."""
        subtotal = validate_amount(subtotal, field="subtotal")
        vat_amount = VATCalculator.calculate_vat(
            subtotal,
            is_exempt=vat_exempt,
            tax_year=issue_date.year,
        )

        invoice = Invoice(
            **owner.assignments(),
            invoice_number=await self.generate_invoice_number(owner, issue_date),
            customer_name=customer_name,
            customer_tin=customer_tin,
            description=description,
            issue_date=issue_date,
            due_date=due_date,
            subtotal=subtotal,
            vat_exempt=vat_exempt,
            vat_amount=vat_amount,
            total_amount=subtotal + vat_amount,
            status=status,
            paid_date=issue_date if status == InvoiceStatus.PAID else None,
        )
        self.db.add(invoice)
        await self.db.commit()
        await self.db.refresh(invoice)

        logger.info(f"Created invoice {invoice.invoice_number} for {owner}")
        return invoice

    # ===========================================
    # STATUS CHANGES
    # ===========================================

    async def mark_paid(
        self,
        owner: OwnerRef,
        invoice_id: uuid.UUID,
        paid_date: Optional[date] = None,
    ) -> Invoice:
        invoice = await self.get_invoice(owner, invoice_id)
        if invoice.status == InvoiceStatus.CANCELLED:
            raise BusinessRuleException("Cannot mark a cancelled invoice as paid")

        invoice.status = InvoiceStatus.PAID
        invoice.paid_date = paid_date or date.today()
        await self.db.commit()
        await self.db.refresh(invoice)
        return invoice

    async def cancel_invoice(self, owner: OwnerRef, invoice_id: uuid.UUID) -> Invoice:
        invoice = await self.get_invoice(owner, invoice_id)
        if invoice.status in (InvoiceStatus.PAID, InvoiceStatus.CANCELLED):
            raise BusinessRuleException("Cannot cancel a PAID or already CANCELLED invoice")

        invoice.status = InvoiceStatus.CANCELLED
        await self.db.commit()
        await self.db.refresh(invoice)
        return invoice
