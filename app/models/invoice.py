"""
NaijaTax Compliance - Invoice Model

Sales invoices are the source of output VAT (paid, non-exempt invoices) and of
annual turnover (paid and pending subtotals) for the VAT, ITF and CIT
thresholds.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Date, Numeric, String, Text, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel, OwnedMixin, owner_check_constraint


class InvoiceStatus(str, Enum):
    """Invoice status workflow."""
    DRAFT = "draft"           # Not yet issued
    PENDING = "pending"       # Issued, awaiting payment
    PAID = "paid"             # Payment received
    CANCELLED = "cancelled"


class Invoice(BaseModel, OwnedMixin):
    """Sales invoice issued by a Company or Business."""

    __tablename__ = "invoices"
    __table_args__ = (
        owner_check_constraint(),
        CheckConstraint("subtotal >= 0", name="subtotal_non_negative"),
        CheckConstraint("vat_amount >= 0", name="vat_non_negative"),
    )

    invoice_number: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_tin: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    issue_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    subtotal: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    vat_exempt: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    vat_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)

    status: Mapped[InvoiceStatus] = mapped_column(
        SQLEnum(InvoiceStatus),
        default=InvoiceStatus.PENDING,
        nullable=False,
    )
    paid_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
