"""
NaijaTax Compliance - Expense Model

Recorded expenses carry the input VAT paid to suppliers and, when tax
deductible, reduce taxable profit for CIT/PIT.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Date, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel, OwnedMixin, owner_check_constraint


class Expense(BaseModel, OwnedMixin):
    """Business expense with its VAT component."""

    __tablename__ = "expenses"
    __table_args__ = (
        owner_check_constraint(),
        CheckConstraint("amount >= 0", name="amount_non_negative"),
        CheckConstraint("vat_amount >= 0", name="vat_non_negative"),
    )

    expense_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    vendor_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    amount: Mapped[Decimal] = mapped_column(
        Numeric(15, 2),
        nullable=False,
        comment="Amount excluding VAT",
    )
    vat_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    is_tax_deductible: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
