"""
NaijaTax Compliance - Tax Models

WHT deductions, the WHT credit ledger, and remittance tracking for VAT, WHT,
CIT and PIT.

WHT credit ledger:
- WHTRecord: a deduction suffered on a payment (payer withheld tax from us)
- WHTCredit: the creditable amount that deduction gives the taxpayer for the year
- WHTCreditApplication: credit applied against a final liability, one row per
  (taxpayer, year, tax type) so re-running a computation replaces the figure
  instead of stacking it
"""

import uuid
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import (
    Boolean, CheckConstraint, Date, ForeignKey, Integer, Numeric, String, Text, Uuid,
    Enum as SQLEnum, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel, OwnedMixin, owner_check_constraint


class RemittanceStatus(str, Enum):
    """Remittance status for PAYE/VAT/WHT periods."""
    PENDING = "pending"
    REMITTED = "remitted"
    OVERDUE = "overdue"


class WHTPaymentType(str, Enum):
    """Payment categories with distinct WHT rates."""
    PROFESSIONAL_SERVICES = "professional_services"
    TECHNICAL_SERVICES = "technical_services"
    MANAGEMENT_SERVICES = "management_services"
    OTHER_SERVICES = "other_services"
    DIVIDENDS = "dividends"
    INTEREST = "interest"
    ROYALTIES = "royalties"
    RENT = "rent"
    COMMISSION = "commission"
    CONSTRUCTION = "construction"
    DIRECTORS_FEES = "directors_fees"


class WHTPayeeType(str, Enum):
    """Type of recipient the tax was withheld from."""
    INDIVIDUAL = "individual"
    COMPANY = "company"


class WHTCreditStatus(str, Enum):
    AVAILABLE = "available"
    APPLIED = "applied"


class CreditTaxType(str, Enum):
    """Final liabilities WHT credit can be offset against."""
    PIT = "pit"
    CIT = "cit"


class WHTRecord(BaseModel, OwnedMixin):
    """WHT deducted at source on a payment received by the owner."""

    __tablename__ = "wht_records"
    __table_args__ = (owner_check_constraint(),)

    payer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    payer_tin: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    payment_type: Mapped[WHTPaymentType] = mapped_column(SQLEnum(WHTPaymentType), nullable=False)
    payee_type: Mapped[WHTPayeeType] = mapped_column(SQLEnum(WHTPayeeType), nullable=False)
    is_resident: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    tax_year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    gross_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    wht_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    wht_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    net_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)

    certificate_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class WHTCredit(BaseModel):
    """Creditable WHT available to a taxpayer (company or business id) for a year."""

    __tablename__ = "wht_credits"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="amount_non_negative"),
    )

    taxpayer_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    tax_year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    wht_record_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("wht_records.id", ondelete="SET NULL"),
        nullable=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    status: Mapped[WHTCreditStatus] = mapped_column(
        SQLEnum(WHTCreditStatus),
        default=WHTCreditStatus.AVAILABLE,
        nullable=False,
    )


class WHTCreditApplication(BaseModel):
    """Credit applied against one (taxpayer, year, tax type) liability."""

    __tablename__ = "wht_credit_applications"
    __table_args__ = (
        UniqueConstraint(
            "taxpayer_id", "tax_year", "tax_type",
            name="uq_wht_credit_applications_taxpayer_year_type",
        ),
        CheckConstraint("credit_applied >= 0", name="credit_applied_non_negative"),
    )

    taxpayer_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    tax_year: Mapped[int] = mapped_column(Integer, nullable=False)
    tax_type: Mapped[CreditTaxType] = mapped_column(SQLEnum(CreditTaxType), nullable=False)
    liability_before_credit: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    credit_applied: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)


class VATRemittance(BaseModel, OwnedMixin):
    """VAT filed for one (owner, month, year), snapshotting the period position."""

    __tablename__ = "vat_remittances"
    __table_args__ = (
        owner_check_constraint(),
        UniqueConstraint("company_id", "month", "year", name="uq_vat_remittances_company_period"),
        UniqueConstraint("business_id", "month", "year", name="uq_vat_remittances_business_period"),
    )

    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    output_vat: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    input_vat: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    net_vat: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    remittance_deadline: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[RemittanceStatus] = mapped_column(
        SQLEnum(RemittanceStatus),
        default=RemittanceStatus.PENDING,
        nullable=False,
    )
    remittance_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    remittance_reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)


class WHTRemittance(BaseModel, OwnedMixin):
    """WHT the owner withheld from its own suppliers in a month, due by the 21st."""

    __tablename__ = "wht_remittances"
    __table_args__ = (
        owner_check_constraint(),
        UniqueConstraint("company_id", "month", "year", name="uq_wht_remittances_company_period"),
        UniqueConstraint("business_id", "month", "year", name="uq_wht_remittances_business_period"),
        CheckConstraint("total_wht >= 0", name="total_wht_non_negative"),
    )

    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    total_wht: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    remittance_deadline: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[RemittanceStatus] = mapped_column(
        SQLEnum(RemittanceStatus),
        default=RemittanceStatus.PENDING,
        nullable=False,
    )
    remittance_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    remittance_reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    receipt_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class _AnnualRemittanceColumns:
    """Columns shared by the yearly CIT and PIT remittances."""

    tax_year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    tax_liability: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    wht_credit_applied: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    tax_payable: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    remittance_deadline: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[RemittanceStatus] = mapped_column(
        SQLEnum(RemittanceStatus),
        default=RemittanceStatus.PENDING,
        nullable=False,
    )
    remittance_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    remittance_reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    receipt_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class CITRemittance(BaseModel, OwnedMixin, _AnnualRemittanceColumns):
    """A company's CIT for one tax year, due June 30 of the following year."""

    __tablename__ = "cit_remittances"
    __table_args__ = (
        owner_check_constraint(),
        UniqueConstraint("company_id", "tax_year", name="uq_cit_remittances_company_year"),
        UniqueConstraint("business_id", "tax_year", name="uq_cit_remittances_business_year"),
    )


class PITRemittance(BaseModel, OwnedMixin, _AnnualRemittanceColumns):
    """A business's PIT for one tax year, due March 31 of the following year."""

    __tablename__ = "pit_remittances"
    __table_args__ = (
        owner_check_constraint(),
        UniqueConstraint("company_id", "tax_year", name="uq_pit_remittances_company_year"),
        UniqueConstraint("business_id", "tax_year", name="uq_pit_remittances_business_year"),
    )
