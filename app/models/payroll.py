"""
NaijaTax Compliance - Payroll Models

Nigerian payroll with statutory deductions:
1. Employee Pension: 8% of gross (employee contribution)
2. Employer Pension: 10% of gross (never deducted from net pay)
3. NHF: 2.5% of gross (National Housing Fund)
4. NHIS: 5% of gross (National Health Insurance Scheme)
5. PAYE: progressive PIT withheld monthly, remitted by the 10th of next month

Each deduction only applies where the employee's benefit flag is set.

A Payroll row exists once per (owner, employee, month, year). The
PayrollSchedule for a period stores only its workflow status; every money
total is aggregated from the Payroll rows on read.
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
from app.models.tax import RemittanceStatus


# ===========================================
# ENUMS
# ===========================================

class PayrollStatus(str, Enum):
    """Workflow status. Moves forward only; SUBMITTED is terminal."""
    DRAFT = "draft"
    APPROVED = "approved"
    SUBMITTED = "submitted"


# ===========================================
# EMPLOYEE
# ===========================================

class Employee(BaseModel, OwnedMixin):
    """
    Employee belonging to exactly one Company or Business.

    Salary changes and benefit flag changes recalculate the employee's
    payroll in periods that have not been submitted yet.
    """

    __tablename__ = "employees"
    __table_args__ = (
        owner_check_constraint(),
        CheckConstraint("salary >= 0", name="salary_non_negative"),
    )

    employee_number: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        comment="Internal staff number",
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    tin: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    job_title: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    hire_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    salary: Mapped[Decimal] = mapped_column(
        Numeric(15, 2),
        nullable=False,
        comment="Monthly gross salary",
    )

    has_pension: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    has_nhf: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    has_nhis: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    annual_rent_paid: Mapped[Decimal] = mapped_column(
        Numeric(15, 2),
        default=Decimal("0"),
        nullable=False,
        comment="Annual rent paid, for the 2026 rent relief",
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


# ===========================================
# PAYROLL RECORD
# ===========================================

class Payroll(BaseModel, OwnedMixin):
    """One employee's computed pay for one month."""

    __tablename__ = "payrolls"
    __table_args__ = (
        owner_check_constraint(),
        UniqueConstraint(
            "company_id", "employee_id", "payroll_month", "payroll_year",
            name="uq_payrolls_company_employee_period",
        ),
        UniqueConstraint(
            "business_id", "employee_id", "payroll_month", "payroll_year",
            name="uq_payrolls_business_employee_period",
        ),
        CheckConstraint("payroll_month BETWEEN 1 AND 12", name="valid_month"),
        CheckConstraint("gross_salary >= 0", name="gross_non_negative"),
        CheckConstraint("paye >= 0", name="paye_non_negative"),
    )

    employee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    payroll_month: Mapped[int] = mapped_column(Integer, nullable=False)
    payroll_year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    tax_year: Mapped[int] = mapped_column(Integer, nullable=False)

    gross_salary: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    employee_pension: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    employer_pension: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    nhf: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    nhis: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    cra: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    rent_relief: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    taxable_income: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    paye: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    net_salary: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)

    status: Mapped[PayrollStatus] = mapped_column(
        SQLEnum(PayrollStatus),
        default=PayrollStatus.DRAFT,
        nullable=False,
    )


# ===========================================
# PAYROLL SCHEDULE
# ===========================================

class PayrollSchedule(BaseModel, OwnedMixin):
    """Workflow status for an owner's payroll period. Holds no totals."""

    __tablename__ = "payroll_schedules"
    __table_args__ = (
        owner_check_constraint(),
        UniqueConstraint("company_id", "month", "year", name="uq_payroll_schedules_company_period"),
        UniqueConstraint("business_id", "month", "year", name="uq_payroll_schedules_business_period"),
    )

    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[PayrollStatus] = mapped_column(
        SQLEnum(PayrollStatus),
        default=PayrollStatus.DRAFT,
        nullable=False,
    )


# ===========================================
# PAYE REMITTANCE
# ===========================================

class PAYERemittance(BaseModel, OwnedMixin):
    """Payment tracking for a period's aggregated PAYE."""

    __tablename__ = "paye_remittances"
    __table_args__ = (
        owner_check_constraint(),
        UniqueConstraint(
            "company_id", "remittance_month", "remittance_year",
            name="uq_paye_remittances_company_period",
        ),
        UniqueConstraint(
            "business_id", "remittance_month", "remittance_year",
            name="uq_paye_remittances_business_period",
        ),
    )

    remittance_month: Mapped[int] = mapped_column(Integer, nullable=False)
    remittance_year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    total_paye: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"), nullable=False)
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
