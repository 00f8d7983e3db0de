"""
NaijaTax Compliance - Payroll Schemas

Pydantic schemas for payroll requests and responses.
Nigerian compliance ready.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from app.models.payroll import PayrollStatus
from app.models.tax import RemittanceStatus


# ===========================================
# EMPLOYEE SCHEMAS
# ===========================================

class EmployeeBase(BaseModel):
    """Base employee schema."""
    employee_number: Optional[str] = Field(None, max_length=50)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    tin: Optional[str] = Field(None, max_length=20)
    job_title: Optional[str] = Field(None, max_length=100)
    hire_date: Optional[date] = None

    # Pay
    salary: Decimal = Field(..., ge=0, description="Monthly gross salary")
    annual_rent_paid: Decimal = Field(default=Decimal("0"), ge=0)

    # Benefits
    has_pension: bool = True
    has_nhf: bool = True
    has_nhis: bool = True


class EmployeeCreate(EmployeeBase):
    pass


class EmployeeUpdate(BaseModel):
    """Partial update; salary and benefit changes recalculate open periods."""
    employee_number: Optional[str] = Field(None, max_length=50)
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    tin: Optional[str] = Field(None, max_length=20)
    job_title: Optional[str] = Field(None, max_length=100)
    hire_date: Optional[date] = None
    salary: Optional[Decimal] = Field(None, ge=0)
    annual_rent_paid: Optional[Decimal] = Field(None, ge=0)
    has_pension: Optional[bool] = None
    has_nhf: Optional[bool] = None
    has_nhis: Optional[bool] = None


class EmployeeResponse(EmployeeBase):
    id: UUID
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


# ===========================================
# PAYROLL SCHEMAS
# ===========================================

class PayrollPeriod(BaseModel):
    month: int = Field(..., ge=1, le=12)
    year: int


class PayrollGenerateRequest(PayrollPeriod):
    employee_id: UUID


class PayrollResponse(BaseModel):
    id: UUID
    employee_id: UUID
    payroll_month: int
    payroll_year: int
    tax_year: int
    gross_salary: Decimal
    employee_pension: Decimal
    employer_pension: Decimal
    nhf: Decimal
    nhis: Decimal
    cra: Decimal
    rent_relief: Decimal
    taxable_income: Decimal
    paye: Decimal
    net_salary: Decimal
    status: PayrollStatus
    created_at: datetime

    class Config:
        from_attributes = True


class PayrollFailure(BaseModel):
    employee_id: UUID
    error: str


class PayrollBatchResponse(BaseModel):
    generated: List[PayrollResponse]
    failures: List[PayrollFailure]


# ===========================================
# SCHEDULE SCHEMAS
# ===========================================

class ScheduleStatusUpdate(BaseModel):
    status: str = Field(..., description="draft, approved or submitted")


class PayrollScheduleResponse(BaseModel):
    id: UUID
    month: int
    year: int
    status: PayrollStatus
    created_at: datetime

    class Config:
        from_attributes = True


class PayrollScheduleTotals(BaseModel):
    month: int
    year: int
    employee_count: int
    total_gross: Decimal
    total_employee_pension: Decimal
    total_employer_pension: Decimal
    total_nhf: Decimal
    total_nhis: Decimal
    total_paye: Decimal
    total_net: Decimal
    itf: Decimal


class PayrollScheduleDetail(BaseModel):
    schedule: PayrollScheduleResponse
    totals: PayrollScheduleTotals


# ===========================================
# REMITTANCE SCHEMAS
# ===========================================

class RemittanceMarkPaid(BaseModel):
    remittance_date: date
    reference: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None
    receipt_url: Optional[str] = Field(None, max_length=500)


class PAYERemittanceResponse(BaseModel):
    id: UUID
    remittance_month: int
    remittance_year: int
    total_paye: Decimal
    remittance_deadline: date
    status: RemittanceStatus
    remittance_date: Optional[date] = None
    remittance_reference: Optional[str] = None
    receipt_url: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True


# ===========================================
# ANNUAL PIT
# ===========================================

class EmployeeWHTCreditCreate(BaseModel):
    """WHT suffered by an employee, e.g. from a deduction certificate."""
    tax_year: int
    amount: Decimal = Field(..., gt=0)


class EmployeeAnnualPIT(BaseModel):
    taxpayer_id: UUID
    employee_name: str
    tax_year: int
    annual_taxable_income: Decimal
    annual_pit_before_wht: Decimal
    wht_credit_applied: Decimal
    annual_pit_after_wht: Decimal
    wht_credits_applied: bool
    credits_committed: bool = False
    paye_withheld: Decimal


class AnnualPITReport(BaseModel):
    tax_year: int
    employee_count: int
    total_pit_before_wht: Decimal
    total_pit_after_wht: Decimal
    employees: List[EmployeeAnnualPIT]
