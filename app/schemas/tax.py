"""
NaijaTax Compliance - Tax Schemas

Pydantic schemas for VAT, WHT, CIT / PIT remittances and the tax calculators.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.tax import RemittanceStatus, WHTCreditStatus, WHTPayeeType, WHTPaymentType
from app.services.tax_calculators.vat_service import VATStatus


# ===========================================
# VAT
# ===========================================

class VATPositionResponse(BaseModel):
    output_vat: Decimal
    input_vat: Decimal
    effective_input_vat: Decimal
    net_vat: Decimal
    status: VATStatus
    annual_turnover: Decimal
    is_vat_exempt: bool
    has_output_vat: bool
    input_vat_claimable: bool
    compliance_warning: bool
    warning_message: Optional[str] = None


class VATPeriodSummary(VATPositionResponse):
    month: int
    year: int
    remittance_deadline: date


class VATMonthPosition(VATPositionResponse):
    month: int


class VATYearlySummary(BaseModel):
    year: int
    annual_turnover: Decimal
    is_vat_exempt: bool
    total_output_vat: Decimal
    total_input_vat: Decimal
    net_vat: Decimal
    status: VATStatus
    compliance_warning: bool
    months: List[VATMonthPosition]


class VATRemittanceResponse(BaseModel):
    id: UUID
    month: int
    year: int
    output_vat: Decimal
    input_vat: Decimal
    net_vat: Decimal
    remittance_deadline: date
    status: RemittanceStatus
    remittance_date: Optional[date] = None
    remittance_reference: Optional[str] = None

    class Config:
        from_attributes = True


# ===========================================
# WHT
# ===========================================

class WHTRecordCreate(BaseModel):
    """WHT withheld by a payer from a payment the entity received."""
    payer_name: str = Field(..., min_length=1, max_length=255)
    payer_tin: Optional[str] = Field(None, max_length=20)
    payment_type: WHTPaymentType
    payee_type: Optional[WHTPayeeType] = None
    is_resident: bool = True
    gross_amount: Decimal = Field(..., ge=0)
    payment_date: date
    certificate_number: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class WHTRecordResponse(BaseModel):
    id: UUID
    payer_name: str
    payer_tin: Optional[str] = None
    payment_type: WHTPaymentType
    payee_type: WHTPayeeType
    is_resident: bool
    payment_date: date
    tax_year: int
    gross_amount: Decimal
    wht_rate: Decimal
    wht_amount: Decimal
    net_amount: Decimal
    certificate_number: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class WHTCreditResponse(BaseModel):
    id: UUID
    taxpayer_id: UUID
    tax_year: int
    wht_record_id: Optional[UUID] = None
    amount: Decimal
    status: WHTCreditStatus

    class Config:
        from_attributes = True


class WHTCreditBalance(BaseModel):
    taxpayer_id: UUID
    tax_year: int
    total_credits: Decimal
    available_credits: Decimal
    credits: List[WHTCreditResponse]


# ===========================================
# WHT / CIT / PIT REMITTANCES
# ===========================================

class WHTRemittanceFile(BaseModel):
    """WHT the entity withheld from its own suppliers in the month."""
    total_wht: Decimal = Field(..., ge=0)


class WHTRemittanceResponse(BaseModel):
    id: UUID
    month: int
    year: int
    total_wht: Decimal
    remittance_deadline: date
    status: RemittanceStatus
    remittance_date: Optional[date] = None
    remittance_reference: Optional[str] = None
    receipt_url: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class IncomeTaxRemittanceResponse(BaseModel):
    """A year's CIT (companies) or PIT (businesses) remittance."""
    id: UUID
    tax_year: int
    tax_liability: Decimal
    wht_credit_applied: Decimal
    tax_payable: Decimal
    remittance_deadline: date
    status: RemittanceStatus
    remittance_date: Optional[date] = None
    remittance_reference: Optional[str] = None
    receipt_url: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True


# ===========================================
# CALCULATORS
# ===========================================

class PAYECalculationRequest(BaseModel):
    gross_salary: Decimal = Field(..., ge=0, description="Monthly gross salary")
    tax_year: int = 2026
    has_pension: bool = True
    has_nhf: bool = True
    has_nhis: bool = True
    annual_rent_paid: Decimal = Field(default=Decimal("0"), ge=0)


class PITCalculationRequest(BaseModel):
    annual_taxable_income: Decimal = Field(..., ge=0)
    tax_year: int = 2026


class VATCalculationRequest(BaseModel):
    amount: Decimal = Field(..., ge=0)
    is_exempt: bool = False
    tax_year: int = 2026


class VATPositionRequest(BaseModel):
    output_vat: Decimal = Field(..., ge=0)
    input_vat: Decimal = Field(..., ge=0)
    annual_turnover: Decimal = Field(..., ge=0)
    tax_year: int = 2026


class WHTCalculationRequest(BaseModel):
    gross_amount: Decimal = Field(..., ge=0)
    payment_type: WHTPaymentType
    payee_type: WHTPayeeType = WHTPayeeType.COMPANY
    is_resident: bool = True


class CITCalculationRequest(BaseModel):
    gross_turnover: Decimal = Field(..., ge=0)
    assessable_profit: Decimal
    tax_year: int = 2026


class ITFCalculationRequest(BaseModel):
    total_gross_payroll: Decimal = Field(..., ge=0)
    annual_turnover: Decimal = Field(..., ge=0)
    headcount: int = Field(..., ge=0)
    tax_year: int = 2026
