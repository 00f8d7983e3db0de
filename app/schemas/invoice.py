"""
NaijaTax Compliance - Invoice Schemas

Pydantic schemas for sales invoices.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from app.models.invoice import InvoiceStatus


InvoiceStatusEnum = Literal["draft", "pending", "paid", "cancelled"]


class InvoiceCreate(BaseModel):
    """Schema for creating an invoice. VAT is calculated from the subtotal."""
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_tin: Optional[str] = Field(None, max_length=20)
    description: Optional[str] = None
    issue_date: date
    due_date: Optional[date] = None
    subtotal: Decimal = Field(..., ge=0)
    vat_exempt: bool = False
    status: InvoiceStatusEnum = "pending"

    @model_validator(mode="after")
    def validate_due_date(self):
        if self.due_date and self.due_date < self.issue_date:
            raise ValueError("Due date cannot be before issue date")
        return self


class InvoiceMarkPaid(BaseModel):
    paid_date: Optional[date] = None


class InvoiceResponse(BaseModel):
    id: UUID
    invoice_number: str
    customer_name: str
    customer_tin: Optional[str] = None
    description: Optional[str] = None
    issue_date: date
    due_date: Optional[date] = None
    subtotal: Decimal
    vat_exempt: bool
    vat_amount: Decimal
    total_amount: Decimal
    status: InvoiceStatus
    paid_date: Optional[date] = None
    created_at: datetime

    class Config:
        from_attributes = True
