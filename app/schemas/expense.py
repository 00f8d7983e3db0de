"""
NaijaTax Compliance - Expense Schemas
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ExpenseCreate(BaseModel):
    """Schema for recording an expense. Omit vat_amount to charge the standard rate."""
    expense_date: date
    description: str = Field(..., min_length=1, max_length=500)
    amount: Decimal = Field(..., ge=0)
    vat_amount: Optional[Decimal] = Field(None, ge=0)
    category: Optional[str] = Field(None, max_length=100)
    vendor_name: Optional[str] = Field(None, max_length=255)
    is_tax_deductible: bool = True


class ExpenseResponse(BaseModel):
    id: UUID
    expense_date: date
    description: str
    amount: Decimal
    vat_amount: Decimal
    category: Optional[str] = None
    vendor_name: Optional[str] = None
    is_tax_deductible: bool
    created_at: datetime

    class Config:
        from_attributes = True
