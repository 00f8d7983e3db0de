"""
NaijaTax Compliance - Entity Schemas

Pydantic schemas for Company / Business requests and responses.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class EntityCreate(BaseModel):
    """
    Schema for creating a Company or Business.

    ``registration_number`` is the CAC RC number for companies and the BN
    number for business names.
    """
    name: str = Field(..., min_length=1, max_length=255)
    tin: Optional[str] = Field(None, max_length=20, description="Tax Identification Number")
    registration_number: Optional[str] = Field(None, max_length=50, description="CAC RC/BN number")
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    state: Optional[str] = Field(None, max_length=100)
    is_vat_registered: bool = False


class EntityResponse(BaseModel):
    id: UUID
    name: str
    tin: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    state: Optional[str] = None
    is_vat_registered: bool
    rc_number: Optional[str] = None
    bn_number: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
