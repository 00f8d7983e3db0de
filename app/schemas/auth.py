"""
NaijaTax Compliance - Authentication Schemas

Pydantic schemas for authentication requests and responses.
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from app.models.user import AccountType, SubscriptionPlan


# ===========================================
# ACCOUNT TYPE DEFINITIONS
# ===========================================

AccountTypeEnum = Literal["company", "business", "individual"]
SubscriptionPlanEnum = Literal["free", "starter", "standard", "premium"]


# ===========================================
# REQUEST SCHEMAS
# ===========================================

class UserRegisterRequest(BaseModel):
    """Schema for user registration request."""
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    account_type: AccountTypeEnum = Field(
        ...,
        description="company (limited company), business (business name / sole proprietor) or individual",
    )
    subscription_plan: SubscriptionPlanEnum = "free"


class UserLoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


# ===========================================
# RESPONSE SCHEMAS
# ===========================================

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    """Schema for user response."""
    id: UUID
    email: EmailStr
    first_name: str
    last_name: str
    account_type: AccountType
    subscription_plan: SubscriptionPlan
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
