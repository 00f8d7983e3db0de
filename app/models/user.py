"""
NaijaTax Compliance - User Model

A user signs up as one account type and owns the Companies or Businesses
that their tax records are partitioned by:

- company: Limited company. Owns Company entities (CIT, VAT, WHT, payroll, ITF).
- business: Sole proprietor / enterprise. Owns Business entities (PIT, payroll).
- individual: Personal income tax filer. Owns no entities.
"""

from enum import Enum

from sqlalchemy import Boolean, String, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel


class AccountType(str, Enum):
    """Account type discriminant for owner partitioning."""
    COMPANY = "company"
    INDIVIDUAL = "individual"
    BUSINESS = "business"


class SubscriptionPlan(str, Enum):
    """Subscription plans, ordered cheapest first."""
    FREE = "free"
    STARTER = "starter"
    STANDARD = "standard"
    PREMIUM = "premium"


class User(BaseModel):
    """User model for authentication and account-type context."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    account_type: Mapped[AccountType] = mapped_column(
        SQLEnum(AccountType),
        nullable=False,
    )
    subscription_plan: Mapped[SubscriptionPlan] = mapped_column(
        SQLEnum(SubscriptionPlan),
        default=SubscriptionPlan.FREE,
        nullable=False,
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
