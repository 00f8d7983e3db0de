"""
NaijaTax Compliance - SQLAlchemy Models Package

This package contains all database models for the application.
"""

from app.models.base import BaseModel, TimestampMixin, OwnedMixin
from app.models.user import User, AccountType, SubscriptionPlan
from app.models.entity import Company, Business
from app.models.tax import (
    RemittanceStatus,
    WHTPaymentType,
    WHTPayeeType,
    WHTCreditStatus,
    CreditTaxType,
    WHTRecord,
    WHTCredit,
    WHTCreditApplication,
    VATRemittance,
    WHTRemittance,
    CITRemittance,
    PITRemittance,
)
from app.models.payroll import (
    PayrollStatus,
    Employee,
    Payroll,
    PayrollSchedule,
    PAYERemittance,
)
from app.models.invoice import Invoice, InvoiceStatus
from app.models.expense import Expense

__all__ = [
    "BaseModel",
    "TimestampMixin",
    "OwnedMixin",
    "User",
    "AccountType",
    "SubscriptionPlan",
    "Company",
    "Business",
    "RemittanceStatus",
    "WHTPaymentType",
    "WHTPayeeType",
    "WHTCreditStatus",
    "CreditTaxType",
    "WHTRecord",
    "WHTCredit",
    "WHTCreditApplication",
    "VATRemittance",
    "WHTRemittance",
    "CITRemittance",
    "PITRemittance",
    "PayrollStatus",
    "Employee",
    "Payroll",
    "PayrollSchedule",
    "PAYERemittance",
    "Invoice",
    "InvoiceStatus",
    "Expense",
]
