"""
NaijaTax Compliance - Services Package

Business logic services.
"""

from app.services.auth_service import AuthService
from app.services.entity_service import EntityService
from app.services.invoice_service import InvoiceService
from app.services.expense_service import ExpenseService
from app.services.vat_service import VATService
from app.services.wht_credit_ledger import WHTCreditLedgerService
from app.services.payroll_service import PayrollService
from app.services.income_tax_service import IncomeTaxService
from app.services.remittance_service import RemittanceService
from app.services.compliance_service import ComplianceService

__all__ = [
    "AuthService",
    "EntityService",
    "InvoiceService",
    "ExpenseService",
    "VATService",
    "WHTCreditLedgerService",
    "PayrollService",
    "IncomeTaxService",
    "RemittanceService",
    "ComplianceService",
]
