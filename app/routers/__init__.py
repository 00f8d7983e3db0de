"""
NaijaTax Compliance - Routers Package

FastAPI route handlers.

Routers:
- auth: Authentication (register, login, current user)
- entities: Companies and Businesses
- invoices: Sales invoices (output VAT, turnover)
- expenses: Expenses (input VAT, deductible costs)
- payroll: Employees, payroll generation, schedules, PAYE remittances, annual PIT
- vat: VAT positions and remittances
- wht: WHT records, credits and remittances
- tax: Tax calculators, deadlines, CIT / PIT summaries and remittances
- compliance: Compliance score, alerts and upcoming deadlines
"""

from app.routers import (
    auth,
    compliance,
    entities,
    expenses,
    invoices,
    payroll,
    tax,
    vat,
    wht,
)

__all__ = [
    "auth",
    "compliance",
    "entities",
    "expenses",
    "invoices",
    "payroll",
    "tax",
    "vat",
    "wht",
]
