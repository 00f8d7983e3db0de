"""
NaijaTax Compliance - Compliance Schemas

Pydantic schemas for the compliance status report.
"""

from datetime import date
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from app.models.user import AccountType
from app.services.compliance_service import AlertSeverity, ComplianceAlertType, ComplianceStatus


class ComplianceAlertResponse(BaseModel):
    type: ComplianceAlertType
    severity: AlertSeverity
    message: str
    action_required: str
    tax_type: Optional[str] = None
    deadline: Optional[date] = None


class RemittanceCounts(BaseModel):
    pending: int
    remitted: int
    overdue: int


class UpcomingDeadline(BaseModel):
    tax_type: str
    deadline: date
    days_remaining: int


class ComplianceStatusResponse(BaseModel):
    entity_id: UUID
    account_type: AccountType
    as_of: date
    status: ComplianceStatus
    score: int
    alerts: List[ComplianceAlertResponse]
    remittances: RemittanceCounts
    upcoming_deadlines: List[UpcomingDeadline]
