"""
NaijaTax Compliance - Compliance Service

Compliance status for a Company or Business, computed on read from its
remittances and the statutory deadlines that apply to it.

Scoring starts at 100 and is reduced per alert:
- Missing TIN: -20
- Overdue remittance: -25 each
- Remittance due within the alert window: -20 (3 days or less) or -10
- Nearest statutory deadline within the alert window with nothing filed
  for it yet: -20 (3 days or less) or -10

The score and the thresholds that map it to a status are internal health
indicators, not an official NRS rating.
"""

import logging
from dataclasses import asdict, dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.tax import RemittanceStatus
from app.services.entity_service import entity_model_for
from app.services.payroll_service import PayrollService
from app.services.remittance_service import RemittanceService, open_status
from app.services.vat_service import VATService
from app.utils.owner import OwnerRef
from app.utils.periods import (
    CIT_DEADLINE,
    PAYE_DEADLINE_DAY,
    PIT_DEADLINE,
    VAT_DEADLINE_DAY,
    WHT_DEADLINE_DAY,
    next_annual_deadline,
    next_monthly_deadline,
)

logger = logging.getLogger(__name__)

MISSING_TIN_PENALTY = 20
OVERDUE_PENALTY = 25
URGENT_PENALTY = 20
DUE_SOON_PENALTY = 10
URGENT_DAYS = 3


class ComplianceStatus(str, Enum):
    COMPLIANT = "compliant"
    AT_RISK = "at_risk"
    NON_COMPLIANT = "non_compliant"


class AlertSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


SEVERITY_ORDER = {
    AlertSeverity.CRITICAL: 4,
    AlertSeverity.HIGH: 3,
    AlertSeverity.MEDIUM: 2,
    AlertSeverity.LOW: 1,
}


class ComplianceAlertType(str, Enum):
    MISSING_TIN = "missing_tin"
    OVERDUE_REMITTANCE = "overdue_remittance"
    REMITTANCE_DUE = "remittance_due"
    TAX_DEADLINE = "tax_deadline"


@dataclass
class ComplianceAlert:
    type: ComplianceAlertType
    severity: AlertSeverity
    message: str
    action_required: str
    tax_type: Optional[str] = None
    deadline: Optional[date] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TrackedRemittance:
    """A remittance of any tax type, reduced to what scoring needs."""
    tax_type: str
    period: str
    amount: Decimal
    deadline: date
    status: RemittanceStatus


class ComplianceService:
    """Compliance score, alerts and upcoming deadlines for an owner."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def collect_remittances(self, owner: OwnerRef, as_of: date) -> List[TrackedRemittance]:
        """Every remittance the owner has, with open ones re-aged to ``as_of``."""
        tracked = []
        for r in await PayrollService(self.db).list_paye_remittances(owner):
            tracked.append(TrackedRemittance(
                "PAYE", f"{r.remittance_month:02d}/{r.remittance_year}", r.total_paye, r.remittance_deadline, r.status,
            ))
        for r in await VATService(self.db).list_vat_remittances(owner):
            tracked.append(TrackedRemittance(
                "VAT", f"{r.month:02d}/{r.year}", r.net_vat, r.remittance_deadline, r.status,
            ))

        remittances = RemittanceService(self.db)
        for r in await remittances.list_wht_remittances(owner):
            tracked.append(TrackedRemittance(
                "WHT", f"{r.month:02d}/{r.year}", r.total_wht, r.remittance_deadline, r.status,
            ))
        label = "CIT" if owner.is_company else "PIT"
        for r in await remittances.list_income_tax_remittances(owner):
            tracked.append(TrackedRemittance(
                label, str(r.tax_year), r.tax_payable, r.remittance_deadline, r.status,
            ))

        for item in tracked:
            if item.status != RemittanceStatus.REMITTED:
                item.status = open_status(item.deadline, as_of)
        return tracked

    async def get_upcoming_deadlines(self, owner: OwnerRef, as_of: date) -> List[Dict[str, Any]]:
        """Next statutory deadline per tax the owner is liable for, nearest first."""
        deadlines = [("VAT", next_monthly_deadline(as_of, VAT_DEADLINE_DAY))]
        if await PayrollService(self.db).count_active_employees(owner) > 0:
            deadlines.append(("PAYE", next_monthly_deadline(as_of, PAYE_DEADLINE_DAY)))
        if await RemittanceService(self.db).list_wht_remittances(owner):
            deadlines.append(("WHT", next_monthly_deadline(as_of, WHT_DEADLINE_DAY)))
        if owner.is_company:
            deadlines.append(("CIT", next_annual_deadline(as_of, CIT_DEADLINE)))
        else:
            deadlines.append(("PIT", next_annual_deadline(as_of, PIT_DEADLINE)))

        return sorted(
            (
                {"tax_type": tax_type, "deadline": deadline, "days_remaining": (deadline - as_of).days}
                for tax_type, deadline in deadlines
            ),
            key=lambda d: (d["deadline"], d["tax_type"]),
        )

    async def get_compliance_status(self, owner: OwnerRef, as_of: Optional[date] = None) -> Dict[str, Any]:
        as_of = as_of or date.today()
        window = settings.compliance_alert_window_days
        alerts: List[ComplianceAlert] = []
        score = 100

        entity = await self.db.get(entity_model_for(owner.account_type), owner.entity_id)
        if entity is not None and not (entity.tin or "").strip():
            alerts.append(ComplianceAlert(
                type=ComplianceAlertType.MISSING_TIN,
                severity=AlertSeverity.HIGH,
                message="Tax Identification Number (TIN) is missing",
                action_required="Add your TIN to the entity profile. It is required for every tax filing.",
            ))
            score -= MISSING_TIN_PENALTY

        tracked = await self.collect_remittances(owner, as_of)
        counts = {status.value: 0 for status in RemittanceStatus}
        alerted = set()
        for item in tracked:
            counts[item.status.value] += 1
            alerted.add((item.tax_type, item.deadline))
            if item.status == RemittanceStatus.REMITTED or item.amount <= 0:
                continue

            days = (item.deadline - as_of).days
            if item.status == RemittanceStatus.OVERDUE:
                alerts.append(ComplianceAlert(
                    type=ComplianceAlertType.OVERDUE_REMITTANCE,
                    severity=AlertSeverity.CRITICAL,
                    message=f"{item.tax_type} for {item.period} is overdue ({-days} day(s) past the deadline)",
                    action_required=f"Remit NGN {item.amount:,.2f} {item.tax_type} and mark it remitted.",
                    tax_type=item.tax_type,
                    deadline=item.deadline,
                ))
                score -= OVERDUE_PENALTY
            elif days <= window:
                alerts.append(ComplianceAlert(
                    type=ComplianceAlertType.REMITTANCE_DUE,
                    severity=AlertSeverity.CRITICAL if days <= URGENT_DAYS else AlertSeverity.HIGH,
                    message=f"{item.tax_type} for {item.period} is due in {days} day(s)",
                    action_required=f"Remit NGN {item.amount:,.2f} {item.tax_type} by {item.deadline.isoformat()}.",
                    tax_type=item.tax_type,
                    deadline=item.deadline,
                ))
                score -= URGENT_PENALTY if days <= URGENT_DAYS else DUE_SOON_PENALTY

        deadlines = await self.get_upcoming_deadlines(owner, as_of)
        nearest = deadlines[0]
        if (
            nearest["days_remaining"] <= window
            and (nearest["tax_type"], nearest["deadline"]) not in alerted
        ):
            urgent = nearest["days_remaining"] <= URGENT_DAYS
            alerts.append(ComplianceAlert(
                type=ComplianceAlertType.TAX_DEADLINE,
                severity=AlertSeverity.CRITICAL if urgent else AlertSeverity.HIGH,
                message=f"{nearest['tax_type']} deadline in {nearest['days_remaining']} day(s)",
                action_required=f"File and remit {nearest['tax_type']} by {nearest['deadline'].isoformat()}.",
                tax_type=nearest["tax_type"],
                deadline=nearest["deadline"],
            ))
            score -= URGENT_PENALTY if urgent else DUE_SOON_PENALTY

        score = max(0, score)
        if score >= settings.compliance_score_compliant:
            status = ComplianceStatus.COMPLIANT
        elif score >= settings.compliance_score_at_risk:
            status = ComplianceStatus.AT_RISK
        else:
            status = ComplianceStatus.NON_COMPLIANT

        alerts.sort(key=lambda a: SEVERITY_ORDER[a.severity], reverse=True)
        logger.info(f"Compliance for {owner} as of {as_of}: {status.value} ({score})")

        return {
            "entity_id": owner.entity_id,
            "account_type": owner.account_type,
            "as_of": as_of,
            "status": status,
            "score": score,
            "alerts": [alert.to_dict() for alert in alerts],
            "remittances": counts,
            "upcoming_deadlines": deadlines,
        }
