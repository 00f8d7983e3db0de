"""
NaijaTax Compliance - Compliance Router

Compliance score, alerts and upcoming deadlines for the selected entity.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_owner_ref
from app.schemas.compliance import ComplianceStatusResponse
from app.services.compliance_service import ComplianceService
from app.utils.owner import OwnerRef


router = APIRouter()


@router.get(
    "/status",
    response_model=ComplianceStatusResponse,
    summary="Compliance status",
    description=(
        "Score out of 100, alerts for missing TIN and overdue or due-soon remittances "
        "(PAYE, VAT, WHT, CIT / PIT), and the next statutory deadlines. Read-only."
    ),
)
async def get_compliance_status(
    as_of: Optional[date] = Query(None, description="Evaluate as of this date (defaults to today)"),
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = ComplianceService(db)
    return await service.get_compliance_status(owner, as_of=as_of)
