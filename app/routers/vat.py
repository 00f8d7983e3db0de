"""
NaijaTax Compliance - VAT Router

VAT positions derived from invoices and expenses, and VAT remittance
tracking (Standard plan or above).
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_owner_ref, require_feature
from app.schemas.payroll import RemittanceMarkPaid
from app.schemas.tax import VATPeriodSummary, VATRemittanceResponse, VATYearlySummary
from app.services.feature_flags import Feature
from app.services.vat_service import VATService
from app.utils.owner import OwnerRef


router = APIRouter(dependencies=[Depends(require_feature(Feature.VAT_TRACKING))])

remittance_feature_gate = require_feature(Feature.VAT_REMITTANCE)


@router.get(
    "/summary",
    response_model=VATPeriodSummary,
    summary="VAT position for a month",
    description=(
        "Net VAT = output VAT (paid invoices) - input VAT (expenses). Entities under the "
        "₦25M turnover threshold are VAT-exempt: input VAT is not claimable when no output "
        "VAT was charged, and charging output VAT raises a compliance warning."
    ),
)
async def get_vat_summary(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(...),
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = VATService(db)
    return await service.get_period_summary(owner, month, year)


@router.get(
    "/yearly/{year}",
    response_model=VATYearlySummary,
    summary="VAT position for a year",
)
async def get_yearly_vat_summary(
    year: int,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = VATService(db)
    return await service.get_yearly_summary(owner, year)


# ===========================================
# REMITTANCES
# ===========================================

@router.get(
    "/remittances",
    response_model=List[VATRemittanceResponse],
    dependencies=[Depends(remittance_feature_gate)],
    summary="List VAT remittances",
)
async def list_vat_remittances(
    year: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = VATService(db)
    return await service.list_vat_remittances(owner, year=year)


@router.post(
    "/remittances/{year}/{month}",
    response_model=VATRemittanceResponse,
    dependencies=[Depends(remittance_feature_gate)],
    summary="File VAT for a month",
    description="Snapshot the month's VAT position as a remittance. Remitted months are left unchanged.",
)
async def file_vat_remittance(
    year: int,
    month: int,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = VATService(db)
    return await service.upsert_vat_remittance(owner, month, year)


@router.post(
    "/remittances/{year}/{month}/remit",
    response_model=VATRemittanceResponse,
    dependencies=[Depends(remittance_feature_gate)],
    summary="Mark VAT remitted",
)
async def mark_vat_remitted(
    year: int,
    month: int,
    data: RemittanceMarkPaid,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = VATService(db)
    return await service.mark_vat_remitted(
        owner,
        month,
        year,
        remittance_date=data.remittance_date,
        reference=data.reference,
    )
