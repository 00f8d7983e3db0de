"""
NaijaTax Compliance - WHT Router

WHT deducted from payments the entity received, the credits they give
against the entity's final CIT / PIT, and monthly remittances of WHT the
entity withheld from its own suppliers (Starter plan or above).
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_owner_ref, require_feature
from app.schemas.payroll import RemittanceMarkPaid
from app.schemas.tax import (
    WHTCreditBalance,
    WHTRecordCreate,
    WHTRecordResponse,
    WHTRemittanceFile,
    WHTRemittanceResponse,
)
from app.services.feature_flags import Feature
from app.services.remittance_service import RemittanceService
from app.services.wht_credit_ledger import WHTCreditLedgerService
from app.utils.owner import OwnerRef


router = APIRouter(dependencies=[Depends(require_feature(Feature.WHT_MANAGEMENT))])


@router.post(
    "/records",
    response_model=WHTRecordResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record WHT deducted",
    description="The WHT amount is calculated from payment type, payee type and residency, and credited for the year.",
)
async def record_wht(
    data: WHTRecordCreate,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = WHTCreditLedgerService(db)
    return await service.record_wht_deduction(owner, **data.model_dump())


@router.get(
    "/records",
    response_model=List[WHTRecordResponse],
    summary="List WHT records",
)
async def list_wht_records(
    year: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = WHTCreditLedgerService(db)
    return await service.list_records(owner, tax_year=year)


@router.get(
    "/credits/{year}",
    response_model=WHTCreditBalance,
    summary="WHT credit balance for a year",
)
async def get_wht_credits(
    year: int,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = WHTCreditLedgerService(db)
    return {
        "taxpayer_id": owner.entity_id,
        "tax_year": year,
        "total_credits": await service.get_total_credits(owner.entity_id, year),
        "available_credits": await service.get_available_credits(owner.entity_id, year),
        "credits": await service.list_credits(owner.entity_id, year),
    }


# ===========================================
# WHT REMITTANCES
# ===========================================

@router.get(
    "/remittances",
    response_model=List[WHTRemittanceResponse],
    summary="List WHT remittances",
)
async def list_wht_remittances(
    year: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = RemittanceService(db)
    return await service.list_wht_remittances(owner, year=year)


@router.post(
    "/remittances/{year}/{month}",
    response_model=WHTRemittanceResponse,
    summary="File WHT withheld for a month",
    description="Records the WHT withheld from suppliers in the month. A remitted month is returned unchanged.",
)
async def file_wht_remittance(
    year: int,
    month: int,
    data: WHTRemittanceFile,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = RemittanceService(db)
    return await service.file_wht_remittance(owner, month, year, data.total_wht)


@router.post(
    "/remittances/{year}/{month}/remit",
    response_model=WHTRemittanceResponse,
    summary="Mark WHT remitted",
)
async def mark_wht_remitted(
    year: int,
    month: int,
    data: RemittanceMarkPaid,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = RemittanceService(db)
    return await service.mark_wht_remitted(
        owner,
        month,
        year,
        remittance_date=data.remittance_date,
        reference=data.reference,
        notes=data.notes,
        receipt_url=data.receipt_url,
    )
