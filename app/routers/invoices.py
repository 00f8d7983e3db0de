"""
NaijaTax Compliance - Invoices Router

Sales invoices for the selected Company / Business (X-Entity-ID).
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_owner_ref, require_feature
from app.models.invoice import InvoiceStatus
from app.schemas.invoice import InvoiceCreate, InvoiceMarkPaid, InvoiceResponse
from app.services.feature_flags import Feature
from app.services.invoice_service import InvoiceService
from app.utils.owner import OwnerRef


router = APIRouter(dependencies=[Depends(require_feature(Feature.VAT_TRACKING))])


@router.get(
    "",
    response_model=List[InvoiceResponse],
    summary="List invoices",
)
async def list_invoices(
    status_filter: Optional[InvoiceStatus] = Query(None, alias="status"),
    year: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = InvoiceService(db)
    return await service.list_invoices(owner, status=status_filter, year=year)


@router.post(
    "",
    response_model=InvoiceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create invoice",
    description="Create an invoice. VAT at 7.5% is added to the subtotal unless the supply is VAT-exempt.",
)
async def create_invoice(
    data: InvoiceCreate,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = InvoiceService(db)
    return await service.create_invoice(
        owner,
        customer_name=data.customer_name,
        issue_date=data.issue_date,
        subtotal=data.subtotal,
        vat_exempt=data.vat_exempt,
        customer_tin=data.customer_tin,
        description=data.description,
        due_date=data.due_date,
        status=InvoiceStatus(data.status),
    )


@router.get(
    "/{invoice_id}",
    response_model=InvoiceResponse,
    summary="Get invoice",
)
async def get_invoice(
    invoice_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = InvoiceService(db)
    return await service.get_invoice(owner, invoice_id)


@router.post(
    "/{invoice_id}/pay",
    response_model=InvoiceResponse,
    summary="Mark invoice paid",
)
async def mark_invoice_paid(
    invoice_id: uuid.UUID,
    data: InvoiceMarkPaid,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = InvoiceService(db)
    return await service.mark_paid(owner, invoice_id, paid_date=data.paid_date)


@router.post(
    "/{invoice_id}/cancel",
    response_model=InvoiceResponse,
    summary="Cancel invoice",
)
async def cancel_invoice(
    invoice_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = InvoiceService(db)
    return await service.cancel_invoice(owner, invoice_id)
