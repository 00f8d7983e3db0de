"""
NaijaTax Compliance - Expenses Router

Expenses for the selected Company / Business. Expense VAT is input VAT.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_owner_ref, require_feature
from app.schemas.expense import ExpenseCreate, ExpenseResponse
from app.services.expense_service import ExpenseService
from app.services.feature_flags import Feature
from app.utils.owner import OwnerRef


router = APIRouter(dependencies=[Depends(require_feature(Feature.VAT_TRACKING))])


@router.get(
    "",
    response_model=List[ExpenseResponse],
    summary="List expenses",
)
async def list_expenses(
    year: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = ExpenseService(db)
    return await service.list_expenses(owner, year=year)


@router.post(
    "",
    response_model=ExpenseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record expense",
)
async def create_expense(
    data: ExpenseCreate,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = ExpenseService(db)
    return await service.create_expense(owner, **data.model_dump())


@router.get(
    "/{expense_id}",
    response_model=ExpenseResponse,
    summary="Get expense",
)
async def get_expense(
    expense_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = ExpenseService(db)
    return await service.get_expense(owner, expense_id)
