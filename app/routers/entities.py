"""
NaijaTax Compliance - Entities Router

Companies (company accounts) and Businesses (business accounts). The
account type of the user decides which kind an entity is.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import require_account_type
from app.models.user import AccountType, User
from app.schemas.entity import EntityCreate, EntityResponse
from app.services.entity_service import EntityService
from app.utils.error_handling import EntityNotFoundException


router = APIRouter()

entity_owner_gate = require_account_type(AccountType.COMPANY, AccountType.BUSINESS)


@router.get(
    "",
    response_model=List[EntityResponse],
    summary="List entities",
)
async def list_entities(
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(entity_owner_gate),
):
    service = EntityService(db)
    return await service.list_entities(current_user)


@router.post(
    "",
    response_model=EntityResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create entity",
    description="Create a Company for company accounts or a Business for business accounts.",
)
async def create_entity(
    data: EntityCreate,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(entity_owner_gate),
):
    service = EntityService(db)
    return await service.create_entity(current_user, **data.model_dump())


@router.get(
    "/{entity_id}",
    response_model=EntityResponse,
    summary="Get entity",
)
async def get_entity(
    entity_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(entity_owner_gate),
):
    service = EntityService(db)
    entity = await service.get_entity(current_user, entity_id)
    if not entity:
        raise EntityNotFoundException(entity_id)
    return entity
