"""
NaijaTax Compliance - FastAPI Dependencies

Shared dependencies for authentication, database sessions, and access control.

This module provides dependency injection for:
1. Current user authentication
2. Owner resolution (which Company / Business a request acts for)
3. Account-type gating
4. Feature gating based on subscription plan
"""

import uuid
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.models.user import AccountType, User
from app.services.entity_service import EntityService
from app.services.feature_flags import Feature, check_feature
from app.utils.error_handling import (
    AuthorizationException,
    EntityNotFoundException,
    ErrorCode,
    MissingEntityIdException,
    ValidationException,
)
from app.utils.owner import OwnerRef
from app.utils.security import verify_access_token


# HTTP Bearer token security
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_async_session),
) -> User:
    """
    Get the current authenticated user from JWT token.

    Raises:
        HTTPException: If token is invalid or user not found
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_access_token(credentials.credentials)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user_uuid = uuid.UUID(user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user ID in token",
        )

    result = await db.execute(select(User).where(User.id == user_uuid))
    user = result.scalar_one_or_none()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    return user


async def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """Get current user and verify they are active."""
    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated",
        )
    return current_user


async def get_owner_ref(
    x_entity_id: Optional[str] = Header(None, alias="X-Entity-ID"),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_async_session),
) -> OwnerRef:
    """
    Resolve the Company / Business the request acts for.

    Uses the X-Entity-ID header when given, otherwise the user's first
    entity of their account type.

    Raises:
        InvalidAccountTypeException: individual accounts own no entities
        EntityNotFoundException: header names an entity the user does not own
        MissingEntityIdException: no header and the user has no entities yet
    """
    entity_service = EntityService(db)

    if x_entity_id:
        try:
            entity_id = uuid.UUID(x_entity_id)
        except ValueError:
            raise ValidationException(
                message=f"Invalid X-Entity-ID header: {x_entity_id}",
                field="X-Entity-ID",
            )
        entity = await entity_service.get_entity(current_user, entity_id)
        if not entity:
            raise EntityNotFoundException(entity_id)
        return OwnerRef(current_user.account_type, entity.id)

    entities = await entity_service.list_entities(current_user)
    if not entities:
        raise MissingEntityIdException(current_user.account_type.value)
    return OwnerRef(current_user.account_type, entities[0].id)


def require_account_type(*allowed_types: AccountType):
    """
    Dependency factory for account-type gating.

    Usage:
        @router.get("/cit", dependencies=[Depends(require_account_type(AccountType.COMPANY))])
    """
    async def account_type_checker(
        current_user: User = Depends(get_current_active_user),
    ) -> User:
        if current_user.account_type not in allowed_types:
            raise AuthorizationException(
                message=f"Not available for {current_user.account_type.value} accounts",
                code=ErrorCode.ACCOUNT_TYPE_NOT_ALLOWED,
                details={
                    "account_type": current_user.account_type.value,
                    "allowed": [t.value for t in allowed_types],
                },
            )
        return current_user

    return account_type_checker


def require_feature(feature: Feature):
    """
    Dependency factory for subscription feature gating.

    Usage:
        @router.get("/payroll")
        async def payroll_endpoint(
            user: User = Depends(require_feature(Feature.PAYROLL))
        ):
            ...
    """
    async def feature_checker(
        current_user: User = Depends(get_current_active_user),
    ) -> User:
        check_feature(current_user, feature)
        return current_user

    return feature_checker
