"""
NaijaTax Compliance - Authentication Service

Business logic for user authentication and registration.
"""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import AccountType, SubscriptionPlan, User
from app.utils.error_handling import DuplicateEntryException
from app.utils.security import create_access_token, get_password_hash, verify_password


class AuthService:
    """Service for authentication operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email address."""
        result = await self.db.execute(
            select(User).where(User.email == email.lower())
        )
        return result.scalar_one_or_none()

    async def get_user_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        """Get user by ID."""
        result = await self.db.execute(
            select(User).where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        Authenticate user with email and password.

        Returns:
            User if authentication successful, None otherwise
        """
        user = await self.get_user_by_email(email)

        if not user:
            return None

        if not verify_password(password, user.hashed_password):
            return None

        return user

    async def register_user(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        account_type: AccountType,
        subscription_plan: SubscriptionPlan = SubscriptionPlan.FREE,
    ) -> User:
        """Register a new user. Entities are created separately."""
        # Check if email already exists
        if await self.get_user_by_email(email):
            raise DuplicateEntryException("User", "email", email.lower())

        user = User(
            email=email.lower(),
            hashed_password=get_password_hash(password),
            first_name=first_name,
            last_name=last_name,
            account_type=AccountType(account_type),
            subscription_plan=SubscriptionPlan(subscription_plan),
            is_active=True,
        )
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)

        return user

    def create_tokens(self, user: User) -> dict:
        """Create the access token response for a user."""
        access_token = create_access_token(
            data={"sub": str(user.id), "account_type": user.account_type.value}
        )
        return {"access_token": access_token, "token_type": "bearer"}
