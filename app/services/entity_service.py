"""
NaijaTax Compliance - Entity Service

Business logic for Company / Business onboarding and the annual turnover
figure that drives the VAT exemption, ITF and CIT size thresholds.
"""

import uuid
from datetime import date
from decimal import Decimal
from typing import List, Optional, Union

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.entity import Business, Company
from app.models.invoice import Invoice, InvoiceStatus
from app.models.user import AccountType, User
from app.utils.error_handling import InvalidAccountTypeException
from app.utils.owner import OwnerRef


Entity = Union[Company, Business]

# Invoices that count towards turnover
TURNOVER_INVOICE_STATUSES = (InvoiceStatus.PAID, InvoiceStatus.PENDING)


def entity_model_for(account_type: AccountType):
    """Company or Business model for an account type."""
    if account_type == AccountType.COMPANY:
        return Company
    if account_type == AccountType.BUSINESS:
        return Business
    raise InvalidAccountTypeException(
        getattr(account_type, "value", account_type),
        allowed=[AccountType.COMPANY.value, AccountType.BUSINESS.value],
    )


class EntityService:
    """Service for Company / Business operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_entities(self, user: User) -> List[Entity]:
        """Entities owned by the user, matching their account type."""
        model = entity_model_for(user.account_type)
        result = await self.db.execute(
            select(model)
            .where(model.user_id == user.id)
            .order_by(model.created_at, model.name)
        )
        return list(result.scalars().all())

    async def get_entity(self, user: User, entity_id: uuid.UUID) -> Optional[Entity]:
        """Entity by ID if the user owns it."""
        model = entity_model_for(user.account_type)
        result = await self.db.execute(
            select(model)
            .where(model.id == entity_id)
            .where(model.user_id == user.id)
        )
        return result.scalar_one_or_none()

    async def create_entity(
        self,
        user: User,
        name: str,
        tin: Optional[str] = None,
        registration_number: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        address: Optional[str] = None,
        state: Optional[str] = None,
        is_vat_registered: bool = False,
    ) -> Entity:
        """Create a Company or Business depending on the user's account type."""
        model = entity_model_for(user.account_type)
        entity = model(
            user_id=user.id,
            name=name,
            tin=tin,
            email=email,
            phone=phone,
            address=address,
            state=state,
            is_vat_registered=is_vat_registered,
        )
        if model is Company:
            entity.rc_number = registration_number
        else:
            entity.bn_number = registration_number

        self.db.add(entity)
        await self.db.commit()
        await self.db.refresh(entity)
        return entity

    async def calculate_annual_turnover(self, owner: OwnerRef, year: int) -> Decimal:
        """
        Annual turnover: subtotal (ex-VAT) of paid and pending invoices
        issued in ``year``.
        """
        result = await self.db.execute(
            select(func.coalesce(func.sum(Invoice.subtotal), 0))
            .where(*owner.filters(Invoice))
            .where(Invoice.status.in_(TURNOVER_INVOICE_STATUSES))
            .where(Invoice.issue_date >= date(year, 1, 1))
            .where(Invoice.issue_date < date(year + 1, 1, 1))
        )
        return Decimal(str(result.scalar() or 0))
