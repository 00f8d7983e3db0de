"""
NaijaTax Compliance - Expense Service

Expense recording. Input VAT is either supplied by the caller (from the
supplier's invoice) or computed at the standard rate.
"""

import uuid
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.expense import Expense
from app.services.tax_calculators.vat_service import VATCalculator
from app.utils.error_handling import NotFoundException
from app.utils.owner import OwnerRef
from app.utils.periods import validate_amount


class ExpenseService:
    """Service for expense operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_expense(
        self,
        owner: OwnerRef,
        expense_date: date,
        description: str,
        amount: Decimal,
        vat_amount: Optional[Decimal] = None,
        category: Optional[str] = None,
        vendor_name: Optional[str] = None,
        is_tax_deductible: bool = True,
    ) -> Expense:
        amount = validate_amount(amount)
        if vat_amount is None:
            vat_amount = VATCalculator.calculate_vat(
                amount,
                is_exempt=VATCalculator.is_exempt_category(category),
                tax_year=expense_date.year,
            )
        else:
            vat_amount = validate_amount(vat_amount, field="vat_amount")

        expense = Expense(
            **owner.assignments(),
            expense_date=expense_date,
            description=description,
            amount=amount,
            vat_amount=vat_amount,
            category=category,
            vendor_name=vendor_name,
            is_tax_deductible=is_tax_deductible,
        )
        self.db.add(expense)
        await self.db.commit()
        await self.db.refresh(expense)
        return expense

    async def list_expenses(self, owner: OwnerRef, year: Optional[int] = None) -> List[Expense]:
        query = select(Expense).where(*owner.filters(Expense))
        if year:
            query = query.where(
                Expense.expense_date >= date(year, 1, 1),
                Expense.expense_date < date(year + 1, 1, 1),
            )
        result = await self.db.execute(query.order_by(Expense.expense_date.desc()))
        return list(result.scalars().all())

    async def get_expense(self, owner: OwnerRef, expense_id: uuid.UUID) -> Expense:
        result = await self.db.execute(
            select(Expense)
            .where(Expense.id == expense_id)
            .where(*owner.filters(Expense))
        )
        expense = result.scalar_one_or_none()
        if not expense:
            raise NotFoundException("Expense", expense_id)
        return expense
