"""
NaijaTax Compliance - Company and Business Models

The two owner types every tax record is partitioned by. A Company is a
limited liability company taxed under CIT; a Business is a business name /
sole proprietorship whose profit is taxed under PIT.
"""

import uuid
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel


class _EntityColumns:
    """Columns shared by Company and Business."""

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    tin: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
        comment="Tax Identification Number",
    )
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    is_vat_registered: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class Company(BaseModel, _EntityColumns):
    """Limited company (CIT, VAT, WHT, payroll and ITF)."""

    __tablename__ = "companies"

    rc_number: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
        comment="CAC Registration Number",
    )


class Business(BaseModel, _EntityColumns):
    """Business name / sole proprietorship (PIT on profit, payroll)."""

    __tablename__ = "businesses"

    bn_number: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
        comment="CAC Business Name Number",
    )
