"""
NaijaTax Compliance - Tax Router

Stateless tax calculators (PAYE, PIT, VAT, WHT, CIT, ITF), statutory
deadlines, the annual CIT / PIT summaries computed from the books, and
CIT / PIT remittances.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_current_active_user, get_owner_ref, require_account_type, require_feature
from app.models.user import AccountType
from app.schemas.payroll import RemittanceMarkPaid
from app.schemas.tax import (
    CITCalculationRequest,
    IncomeTaxRemittanceResponse,
    ITFCalculationRequest,
    PAYECalculationRequest,
    PITCalculationRequest,
    VATCalculationRequest,
    VATPositionRequest,
    VATPositionResponse,
    WHTCalculationRequest,
)
from app.services.feature_flags import Feature
from app.services.income_tax_service import IncomeTaxService
from app.services.remittance_service import RemittanceService
from app.services.tax_calculators import (
    CITCalculator,
    ITFCalculator,
    PAYECalculator,
    VATCalculator,
    WHTCalculator,
)
from app.utils.owner import OwnerRef
from app.utils.periods import paye_deadline, validate_month, vat_deadline, wht_deadline


router = APIRouter()


# ===========================================
# CALCULATORS
# ===========================================

@router.post(
    "/calculate/paye",
    summary="Calculate monthly PAYE",
    description="Full monthly payroll breakdown: pension, NHF, NHIS, reliefs, taxable income, PAYE and net pay.",
    dependencies=[Depends(get_current_active_user)],
)
async def calculate_paye(data: PAYECalculationRequest) -> Dict[str, Any]:
    breakdown = PAYECalculator.calculate_payroll(
        data.gross_salary,
        data.tax_year,
        has_pension=data.has_pension,
        has_nhf=data.has_nhf,
        has_nhis=data.has_nhis,
        annual_rent_paid=data.annual_rent_paid,
    )
    return breakdown.to_dict()


@router.post(
    "/calculate/pit",
    summary="Calculate annual PIT",
    dependencies=[Depends(get_current_active_user)],
)
async def calculate_pit(data: PITCalculationRequest) -> Dict[str, Any]:
    return PAYECalculator.calculate_pit_breakdown(data.annual_taxable_income, data.tax_year)


@router.post(
    "/calculate/vat",
    summary="Calculate VAT on an amount",
    dependencies=[Depends(get_current_active_user)],
)
async def calculate_vat(data: VATCalculationRequest) -> Dict[str, Any]:
    vat = VATCalculator.calculate_vat(data.amount, is_exempt=data.is_exempt, tax_year=data.tax_year)
    return {
        "amount": data.amount,
        "vat_amount": vat,
        "total_amount": data.amount + vat,
        "is_exempt": data.is_exempt,
    }


@router.post(
    "/calculate/vat-position",
    response_model=VATPositionResponse,
    summary="Classify a VAT position",
    dependencies=[Depends(get_current_active_user)],
)
async def calculate_vat_position(data: VATPositionRequest):
    return VATCalculator.calculate_position(
        data.output_vat, data.input_vat, data.annual_turnover, data.tax_year,
    ).to_dict()


@router.post(
    "/calculate/wht",
    summary="Calculate WHT on a payment",
    dependencies=[Depends(get_current_active_user)],
)
async def calculate_wht(data: WHTCalculationRequest) -> Dict[str, Any]:
    return WHTCalculator.calculate_wht(
        data.gross_amount, data.payment_type, data.payee_type, data.is_resident,
    )


@router.post(
    "/calculate/cit",
    summary="Calculate CIT and development levy",
    dependencies=[Depends(get_current_active_user)],
)
async def calculate_cit(data: CITCalculationRequest) -> Dict[str, Any]:
    return CITCalculator.calculate_cit(data.gross_turnover, data.assessable_profit, data.tax_year)


@router.get(
    "/cit-thresholds/{tax_year}",
    summary="CIT size thresholds",
    dependencies=[Depends(get_current_active_user)],
)
async def get_cit_thresholds(tax_year: int) -> List[Dict[str, Any]]:
    return CITCalculator.get_cit_thresholds(tax_year)


@router.post(
    "/calculate/itf",
    summary="Calculate ITF levy",
    dependencies=[Depends(get_current_active_user)],
)
async def calculate_itf(data: ITFCalculationRequest) -> Dict[str, Any]:
    return {
        "is_liable": ITFCalculator.is_liable(data.annual_turnover, data.headcount, data.tax_year),
        "itf": ITFCalculator.calculate_itf(
            data.total_gross_payroll, data.annual_turnover, data.headcount, data.tax_year,
        ),
    }


@router.get(
    "/deadlines/{year}/{month}",
    summary="Remittance deadlines for a period",
    dependencies=[Depends(get_current_active_user)],
)
async def get_deadlines(year: int, month: int) -> Dict[str, Any]:
    validate_month(month)
    return {
        "month": month,
        "year": year,
        "paye": paye_deadline(month, year),
        "vat": vat_deadline(month, year),
        "wht": wht_deadline(month, year),
    }


# ===========================================
# ANNUAL SUMMARIES
# ===========================================

@router.get(
    "/cit/{year}",
    summary="Annual CIT summary",
    description=(
        "CIT and development levy from paid invoices and deductible expenses, less WHT "
        "credits. Read-only: the credit is previewed, not recorded."
    ),
    dependencies=[
        Depends(require_account_type(AccountType.COMPANY)),
        Depends(require_feature(Feature.CIT_TRACKING)),
    ],
)
async def get_cit_summary(
    year: int,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
) -> Dict[str, Any]:
    service = IncomeTaxService(db)
    return await service.get_cit_summary(owner, year)


@router.get(
    "/pit/{year}",
    summary="Annual PIT summary for a business",
    description="PIT bands applied to business profit, less WHT credits. Read-only: the credit is previewed.",
    dependencies=[Depends(require_account_type(AccountType.BUSINESS))],
)
async def get_pit_summary(
    year: int,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
) -> Dict[str, Any]:
    service = IncomeTaxService(db)
    return await service.get_pit_summary(owner, year)


@router.post(
    "/cit/{year}/apply-credits",
    summary="Apply WHT credits against CIT",
    description="Record the year's WHT credit against the CIT liability. Re-applying replaces the earlier figure.",
    dependencies=[
        Depends(require_account_type(AccountType.COMPANY)),
        Depends(require_feature(Feature.CIT_TRACKING)),
    ],
)
async def apply_cit_credits(
    year: int,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
) -> Dict[str, Any]:
    service = IncomeTaxService(db)
    return await service.get_cit_summary(owner, year, apply_credits=True)


@router.post(
    "/pit/{year}/apply-credits",
    summary="Apply WHT credits against business PIT",
    dependencies=[Depends(require_account_type(AccountType.BUSINESS))],
)
async def apply_pit_credits(
    year: int,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
) -> Dict[str, Any]:
    service = IncomeTaxService(db)
    return await service.get_pit_summary(owner, year, apply_credits=True)


# ===========================================
# CIT / PIT REMITTANCES
# ===========================================

CIT_GATES = [
    Depends(require_account_type(AccountType.COMPANY)),
    Depends(require_feature(Feature.CIT_TRACKING)),
]
PIT_GATES = [Depends(require_account_type(AccountType.BUSINESS))]


async def _mark_income_tax_remitted(db: AsyncSession, owner: OwnerRef, year: int, data: RemittanceMarkPaid):
    service = RemittanceService(db)
    return await service.mark_income_tax_remitted(
        owner,
        year,
        remittance_date=data.remittance_date,
        reference=data.reference,
        notes=data.notes,
        receipt_url=data.receipt_url,
    )


@router.get(
    "/cit-remittances",
    response_model=List[IncomeTaxRemittanceResponse],
    summary="List CIT remittances",
    dependencies=CIT_GATES,
)
async def list_cit_remittances(
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = RemittanceService(db)
    return await service.list_income_tax_remittances(owner)


@router.post(
    "/cit/{year}/remittance",
    response_model=IncomeTaxRemittanceResponse,
    summary="File the year's CIT",
    description=(
        "Snapshots the CIT summary as a remittance due June 30 of the following year, "
        "applying the year's WHT credits. A remitted year is returned unchanged."
    ),
    dependencies=CIT_GATES,
)
async def file_cit_remittance(
    year: int,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = RemittanceService(db)
    return await service.file_income_tax_remittance(owner, year)


@router.post(
    "/cit/{year}/remittance/remit",
    response_model=IncomeTaxRemittanceResponse,
    summary="Mark CIT remitted",
    dependencies=CIT_GATES,
)
async def mark_cit_remitted(
    year: int,
    data: RemittanceMarkPaid,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    return await _mark_income_tax_remitted(db, owner, year, data)


@router.get(
    "/pit-remittances",
    response_model=List[IncomeTaxRemittanceResponse],
    summary="List business PIT remittances",
    dependencies=PIT_GATES,
)
async def list_pit_remittances(
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = RemittanceService(db)
    return await service.list_income_tax_remittances(owner)


@router.post(
    "/pit/{year}/remittance",
    response_model=IncomeTaxRemittanceResponse,
    summary="File the year's business PIT",
    description="Snapshots the PIT summary as a remittance due March 31 of the following year.",
    dependencies=PIT_GATES,
)
async def file_pit_remittance(
    year: int,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = RemittanceService(db)
    return await service.file_income_tax_remittance(owner, year)


@router.post(
    "/pit/{year}/remittance/remit",
    response_model=IncomeTaxRemittanceResponse,
    summary="Mark business PIT remitted",
    dependencies=PIT_GATES,
)
async def mark_pit_remitted(
    year: int,
    data: RemittanceMarkPaid,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    return await _mark_income_tax_remitted(db, owner, year, data)
