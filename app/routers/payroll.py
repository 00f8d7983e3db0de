"""
NaijaTax Compliance - Payroll Router

API endpoints for payroll management with Nigerian compliance.

PLAN REQUIREMENT: Standard plan or above
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_owner_ref, require_feature
from app.schemas.payroll import (
    AnnualPITReport,
    EmployeeCreate,
    EmployeeResponse,
    EmployeeUpdate,
    EmployeeWHTCreditCreate,
    PAYERemittanceResponse,
    PayrollBatchResponse,
    PayrollGenerateRequest,
    PayrollPeriod,
    PayrollResponse,
    PayrollScheduleDetail,
    PayrollScheduleResponse,
    RemittanceMarkPaid,
    ScheduleStatusUpdate,
)
from app.schemas.tax import WHTCreditBalance, WHTCreditResponse
from app.services.feature_flags import Feature
from app.services.payroll_service import PayrollService
from app.utils.error_handling import EmployeeNotFoundException, NotFoundException
from app.utils.owner import OwnerRef


router = APIRouter(dependencies=[Depends(require_feature(Feature.PAYROLL))])


# ===========================================
# EMPLOYEE ENDPOINTS
# ===========================================

@router.post(
    "/employees",
    response_model=EmployeeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new employee",
)
async def create_employee(
    data: EmployeeCreate,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = PayrollService(db)
    return await service.create_employee(owner, data.model_dump())


@router.get(
    "/employees",
    response_model=List[EmployeeResponse],
    summary="List employees",
)
async def list_employees(
    active_only: bool = Query(False),
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = PayrollService(db)
    return await service.list_employees(owner, active_only=active_only)


@router.get(
    "/employees/{employee_id}",
    response_model=EmployeeResponse,
    summary="Get employee",
)
async def get_employee(
    employee_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = PayrollService(db)
    employee = await service.get_employee(owner, employee_id)
    if not employee:
        raise EmployeeNotFoundException(employee_id)
    return employee


@router.patch(
    "/employees/{employee_id}",
    response_model=EmployeeResponse,
    summary="Update employee",
    description="Salary and benefit changes recalculate payroll in periods that are not yet submitted.",
)
async def update_employee(
    employee_id: uuid.UUID,
    data: EmployeeUpdate,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = PayrollService(db)
    employee = await service.update_employee(owner, employee_id, data.model_dump(exclude_unset=True))
    if not employee:
        raise EmployeeNotFoundException(employee_id)
    return employee


@router.delete(
    "/employees/{employee_id}",
    response_model=EmployeeResponse,
    summary="Deactivate employee",
)
async def deactivate_employee(
    employee_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = PayrollService(db)
    return await service.deactivate_employee(owner, employee_id)


# ===========================================
# PAYROLL GENERATION
# ===========================================

@router.post(
    "/generate",
    response_model=PayrollResponse,
    summary="Generate payroll for one employee",
    description="Idempotent: an existing record for the period is returned unchanged.",
)
async def generate_payroll(
    data: PayrollGenerateRequest,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = PayrollService(db)
    return await service.generate_payroll(owner, data.employee_id, data.month, data.year)


@router.post(
    "/generate-all",
    response_model=PayrollBatchResponse,
    summary="Generate payroll for all active employees",
)
async def generate_payroll_for_all(
    data: PayrollPeriod,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = PayrollService(db)
    return await service.generate_payroll_for_all_employees(owner, data.month, data.year)


@router.get(
    "/records",
    response_model=List[PayrollResponse],
    summary="List payroll records for a period",
)
async def list_payrolls(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(...),
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = PayrollService(db)
    return await service.list_payrolls(owner, month, year)


# ===========================================
# SCHEDULES
# ===========================================

@router.get(
    "/schedules",
    response_model=List[PayrollScheduleResponse],
    summary="List payroll schedules",
)
async def list_schedules(
    year: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = PayrollService(db)
    return await service.list_payroll_schedules(owner, year=year)


@router.get(
    "/schedules/{year}/{month}",
    response_model=PayrollScheduleDetail,
    summary="Get payroll schedule with totals",
)
async def get_schedule(
    year: int,
    month: int,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = PayrollService(db)
    schedule = await service.get_payroll_schedule(owner, month, year)
    if not schedule:
        raise NotFoundException("Payroll schedule", message=f"No payroll schedule for {month:02d}/{year}")
    totals = await service.calculate_payroll_schedule_totals(owner, month, year)
    return {"schedule": schedule, "totals": totals}


@router.post(
    "/schedules/{year}/{month}/status",
    response_model=PayrollScheduleResponse,
    summary="Move payroll schedule status",
    description="Allowed: draft -> approved, draft -> submitted, approved -> submitted.",
)
async def update_schedule_status(
    year: int,
    month: int,
    data: ScheduleStatusUpdate,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = PayrollService(db)
    return await service.update_payroll_schedule_status(owner, month, year, data.status)


# ===========================================
# PAYE REMITTANCES
# ===========================================

@router.get(
    "/remittances",
    response_model=List[PAYERemittanceResponse],
    summary="List PAYE remittances",
)
async def list_remittances(
    year: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = PayrollService(db)
    return await service.list_paye_remittances(owner, year=year)


@router.post(
    "/remittances/{year}/{month}/remit",
    response_model=PAYERemittanceResponse,
    summary="Mark PAYE remitted",
)
async def mark_remitted(
    year: int,
    month: int,
    data: RemittanceMarkPaid,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = PayrollService(db)
    return await service.mark_paye_remitted(
        owner,
        month,
        year,
        remittance_date=data.remittance_date,
        reference=data.reference,
        notes=data.notes,
        receipt_url=data.receipt_url,
    )


# ===========================================
# ANNUAL PIT
# ===========================================

@router.get(
    "/annual-pit/{year}",
    response_model=AnnualPITReport,
    summary="Annual PIT for all employees",
    description=(
        "Annual PIT from the year's payroll with each employee's WHT credit offset. "
        "Read-only: the credit is previewed, not recorded."
    ),
)
async def annual_pit(
    year: int,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = PayrollService(db)
    return await service.calculate_annual_pit_for_all_employees(owner, year)


@router.post(
    "/annual-pit/{year}/apply-credits",
    response_model=AnnualPITReport,
    summary="Apply WHT credits against annual PIT",
    description=(
        "Record each employee's WHT credit against their annual PIT in the ledger. "
        "Re-applying for the same year replaces the earlier figures."
    ),
)
async def apply_annual_pit_credits(
    year: int,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = PayrollService(db)
    return await service.calculate_annual_pit_for_all_employees(owner, year, apply_credits=True)


@router.post(
    "/employees/{employee_id}/wht-credits",
    response_model=WHTCreditResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add WHT credit for an employee",
)
async def add_employee_wht_credit(
    employee_id: uuid.UUID,
    data: EmployeeWHTCreditCreate,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = PayrollService(db)
    return await service.add_employee_wht_credit(owner, employee_id, data.tax_year, data.amount)


@router.get(
    "/employees/{employee_id}/wht-credits/{year}",
    response_model=WHTCreditBalance,
    summary="Employee WHT credit balance for a year",
)
async def get_employee_wht_credits(
    employee_id: uuid.UUID,
    year: int,
    db: AsyncSession = Depends(get_async_session),
    owner: OwnerRef = Depends(get_owner_ref),
):
    service = PayrollService(db)
    return await service.get_employee_wht_credits(owner, employee_id, year)
