"""
NaijaTax Compliance - Payroll Service

Payroll orchestration for Companies and Businesses.

Nigerian Statutory Requirements:
1. PAYE (Pay As You Earn) - Personal Income Tax
   - Regime bands by tax year (see tax_calculators/regime.py)
   - Remitted by the 10th of the following month

2. Pension (Contributory Pension Scheme)
   - Employee: 8% of gross
   - Employer: 10% of gross (employer cost, never deducted from pay)

3. NHF (National Housing Fund) - 2.5% of gross
4. NHIS (National Health Insurance Scheme) - 5% of gross

5. ITF (Industrial Training Fund)
   - 1% of payroll
   - Companies with 5+ employees or ₦50M+ turnover

Workflow: a period's schedule moves DRAFT -> APPROVED -> SUBMITTED (or
straight from DRAFT to SUBMITTED). Records in a submitted period are frozen;
salary changes only flow into draft and approved periods.
"""

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.payroll import (
    Employee, Payroll, PayrollSchedule, PayrollStatus, PAYERemittance,
)
from app.models.tax import CreditTaxType, RemittanceStatus, WHTCredit
from app.services.entity_service import EntityService
from app.services.tax_calculators.itf_service import ITFCalculator
from app.services.tax_calculators.paye_service import PAYECalculator, PayrollBreakdown
from app.services.tax_calculators.regime import ZERO, round_kobo
from app.services.wht_credit_ledger import WHTCreditLedgerService
from app.utils.error_handling import (
    DuplicateEntryException,
    EmployeeNotFoundException,
    ErrorCode,
    InvalidStatusTransitionException,
    NotFoundException,
    TaxPeriodClosedException,
    ValidationException,
)
from app.utils.owner import OwnerRef
from app.utils.periods import paye_deadline, validate_amount, validate_period, validate_tax_year

logger = logging.getLogger(__name__)


# ===========================================
# CONSTANTS
# ===========================================

# Forward-only workflow; anything not listed (other than a no-op) is rejected
ALLOWED_TRANSITIONS = {
    PayrollStatus.DRAFT: {PayrollStatus.APPROVED, PayrollStatus.SUBMITTED},
    PayrollStatus.APPROVED: {PayrollStatus.SUBMITTED},
    PayrollStatus.SUBMITTED: set(),
}

# Employee fields that change the payroll figures
RECALCULATION_FIELDS = ("salary", "has_pension", "has_nhf", "has_nhis", "annual_rent_paid")

EMPLOYEE_FIELDS = (
    "employee_number", "first_name", "last_name", "email", "tin", "job_title",
    "hire_date", "salary", "has_pension", "has_nhf", "has_nhis", "annual_rent_paid",
)


class PayrollService:
    """
    Payroll service for managing employees and processing payroll.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.paye_calculator = PAYECalculator()
        self.credit_ledger = WHTCreditLedgerService(db)

    # ===========================================
    # EMPLOYEE MANAGEMENT
    # ===========================================

    async def create_employee(self, owner: OwnerRef, data: Dict[str, Any]) -> Employee:
        """Create a new employee."""
        data = {key: value for key, value in data.items() if key in EMPLOYEE_FIELDS}
        data["salary"] = validate_amount(data.get("salary"), field="salary")
        data["annual_rent_paid"] = validate_amount(data.get("annual_rent_paid") or ZERO, field="annual_rent_paid")

        # Check for duplicate staff number
        if data.get("employee_number"):
            existing = await self.db.execute(
                select(Employee.id)
                .where(*owner.filters(Employee))
                .where(Employee.employee_number == data["employee_number"])
            )
            if existing.scalar_one_or_none():
                raise DuplicateEntryException("Employee", "employee_number", data["employee_number"])

        employee = Employee(**owner.assignments(), **data)
        self.db.add(employee)
        await self.db.commit()
        await self.db.refresh(employee)

        logger.info(f"Created employee {employee.full_name} for {owner}")
        return employee

    async def get_employee(self, owner: OwnerRef, employee_id: uuid.UUID) -> Optional[Employee]:
        """Get employee by ID."""
        result = await self.db.execute(
            select(Employee)
            .where(Employee.id == employee_id)
            .where(*owner.filters(Employee))
        )
        return result.scalar_one_or_none()

    async def list_employees(self, owner: OwnerRef, active_only: bool = False) -> List[Employee]:
        query = select(Employee).where(*owner.filters(Employee))
        if active_only:
            query = query.where(Employee.is_active.is_(True))
        result = await self.db.execute(query.order_by(Employee.last_name, Employee.first_name))
        return list(result.scalars().all())

    async def count_active_employees(self, owner: OwnerRef) -> int:
        result = await self.db.execute(
            select(func.count(Employee.id))
            .where(*owner.filters(Employee))
            .where(Employee.is_active.is_(True))
        )
        return result.scalar() or 0

    async def update_employee(
        self,
        owner: OwnerRef,
        employee_id: uuid.UUID,
        data: Dict[str, Any],
    ) -> Optional[Employee]:
        """
        Update employee details.

        A change to salary, a benefit flag or rent paid recalculates the
        employee's draft and approved payroll records.
        """
        employee = await self.get_employee(owner, employee_id)
        if not employee:
            return None

        if data.get("salary") is not None:
            data["salary"] = validate_amount(data["salary"], field="salary")
        if data.get("annual_rent_paid") is not None:
            data["annual_rent_paid"] = validate_amount(data["annual_rent_paid"], field="annual_rent_paid")

        needs_recalculation = False
        for key, value in data.items():
            if value is None or key not in EMPLOYEE_FIELDS:
                continue
            if key in RECALCULATION_FIELDS and getattr(employee, key) != value:
                needs_recalculation = True
            setattr(employee, key, value)

        await self.db.commit()

        if needs_recalculation:
            await self.recalculate_draft_payrolls_for_employee(employee.id, employee.salary, owner)

        await self.db.refresh(employee)
        return employee

    async def deactivate_employee(self, owner: OwnerRef, employee_id: uuid.UUID) -> Employee:
        """Soft delete; existing payroll records are kept."""
        employee = await self.get_employee(owner, employee_id)
        if not employee:
            raise EmployeeNotFoundException(employee_id)

        employee.is_active = False
        await self.db.commit()
        await self.db.refresh(employee)

        logger.info(f"Deactivated employee {employee_id} for {owner}")
        return employee

    # ===========================================
    # PAYROLL GENERATION
    # ===========================================

    def calculate_employee_payroll(self, employee: Employee, gross_salary: Decimal, tax_year: int) -> PayrollBreakdown:
        return self.paye_calculator.calculate_payroll(
            gross_salary,
            tax_year,
            has_pension=employee.has_pension,
            has_nhf=employee.has_nhf,
            has_nhis=employee.has_nhis,
            annual_rent_paid=employee.annual_rent_paid or ZERO,
        )

    async def get_payroll(
        self,
        owner: OwnerRef,
        employee_id: uuid.UUID,
        month: int,
        year: int,
    ) -> Optional[Payroll]:
        result = await self.db.execute(
            select(Payroll)
            .where(*owner.filters(Payroll))
            .where(Payroll.employee_id == employee_id)
            .where(Payroll.payroll_month == month)
            .where(Payroll.payroll_year == year)
        )
        return result.scalar_one_or_none()

    async def list_payrolls(self, owner: OwnerRef, month: int, year: int) -> List[Payroll]:
        result = await self.db.execute(
            select(Payroll)
            .where(*owner.filters(Payroll))
            .where(Payroll.payroll_month == month)
            .where(Payroll.payroll_year == year)
            .order_by(Payroll.created_at)
        )
        return list(result.scalars().all())

    async def generate_payroll(
        self,
        owner: OwnerRef,
        employee_id: uuid.UUID,
        month: int,
        year: int,
    ) -> Payroll:
        """
        Generate one employee's payroll for a period.

        Idempotent: an existing record for (owner, employee, month, year) is
        returned unchanged.
        """
        validate_period(month, year)

        existing = await self.get_payroll(owner, employee_id, month, year)
        if existing:
            return existing

        employee = await self.get_employee(owner, employee_id)
        if not employee or not employee.is_active:
            raise EmployeeNotFoundException(employee_id)

        schedule = await self.get_payroll_schedule(owner, month, year)
        if schedule and schedule.status == PayrollStatus.SUBMITTED:
            raise TaxPeriodClosedException(month, year)

        breakdown = self.calculate_employee_payroll(employee, employee.salary, year)

        payroll = Payroll(
            **owner.assignments(),
            employee_id=employee.id,
            payroll_month=month,
            payroll_year=year,
            status=PayrollStatus.DRAFT,
        )
        self._apply_breakdown(payroll, breakdown)
        self.db.add(payroll)

        try:
            await self.db.commit()
        except IntegrityError:
            # Another request generated the same period first
            await self.db.rollback()
            existing = await self.get_payroll(owner, employee_id, month, year)
            if existing:
                return existing
            raise

        await self.db.refresh(payroll)
        await self.ensure_payroll_schedule(owner, month, year)

        logger.info(f"Generated payroll {month:02d}/{year} for employee {employee_id} ({owner})")
        return payroll

    async def generate_payroll_for_all_employees(
        self,
        owner: OwnerRef,
        month: int,
        year: int,
    ) -> Dict[str, Any]:
        """
        Generate payroll for every active employee of the owner.

        Employees are processed one after another; a failure is logged and
        recorded, and the batch carries on with the next employee.
        """
        validate_period(month, year)

        result = await self.db.execute(
            select(Employee.id)
            .where(*owner.filters(Employee))
            .where(Employee.is_active.is_(True))
            .order_by(Employee.last_name, Employee.first_name)
        )
        employee_ids = list(result.scalars().all())

        generated = []
        failures = []
        for employee_id in employee_ids:
            try:
                generated.append(await self.generate_payroll(owner, employee_id, month, year))
            except Exception as e:
                await self.db.rollback()
                logger.error(f"Payroll generation failed for employee {employee_id} ({month:02d}/{year}): {e}")
                failures.append({"employee_id": employee_id, "error": str(e)})

        if failures:
            # Rollback expired the records generated before the failure
            for payroll in generated:
                await self.db.refresh(payroll)

        logger.info(
            f"Generated {len(generated)} payroll records for {owner} {month:02d}/{year}, "
            f"{len(failures)} failed"
        )
        return {"generated": generated, "failures": failures}

    # ===========================================
    # PAYROLL SCHEDULE
    # ===========================================

    async def get_payroll_schedule(self, owner: OwnerRef, month: int, year: int) -> Optional[PayrollSchedule]:
        result = await self.db.execute(
            select(PayrollSchedule)
            .where(*owner.filters(PayrollSchedule))
            .where(PayrollSchedule.month == month)
            .where(PayrollSchedule.year == year)
        )
        return result.scalar_one_or_none()

    async def list_payroll_schedules(self, owner: OwnerRef, year: Optional[int] = None) -> List[PayrollSchedule]:
        query = select(PayrollSchedule).where(*owner.filters(PayrollSchedule))
        if year:
            query = query.where(PayrollSchedule.year == year)
        result = await self.db.execute(query.order_by(PayrollSchedule.year, PayrollSchedule.month))
        return list(result.scalars().all())

    async def ensure_payroll_schedule(self, owner: OwnerRef, month: int, year: int) -> PayrollSchedule:
        """
        Create the period's schedule if missing and refresh its PAYE remittance.

        An existing schedule keeps its status.
        """
        validate_period(month, year)

        schedule = await self.get_payroll_schedule(owner, month, year)
        if schedule is None:
            schedule = PayrollSchedule(
                **owner.assignments(),
                month=month,
                year=year,
                status=PayrollStatus.DRAFT,
            )
            self.db.add(schedule)

        totals = await self.calculate_payroll_schedule_totals(owner, month, year)
        await self._upsert_paye_remittance(owner, month, year, totals["total_paye"])

        await self.db.commit()
        await self.db.refresh(schedule)
        return schedule

    async def calculate_payroll_schedule_totals(self, owner: OwnerRef, month: int, year: int) -> Dict[str, Any]:
        """Period totals aggregated from the payroll records, plus ITF."""
        result = await self.db.execute(
            select(
                func.count(Payroll.id),
                func.coalesce(func.sum(Payroll.gross_salary), 0),
                func.coalesce(func.sum(Payroll.employee_pension), 0),
                func.coalesce(func.sum(Payroll.employer_pension), 0),
                func.coalesce(func.sum(Payroll.nhf), 0),
                func.coalesce(func.sum(Payroll.nhis), 0),
                func.coalesce(func.sum(Payroll.paye), 0),
                func.coalesce(func.sum(Payroll.net_salary), 0),
            )
            .where(*owner.filters(Payroll))
            .where(Payroll.payroll_month == month)
            .where(Payroll.payroll_year == year)
        )
        row = result.one()
        count, gross, pension, employer_pension, nhf, nhis, paye, net = row
        total_gross = round_kobo(Decimal(str(gross)))

        headcount = await self.count_active_employees(owner)

        async def turnover_lookup() -> Decimal:
            return await EntityService(self.db).calculate_annual_turnover(owner, year)

        itf = await ITFCalculator.calculate_for_owner(owner, total_gross, headcount, year, turnover_lookup)

        return {
            "month": month,
            "year": year,
            "employee_count": count,
            "total_gross": total_gross,
            "total_employee_pension": round_kobo(Decimal(str(pension))),
            "total_employer_pension": round_kobo(Decimal(str(employer_pension))),
            "total_nhf": round_kobo(Decimal(str(nhf))),
            "total_nhis": round_kobo(Decimal(str(nhis))),
            "total_paye": round_kobo(Decimal(str(paye))),
            "total_net": round_kobo(Decimal(str(net))),
            "itf": itf,
        }

    async def update_payroll_schedule_status(
        self,
        owner: OwnerRef,
        month: int,
        year: int,
        new_status: Any,
    ) -> PayrollSchedule:
        """
        Move a period's schedule forward and propagate the status to its
        payroll records. Setting the current status again is a no-op.
        """
        try:
            new_status = PayrollStatus(new_status)
        except ValueError:
            raise ValidationException(
                message=f"Invalid payroll status: {new_status}",
                field="status",
                code=ErrorCode.INVALID_STATUS,
                details={"allowed": [s.value for s in PayrollStatus]},
            )

        schedule = await self.get_payroll_schedule(owner, month, year)
        if schedule is None:
            raise NotFoundException(
                "Payroll schedule",
                message=f"No payroll schedule for {month:02d}/{year}",
            )

        current = schedule.status
        if current == new_status:
            return schedule
        if new_status not in ALLOWED_TRANSITIONS[current]:
            raise InvalidStatusTransitionException(current.value, new_status.value)

        schedule.status = new_status
        await self.db.execute(
            update(Payroll)
            .where(*owner.filters(Payroll))
            .where(Payroll.payroll_month == month)
            .where(Payroll.payroll_year == year)
            .values(status=new_status)
            .execution_options(synchronize_session="fetch")
        )
        await self.db.commit()
        await self.db.refresh(schedule)

        logger.info(f"Payroll {month:02d}/{year} for {owner}: {current.value} -> {new_status.value}")
        return schedule

    # ===========================================
    # RECALCULATION
    # ===========================================

    async def recalculate_draft_payrolls_for_employee(
        self,
        employee_id: uuid.UUID,
        new_salary: Any,
        owner: OwnerRef,
    ) -> List[Payroll]:
        """
        Recompute an employee's payroll at a new salary.

        Records in draft or approved periods are recomputed; submitted
        periods are left as filed.
        """
        new_salary = validate_amount(new_salary, field="salary")

        employee = await self.get_employee(owner, employee_id)
        if not employee:
            raise EmployeeNotFoundException(employee_id)
        employee.salary = new_salary

        result = await self.db.execute(
            select(Payroll)
            .where(*owner.filters(Payroll))
            .where(Payroll.employee_id == employee_id)
        )
        payrolls = list(result.scalars().all())

        submitted_periods = {
            (schedule.month, schedule.year)
            for schedule in await self.list_payroll_schedules(owner)
            if schedule.status == PayrollStatus.SUBMITTED
        }

        updated = []
        for payroll in payrolls:
            period = (payroll.payroll_month, payroll.payroll_year)
            if period in submitted_periods or payroll.status == PayrollStatus.SUBMITTED:
                continue
            breakdown = self.calculate_employee_payroll(employee, new_salary, payroll.payroll_year)
            self._apply_breakdown(payroll, breakdown)
            updated.append(payroll)

        await self.db.commit()

        for month, year in sorted({(p.payroll_month, p.payroll_year) for p in updated}):
            await self.ensure_payroll_schedule(owner, month, year)

        logger.info(f"Recalculated {len(updated)} payroll records for employee {employee_id}")
        return updated

    # ===========================================
    # PAYE REMITTANCE
    # ===========================================

    async def get_paye_remittance(self, owner: OwnerRef, month: int, year: int) -> Optional[PAYERemittance]:
        result = await self.db.execute(
            select(PAYERemittance)
            .where(*owner.filters(PAYERemittance))
            .where(PAYERemittance.remittance_month == month)
            .where(PAYERemittance.remittance_year == year)
        )
        return result.scalar_one_or_none()

    async def list_paye_remittances(self, owner: OwnerRef, year: Optional[int] = None) -> List[PAYERemittance]:
        query = select(PAYERemittance).where(*owner.filters(PAYERemittance))
        if year:
            query = query.where(PAYERemittance.remittance_year == year)
        result = await self.db.execute(
            query.order_by(PAYERemittance.remittance_year, PAYERemittance.remittance_month)
        )
        return list(result.scalars().all())

    async def mark_paye_remitted(
        self,
        owner: OwnerRef,
        month: int,
        year: int,
        remittance_date: date,
        reference: Optional[str] = None,
        notes: Optional[str] = None,
        receipt_url: Optional[str] = None,
    ) -> PAYERemittance:
        remittance = await self.get_paye_remittance(owner, month, year)
        if remittance is None:
            raise NotFoundException("PAYE remittance", message=f"No PAYE remittance for {month:02d}/{year}")

        remittance.status = RemittanceStatus.REMITTED
        remittance.remittance_date = remittance_date
        remittance.remittance_reference = reference
        remittance.notes = notes
        remittance.receipt_url = receipt_url
        await self.db.commit()
        await self.db.refresh(remittance)

        logger.info(f"PAYE for {month:02d}/{year} marked remitted for {owner}")
        return remittance

    # ===========================================
    # ANNUAL PIT
    # ===========================================

    async def add_employee_wht_credit(
        self,
        owner: OwnerRef,
        employee_id: uuid.UUID,
        tax_year: int,
        amount: Any,
    ) -> WHTCredit:
        """Credit WHT suffered by an employee (e.g. from a certificate) for the year."""
        employee = await self.get_employee(owner, employee_id)
        if not employee:
            raise EmployeeNotFoundException(employee_id)

        credit = await self.credit_ledger.add_credit(employee.id, tax_year, amount)
        logger.info(f"Added NGN {credit.amount} WHT credit for employee {employee_id} ({tax_year})")
        return credit

    async def get_employee_wht_credits(
        self,
        owner: OwnerRef,
        employee_id: uuid.UUID,
        tax_year: int,
    ) -> Dict[str, Any]:
        employee = await self.get_employee(owner, employee_id)
        if not employee:
            raise EmployeeNotFoundException(employee_id)

        return {
            "taxpayer_id": employee.id,
            "tax_year": tax_year,
            "total_credits": await self.credit_ledger.get_total_credits(employee.id, tax_year),
            "available_credits": await self.credit_ledger.get_available_credits(employee.id, tax_year),
            "credits": await self.credit_ledger.list_credits(employee.id, tax_year),
        }

    async def calculate_annual_pit_with_wht_credits(
        self,
        taxpayer_id: uuid.UUID,
        annual_taxable_income: Any,
        tax_year: int,
        apply_credits: bool = False,
    ) -> Dict[str, Any]:
        """
        Annual PIT with WHT credits offset.

        The credit is previewed unless ``apply_credits`` is set, in which case
        it is recorded in the ledger. If the credit ledger fails the PIT is
        reported with no credit applied.
        """
        annual_taxable_income = validate_amount(annual_taxable_income, field="annual_taxable_income")
        tax_year = validate_tax_year(tax_year)
        annual_pit = self.paye_calculator.calculate_annual_pit(annual_taxable_income, tax_year)

        credit_applied = ZERO
        credits_applied_ok = True
        try:
            offset = await self.credit_ledger.calculate_tax_after_credit(
                taxpayer_id, tax_year, annual_pit, CreditTaxType.PIT, commit=apply_credits,
            )
            credit_applied = offset["credit_applied"]
        except Exception as e:
            await self.db.rollback()
            credits_applied_ok = False
            logger.error(f"WHT credit ledger unavailable for taxpayer {taxpayer_id} ({tax_year}), no credit applied: {e}")

        credit_applied = min(credit_applied, annual_pit)
        return {
            "taxpayer_id": taxpayer_id,
            "tax_year": tax_year,
            "annual_taxable_income": round_kobo(annual_taxable_income),
            "annual_pit_before_wht": annual_pit,
            "wht_credit_applied": round_kobo(credit_applied),
            "annual_pit_after_wht": round_kobo(max(ZERO, annual_pit - credit_applied)),
            "wht_credits_applied": credits_applied_ok,
            "credits_committed": apply_credits and credits_applied_ok,
        }

    async def calculate_annual_pit_for_all_employees(
        self,
        owner: OwnerRef,
        year: int,
        apply_credits: bool = False,
    ) -> Dict[str, Any]:
        """Annual PIT per employee from the year's payroll records."""
        validate_tax_year(year)

        result = await self.db.execute(
            select(
                Employee.id,
                Employee.first_name,
                Employee.last_name,
                func.sum(Payroll.taxable_income),
                func.sum(Payroll.paye),
            )
            .join(Payroll, Payroll.employee_id == Employee.id)
            .where(*owner.filters(Payroll))
            .where(Payroll.payroll_year == year)
            .group_by(Employee.id, Employee.first_name, Employee.last_name)
            .order_by(Employee.last_name, Employee.first_name)
        )
        rows = result.all()

        employees = []
        total_before = ZERO
        total_after = ZERO
        for employee_id, first_name, last_name, taxable, paye in rows:
            pit = await self.calculate_annual_pit_with_wht_credits(
                employee_id, Decimal(str(taxable or 0)), year, apply_credits=apply_credits,
            )
            pit["employee_name"] = f"{first_name} {last_name}"
            pit["paye_withheld"] = round_kobo(Decimal(str(paye or 0)))
            employees.append(pit)
            total_before += pit["annual_pit_before_wht"]
            total_after += pit["annual_pit_after_wht"]

        return {
            "tax_year": year,
            "employee_count": len(employees),
            "total_pit_before_wht": round_kobo(total_before),
            "total_pit_after_wht": round_kobo(total_after),
            "employees": employees,
        }

    # ===========================================
    # HELPERS
    # ===========================================

    def _apply_breakdown(self, payroll: Payroll, breakdown: PayrollBreakdown) -> None:
        payroll.tax_year = breakdown.tax_year
        payroll.gross_salary = breakdown.gross_salary
        payroll.employee_pension = breakdown.employee_pension
        payroll.employer_pension = breakdown.employer_pension
        payroll.nhf = breakdown.nhf
        payroll.nhis = breakdown.nhis
        payroll.cra = breakdown.cra
        payroll.rent_relief = breakdown.rent_relief
        payroll.taxable_income = breakdown.taxable_income
        payroll.paye = breakdown.paye
        payroll.net_salary = breakdown.net_salary

    async def _upsert_paye_remittance(
        self,
        owner: OwnerRef,
        month: int,
        year: int,
        total_paye: Decimal,
    ) -> PAYERemittance:
        """Remitted periods are frozen; others become overdue after the deadline."""
        deadline = paye_deadline(month, year)
        remittance = await self.get_paye_remittance(owner, month, year)
        if remittance is None:
            remittance = PAYERemittance(
                **owner.assignments(),
                remittance_month=month,
                remittance_year=year,
                remittance_deadline=deadline,
                status=RemittanceStatus.PENDING,
            )
            self.db.add(remittance)
        elif remittance.status == RemittanceStatus.REMITTED:
            return remittance

        remittance.total_paye = total_paye
        remittance.status = (
            RemittanceStatus.OVERDUE if date.today() > deadline else RemittanceStatus.PENDING
        )
        return remittance
