"""Payroll service layer — absence-based take-home for a payroll month."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Mapping, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from liveops.attendance.absence import records_by_employee, unexcused_absence_dates
from liveops.attendance.service import (
    AttendanceConfigService,
    AttendanceService,
    local_now,
)
from liveops.attendance.workdays import payroll_window
from liveops.common.exceptions import ValidationException
from liveops.config import settings
from liveops.core_hr.models import Employee
from liveops.core_hr.service import EmployeeService, normalize_employee
from liveops.payroll.calculator import compute_take_home
from liveops.payroll.schemas import PayrollRunResponse, PayrollSlip

logger = logging.getLogger(__name__)


def _validate_period(year: int, month: int) -> None:
    if not 1 <= month <= 12:
        raise ValidationException({"month": ["Month must be between 1 and 12."]})
    if not 2000 <= year <= 2100:
        raise ValidationException({"year": ["Year is out of range."]})


def build_slip(
    employee: Employee,
    window_start: date,
    window_end: date,
    records: Sequence[Any],
    *,
    today: date,
    floor_date: date,
    holiday_map: Optional[Mapping[str, Sequence[str]]] = None,
    standard_work_days: int = 26,
) -> PayrollSlip:
    profile = normalize_employee(employee)
    absent_on = unexcused_absence_dates(
        profile, window_start, window_end, records, floor_date,
        today=today, holiday_map=holiday_map,
    )
    salary = profile.salary
    result = compute_take_home(
        salary, len(absent_on), standard_work_days=standard_work_days,
    )
    return PayrollSlip(
        employee_id=profile.id,
        employee_name=profile.name,
        job_title=profile.job_title,
        window_start=window_start,
        window_end=window_end,
        absence_count=len(absent_on),
        absence_dates=absent_on,
        gross_fixed=result.gross_fixed,
        overtime=salary.overtime,
        bonus=salary.bonus,
        holiday_bonus=salary.holiday_bonus,
        absence_deduction=result.absence_deduction,
        social_security=salary.social_security,
        income_tax=salary.income_tax,
        total_deduction=result.total_deduction,
        take_home=result.take_home,
        debt_deduction=salary.debt_deduction,
        other_deduction=salary.other_deduction,
        outstanding_debt=employee.outstanding_debt or 0,
    )


class PayrollService:
    """Business logic for payroll runs."""

    @staticmethod
    async def run(
        db: AsyncSession,
        company: str,
        year: int,
        month: int,
        *,
        today: Optional[date] = None,
    ) -> PayrollRunResponse:
        """Compute every active employee's slip for the 29th-to-28th window."""
        _validate_period(year, month)
        today = today or local_now().date()
        start, end = payroll_window(year, month)

        employees = await EmployeeService.list_employees(db, company)
        records = await AttendanceService.list_records(db, company, start, end)
        holidays = await AttendanceConfigService.get_weekly_holidays(db, company, today=today)
        by_employee = records_by_employee(records)

        slips = [
            build_slip(
                employee,
                start,
                end,
                by_employee.get(employee.id, []),
                today=today,
                floor_date=settings.ABSENCE_FLOOR_DATE,
                holiday_map=holidays.days,
                standard_work_days=settings.STANDARD_WORK_DAYS,
            )
            for employee in employees
        ]
        negative = [s.employee_id for s in slips if s.take_home < 0]
        if negative:
            logger.warning(
                "Negative take-home for %d employee(s) in %s %04d-%02d: %s",
                len(negative), company, year, month, ", ".join(negative),
            )
        logger.info(
            "Payroll run %s %04d-%02d: %d slips, window %s..%s",
            company, year, month, len(slips), start, end,
        )
        return PayrollRunResponse(
            company=company,
            year=year,
            month=month,
            window_start=start,
            window_end=end,
            slips=slips,
            total_take_home=sum(s.take_home for s in slips),
            negative_take_home=negative,
        )

    @staticmethod
    async def slip_for_employee(
        db: AsyncSession,
        employee_id: str,
        year: int,
        month: int,
        *,
        today: Optional[date] = None,
    ) -> PayrollSlip:
        _validate_period(year, month)
        today = today or local_now().date()
        start, end = payroll_window(year, month)

        employee = await EmployeeService.get_employee(db, employee_id)
        records = await AttendanceService.list_records(
            db, employee.company, start, end, employee_id=employee.id,
        )
        holidays = await AttendanceConfigService.get_weekly_holidays(
            db, employee.company, today=today,
        )
        return build_slip(
            employee,
            start,
            end,
            records,
            today=today,
            floor_date=settings.ABSENCE_FLOOR_DATE,
            holiday_map=holidays.days,
            standard_work_days=settings.STANDARD_WORK_DAYS,
        )
