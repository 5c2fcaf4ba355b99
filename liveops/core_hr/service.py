"""Core HR service layer — roster CRUD and employee normalisation.

``normalize_employee`` is the single place where free-text job titles are
turned into capability flags and hire-date text into a ``date``; every
engine downstream works from the resulting ``EmployeeProfile``.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from liveops.common.audit import create_audit_entry
from liveops.common.constants import (
    ROLE_KEYWORD_BIZDEV,
    ROLE_KEYWORD_CREATOR,
    ROLE_KEYWORD_HOST,
    ROLE_KEYWORD_LIVE_HOST,
)
from liveops.common.dates import calculate_tenure, parse_flexible_date
from liveops.common.exceptions import ConflictError, NotFoundException
from liveops.core_hr.models import Employee
from liveops.core_hr.schemas import (
    EmployeeCapabilities,
    EmployeeCreate,
    EmployeeProfile,
    EmployeeResponse,
    EmployeeUpdate,
    SalaryConfig,
)

logger = logging.getLogger(__name__)


def resolve_capabilities(job_title: Optional[str]) -> EmployeeCapabilities:
    """Case-insensitive substring match of the role keywords.

    A title matching both "creator" and "host" gets both flags.
    """
    title = (job_title or "").lower()
    return EmployeeCapabilities(
        is_creator=ROLE_KEYWORD_CREATOR in title,
        is_host=ROLE_KEYWORD_HOST in title,
        is_live_streaming_host=ROLE_KEYWORD_LIVE_HOST in title,
        is_business_development=ROLE_KEYWORD_BIZDEV in title,
    )


def normalize_employee(employee: Employee) -> EmployeeProfile:
    return EmployeeProfile(
        id=employee.id,
        name=employee.name,
        job_title=employee.job_title or "",
        division=employee.division,
        company=employee.company,
        hire_date=parse_flexible_date(employee.hire_date),
        is_remote_allowed=bool(employee.is_remote_allowed),
        salary=SalaryConfig.from_blob(employee.salary_config),
        capabilities=resolve_capabilities(employee.job_title),
    )


class EmployeeService:
    """Async roster operations."""

    @staticmethod
    def to_response(employee: Employee, today: Optional[date] = None) -> EmployeeResponse:
        profile = normalize_employee(employee)
        tenure = calculate_tenure(profile.hire_date, today or date.today())
        return EmployeeResponse(
            id=employee.id,
            employee_code=employee.employee_code,
            name=employee.name,
            email=employee.email,
            job_title=profile.job_title,
            division=employee.division,
            company=employee.company,
            hire_date=profile.hire_date,
            tenure_years=tenure[0] if tenure else None,
            tenure_months=tenure[1] if tenure else None,
            is_remote_allowed=profile.is_remote_allowed,
            capabilities=profile.capabilities,
            salary=profile.salary,
        )

    @staticmethod
    async def get_employee(db: AsyncSession, employee_id: str) -> Employee:
        employee = await db.get(Employee, employee_id)
        if employee is None:
            raise NotFoundException("Employee", employee_id)
        return employee

    @staticmethod
    async def list_employees(
        db: AsyncSession,
        company: str,
        *,
        is_active: Optional[bool] = True,
    ) -> list[Employee]:
        stmt = select(Employee).where(Employee.company == company)
        if is_active is not None:
            stmt = stmt.where(Employee.is_active == is_active)
        stmt = stmt.order_by(Employee.name)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_profiles(db: AsyncSession, company: str) -> list[EmployeeProfile]:
        employees = await EmployeeService.list_employees(db, company)
        return [normalize_employee(e) for e in employees]

    @staticmethod
    async def create_employee(db: AsyncSession, data: EmployeeCreate) -> Employee:
        if await db.get(Employee, data.id) is not None:
            raise ConflictError("id", data.id)
        employee = Employee(
            id=data.id,
            employee_code=data.employee_code,
            name=data.name,
            email=data.email,
            job_title=data.job_title,
            division=data.division,
            company=data.company,
            hire_date=data.hire_date,
            is_remote_allowed=data.is_remote_allowed,
            salary_config=SalaryConfig.from_blob(data.salary_config).model_dump(),
            outstanding_debt=0,
            is_active=True,
        )
        db.add(employee)
        await db.flush()
        logger.info("Created employee %s (%s)", employee.id, employee.company)
        return employee

    @staticmethod
    async def update_employee(
        db: AsyncSession,
        employee_id: str,
        data: EmployeeUpdate,
        *,
        actor_id: Optional[str] = None,
    ) -> Employee:
        employee = await EmployeeService.get_employee(db, employee_id)
        changes = data.model_dump(exclude_unset=True)
        old_values = {k: getattr(employee, k) for k in changes}

        if "salary_config" in changes:
            changes["salary_config"] = SalaryConfig.from_blob(
                changes["salary_config"]
            ).model_dump()

        for field, value in changes.items():
            setattr(employee, field, value)
        await db.flush()

        await create_audit_entry(
            db,
            action="update",
            entity_type="employee",
            entity_id=employee.id,
            actor_id=actor_id,
            old_values=old_values,
            new_values=changes,
        )
        logger.info("Updated employee %s fields=%s", employee.id, sorted(changes))
        return employee

    @staticmethod
    async def set_remote_allowed(
        db: AsyncSession,
        employee_id: str,
        allowed: bool,
        *,
        actor_id: Optional[str] = None,
    ) -> Employee:
        return await EmployeeService.update_employee(
            db,
            employee_id,
            EmployeeUpdate(is_remote_allowed=allowed),
            actor_id=actor_id,
        )
