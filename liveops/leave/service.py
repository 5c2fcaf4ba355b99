"""Leave service layer — annual balance from quota, usage and the adjustment ledger."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Union

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from liveops.attendance.models import AttendanceRecord
from liveops.common.audit import create_audit_entry
from liveops.common.constants import AttendanceStatus
from liveops.config import settings
from liveops.core_hr.service import EmployeeService
from liveops.leave.models import LeaveAdjustment
from liveops.leave.schemas import LeaveAdjustmentCreate, LeaveAdjustmentOut, LeaveBalanceOut

logger = logging.getLogger(__name__)

Days = Union[int, Decimal]


def leave_balance(quota: Days, used: Days, adjustments: Iterable[Days]) -> Decimal:
    """Available days: quota plus every ledger delta, minus days taken."""
    return Decimal(quota) + sum((Decimal(a) for a in adjustments), Decimal("0")) - Decimal(used)


class LeaveService:
    """Business logic for leave balances."""

    @staticmethod
    async def _used_days(db: AsyncSession, employee_id: str, year: int) -> int:
        result = await db.execute(
            select(func.count()).select_from(AttendanceRecord).where(
                AttendanceRecord.employee_id == employee_id,
                AttendanceRecord.status == AttendanceStatus.paid_leave,
                AttendanceRecord.date >= date(year, 1, 1),
                AttendanceRecord.date <= date(year, 12, 31),
            )
        )
        return result.scalar() or 0

    @staticmethod
    async def list_adjustments(
        db: AsyncSession,
        employee_id: str,
        year: Optional[int] = None,
    ) -> list[LeaveAdjustment]:
        stmt = select(LeaveAdjustment).where(LeaveAdjustment.employee_id == employee_id)
        if year is not None:
            stmt = stmt.where(
                LeaveAdjustment.effective_date >= date(year, 1, 1),
                LeaveAdjustment.effective_date <= date(year, 12, 31),
            )
        stmt = stmt.order_by(LeaveAdjustment.effective_date, LeaveAdjustment.created_at)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_balance(
        db: AsyncSession,
        employee_id: str,
        year: int,
        *,
        quota: Optional[int] = None,
    ) -> LeaveBalanceOut:
        """Paid-leave balance for the calendar year."""
        employee = await EmployeeService.get_employee(db, employee_id)
        quota_days = Decimal(settings.ANNUAL_LEAVE_QUOTA if quota is None else quota)
        used = Decimal(await LeaveService._used_days(db, employee.id, year))
        entries = await LeaveService.list_adjustments(db, employee.id, year)
        deltas = [e.days for e in entries]

        return LeaveBalanceOut(
            employee_id=employee.id,
            year=year,
            quota=quota_days,
            used=used,
            adjusted=sum(deltas, Decimal("0")),
            available=leave_balance(quota_days, used, deltas),
            adjustments=[LeaveAdjustmentOut.model_validate(e) for e in entries],
        )

    @staticmethod
    async def add_adjustment(
        db: AsyncSession,
        data: LeaveAdjustmentCreate,
        *,
        actor_id: Optional[str] = None,
    ) -> LeaveAdjustment:
        """Append a ledger entry; entries are never edited in place."""
        employee = await EmployeeService.get_employee(db, data.employee_id)
        entry = LeaveAdjustment(
            employee_id=employee.id,
            days=data.days,
            reason=data.reason,
            effective_date=data.effective_date,
            created_by=actor_id,
        )
        db.add(entry)
        await db.flush()

        await create_audit_entry(
            db,
            action="adjust",
            entity_type="leave_adjustment",
            entity_id=entry.id,
            actor_id=actor_id,
            new_values={
                "employee_id": employee.id,
                "days": str(data.days),
                "reason": data.reason,
                "effective_date": data.effective_date.isoformat(),
            },
        )
        direction = "credited" if data.days > 0 else "debited"
        logger.info("Leave %s %s day(s) for %s", direction, abs(data.days), employee.id)
        return entry
