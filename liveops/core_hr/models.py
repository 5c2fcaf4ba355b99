"""Core HR ORM model: Employee.

Identity (``id``) is immutable; ``salary_config`` is a JSON blob mutated by
admin edit and normalised through ``SalaryConfig`` before use.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from liveops.database import Base

if TYPE_CHECKING:
    from liveops.attendance.models import AttendanceRecord, ShiftAssignment
    from liveops.leave.models import LeaveAdjustment


class Employee(Base):
    """Roster entry — central entity for attendance, payroll and KPI."""

    __tablename__ = "employees"

    # ── Identifiers ─────────────────────────────────────────────────
    id: Mapped[str] = mapped_column(sa.String(64), primary_key=True)
    employee_code: Mapped[Optional[str]] = mapped_column(sa.String(30), unique=True)

    # ── Profile ─────────────────────────────────────────────────────
    name: Mapped[str] = mapped_column(sa.String(150), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(sa.String(255))
    job_title: Mapped[str] = mapped_column(sa.String(150), server_default="")
    division: Mapped[Optional[str]] = mapped_column(sa.String(100))
    company: Mapped[str] = mapped_column(sa.String(100), nullable=False, index=True)
    # Raw text as imported; parsed leniently by ``parse_flexible_date``.
    hire_date: Mapped[Optional[str]] = mapped_column(sa.String(40))

    # ── Attendance / payroll ────────────────────────────────────────
    is_remote_allowed: Mapped[bool] = mapped_column(sa.Boolean, default=False)
    salary_config: Mapped[Optional[dict]] = mapped_column(JSONB)
    outstanding_debt: Mapped[int] = mapped_column(sa.BigInteger, default=0)

    is_active: Mapped[bool] = mapped_column(sa.Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # ── Relationships ───────────────────────────────────────────────
    attendance_records: Mapped[list[AttendanceRecord]] = relationship(
        back_populates="employee", cascade="all, delete-orphan",
    )
    shift_assignments: Mapped[list[ShiftAssignment]] = relationship(
        back_populates="employee", cascade="all, delete-orphan",
    )
    leave_adjustments: Mapped[list[LeaveAdjustment]] = relationship(
        back_populates="employee", cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Employee {self.id} {self.name!r}>"
