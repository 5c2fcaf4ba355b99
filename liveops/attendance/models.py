"""Attendance ORM models: AttendanceRecord, ShiftAssignment, AttendanceSubmission."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from liveops.common.constants import AttendanceStatus, SubmissionStatus
from liveops.database import Base

if TYPE_CHECKING:
    from liveops.core_hr.models import Employee


class AttendanceRecord(Base):
    """One row per (employee, calendar date)."""

    __tablename__ = "attendance_records"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),
        sa.Index("ix_attendance_company_date", "company", "date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_id: Mapped[str] = mapped_column(
        sa.String(64),
        sa.ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )
    company: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    status: Mapped[AttendanceStatus] = mapped_column(
        sa.Enum(AttendanceStatus, name="attendance_status"),
        nullable=False,
        default=AttendanceStatus.present,
    )
    # Local wall-clock HH:MM
    clock_in: Mapped[Optional[str]] = mapped_column(sa.String(5))
    clock_out: Mapped[Optional[str]] = mapped_column(sa.String(5))
    notes: Mapped[Optional[str]] = mapped_column(sa.Text)
    source: Mapped[str] = mapped_column(sa.String(30), default="clock")
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="attendance_records")

    def __repr__(self) -> str:
        return f"<AttendanceRecord {self.employee_id} {self.date} {self.status.value}>"


class ShiftAssignment(Base):
    """Which shift (from the company catalog) an employee works on a date."""

    __tablename__ = "shift_assignments"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "date", name="uq_shift_assignment_employee_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_id: Mapped[str] = mapped_column(
        sa.String(64),
        sa.ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )
    company: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    shift_id: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="shift_assignments")


class AttendanceSubmission(Base):
    """Employee request (sick, leave, paid leave, overtime) over a date range."""

    __tablename__ = "attendance_submissions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_id: Mapped[str] = mapped_column(
        sa.String(64),
        sa.ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )
    company: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    type: Mapped[AttendanceStatus] = mapped_column(
        sa.Enum(AttendanceStatus, name="attendance_status"),
        nullable=False,
    )
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(sa.Text)
    status: Mapped[SubmissionStatus] = mapped_column(
        sa.Enum(SubmissionStatus, name="submission_status"),
        nullable=False,
        default=SubmissionStatus.pending,
    )
    reviewed_by: Mapped[Optional[str]] = mapped_column(sa.String(64))
    submitted_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
