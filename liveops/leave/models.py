"""Leave ORM model: LeaveAdjustment, a ledger of manual balance changes."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from liveops.database import Base

if TYPE_CHECKING:
    from liveops.core_hr.models import Employee


class LeaveAdjustment(Base):
    """Signed day delta applied to an employee's annual leave balance."""

    __tablename__ = "leave_adjustments"
    __table_args__ = (
        sa.Index("ix_leave_adjustments_employee_effective", "employee_id", "effective_date"),
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
    days: Mapped[Decimal] = mapped_column(sa.Numeric(5, 1), nullable=False)
    reason: Mapped[str] = mapped_column(sa.Text, nullable=False)
    effective_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    created_by: Mapped[Optional[str]] = mapped_column(sa.String(64))
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="leave_adjustments")
