"""Leave Pydantic v2 schemas — ledger entries and the annual balance."""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LeaveAdjustmentCreate(BaseModel):
    employee_id: str = Field(..., min_length=1)
    days: Decimal = Field(..., ge=Decimal("-365"), le=Decimal("365"))
    reason: str = Field(..., min_length=1, max_length=500)
    effective_date: date

    @field_validator("days")
    @classmethod
    def _non_zero_half_days(cls, v: Decimal) -> Decimal:
        if v == 0:
            raise ValueError("Adjustment must be non-zero")
        if (v * 2) % 1 != 0:
            raise ValueError("Adjustment must be in half-day steps")
        return v


class LeaveAdjustmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: str
    days: Decimal
    reason: str
    effective_date: date
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None


class LeaveBalanceOut(BaseModel):
    employee_id: str
    year: int
    quota: Decimal
    used: Decimal
    adjusted: Decimal
    available: Decimal
    adjustments: List[LeaveAdjustmentOut] = []
