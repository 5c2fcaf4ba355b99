"""Payroll router — payroll window, company run, single-employee slip."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from liveops.attendance.workdays import payroll_window
from liveops.config import settings
from liveops.database import get_db
from liveops.payroll.schemas import PayrollRunResponse, PayrollSlip, PayrollWindowResponse
from liveops.payroll.service import PayrollService

router = APIRouter(prefix="", tags=["payroll"])


# ── GET /window ─────────────────────────────────────────────────────

@router.get("/window", response_model=PayrollWindowResponse)
async def get_window(
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
):
    start, end = payroll_window(year, month)
    return PayrollWindowResponse(
        year=year,
        month=month,
        window_start=start,
        window_end=end,
        floor_date=settings.ABSENCE_FLOOR_DATE,
    )


# ── GET /run ────────────────────────────────────────────────────────

@router.get("/run", response_model=PayrollRunResponse)
async def run_payroll(
    company: str = Query(..., min_length=1),
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    db: AsyncSession = Depends(get_db),
):
    """Take-home for every active employee of ``company``."""
    return await PayrollService.run(db, company, year, month)


# ── GET /slips/{employee_id} ────────────────────────────────────────

@router.get("/slips/{employee_id}", response_model=PayrollSlip)
async def get_slip(
    employee_id: str,
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    db: AsyncSession = Depends(get_db),
):
    return await PayrollService.slip_for_employee(db, employee_id, year, month)
