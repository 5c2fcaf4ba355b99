"""Leave router — annual balance and adjustment ledger."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from liveops.database import get_db
from liveops.dependencies import get_actor_id
from liveops.leave.schemas import LeaveAdjustmentCreate, LeaveAdjustmentOut, LeaveBalanceOut
from liveops.leave.service import LeaveService

router = APIRouter(prefix="", tags=["leave"])


# ── GET /balance/{employee_id} ──────────────────────────────────────

@router.get("/balance/{employee_id}", response_model=LeaveBalanceOut)
async def get_balance(
    employee_id: str,
    year: int = Query(..., ge=2000, le=2100),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.get_balance(db, employee_id, year)


# ── POST /adjustments ───────────────────────────────────────────────

@router.post("/adjustments", response_model=LeaveAdjustmentOut, status_code=201)
async def add_adjustment(
    body: LeaveAdjustmentCreate,
    db: AsyncSession = Depends(get_db),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    """Credit or debit leave days with a recorded reason."""
    return await LeaveService.add_adjustment(db, body, actor_id=actor_id)


# ── GET /adjustments/{employee_id} ──────────────────────────────────

@router.get("/adjustments/{employee_id}", response_model=list[LeaveAdjustmentOut])
async def list_adjustments(
    employee_id: str,
    year: Optional[int] = Query(None, ge=2000, le=2100),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.list_adjustments(db, employee_id, year)
