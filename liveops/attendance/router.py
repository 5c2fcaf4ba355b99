"""Attendance router — geofenced clock actions, records, grid, shifts, submissions, config."""


import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from liveops.attendance.schemas import (
    AttendanceCorrectionRequest,
    AttendanceGridCell,
    AttendanceHistoryResponse,
    AttendanceRecordResponse,
    ClockRequest,
    ClockResponse,
    GeofenceConfig,
    ShiftAssignmentRequest,
    ShiftAssignmentResponse,
    ShiftCatalog,
    SubmissionCreate,
    SubmissionResponse,
    WeeklyHolidayConfig,
)
from liveops.attendance.service import AttendanceConfigService, AttendanceService
from liveops.common.constants import SubmissionStatus
from liveops.common.rate_limit import limiter
from liveops.database import get_db
from liveops.dependencies import get_actor_id

router = APIRouter(prefix="", tags=["attendance"])


class DayOffRequest(BaseModel):
    day: str = Field(..., min_length=1)
    employee_name: str = Field(..., min_length=1)
    off: bool = True


# ── POST /clock ─────────────────────────────────────────────────────

@router.post("/clock", response_model=ClockResponse)
@limiter.limit("20/minute")
async def clock(
    request: Request,
    body: ClockRequest,
    db: AsyncSession = Depends(get_db),
):
    """Clock in, or clock out when today's clock-in already exists."""
    return await AttendanceService.clock(
        db,
        body.employee_id,
        latitude=body.latitude,
        longitude=body.longitude,
    )


# ── DELETE /today/{employee_id} ─────────────────────────────────────

@router.delete("/today/{employee_id}", status_code=204)
async def reset_today(
    employee_id: str,
    db: AsyncSession = Depends(get_db),
):
    await AttendanceService.reset_today(db, employee_id)
    return Response(status_code=204)


# ── GET /records ────────────────────────────────────────────────────

@router.get("/records", response_model=list[AttendanceRecordResponse])
async def list_records(
    company: str = Query(..., min_length=1),
    from_date: date = Query(...),
    to_date: date = Query(...),
    employee_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.list_records(
        db, company, from_date, to_date, employee_id=employee_id,
    )


# ── PUT /records ────────────────────────────────────────────────────

@router.put("/records", response_model=AttendanceRecordResponse)
async def correct_record(
    body: AttendanceCorrectionRequest,
    db: AsyncSession = Depends(get_db),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    """Admin correction: insert or overwrite one (employee, date) record."""
    return await AttendanceService.correct_record(db, body, actor_id=actor_id)


# ── GET /grid ───────────────────────────────────────────────────────

@router.get("/grid", response_model=list[AttendanceGridCell])
async def attendance_grid(
    company: str = Query(..., min_length=1),
    from_date: date = Query(...),
    to_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.attendance_grid(db, company, from_date, to_date)


# ── GET /history/{employee_id} ──────────────────────────────────────

@router.get("/history/{employee_id}", response_model=AttendanceHistoryResponse)
async def history(
    employee_id: str,
    from_date: date = Query(...),
    to_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.history(db, employee_id, from_date, to_date)


# ── PUT /shifts/assignments ─────────────────────────────────────────

@router.put("/shifts/assignments", response_model=Optional[ShiftAssignmentResponse])
async def assign_shift(
    body: ShiftAssignmentRequest,
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.assign_shift(db, body)


# ── Submissions ─────────────────────────────────────────────────────

@router.post("/submissions", response_model=SubmissionResponse, status_code=201)
async def create_submission(
    body: SubmissionCreate,
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.create_submission(db, body)


@router.get("/submissions", response_model=list[SubmissionResponse])
async def list_submissions(
    company: str = Query(..., min_length=1),
    status: Optional[SubmissionStatus] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.list_submissions(db, company, status=status)


@router.post("/submissions/{submission_id}/approve", response_model=SubmissionResponse)
async def approve_submission(
    submission_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    return await AttendanceService.review_submission(
        db, submission_id, approve=True, actor_id=actor_id,
    )


@router.post("/submissions/{submission_id}/reject", response_model=SubmissionResponse)
async def reject_submission(
    submission_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    return await AttendanceService.review_submission(
        db, submission_id, approve=False, actor_id=actor_id,
    )


# ── Company configuration ───────────────────────────────────────────

@router.get("/config/{company}/geofence", response_model=GeofenceConfig)
async def get_geofence(company: str, db: AsyncSession = Depends(get_db)):
    return await AttendanceConfigService.get_geofence(db, company)


@router.put("/config/{company}/geofence", response_model=GeofenceConfig)
async def save_geofence(
    company: str,
    body: GeofenceConfig,
    db: AsyncSession = Depends(get_db),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    return await AttendanceConfigService.save_geofence(db, company, body, actor_id=actor_id)


@router.get("/config/{company}/shifts", response_model=ShiftCatalog)
async def get_shift_catalog(company: str, db: AsyncSession = Depends(get_db)):
    return await AttendanceConfigService.get_shift_catalog(db, company)


@router.put("/config/{company}/shifts", response_model=ShiftCatalog)
async def save_shift_catalog(
    company: str,
    body: ShiftCatalog,
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceConfigService.save_shift_catalog(db, company, body)


@router.get("/config/{company}/weekly-holidays", response_model=WeeklyHolidayConfig)
async def get_weekly_holidays(company: str, db: AsyncSession = Depends(get_db)):
    return await AttendanceConfigService.get_weekly_holidays(db, company)


@router.put("/config/{company}/weekly-holidays", response_model=WeeklyHolidayConfig)
async def set_day_off(
    company: str,
    body: DayOffRequest,
    db: AsyncSession = Depends(get_db),
):
    """Add (or remove, with ``off=false``) an employee from a weekday's day-off list."""
    return await AttendanceConfigService.set_day_off(
        db, company, body.day, body.employee_name, off=body.off,
    )
