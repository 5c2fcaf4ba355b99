"""Core HR router — roster read/create/update and remote-attendance overrides."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from liveops.core_hr.schemas import EmployeeCreate, EmployeeResponse, EmployeeUpdate
from liveops.core_hr.service import EmployeeService
from liveops.database import get_db
from liveops.dependencies import get_actor_id

router = APIRouter(prefix="", tags=["employees"])


class RemoteOverrideRequest(BaseModel):
    is_remote_allowed: bool


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=list[EmployeeResponse])
async def list_employees(
    company: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
):
    """Active roster for a company, ordered by name."""
    employees = await EmployeeService.list_employees(db, company)
    return [EmployeeService.to_response(e) for e in employees]


# ── POST / ──────────────────────────────────────────────────────────

@router.post("", response_model=EmployeeResponse, status_code=201)
async def create_employee(
    body: EmployeeCreate,
    db: AsyncSession = Depends(get_db),
):
    employee = await EmployeeService.create_employee(db, body)
    return EmployeeService.to_response(employee)


# ── GET /{employee_id} ──────────────────────────────────────────────

@router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    employee_id: str,
    db: AsyncSession = Depends(get_db),
):
    employee = await EmployeeService.get_employee(db, employee_id)
    return EmployeeService.to_response(employee)


# ── PATCH /{employee_id} ────────────────────────────────────────────

@router.patch("/{employee_id}", response_model=EmployeeResponse)
async def update_employee(
    employee_id: str,
    body: EmployeeUpdate,
    db: AsyncSession = Depends(get_db),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    """Admin edit: profile fields, salary configuration, debt."""
    employee = await EmployeeService.update_employee(
        db, employee_id, body, actor_id=actor_id,
    )
    return EmployeeService.to_response(employee)


# ── PUT /{employee_id}/remote ───────────────────────────────────────

@router.put("/{employee_id}/remote", response_model=EmployeeResponse)
async def set_remote_override(
    employee_id: str,
    body: RemoteOverrideRequest,
    db: AsyncSession = Depends(get_db),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    """Toggle the per-employee remote-attendance override."""
    employee = await EmployeeService.set_remote_allowed(
        db, employee_id, body.is_remote_allowed, actor_id=actor_id,
    )
    return EmployeeService.to_response(employee)
