"""Payroll Pydantic v2 schemas — per-employee slip and the company run."""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel


class PayrollSlip(BaseModel):
    """One employee's figures for a payroll month.

    ``take_home`` excludes debt and other deductions; those are listed
    separately for the admin to settle.
    """

    employee_id: str
    employee_name: str
    job_title: str = ""
    window_start: date
    window_end: date
    absence_count: int
    absence_dates: List[date] = []

    # Earnings
    gross_fixed: int
    overtime: int = 0
    bonus: int = 0
    holiday_bonus: int = 0

    # Deductions
    absence_deduction: int
    social_security: int = 0
    income_tax: int = 0
    total_deduction: int

    take_home: int

    # Shown separately, not part of take_home
    debt_deduction: int = 0
    other_deduction: int = 0
    outstanding_debt: int = 0


class PayrollRunResponse(BaseModel):
    company: str
    year: int
    month: int
    window_start: date
    window_end: date
    slips: List[PayrollSlip]
    total_take_home: int
    negative_take_home: List[str] = []


class PayrollWindowResponse(BaseModel):
    year: int
    month: int
    window_start: date
    window_end: date
    floor_date: Optional[date] = None
