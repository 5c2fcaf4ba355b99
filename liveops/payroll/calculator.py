"""Take-home pay from salary components and an unexcused-absence count.

Pure and total: every amount is an integer in the smallest currency unit,
missing components are 0 and nothing here raises. A negative take-home is
returned as is so that it shows up for review.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel

from liveops.common.money import round_half_up
from liveops.core_hr.schemas import SalaryConfig

STANDARD_WORK_DAYS = 26


class TakeHome(BaseModel):
    gross_fixed: int
    absence_deduction: int
    total_deduction: int
    take_home: int


def gross_fixed(salary: SalaryConfig) -> int:
    """Base salary plus the five fixed allowances."""
    return (
        salary.base_salary
        + salary.meal_allowance
        + salary.transport_allowance
        + salary.communication_allowance
        + salary.health_allowance
        + salary.position_allowance
    )


def absence_deduction(
    gross: int,
    absence_count: int,
    standard_work_days: int = STANDARD_WORK_DAYS,
) -> int:
    """``round(absence_count * gross / standard_work_days)``, halves rounded up."""
    if absence_count <= 0 or standard_work_days <= 0:
        return 0
    return round_half_up(Decimal(absence_count * gross) / Decimal(standard_work_days))


def compute_take_home(
    salary: Union[SalaryConfig, Mapping[str, Any], None],
    absence_count: Optional[int],
    *,
    standard_work_days: int = STANDARD_WORK_DAYS,
) -> TakeHome:
    if not isinstance(salary, SalaryConfig):
        salary = SalaryConfig.from_blob(dict(salary) if salary else None)
    count = max(0, int(absence_count or 0))

    gross = gross_fixed(salary)
    absence = absence_deduction(gross, count, standard_work_days)
    total = absence + salary.social_security + salary.income_tax
    take_home = (
        gross
        + salary.overtime
        + salary.bonus
        + salary.holiday_bonus
        - total
    )
    return TakeHome(
        gross_fixed=gross,
        absence_deduction=absence,
        total_deduction=total,
        take_home=take_home,
    )
