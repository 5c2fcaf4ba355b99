"""Weighted KPI scoring with role-conditional components.

Every component score is clamped to [0, 100]. A component the employee's
role does not qualify for is left out of both the weighted sum and the
weight total, so the final score is re-normalised over what applies:

    final = weighted_sum * (100 / total_weight_used)

With no applicable weight the final score is 0 and the result is flagged
``weights_misconfigured``. Pure functions; records are duck-typed.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Any, Iterable, Mapping, Optional, Sequence

from liveops.attendance.workdays import calendar_month_window, output_window
from liveops.common.constants import AttendanceStatus
from liveops.common.dates import parse_clock_time, year_month_key
from liveops.core_hr.schemas import EmployeeProfile
from liveops.kpi.schemas import ComponentScore, KPIResult, KPISystemConfig

OUTPUT_MONTHLY_QUOTA = 50
REVENUE_MONTHLY_TARGET = 10_000_000


def clamp_score(value: Any) -> float:
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(score):
        return 0.0
    return min(100.0, max(0.0, score))


def _in_range(day: Any, start: date, end: date) -> bool:
    return isinstance(day, date) and start <= day <= end


def _is_present(record: Any) -> bool:
    status = getattr(record, "status", None)
    return status == AttendanceStatus.present or status == AttendanceStatus.present.value


# ── Component scores ────────────────────────────────────────────────

def attendance_score(records: Sequence[Any]) -> tuple[float, int]:
    """Present days over all records, as a percentage; 0 with no records."""
    if not records:
        return 0.0, 0
    present = sum(1 for r in records if _is_present(r))
    return clamp_score(present / len(records) * 100), present


def output_score(count: int, quota: int = OUTPUT_MONTHLY_QUOTA) -> float:
    if quota <= 0:
        return 0.0
    return clamp_score(min(100.0, count / quota * 100))


def revenue_score(total: int, target: int = REVENUE_MONTHLY_TARGET) -> float:
    if target <= 0:
        return 0.0
    return clamp_score(min(100.0, total / target * 100))


def punctuality_score(
    records: Sequence[Any],
    shift_starts: Mapping[date, str],
) -> Optional[float]:
    """On-time clock-ins over clock-ins on days with an assigned shift.

    Returns ``None`` when no such day exists, i.e. punctuality cannot be
    measured and the component does not apply.
    """
    measured = 0
    on_time = 0
    for r in records:
        clocked = parse_clock_time(getattr(r, "clock_in", None))
        start = parse_clock_time(shift_starts.get(getattr(r, "date", None)))
        if clocked is None or start is None:
            continue
        measured += 1
        if clocked <= start:
            on_time += 1
    if measured == 0:
        return None
    return clamp_score(on_time / measured * 100)


# ── Weighting ───────────────────────────────────────────────────────

def combine(components: Sequence[ComponentScore]) -> tuple[float, float, float, bool]:
    """Return ``(weighted_sum, total_weight_used, final_score, misconfigured)``."""
    weighted_sum = 0.0
    total_weight = 0.0
    for c in components:
        weighted_sum += c.score * (c.weight / 100)
        total_weight += c.weight
    if total_weight <= 0:
        return weighted_sum, total_weight, 0.0, True
    return weighted_sum, total_weight, clamp_score(weighted_sum * (100 / total_weight)), False


def score_employee(
    employee: EmployeeProfile,
    year: int,
    month: int,
    attendance_records: Iterable[Any],
    output_records: Iterable[Any],
    revenue_records: Iterable[Any],
    weights: KPISystemConfig,
    *,
    manual_scores: Optional[Mapping[str, Any]] = None,
    shift_starts: Optional[Mapping[date, str]] = None,
    output_quota: int = OUTPUT_MONTHLY_QUOTA,
    revenue_target: int = REVENUE_MONTHLY_TARGET,
) -> KPIResult:
    """Score one employee for the month ``year``-``month``.

    Attendance, punctuality and revenue are taken from the calendar month;
    output counts posts whose posting date falls in the 26th-to-25th
    output window. ``manual_scores`` defaults to the entries stored in
    ``weights.scores`` for the month.
    """
    month_start, month_end = calendar_month_window(year, month)
    out_start, out_end = output_window(year, month)
    caps = employee.capabilities

    attendance = [
        r for r in attendance_records
        if getattr(r, "employee_id", None) == employee.id
        and _in_range(getattr(r, "date", None), month_start, month_end)
    ]
    att_score, present = attendance_score(attendance)
    components = [
        ComponentScore(
            key="attendance", label="Attendance",
            score=att_score, weight=weights.attendance_weight,
        )
    ]
    result = KPIResult(
        employee_id=employee.id,
        employee_name=employee.name,
        job_title=employee.job_title,
        attendance_score=att_score,
        present_days=present,
        attendance_records=len(attendance),
    )

    punct = punctuality_score(attendance, shift_starts or {})
    if punct is not None:
        result.punctuality_score = punct
        components.append(
            ComponentScore(
                key="punctuality", label="Punctuality",
                score=punct, weight=weights.punctuality_weight,
            )
        )

    if caps.is_creator:
        count = sum(
            1 for p in output_records
            if getattr(p, "creator_id", None) == employee.id
            and _in_range(getattr(p, "posting_date", None), out_start, out_end)
        )
        result.output_count = count
        result.output_score = output_score(count, output_quota)
        components.append(
            ComponentScore(
                key="output", label="Output",
                score=result.output_score, weight=weights.output_weight,
            )
        )

    if caps.is_host:
        total = sum(
            int(getattr(r, "gmv", 0) or 0) for r in revenue_records
            if getattr(r, "host_id", None) == employee.id
            and _in_range(getattr(r, "report_date", None), month_start, month_end)
        )
        result.total_revenue = total
        result.revenue_score = revenue_score(total, revenue_target)
        components.append(
            ComponentScore(
                key="revenue", label="Revenue",
                score=result.revenue_score, weight=weights.revenue_weight,
            )
        )

    if manual_scores is None:
        manual_scores = weights.manual_scores_for(year_month_key(year, month), employee.id)
    for criterion in weights.criteria:
        score = clamp_score(manual_scores.get(criterion.id, 0))
        result.manual_scores[criterion.id] = score
        components.append(
            ComponentScore(
                key=criterion.id, label=criterion.name,
                score=score, weight=criterion.weight,
            )
        )

    (
        result.weighted_sum,
        result.total_weight_used,
        result.final_score,
        result.weights_misconfigured,
    ) = combine(components)
    result.components = components
    return result


def rank(results: Iterable[KPIResult]) -> list[KPIResult]:
    """Highest final score first; ties keep their input order."""
    return sorted(results, key=lambda r: r.final_score, reverse=True)
