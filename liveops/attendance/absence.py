"""Unexcused-absence ("alpha") counting over a date window."""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Any, Iterable, Mapping, Optional, Sequence

from liveops.attendance.workdays import is_work_day
from liveops.common.constants import NON_QUALIFYING_STATUSES, AttendanceStatus
from liveops.common.dates import daterange
from liveops.core_hr.schemas import EmployeeProfile


def _status(record: Any) -> Optional[AttendanceStatus]:
    value = getattr(record, "status", None)
    if isinstance(value, AttendanceStatus):
        return value
    try:
        return AttendanceStatus(value)
    except ValueError:
        return None


def index_statuses(
    employee_id: str,
    records: Iterable[Any],
) -> dict[date, list[Optional[AttendanceStatus]]]:
    """Group the employee's record statuses by date.

    Records only need ``employee_id``, ``date`` and ``status`` attributes;
    records whose date is not a ``date`` are skipped.
    """
    by_date: dict[date, list[Optional[AttendanceStatus]]] = defaultdict(list)
    for record in records:
        if getattr(record, "employee_id", None) != employee_id:
            continue
        day = getattr(record, "date", None)
        if not isinstance(day, date):
            continue
        by_date[day].append(_status(record))
    return by_date


def records_by_employee(records: Iterable[Any]) -> dict[str, list[Any]]:
    grouped: dict[str, list[Any]] = defaultdict(list)
    for record in records:
        grouped[record.employee_id].append(record)
    return dict(grouped)


def is_excused(statuses: Sequence[Optional[AttendanceStatus]]) -> bool:
    """A day is excused by any record other than Holiday / Overtime."""
    return any(s not in NON_QUALIFYING_STATUSES for s in statuses)


def is_unexcused_absence(
    day: date,
    employee: EmployeeProfile,
    statuses: Sequence[Optional[AttendanceStatus]],
    *,
    floor_date: date,
    today: date,
    holiday_map: Optional[Mapping[str, Sequence[str]]] = None,
) -> bool:
    if day < floor_date or day >= today:
        return False
    if not is_work_day(day, employee, holiday_map):
        return False
    return not is_excused(statuses)


def unexcused_absence_dates(
    employee: EmployeeProfile,
    window_start: date,
    window_end: date,
    records: Iterable[Any],
    floor_date: date,
    *,
    today: date,
    holiday_map: Optional[Mapping[str, Sequence[str]]] = None,
) -> list[date]:
    """Past work days in the window that lack a qualifying record.

    Days before ``floor_date`` and days from ``today`` onwards are skipped;
    today is still in progress and cannot be absent yet.
    """
    by_date = index_statuses(employee.id, records)
    return [
        day
        for day in daterange(window_start, window_end)
        if is_unexcused_absence(
            day,
            employee,
            by_date.get(day, ()),
            floor_date=floor_date,
            today=today,
            holiday_map=holiday_map,
        )
    ]


def count_unexcused_absences(
    employee: EmployeeProfile,
    window_start: date,
    window_end: date,
    records: Iterable[Any],
    floor_date: date,
    *,
    today: date,
    holiday_map: Optional[Mapping[str, Sequence[str]]] = None,
) -> int:
    return len(
        unexcused_absence_dates(
            employee, window_start, window_end, records, floor_date,
            today=today, holiday_map=holiday_map,
        )
    )
