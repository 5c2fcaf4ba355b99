"""Work-day predicate and the payroll / output period windows."""

from __future__ import annotations

from datetime import date
from typing import Mapping, Sequence

from liveops.common.constants import WEEKDAY_NAMES
from liveops.common.dates import overflow_date, shift_month
from liveops.core_hr.schemas import EmployeeProfile

SATURDAY = 5
SUNDAY = 6

PAYROLL_WINDOW_START_DAY = 29
PAYROLL_WINDOW_END_DAY = 28
OUTPUT_WINDOW_START_DAY = 26
OUTPUT_WINDOW_END_DAY = 25


def weekday_name(day: date) -> str:
    return WEEKDAY_NAMES[day.weekday()]


def _upper_names(names: Sequence[str]) -> set[str]:
    return {str(n).strip().upper() for n in names}


def is_listed_in_holiday_map(
    employee_name: str,
    holiday_map: Mapping[str, Sequence[str]],
) -> bool:
    target = employee_name.strip().upper()
    return any(target in _upper_names(names) for names in holiday_map.values())


def is_work_day(
    day: date,
    employee: EmployeeProfile,
    holiday_map: Mapping[str, Sequence[str]] | None = None,
) -> bool:
    """Whether ``employee`` is expected at work on ``day``.

    An employee named anywhere in the weekly holiday map works every day
    except the weekday(s) listed for them. Otherwise Saturday and Sunday
    are off, except that live-streaming hosts work Sundays.
    """
    if holiday_map and is_listed_in_holiday_map(employee.name, holiday_map):
        off_today = _upper_names(holiday_map.get(weekday_name(day), ()))
        return employee.name.strip().upper() not in off_today

    weekday = day.weekday()
    if weekday == SATURDAY:
        return False
    if weekday == SUNDAY:
        return employee.capabilities.is_live_streaming_host
    return True


def payroll_window(year: int, month: int) -> tuple[date, date]:
    """29th of the preceding month through the 28th of ``month``, inclusive.

    The start uses calendar overflow: for March in a non-leap year the
    window opens on 1 March because 29 February does not exist.
    """
    prev_year, prev_month = shift_month(year, month, -1)
    start = overflow_date(prev_year, prev_month, PAYROLL_WINDOW_START_DAY)
    end = date(year, month, PAYROLL_WINDOW_END_DAY)
    return start, end


def output_window(year: int, month: int) -> tuple[date, date]:
    """26th of the preceding month through the 25th of ``month``, inclusive."""
    prev_year, prev_month = shift_month(year, month, -1)
    start = date(prev_year, prev_month, OUTPUT_WINDOW_START_DAY)
    end = date(year, month, OUTPUT_WINDOW_END_DAY)
    return start, end


def calendar_month_window(year: int, month: int) -> tuple[date, date]:
    next_year, next_month = shift_month(year, month, 1)
    last = overflow_date(next_year, next_month, 0)
    return date(year, month, 1), last
