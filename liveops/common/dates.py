"""Date helpers shared by the attendance, payroll and KPI engines.

Parsing helpers never raise: unparseable input comes back as ``None`` so the
caller can exclude the value from computation instead of failing the request.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Iterator, Optional

from liveops.common.constants import TIME_FORMAT, YEAR_MONTH_FORMAT

logger = logging.getLogger(__name__)

_DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y/%m/%d",
    "%d-%m-%Y",
    "%d/%m/%Y",
    "%d %B %Y",
    "%d %b %Y",
)


def parse_flexible_date(val: Any) -> Optional[date]:
    """Parse a date from any of the tolerated text formats; ``None`` on failure."""
    if not val:
        return None
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    s = str(val).strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(s[:19] if "T" in s else s, fmt).date()
        except ValueError:
            continue
    logger.warning("Unparseable date %r excluded from computation", val)
    return None


def parse_clock_time(val: Any) -> Optional[time]:
    """Parse an ``HH:MM`` clock value; ``None`` when missing or malformed."""
    if not val:
        return None
    if isinstance(val, time):
        return val
    try:
        return datetime.strptime(str(val).strip()[:5], TIME_FORMAT).time()
    except ValueError:
        logger.warning("Unparseable clock time %r ignored", val)
        return None


def format_clock_time(val: time) -> str:
    return val.strftime(TIME_FORMAT)


def daterange(start: date, end: date) -> Iterator[date]:
    """Yield every date from ``start`` through ``end`` inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Return (year, month) moved by ``delta`` months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def overflow_date(year: int, month: int, day: int) -> date:
    """Build a date, rolling excess days into the following month(s).

    ``overflow_date(2026, 2, 29)`` is 1 March 2026 and
    ``overflow_date(2026, 3, 0)`` is 28 February 2026.
    """
    return date(year, month, 1) + timedelta(days=day - 1)


def iso_monday(day: date) -> date:
    """Monday of the ISO week containing ``day``."""
    return day - timedelta(days=day.weekday())


def year_month_key(year: int, month: int) -> str:
    return date(year, month, 1).strftime(YEAR_MONTH_FORMAT)


def calculate_tenure(joined: Optional[date], today: date) -> Optional[tuple[int, int]]:
    """Completed (years, months) of service, or ``None`` without a join date."""
    if joined is None:
        return None
    years = today.year - joined.year
    months = today.month - joined.month
    if months < 0 or (months == 0 and today.day < joined.day):
        years -= 1
        months += 12
    if today.day < joined.day and months > 0:
        months -= 1
    if years < 0:
        return (0, 0)
    return (years, months)
