"""Enums and constants for the LiveOps dashboard engine."""

from __future__ import annotations

import enum


# ── Attendance ──────────────────────────────────────────────────────

class AttendanceStatus(str, enum.Enum):
    present = "present"
    sick = "sick"
    leave = "leave"
    absent = "absent"
    holiday = "holiday"
    overtime = "overtime"
    paid_leave = "paid_leave"


# A record carrying only one of these does not excuse a work day.
NON_QUALIFYING_STATUSES = frozenset(
    {AttendanceStatus.holiday, AttendanceStatus.overtime}
)

# Statuses an employee may request through a submission.
SUBMITTABLE_STATUSES = frozenset(
    {
        AttendanceStatus.sick,
        AttendanceStatus.leave,
        AttendanceStatus.paid_leave,
        AttendanceStatus.overtime,
    }
)


class ClockAction(str, enum.Enum):
    clock_in = "clock_in"
    clock_out = "clock_out"


class GeoStatus(str, enum.Enum):
    """Outcome of a geofence check."""

    inside = "inside"
    remote_allowed = "remote_allowed"
    out_of_range = "out_of_range"
    unknown = "unknown"


class SubmissionStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


# ── Weekday names (local) ───────────────────────────────────────────

# Indexed by ``date.weekday()`` (Monday == 0).
WEEKDAY_NAMES: tuple[str, ...] = (
    "SENIN",
    "SELASA",
    "RABU",
    "KAMIS",
    "JUMAT",
    "SABTU",
    "MINGGU",
)

# ── Role keywords (matched case-insensitively against job titles) ──

ROLE_KEYWORD_CREATOR = "creator"
ROLE_KEYWORD_HOST = "host"
ROLE_KEYWORD_LIVE_HOST = "host live streaming"
ROLE_KEYWORD_BIZDEV = "business development"

# ── Settings keys (company-scoped blobs) ────────────────────────────

GEOFENCE_KEY_PREFIX = "attendance_settings_"
KPI_SYSTEM_KEY_PREFIX = "kpi_system_"
WEEKLY_HOLIDAYS_KEY_PREFIX = "weekly_holidays_"
SHIFTS_KEY_PREFIX = "shifts_config_"

# ── Misc constants ──────────────────────────────────────────────────

EARTH_RADIUS_METERS = 6_371_000
DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"
YEAR_MONTH_FORMAT = "%Y-%m"
