"""Attendance Pydantic v2 schemas — configuration structs and request / response bodies.

Naming conventions:
  - *Config          → versioned company-scoped settings blobs
  - *Request         → request bodies (write)
  - *Response        → response bodies (read)
"""

import uuid
from datetime import date, datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from liveops.common.constants import (
    WEEKDAY_NAMES,
    AttendanceStatus,
    ClockAction,
    GeoStatus,
    SubmissionStatus,
)


# ═════════════════════════════════════════════════════════════════════
# Configuration structs
# ═════════════════════════════════════════════════════════════════════


class GeofenceConfig(BaseModel):
    """Office geofence (``attendance_settings_<company>``)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    version: int = 1
    location_name: str = Field(
        default="Kantor",
        validation_alias=AliasChoices("location_name", "locationName"),
    )
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    radius: int = Field(default=100, ge=0)
    allow_remote: bool = Field(
        default=False,
        validation_alias=AliasChoices("allow_remote", "allowRemote"),
    )

    @property
    def is_configured(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class Shift(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str
    start_time: str = Field(
        ..., pattern=r"^\d{2}:\d{2}$",
        validation_alias=AliasChoices("start_time", "startTime"),
    )
    end_time: str = Field(
        ..., pattern=r"^\d{2}:\d{2}$",
        validation_alias=AliasChoices("end_time", "endTime"),
    )
    color: str = "bg-slate-500"


DEFAULT_SHIFTS: tuple[Shift, ...] = (
    Shift(id="1", name="Shift Pagi", start_time="08:00", end_time="16:00", color="bg-emerald-500"),
    Shift(id="2", name="Shift Siang", start_time="12:00", end_time="20:00", color="bg-amber-500"),
    Shift(id="3", name="Shift Malam", start_time="16:00", end_time="00:00", color="bg-indigo-500"),
    Shift(id="4", name="Full Day", start_time="09:00", end_time="18:00", color="bg-rose-500"),
)


class ShiftCatalog(BaseModel):
    """Company shift catalog (``shifts_config_<company>``)."""

    version: int = 1
    shifts: list[Shift] = Field(default_factory=lambda: list(DEFAULT_SHIFTS))

    def get(self, shift_id: str) -> Optional[Shift]:
        return next((s for s in self.shifts if s.id == shift_id), None)


class WeeklyHolidayConfig(BaseModel):
    """Weekly day-off roster (``weekly_holidays_<company>``).

    ``days`` maps a local weekday name to the employee names off that day.
    """

    version: int = 1
    week_start: Optional[date] = None
    days: dict[str, list[str]] = Field(
        default_factory=lambda: {name: [] for name in WEEKDAY_NAMES}
    )

    @field_validator("days", mode="before")
    @classmethod
    def _normalise_days(cls, value: Any) -> dict[str, list[str]]:
        days: dict[str, list[str]] = {name: [] for name in WEEKDAY_NAMES}
        if isinstance(value, dict):
            for day, names in value.items():
                key = str(day).upper()
                if key in days and isinstance(names, (list, tuple)):
                    days[key] = [str(n).strip().upper() for n in names if str(n).strip()]
        return days


# ═════════════════════════════════════════════════════════════════════
# Geofence check
# ═════════════════════════════════════════════════════════════════════


class GeoCheck(BaseModel):
    """Outcome of validating a fix against the office geofence."""

    status: GeoStatus
    permitted: bool
    distance_meters: Optional[int] = None
    inside_radius: bool = False
    location_name: str = ""
    radius_meters: int = 0


# ═════════════════════════════════════════════════════════════════════
# Clock in / out
# ═════════════════════════════════════════════════════════════════════


class ClockRequest(BaseModel):
    """Payload for a clock action; the server decides in vs. out."""

    employee_id: str = Field(..., min_length=1)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class ClockResponse(BaseModel):
    attendance_id: uuid.UUID
    action: ClockAction
    date: date
    time: str
    status: AttendanceStatus
    is_late: bool = False
    geo: GeoCheck


# ═════════════════════════════════════════════════════════════════════
# Attendance records
# ═════════════════════════════════════════════════════════════════════


class AttendanceRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: str
    date: date
    status: AttendanceStatus
    clock_in: Optional[str] = None
    clock_out: Optional[str] = None
    notes: Optional[str] = None
    source: str = "clock"


class AttendanceCorrectionRequest(BaseModel):
    """Admin upsert of a single (employee, date) record."""

    employee_id: str = Field(..., min_length=1)
    date: date
    status: AttendanceStatus
    clock_in: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")
    clock_out: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")
    notes: Optional[str] = None


class AttendanceGridCell(BaseModel):
    employee_id: str
    employee_name: str
    date: date
    status: Optional[AttendanceStatus] = None
    is_derived_absent: bool = False
    is_work_day: bool = True
    record: Optional[AttendanceRecordResponse] = None


class AttendanceHistoryStats(BaseModel):
    total: int = 0
    present: int = 0
    late: int = 0
    paid_leave: int = 0
    absent: int = 0


class AttendanceHistoryResponse(BaseModel):
    employee_id: str
    stats: AttendanceHistoryStats
    records: list[AttendanceRecordResponse]


# ═════════════════════════════════════════════════════════════════════
# Shift assignment
# ═════════════════════════════════════════════════════════════════════


class ShiftAssignmentRequest(BaseModel):
    employee_id: str = Field(..., min_length=1)
    date: date
    # Empty string clears the assignment.
    shift_id: str = ""


class ShiftAssignmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: str
    date: date
    shift_id: str


# ═════════════════════════════════════════════════════════════════════
# Submissions
# ═════════════════════════════════════════════════════════════════════


class SubmissionCreate(BaseModel):
    employee_id: str = Field(..., min_length=1)
    type: AttendanceStatus
    start_date: date
    end_date: date
    notes: Optional[str] = Field(None, max_length=2000)


class SubmissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: str
    company: str
    type: AttendanceStatus
    start_date: date
    end_date: date
    notes: Optional[str] = None
    status: SubmissionStatus
    reviewed_by: Optional[str] = None
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
