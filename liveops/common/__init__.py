"""Common module — shared utilities for the LiveOps attendance and payroll engine."""

from liveops.common.audit import AuditTrail, create_audit_entry
from liveops.common.constants import (
    DATE_FORMAT,
    NON_QUALIFYING_STATUSES,
    SUBMITTABLE_STATUSES,
    TIME_FORMAT,
    WEEKDAY_NAMES,
    YEAR_MONTH_FORMAT,
    AttendanceStatus,
    ClockAction,
    GeoStatus,
    SubmissionStatus,
)
from liveops.common.exceptions import (
    AppException,
    ConflictError,
    LocationOutOfRange,
    LocationUnavailable,
    NotFoundException,
    ValidationException,
    register_exception_handlers,
)
from liveops.common.models import AppSetting
from liveops.common.settings_store import SettingsStore, company_key

__all__ = [
    # Audit
    "AuditTrail",
    "create_audit_entry",
    # Constants / Enums
    "AttendanceStatus",
    "ClockAction",
    "GeoStatus",
    "SubmissionStatus",
    "NON_QUALIFYING_STATUSES",
    "SUBMITTABLE_STATUSES",
    "WEEKDAY_NAMES",
    "DATE_FORMAT",
    "TIME_FORMAT",
    "YEAR_MONTH_FORMAT",
    # Exceptions
    "AppException",
    "ConflictError",
    "LocationOutOfRange",
    "LocationUnavailable",
    "NotFoundException",
    "ValidationException",
    "register_exception_handlers",
    # Settings blobs
    "AppSetting",
    "SettingsStore",
    "company_key",
]
