"""Attendance service layer — geofenced clock actions, corrections, submissions.

Business logic:
  - Clock in/out gated by the office geofence (or a remote override)
  - Lateness against the employee's assigned shift for the day
  - Admin corrections and approved submissions as idempotent upserts
  - Attendance grid with derived unexcused absences
  - Company-scoped configuration: geofence, shift catalog, weekly holidays
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Optional, Sequence
from zoneinfo import ZoneInfo

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from liveops.attendance.absence import is_unexcused_absence
from liveops.attendance.geo import check_geofence
from liveops.attendance.models import (
    AttendanceRecord,
    AttendanceSubmission,
    ShiftAssignment,
)
from liveops.attendance.schemas import (
    AttendanceCorrectionRequest,
    AttendanceGridCell,
    AttendanceHistoryResponse,
    AttendanceHistoryStats,
    AttendanceRecordResponse,
    ClockResponse,
    GeoCheck,
    GeofenceConfig,
    Shift,
    ShiftAssignmentRequest,
    ShiftCatalog,
    SubmissionCreate,
    WeeklyHolidayConfig,
)
from liveops.attendance.workdays import is_work_day
from liveops.common.audit import create_audit_entry
from liveops.common.constants import (
    GEOFENCE_KEY_PREFIX,
    SHIFTS_KEY_PREFIX,
    SUBMITTABLE_STATUSES,
    WEEKDAY_NAMES,
    WEEKLY_HOLIDAYS_KEY_PREFIX,
    AttendanceStatus,
    ClockAction,
    GeoStatus,
    SubmissionStatus,
)
from liveops.common.dates import daterange, iso_monday, parse_clock_time
from liveops.common.exceptions import (
    ConflictError,
    LocationOutOfRange,
    LocationUnavailable,
    NotFoundException,
    ValidationException,
)
from liveops.common.settings_store import SettingsStore, company_key
from liveops.config import settings
from liveops.core_hr.models import Employee
from liveops.core_hr.schemas import EmployeeProfile
from liveops.core_hr.service import EmployeeService

logger = logging.getLogger(__name__)

MAX_DATE_RANGE_DAYS = 92


def local_now() -> datetime:
    """Current wall-clock time in the company timezone."""
    return datetime.now(ZoneInfo(settings.TIMEZONE))


def is_late(clock_in: Optional[str], shift: Optional[Shift]) -> bool:
    """A clock-in strictly after the shift start is late."""
    clocked = parse_clock_time(clock_in)
    start = parse_clock_time(shift.start_time) if shift else None
    if clocked is None or start is None:
        return False
    return clocked > start


def _validate_date_range(from_date: date, to_date: date) -> None:
    if from_date > to_date:
        raise ValidationException(
            {"date_range": ["from_date must be before or equal to to_date."]}
        )
    if (to_date - from_date).days > MAX_DATE_RANGE_DAYS:
        raise ValidationException(
            {"date_range": [f"Date range cannot exceed {MAX_DATE_RANGE_DAYS} days."]}
        )


class AttendanceConfigService:
    """Company-scoped attendance configuration blobs with default fallback."""

    @staticmethod
    async def get_geofence(db: AsyncSession, company: str) -> GeofenceConfig:
        blob = await SettingsStore.get_value(db, company_key(GEOFENCE_KEY_PREFIX, company))
        if not isinstance(blob, dict):
            return GeofenceConfig(radius=settings.DEFAULT_GEOFENCE_RADIUS_METERS)
        try:
            return GeofenceConfig.model_validate(blob)
        except ValidationError:
            logger.warning("Invalid geofence settings for %s; using defaults", company)
            return GeofenceConfig(radius=settings.DEFAULT_GEOFENCE_RADIUS_METERS)

    @staticmethod
    async def save_geofence(
        db: AsyncSession,
        company: str,
        config: GeofenceConfig,
        *,
        actor_id: Optional[str] = None,
    ) -> GeofenceConfig:
        key = company_key(GEOFENCE_KEY_PREFIX, company)
        await SettingsStore.upsert_value(db, key, config.model_dump())
        await create_audit_entry(
            db,
            action="save_config",
            entity_type="geofence",
            entity_id=key,
            actor_id=actor_id,
            new_values=config.model_dump(),
        )
        return config

    @staticmethod
    async def get_shift_catalog(db: AsyncSession, company: str) -> ShiftCatalog:
        blob = await SettingsStore.get_value(db, company_key(SHIFTS_KEY_PREFIX, company))
        if isinstance(blob, list):
            blob = {"shifts": blob}
        if not isinstance(blob, dict) or not blob.get("shifts"):
            return ShiftCatalog()
        try:
            return ShiftCatalog.model_validate(blob)
        except ValidationError:
            logger.warning("Invalid shift catalog for %s; using defaults", company)
            return ShiftCatalog()

    @staticmethod
    async def save_shift_catalog(
        db: AsyncSession, company: str, catalog: ShiftCatalog,
    ) -> ShiftCatalog:
        await SettingsStore.upsert_value(
            db, company_key(SHIFTS_KEY_PREFIX, company), catalog.model_dump(),
        )
        return catalog

    @staticmethod
    async def get_weekly_holidays(
        db: AsyncSession,
        company: str,
        *,
        today: Optional[date] = None,
    ) -> WeeklyHolidayConfig:
        """Current week's day-off roster.

        A roster stored for a different ISO week is stale: it is replaced
        by an empty roster for the current week.
        """
        monday = iso_monday(today or local_now().date())
        key = company_key(WEEKLY_HOLIDAYS_KEY_PREFIX, company)
        blob = await SettingsStore.get_value(db, key)

        config: Optional[WeeklyHolidayConfig] = None
        if isinstance(blob, dict):
            try:
                config = WeeklyHolidayConfig.model_validate(blob)
            except ValidationError:
                logger.warning("Invalid weekly holiday map for %s; resetting", company)

        if config is None or config.week_start != monday:
            config = WeeklyHolidayConfig(week_start=monday)
            await SettingsStore.upsert_value(db, key, config.model_dump(mode="json"))
            logger.info("Weekly holiday map for %s refreshed for week %s", company, monday)
        return config

    @staticmethod
    async def set_day_off(
        db: AsyncSession,
        company: str,
        day_name: str,
        employee_name: str,
        *,
        off: bool = True,
        today: Optional[date] = None,
    ) -> WeeklyHolidayConfig:
        day_key = day_name.strip().upper()
        if day_key not in WEEKDAY_NAMES:
            raise ValidationException({"day": [f"Unknown weekday '{day_name}'."]})
        name = employee_name.strip().upper()
        if not name:
            raise ValidationException({"employee_name": ["Name is required."]})

        config = await AttendanceConfigService.get_weekly_holidays(db, company, today=today)
        days = {k: list(v) for k, v in config.days.items()}
        names = [n for n in days[day_key] if n != name]
        if off:
            names.append(name)
        days[day_key] = names

        updated = WeeklyHolidayConfig(week_start=config.week_start, days=days)
        await SettingsStore.upsert_value(
            db,
            company_key(WEEKLY_HOLIDAYS_KEY_PREFIX, company),
            updated.model_dump(mode="json"),
        )
        return updated


class AttendanceService:
    """Async attendance operations: clock, correct, read, submissions."""

    # ── Helpers ─────────────────────────────────────────────────────

    @staticmethod
    async def _get_record(
        db: AsyncSession, employee_id: str, day: date,
    ) -> Optional[AttendanceRecord]:
        result = await db.execute(
            select(AttendanceRecord).where(
                AttendanceRecord.employee_id == employee_id,
                AttendanceRecord.date == day,
            )
        )
        return result.scalars().first()

    @staticmethod
    async def upsert_record(
        db: AsyncSession,
        employee: Employee,
        day: date,
        *,
        status: AttendanceStatus,
        clock_in: Optional[str] = None,
        clock_out: Optional[str] = None,
        notes: Optional[str] = None,
        source: str = "clock",
    ) -> AttendanceRecord:
        """Insert or overwrite the single record for (employee, day)."""
        record = await AttendanceService._get_record(db, employee.id, day)
        if record is None:
            record = AttendanceRecord(
                employee_id=employee.id,
                company=employee.company,
                date=day,
            )
            db.add(record)
        record.status = status
        record.clock_in = clock_in
        record.clock_out = clock_out
        record.notes = notes
        record.source = source
        await db.flush()
        return record

    @staticmethod
    async def get_shift_for(
        db: AsyncSession, employee: Employee, day: date,
    ) -> Optional[Shift]:
        result = await db.execute(
            select(ShiftAssignment).where(
                ShiftAssignment.employee_id == employee.id,
                ShiftAssignment.date == day,
            )
        )
        assignment = result.scalars().first()
        if assignment is None:
            return None
        catalog = await AttendanceConfigService.get_shift_catalog(db, employee.company)
        return catalog.get(assignment.shift_id)

    # ── Geofence ────────────────────────────────────────────────────

    @staticmethod
    async def verify_location(
        db: AsyncSession,
        employee: Employee,
        latitude: Optional[float],
        longitude: Optional[float],
    ) -> GeoCheck:
        """Raise unless an attendance write is permitted from this fix."""
        geofence = await AttendanceConfigService.get_geofence(db, employee.company)
        check = check_geofence(
            latitude,
            longitude,
            geofence,
            employee_remote_allowed=bool(employee.is_remote_allowed),
        )
        if check.permitted:
            return check
        if check.status == GeoStatus.unknown:
            logger.warning("Attendance blocked for %s: no usable GPS fix", employee.id)
            raise LocationUnavailable(
                "No GPS fix available."
                if geofence.is_configured
                else "Office location is not configured."
            )
        logger.warning(
            "Attendance blocked for %s: %s m from %s (radius %s m)",
            employee.id, check.distance_meters, check.location_name, check.radius_meters,
        )
        raise LocationOutOfRange(
            check.distance_meters or 0, check.location_name, check.radius_meters,
        )

    # ── Clock in / out ──────────────────────────────────────────────

    @staticmethod
    async def clock(
        db: AsyncSession,
        employee_id: str,
        *,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> ClockResponse:
        """Clock in on the first action of the day, clock out on the second."""
        employee = await EmployeeService.get_employee(db, employee_id)
        geo = await AttendanceService.verify_location(db, employee, latitude, longitude)

        now = now or local_now()
        today = now.date()
        hhmm = now.strftime("%H:%M")
        where = (
            f"{latitude}, {longitude}"
            if latitude is not None and longitude is not None
            else "remote"
        )

        record = await AttendanceService._get_record(db, employee.id, today)
        if record is None or not record.clock_in:
            action = ClockAction.clock_in
            record = await AttendanceService.upsert_record(
                db,
                employee,
                today,
                status=AttendanceStatus.present,
                clock_in=hhmm,
                notes=f"Clock-in verified at {where}",
            )
        elif not record.clock_out:
            action = ClockAction.clock_out
            record.clock_out = hhmm
            record.notes = f"{record.notes or ''} | Clock-out at {where}".lstrip(" |")
            await db.flush()
        else:
            raise ConflictError(
                "clock",
                today.isoformat(),
                detail=f"{employee.id} has already clocked in and out on {today}.",
            )

        shift = await AttendanceService.get_shift_for(db, employee, today)
        late = is_late(record.clock_in, shift)
        logger.info(
            "%s %s at %s (geo=%s, late=%s)",
            employee.id, action.value, hhmm, geo.status.value, late,
        )
        return ClockResponse(
            attendance_id=record.id,
            action=action,
            date=today,
            time=hhmm,
            status=record.status,
            is_late=late,
            geo=geo,
        )

    @staticmethod
    async def reset_today(
        db: AsyncSession,
        employee_id: str,
        *,
        today: Optional[date] = None,
    ) -> bool:
        """Delete today's record so the employee can clock again."""
        today = today or local_now().date()
        result = await db.execute(
            delete(AttendanceRecord).where(
                AttendanceRecord.employee_id == employee_id,
                AttendanceRecord.date == today,
            )
        )
        removed = (result.rowcount or 0) > 0
        logger.info("Reset attendance for %s on %s (removed=%s)", employee_id, today, removed)
        return removed

    # ── Admin correction ────────────────────────────────────────────

    @staticmethod
    async def correct_record(
        db: AsyncSession,
        data: AttendanceCorrectionRequest,
        *,
        actor_id: Optional[str] = None,
    ) -> AttendanceRecord:
        employee = await EmployeeService.get_employee(db, data.employee_id)
        existing = await AttendanceService._get_record(db, employee.id, data.date)
        old_values = (
            AttendanceRecordResponse.model_validate(existing).model_dump(mode="json")
            if existing
            else None
        )

        record = await AttendanceService.upsert_record(
            db,
            employee,
            data.date,
            status=data.status,
            clock_in=data.clock_in,
            clock_out=data.clock_out,
            notes=data.notes,
            source="correction",
        )
        await create_audit_entry(
            db,
            action="correct",
            entity_type="attendance_record",
            entity_id=record.id,
            actor_id=actor_id,
            old_values=old_values,
            new_values=data.model_dump(mode="json"),
        )
        logger.info("Corrected attendance %s %s -> %s", employee.id, data.date, data.status.value)
        return record

    # ── Shift assignment ────────────────────────────────────────────

    @staticmethod
    async def assign_shift(
        db: AsyncSession, data: ShiftAssignmentRequest,
    ) -> Optional[ShiftAssignment]:
        """Assign (or clear, with an empty shift id) an employee's shift for a date."""
        employee = await EmployeeService.get_employee(db, data.employee_id)
        result = await db.execute(
            select(ShiftAssignment).where(
                ShiftAssignment.employee_id == employee.id,
                ShiftAssignment.date == data.date,
            )
        )
        assignment = result.scalars().first()

        if not data.shift_id:
            if assignment is not None:
                await db.delete(assignment)
                await db.flush()
            return None

        catalog = await AttendanceConfigService.get_shift_catalog(db, employee.company)
        if catalog.get(data.shift_id) is None:
            raise ValidationException({"shift_id": [f"Unknown shift '{data.shift_id}'."]})

        if assignment is None:
            assignment = ShiftAssignment(
                employee_id=employee.id,
                company=employee.company,
                date=data.date,
                shift_id=data.shift_id,
            )
            db.add(assignment)
        else:
            assignment.shift_id = data.shift_id
        await db.flush()
        return assignment

    # ── Reads ───────────────────────────────────────────────────────

    @staticmethod
    async def list_records(
        db: AsyncSession,
        company: str,
        from_date: date,
        to_date: date,
        *,
        employee_id: Optional[str] = None,
    ) -> list[AttendanceRecord]:
        stmt = select(AttendanceRecord).where(
            AttendanceRecord.company == company,
            AttendanceRecord.date >= from_date,
            AttendanceRecord.date <= to_date,
        )
        if employee_id is not None:
            stmt = stmt.where(AttendanceRecord.employee_id == employee_id)
        stmt = stmt.order_by(AttendanceRecord.date.desc(), AttendanceRecord.employee_id)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_shift_assignments(
        db: AsyncSession,
        company: str,
        from_date: date,
        to_date: date,
    ) -> list[ShiftAssignment]:
        result = await db.execute(
            select(ShiftAssignment).where(
                ShiftAssignment.company == company,
                ShiftAssignment.date >= from_date,
                ShiftAssignment.date <= to_date,
            )
        )
        return list(result.scalars().all())

    @staticmethod
    def build_grid(
        profiles: Sequence[EmployeeProfile],
        records: Sequence[Any],
        from_date: date,
        to_date: date,
        *,
        today: date,
        floor_date: date,
        holiday_map: Optional[dict[str, list[str]]] = None,
    ) -> list[AttendanceGridCell]:
        """Employee × day cells, newest day first; missing past work days show Absent."""
        by_key = {(r.employee_id, r.date): r for r in records}
        cells: list[AttendanceGridCell] = []
        for day in reversed(list(daterange(from_date, to_date))):
            for profile in profiles:
                record = by_key.get((profile.id, day))
                work_day = is_work_day(day, profile, holiday_map)
                derived = record is None and is_unexcused_absence(
                    day, profile, (), floor_date=floor_date, today=today,
                    holiday_map=holiday_map,
                )
                cells.append(
                    AttendanceGridCell(
                        employee_id=profile.id,
                        employee_name=profile.name,
                        date=day,
                        status=(
                            record.status if record
                            else AttendanceStatus.absent if derived
                            else None
                        ),
                        is_derived_absent=derived,
                        is_work_day=work_day,
                        record=(
                            AttendanceRecordResponse.model_validate(record)
                            if record else None
                        ),
                    )
                )
        return cells

    @staticmethod
    async def attendance_grid(
        db: AsyncSession,
        company: str,
        from_date: date,
        to_date: date,
        *,
        today: Optional[date] = None,
    ) -> list[AttendanceGridCell]:
        _validate_date_range(from_date, to_date)
        today = today or local_now().date()
        profiles = await EmployeeService.list_profiles(db, company)
        records = await AttendanceService.list_records(db, company, from_date, to_date)
        holidays = await AttendanceConfigService.get_weekly_holidays(db, company, today=today)
        return AttendanceService.build_grid(
            profiles,
            records,
            from_date,
            to_date,
            today=today,
            floor_date=settings.ABSENCE_FLOOR_DATE,
            holiday_map=holidays.days,
        )

    @staticmethod
    async def history(
        db: AsyncSession,
        employee_id: str,
        from_date: date,
        to_date: date,
    ) -> AttendanceHistoryResponse:
        """Own-history view with present / late / paid-leave / absent counts."""
        _validate_date_range(from_date, to_date)
        employee = await EmployeeService.get_employee(db, employee_id)
        records = await AttendanceService.list_records(
            db, employee.company, from_date, to_date, employee_id=employee.id,
        )
        assignments = {
            a.date: a.shift_id
            for a in await AttendanceService.list_shift_assignments(
                db, employee.company, from_date, to_date,
            )
            if a.employee_id == employee.id
        }
        catalog = await AttendanceConfigService.get_shift_catalog(db, employee.company)

        stats = AttendanceHistoryStats(total=len(records))
        for r in records:
            if r.status in (AttendanceStatus.present, AttendanceStatus.overtime):
                stats.present += 1
            if r.status == AttendanceStatus.paid_leave:
                stats.paid_leave += 1
            if r.status == AttendanceStatus.absent:
                stats.absent += 1
            shift_id = assignments.get(r.date)
            if shift_id and is_late(r.clock_in, catalog.get(shift_id)):
                stats.late += 1

        return AttendanceHistoryResponse(
            employee_id=employee.id,
            stats=stats,
            records=[AttendanceRecordResponse.model_validate(r) for r in records],
        )

    # ── Submissions ─────────────────────────────────────────────────

    @staticmethod
    async def create_submission(
        db: AsyncSession, data: SubmissionCreate,
    ) -> AttendanceSubmission:
        if data.type not in SUBMITTABLE_STATUSES:
            raise ValidationException(
                {"type": [f"'{data.type.value}' cannot be requested."]}
            )
        _validate_date_range(data.start_date, data.end_date)
        employee = await EmployeeService.get_employee(db, data.employee_id)
        submission = AttendanceSubmission(
            employee_id=employee.id,
            company=employee.company,
            type=data.type,
            start_date=data.start_date,
            end_date=data.end_date,
            notes=data.notes,
            status=SubmissionStatus.pending,
        )
        db.add(submission)
        await db.flush()
        logger.info(
            "Submission %s by %s: %s %s..%s",
            submission.id, employee.id, data.type.value, data.start_date, data.end_date,
        )
        return submission

    @staticmethod
    async def review_submission(
        db: AsyncSession,
        submission_id: Any,
        *,
        approve: bool,
        actor_id: Optional[str] = None,
    ) -> AttendanceSubmission:
        """Approve (materialising one record per day) or reject a pending submission."""
        submission = await db.get(AttendanceSubmission, submission_id)
        if submission is None:
            raise NotFoundException("Submission", submission_id)
        if submission.status != SubmissionStatus.pending:
            raise ConflictError(
                "status",
                submission.status.value,
                detail=f"Submission is already {submission.status.value}.",
            )

        submission.status = SubmissionStatus.approved if approve else SubmissionStatus.rejected
        submission.reviewed_by = actor_id
        submission.reviewed_at = datetime.now(ZoneInfo(settings.TIMEZONE))

        if approve:
            employee = await EmployeeService.get_employee(db, submission.employee_id)
            for day in daterange(submission.start_date, submission.end_date):
                await AttendanceService.upsert_record(
                    db,
                    employee,
                    day,
                    status=submission.type,
                    notes=submission.notes,
                    source="submission",
                )
        await db.flush()

        await create_audit_entry(
            db,
            action="approve" if approve else "reject",
            entity_type="attendance_submission",
            entity_id=submission.id,
            actor_id=actor_id,
            new_values={"status": submission.status.value},
        )
        return submission

    @staticmethod
    async def list_submissions(
        db: AsyncSession,
        company: str,
        *,
        status: Optional[SubmissionStatus] = None,
    ) -> list[AttendanceSubmission]:
        stmt = select(AttendanceSubmission).where(AttendanceSubmission.company == company)
        if status is not None:
            stmt = stmt.where(AttendanceSubmission.status == status)
        stmt = stmt.order_by(AttendanceSubmission.submitted_at.desc())
        result = await db.execute(stmt)
        return list(result.scalars().all())
