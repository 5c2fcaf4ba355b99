"""KPI service layer — weight configuration, manual scores, ranking, KPI inputs."""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from liveops.attendance.service import (
    AttendanceConfigService,
    AttendanceService,
)
from liveops.attendance.workdays import calendar_month_window, output_window
from liveops.common.audit import create_audit_entry
from liveops.common.constants import KPI_SYSTEM_KEY_PREFIX
from liveops.common.dates import year_month_key
from liveops.common.exceptions import NotFoundException, ValidationException
from liveops.common.settings_store import SettingsStore, company_key
from liveops.config import settings
from liveops.core_hr.service import EmployeeService
from liveops.kpi.engine import clamp_score, rank, score_employee
from liveops.kpi.models import ContentPost, LiveReport
from liveops.kpi.schemas import (
    ContentPostCreate,
    CriterionCreate,
    KPICriterion,
    KPIRankingResponse,
    KPISystemConfig,
    LiveReportCreate,
    ScoreEntryRequest,
    StandardWeightsUpdate,
)

logger = logging.getLogger(__name__)


class KPIService:
    """Business logic for KPI configuration and scoring."""

    # ── Configuration ───────────────────────────────────────────────

    @staticmethod
    async def get_config(db: AsyncSession, company: str) -> KPISystemConfig:
        blob = await SettingsStore.get_value(db, company_key(KPI_SYSTEM_KEY_PREFIX, company))
        if not isinstance(blob, dict):
            return KPISystemConfig()
        try:
            return KPISystemConfig.model_validate(blob)
        except ValidationError:
            logger.warning("Invalid KPI configuration for %s; using defaults", company)
            return KPISystemConfig()

    @staticmethod
    async def save_config(
        db: AsyncSession,
        company: str,
        config: KPISystemConfig,
        *,
        actor_id: Optional[str] = None,
        action: str = "save_config",
    ) -> KPISystemConfig:
        key = company_key(KPI_SYSTEM_KEY_PREFIX, company)
        await SettingsStore.upsert_value(db, key, config.model_dump())
        await create_audit_entry(
            db,
            action=action,
            entity_type="kpi_system",
            entity_id=key,
            actor_id=actor_id,
            new_values=config.model_dump(exclude={"scores"}),
        )
        if config.total_configured_weight != 100:
            logger.warning(
                "KPI weights for %s total %.1f%%, not 100%%",
                company, config.total_configured_weight,
            )
        return config

    @staticmethod
    async def add_criterion(
        db: AsyncSession,
        company: str,
        data: CriterionCreate,
        *,
        actor_id: Optional[str] = None,
    ) -> KPISystemConfig:
        config = await KPIService.get_config(db, company)
        criterion = KPICriterion(
            id=f"crit-{uuid.uuid4().hex[:12]}",
            name=data.name.strip().upper(),
            weight=data.weight,
        )
        config.criteria.append(criterion)
        return await KPIService.save_config(
            db, company, config, actor_id=actor_id, action="add_criterion",
        )

    @staticmethod
    async def delete_criterion(
        db: AsyncSession,
        company: str,
        criterion_id: str,
        *,
        actor_id: Optional[str] = None,
    ) -> KPISystemConfig:
        """Remove a criterion together with every score entered for it."""
        config = await KPIService.get_config(db, company)
        if all(c.id != criterion_id for c in config.criteria):
            raise NotFoundException("KPI criterion", criterion_id)
        config.criteria = [c for c in config.criteria if c.id != criterion_id]
        for employees in config.scores.values():
            for entries in employees.values():
                entries.pop(criterion_id, None)
        return await KPIService.save_config(
            db, company, config, actor_id=actor_id, action="delete_criterion",
        )

    @staticmethod
    async def update_weights(
        db: AsyncSession,
        company: str,
        data: StandardWeightsUpdate,
        *,
        actor_id: Optional[str] = None,
    ) -> KPISystemConfig:
        config = await KPIService.get_config(db, company)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(config, field, value)
        return await KPIService.save_config(
            db, company, config, actor_id=actor_id, action="update_weights",
        )

    # ── Manual scores ───────────────────────────────────────────────

    @staticmethod
    async def upsert_scores(
        db: AsyncSession,
        company: str,
        data: ScoreEntryRequest,
        *,
        actor_id: Optional[str] = None,
    ) -> dict[str, float]:
        """Merge the given criterion scores into the employee's month."""
        config = await KPIService.get_config(db, company)
        known = {c.id for c in config.criteria}
        unknown = sorted(set(data.scores) - known)
        if unknown:
            raise ValidationException(
                {"scores": [f"Unknown criterion '{cid}'." for cid in unknown]}
            )
        await EmployeeService.get_employee(db, data.employee_id)

        month_key = year_month_key(data.year, data.month)
        old = config.manual_scores_for(month_key, data.employee_id)
        entries = {cid: clamp_score(score) for cid, score in data.scores.items()}
        config.scores.setdefault(month_key, {}).setdefault(data.employee_id, {}).update(entries)

        await SettingsStore.upsert_value(
            db, company_key(KPI_SYSTEM_KEY_PREFIX, company), config.model_dump(),
        )
        await create_audit_entry(
            db,
            action="enter_scores",
            entity_type="kpi_score",
            entity_id=f"{month_key}:{data.employee_id}",
            actor_id=actor_id,
            old_values=old or None,
            new_values=entries,
        )
        logger.info("KPI scores for %s %s saved", data.employee_id, month_key)
        return entries

    # ── Ranking ─────────────────────────────────────────────────────

    @staticmethod
    async def ranking(
        db: AsyncSession,
        company: str,
        year: int,
        month: int,
    ) -> KPIRankingResponse:
        """Score every active employee for the month, best first."""
        if not 1 <= month <= 12:
            raise ValidationException({"month": ["Month must be between 1 and 12."]})
        config = await KPIService.get_config(db, company)
        month_start, month_end = calendar_month_window(year, month)
        out_start, out_end = output_window(year, month)

        profiles = await EmployeeService.list_profiles(db, company)
        records = await AttendanceService.list_records(db, company, month_start, month_end)
        assignments = await AttendanceService.list_shift_assignments(
            db, company, month_start, month_end,
        )
        catalog = await AttendanceConfigService.get_shift_catalog(db, company)
        posts = await KPIService.list_content_posts(db, company, out_start, out_end)
        reports = await KPIService.list_live_reports(db, company, month_start, month_end)

        shift_starts: dict[str, dict] = {}
        for a in assignments:
            shift = catalog.get(a.shift_id)
            if shift is not None:
                shift_starts.setdefault(a.employee_id, {})[a.date] = shift.start_time

        results = [
            score_employee(
                profile,
                year,
                month,
                records,
                posts,
                reports,
                config,
                shift_starts=shift_starts.get(profile.id, {}),
                output_quota=settings.OUTPUT_MONTHLY_QUOTA,
                revenue_target=settings.REVENUE_MONTHLY_TARGET,
            )
            for profile in profiles
        ]
        misconfigured = [r.employee_id for r in results if r.weights_misconfigured]
        if misconfigured:
            logger.warning(
                "KPI weights for %s leave %d employee(s) with no applicable weight",
                company, len(misconfigured),
            )
        return KPIRankingResponse(
            company=company,
            year=year,
            month=month,
            output_window_start=out_start,
            output_window_end=out_end,
            total_configured_weight=config.total_configured_weight,
            results=rank(results),
        )

    # ── KPI inputs ──────────────────────────────────────────────────

    @staticmethod
    async def create_content_post(
        db: AsyncSession, data: ContentPostCreate,
    ) -> ContentPost:
        creator = await EmployeeService.get_employee(db, data.creator_id)
        post = ContentPost(company=creator.company, **data.model_dump())
        db.add(post)
        await db.flush()
        return post

    @staticmethod
    async def list_content_posts(
        db: AsyncSession, company: str, from_date, to_date,
    ) -> list[ContentPost]:
        result = await db.execute(
            select(ContentPost).where(
                ContentPost.company == company,
                ContentPost.posting_date >= from_date,
                ContentPost.posting_date <= to_date,
            ).order_by(ContentPost.posting_date)
        )
        return list(result.scalars().all())

    @staticmethod
    async def create_live_report(
        db: AsyncSession, data: LiveReportCreate,
    ) -> LiveReport:
        host = await EmployeeService.get_employee(db, data.host_id)
        report = LiveReport(company=host.company, **data.model_dump())
        db.add(report)
        await db.flush()
        return report

    @staticmethod
    async def list_live_reports(
        db: AsyncSession, company: str, from_date, to_date,
    ) -> list[LiveReport]:
        result = await db.execute(
            select(LiveReport).where(
                LiveReport.company == company,
                LiveReport.report_date >= from_date,
                LiveReport.report_date <= to_date,
            ).order_by(LiveReport.report_date)
        )
        return list(result.scalars().all())
