"""KPI router — weight configuration, manual scores, ranking, output and GMV inputs."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from liveops.database import get_db
from liveops.dependencies import get_actor_id
from liveops.kpi.schemas import (
    ContentPostCreate,
    ContentPostResponse,
    CriterionCreate,
    KPIRankingResponse,
    KPISystemConfig,
    LiveReportCreate,
    LiveReportResponse,
    ScoreEntryRequest,
    StandardWeightsUpdate,
)
from liveops.kpi.service import KPIService

router = APIRouter(prefix="", tags=["kpi"])


# ── Configuration ───────────────────────────────────────────────────

@router.get("/config/{company}", response_model=KPISystemConfig)
async def get_config(company: str, db: AsyncSession = Depends(get_db)):
    return await KPIService.get_config(db, company)


@router.post("/config/{company}/criteria", response_model=KPISystemConfig, status_code=201)
async def add_criterion(
    company: str,
    body: CriterionCreate,
    db: AsyncSession = Depends(get_db),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    return await KPIService.add_criterion(db, company, body, actor_id=actor_id)


@router.delete("/config/{company}/criteria/{criterion_id}", response_model=KPISystemConfig)
async def delete_criterion(
    company: str,
    criterion_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    return await KPIService.delete_criterion(db, company, criterion_id, actor_id=actor_id)


@router.patch("/config/{company}/weights", response_model=KPISystemConfig)
async def update_weights(
    company: str,
    body: StandardWeightsUpdate,
    db: AsyncSession = Depends(get_db),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    return await KPIService.update_weights(db, company, body, actor_id=actor_id)


# ── Manual scores ───────────────────────────────────────────────────

@router.put("/scores/{company}", response_model=dict[str, float])
async def upsert_scores(
    company: str,
    body: ScoreEntryRequest,
    db: AsyncSession = Depends(get_db),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    return await KPIService.upsert_scores(db, company, body, actor_id=actor_id)


# ── Ranking ─────────────────────────────────────────────────────────

@router.get("/ranking", response_model=KPIRankingResponse)
async def ranking(
    company: str = Query(..., min_length=1),
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    db: AsyncSession = Depends(get_db),
):
    return await KPIService.ranking(db, company, year, month)


# ── Inputs ──────────────────────────────────────────────────────────

@router.post("/content-posts", response_model=ContentPostResponse, status_code=201)
async def create_content_post(
    body: ContentPostCreate,
    db: AsyncSession = Depends(get_db),
):
    return await KPIService.create_content_post(db, body)


@router.get("/content-posts", response_model=list[ContentPostResponse])
async def list_content_posts(
    company: str = Query(..., min_length=1),
    from_date: date = Query(...),
    to_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
):
    return await KPIService.list_content_posts(db, company, from_date, to_date)


@router.post("/live-reports", response_model=LiveReportResponse, status_code=201)
async def create_live_report(
    body: LiveReportCreate,
    db: AsyncSession = Depends(get_db),
):
    return await KPIService.create_live_report(db, body)


@router.get("/live-reports", response_model=list[LiveReportResponse])
async def list_live_reports(
    company: str = Query(..., min_length=1),
    from_date: date = Query(...),
    to_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
):
    return await KPIService.list_live_reports(db, company, from_date, to_date)
