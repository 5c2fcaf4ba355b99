"""KPI Pydantic v2 schemas — weight configuration, scoring results, KPI inputs."""

import uuid
from datetime import date
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from liveops.common.money import coerce_amount


# ═════════════════════════════════════════════════════════════════════
# Configuration (``kpi_system_<company>``)
# ═════════════════════════════════════════════════════════════════════


class KPICriterion(BaseModel):
    """A manually scored criterion with its weight in percent."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    weight: float = Field(default=0, ge=0)


# year-month -> employee id -> criterion id -> score
ScoreBook = dict[str, dict[str, dict[str, float]]]


class KPISystemConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    version: int = 1
    criteria: list[KPICriterion] = Field(default_factory=list)
    attendance_weight: float = Field(
        default=25, ge=0,
        validation_alias=AliasChoices("attendance_weight", "attendanceWeight"),
    )
    punctuality_weight: float = Field(
        default=25, ge=0,
        validation_alias=AliasChoices("punctuality_weight", "punctualityWeight"),
    )
    output_weight: float = Field(
        default=25, ge=0,
        validation_alias=AliasChoices("output_weight", "outputWeight", "contentWeight"),
    )
    revenue_weight: float = Field(
        default=25, ge=0,
        validation_alias=AliasChoices("revenue_weight", "revenueWeight", "gmvWeight"),
    )
    scores: ScoreBook = Field(default_factory=dict)

    @field_validator("scores", mode="before")
    @classmethod
    def _drop_garbled_scores(cls, value: Any) -> ScoreBook:
        book: ScoreBook = {}
        if not isinstance(value, dict):
            return book
        for month, employees in value.items():
            if not isinstance(employees, dict):
                continue
            for employee_id, entries in employees.items():
                if not isinstance(entries, dict):
                    continue
                clean = {}
                for crit_id, score in entries.items():
                    try:
                        clean[str(crit_id)] = float(score)
                    except (TypeError, ValueError):
                        continue
                book.setdefault(str(month), {})[str(employee_id)] = clean
        return book

    @property
    def total_configured_weight(self) -> float:
        return (
            self.attendance_weight
            + self.punctuality_weight
            + self.output_weight
            + self.revenue_weight
            + sum(c.weight for c in self.criteria)
        )

    def manual_scores_for(self, year_month: str, employee_id: str) -> dict[str, float]:
        return dict(self.scores.get(year_month, {}).get(employee_id, {}))


class CriterionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    weight: float = Field(default=10, ge=0, le=100)


class StandardWeightsUpdate(BaseModel):
    attendance_weight: Optional[float] = Field(None, ge=0, le=100)
    punctuality_weight: Optional[float] = Field(None, ge=0, le=100)
    output_weight: Optional[float] = Field(None, ge=0, le=100)
    revenue_weight: Optional[float] = Field(None, ge=0, le=100)


class ScoreEntryRequest(BaseModel):
    """Manual scores for one employee and month; values are clamped to [0, 100]."""

    year: int = Field(..., ge=2000, le=2100)
    month: int = Field(..., ge=1, le=12)
    employee_id: str = Field(..., min_length=1)
    scores: dict[str, float]


# ═════════════════════════════════════════════════════════════════════
# Scoring results
# ═════════════════════════════════════════════════════════════════════


class ComponentScore(BaseModel):
    key: str
    label: str
    score: float
    weight: float


class KPIResult(BaseModel):
    employee_id: str
    employee_name: str
    job_title: str = ""

    attendance_score: float = 0
    present_days: int = 0
    attendance_records: int = 0
    punctuality_score: Optional[float] = None
    output_count: int = 0
    output_score: Optional[float] = None
    total_revenue: int = 0
    revenue_score: Optional[float] = None
    manual_scores: dict[str, float] = Field(default_factory=dict)

    components: list[ComponentScore] = Field(default_factory=list)
    weighted_sum: float = 0
    total_weight_used: float = 0
    final_score: float = 0
    weights_misconfigured: bool = False


class KPIRankingResponse(BaseModel):
    company: str
    year: int
    month: int
    output_window_start: date
    output_window_end: date
    total_configured_weight: float
    results: list[KPIResult]


# ═════════════════════════════════════════════════════════════════════
# KPI inputs
# ═════════════════════════════════════════════════════════════════════


class ContentPostCreate(BaseModel):
    creator_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=300)
    brand: Optional[str] = None
    platform: Optional[str] = None
    posting_date: Optional[date] = None
    link: Optional[str] = None


class ContentPostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    company: str
    creator_id: str
    title: str
    brand: Optional[str] = None
    platform: Optional[str] = None
    posting_date: Optional[date] = None
    link: Optional[str] = None


class LiveReportCreate(BaseModel):
    host_id: str = Field(..., min_length=1)
    report_date: date
    brand: Optional[str] = None
    gmv: int = 0
    duration_minutes: int = Field(default=0, ge=0)
    total_views: int = Field(default=0, ge=0)

    @field_validator("gmv", mode="before")
    @classmethod
    def _lenient_gmv(cls, value: Any) -> int:
        return coerce_amount(value)


class LiveReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    company: str
    host_id: str
    report_date: date
    brand: Optional[str] = None
    gmv: int
    duration_minutes: int = 0
    total_views: int = 0
