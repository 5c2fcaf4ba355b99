"""KPI service and API tests — criteria, weights, manual scores, ranking."""

from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import select

from liveops.attendance.models import ShiftAssignment
from liveops.common.audit import AuditTrail
from liveops.common.constants import AttendanceStatus
from liveops.common.exceptions import NotFoundException, ValidationException
from liveops.kpi.models import ContentPost, LiveReport
from liveops.kpi.schemas import (
    CriterionCreate,
    ScoreEntryRequest,
    StandardWeightsUpdate,
)
from liveops.kpi.service import KPIService
from tests.conftest import COMPANY, insert_employee, insert_record

BASE = "/api/v1/kpi"


async def _add_criterion(db, name="teamwork", weight=10):
    config = await KPIService.add_criterion(db, COMPANY, CriterionCreate(name=name, weight=weight))
    return config.criteria[-1]


# ═════════════════════════════════════════════════════════════════════
# CONFIGURATION
# ═════════════════════════════════════════════════════════════════════


class TestKPIConfig:

    async def test_defaults_when_unset(self, db):
        config = await KPIService.get_config(db, COMPANY)
        assert config.attendance_weight == 25
        assert config.total_configured_weight == 100

    async def test_add_criterion_uppercases_name(self, db):
        criterion = await _add_criterion(db, " teamwork ", 15)
        assert criterion.name == "TEAMWORK"
        assert criterion.id.startswith("crit-")
        config = await KPIService.get_config(db, COMPANY)
        assert [c.id for c in config.criteria] == [criterion.id]

    async def test_configs_are_company_scoped(self, db):
        await _add_criterion(db)
        other = await KPIService.get_config(db, "OtherCo")
        assert other.criteria == []

    async def test_update_weights_partial(self, db):
        await KPIService.update_weights(
            db, COMPANY, StandardWeightsUpdate(revenue_weight=40),
        )
        config = await KPIService.get_config(db, COMPANY)
        assert config.revenue_weight == 40
        assert config.output_weight == 25

    async def test_delete_criterion_purges_scores(self, db):
        await insert_employee(db, id="EMP-001")
        keep = await _add_criterion(db, "keep")
        drop = await _add_criterion(db, "drop")
        await KPIService.upsert_scores(
            db, COMPANY,
            ScoreEntryRequest(
                year=2026, month=3, employee_id="EMP-001",
                scores={keep.id: 70, drop.id: 80},
            ),
        )

        await KPIService.delete_criterion(db, COMPANY, drop.id)

        config = await KPIService.get_config(db, COMPANY)
        assert [c.id for c in config.criteria] == [keep.id]
        assert config.manual_scores_for("2026-03", "EMP-001") == {keep.id: 70.0}

    async def test_delete_unknown_criterion_raises(self, db):
        with pytest.raises(NotFoundException):
            await KPIService.delete_criterion(db, COMPANY, "crit-missing")

    async def test_save_is_audited(self, db):
        await _add_criterion(db)
        await db.commit()
        rows = (await db.execute(select(AuditTrail))).scalars().all()
        assert [r.action for r in rows] == ["add_criterion"]
        assert rows[0].entity_id == f"kpi_system_{COMPANY}"

    async def test_stored_legacy_blob_is_read(self, db):
        from liveops.common.settings_store import SettingsStore

        await SettingsStore.upsert_value(
            db, f"kpi_system_{COMPANY}",
            {"attendanceWeight": 60, "contentWeight": 40, "gmvWeight": 0, "punctualityWeight": 0},
        )
        config = await KPIService.get_config(db, COMPANY)
        assert (config.attendance_weight, config.output_weight) == (60, 40)

    async def test_invalid_stored_blob_falls_back_to_defaults(self, db):
        from liveops.common.settings_store import SettingsStore

        await SettingsStore.upsert_value(
            db, f"kpi_system_{COMPANY}", {"attendanceWeight": -5},
        )
        config = await KPIService.get_config(db, COMPANY)
        assert config.attendance_weight == 25


# ═════════════════════════════════════════════════════════════════════
# MANUAL SCORES
# ═════════════════════════════════════════════════════════════════════


class TestManualScores:

    async def test_scores_are_clamped(self, db):
        await insert_employee(db, id="EMP-001")
        crit = await _add_criterion(db)
        entries = await KPIService.upsert_scores(
            db, COMPANY,
            ScoreEntryRequest(year=2026, month=3, employee_id="EMP-001", scores={crit.id: 140}),
        )
        assert entries == {crit.id: 100.0}

    async def test_later_entry_keeps_other_criteria(self, db):
        await insert_employee(db, id="EMP-001")
        teamwork = await _add_criterion(db, "teamwork")
        initiative = await _add_criterion(db, "initiative")
        for scores in ({teamwork.id: 70}, {initiative.id: 90}):
            await KPIService.upsert_scores(
                db, COMPANY,
                ScoreEntryRequest(year=2026, month=3, employee_id="EMP-001", scores=scores),
            )

        config = await KPIService.get_config(db, COMPANY)
        assert config.manual_scores_for("2026-03", "EMP-001") == {
            teamwork.id: 70.0, initiative.id: 90.0,
        }

    async def test_unknown_criterion_rejected(self, db):
        await insert_employee(db, id="EMP-001")
        with pytest.raises(ValidationException):
            await KPIService.upsert_scores(
                db, COMPANY,
                ScoreEntryRequest(year=2026, month=3, employee_id="EMP-001", scores={"nope": 50}),
            )

    async def test_unknown_employee_rejected(self, db):
        crit = await _add_criterion(db)
        with pytest.raises(NotFoundException):
            await KPIService.upsert_scores(
                db, COMPANY,
                ScoreEntryRequest(year=2026, month=3, employee_id="GHOST", scores={crit.id: 50}),
            )


# ═════════════════════════════════════════════════════════════════════
# RANKING
# ═════════════════════════════════════════════════════════════════════


class TestRanking:

    async def test_ranks_best_first_with_role_components(self, db):
        creator = await insert_employee(db, id="EMP-C", name="Cindy", job_title="Content Creator")
        admin = await insert_employee(db, id="EMP-A", name="Sari", job_title="Admin")
        for day in range(2, 12):
            await insert_record(db, creator, date(2026, 3, day),
                                AttendanceStatus.present if day < 11 else AttendanceStatus.sick)
            await insert_record(db, admin, date(2026, 3, day), AttendanceStatus.present)
        for _ in range(25):
            db.add(ContentPost(
                company=COMPANY, creator_id="EMP-C", title="Reels", posting_date=date(2026, 3, 10),
            ))
        await db.commit()

        ranking = await KPIService.ranking(db, COMPANY, 2026, 3)

        assert [r.employee_id for r in ranking.results] == ["EMP-A", "EMP-C"]
        by_id = {r.employee_id: r for r in ranking.results}
        assert by_id["EMP-A"].final_score == pytest.approx(100.0)
        assert by_id["EMP-C"].final_score == pytest.approx(70.0)
        assert ranking.output_window_start == date(2026, 2, 26)
        assert ranking.output_window_end == date(2026, 3, 25)

    async def test_host_revenue_counted(self, db):
        host = await insert_employee(db, id="EMP-H", name="Rina", job_title="Host Live Streaming")
        await insert_record(db, host, date(2026, 3, 2), AttendanceStatus.present)
        db.add(LiveReport(company=COMPANY, host_id="EMP-H", report_date=date(2026, 3, 2), gmv=4_000_000))
        db.add(LiveReport(company=COMPANY, host_id="EMP-H", report_date=date(2026, 3, 20), gmv=1_000_000))
        await db.commit()

        ranking = await KPIService.ranking(db, COMPANY, 2026, 3)
        result = ranking.results[0]
        assert result.total_revenue == 5_000_000
        assert result.revenue_score == pytest.approx(50.0)
        assert result.output_score is None

    async def test_punctuality_uses_assigned_shift(self, db):
        emp = await insert_employee(db, id="EMP-001", name="Sari")
        await insert_record(db, emp, date(2026, 3, 2), AttendanceStatus.present, clock_in="07:58")
        await insert_record(db, emp, date(2026, 3, 3), AttendanceStatus.present, clock_in="08:20")
        for day in (2, 3):
            db.add(ShiftAssignment(
                employee_id="EMP-001", company=COMPANY, date=date(2026, 3, day), shift_id="1",
            ))
        await db.commit()

        result = (await KPIService.ranking(db, COMPANY, 2026, 3)).results[0]
        assert result.punctuality_score == pytest.approx(50.0)
        # (100 * 25 + 50 * 25) / 50
        assert result.final_score == pytest.approx(75.0)

    async def test_manual_scores_flow_into_ranking(self, db):
        await insert_employee(db, id="EMP-001", name="Sari")
        crit = await _add_criterion(db, "initiative", 25)
        await KPIService.upsert_scores(
            db, COMPANY,
            ScoreEntryRequest(year=2026, month=3, employee_id="EMP-001", scores={crit.id: 80}),
        )
        result = (await KPIService.ranking(db, COMPANY, 2026, 3)).results[0]
        assert result.manual_scores == {crit.id: 80.0}
        # attendance 0 (no records) * 25 + 80 * 25, over 50
        assert result.final_score == pytest.approx(40.0)

    async def test_misconfigured_weights_flagged(self, db):
        await insert_employee(db, id="EMP-001", name="Sari", job_title="Admin")
        await KPIService.update_weights(db, COMPANY, StandardWeightsUpdate(attendance_weight=0))
        result = (await KPIService.ranking(db, COMPANY, 2026, 3)).results[0]
        assert result.final_score == 0
        assert result.weights_misconfigured is True


# ═════════════════════════════════════════════════════════════════════
# API
# ═════════════════════════════════════════════════════════════════════


class TestKPIAPI:

    async def test_criteria_crud(self, client):
        resp = await client.post(
            f"{BASE}/config/{COMPANY}/criteria", json={"name": "teamwork", "weight": 20},
        )
        assert resp.status_code == 201
        crit_id = resp.json()["criteria"][0]["id"]

        resp = await client.get(f"{BASE}/config/{COMPANY}")
        assert resp.json()["criteria"][0]["name"] == "TEAMWORK"

        resp = await client.delete(f"{BASE}/config/{COMPANY}/criteria/{crit_id}")
        assert resp.status_code == 200
        assert resp.json()["criteria"] == []

        resp = await client.delete(f"{BASE}/config/{COMPANY}/criteria/{crit_id}")
        assert resp.status_code == 404

    async def test_patch_weights_rejects_out_of_range(self, client):
        resp = await client.patch(
            f"{BASE}/config/{COMPANY}/weights", json={"attendance_weight": 120},
        )
        assert resp.status_code == 422

    async def test_unknown_criterion_score_is_422(self, client, db):
        await insert_employee(db, id="EMP-001")
        resp = await client.put(
            f"{BASE}/scores/{COMPANY}",
            json={"year": 2026, "month": 3, "employee_id": "EMP-001", "scores": {"x": 1}},
        )
        assert resp.status_code == 422

    async def test_ranking_endpoint(self, client, db):
        await insert_employee(db, id="EMP-001")
        resp = await client.get(
            f"{BASE}/ranking", params={"company": COMPANY, "year": 2026, "month": 3},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["total_configured_weight"] == 100
        assert body["results"][0]["employee_id"] == "EMP-001"

    async def test_content_post_and_live_report_inputs(self, client, db):
        await insert_employee(db, id="EMP-C", job_title="Creator Host")
        resp = await client.post(
            f"{BASE}/content-posts",
            json={"creator_id": "EMP-C", "title": "Unboxing", "posting_date": "2026-03-05"},
        )
        assert resp.status_code == 201
        assert resp.json()["company"] == COMPANY

        resp = await client.post(
            f"{BASE}/live-reports",
            json={"host_id": "EMP-C", "report_date": "2026-03-05", "gmv": "1.500.000"},
        )
        assert resp.status_code == 201
        assert resp.json()["gmv"] == 1_500_000

        resp = await client.get(
            f"{BASE}/content-posts",
            params={"company": COMPANY, "from_date": "2026-03-01", "to_date": "2026-03-31"},
        )
        assert len(resp.json()) == 1

    async def test_content_post_for_unknown_creator_404(self, client):
        resp = await client.post(
            f"{BASE}/content-posts", json={"creator_id": "GHOST", "title": "x"},
        )
        assert resp.status_code == 404
