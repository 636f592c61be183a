"""Tests for daily pageview/visit counters and the admin traffic API."""

from __future__ import annotations

from datetime import date

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from showcase.api.metrics import router as metrics_router
from showcase.database import get_session
from showcase.models.daily_metric import DailyMetric
from showcase.services.traffic import clamp_days, record_traffic, traffic_series, week_key


@pytest.fixture
def metrics_app(db_session: AsyncSession):
    app = FastAPI()

    async def _override_session():
        yield db_session

    app.dependency_overrides[get_session] = _override_session
    app.include_router(metrics_router)
    return app


def test_week_key_starts_weeks_on_sunday():
    # 2026-01-01 is a Thursday; the first Sunday (Jan 4) opens week 1.
    assert week_key(date(2026, 1, 1)) == "2026-W00"
    assert week_key(date(2026, 1, 3)) == "2026-W00"
    assert week_key(date(2026, 1, 4)) == "2026-W01"


def test_clamp_days():
    assert clamp_days(1) == 7
    assert clamp_days(30) == 30
    assert clamp_days(365) == 90


@pytest.mark.asyncio
async def test_record_traffic_upserts_counters(db_session: AsyncSession):
    await record_traffic(db_session, "2026-03-14", "visit")
    await record_traffic(db_session, "2026-03-14", "pageview")
    await record_traffic(db_session, "2026-03-14", "pageview")

    row = await db_session.get(DailyMetric, "2026-03-14")
    assert row.visits == 1
    assert row.pageviews == 2


@pytest.mark.asyncio
async def test_daily_series_is_zero_filled(db_session: AsyncSession):
    db_session.add_all(
        [
            DailyMetric(date="2026-03-10", visits=3, pageviews=7),
            DailyMetric(date="2026-03-14", visits=1, pageviews=2),
            DailyMetric(date="2026-01-01", visits=50, pageviews=50),
        ]
    )
    await db_session.commit()

    data = await traffic_series(db_session, 7, today=date(2026, 3, 14))
    assert [p["date"] for p in data["metrics"]] == [
        "2026-03-08", "2026-03-09", "2026-03-10", "2026-03-11",
        "2026-03-12", "2026-03-13", "2026-03-14",
    ]
    assert data["metrics"][2] == {"date": "2026-03-10", "visits": 3, "pageviews": 7}
    assert data["totals"] == {"visits": 4, "pageviews": 9}


@pytest.mark.asyncio
async def test_weekly_series_rolls_up_days(db_session: AsyncSession):
    db_session.add_all(
        [
            DailyMetric(date="2026-03-09", visits=1, pageviews=1),
            DailyMetric(date="2026-03-14", visits=2, pageviews=4),
            DailyMetric(date="2026-03-15", visits=5, pageviews=5),
        ]
    )
    await db_session.commit()

    data = await traffic_series(db_session, 14, group="week", today=date(2026, 3, 15))
    by_week = {p["date"]: p for p in data["metrics"]}
    assert by_week[week_key(date(2026, 3, 14))]["pageviews"] == 5
    assert by_week[week_key(date(2026, 3, 15))]["visits"] == 5
    assert data["totals"] == {"visits": 8, "pageviews": 10}


@pytest.mark.asyncio
async def test_ingest_and_admin_series_api(metrics_app, db_session, admin_headers, reader_headers):
    transport = ASGITransport(app=metrics_app)
    today = date.today().isoformat()
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        ok = await client.post("/api/admin/metrics/ingest", json={"date": today, "type": "pageview"})
        bad_date = await client.post("/api/admin/metrics/ingest", json={"date": "yesterday", "type": "visit"})
        bad_type = await client.post("/api/admin/metrics/ingest", json={"date": today, "type": "click"})
        anonymous = await client.get("/api/admin/metrics")
        reader = await client.get("/api/admin/metrics", headers=reader_headers)
        series = await client.get("/api/admin/metrics?days=3", headers=admin_headers)

    assert ok.status_code == 200
    assert bad_date.status_code == 400
    assert bad_type.status_code == 400
    assert anonymous.status_code == 401
    assert reader.status_code == 403
    assert series.status_code == 200
    data = series.json()["data"]
    assert len(data["metrics"]) == 7
    assert data["metrics"][-1] == {"date": today, "visits": 0, "pageviews": 1}
    assert data["totals"]["pageviews"] == 1
