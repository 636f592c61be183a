"""Daily pageview/visit counters and their reporting series."""

from __future__ import annotations

from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from showcase.database import async_session
from showcase.models.daily_metric import DailyMetric

TRAFFIC_KINDS = ("pageview", "visit")
MIN_DAYS = 7
MAX_DAYS = 90


async def record_traffic(session: AsyncSession, day: str, kind: str) -> None:
    visits = 1 if kind == "visit" else 0
    pageviews = 1 if kind == "pageview" else 0
    row = await session.get(DailyMetric, day)
    if row is None:
        session.add(DailyMetric(date=day, visits=visits, pageviews=pageviews))
    else:
        row.visits += visits
        row.pageviews += pageviews
    await session.commit()


async def record_traffic_event(day: str, kind: str) -> None:
    """Middleware recorder: opens its own session."""
    async with async_session() as session:
        await record_traffic(session, day, kind)


def week_key(day: date) -> str:
    # Weeks start on Sunday; week 0 holds the days before the first Sunday.
    jan1 = date(day.year, 1, 1)
    jan1_weekday = (jan1.weekday() + 1) % 7
    week = ((day - jan1).days + jan1_weekday) // 7
    return f"{day.year}-W{week:02d}"


def clamp_days(days: int) -> int:
    return max(MIN_DAYS, min(MAX_DAYS, days))


async def traffic_series(
    session: AsyncSession,
    days: int,
    group: str = "day",
    today: date | None = None,
) -> dict:
    """Zero-filled series of the last ``days`` days (today included), plus totals."""
    today = today or date.today()
    start = today - timedelta(days=days - 1)
    result = await session.execute(
        select(DailyMetric)
        .where(DailyMetric.date >= start.isoformat())
        .where(DailyMetric.date <= today.isoformat())
    )
    by_date = {row.date: row for row in result.scalars()}

    buckets: dict[str, dict[str, int]] = {}
    for offset in range(days):
        day = start + timedelta(days=offset)
        key = week_key(day) if group == "week" else day.isoformat()
        bucket = buckets.setdefault(key, {"visits": 0, "pageviews": 0})
        row = by_date.get(day.isoformat())
        if row is not None:
            bucket["visits"] += row.visits
            bucket["pageviews"] += row.pageviews

    series = [{"date": key, **buckets[key]} for key in sorted(buckets)]
    totals = {
        "visits": sum(p["visits"] for p in series),
        "pageviews": sum(p["pageviews"] for p in series),
    }
    return {"metrics": series, "totals": totals}
