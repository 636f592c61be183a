"""Daily site traffic counters."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column
from pydantic import BaseModel

from showcase.database import Base


class DailyMetric(Base):
    __tablename__ = "daily_metrics"

    date: Mapped[str] = mapped_column(String(10), primary_key=True)  # YYYY-MM-DD
    visits: Mapped[int] = mapped_column(Integer, default=0)
    pageviews: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )


# ── Pydantic Schemas ─────────────────────────────────────────

class TrafficPoint(BaseModel):
    date: str
    visits: int
    pageviews: int


class TrafficTotals(BaseModel):
    visits: int
    pageviews: int
