"""Site traffic API — pageview/visit beacons and the admin series."""

from __future__ import annotations

import logging
import re
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from showcase.api.auth import require_admin
from showcase.database import get_session
from showcase.security import Principal
from showcase.services.traffic import TRAFFIC_KINDS, clamp_days, record_traffic, traffic_series

logger = logging.getLogger("showcase.traffic")
router = APIRouter(prefix="/api/admin/metrics", tags=["metrics"])

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class TrafficIngest(BaseModel):
    date: str
    type: str


@router.post("/ingest")
async def ingest_traffic(body: TrafficIngest, session: AsyncSession = Depends(get_session)):
    """Unauthenticated beacon; keep it behind a CDN/rate limit in production."""
    if not _DATE_RE.match(body.date):
        raise HTTPException(status_code=400, detail="Invalid date")
    if body.type not in TRAFFIC_KINDS:
        raise HTTPException(status_code=400, detail="Invalid type")
    await record_traffic(session, body.date, body.type)
    return {"success": True}


@router.get("")
async def get_traffic(
    days: int = Query(default=30),
    group: Literal["day", "week"] = Query(default="day"),
    session: AsyncSession = Depends(get_session),
    _admin: Principal = Depends(require_admin),
):
    data = await traffic_series(session, clamp_days(days), group)
    return {"success": True, "data": data}
