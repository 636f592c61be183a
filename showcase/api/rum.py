"""Real-user-monitoring API — beacon ingest and admin summaries."""

# Annotations stay eager: FastAPI resolves them through the rate-limit wrapper.

import logging
import random
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import JSONResponse

from showcase.api.auth import require_admin
from showcase.config import settings
from showcase.rate_limit import limiter
from showcase.rum.sanitizer import (
    extract_events,
    parse_beacon_body,
    resolve_sample_rate,
    sanitize_event,
)
from showcase.rum.store import RumStore
from showcase.rum.summary import build_report
from showcase.security import Principal
from showcase.utils.time import epoch_ms, utc_now

logger = logging.getLogger("showcase.rum")
router = APIRouter(prefix="/api/admin/rum", tags=["rum"])

MIN_SUMMARY_WINDOW_MS = 60_000
MAX_SUMMARY_WINDOW_MS = 7 * 24 * 60 * 60 * 1000
DEFAULT_SUMMARY_WINDOW_MS = 24 * 60 * 60 * 1000

_NO_STORE = {"Cache-Control": "no-store"}
_BEACON_CORS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def get_rum_store(request: Request) -> RumStore:
    """The process-wide store built by the application factory."""
    return request.app.state.rum_store


def _roll() -> float:
    return random.random()


def _error(message: str, status_code: int = 400) -> JSONResponse:
    return JSONResponse({"success": False, "error": message}, status_code=status_code, headers=_NO_STORE)


@router.options("/ingest")
async def ingest_preflight():
    return Response(status_code=204, headers={**_BEACON_CORS, **_NO_STORE})


@router.post("/ingest")
@limiter.limit(settings.rum_ingest_rate_limit)
async def ingest_metrics(request: Request, store: RumStore = Depends(get_rum_store)):
    """Accept a single vitals event or a batch from ``navigator.sendBeacon``."""
    body = parse_beacon_body(request.headers.get("content-type", ""), await request.body())
    if body is None:
        return _error("Invalid body")

    sample_rate = resolve_sample_rate(body, settings.rum_default_sample_rate)
    if _roll() > sample_rate:
        return JSONResponse({"success": True, "sampledOut": True}, headers=_NO_STORE)

    raw_events = extract_events(body)
    if not raw_events:
        return _error("No events")

    user_agent = request.headers.get("user-agent")
    now = epoch_ms()
    sanitized = []
    for raw in raw_events[: settings.rum_max_batch]:
        event = sanitize_event(raw, user_agent, now)
        if event is not None:
            sanitized.append(event)
    if not sanitized:
        return _error("No valid events")

    accepted = store.add_many(sanitized)
    logger.debug("Accepted %d/%d RUM events", accepted, len(raw_events))
    return JSONResponse(
        {"success": True, "accepted": accepted, "sampleRate": sample_rate},
        headers={**_NO_STORE, "Access-Control-Allow-Origin": "*"},
    )


@router.get("/summary")
async def rum_summary(
    windowMs: int = Query(default=DEFAULT_SUMMARY_WINDOW_MS),
    pathPrefix: Optional[str] = Query(default=None),
    store: RumStore = Depends(get_rum_store),
    _admin: Principal = Depends(require_admin),
):
    """Percentile summaries overall, per path and per device class."""
    window_ms = max(MIN_SUMMARY_WINDOW_MS, min(MAX_SUMMARY_WINDOW_MS, windowMs))
    report = build_report(store.data_within(window_ms), pathPrefix or None)
    return JSONResponse(
        {
            "success": True,
            "data": {
                "windowMs": window_ms,
                **report,
                "generatedAt": utc_now().isoformat(),
            },
        },
        headers=_NO_STORE,
    )
