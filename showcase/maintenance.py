"""Maintenance-mode gate and page traffic counting.

The gate runs as HTTP middleware in front of every page route. It reads the
maintenance switch through a short TTL cache, so toggling it from the admin
API takes effect within ``MAINTENANCE_CACHE_SECONDS`` on other instances.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, Mapping, Optional

from fastapi import Request, Response
from fastapi.responses import RedirectResponse

from showcase.config import settings
from showcase.models.admin_setting import DEFAULT_MAINTENANCE_MESSAGE
from showcase.security import SESSION_COOKIE, Principal, principal_from_token
from showcase.utils.time import utc_now

logger = logging.getLogger("showcase.maintenance")

MAINTENANCE_PATH = "/maintenance"
PAGEVIEW_COOKIE_MAX_AGE = 60 * 60
VISIT_COOKIE_MAX_AGE = 60 * 60 * 24


@dataclass(frozen=True)
class MaintenanceStatus:
    enabled: bool
    allowed_emails: str = ""
    message: str = DEFAULT_MAINTENANCE_MESSAGE


def fallback_status() -> MaintenanceStatus:
    return MaintenanceStatus(
        enabled=settings.maintenance_mode,
        allowed_emails=settings.maintenance_allowed_emails,
    )


StatusLoader = Callable[[], Awaitable[MaintenanceStatus]]
TrafficRecorder = Callable[[str, str], Awaitable[None]]


class MaintenanceGate:
    """Caches the maintenance switch and decides who gets through."""

    def __init__(
        self,
        loader: StatusLoader,
        cache_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._loader = loader
        self._cache_seconds = cache_seconds
        self._clock = clock
        self._cached: Optional[MaintenanceStatus] = None
        self._checked_at = 0.0

    def invalidate(self) -> None:
        self._cached = None

    async def current(self) -> MaintenanceStatus:
        now = self._clock()
        if self._cached is not None and now - self._checked_at < self._cache_seconds:
            return self._cached
        try:
            status = await self._loader()
        except Exception:
            logger.exception("Maintenance status lookup failed; using environment fallback")
            status = fallback_status()
        self._cached = status
        self._checked_at = now
        return status

    @staticmethod
    def decide(path: str, status: MaintenanceStatus, principal: Optional[Principal]) -> Optional[str]:
        """Return a redirect target, or None to let the request through."""
        if not status.enabled or path == MAINTENANCE_PATH:
            return None
        is_admin_area = path.startswith("/admin")
        if principal is not None:
            if principal.is_admin and is_admin_area:
                return None
            if email_allowed(principal.email, status.allowed_emails):
                return None
        # Admin pages stay reachable so operators can sign in.
        if is_admin_area:
            return None
        return MAINTENANCE_PATH


def email_allowed(email: str, allowed_emails: str) -> bool:
    allowed = {e.strip().lower() for e in (allowed_emails or "").split(",") if e.strip()}
    return email.strip().lower() in allowed


def is_exempt_path(path: str) -> bool:
    return (
        path.startswith("/api/")
        or path.startswith("/_next/")
        or path.startswith("/static/")
        or "." in path
        or path == MAINTENANCE_PATH
        or path.startswith("/admin/login")
    )


@dataclass(frozen=True)
class TrafficCookie:
    name: str
    kind: str  # "pageview" | "visit"
    day: str
    max_age: int


def pending_traffic(cookies: Mapping[str, str], now: datetime) -> list[TrafficCookie]:
    """Counters this client hasn't been charged for yet (hourly pageview, daily visit)."""
    day = now.strftime("%Y-%m-%d")
    hour_key = now.strftime("%Y-%m-%dT%H")
    pending = []
    if f"pv_{hour_key}" not in cookies:
        pending.append(TrafficCookie(f"pv_{hour_key}", "pageview", day, PAGEVIEW_COOKIE_MAX_AGE))
    if f"v_{day}" not in cookies:
        pending.append(TrafficCookie(f"v_{day}", "visit", day, VISIT_COOKIE_MAX_AGE))
    return pending


async def maintenance_middleware(request: Request, call_next) -> Response:
    path = request.url.path
    if is_exempt_path(path):
        return await call_next(request)

    gate: Optional[MaintenanceGate] = getattr(request.app.state, "maintenance_gate", None)
    redirect_to = None
    if gate is not None:
        status = await gate.current()
        if status.enabled:
            principal = principal_from_token(request.cookies.get(SESSION_COOKIE))
            redirect_to = gate.decide(path, status, principal)

    if redirect_to is not None:
        return RedirectResponse(redirect_to, status_code=307)

    pending = pending_traffic(request.cookies, utc_now())
    recorder: Optional[TrafficRecorder] = getattr(request.app.state, "traffic_recorder", None)
    if recorder is not None:
        for item in pending:
            try:
                await recorder(item.day, item.kind)
            except Exception:
                logger.warning("Failed to record %s for %s", item.kind, item.day, exc_info=True)

    response = await call_next(request)
    for item in pending:
        response.set_cookie(
            item.name,
            "1",
            max_age=item.max_age,
            httponly=True,
            samesite="lax",
            secure=settings.secure_cookies,
        )
    return response
