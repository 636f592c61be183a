"""View/like deduplication with signed cookies and short per-IP cooldowns."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Mapping, Optional

from showcase.config import settings

VIEW_COOLDOWN_SECONDS = 30.0
LIKE_DEBOUNCE_SECONDS = 1.0
VIEW_COOKIE_TTL_SECONDS = 12 * 3600
LIKE_COOKIE_TTL_SECONDS = 365 * 24 * 3600


@dataclass(frozen=True)
class CookieSpec:
    name: str
    value: str
    max_age: int


@dataclass(frozen=True)
class ViewDecision:
    allow: bool
    set_cookie: Optional[CookieSpec] = None


@dataclass(frozen=True)
class LikeDecision:
    changed: bool
    like: bool = False
    set_cookie: Optional[CookieSpec] = None
    clear_cookie: Optional[str] = None


def client_ip(headers: Mapping[str, str]) -> str:
    forwarded = (headers.get("x-forwarded-for") or "").split(",")[0].strip()
    return forwarded or (headers.get("x-real-ip") or "").strip() or "0.0.0.0"


class CookieSigner:
    """HMAC-SHA256 signed cookie values, base64url-encoded."""

    def __init__(self, secret: str) -> None:
        self._secret = secret.encode("utf-8")

    def _sign(self, name: str, value: str) -> str:
        return hmac.new(self._secret, f"{name}.{value}".encode("utf-8"), hashlib.sha256).hexdigest()

    def dumps(self, name: str, value: str) -> str:
        raw = f"{value}.{self._sign(name, value)}".encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    def loads(self, name: str, token: Optional[str]) -> Optional[str]:
        if not token:
            return None
        try:
            padded = token + "=" * (-len(token) % 4)
            decoded = base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")
        except (binascii.Error, UnicodeError, ValueError):
            return None
        value, _, sig = decoded.rpartition(".")
        if not value or not sig:
            return None
        if hmac.compare_digest(sig, self._sign(name, value)):
            return value
        return None


class EngagementGuard:
    """Decides whether a view counts and which way a like toggles.

    Two layers: an in-process cooldown keyed by (content, ip) absorbs bursts,
    and a signed per-content cookie remembers the device across requests.
    """

    def __init__(
        self,
        secret: str,
        view_cooldown: float = VIEW_COOLDOWN_SECONDS,
        like_debounce: float = LIKE_DEBOUNCE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.signer = CookieSigner(secret)
        self._view_cooldown = view_cooldown
        self._like_debounce = like_debounce
        self._clock = clock
        self._lock = Lock()
        self._recent_views: dict[str, float] = {}
        self._recent_likes: dict[str, float] = {}

    @staticmethod
    def _expire(table: dict[str, float], now: float, ttl: float) -> None:
        stale = [key for key, seen in table.items() if now - seen >= ttl]
        for key in stale:
            del table[key]

    def should_count_view(self, cookies: Mapping[str, str], ip: str, content_id: str) -> ViewDecision:
        key = f"{content_id}:{ip}"
        cookie_name = f"v_{content_id}"
        now = self._clock()
        with self._lock:
            self._expire(self._recent_views, now, self._view_cooldown)
            if key in self._recent_views:
                return ViewDecision(allow=False)
            self._recent_views[key] = now

        if self.signer.loads(cookie_name, cookies.get(cookie_name)) == "1":
            return ViewDecision(allow=False)
        return ViewDecision(
            allow=True,
            set_cookie=CookieSpec(cookie_name, self.signer.dumps(cookie_name, "1"), VIEW_COOKIE_TTL_SECONDS),
        )

    def should_toggle_like(self, cookies: Mapping[str, str], ip: str, content_id: str) -> LikeDecision:
        key = f"{content_id}:{ip}"
        cookie_name = f"l_{content_id}"
        now = self._clock()
        with self._lock:
            self._expire(self._recent_likes, now, self._like_debounce)
            if key in self._recent_likes:
                # Double-click race; leave the count alone.
                return LikeDecision(changed=False)
            self._recent_likes[key] = now

        if self.signer.loads(cookie_name, cookies.get(cookie_name)) == "1":
            return LikeDecision(changed=True, like=False, clear_cookie=cookie_name)
        return LikeDecision(
            changed=True,
            like=True,
            set_cookie=CookieSpec(cookie_name, self.signer.dumps(cookie_name, "1"), LIKE_COOKIE_TTL_SECONDS),
        )


def build_engagement_guard() -> EngagementGuard:
    return EngagementGuard(settings.app_secret)
