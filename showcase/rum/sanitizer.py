"""Beacon payload sanitization.

Turns untrusted client-reported vitals into ``MetricEvent`` values. Anything
that cannot be made safe is dropped (``None``) rather than raising, so a
hostile payload never surfaces validation details to the caller.
"""

from __future__ import annotations

import json
import math
from typing import Any, Optional
from urllib.parse import urlsplit

from showcase.rum.events import (
    MAX_DURATION_MS,
    MAX_SCORE_VALUE,
    SCORE_METRICS,
    MetricEvent,
    MetricName,
    device_from_user_agent,
)

MAX_NAV_TYPE_LENGTH = 32
MAX_CONNECTION_LENGTH = 16
_ALLOWED_NAMES = {name.value: name for name in MetricName}


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _coerce_float(raw: Any) -> Optional[float]:
    if isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def normalize_path(raw: Any) -> str:
    """Reduce a path or full URL to ``/pathname[?query]`` with no origin."""
    path = raw if isinstance(raw, str) and raw else "/"
    try:
        parts = urlsplit(path)
    except ValueError:
        return path if path.startswith("/") else "/" + path
    if parts.scheme or parts.netloc:
        pathname = parts.path or "/"
    else:
        # Relative input resolves against the site root.
        pathname = parts.path if parts.path.startswith("/") else "/" + parts.path
    # Collapse a leading "//" so the result can't be read as a host.
    pathname = "/" + pathname.lstrip("/")
    return pathname + (f"?{parts.query}" if parts.query else "")


def _truncate(raw: Any, limit: int) -> Optional[str]:
    return raw[:limit] if isinstance(raw, str) else None


def sanitize_event(
    raw: Any,
    user_agent: Optional[str],
    now_ms: int,
) -> Optional[MetricEvent]:
    if not isinstance(raw, dict):
        return None
    name = _ALLOWED_NAMES.get(raw.get("name")) if isinstance(raw.get("name"), str) else None
    if name is None:
        return None

    value = _coerce_float(raw.get("value"))
    if value is None:
        return None
    if name in SCORE_METRICS:
        value = _clamp(value, 0.0, MAX_SCORE_VALUE)
    else:
        value = _clamp(value, 0.0, MAX_DURATION_MS)

    ts = _coerce_float(raw.get("ts"))
    timestamp = int(_clamp(ts, 0, now_ms)) if ts else now_ms

    return MetricEvent(
        name=name,
        value=value,
        path=normalize_path(raw.get("path")),
        timestamp=timestamp,
        device_class=device_from_user_agent(user_agent),
        navigation_type=_truncate(raw.get("navType"), MAX_NAV_TYPE_LENGTH),
        connection_type=_truncate(raw.get("conn"), MAX_CONNECTION_LENGTH),
        user_agent=user_agent or None,
    )


def parse_beacon_body(content_type: str, body: bytes) -> Any:
    """Decode a JSON or text/plain JSON beacon body; None when unusable."""
    content_type = (content_type or "").lower()
    if "application/json" not in content_type and "text/plain" not in content_type:
        return None
    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None


def extract_events(body: Any) -> list:
    """Accept ``{"events": [...]}``, a bare list, or a single event object."""
    if isinstance(body, dict) and isinstance(body.get("events"), list):
        return body["events"]
    if isinstance(body, list):
        return body
    return [body]


def resolve_sample_rate(body: Any, default: float) -> float:
    requested = body.get("sampleRate") if isinstance(body, dict) else None
    if isinstance(requested, (int, float)) and not isinstance(requested, bool) and math.isfinite(requested):
        return _clamp(float(requested), 0.0, 1.0)
    return default
