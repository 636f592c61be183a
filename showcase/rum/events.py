"""RUM event model — one observed Web Vitals sample."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional


class MetricName(str, enum.Enum):
    LCP = "LCP"
    CLS = "CLS"
    INP = "INP"
    FCP = "FCP"
    TTFB = "TTFB"


class DeviceClass(str, enum.Enum):
    MOBILE = "mobile"
    DESKTOP = "desktop"
    TABLET = "tablet"
    UNKNOWN = "unknown"


# CLS is a unitless score; everything else is a duration in milliseconds.
SCORE_METRICS = frozenset({MetricName.CLS})
MAX_SCORE_VALUE = 2.0
MAX_DURATION_MS = 120_000.0

_TABLET_MARKERS = ("ipad", "tablet")
_MOBILE_MARKERS = ("mobi", "iphone", "android")
_DESKTOP_MARKERS = ("macintosh", "windows", "linux", "cros")


def device_from_user_agent(user_agent: Optional[str]) -> DeviceClass:
    """Bucket a User-Agent string into a coarse device class.

    Order matters: iPads and Android tablets also advertise desktop/mobile
    tokens, so the tablet check runs first.
    """
    if not user_agent:
        return DeviceClass.UNKNOWN
    ua = user_agent.lower()
    if any(marker in ua for marker in _TABLET_MARKERS):
        return DeviceClass.TABLET
    if any(marker in ua for marker in _MOBILE_MARKERS):
        return DeviceClass.MOBILE
    if any(marker in ua for marker in _DESKTOP_MARKERS):
        return DeviceClass.DESKTOP
    return DeviceClass.UNKNOWN


@dataclass(frozen=True)
class MetricEvent:
    """A sanitized performance sample held by the RUM store."""
    name: MetricName
    value: float
    path: str  # pathname + optional query, never an origin
    timestamp: int  # epoch ms
    device_class: DeviceClass = DeviceClass.UNKNOWN
    navigation_type: Optional[str] = None
    connection_type: Optional[str] = None
    user_agent: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "name": self.name.value,
            "value": self.value,
            "path": self.path,
            "ts": self.timestamp,
            "device": self.device_class.value,
            "navType": self.navigation_type,
            "conn": self.connection_type,
        }
