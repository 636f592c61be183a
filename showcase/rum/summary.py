"""Percentile summaries over RUM events (nearest-rank, p50/p75/p95)."""

from __future__ import annotations

import math
from collections import defaultdict
from typing import Callable, Iterable, Optional, Sequence

from showcase.rum.events import DeviceClass, MetricEvent, MetricName

Summary = dict[str, Optional[float]]
MetricSummaries = dict[str, Summary]


def percentile(sorted_values: Sequence[float], p: float) -> Optional[float]:
    """Nearest-rank percentile of an ascending sequence; None when empty."""
    n = len(sorted_values)
    if n == 0:
        return None
    idx = math.ceil((p / 100) * n) - 1
    return sorted_values[max(0, min(n - 1, idx))]


def summarize(values: Iterable[float]) -> Summary:
    ordered = sorted(values)
    return {
        "count": len(ordered),
        "p50": percentile(ordered, 50),
        "p75": percentile(ordered, 75),
        "p95": percentile(ordered, 95),
    }


def _empty_buckets() -> dict[MetricName, list[float]]:
    return {name: [] for name in MetricName}


def _summarize_buckets(buckets: dict[MetricName, list[float]]) -> MetricSummaries:
    return {name.value: summarize(buckets[name]) for name in MetricName}


def overall_summary(events: Iterable[MetricEvent]) -> MetricSummaries:
    buckets = _empty_buckets()
    for event in events:
        buckets[event.name].append(event.value)
    return _summarize_buckets(buckets)


def _summarize_by_key(
    events: Iterable[MetricEvent],
    key: Callable[[MetricEvent], str],
) -> dict[str, MetricSummaries]:
    grouped: dict[str, dict[MetricName, list[float]]] = defaultdict(_empty_buckets)
    for event in events:
        grouped[key(event)][event.name].append(event.value)
    return {k: _summarize_buckets(buckets) for k, buckets in grouped.items()}


def by_path_summary(events: Iterable[MetricEvent]) -> dict[str, MetricSummaries]:
    return _summarize_by_key(events, lambda e: e.path or "/")


def by_device_summary(events: Iterable[MetricEvent]) -> dict[str, MetricSummaries]:
    """Per-device summaries; every device class is present, zero-filled if unseen."""
    seen = _summarize_by_key(events, lambda e: e.device_class.value)
    return {
        dc.value: seen[dc.value] if dc.value in seen else _summarize_buckets(_empty_buckets())
        for dc in DeviceClass
    }


def filter_by_path_prefix(
    events: Iterable[MetricEvent],
    path_prefix: Optional[str] = None,
) -> list[MetricEvent]:
    if not path_prefix:
        return list(events)
    return [e for e in events if e.path.startswith(path_prefix)]


def build_report(
    events: Iterable[MetricEvent],
    path_prefix: Optional[str] = None,
) -> dict:
    """Filter by path prefix, then compute all three groupings."""
    filtered = filter_by_path_prefix(events, path_prefix)
    return {
        "count": len(filtered),
        "overall": overall_summary(filtered),
        "byPath": by_path_summary(filtered),
        "byDevice": by_device_summary(filtered),
    }
