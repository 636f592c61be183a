"""Tests for RUM percentile summaries and groupings."""

from showcase.rum.events import DeviceClass, MetricEvent, MetricName
from showcase.rum.store import RumStore
from showcase.rum.summary import (
    build_report,
    by_device_summary,
    by_path_summary,
    overall_summary,
    percentile,
    summarize,
)

EMPTY = {"count": 0, "p50": None, "p75": None, "p95": None}


def _event(name, value, path="/", ts=1, device=DeviceClass.UNKNOWN):
    return MetricEvent(name=name, value=value, path=path, timestamp=ts, device_class=device)


class TestPercentile:
    def test_nearest_rank(self):
        values = [10, 20, 30, 40]
        assert percentile(values, 50) == 20
        assert percentile(values, 75) == 30
        assert percentile(values, 95) == 40

    def test_single_value(self):
        assert percentile([7.5], 50) == 7.5
        assert percentile([7.5], 95) == 7.5

    def test_zero_percentile_clamps_to_first(self):
        assert percentile([1, 2, 3], 0) == 1

    def test_empty_is_none(self):
        assert percentile([], 50) is None


class TestSummarize:
    def test_sorts_before_ranking(self):
        assert summarize([40, 10, 30, 20]) == {"count": 4, "p50": 20, "p75": 30, "p95": 40}

    def test_empty_summary(self):
        assert summarize([]) == EMPTY


class TestGroupings:
    def test_overall_has_every_metric(self):
        result = overall_summary([])
        assert set(result) == {"LCP", "CLS", "INP", "FCP", "TTFB"}
        assert all(summary == EMPTY for summary in result.values())

    def test_by_device_always_has_four_classes(self):
        assert set(by_device_summary([])) == {"mobile", "desktop", "tablet", "unknown"}

        events = [_event(MetricName.LCP, 900, device=DeviceClass.MOBILE)]
        result = by_device_summary(events)
        assert set(result) == {"mobile", "desktop", "tablet", "unknown"}
        assert result["mobile"]["LCP"]["count"] == 1
        assert result["desktop"]["LCP"] == EMPTY

    def test_unseen_device_summaries_are_independent(self):
        result = by_device_summary([])
        result["tablet"]["LCP"]["count"] = 99
        assert result["desktop"]["LCP"]["count"] == 0

    def test_by_path_only_lists_observed_paths(self):
        events = [_event(MetricName.FCP, 100, "/a"), _event(MetricName.FCP, 300, "/b?x=1")]
        result = by_path_summary(events)
        assert set(result) == {"/a", "/b?x=1"}
        assert result["/a"]["TTFB"] == EMPTY


class TestReport:
    def test_empty_prefix_matches_no_filter(self):
        events = [_event(MetricName.LCP, 1000, "/a"), _event(MetricName.CLS, 0.1, "/b")]
        assert build_report(events, "") == build_report(events)

    def test_unmatched_prefix_yields_zero_counts(self):
        events = [_event(MetricName.LCP, 1000, "/a")]
        report = build_report(events, "/nowhere")
        assert report["count"] == 0
        assert report["byPath"] == {}
        assert all(s["count"] == 0 for s in report["overall"].values())
        assert all(
            s["count"] == 0 for per_metric in report["byDevice"].values() for s in per_metric.values()
        )

    def test_prefix_filters_before_grouping(self):
        events = [
            _event(MetricName.LCP, 1000, "/poems/1"),
            _event(MetricName.LCP, 2000, "/poems/2"),
            _event(MetricName.LCP, 9000, "/quotes/1"),
        ]
        report = build_report(events, "/poems")
        assert report["count"] == 2
        assert report["overall"]["LCP"]["p95"] == 2000

    def test_scenario_through_store(self, clock):
        store = RumStore(clock=clock)
        store.add(_event(MetricName.LCP, 1000, "/a", ts=clock.now - 3))
        store.add(_event(MetricName.LCP, 3000, "/a", ts=clock.now - 2))
        store.add(_event(MetricName.CLS, 0.05, "/b", ts=clock.now - 1))

        report = build_report(store.data_within(10**12))
        assert report["overall"]["LCP"]["count"] == 2
        assert report["overall"]["LCP"]["p50"] == 1000
        assert report["byPath"]["/a"]["LCP"]["count"] == 2
        assert report["byPath"]["/b"]["CLS"]["count"] == 1
