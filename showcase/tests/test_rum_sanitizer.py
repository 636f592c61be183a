"""Tests for beacon sanitization and device classification."""

import pytest

from showcase.rum.events import DeviceClass, MetricName, device_from_user_agent
from showcase.rum.sanitizer import (
    extract_events,
    normalize_path,
    parse_beacon_body,
    resolve_sample_rate,
    sanitize_event,
)

NOW = 1_700_000_000_000
IPHONE = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) Mobile/15E148"
IPAD = "Mozilla/5.0 (iPad; CPU OS 17_0 like Mac OS X)"
MAC = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15"
ANDROID_TABLET = "Mozilla/5.0 (Linux; Android 13; SM-X700) Tablet"


@pytest.mark.parametrize(
    "ua,expected",
    [
        (IPHONE, DeviceClass.MOBILE),
        (IPAD, DeviceClass.TABLET),
        (MAC, DeviceClass.DESKTOP),
        (ANDROID_TABLET, DeviceClass.TABLET),
        ("Mozilla/5.0 (X11; CrOS x86_64 14541.0.0)", DeviceClass.DESKTOP),
        ("curl/8.4.0", DeviceClass.UNKNOWN),
        (None, DeviceClass.UNKNOWN),
        ("", DeviceClass.UNKNOWN),
    ],
)
def test_device_from_user_agent(ua, expected):
    assert device_from_user_agent(ua) is expected


class TestSanitizeEvent:
    def test_valid_event(self):
        event = sanitize_event(
            {"name": "LCP", "value": 1234.5, "path": "/poems/1", "ts": NOW - 5, "navType": "navigate", "conn": "4g"},
            IPHONE,
            NOW,
        )
        assert event.name is MetricName.LCP
        assert event.value == 1234.5
        assert event.path == "/poems/1"
        assert event.timestamp == NOW - 5
        assert event.device_class is DeviceClass.MOBILE
        assert event.navigation_type == "navigate"
        assert event.connection_type == "4g"

    @pytest.mark.parametrize(
        "raw",
        [
            None,
            "LCP",
            {"name": "FID", "value": 10},
            {"name": "LCP", "value": "fast"},
            {"name": "LCP", "value": float("nan")},
            {"name": "LCP", "value": float("inf")},
            {"name": "LCP"},
            {"name": "LCP", "value": True},
        ],
    )
    def test_rejects_malformed(self, raw):
        assert sanitize_event(raw, None, NOW) is None

    def test_clamps_cls_score(self):
        assert sanitize_event({"name": "CLS", "value": 5}, None, NOW).value == 2.0
        assert sanitize_event({"name": "CLS", "value": -1}, None, NOW).value == 0.0

    def test_clamps_durations(self):
        assert sanitize_event({"name": "TTFB", "value": 500_000}, None, NOW).value == 120_000.0
        assert sanitize_event({"name": "INP", "value": -3}, None, NOW).value == 0.0

    def test_numeric_strings_are_coerced(self):
        assert sanitize_event({"name": "FCP", "value": "812"}, None, NOW).value == 812.0

    def test_future_timestamp_is_clamped(self):
        assert sanitize_event({"name": "LCP", "value": 1, "ts": NOW + 60_000}, None, NOW).timestamp == NOW

    def test_missing_timestamp_uses_now(self):
        assert sanitize_event({"name": "LCP", "value": 1}, None, NOW).timestamp == NOW
        assert sanitize_event({"name": "LCP", "value": 1, "ts": "soon"}, None, NOW).timestamp == NOW

    def test_truncates_optional_strings(self):
        event = sanitize_event(
            {"name": "LCP", "value": 1, "navType": "n" * 100, "conn": "c" * 100},
            None,
            NOW,
        )
        assert len(event.navigation_type) == 32
        assert len(event.connection_type) == 16

    def test_drops_non_string_optional_fields(self):
        event = sanitize_event({"name": "LCP", "value": 1, "navType": 5, "conn": ["4g"]}, None, NOW)
        assert event.navigation_type is None
        assert event.connection_type is None


@pytest.mark.parametrize(
    "raw,expected",
    [
        (None, "/"),
        ("", "/"),
        ("/poems?page=2", "/poems?page=2"),
        ("https://showcase.example/poems/1?x=1#top", "/poems/1?x=1"),
        ("https://showcase.example", "/"),
        ("poems/1", "/poems/1"),
        ("//evil.example/steal", "/steal"),
        (42, "/"),
    ],
)
def test_normalize_path_strips_origin(raw, expected):
    assert normalize_path(raw) == expected


class TestBeaconBody:
    def test_parses_json_and_text_plain(self):
        assert parse_beacon_body("application/json", b'{"name": "LCP"}') == {"name": "LCP"}
        assert parse_beacon_body("text/plain;charset=UTF-8", b"[1, 2]") == [1, 2]

    def test_rejects_other_content_types_and_garbage(self):
        assert parse_beacon_body("application/x-www-form-urlencoded", b"a=1") is None
        assert parse_beacon_body("application/json", b"{not json") is None
        assert parse_beacon_body("", b"{}") is None

    def test_extract_events_shapes(self):
        assert extract_events({"events": [1, 2]}) == [1, 2]
        assert extract_events([3]) == [3]
        assert extract_events({"name": "LCP"}) == [{"name": "LCP"}]

    def test_sample_rate_is_clamped(self):
        assert resolve_sample_rate({"sampleRate": 4}, 0.15) == 1.0
        assert resolve_sample_rate({"sampleRate": -1}, 0.15) == 0.0
        assert resolve_sample_rate({"sampleRate": "all"}, 0.15) == 0.15
        assert resolve_sample_rate([], 0.15) == 0.15
