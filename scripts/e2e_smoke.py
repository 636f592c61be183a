#!/usr/bin/env python3
"""End-to-end smoke for the Showcase API.

Runs a realistic flow against a running backend and fails fast on regressions.
Needs ADMIN_EMAIL/ADMIN_PASSWORD exported with the same values the server uses.
"""

from __future__ import annotations

import json
import os
import sys

import httpx

BASE_URL = os.environ.get("SHOWCASE_BASE_URL", "http://127.0.0.1:8000")
TIMEOUT = 30.0
PHONE_UA = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) Mobile/15E148"


def expect(condition: bool, message: str) -> None:
    if not condition:
        raise AssertionError(message)


def get(client: httpx.Client, path: str, expected: int = 200, **kwargs):
    resp = client.get(f"{BASE_URL}{path}", **kwargs)
    expect(resp.status_code == expected, f"GET {path} -> {resp.status_code} != {expected}; body={resp.text[:500]}")
    return resp


def post(client: httpx.Client, path: str, expected: int = 200, **kwargs):
    resp = client.post(f"{BASE_URL}{path}", **kwargs)
    expect(resp.status_code == expected, f"POST {path} -> {resp.status_code} != {expected}; body={resp.text[:500]}")
    return resp


def main() -> int:
    with httpx.Client(timeout=TIMEOUT) as client:
        # 1) Health
        health = get(client, "/api/health").json()
        expect(health.get("status") == "healthy", "health status is not healthy")

        # 2) Admin login
        login = post(
            client,
            "/api/auth/login",
            json={"email": os.environ["ADMIN_EMAIL"], "password": os.environ["ADMIN_PASSWORD"]},
        ).json()
        headers = {"Authorization": f"Bearer {login['access_token']}"}

        # 3) RUM beacons (sampleRate=1 so nothing is sampled out)
        beacon = {
            "sampleRate": 1,
            "events": [
                {"name": "LCP", "value": 1800, "path": "/smoke"},
                {"name": "CLS", "value": 0.04, "path": "/smoke"},
                {"name": "INP", "value": 90, "path": "https://example.com/smoke?x=1"},
            ],
        }
        ingest = post(client, "/api/admin/rum/ingest", json=beacon, headers={"User-Agent": PHONE_UA}).json()
        expect(ingest.get("accepted") == 3, "RUM ingest did not accept all events")
        _ = post(client, "/api/admin/rum/ingest", expected=400, json={"events": [{"name": "nope"}]})

        summary = get(client, "/api/admin/rum/summary?pathPrefix=/smoke", headers=headers).json()["data"]
        expect(summary["count"] >= 3, "RUM summary missing ingested events")
        expect(summary["byDevice"]["mobile"]["LCP"]["count"] >= 1, "device breakdown missing mobile LCP")
        _ = get(client, "/api/admin/rum/summary", expected=401)

        # 4) Traffic metrics
        _ = get(client, "/", headers={"Accept": "text/html"})
        traffic = get(client, "/api/admin/metrics?days=7", headers=headers).json()["data"]
        expect(len(traffic["metrics"]) == 7, "traffic series is not zero-filled")

        # 5) Maintenance toggle round-trip
        _ = post(client, "/api/admin/toggle-maintenance", json={"enabled": False}, headers=headers)
        status = get(client, "/api/maintenance-status").json()
        expect(status["maintenanceMode"] is False, "maintenance mode did not switch off")

    print(json.dumps({"ok": True, "message": "Showcase smoke passed"}))
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception as exc:  # noqa: BLE001
        print(json.dumps({"ok": False, "error": str(exc)}))
        sys.exit(1)
