#!/usr/bin/env python3
"""Smoke test for a running incident intake API.

Creates one incident against a live deployment (real database) and checks
the validation path. Usage: smoke_intake.py [BASE_URL]
"""

from __future__ import annotations

import json
import sys

import httpx

BASE_URL = "http://127.0.0.1:8000"
TIMEOUT = 30.0


def expect(condition: bool, message: str) -> None:
    if not condition:
        raise AssertionError(message)


def post(client: httpx.Client, base_url: str, path: str, expected: int, **kwargs):
    resp = client.post(f"{base_url}{path}", **kwargs)
    expect(resp.status_code == expected, f"POST {path} -> {resp.status_code} != {expected}; body={resp.text[:500]}")
    return resp


def main() -> int:
    base_url = sys.argv[1].rstrip("/") if len(sys.argv) > 1 else BASE_URL
    with httpx.Client(timeout=TIMEOUT) as client:
        live = client.get(f"{base_url}/api/health/live")
        expect(live.status_code == 200, "liveness check failed")

        ready = client.get(f"{base_url}/api/health/ready")
        expect(ready.status_code == 200, f"database not ready: {ready.text[:500]}")

        rejected = post(
            client, base_url, "/api/incidents", 400, json={"title": "", "description": "x", "createdBy": "smoke"}
        ).json()
        expect(rejected.get("error") == "Missing required fields", "validation error shape changed")

        created = post(
            client,
            base_url,
            "/api/incidents",
            201,
            json={
                "title": "Smoke test incident",
                "description": "Created by scripts/smoke_intake.py",
                "userId": "smoke",
                "aiConfidence": 0,
            },
        ).json()
        incident = created["incident"]
        expect(incident.get("Id") is not None, "created incident has no Id")
        expect(incident.get("Status") == "NEW", "status is not NEW")
        expect(incident.get("Source") == "PORTAL", "source did not default to PORTAL")
        expect(incident.get("CreatedAt") == incident.get("UpdatedAt"), "CreatedAt != UpdatedAt")

    print(json.dumps({"status": "ok", "incident_id": incident["Id"]}))
    return 0


if __name__ == "__main__":
    try:
        raise SystemExit(main())
    except AssertionError as exc:
        print(f"SMOKE FAILED: {exc}", file=sys.stderr)
        raise SystemExit(1)
