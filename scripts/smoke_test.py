"""Smoke test for the daily challenge REST flow.

Steps:
1) Generate today's challenges (twice, must be identical)
2) Push progress that completes every challenge
3) Claim the bonus (second claim must fail)
4) Read history and streak

Requires BASE_URL (default http://localhost:8000).
"""
import os
import sys
from uuid import uuid4

import httpx

BASE_URL = os.getenv("BASE_URL", "http://localhost:8000").rstrip("/")
VISITOR_ID = os.getenv("SMOKE_VISITOR_ID", f"smoke-{uuid4().hex[:8]}")
TIMEOUT_SECONDS = float(os.getenv("SMOKE_TIMEOUT", "5"))

PREFIX = f"{BASE_URL}/v1/daily-challenges"


def _require_ok(resp: httpx.Response, step: str) -> dict:
    if resp.status_code != 200:
        raise RuntimeError(f"{step} failed: status={resp.status_code}, body={resp.text}")
    return resp.json()


def run_flow(client: httpx.Client) -> None:
    first = _require_ok(
        client.post(f"{PREFIX}/today/generate", json={"visitor_id": VISITOR_ID}), "generate"
    )["challenge_set"]
    second = _require_ok(
        client.post(f"{PREFIX}/today/generate", json={"visitor_id": VISITOR_ID}), "generate again"
    )["challenge_set"]
    if first != second:
        raise RuntimeError("generate is not idempotent")

    updates = [
        {"type": c["type"], "value": c["target"], "is_absolute": True}
        for c in first["challenges"]
    ]
    progress = _require_ok(
        client.post(f"{PREFIX}/today/progress", json={"visitor_id": VISITOR_ID, "updates": updates}),
        "progress",
    )
    if not progress["all_completed"]:
        raise RuntimeError(f"expected all challenges completed: {progress}")

    claim = _require_ok(client.post(f"{PREFIX}/today/claim", json={"visitor_id": VISITOR_ID}), "claim")
    if not claim["success"]:
        raise RuntimeError(f"bonus claim failed: {claim}")
    again = _require_ok(client.post(f"{PREFIX}/today/claim", json={"visitor_id": VISITOR_ID}), "claim again")
    if again["success"]:
        raise RuntimeError("bonus paid twice")

    history = _require_ok(client.get(f"{PREFIX}/history", params={"visitor_id": VISITOR_ID}), "history")
    streak = _require_ok(client.get(f"{PREFIX}/streak", params={"visitor_id": VISITOR_ID}), "streak")
    print(f"[smoke] bonus={claim['bonus']} history={len(history['history'])} streak={streak['streak']}")


def main() -> int:
    try:
        with httpx.Client(timeout=TIMEOUT_SECONDS) as client:
            health = client.get(f"{BASE_URL}/healthz")
            if health.status_code != 200:
                raise RuntimeError(f"healthz failed: {health.status_code}")
            run_flow(client)
    except Exception as exc:
        print(f"SMOKE FAIL: {exc}")
        return 1
    print("SMOKE PASS")
    return 0


if __name__ == "__main__":
    sys.exit(main())
