#!/usr/bin/env python3
"""
Create a demo room on a running backend and give it a three-slot schedule
starting now, so the rotation and Socket.IO pushes can be watched live.

Usage:
    python scripts/seed_room.py [--name "Main Stage"] [--interval 20] [--policy round_robin]
"""
import argparse
import asyncio
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import logging
logging.basicConfig(level=logging.INFO)

import httpx

from config import get_settings

settings = get_settings()

DEMO_REFS = [
    "note1qqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqq0",
    "note1qqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqq1",
    "nevent1qqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqq2",
]


def _iso(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


def build_schedule(start: datetime) -> dict:
    """Three consecutive 10-minute slots: 3 lives, 1 live, then weighted 2 lives."""
    return {
        "slots": [
            {
                "startAt": _iso(start),
                "endAt": _iso(start + timedelta(minutes=10)),
                "title": "Opening",
                "lives": [{"ref": ref} for ref in DEMO_REFS],
            },
            {
                "startAt": _iso(start + timedelta(minutes=10)),
                "endAt": _iso(start + timedelta(minutes=20)),
                "title": "Keynote",
                "speakers": ["Demo Speaker"],
                "lives": [{"ref": DEMO_REFS[0], "title": "Keynote stream"}],
            },
            {
                "startAt": _iso(start + timedelta(minutes=20)),
                "endAt": _iso(start + timedelta(minutes=30)),
                "title": "Panel",
                "lives": [{"ref": DEMO_REFS[1], "weight": 3}, {"ref": DEMO_REFS[2], "weight": 1}],
            },
        ]
    }


async def seed(name: str, interval: int, policy: str) -> None:
    async with httpx.AsyncClient(base_url=settings.BACKEND_URL, timeout=10) as client:
        resp = await client.post("/rooms", json={
            "name": name,
            "rotationPolicy": policy,
            "rotationIntervalSec": interval,
            "defaultItems": [DEMO_REFS[0]],
        })
        if resp.status_code != 200:
            print(f"  [fail] create room: {resp.status_code} {resp.text}")
            return
        room = resp.json()
        print(f"  [ok] Created room {room['id']} ({room['name']})")

        start = datetime.now(timezone.utc).replace(second=0, microsecond=0)
        resp = await client.put(f"/rooms/{room['id']}/schedule", json=build_schedule(start))
        if resp.status_code != 200:
            print(f"  [fail] set schedule: {resp.status_code} {resp.text}")
            return
        print(f"  [ok] Schedule set, version={resp.json()['version']}")

        view = (await client.get(f"/rooms/{room['id']}/view")).json()
        print(f"Now showing item {view['index']} of {view['items']} until {view['nextSwitchAt']}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--name", default="Main Stage")
    parser.add_argument("--interval", type=int, default=20)
    parser.add_argument("--policy", default="round_robin", choices=["round_robin", "random", "weighted"])
    args = parser.parse_args()
    asyncio.run(seed(args.name, args.interval, args.policy))
