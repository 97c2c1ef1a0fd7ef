"""Deterministic rotation among a slot's candidate items.

Every function here is pure: the same (policy, anchor, now, items) always
yields the same index, so independently connected viewers agree on what is
showing without sharing a counter.
"""
import math
from datetime import datetime, timedelta, timezone
from typing import Sequence

from utils.time_utils import iso_ms

_MASK32 = 0xFFFFFFFF

# Linear-congruential step (Numerical Recipes constants)
LCG_A = 1664525
LCG_C = 1013904223

FNV_OFFSET = 2166136261


def elapsed_ticks(anchor: datetime, now: datetime, interval_sec: int) -> int:
    return math.floor((now - anchor).total_seconds() / interval_sec)


def string_hash(text: str) -> int:
    """FNV-style 32-bit hash, unsigned."""
    h = FNV_OFFSET
    for ch in text:
        h = (h ^ ord(ch)) & _MASK32
        h = (h + (h << 1) + (h << 4) + (h << 7) + (h << 8) + (h << 24)) & _MASK32
    return h


def random_index(seed: int, tick: int, item_count: int) -> int:
    x = (seed + tick) & _MASK32
    x = (LCG_A * x + LCG_C) & _MASK32
    return x % item_count


def weighted_index(tick: int, weights: Sequence[int]) -> int:
    """Cyclic weighted pick: each item holds `weight` ticks out of every sum(weights)."""
    clamped = [max(0, w) for w in weights]
    total = sum(clamped) or 1
    pseudo = (tick % total) + 1
    acc = 0
    for i, w in enumerate(clamped):
        acc += w
        if pseudo <= acc:
            return i
    return 0


def compute_index(
    policy: str,
    anchor: datetime,
    now: datetime,
    item_count: int,
    interval_sec: int,
    weights: Sequence[int | None] | None = None,
) -> int:
    if item_count <= 0:
        return 0
    ticks = elapsed_ticks(anchor, now, interval_sec)

    if policy == "random":
        seed = string_hash(f"{iso_ms(anchor)}|{item_count}")
        return random_index(seed, ticks, item_count)
    if policy == "weighted":
        if weights is None:
            weights = [1] * item_count
        resolved = [1 if w is None else w for w in weights]
        return weighted_index(ticks, resolved) % item_count
    return ticks % item_count


def compute_next_switch(
    anchor: datetime,
    now: datetime,
    interval_sec: int,
    item_count: int,
    slot_end: datetime | None = None,
) -> datetime:
    """Next instant the displayed item can change; never past the slot end."""
    if slot_end is not None and item_count <= 1:
        return slot_end

    elapsed = max(0, math.floor((now - anchor).total_seconds()))
    try:
        next_tick = anchor + timedelta(seconds=(elapsed // interval_sec + 1) * interval_sec)
    except OverflowError:
        # Past the end of the calendar: nothing left to switch to
        next_tick = datetime.max.replace(tzinfo=timezone.utc)
    if slot_end is not None:
        return min(next_tick, slot_end)
    return next_tick
