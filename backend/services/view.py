from datetime import datetime

from models import ActiveWindow, Room, RotationPolicy, Slot, SlotSummary, View
from services.rotation import compute_index, compute_next_switch
from utils.time_utils import utc_now

PREVIEW_LIMIT = 5


def _summary(slot: Slot) -> SlotSummary:
    return SlotSummary(start_at=slot.start_at, end_at=slot.end_at, items=slot.refs)


def find_active_slot(slots: tuple[Slot, ...], at: datetime) -> Slot | None:
    """First slot, in ascending start order, whose window contains `at`."""
    return next((slot for slot in slots if slot.contains(at)), None)


def project(room: Room, at: datetime | None = None) -> View:
    """Compose the read-only view of `room` at instant `at` (default: now)."""
    now = at or utc_now()
    config = room.config
    slots = room.schedule.slots if room.schedule else ()

    active = find_active_slot(slots, now)
    refs = active.refs if active else []
    if refs:
        items = refs
        weights = [live.weight for live in active.lives]
    else:
        items = list(config.default_items)
        weights = None

    anchor = active.start_at if active else now
    index = compute_index(
        config.rotation_policy, anchor, now, len(items), config.rotation_interval_sec, weights,
    )
    next_switch_at = compute_next_switch(
        anchor, now, config.rotation_interval_sec, len(items),
        slot_end=active.end_at if active else None,
    )

    upcoming = sorted((s for s in slots if s.start_at > now), key=lambda s: s.start_at)
    previous = sorted((s for s in slots if s.end_at <= now), key=lambda s: s.end_at, reverse=True)

    return View(
        active=ActiveWindow(
            slot_start=active.start_at,
            slot_end=active.end_at,
            title=active.title,
            speakers=active.speakers,
        ) if active else None,
        items=items,
        policy=RotationPolicy(type=config.rotation_policy, interval_sec=config.rotation_interval_sec),
        index=index,
        next_switch_at=next_switch_at,
        default_items=list(config.default_items),
        upcoming_slots=[_summary(s) for s in upcoming[:PREVIEW_LIMIT]],
        previous_slots=[_summary(s) for s in previous[:PREVIEW_LIMIT]],
    )
