"""Strict validation of submitted schedules.

Turns the raw JSON body of a "set schedule" call into sorted `Slot` objects,
or raises `ScheduleValidationError` naming the first offending slot.
"""
from typing import Any

from errors import ScheduleValidationError, ValidationError
from models import LiveItem, Slot
from utils.time_utils import parse_utc

ACCEPTED_REF_PREFIXES = ("note1", "nevent1")

_DATE_HINT = 'use UTC ISO format, e.g., "2025-10-29T21:00:00Z"'


def is_accepted_ref(ref: Any) -> bool:
    return isinstance(ref, str) and ref.startswith(ACCEPTED_REF_PREFIXES)


def validate_default_items(items: Any) -> tuple[str, ...]:
    """Default items follow the same prefix rule as slot lives."""
    if not isinstance(items, (list, tuple)):
        raise ValidationError("defaultItems must be an array")
    for position, ref in enumerate(items, start=1):
        if not is_accepted_ref(ref):
            raise ValidationError(
                f"defaultItems {position}: must start with 'note1' or 'nevent1' (got: \"{ref}\")"
            )
    return tuple(items)


def validate_schedule(raw: Any) -> list[Slot]:
    if not isinstance(raw, dict) or not isinstance(raw.get("slots"), list):
        raise ScheduleValidationError("schedule.slots must be an array")

    slots = [_validate_slot(slot, n) for n, slot in enumerate(raw["slots"], start=1)]
    # Stable sort: overlapping slots keep submission order among equal starts
    slots.sort(key=lambda s: s.start_at)
    return slots


def _fail(n: int, message: str) -> ScheduleValidationError:
    return ScheduleValidationError(f"Slot {n}: {message}", slot=n)


def _validate_slot(slot: Any, n: int) -> Slot:
    if not isinstance(slot, dict):
        raise _fail(n, "must be an object")

    bounds = {}
    for key in ("startAt", "endAt"):
        value = slot.get(key)
        if not value or not isinstance(value, str):
            raise _fail(n, f"{key} must be a non-empty string (UTC ISO format)")
        try:
            bounds[key] = parse_utc(value)
        except ValueError:
            raise _fail(n, f"invalid {key} date format ({_DATE_HINT})")

    start_at, end_at = bounds["startAt"], bounds["endAt"]
    if end_at <= start_at:
        raise _fail(n, "endAt must be after startAt")

    if "items" in slot:
        raise _fail(
            n, "'items' field is deprecated. Use 'lives' instead "
               "(e.g., \"lives\": [{\"ref\": \"note1...\"}])"
        )
    lives = slot.get("lives")
    if lives is None:
        raise _fail(n, "'lives' field is required (must be an array)")
    if not isinstance(lives, list):
        raise _fail(n, "'lives' must be an array")

    speakers = slot.get("speakers")
    title = slot.get("title")
    return Slot(
        start_at=start_at,
        end_at=end_at,
        lives=tuple(_validate_live(live, n, m) for m, live in enumerate(lives, start=1)),
        title=title if isinstance(title, str) and title else None,
        speakers=tuple(str(s) for s in speakers) if isinstance(speakers, list) else None,
    )


def _validate_live(live: Any, n: int, m: int) -> LiveItem:
    where = f"Slot {n}, live {m}"
    if not isinstance(live, dict):
        raise ScheduleValidationError(f"{where}: must be an object", slot=n)

    ref = live.get("ref")
    if not ref or not isinstance(ref, str):
        raise ScheduleValidationError(f"{where}: 'ref' is required and must be a string", slot=n)
    if not is_accepted_ref(ref):
        raise ScheduleValidationError(
            f"{where}: 'ref' must start with 'note1' or 'nevent1' (got: \"{ref}\")", slot=n
        )

    weight = live.get("weight")
    # bool is an int subclass; reject it explicitly
    if weight is not None and (isinstance(weight, bool) or not isinstance(weight, int) or weight < 0):
        raise ScheduleValidationError(f"{where}: 'weight' must be a non-negative integer", slot=n)

    title = live.get("title")
    if title is not None and not isinstance(title, str):
        raise ScheduleValidationError(f"{where}: 'title' must be a string", slot=n)

    return LiveItem(ref=ref, weight=weight, title=title)
