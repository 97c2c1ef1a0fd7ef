from dataclasses import dataclass, field
from datetime import datetime

ROTATION_POLICIES = ("round_robin", "random", "weighted")


@dataclass(frozen=True)
class RoomConfig:
    id: str
    name: str
    slug: str | None = None
    timezone: str = "UTC"
    password: str | None = None  # plaintext, compared by equality
    rotation_policy: str = "round_robin"
    rotation_interval_sec: int = 60
    default_items: tuple[str, ...] = ()

    @property
    def has_password(self) -> bool:
        return bool(self.password)


@dataclass(frozen=True)
class LiveItem:
    ref: str
    weight: int | None = None
    title: str | None = None


@dataclass(frozen=True)
class Slot:
    """Half-open window [start_at, end_at) with its candidate lives."""
    start_at: datetime
    end_at: datetime
    lives: tuple[LiveItem, ...] = ()
    title: str | None = None
    speakers: tuple[str, ...] | None = None

    def contains(self, moment: datetime) -> bool:
        return self.start_at <= moment < self.end_at

    @property
    def refs(self) -> list[str]:
        return [live.ref for live in self.lives]


@dataclass(frozen=True)
class Schedule:
    slots: tuple[Slot, ...] = ()


@dataclass(frozen=True)
class Room:
    """Immutable snapshot of a room; the store swaps whole instances on mutation."""
    config: RoomConfig
    schedule: Schedule | None = None
    version: int = 1


# ── Derived view (never stored) ───────────────────────────────────────────────

@dataclass(frozen=True)
class ActiveWindow:
    slot_start: datetime
    slot_end: datetime
    title: str | None = None
    speakers: tuple[str, ...] | None = None


@dataclass(frozen=True)
class RotationPolicy:
    type: str
    interval_sec: int


@dataclass(frozen=True)
class SlotSummary:
    start_at: datetime
    end_at: datetime
    items: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class View:
    active: ActiveWindow | None
    items: list[str]
    policy: RotationPolicy
    index: int
    next_switch_at: datetime
    default_items: list[str]
    upcoming_slots: list[SlotSummary] = field(default_factory=list)
    previous_slots: list[SlotSummary] = field(default_factory=list)

    @property
    def signature(self) -> str:
        """What a viewer would see change: window, items and policy."""
        start = self.active.slot_start.isoformat() if self.active else "none"
        end = self.active.slot_end.isoformat() if self.active else "none"
        return f"{start}|{end}|{','.join(self.items)}|{self.policy.type}|{self.policy.interval_sec}"
