from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

RotationPolicyName = Literal["round_robin", "random", "weighted"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ── Requests ──────────────────────────────────────────────────────────────────

class RoomCreate(CamelModel):
    name: str | None = None
    slug: str | None = None
    timezone: str | None = None
    password: str | None = None
    rotation_policy: str | None = None
    rotation_interval_sec: int | None = None
    default_items: list[str] | None = None


class RoomUpdate(CamelModel):
    """Partial config patch; only fields present in the body are applied."""
    name: str | None = None
    slug: str | None = None
    timezone: str | None = None
    rotation_policy: str | None = None
    rotation_interval_sec: int | None = None
    default_items: list[str] | None = None


# ── Responses ─────────────────────────────────────────────────────────────────

class RoomConfigResponse(CamelModel):
    id: str
    name: str
    slug: str | None
    timezone: str
    has_password: bool
    rotation_policy: RotationPolicyName
    rotation_interval_sec: int
    default_items: list[str]


class LiveItemResponse(CamelModel):
    ref: str
    weight: int | None = None
    title: str | None = None


class SlotResponse(CamelModel):
    start_at: datetime
    end_at: datetime
    lives: list[LiveItemResponse]
    title: str | None = None
    speakers: list[str] | None = None


class ScheduleResponse(CamelModel):
    slots: list[SlotResponse]


class RoomResponse(CamelModel):
    config: RoomConfigResponse
    schedule: ScheduleResponse | None
    version: int


class ScheduleSetResponse(CamelModel):
    version: int


class ActiveWindowResponse(CamelModel):
    slot_start: datetime
    slot_end: datetime
    title: str | None = None
    speakers: list[str] | None = None


class PolicyResponse(CamelModel):
    type: RotationPolicyName
    interval_sec: int


class SlotSummaryResponse(CamelModel):
    start_at: datetime
    end_at: datetime
    items: list[str]


class ViewResponse(CamelModel):
    active: ActiveWindowResponse | None
    items: list[str]
    policy: PolicyResponse
    index: int
    next_switch_at: datetime
    default_items: list[str]
    upcoming_slots: list[SlotSummaryResponse]
    previous_slots: list[SlotSummaryResponse]
