"""In-memory room table. The only mutable state in the service.

Rooms are immutable snapshots; every mutation builds a new `Room` and swaps
it in under that room's lock, so readers always see config, schedule and
version from the same moment.
"""
import logging
import secrets
import threading
from dataclasses import replace
from typing import Any

import pytz

from config import get_settings
from errors import RoomAuthError, RoomNotFoundError, ValidationError
from models import ROTATION_POLICIES, Room, RoomConfig, Schedule
from services.validator import validate_default_items, validate_schedule

logger = logging.getLogger(__name__)

# Fields a config update may touch; `id` and `password` are fixed at creation
UPDATABLE_FIELDS = {"name", "slug", "timezone", "rotation_policy", "rotation_interval_sec", "default_items"}


def _check_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Validate config values in place; raises ValidationError on the first bad one."""
    if "name" in fields:
        name = fields["name"]
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("name is required")
    if "timezone" in fields and fields["timezone"] not in pytz.all_timezones_set:
        raise ValidationError(f"Unknown timezone: {fields['timezone']}")
    if "rotation_policy" in fields and fields["rotation_policy"] not in ROTATION_POLICIES:
        raise ValidationError(
            f"rotationPolicy must be one of: {', '.join(ROTATION_POLICIES)}"
        )
    if "rotation_interval_sec" in fields:
        interval = fields["rotation_interval_sec"]
        if isinstance(interval, bool) or not isinstance(interval, int) or interval <= 0:
            raise ValidationError("rotationIntervalSec must be a positive integer")
    if "default_items" in fields:
        fields["default_items"] = validate_default_items(fields["default_items"])
    return fields


class RoomStore:
    def __init__(self):
        self._rooms: dict[str, Room] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._table_lock = threading.Lock()

    def _generate_id(self) -> str:
        while True:
            room_id = secrets.token_hex(4)
            if room_id not in self._rooms:
                return room_id

    def _lock_for(self, room_id: str) -> threading.Lock:
        lock = self._locks.get(room_id)
        if lock is None:
            raise RoomNotFoundError(room_id)
        return lock

    def create_room(
        self,
        name: str | None,
        slug: str | None = None,
        timezone: str | None = None,
        password: str | None = None,
        rotation_policy: str | None = None,
        rotation_interval_sec: int | None = None,
        default_items: list[str] | None = None,
        room_id: str | None = None,
    ) -> RoomConfig:
        settings = get_settings()
        fields = _check_fields({
            "name": name,
            "timezone": timezone or settings.DEFAULT_TIMEZONE,
            "rotation_policy": rotation_policy or settings.DEFAULT_ROTATION_POLICY,
            "rotation_interval_sec": (
                settings.DEFAULT_ROTATION_INTERVAL_SEC if rotation_interval_sec is None else rotation_interval_sec
            ),
            "default_items": default_items or [],
        })

        with self._table_lock:
            if room_id is not None and room_id in self._rooms:
                raise ValidationError(f"Room {room_id} already exists")
            config = RoomConfig(
                id=room_id or self._generate_id(),
                slug=slug,
                password=password or None,
                **fields,
            )
            self._locks[config.id] = threading.Lock()
            self._rooms[config.id] = Room(config=config, schedule=None, version=1)

        logger.info(f"Created room {config.id} ({config.name})")
        return config

    def update_config(self, room_id: str, changes: dict[str, Any]) -> RoomConfig:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
        fields = _check_fields(dict(changes))

        with self._lock_for(room_id):
            room = self._rooms[room_id]
            config = replace(room.config, **fields)
            self._rooms[room_id] = replace(room, config=config, version=room.version + 1)

        logger.info(f"Updated room {room_id} config: {', '.join(sorted(fields)) or 'no fields'}")
        return config

    def set_schedule(self, room_id: str, raw: Any) -> int:
        """Replace the schedule wholesale. Returns the new version."""
        lock = self._lock_for(room_id)
        # Validation failures propagate before the room is touched
        slots = validate_schedule(raw)

        with lock:
            room = self._rooms[room_id]
            version = room.version + 1
            self._rooms[room_id] = replace(room, schedule=Schedule(slots=tuple(slots)), version=version)

        logger.info(f"Schedule set for room {room_id}: {len(slots)} slot(s), version={version}")
        return version

    def get_room(self, room_id: str) -> Room | None:
        return self._rooms.get(room_id)

    def require_room(self, room_id: str) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            raise RoomNotFoundError(room_id)
        return room

    def list_rooms(self) -> list[Room]:
        return list(self._rooms.values())


def check_password(room: Room, supplied: str | None) -> bool:
    """Plaintext equality gate; rooms without a password always pass."""
    if not room.config.has_password:
        return True
    return supplied == room.config.password


def authorize(room: Room, supplied: str | None) -> Room:
    if not check_password(room, supplied):
        raise RoomAuthError("Invalid room password")
    return room
