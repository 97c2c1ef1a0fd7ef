"""Real-time fan-out of room views to Socket.IO subscribers.

Events (JSON payloads):
  snapshot          {version, view}        on subscribe, on content change, on mutation
  tick              {now, index, nextSwitchAt}   every rotationIntervalSec
  config_updated    {config}
  schedule_updated  {version}
"""
import asyncio
import logging
from collections import defaultdict
from datetime import datetime
from typing import Any

from models import Room, RoomConfig, View
from schemas.room import RoomConfigResponse, ViewResponse
from services.room_store import RoomStore
from services.scheduler import RoomTicker
from services.view import project
from utils.time_utils import to_iso, utc_now

logger = logging.getLogger(__name__)


def snapshot_payload(room: Room, view: View) -> dict[str, Any]:
    return {
        "version": room.version,
        "view": ViewResponse.model_validate(view).model_dump(mode="json", by_alias=True),
    }


def config_payload(config: RoomConfig) -> dict[str, Any]:
    return {"config": RoomConfigResponse.model_validate(config).model_dump(mode="json", by_alias=True)}


class RoomBroadcaster:
    def __init__(self, store: RoomStore, sio, ticker: RoomTicker):
        self.store = store
        self.sio = sio
        self.ticker = ticker
        self._subscribers: dict[str, set[str]] = {}
        self._memberships: dict[str, str] = {}
        self._signatures: dict[str, str] = {}
        # Serializes pushes per room so clients never see versions go backwards
        self._push_locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def subscribers(self, room_id: str) -> set[str]:
        return set(self._subscribers.get(room_id, ()))

    def room_of(self, sid: str) -> str | None:
        return self._memberships.get(sid)

    # ── Subscriptions ─────────────────────────────────────────────────────────

    async def subscribe(self, sid: str, room_id: str) -> int:
        """Attach `sid` to a room and send it one full snapshot. Returns the version sent."""
        self.store.require_room(room_id)
        if self._memberships.get(sid) not in (None, room_id):
            self.unsubscribe(sid)

        self._subscribers.setdefault(room_id, set()).add(sid)
        self._memberships[sid] = room_id
        logger.info(f"Client {sid} subscribed to room {room_id} ({len(self._subscribers[room_id])} watching)")

        async with self._push_locks[room_id]:
            room = self.store.require_room(room_id)
            await self._send(room_id, sid, "snapshot", snapshot_payload(room, project(room)))

        if self._memberships.get(sid) == room_id:
            self.ticker.ensure(room_id, room.config.rotation_interval_sec, self.tick)
        return room.version

    def unsubscribe(self, sid: str) -> None:
        room_id = self._memberships.pop(sid, None)
        if room_id is None:
            return
        watchers = self._subscribers.get(room_id)
        if watchers is not None:
            watchers.discard(sid)
            if not watchers:
                # Last viewer gone: no idle ticking
                del self._subscribers[room_id]
                self._signatures.pop(room_id, None)
                self.ticker.stop(room_id)
        logger.info(f"Client {sid} left room {room_id}")

    # ── Pushes ────────────────────────────────────────────────────────────────

    async def tick(self, room_id: str, at: datetime | None = None) -> None:
        """Timer callback: always a cheap tick, a snapshot only if the content changed."""
        if not self._subscribers.get(room_id):
            self.ticker.stop(room_id)
            return

        now = at or utc_now()
        try:
            async with self._push_locks[room_id]:
                room = self.store.get_room(room_id)
                if room is None:
                    return
                view = project(room, now)
                await self._broadcast(room_id, "tick", {
                    "now": to_iso(now),
                    "index": view.index,
                    "nextSwitchAt": to_iso(view.next_switch_at),
                })
                signature = view.signature
                if signature != self._signatures.get(room_id):
                    self._signatures[room_id] = signature
                    await self._broadcast(room_id, "snapshot", snapshot_payload(room, view))
        except Exception as e:
            logger.error(f"tick failed for room {room_id}: {e}", exc_info=True)

    async def room_changed(self, room_id: str, event: str, payload: dict[str, Any]) -> None:
        """Out-of-band push after a config or schedule mutation."""
        if not self._subscribers.get(room_id):
            return
        async with self._push_locks[room_id]:
            room = self.store.require_room(room_id)
            view = project(room)
            self._signatures[room_id] = view.signature
            await self._broadcast(room_id, event, payload)
            await self._broadcast(room_id, "snapshot", snapshot_payload(room, view))

        if self._subscribers.get(room_id):
            self.ticker.ensure(room_id, room.config.rotation_interval_sec, self.tick)

    async def _broadcast(self, room_id: str, event: str, payload: dict[str, Any]) -> None:
        for sid in list(self._subscribers.get(room_id, ())):
            await self._send(room_id, sid, event, payload)

    async def _send(self, room_id: str, sid: str, event: str, payload: dict[str, Any]) -> None:
        """Best-effort write to one client; a failure drops only that client."""
        try:
            await self.sio.emit(event, payload, to=sid)
        except Exception as e:
            logger.warning(f"Dropping client {sid} from room {room_id}: {event} push failed ({e})")
            self.unsubscribe(sid)
            try:
                await self.sio.disconnect(sid)
            except Exception as e:
                logger.debug(f"Disconnect of {sid} after failed push also failed: {e}")
