import logging
import socketio

from config import get_settings
from errors import RoomNotFoundError
from services.broadcaster import RoomBroadcaster

logger = logging.getLogger(__name__)


def create_sio() -> socketio.AsyncServer:
    settings = get_settings()
    return socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins="*",
        ping_interval=settings.SOCKET_PING_INTERVAL,
        ping_timeout=settings.SOCKET_PING_TIMEOUT,
        logger=False,
        engineio_logger=False,
    )


def _room_id_from(data) -> str | None:
    """Clients send either {"roomId": "..."} or the bare id."""
    if isinstance(data, dict):
        room_id = data.get("roomId") or data.get("room_id")
    else:
        room_id = data
    return room_id if isinstance(room_id, str) and room_id else None


class RoomNamespace(socketio.AsyncNamespace):
    """Viewer-facing events: subscribe to a room, receive snapshot/tick pushes."""

    def __init__(self, broadcaster: RoomBroadcaster, namespace: str = "/"):
        super().__init__(namespace)
        self.broadcaster = broadcaster

    async def on_connect(self, sid: str, environ, auth=None):
        logger.info(f"Socket connected: {sid}")

    async def on_disconnect(self, sid: str, reason=None):
        self.broadcaster.unsubscribe(sid)
        logger.info(f"Socket disconnected: {sid}")

    async def on_subscribe(self, sid: str, data=None):
        room_id = _room_id_from(data)
        if room_id is None:
            await self.emit("error", {"message": "roomId is required"}, to=sid)
            return {"ok": False, "error": "roomId is required"}
        try:
            version = await self.broadcaster.subscribe(sid, room_id)
        except RoomNotFoundError as e:
            logger.warning(f"Socket {sid} tried to subscribe to unknown room {room_id}")
            await self.emit("error", {"message": e.message}, to=sid)
            return {"ok": False, "error": e.message}
        return {"ok": True, "version": version}

    async def on_unsubscribe(self, sid: str, data=None):
        self.broadcaster.unsubscribe(sid)
        return {"ok": True}
