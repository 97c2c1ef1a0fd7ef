from fastapi import Request

from services.broadcaster import RoomBroadcaster
from services.room_store import RoomStore


def get_store(request: Request) -> RoomStore:
    return request.app.state.store


def get_broadcaster(request: Request) -> RoomBroadcaster:
    return request.app.state.broadcaster
