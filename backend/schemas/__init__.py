from schemas.room import (
    RoomCreate, RoomUpdate, RoomConfigResponse, RoomResponse,
    ScheduleResponse, ScheduleSetResponse, ViewResponse,
)

__all__ = [
    "RoomCreate", "RoomUpdate", "RoomConfigResponse", "RoomResponse",
    "ScheduleResponse", "ScheduleSetResponse", "ViewResponse",
]
