import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Query

from api.deps import get_broadcaster, get_store
from errors import RoomAuthError, RoomNotFoundError, ValidationError
from schemas.room import (
    RoomConfigResponse, RoomCreate, RoomResponse, RoomUpdate, ScheduleSetResponse, ViewResponse,
)
from services.broadcaster import RoomBroadcaster, config_payload
from services.room_store import RoomStore, authorize
from services.view import project
from utils.time_utils import parse_utc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rooms", tags=["rooms"])


@router.post("", response_model=RoomConfigResponse)
async def create_room(
    body: RoomCreate,
    store: RoomStore = Depends(get_store),
):
    try:
        config = store.create_room(**body.model_dump())
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    return RoomConfigResponse.model_validate(config)


@router.put("/{room_id}", response_model=RoomConfigResponse)
async def update_room(
    room_id: str,
    body: RoomUpdate,
    store: RoomStore = Depends(get_store),
    broadcaster: RoomBroadcaster = Depends(get_broadcaster),
):
    try:
        config = store.update_config(room_id, body.model_dump(exclude_unset=True))
    except RoomNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)

    # Viewers get the new config plus a fresh snapshot right away
    await broadcaster.room_changed(room_id, "config_updated", config_payload(config))
    return RoomConfigResponse.model_validate(config)


@router.put("/{room_id}/schedule", response_model=ScheduleSetResponse)
async def set_schedule(
    room_id: str,
    body: Any = Body(...),
    store: RoomStore = Depends(get_store),
    broadcaster: RoomBroadcaster = Depends(get_broadcaster),
):
    try:
        version = store.set_schedule(room_id, body)
    except RoomNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ValidationError as e:
        logger.info(f"Schedule rejected for room {room_id}: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)

    await broadcaster.room_changed(room_id, "schedule_updated", {"version": version})
    return ScheduleSetResponse(version=version)


@router.get("/{room_id}", response_model=RoomResponse)
async def get_room(
    room_id: str,
    password: str | None = Query(default=None),
    x_room_password: str | None = Header(default=None),
    store: RoomStore = Depends(get_store),
):
    room = store.get_room(room_id)
    if not room:
        raise HTTPException(status_code=404, detail="Room not found")
    try:
        authorize(room, password if password is not None else x_room_password)
    except RoomAuthError as e:
        raise HTTPException(status_code=401, detail=e.message)
    return RoomResponse.model_validate(room)


@router.get("/{room_id}/view", response_model=ViewResponse)
async def get_view(
    room_id: str,
    at: str | None = Query(default=None, description="ISO-8601 instant; defaults to now"),
    store: RoomStore = Depends(get_store),
):
    room = store.get_room(room_id)
    if not room:
        raise HTTPException(status_code=404, detail="Room not found")

    moment: datetime | None = None
    if at:
        try:
            moment = parse_utc(at)
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Invalid 'at' timestamp: {at}")
    return ViewResponse.model_validate(project(room, moment))
