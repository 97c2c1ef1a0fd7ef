from collections.abc import AsyncIterator
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from services.broadcaster import RoomBroadcaster
from services.room_store import RoomStore
from services.scheduler import RoomTicker

T0 = datetime(2025, 10, 29, 21, 0, 0, tzinfo=timezone.utc)

REF_A = "note1aaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa"
REF_B = "note1bbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb"
REF_C = "nevent1cccccccccccccccccccccccccccccccccccccccccccccccccccccccc"
REF_DEFAULT = "note1dddddddddddddddddddddddddddddddddddddddddddddddddddddddddd"


def iso(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


def make_slot(start: datetime, seconds: int, *refs: str, **extra) -> dict:
    """Raw slot body as a client would submit it."""
    return {
        "startAt": iso(start),
        "endAt": iso(start + timedelta(seconds=seconds)),
        "lives": [{"ref": ref} for ref in refs],
        **extra,
    }


def emitted(sio_mock: MagicMock, event: str) -> list[tuple[dict, str | None]]:
    """(payload, recipient) for every awaited sio.emit of `event`."""
    found = []
    for call in sio_mock.emit.await_args_list:
        if call.args and call.args[0] == event:
            payload = call.args[1] if len(call.args) > 1 else call.kwargs.get("data")
            found.append((payload, call.kwargs.get("to")))
    return found


@pytest.fixture
def store() -> RoomStore:
    """A fresh, empty room store."""
    return RoomStore()


@pytest.fixture
def mock_sio() -> MagicMock:
    """Mock Socket.IO server recording emits."""
    sio_mock = MagicMock()
    sio_mock.emit = AsyncMock()
    sio_mock.disconnect = AsyncMock()
    return sio_mock


@pytest.fixture
def ticker() -> RoomTicker:
    """Ticker whose scheduler is never started; jobs stay pending."""
    return RoomTicker()


@pytest.fixture
def broadcaster(store: RoomStore, mock_sio: MagicMock, ticker: RoomTicker) -> RoomBroadcaster:
    return RoomBroadcaster(store, mock_sio, ticker)


@pytest.fixture
def app(mock_sio: MagicMock) -> FastAPI:
    from main import create_app

    return create_app(sio=mock_sio)


@pytest_asyncio.fixture
async def http_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
