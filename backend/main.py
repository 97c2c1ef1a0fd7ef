import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import socketio

from config import get_settings
from api.rooms import router as rooms_router
from services.broadcaster import RoomBroadcaster
from services.room_store import RoomStore
from services.scheduler import RoomTicker
from ws.events import RoomNamespace, create_sio

settings = get_settings()

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def create_app(sio: socketio.AsyncServer | None = None) -> FastAPI:
    """Build the API with its own room store, ticker and Socket.IO server."""
    sio = sio or create_sio()
    store = RoomStore()
    ticker = RoomTicker()
    broadcaster = RoomBroadcaster(store, sio, ticker)
    sio.register_namespace(RoomNamespace(broadcaster))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting live rooms backend...")
        ticker.start()
        logger.info("Live rooms backend ready")
        yield
        ticker.shutdown()
        logger.info("Live rooms backend shut down")

    app = FastAPI(
        title="Live Rooms API",
        description="Scheduled, rotating live-content rooms with real-time viewers",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.store = store
    app.state.ticker = ticker
    app.state.broadcaster = broadcaster
    app.state.sio = sio

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL, "http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        """Report malformed request bodies as 400, like invalid field values."""
        detail = "; ".join(
            f"{'.'.join(str(x) for x in e['loc'])}: {e['msg']}" for e in exc.errors()
        )
        return JSONResponse(status_code=400, content={"detail": detail})

    # REST routes
    app.include_router(rooms_router)

    # Health check
    @app.get("/health")
    async def health():
        return {"status": "ok", "service": "live-rooms", "rooms": len(store.list_rooms())}

    return app


app = create_app()

# Mount Socket.IO; uvicorn should point to this
application = socketio.ASGIApp(app.state.sio, other_asgi_app=app)
