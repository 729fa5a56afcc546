import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from constants import CORS_ALLOW_HEADERS, CORS_ALLOW_METHODS, ENVIRONMENT, LOG_FILE, LOG_LEVEL, PORT
from logging_config import get_logger, setup_logging
from registry import RoomRegistry
from relay import RelayEngine
from routers.health import health_router
from routers.rooms import rooms_router

logger = get_logger(__name__)

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": ", ".join(CORS_ALLOW_METHODS),
    "Access-Control-Allow-Headers": ", ".join(CORS_ALLOW_HEADERS),
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting relay server with PORT: {PORT}")
    logger.info(f"Environment: {ENVIRONMENT}")
    logger.info("Health check endpoint: /health")
    logger.info("Room management API endpoint: /api/rooms/{room_id}/end")
    yield
    registry = app.state.registry
    # uvicorn has already closed the listener and its websockets at this point
    logger.info(
        f"Relay server stopped ({registry.room_count()} rooms, "
        f"{registry.connection_count()} connections left)"
    )


def create_app(registry: RoomRegistry = None) -> FastAPI:
    """Build the application around one room registry.

    The registry is shared by the websocket relay and the HTTP routes, and
    lives exactly as long as the returned app.
    """
    registry = registry if registry is not None else RoomRegistry()
    relay = RelayEngine(registry)

    app = FastAPI(title="Collab Relay", lifespan=lifespan)
    app.state.registry = registry
    app.state.relay = relay
    app.state.started_at = time.monotonic()

    # Allow all origins on the admin surface
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=CORS_ALLOW_METHODS,
        allow_headers=CORS_ALLOW_HEADERS,
    )

    @app.middleware("http")
    async def answer_preflight(request: Request, call_next):
        # Any OPTIONS request gets an empty 200, with or without CORS request headers
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=PREFLIGHT_HEADERS)
        return await call_next(request)

    app.include_router(rooms_router)
    app.include_router(health_router)

    @app.websocket("/{room_id:path}")
    async def relay_endpoint(websocket: WebSocket, room_id: str):
        """Relay endpoint: the whole path after the leading slash names the room."""
        await relay.handle(websocket, room_id)

    logger.info("FastAPI application initialized")
    return app


setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
app = create_app()
