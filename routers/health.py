import time

from fastapi import APIRouter, Depends, Request

from dependencies import get_registry
from registry import RoomRegistry
from schemas.health import HealthResponse

health_router = APIRouter(tags=["health"])


@health_router.get("/health", response_model=HealthResponse)
async def health(request: Request, registry: RoomRegistry = Depends(get_registry)):
    return HealthResponse(
        status="healthy",
        active_rooms=registry.room_count(),
        uptime=time.monotonic() - request.app.state.started_at,
    )
