from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from dependencies import get_relay
from logging_config import get_logger
from relay import RelayEngine
from schemas.rooms import EndRoomResponse, ErrorResponse

logger = get_logger(__name__)

rooms_router = APIRouter(prefix="/api/rooms", tags=["rooms"])


@rooms_router.post(
    "/{room_id}/end",
    response_model=EndRoomResponse,
    responses={500: {"model": ErrorResponse}},
)
async def end_room(room_id: str, request: Request, relay: RelayEngine = Depends(get_relay)):
    # POST /api/rooms/{room_id}/end
    # - Every open member gets a "room-ended" notice, then the room is gone.
    # - Members are not disconnected; they are expected to leave on their own.
    client_host = request.client.host if request.client else "unknown"
    logger.info(f"Ending room: {room_id} (requested by {client_host})")

    try:
        result = await relay.end_room(room_id)
    except Exception as e:
        logger.error(f"Error ending room {room_id}: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Failed to end room"})

    return EndRoomResponse(
        success=True,
        message="Room ended successfully",
        notified_clients=result.notified,
        closed_clients=result.closed,
        total_clients=result.total,
    )
