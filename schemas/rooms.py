from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class RoomEndedNotice(BaseModel):
    """Sent to every open member of a room when the room is ended."""
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["room-ended"] = "room-ended"
    room_id: str = Field(alias="roomId")
    message: str
    timestamp: str


class EndRoomResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    notified_clients: int = Field(alias="notifiedClients")
    closed_clients: int = Field(alias="closedClients")
    total_clients: int = Field(alias="totalClients")


class ErrorResponse(BaseModel):
    error: str
