import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Union

from fastapi import WebSocket

from connection import Connection
from constants import POLICY_VIOLATION, ROOM_ENDED_MESSAGE, ROOM_ID_REQUIRED
from logging_config import get_logger
from registry import RoomRegistry
from schemas.rooms import RoomEndedNotice

logger = get_logger(__name__)


@dataclass
class EndRoomResult:
    room_id: str
    notified: int
    closed: int
    total: int


class RelayEngine:
    """Binds websocket connections to rooms and relays their frames.

    Payloads are never parsed: every text or binary frame a member sends is
    forwarded as-is to the other open members of the same room. Connections
    evicted by ``end_room`` are no longer members and relay nothing.
    """

    def __init__(self, registry: RoomRegistry):
        self.registry = registry

    async def handle(self, websocket: WebSocket, room_id: str):
        """Serve one websocket for its whole lifetime."""
        await websocket.accept()

        if not room_id:
            logger.info("Rejecting websocket connection without a room id")
            await websocket.close(code=POLICY_VIOLATION, reason=ROOM_ID_REQUIRED)
            return

        connection = Connection(websocket, room_id)
        size = self.registry.bind(room_id, connection)
        logger.info(f"New connection {connection.id} to room: {room_id}")
        logger.info(f"Room {room_id} now has {size} connections")

        message_count = 0
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                data = message.get("bytes")
                if data is None:
                    data = message.get("text")
                if data is None:
                    continue
                message_count += 1
                await self.forward(connection, data)
        except Exception as e:
            logger.error(f"WebSocket error for connection {connection.id} in room {room_id}: {e}", exc_info=True)
        finally:
            connection.mark_closed()
            remaining = self.registry.unbind(room_id, connection)
            logger.info(
                f"Connection {connection.id} closed for room: {room_id} "
                f"(connected at {connection.connected_at}, {message_count} messages)"
            )
            if remaining == 0:
                logger.info(f"Room {room_id} is now empty")
            else:
                logger.info(f"Room {room_id} now has {remaining} connections")

    async def forward(self, sender: Connection, data: Union[str, bytes]) -> int:
        """Send ``data`` to every other open member of the sender's room.

        Sends run concurrently and each one is bounded, so a slow or broken
        member never holds up the others. Returns the number of deliveries.
        """
        members = self.registry.members(sender.room_id)
        if sender not in members:
            # Evicted by end_room; the room id may already belong to a new session
            return 0
        recipients = [member for member in members if member is not sender and member.is_open]
        if not recipients:
            return 0

        results = await asyncio.gather(*(member.send(data) for member in recipients), return_exceptions=True)
        delivered = sum(1 for result in results if result is True)
        if delivered < len(recipients):
            logger.debug(f"Delivered to {delivered}/{len(recipients)} members of room {sender.room_id}")
        return delivered

    async def end_room(self, room_id: str) -> EndRoomResult:
        """Remove a room and tell its open members that the session is over.

        Transports are left open; clients are expected to disconnect once
        they see the notice.
        """
        members = self.registry.terminate(room_id)
        logger.info(f"Found {len(members)} connections for room {room_id}")

        notice = RoomEndedNotice(
            room_id=room_id,
            message=ROOM_ENDED_MESSAGE,
            timestamp=datetime.now(timezone.utc).isoformat(),
        ).model_dump_json(by_alias=True)

        open_members = [member for member in members if member.is_open]
        results = await asyncio.gather(*(member.send(notice) for member in open_members), return_exceptions=True)
        notified = sum(1 for result in results if result is True)

        result = EndRoomResult(
            room_id=room_id,
            notified=notified,
            closed=len(members) - notified,
            total=len(members),
        )
        logger.info(f"Room {room_id} ended: notified={result.notified}, closed={result.closed}, total={result.total}")
        return result
