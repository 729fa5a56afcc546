import asyncio
import uuid
from datetime import datetime, timezone
from typing import Optional, Union

from fastapi.websockets import WebSocket, WebSocketState

from constants import SEND_TIMEOUT_SECONDS
from logging_config import get_logger

logger = get_logger(__name__)


class Connection:
    """One accepted websocket bound to a room."""

    def __init__(
        self,
        websocket: WebSocket,
        room_id: str,
        connection_id: Optional[str] = None,
        send_timeout: float = SEND_TIMEOUT_SECONDS,
    ):
        self.id = connection_id or str(uuid.uuid4())
        self.websocket = websocket
        self.room_id = room_id
        self.send_timeout = send_timeout
        self.connected_at = datetime.now(timezone.utc).isoformat()
        self._closed = False
        # Writes to one transport must not interleave
        self._send_lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        if self._closed:
            return False
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    def mark_closed(self):
        self._closed = True

    async def send(self, data: Union[str, bytes], timeout: Optional[float] = None) -> bool:
        """Send one frame, keeping its text or binary type.

        Returns False instead of raising when the transport is gone or the
        send does not finish within ``timeout`` seconds (``send_timeout`` by
        default). Waiting behind other sends to this connection counts
        against the same budget. A member that times out is treated as
        closed from then on.
        """
        if not self.is_open:
            return False
        timeout = timeout if timeout is not None else self.send_timeout
        try:
            await asyncio.wait_for(self._write(data), timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning(f"Send to connection {self.id} in room {self.room_id} timed out after {timeout}s")
            self.mark_closed()
            return False
        except Exception as e:
            # Peer went away mid-send
            logger.debug(f"Send to connection {self.id} in room {self.room_id} failed: {e}")
            self.mark_closed()
            return False

    async def _write(self, data: Union[str, bytes]):
        async with self._send_lock:
            if isinstance(data, (bytes, bytearray)):
                await self.websocket.send_bytes(bytes(data))
            else:
                await self.websocket.send_text(data)

    def __repr__(self):
        return f"Connection(id={self.id!r}, room_id={self.room_id!r})"
