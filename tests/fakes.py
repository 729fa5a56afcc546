"""In-process stand-ins for websockets and registry members."""
import asyncio
import itertools

from fastapi.websockets import WebSocketState

_ids = itertools.count(1)


class FakeMember:
    """Minimal registry member; the registry only needs hashing and an id."""

    def __init__(self, name=None):
        self.id = name or f"member-{next(_ids)}"

    def __repr__(self):
        return f"FakeMember({self.id!r})"


class FakeWebSocket:
    """Records what the server sends and replays queued client frames."""

    def __init__(self, fail_sends=False, send_delay=0.0):
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTING
        self.fail_sends = fail_sends
        self.send_delay = send_delay
        self.sent = []
        self.close_code = None
        self.close_reason = None
        self._incoming = asyncio.Queue()

    async def accept(self):
        self.application_state = WebSocketState.CONNECTED

    async def receive(self):
        message = await self._incoming.get()
        if isinstance(message, BaseException):
            raise message
        if message["type"] == "websocket.disconnect":
            self.client_state = WebSocketState.DISCONNECTED
        return message

    async def send_text(self, data):
        await self._send(data)

    async def send_bytes(self, data):
        await self._send(data)

    async def _send(self, data):
        if self.send_delay:
            await asyncio.sleep(self.send_delay)
        if self.fail_sends:
            raise RuntimeError("Cannot call send once a close message has been sent.")
        self.sent.append(data)

    async def close(self, code=1000, reason=None):
        self.close_code = code
        self.close_reason = reason
        self.application_state = WebSocketState.DISCONNECTED

    # helpers for driving the client side

    def push_text(self, data):
        self._incoming.put_nowait({"type": "websocket.receive", "text": data})

    def push_bytes(self, data):
        self._incoming.put_nowait({"type": "websocket.receive", "bytes": data})

    def push_disconnect(self, code=1000):
        self._incoming.put_nowait({"type": "websocket.disconnect", "code": code})

    def push_error(self, exc):
        self._incoming.put_nowait(exc)

    def drop(self):
        """Simulate the peer vanishing without the server noticing yet."""
        self.client_state = WebSocketState.DISCONNECTED
