import threading
from typing import Dict, Set

from connection import Connection
from logging_config import get_logger

logger = get_logger(__name__)


class RoomRegistry:
    """In-memory mapping of room id -> connected members.

    A room only exists while it has at least one member. Every method takes
    the same lock, so callers always see a consistent snapshot; the sets
    returned are copies and may be stale as soon as the call returns.
    """

    def __init__(self):
        self._rooms: Dict[str, Set[Connection]] = {}
        self._lock = threading.Lock()

    def bind(self, room_id: str, connection: Connection) -> int:
        """Add a connection to a room, creating the room if needed. Returns the room size."""
        with self._lock:
            members = self._rooms.setdefault(room_id, set())
            members.add(connection)
            size = len(members)
        logger.debug(f"Bound connection {connection.id} to room {room_id} ({size} members)")
        return size

    def unbind(self, room_id: str, connection: Connection) -> int:
        """Remove a connection from a room. Returns the remaining room size.

        Unknown rooms and members are ignored; the room may already have been
        terminated while the connection was still open.
        """
        with self._lock:
            members = self._rooms.get(room_id)
            if members is None or connection not in members:
                return len(members) if members else 0
            members.remove(connection)
            size = len(members)
            if not members:
                del self._rooms[room_id]
        logger.debug(f"Unbound connection {connection.id} from room {room_id} ({size} members)")
        return size

    def members(self, room_id: str) -> Set[Connection]:
        with self._lock:
            return set(self._rooms.get(room_id, ()))

    def terminate(self, room_id: str) -> Set[Connection]:
        """Remove the room and return the members it had at that instant."""
        with self._lock:
            members = self._rooms.pop(room_id, set())
        logger.debug(f"Terminated room {room_id} with {len(members)} members")
        return members

    def room_count(self) -> int:
        with self._lock:
            return len(self._rooms)

    def connection_count(self) -> int:
        with self._lock:
            return sum(len(members) for members in self._rooms.values())
