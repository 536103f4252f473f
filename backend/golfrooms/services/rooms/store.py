import threading
import time
from typing import Callable, Dict, List, Optional

from golfrooms.models import Room, WAITING

DEFAULT_ROOM_TTL_SEC = 24 * 60 * 60


class RoomStore:
    """In-memory table of rooms keyed by room id.

    Rooms go in and come out as detached copies, so callers can compute on
    what they read and write the result back with ``put`` (full replace).
    ``lock`` must be held across such a read-compute-write sequence; the
    coordinator and the sweep both take it.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None, room_ttl: float = DEFAULT_ROOM_TTL_SEC):
        self.clock = clock or time.time
        self.room_ttl = room_ttl
        self.lock = threading.RLock()
        self._rooms: Dict[str, Room] = {}

    def __len__(self):
        with self.lock:
            return len(self._rooms)

    def exists(self, room_id) -> bool:
        with self.lock:
            return room_id in self._rooms

    def get(self, room_id) -> Optional[Room]:
        """Return a copy of the room and mark it as recently active."""
        with self.lock:
            room = self._rooms.get(room_id)
            if room is None:
                return None
            room.last_activity = self.clock()
            return room.copy()

    def put(self, room: Room) -> None:
        with self.lock:
            self._rooms[room.id] = room.copy()

    def delete(self, room_id) -> Optional[Room]:
        with self.lock:
            return self._rooms.pop(room_id, None)

    def all(self) -> List[Room]:
        """Copies of every room, without touching activity timestamps."""
        with self.lock:
            return [r.copy() for r in self._rooms.values()]

    def list_active(self, now=None) -> List[Room]:
        if now is None:
            now = self.clock()
        with self.lock:
            active = [
                r.copy() for r in self._rooms.values()
                if r.status == WAITING or now - r.last_activity < self.room_ttl
            ]
        active.sort(key=lambda r: r.created, reverse=True)
        return active

    def clear(self) -> None:
        with self.lock:
            self._rooms.clear()
