from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple
import logging
import threading

from golfrooms.models import Player, Room

logger = logging.getLogger(__name__)


class RoomEvent(str, Enum):
    ROOM_CREATED = 'roomCreated'
    PLAYER_JOINED = 'playerJoined'
    PLAYER_LEFT = 'playerLeft'
    PLAYER_UPDATED = 'playerUpdated'
    ROOM_UPDATED = 'roomUpdated'
    GAME_STARTED = 'gameStarted'
    TURN_CHANGED = 'turnChanged'
    SCORE_UPDATED = 'scoreUpdated'
    GAME_COMPLETED = 'gameCompleted'
    GAME_RESET = 'gameReset'
    ROOM_REMOVED = 'roomRemoved'


@dataclass(frozen=True)
class RoomNotification:
    event: RoomEvent
    room_id: str
    room: Optional[Room] = None
    player_id: Optional[str] = None
    player: Optional[Player] = None
    score: Optional[int] = None

    def to_dict(self):
        return {
            'event': self.event.value,
            'roomId': self.room_id,
            'room': self.room.to_dict() if self.room else None,
            'playerId': self.player_id,
            'player': self.player.to_dict() if self.player else None,
            'score': self.score,
        }


Listener = Callable[[RoomNotification], None]


class RoomEventBus:
    """Synchronous in-process observer for room notifications.

    Listeners run on the emitting thread after the change is committed to
    the store. A listener that raises is logged and skipped.
    """

    def __init__(self):
        self._listeners: List[Tuple[Listener, frozenset]] = []
        self._guard = threading.Lock()

    def subscribe(self, listener: Listener, *events: RoomEvent) -> Listener:
        """Register ``listener`` for ``events`` (all events when none given)."""
        with self._guard:
            self._listeners.append((listener, frozenset(events)))
        return listener

    def unsubscribe(self, listener: Listener) -> None:
        with self._guard:
            self._listeners = [(fn, evs) for fn, evs in self._listeners if fn is not listener]

    def clear(self) -> None:
        with self._guard:
            self._listeners = []

    def emit(self, event: RoomEvent, room_id: str, room: Optional[Room] = None, **fields) -> RoomNotification:
        notification = RoomNotification(
            event=event,
            room_id=room_id,
            room=room.copy() if room else None,
            **fields,
        )
        with self._guard:
            targets = [fn for fn, evs in self._listeners if not evs or event in evs]
        for fn in targets:
            try:
                fn(notification)
            except Exception:
                logger.exception(f"[bus-listener-error] event={event.value} room={room_id}")
        return notification
