"""Multiplayer room coordination: store, lifecycle, turns and notifications.

This package holds the game rules and the in-memory room table. HTTP routes
and socket handlers import it and map its boolean results onto responses,
keeping transport concerns out of the core.
"""

import threading
from typing import Callable, List, Optional

from flask import current_app

from golfrooms.models import Player, Room
from .events import RoomEvent, RoomEventBus, RoomNotification
from .lifecycle import RoomLifecycleManager, UPDATABLE_ROOM_FIELDS
from .store import RoomStore, DEFAULT_ROOM_TTL_SEC
from .turns import TurnEngine

EXTENSION_KEY = 'room_coordinator'


class RoomCoordinator:
    """Single entry point owned by the hosting application.

    Build one per process (``create_app`` does) and hand it to whoever needs
    it; tests build a fresh one each.
    """

    def __init__(self, store: Optional[RoomStore] = None, bus: Optional[RoomEventBus] = None,
                 room_ttl: float = DEFAULT_ROOM_TTL_SEC, clock: Optional[Callable[[], float]] = None):
        self.store = store or RoomStore(clock=clock, room_ttl=room_ttl)
        self.bus = bus or RoomEventBus()
        self.turns = TurnEngine(self.store, self.bus)
        self.lifecycle = RoomLifecycleManager(self.store, self.bus, self.turns)
        self.stopped = threading.Event()

    # --- reads ---
    def get_room(self, room_id) -> Optional[Room]:
        return self.store.get(room_id)

    def list_active_rooms(self, now=None) -> List[Room]:
        return self.store.list_active(now)

    # --- lifecycle ---
    def create_room(self, host_id, host_name, wallet_address, room_name, **options) -> Room:
        return self.lifecycle.create_room(host_id, host_name, wallet_address, room_name, **options)

    def add_player(self, room_id, player: Player) -> bool:
        return self.lifecycle.add_player(room_id, player)

    def remove_player(self, room_id, player_id) -> bool:
        return self.lifecycle.remove_player(room_id, player_id)

    def update_player(self, room_id, player: Player) -> bool:
        return self.lifecycle.update_player(room_id, player)

    def update_room(self, room_id, **changes) -> bool:
        return self.lifecycle.update_room(room_id, **changes)

    def remove_room(self, room_id) -> bool:
        return self.lifecycle.remove_room(room_id)

    def cleanup_inactive_rooms(self, now=None) -> List[str]:
        return self.lifecycle.cleanup_inactive_rooms(now)

    # --- turns ---
    def start_game(self, room_id) -> bool:
        return self.turns.start_game(room_id)

    def record_score(self, room_id, player_id, score) -> bool:
        return self.turns.record_score(room_id, player_id, score)

    def advance_turn(self, room_id) -> bool:
        return self.turns.advance_turn(room_id)

    def get_winner(self, room_id) -> Optional[Player]:
        return self.turns.get_winner(room_id)

    def reset_game(self, room_id) -> bool:
        return self.turns.reset_game(room_id)

    def shutdown(self) -> None:
        """Stop the sweep worker, drop all rooms and listeners."""
        self.stopped.set()
        self.store.clear()
        self.bus.clear()


def get_coordinator() -> RoomCoordinator:
    return current_app.extensions[EXTENSION_KEY]


__all__ = [
    'EXTENSION_KEY',
    'RoomCoordinator',
    'RoomEvent',
    'RoomEventBus',
    'RoomNotification',
    'RoomStore',
    'TurnEngine',
    'RoomLifecycleManager',
    'UPDATABLE_ROOM_FIELDS',
    'get_coordinator',
]
