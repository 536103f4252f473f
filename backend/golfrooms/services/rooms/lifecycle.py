import logging
from typing import List, Optional

from golfrooms.models import Player, Room, PLAYING, WAITING, generate_room_id
from .events import RoomEvent, RoomEventBus
from .store import RoomStore
from .turns import TurnEngine

logger = logging.getLogger(__name__)

# wire name -> Room attribute, for partial room updates
UPDATABLE_ROOM_FIELDS = {
    'name': 'name',
    'hostId': 'host_id',
    'maxPlayers': 'max_players',
    'status': 'status',
    'currentPlayerIndex': 'current_player_index',
    'shotsPerPlayer': 'shots_per_player',
    'rewardAmount': 'reward_amount',
    'players': 'players',
}


class RoomLifecycleManager:
    """Room creation, membership changes and eviction."""

    def __init__(self, store: RoomStore, bus: RoomEventBus, turns: TurnEngine):
        self.store = store
        self.bus = bus
        self.turns = turns

    def _new_room_id(self) -> str:
        room_id = generate_room_id()
        while self.store.exists(room_id):
            logger.warning(f"[room-id-collision] id={room_id}, regenerating")
            room_id = generate_room_id()
        return room_id

    def create_room(self, host_id, host_name, wallet_address, room_name,
                    max_players=4, shots_per_player=3, reward_amount=10_000_000) -> Room:
        with self.store.lock:
            now = self.store.clock()
            room = Room(
                id=self._new_room_id(),
                name=room_name,
                host_id=host_id,
                players=[Player(
                    id=host_id,
                    name=host_name,
                    wallet_address=wallet_address or '',
                    score=0,
                    shots_remaining=shots_per_player,
                    is_connected=True,
                    is_current_turn=True,
                )],
                max_players=max_players,
                status=WAITING,
                current_player_index=0,
                shots_per_player=shots_per_player,
                reward_amount=reward_amount,
                created=now,
                last_activity=now,
            )
            self.store.put(room)
            logger.info(f"[room-create] room={room.id} host={host_id} max={max_players} shots={shots_per_player}")
            self.bus.emit(RoomEvent.ROOM_CREATED, room.id, room)
            return room.copy()

    def add_player(self, room_id, player: Player) -> bool:
        """Admit a player to a waiting room.

        A player id already present is treated as a re-join: the entry is
        replaced in place and its progress starts over.
        """
        with self.store.lock:
            room = self.store.get(room_id)
            if room is None:
                return False
            if len(room.players) >= room.max_players or room.status != WAITING:
                logger.info(f"[join-rejected] room={room_id} player={player.id} status={room.status} size={len(room.players)}")
                return False

            joined = player.copy()
            joined.score = 0
            joined.shots_remaining = room.shots_per_player
            joined.is_connected = True
            idx = room.player_index(player.id)
            if idx >= 0:
                joined.is_current_turn = room.players[idx].is_current_turn
                room.players[idx] = joined
            else:
                joined.is_current_turn = False
                room.players.append(joined)

            room.last_activity = self.store.clock()
            self.store.put(room)
            logger.info(f"[join] room={room_id} player={player.id} rejoin={idx >= 0}")
            self.bus.emit(RoomEvent.PLAYER_JOINED, room_id, room, player_id=joined.id, player=joined.copy())
            return True

    def remove_player(self, room_id, player_id) -> bool:
        with self.store.lock:
            room = self.store.get(room_id)
            if room is None:
                return False
            idx = room.player_index(player_id)
            if idx < 0:
                return False

            if room.status == PLAYING:
                # keep the seat so turn order stays intact
                leaving = room.players[idx]
                leaving.is_connected = False
                room.last_activity = self.store.clock()
                self.store.put(room)
                if leaving.is_current_turn:
                    self.turns.advance_turn(room_id)
                    room = self.store.get(room_id)
            else:
                room.players.pop(idx)

            if _abandoned(room):
                self.store.delete(room_id)
                logger.info(f"[leave] room={room_id} player={player_id} room-empty")
                self.bus.emit(RoomEvent.PLAYER_LEFT, room_id, room, player_id=player_id)
                self.bus.emit(RoomEvent.ROOM_REMOVED, room_id, room)
                return True

            if player_id == room.host_id:
                for p in room.players:
                    if p.is_connected:
                        room.host_id = p.id
                        break
                logger.info(f"[host-change] room={room_id} old={player_id} new={room.host_id}")

            room.last_activity = self.store.clock()
            self.store.put(room)
            logger.info(f"[leave] room={room_id} player={player_id} status={room.status}")
            self.bus.emit(RoomEvent.PLAYER_LEFT, room_id, room, player_id=player_id)
            return True

    def update_player(self, room_id, player: Player) -> bool:
        """Replace a player wholesale, bypassing turn and score rules."""
        with self.store.lock:
            room = self.store.get(room_id)
            if room is None:
                return False
            idx = room.player_index(player.id)
            if idx < 0:
                return False

            room.players[idx] = player.copy()
            room.last_activity = self.store.clock()
            self.store.put(room)
            self.bus.emit(RoomEvent.PLAYER_UPDATED, room_id, room, player_id=player.id, player=player.copy())
            self._drop_if_abandoned(room)
            return True

    def update_room(self, room_id, **changes) -> bool:
        """Apply a partial update keyed by wire field names.

        Returns False without writing anything if the result would name a
        host who is not seated, or seat more players than a waiting room
        allows.
        """
        unknown = set(changes) - set(UPDATABLE_ROOM_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update room fields: {', '.join(sorted(unknown))}")
        if 'players' in changes and not changes['players']:
            return False

        with self.store.lock:
            room = self.store.get(room_id)
            if room is None:
                return False

            for key, value in changes.items():
                if key == 'players':
                    value = [p.copy() for p in value]
                setattr(room, UPDATABLE_ROOM_FIELDS[key], value)
            if room.find_player(room.host_id) is None:
                logger.info(f"[room-update] room={room_id} rejected host={room.host_id} not seated")
                return False
            if room.status == WAITING and room.max_players < len(room.players):
                logger.info(f"[room-update] room={room_id} rejected maxPlayers={room.max_players} "
                            f"players={len(room.players)}")
                return False
            room.last_activity = self.store.clock()
            self.store.put(room)
            logger.info(f"[room-update] room={room_id} fields={','.join(sorted(changes))}")
            self.bus.emit(RoomEvent.ROOM_UPDATED, room_id, room)
            self._drop_if_abandoned(room)
            return True

    def _drop_if_abandoned(self, room: Room) -> bool:
        # caller holds the store lock
        if not _abandoned(room):
            return False
        self.store.delete(room.id)
        logger.info(f"[room-remove] room={room.id} no connected players")
        self.bus.emit(RoomEvent.ROOM_REMOVED, room.id, room)
        return True

    def remove_room(self, room_id) -> bool:
        with self.store.lock:
            room = self.store.delete(room_id)
            if room is None:
                return False
            logger.info(f"[room-remove] room={room_id}")
            self.bus.emit(RoomEvent.ROOM_REMOVED, room_id, room)
            return True

    def cleanup_inactive_rooms(self, now=None) -> List[str]:
        """Delete every room idle for longer than the store's TTL."""
        removed = []
        with self.store.lock:
            if now is None:
                now = self.store.clock()
            for room in self.store.all():
                if now - room.last_activity > self.store.room_ttl:
                    self.remove_room(room.id)
                    removed.append(room.id)
        if removed:
            logger.info(f"[sweep] removed={len(removed)} rooms={','.join(removed)}")
        return removed


def _abandoned(room: Room) -> bool:
    return not room.players or all(not p.is_connected for p in room.players)
