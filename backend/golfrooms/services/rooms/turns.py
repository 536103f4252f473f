"""Per-room turn and scoring state machine.

waiting -> playing -> completed, with reset going back to waiting from any
status. Every method returns False/None on a failed precondition instead
of raising, so the HTTP layer can pick the response code.
"""

import logging
from typing import Optional

from golfrooms.models import Player, WAITING, PLAYING, COMPLETED
from .events import RoomEvent, RoomEventBus
from .store import RoomStore

logger = logging.getLogger(__name__)

MIN_PLAYERS_TO_START = 2


class TurnEngine:

    def __init__(self, store: RoomStore, bus: RoomEventBus):
        self.store = store
        self.bus = bus

    def start_game(self, room_id) -> bool:
        with self.store.lock:
            room = self.store.get(room_id)
            if room is None:
                return False
            if len(room.players) < MIN_PLAYERS_TO_START:
                logger.info(f"[start-rejected] room={room_id} players={len(room.players)}")
                return False

            room.status = PLAYING
            room.current_player_index = 0
            room.set_current_turn(0)
            room.last_activity = self.store.clock()
            self.store.put(room)
            logger.info(f"[start] room={room_id} players={len(room.players)} shots={room.shots_per_player}")
            self.bus.emit(RoomEvent.GAME_STARTED, room_id, room)
            return True

    def record_score(self, room_id, player_id, score) -> bool:
        """Add one shot's score for the player whose turn it is.

        Does not advance the turn; callers follow up with ``advance_turn``.
        """
        with self.store.lock:
            room = self.store.get(room_id)
            if room is None:
                return False
            player = room.find_player(player_id)
            if player is None or not player.is_current_turn:
                return False
            # shots never go negative and scores only go up
            if player.shots_remaining <= 0 or score < 0:
                return False

            player.score += score
            player.shots_remaining -= 1
            room.last_activity = self.store.clock()
            self.store.put(room)
            logger.info(
                f"[score] room={room_id} player={player_id} shot={score} total={player.score} left={player.shots_remaining}"
            )
            self.bus.emit(RoomEvent.SCORE_UPDATED, room_id, room, player_id=player_id, player=player.copy(), score=player.score)
            return True

    def advance_turn(self, room_id) -> bool:
        """Hand the turn to the next connected player with shots left.

        Scans forward from just after the current index in list order. Every
        wrap back to index 0 counts as a loop. Reaching a second loop means
        nobody is eligible, and that is the only way a game completes here.
        """
        with self.store.lock:
            room = self.store.get(room_id)
            if room is None or room.status != PLAYING or not room.players:
                return False

            count = len(room.players)
            idx = room.current_player_index
            loops = 0
            while True:
                idx = (idx + 1) % count
                if idx == 0:
                    loops += 1
                if loops > 1:
                    self._complete(room, reason='exhausted')
                    return True
                candidate = room.players[idx]
                if candidate.shots_remaining > 0 and candidate.is_connected:
                    break

            room.set_current_turn(idx)
            room.current_player_index = idx
            room.last_activity = self.store.clock()
            self.store.put(room)
            logger.info(f"[turn] room={room_id} index={idx} player={candidate.id}")
            self.bus.emit(RoomEvent.TURN_CHANGED, room_id, room, player_id=candidate.id, player=candidate.copy())
            return True

    def _complete(self, room, reason) -> None:
        room.status = COMPLETED
        room.set_current_turn(None)
        room.last_activity = self.store.clock()
        self.store.put(room)
        logger.info(f"[complete] room={room.id} reason={reason}")
        self.bus.emit(RoomEvent.GAME_COMPLETED, room.id, room)

    def get_winner(self, room_id) -> Optional[Player]:
        with self.store.lock:
            room = self.store.get(room_id)
        if room is None or room.status != COMPLETED or not room.players:
            return None

        winner = None
        tied = False
        for p in room.players:
            if winner is None or p.score > winner.score:
                winner = p
                tied = False
            elif p.score == winner.score:
                tied = True
        if tied and winner.score <= 0:
            return None
        return winner

    def reset_game(self, room_id) -> bool:
        with self.store.lock:
            room = self.store.get(room_id)
            if room is None:
                return False

            for p in room.players:
                p.score = 0
                p.shots_remaining = room.shots_per_player
            room.status = WAITING
            room.current_player_index = 0
            room.set_current_turn(0)
            room.last_activity = self.store.clock()
            self.store.put(room)
            logger.info(f"[reset] room={room_id}")
            self.bus.emit(RoomEvent.GAME_RESET, room_id, room)
            return True
