from dataclasses import dataclass, field, replace
from typing import List, Optional
import random
import string

WAITING = 'waiting'
PLAYING = 'playing'
COMPLETED = 'completed'
ROOM_STATUSES = (WAITING, PLAYING, COMPLETED)

ROOM_ID_LENGTH = 8


def generate_room_id(length=ROOM_ID_LENGTH):
    """Generate a short room code. Uniqueness is checked by the caller."""
    return ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))


@dataclass
class Player:
    id: str
    name: str
    wallet_address: str = ''
    score: int = 0
    shots_remaining: int = 0
    is_connected: bool = True
    is_current_turn: bool = False

    def copy(self) -> 'Player':
        return replace(self)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'walletAddress': self.wallet_address,
            'score': self.score,
            'shotsRemaining': self.shots_remaining,
            'isConnected': self.is_connected,
            'isCurrentTurn': self.is_current_turn,
        }

    @classmethod
    def from_dict(cls, data) -> 'Player':
        """Build a player from its wire form.

        Raises ValueError when the payload is not an object or lacks an id,
        or when a numeric field is not an integer.
        """
        if not isinstance(data, dict):
            raise ValueError('Player must be an object')
        player_id = data.get('id')
        if not player_id or not isinstance(player_id, str):
            raise ValueError('Player id is required')
        score = data.get('score', 0)
        shots = data.get('shotsRemaining', 0)
        for value in (score, shots):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError('score and shotsRemaining must be integers')
        return cls(
            id=player_id,
            name=str(data.get('name') or ''),
            wallet_address=str(data.get('walletAddress') or ''),
            score=score,
            shots_remaining=max(0, shots),
            is_connected=bool(data.get('isConnected', True)),
            is_current_turn=bool(data.get('isCurrentTurn', False)),
        )


@dataclass
class Room:
    id: str
    name: str
    host_id: str
    players: List[Player] = field(default_factory=list)
    max_players: int = 4
    status: str = WAITING
    current_player_index: int = 0
    shots_per_player: int = 3
    reward_amount: int = 10_000_000
    created: float = 0.0
    last_activity: float = 0.0

    def copy(self) -> 'Room':
        """Detached copy; mutating it never touches the stored room."""
        return replace(self, players=[p.copy() for p in self.players])

    def find_player(self, player_id) -> Optional[Player]:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def player_index(self, player_id) -> int:
        for idx, p in enumerate(self.players):
            if p.id == player_id:
                return idx
        return -1

    def set_current_turn(self, index: Optional[int]) -> None:
        """Make players[index] the only current player (None clears all)."""
        for idx, p in enumerate(self.players):
            p.is_current_turn = idx == index

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'hostId': self.host_id,
            'players': [p.to_dict() for p in self.players],
            'maxPlayers': self.max_players,
            'status': self.status,
            'currentPlayerIndex': self.current_player_index,
            'shotsPerPlayer': self.shots_per_player,
            'rewardAmount': self.reward_amount,
            'created': self.created,
            'lastActivity': self.last_activity,
        }
