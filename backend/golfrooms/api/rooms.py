from flask import Blueprint, jsonify, request, current_app
from werkzeug.exceptions import HTTPException
from golfrooms.models import Player, ROOM_STATUSES
from golfrooms.services.rooms import get_coordinator


rooms = Blueprint('rooms', __name__)


def _ok(data, status=200):
    return jsonify({'success': True, 'data': data}), status

def _fail(error, status):
    return jsonify({'success': False, 'error': error}), status

def _body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}

def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)

def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)

def _room_or_none(room_id):
    room = get_coordinator().get_room(room_id)
    return room.to_dict() if room else None

def _rejected(room_id, message):
    """404 when the room is gone, otherwise a 400 with ``message``."""
    if not get_coordinator().store.exists(room_id):
        return _fail('Room not found', 404)
    return _fail(message, 400)


@rooms.errorhandler(Exception)
def handle_unexpected_error(exc):
    if isinstance(exc, HTTPException):
        return _fail(exc.description, exc.code)
    current_app.logger.exception(f"[api-error] {request.method} {request.path}")
    return _fail(str(exc) or exc.__class__.__name__, 500)


@rooms.route('', methods=['GET'])
def list_rooms():
    active = get_coordinator().list_active_rooms()
    return _ok([r.to_dict() for r in active])


@rooms.route('/<string:room_id>', methods=['GET'])
def get_room(room_id):
    room = _room_or_none(room_id)
    if not room:
        return _fail('Room not found', 404)
    return _ok(room)


@rooms.route('', methods=['POST'])
def create_room():
    data = _body()
    host_id = data.get('hostId')
    host_name = data.get('hostName')
    room_name = data.get('roomName')
    wallet_address = data.get('walletAddress') or ''
    if not all(isinstance(v, str) and v for v in (host_id, host_name, room_name)):
        return _fail('Missing required fields', 400)
    if not isinstance(wallet_address, str):
        return _fail('walletAddress must be a string', 400)

    cfg = current_app.config
    max_players = data.get('maxPlayers', cfg.get('DEFAULT_MAX_PLAYERS', 4))
    shots_per_player = data.get('shotsPerPlayer', cfg.get('DEFAULT_SHOTS_PER_PLAYER', 3))
    reward_amount = data.get('rewardAmount', cfg.get('DEFAULT_REWARD_AMOUNT', 10_000_000))
    if not _is_int(max_players) or max_players < 2:
        return _fail('maxPlayers must be an integer >= 2', 400)
    if not _is_int(shots_per_player) or shots_per_player < 1:
        return _fail('shotsPerPlayer must be an integer >= 1', 400)
    if not _is_number(reward_amount):
        return _fail('rewardAmount must be a number', 400)

    room = get_coordinator().create_room(
        host_id,
        host_name,
        wallet_address,
        room_name,
        max_players=max_players,
        shots_per_player=shots_per_player,
        reward_amount=reward_amount,
    )
    return _ok(room.to_dict(), 201)


@rooms.route('/<string:room_id>/join', methods=['POST'])
def join_room(room_id):
    data = _body()
    player_id = data.get('playerId')
    player_name = data.get('playerName')
    wallet_address = data.get('walletAddress') or ''
    if not all(isinstance(v, str) and v for v in (player_id, player_name)) or not isinstance(wallet_address, str):
        return _fail('Missing required fields', 400)

    coordinator = get_coordinator()
    room = coordinator.get_room(room_id)
    if not room:
        return _fail('Room not found', 404)

    player = Player(
        id=player_id,
        name=player_name,
        wallet_address=wallet_address,
        shots_remaining=room.shots_per_player,
    )
    if not coordinator.add_player(room_id, player):
        return _rejected(room_id, 'Failed to join room')
    return _ok(_room_or_none(room_id))


@rooms.route('/<string:room_id>/leave', methods=['POST'])
def leave_room(room_id):
    player_id = _body().get('playerId')
    if not player_id:
        return _fail('Missing player ID', 400)

    if not get_coordinator().remove_player(room_id, player_id):
        return _fail('Room or player not found', 404)
    # None once the last connected player has gone
    return _ok(_room_or_none(room_id))


@rooms.route('/<string:room_id>/players/<string:player_id>', methods=['PUT'])
def update_player(room_id, player_id):
    try:
        player = Player.from_dict(_body().get('player'))
    except ValueError as exc:
        return _fail(f'Invalid player data: {exc}', 400)
    if player.id != player_id:
        return _fail('Player id does not match the URL', 400)

    if not get_coordinator().update_player(room_id, player):
        return _fail('Room or player not found', 404)
    return _ok(_room_or_none(room_id))


@rooms.route('/<string:room_id>/score', methods=['POST'])
def record_score(room_id):
    data = _body()
    player_id = data.get('playerId')
    score = data.get('score')
    if not player_id or score is None:
        return _fail('Missing required fields', 400)
    if not _is_number(score) or not float(score).is_integer():
        return _fail('score must be an integer', 400)

    if not get_coordinator().record_score(room_id, player_id, int(score)):
        return _rejected(room_id, 'Failed to update score')
    return _ok(_room_or_none(room_id))


def _parse_room_updates(updates):
    """Validate a partial room update; returns (changes, error)."""
    changes = {}
    for key, value in updates.items():
        if key in ('name', 'hostId'):
            if not isinstance(value, str) or not value:
                return None, f'{key} must be a non-empty string'
        elif key == 'maxPlayers':
            if not _is_int(value) or value < 2:
                return None, 'maxPlayers must be an integer >= 2'
        elif key == 'shotsPerPlayer':
            if not _is_int(value) or value < 1:
                return None, 'shotsPerPlayer must be an integer >= 1'
        elif key == 'currentPlayerIndex':
            if not _is_int(value) or value < 0:
                return None, 'currentPlayerIndex must be a non-negative integer'
        elif key == 'status':
            if value not in ROOM_STATUSES:
                return None, f"status must be one of {', '.join(ROOM_STATUSES)}"
        elif key == 'rewardAmount':
            if not _is_number(value):
                return None, 'rewardAmount must be a number'
        elif key == 'players':
            if not isinstance(value, list) or not value:
                return None, 'players must be a non-empty list'
            try:
                value = [Player.from_dict(p) for p in value]
            except ValueError as exc:
                return None, f'Invalid player data: {exc}'
        else:
            return None, f'Unknown room field: {key}'
        changes[key] = value
    return changes, None


@rooms.route('/<string:room_id>', methods=['PUT'])
def update_room(room_id):
    updates = _body().get('updates')
    if not isinstance(updates, dict) or not updates:
        return _fail('Missing room updates', 400)
    changes, error = _parse_room_updates(updates)
    if error:
        return _fail(error, 400)

    if not get_coordinator().update_room(room_id, **changes):
        return _rejected(room_id, 'Invalid room update')
    return _ok(_room_or_none(room_id))


@rooms.route('/<string:room_id>/start', methods=['POST'])
def start_game(room_id):
    if not get_coordinator().start_game(room_id):
        return _rejected(room_id, 'Failed to start game')
    return _ok(_room_or_none(room_id))


@rooms.route('/<string:room_id>/next-turn', methods=['POST'])
def next_turn(room_id):
    if not get_coordinator().advance_turn(room_id):
        return _rejected(room_id, 'Failed to advance turn')
    return _ok(_room_or_none(room_id))


@rooms.route('/<string:room_id>/reset', methods=['POST'])
def reset_game(room_id):
    if not get_coordinator().reset_game(room_id):
        return _rejected(room_id, 'Failed to reset game')
    return _ok(_room_or_none(room_id))


@rooms.route('/<string:room_id>/winner', methods=['GET'])
def get_winner(room_id):
    coordinator = get_coordinator()
    if not coordinator.store.exists(room_id):
        return _fail('Room not found', 404)
    winner = coordinator.get_winner(room_id)
    return _ok(winner.to_dict() if winner else None)
