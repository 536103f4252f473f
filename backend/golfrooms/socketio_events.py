from flask_socketio import join_room, leave_room, emit
from flask import current_app, request
from golfrooms import socketio
from golfrooms.services.rooms import RoomEventBus, RoomNotification, get_coordinator
from typing import Dict, Any


# socket id -> {'room_id', 'player_id'} for sockets watching a room
_sid_to_ctx: Dict[str, Dict[str, Any]] = {}

def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore

def _channel(room_id: str) -> str:
    return f"room:{room_id}"


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(*_args):
    # A player socket dropping counts as leaving its room
    ctx = _sid_to_ctx.pop(_get_sid(), None)
    if not ctx or not ctx.get('player_id'):
        return
    room_id, player_id = ctx['room_id'], ctx['player_id']
    current_app.logger.info(f"[ws-disconnect] room={room_id} player={player_id}")
    get_coordinator().remove_player(room_id, player_id)


def handle_watch_room(data):
    room_id = (data or {}).get('room_id')
    player_id = (data or {}).get('player_id')
    if not room_id:
        emit('error', {'message': 'room_id is required'})
        return
    room = get_coordinator().get_room(room_id)
    if room is None:
        emit('error', {'message': 'Room not found'})
        return
    if player_id and room.find_player(player_id) is None:
        emit('error', {'message': 'Player not in room'})
        return
    prev = _sid_to_ctx.get(_get_sid())
    if prev and prev['room_id'] != room_id:
        # one watched room per socket; a seat held in the old room is given up
        leave_room(_channel(prev['room_id']))
        if prev.get('player_id'):
            current_app.logger.info(f"[ws-switch] room={prev['room_id']} player={prev['player_id']} to={room_id}")
            get_coordinator().remove_player(prev['room_id'], prev['player_id'])
    elif prev and not player_id:
        player_id = prev.get('player_id')
    join_room(_channel(room_id))
    _sid_to_ctx[_get_sid()] = {'room_id': room_id, 'player_id': player_id}
    emit('watching', {'room': _channel(room_id), 'state': room.to_dict()})


def handle_unwatch_room(data):
    room_id = (data or {}).get('room_id')
    if not room_id:
        emit('error', {'message': 'room_id is required'})
        return
    leave_room(_channel(room_id))
    ctx = _sid_to_ctx.get(_get_sid())
    if ctx and ctx.get('room_id') == room_id:
        _sid_to_ctx.pop(_get_sid(), None)
    emit('unwatched', {'room': _channel(room_id)})


def handle_ping(data):
    emit('pong', data or {})


def relay_room_events(bus: RoomEventBus) -> None:
    """Forward every room notification to the sockets watching that room."""

    def _relay(notification: RoomNotification) -> None:
        channel = _channel(notification.room_id)
        socketio.emit(notification.event.value, notification.to_dict(), to=channel, namespace='/ws')
        socketio.emit('state_update', {'roomId': notification.room_id}, to=channel, namespace='/ws')

    bus.subscribe(_relay)


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for ns in namespaces:
        socketio.on_event('connect', handle_connect, namespace=ns)
        socketio.on_event('disconnect', handle_disconnect, namespace=ns)
        socketio.on_event('watch_room', handle_watch_room, namespace=ns)
        socketio.on_event('unwatch_room', handle_unwatch_room, namespace=ns)
        socketio.on_event('ping', handle_ping, namespace=ns)
