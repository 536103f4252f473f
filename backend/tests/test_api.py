def _create(client, **overrides):
    body = {
        'hostId': 'host-1',
        'hostName': 'Hana',
        'walletAddress': 'GHOST',
        'roomName': 'Back Nine',
    }
    body.update(overrides)
    return client.post('/api/rooms', json=body)


def _join(client, room_id, player_id, name=None):
    return client.post(f'/api/rooms/{room_id}/join', json={
        'playerId': player_id,
        'playerName': name or player_id,
        'walletAddress': f'W-{player_id}',
    })


def _room_id(client, **overrides):
    return _create(client, **overrides).get_json()['data']['id']


def test_health(client):
    res = client.get('/health')
    assert res.status_code == 200
    assert res.get_json()['status'] == 'healthy'


def test_create_room(client):
    res = _create(client, maxPlayers=3, shotsPerPlayer=2, rewardAmount=500)
    assert res.status_code == 201
    body = res.get_json()
    assert body['success'] is True
    room = body['data']
    assert room['hostId'] == 'host-1'
    assert room['maxPlayers'] == 3
    assert room['shotsPerPlayer'] == 2
    assert room['rewardAmount'] == 500
    assert room['status'] == 'waiting'
    assert room['players'][0]['isCurrentTurn'] is True
    assert room['players'][0]['walletAddress'] == 'GHOST'


def test_create_room_applies_config_defaults(client):
    room = _create(client).get_json()['data']
    assert room['maxPlayers'] == 4
    assert room['shotsPerPlayer'] == 3
    assert room['rewardAmount'] == 10_000_000


def test_create_room_validation(client):
    res = client.post('/api/rooms', json={'hostId': 'h'})
    assert res.status_code == 400
    assert res.get_json() == {'success': False, 'error': 'Missing required fields'}
    assert _create(client, maxPlayers=1).status_code == 400
    assert _create(client, shotsPerPlayer=0).status_code == 400
    assert _create(client, rewardAmount='lots').status_code == 400
    assert client.post('/api/rooms', data='not json').status_code == 400


def test_list_and_get_rooms(client):
    first = _room_id(client, roomName='First')
    second = _room_id(client, roomName='Second')
    res = client.get('/api/rooms')
    assert res.status_code == 200
    ids = [r['id'] for r in res.get_json()['data']]
    assert set(ids) == {first, second}

    res = client.get(f'/api/rooms/{first}')
    assert res.get_json()['data']['name'] == 'First'
    missing = client.get('/api/rooms/NOPE1234')
    assert missing.status_code == 404
    assert missing.get_json()['success'] is False


def test_join_room(client):
    room_id = _room_id(client)
    res = _join(client, room_id, 'p2', 'Pia')
    assert res.status_code == 200
    players = res.get_json()['data']['players']
    assert [p['id'] for p in players] == ['host-1', 'p2']
    assert players[1]['shotsRemaining'] == 3
    assert players[1]['isCurrentTurn'] is False


def test_join_errors(client):
    room_id = _room_id(client, maxPlayers=2)
    assert client.post(f'/api/rooms/{room_id}/join', json={'playerId': 'x'}).status_code == 400
    assert _join(client, 'NOPE1234', 'p2').status_code == 404
    assert _join(client, room_id, 'p2').status_code == 200
    full = _join(client, room_id, 'p3')
    assert full.status_code == 400
    assert full.get_json()['error'] == 'Failed to join room'


def test_leave_room_and_delete_when_empty(client):
    room_id = _room_id(client)
    _join(client, room_id, 'p2')
    res = client.post(f'/api/rooms/{room_id}/leave', json={'playerId': 'host-1'})
    assert res.status_code == 200
    assert res.get_json()['data']['hostId'] == 'p2'

    res = client.post(f'/api/rooms/{room_id}/leave', json={'playerId': 'p2'})
    assert res.status_code == 200
    assert res.get_json() == {'success': True, 'data': None}
    assert client.get(f'/api/rooms/{room_id}').status_code == 404


def test_leave_errors(client):
    room_id = _room_id(client)
    assert client.post(f'/api/rooms/{room_id}/leave', json={}).status_code == 400
    assert client.post(f'/api/rooms/{room_id}/leave', json={'playerId': 'ghost'}).status_code == 404


def test_start_requires_two_players(client):
    room_id = _room_id(client)
    res = client.post(f'/api/rooms/{room_id}/start')
    assert res.status_code == 400
    assert res.get_json()['error'] == 'Failed to start game'
    assert client.get(f'/api/rooms/{room_id}').get_json()['data']['status'] == 'waiting'
    assert client.post('/api/rooms/NOPE1234/start').status_code == 404


def test_full_game_over_http(client):
    room_id = _room_id(client, shotsPerPlayer=1)
    _join(client, room_id, 'p2')
    _join(client, room_id, 'p3')
    started = client.post(f'/api/rooms/{room_id}/start').get_json()['data']
    assert started['status'] == 'playing'

    # out of turn
    res = client.post(f'/api/rooms/{room_id}/score', json={'playerId': 'p2', 'score': 10})
    assert res.status_code == 400

    for player_id, score in (('host-1', 20), ('p2', 35), ('p3', 35)):
        res = client.post(f'/api/rooms/{room_id}/score', json={'playerId': player_id, 'score': score})
        assert res.status_code == 200
        res = client.post(f'/api/rooms/{room_id}/next-turn')
        assert res.status_code == 200

    room = client.get(f'/api/rooms/{room_id}').get_json()['data']
    assert room['status'] == 'completed'
    assert [p['score'] for p in room['players']] == [20, 35, 35]

    winner = client.get(f'/api/rooms/{room_id}/winner').get_json()
    assert winner['success'] is True
    assert winner['data']['id'] == 'p2'

    assert client.post(f'/api/rooms/{room_id}/next-turn').status_code == 400

    reset = client.post(f'/api/rooms/{room_id}/reset').get_json()['data']
    assert reset['status'] == 'waiting'
    assert all(p['score'] == 0 and p['shotsRemaining'] == 1 for p in reset['players'])
    assert reset['players'][0]['isCurrentTurn'] is True


def test_score_validation(client):
    room_id = _room_id(client)
    _join(client, room_id, 'p2')
    client.post(f'/api/rooms/{room_id}/start')
    assert client.post(f'/api/rooms/{room_id}/score', json={'playerId': 'host-1'}).status_code == 400
    assert client.post(f'/api/rooms/{room_id}/score', json={'playerId': 'host-1', 'score': 'ten'}).status_code == 400
    assert client.post(f'/api/rooms/{room_id}/score', json={'playerId': 'host-1', 'score': 2.5}).status_code == 400
    assert client.post('/api/rooms/NOPE1234/score', json={'playerId': 'host-1', 'score': 1}).status_code == 404
    ok = client.post(f'/api/rooms/{room_id}/score', json={'playerId': 'host-1', 'score': 4.0})
    assert ok.status_code == 200
    assert ok.get_json()['data']['players'][0]['score'] == 4


def test_winner_before_completion_is_null(client):
    room_id = _room_id(client)
    res = client.get(f'/api/rooms/{room_id}/winner')
    assert res.status_code == 200
    assert res.get_json() == {'success': True, 'data': None}
    assert client.get('/api/rooms/NOPE1234/winner').status_code == 404


def test_update_player_direct_replace(client):
    room_id = _room_id(client)
    _join(client, room_id, 'p2')
    player = {'id': 'p2', 'name': 'Penalised', 'walletAddress': 'W', 'score': 7,
              'shotsRemaining': 1, 'isConnected': True, 'isCurrentTurn': False}
    res = client.put(f'/api/rooms/{room_id}/players/p2', json={'player': player})
    assert res.status_code == 200
    assert res.get_json()['data']['players'][1] == player

    assert client.put(f'/api/rooms/{room_id}/players/p2', json={}).status_code == 400
    assert client.put(f'/api/rooms/{room_id}/players/p9', json={'player': player}).status_code == 400
    ghost = dict(player, id='ghost')
    assert client.put(f'/api/rooms/{room_id}/players/ghost', json={'player': ghost}).status_code == 404


def test_update_room_partial(client):
    room_id = _room_id(client)
    res = client.put(f'/api/rooms/{room_id}', json={'updates': {'name': 'Renamed', 'maxPlayers': 6}})
    assert res.status_code == 200
    data = res.get_json()['data']
    assert (data['name'], data['maxPlayers']) == ('Renamed', 6)

    assert client.put(f'/api/rooms/{room_id}', json={}).status_code == 400
    assert client.put(f'/api/rooms/{room_id}', json={'updates': {'status': 'paused'}}).status_code == 400
    assert client.put(f'/api/rooms/{room_id}', json={'updates': {'id': 'X'}}).status_code == 400
    assert client.put(f'/api/rooms/{room_id}', json={'updates': {'players': []}}).status_code == 400
    assert client.put('/api/rooms/NOPE1234', json={'updates': {'name': 'x'}}).status_code == 404


def test_update_room_rejects_broken_seating(client):
    room_id = _room_id(client)
    _join(client, room_id, 'p2')

    res = client.put(f'/api/rooms/{room_id}', json={'updates': {'hostId': 'ghost'}})
    assert res.status_code == 400
    assert res.get_json()['success'] is False
    only_p2 = [{'id': 'p2', 'name': 'Pia', 'walletAddress': 'W'}]
    assert client.put(f'/api/rooms/{room_id}', json={'updates': {'players': only_p2}}).status_code == 400
    assert client.put(f'/api/rooms/{room_id}', json={'updates': {'maxPlayers': 6}}).status_code == 200
    _join(client, room_id, 'p3')
    assert client.put(f'/api/rooms/{room_id}', json={'updates': {'maxPlayers': 2}}).status_code == 400

    room = client.get(f'/api/rooms/{room_id}').get_json()['data']
    assert room['hostId'] == 'host-1'
    assert room['maxPlayers'] == 6
    assert [p['id'] for p in room['players']] == ['host-1', 'p2', 'p3']


def test_disconnecting_every_player_removes_room(client):
    room_id = _room_id(client)
    _join(client, room_id, 'p2')
    for pid in ('host-1', 'p2'):
        player = {'id': pid, 'name': pid, 'walletAddress': 'W', 'score': 0,
                  'shotsRemaining': 3, 'isConnected': False, 'isCurrentTurn': False}
        res = client.put(f'/api/rooms/{room_id}/players/{pid}', json={'player': player})
        assert res.status_code == 200
    assert res.get_json()['data'] is None
    assert client.get(f'/api/rooms/{room_id}').status_code == 404


def test_unexpected_error_becomes_500(client, flask_app, monkeypatch):
    from golfrooms.services.rooms import get_coordinator

    def boom(*args, **kwargs):
        raise RuntimeError('store exploded')

    monkeypatch.setattr(get_coordinator(), 'list_active_rooms', boom)
    res = client.get('/api/rooms')
    assert res.status_code == 500
    assert res.get_json() == {'success': False, 'error': 'store exploded'}


def test_unknown_method_keeps_http_status(client):
    res = client.delete('/api/rooms')
    assert res.status_code == 405
