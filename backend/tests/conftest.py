import os
import sys
import pytest

# Ensure the backend root (containing the `golfrooms` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from golfrooms import create_app, socketio
from golfrooms.models import Player
from golfrooms.services.rooms import RoomCoordinator, get_coordinator


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    ROOM_TTL_SEC = 24 * 60 * 60
    ROOM_CLEANUP_INTERVAL_SEC = 3600
    DEFAULT_MAX_PLAYERS = 4
    DEFAULT_SHOTS_PER_PLAYER = 3
    DEFAULT_REWARD_AMOUNT = 10_000_000
    CORS_ORIGINS = ['http://localhost:5173']


class FakeClock:
    """Manually advanced time source, in seconds."""

    def __init__(self, start=1_700_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application
        get_coordinator().shutdown()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def coordinator(clock):
    coord = RoomCoordinator(clock=clock)
    yield coord
    coord.shutdown()


@pytest.fixture()
def events(coordinator):
    """Every notification the coordinator emits, in order."""
    received = []
    coordinator.bus.subscribe(received.append)
    return received


def make_player(player_id, name=None, wallet=''):
    return Player(id=player_id, name=name or player_id.title(), wallet_address=wallet)


def room_with_players(coordinator, *player_ids, shots=3, max_players=4):
    """Create a room hosted by the first id and join the rest."""
    host, *others = player_ids
    room = coordinator.create_room(host, host.title(), f'W-{host}', 'Links',
                                   max_players=max_players, shots_per_player=shots)
    for pid in others:
        assert coordinator.add_player(room.id, make_player(pid))
    return room.id


def event_names(received):
    return [n.event for n in received]


