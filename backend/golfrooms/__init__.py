from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    CORS(flask_app, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One coordinator per app; the store lives and dies with it
    from golfrooms.services.rooms import EXTENSION_KEY, RoomCoordinator
    coordinator = RoomCoordinator(room_ttl=flask_app.config.get('ROOM_TTL_SEC', 24 * 60 * 60))
    flask_app.extensions[EXTENSION_KEY] = coordinator

    from golfrooms.main import main
    flask_app.register_blueprint(main)

    from golfrooms.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    # Socket handlers are module-level; the relay is per coordinator
    from golfrooms.socketio_events import register_socketio_handlers, relay_room_events
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))
    relay_room_events(coordinator.bus)

    from golfrooms.services.rooms.sweeper import start_cleanup_worker
    start_cleanup_worker(flask_app)

    return flask_app
