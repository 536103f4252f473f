from golfrooms import socketio
from . import EXTENSION_KEY


def start_cleanup_worker(app) -> bool:
    """Start the periodic inactive-room sweep for ``app``'s coordinator.

    - No-ops in TESTING mode unless ENABLE_SWEEPER_IN_TESTS is set
    - Runs every ROOM_CLEANUP_INTERVAL_SEC until the coordinator shuts down
    - A failing sweep is logged and retried on the next tick
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_SWEEPER_IN_TESTS'):
        return False

    coordinator = app.extensions[EXTENSION_KEY]
    interval = int(app.config.get('ROOM_CLEANUP_INTERVAL_SEC', 3600))
    if interval <= 0:
        app.logger.info("[sweep-disabled] interval<=0")
        return False

    def _worker():
        app.logger.info(f"[sweep-start] interval={interval}s ttl={coordinator.store.room_ttl}s")
        while not coordinator.stopped.wait(interval):
            try:
                coordinator.cleanup_inactive_rooms()
            except Exception:
                app.logger.exception("[sweep-error]")
        app.logger.info("[sweep-stop]")

    socketio.start_background_task(_worker)
    return True
