import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Rooms untouched for this long are evicted (seconds)
    ROOM_TTL_SEC = int(os.environ.get('ROOM_TTL_SEC', str(24 * 60 * 60)))
    # How often the background sweep runs (seconds)
    ROOM_CLEANUP_INTERVAL_SEC = int(os.environ.get('ROOM_CLEANUP_INTERVAL_SEC', str(60 * 60)))
    # Defaults applied when a create request omits them
    DEFAULT_MAX_PLAYERS = int(os.environ.get('DEFAULT_MAX_PLAYERS', '4'))
    DEFAULT_SHOTS_PER_PLAYER = int(os.environ.get('DEFAULT_SHOTS_PER_PLAYER', '3'))
    # Stroops (1 XLM), passed through untouched to the wallet layer
    DEFAULT_REWARD_AMOUNT = int(os.environ.get('DEFAULT_REWARD_AMOUNT', '10000000'))
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173,http://localhost:5174,http://127.0.0.1:5174',
        ).split(',') if o.strip()
    ]
