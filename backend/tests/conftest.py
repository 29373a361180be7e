import os
import sys
from datetime import datetime, timedelta, timezone

import pytest

# Ensure the backend root (containing the `memory_match` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from memory_match import create_app, db, socketio
from memory_match.services.game.board import Tile
from memory_match.services.game.leaderboard import Leaderboard
from memory_match.services.game.levels import Level
from memory_match.services.game.scheduler import ManualScheduler
from memory_match.services.game.session import GameSession
from memory_match.services.game.storage import MemoryStorage


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = []
    LOG_LEVEL = 'DEBUG'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import memory_match.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


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
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')


class FakeClock:
    """Increasing datetimes for leaderboard timestamps."""

    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        self.now += timedelta(minutes=1)
        return self.now


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def storage():
    return MemoryStorage()


@pytest.fixture()
def leaderboard(storage):
    return Leaderboard(storage, clock=FakeClock())


@pytest.fixture()
def tiny_level():
    return Level(name='Tiny', grid_size=2, pair_count=2)


@pytest.fixture()
def tiny_tiles():
    # pairs sit at indices (0, 2) and (1, 3)
    return [
        Tile(id=0, pair_id=0, symbol='A', color='#FF6B6B'),
        Tile(id=1, pair_id=1, symbol='B', color='#4ECDC4'),
        Tile(id=2, pair_id=0, symbol='A', color='#FF6B6B'),
        Tile(id=3, pair_id=1, symbol='B', color='#4ECDC4'),
    ]


@pytest.fixture()
def session(scheduler, leaderboard, tiny_tiles, tiny_level):
    game = GameSession(scheduler, leaderboard=leaderboard, name='TEST')
    game.initialize(tiny_tiles, tiny_level)
    return game
