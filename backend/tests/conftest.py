import os
import random
import sys
import pytest

# Ensure the backend root (containing the `policethief` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from policethief import create_app, socketio
from policethief.services.games.fanout import Channel
from policethief.services.games.lifecycle import GameService


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/ws'
    SESSION_CODE_LENGTH = 6
    DEFAULT_TOTAL_ROUNDS = 10
    MAX_TOTAL_ROUNDS = 50
    MIN_PLAYERS = 2
    LOG_LEVEL = 'DEBUG'


class RecordingChannel(Channel):
    """In-memory channel: rooms are tracked, every delivery is recorded."""

    def __init__(self):
        self.rooms = {}
        self.sent = []  # (recipient sid, event, payload)

    def publish(self, room, event, payload):
        for sid in sorted(self.rooms.get(room, ())):
            self.sent.append((sid, event, payload))

    def send(self, channel, event, payload):
        self.sent.append((channel, event, payload))

    def join(self, channel, room):
        self.rooms.setdefault(room, set()).add(channel)

    def leave(self, channel, room):
        self.rooms.get(room, set()).discard(channel)

    def close_room(self, room):
        self.rooms.pop(room, None)

    def events_for(self, sid, event=None):
        return [(ev, payload) for to, ev, payload in self.sent
                if to == sid and (event is None or ev == event)]

    def payloads(self, sid, event):
        return [payload for _, payload in self.events_for(sid, event)]

    def clear(self):
        self.sent.clear()


@pytest.fixture()
def channel():
    return RecordingChannel()


@pytest.fixture()
def service(channel):
    svc = GameService(channel, rng=random.Random(1234))
    yield svc
    svc.close()


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application
    application.extensions['game_service'].close()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    clients = []

    def _make():
        test_client = socketio.test_client(flask_app, namespace='/ws')
        test_client.get_received('/ws')  # flush 'connected'
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        try:
            if test_client.is_connected('/ws'):
                test_client.disconnect(namespace='/ws')
        except RuntimeError:
            pass


@pytest.fixture()
def sio_client(sio_factory):
    return sio_factory()
