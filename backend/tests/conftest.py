import os
import random
import sys
import pytest

# Ensure the backend root (containing the `rps` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from rps import create_app, socketio
from rps.services.games.engine import MatchmakingEngine
from rps.services.games.scheduler import RoundTimer


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    ROUND_DURATION_SEC = 10
    CORS_ORIGINS = ['http://localhost:5173']
    LOG_LEVEL = 'DEBUG'
    TIMER_HEARTBEAT_SEC = 0


class ManualScheduler:
    """Records timers instead of running them; tests fire them explicitly."""

    def __init__(self):
        self.scheduled = []

    def schedule(self, delay, callback, label=''):
        timer = RoundTimer(delay, label)
        self.scheduled.append((timer, callback))
        return timer

    def pending(self):
        return [(t, cb) for t, cb in self.scheduled if not t.cancelled]

    def fire_all(self, include_cancelled=False):
        """Run due callbacks, as the background worker would after sleeping."""
        fired = 0
        for timer, callback in list(self.scheduled):
            if timer.cancelled and not include_cancelled:
                continue
            callback()
            fired += 1
        return fired


class FakeConnection:
    def __init__(self, name):
        self.id = name
        self.is_open = True
        self.sent = []

    def send(self, message_type, payload=None):
        if not self.is_open:
            return
        self.sent.append({'type': message_type, 'payload': payload})

    def of_type(self, message_type):
        return [m['payload'] for m in self.sent if m['type'] == message_type]


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def engine(scheduler):
    return MatchmakingEngine(scheduler, round_duration=10, rng=random.Random(7))


@pytest.fixture()
def make_conn():
    return FakeConnection


@pytest.fixture()
def flask_app(scheduler):
    application = create_app(TestConfig, scheduler=scheduler, rng=random.Random(7))
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_clients(flask_app):
    """Factory for Socket.IO test clients on /ws; all are disconnected on teardown."""
    created = []

    def _make():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace='/ws'
        )
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        try:
            if test_client.is_connected('/ws'):
                test_client.disconnect(namespace='/ws')
        except Exception:
            pass


def received_messages(sio_client):
    """Flush a test client and return its ``{type, payload}`` envelopes."""
    out = []
    for pkt in sio_client.get_received('/ws'):
        if pkt['name'] != 'message':
            continue
        args = pkt['args']
        if isinstance(args, list):
            args = args[0] if args else None
        out.append(args)
    return out
