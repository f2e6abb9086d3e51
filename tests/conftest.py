import os
import secrets
import tempfile
from datetime import date, timedelta

import pytest

# Keep test logs out of the working tree; must happen before cafe_games is imported
os.environ.setdefault('LOG_DIR', tempfile.mkdtemp(prefix='cafe_games_logs_'))

from cafe_games import create_app  # noqa: E402
from cafe_games.config import TestingConfig  # noqa: E402
from cafe_games.config.game_settings import TONES  # noqa: E402
from cafe_games.services.game_service import GameServices  # noqa: E402
from cafe_games.services.platform import Platform  # noqa: E402
from cafe_games.services.storage import KeyValueStore, MemoryStore, StorageUnavailableError  # noqa: E402


class RecordingPlatform(Platform):
    """
    Deterministic platform.

    Serves bytes from a scripted buffer when one is given, falling back to
    the OS CSPRNG, and records every tone instead of playing it.
    """

    def __init__(self, scripted_bytes=b""):
        self._buffer = bytearray(scripted_bytes)
        self.tones = []
        self.bytes_requested = 0

    def secure_random_bytes(self, n):
        self.bytes_requested += n
        if len(self._buffer) >= n:
            chunk = bytes(self._buffer[:n])
            del self._buffer[:n]
            return chunk
        return secrets.token_bytes(n)

    def play_tone(self, frequency, duration, wave="sine", session_id=None):
        self.tones.append((frequency, duration, wave, session_id))

    def cues(self):
        """Names of the cues played so far, in order."""
        by_tone = {tone: name for name, tone in TONES.items()}
        return [by_tone.get((f, d, w), "?") for f, d, w, _ in self.tones]


class FailingStore(KeyValueStore):
    """Store whose backend has gone away."""

    def get(self, key):
        raise StorageUnavailableError("quota exceeded")

    def set(self, key, value):
        raise StorageUnavailableError("quota exceeded")

    def remove(self, key):
        raise StorageUnavailableError("quota exceeded")

    def keys(self):
        raise StorageUnavailableError("quota exceeded")


class FakeClock:
    """Callable calendar that tests can move forward."""

    def __init__(self, start=date(2026, 3, 14)):
        self.current = start

    def __call__(self):
        return self.current

    def advance(self, days=1):
        self.current = self.current + timedelta(days=days)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scripted_platform():
    """Factory for platforms that hand out the given bytes first."""
    return RecordingPlatform


@pytest.fixture
def platform():
    return RecordingPlatform()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture
def services(store, platform, clock):
    return GameServices(store, platform, clock)


@pytest.fixture
def app(services):
    app, _ = create_app(TestingConfig, services)
    return app


@pytest.fixture
def client(app):
    return app.test_client()
