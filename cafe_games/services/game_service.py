"""
Game Services

Builds and holds the process-wide game services: storage, the daily lock,
the platform capabilities and the three daily games.
"""

import logging
from datetime import date
from typing import Callable, Optional

from flask import current_app, has_app_context

from .daily_lock import DailyLockStore
from .feud_game import FeudGameService
from .platform import Platform, ServerPlatform
from .scheduler import LifecycleManager, ScheduledTask
from .spin_game import SpinGameService
from .storage import KeyValueStore, MemoryStore, MongoStore, StorageUnavailableError
from .word_game import WordGameService

logger = logging.getLogger(__name__)


class GameServices:
    """Everything the controllers need, wired together once per process."""

    def __init__(self, store: KeyValueStore, platform: Platform,
                 clock: Callable[[], date] = date.today):
        self.platform = platform
        self.locks = DailyLockStore(store, clock)
        self.word_game = WordGameService(self.locks, platform)
        self.feud_game = FeudGameService(self.locks, platform)
        self.spin_game = SpinGameService(self.locks, platform)

    @property
    def games(self) -> tuple:
        return (self.word_game, self.feud_game, self.spin_game)

    @property
    def persistent(self) -> bool:
        return self.locks.persistent

    @property
    def storage_backend(self) -> str:
        return type(self.locks.store).__name__

    def sweep_stale_records(self) -> dict:
        """Drop records and cached games left over from previous days."""
        removed = self.locks.purge_stale()
        evicted = sum(game.evict_stale() for game in self.games)
        if removed or evicted:
            logger.info("Stale sweep removed %d record(s) and evicted %d cached game(s)", removed, evicted)
        return {"records_removed": removed, "games_evicted": evicted}

    def build_lifecycle(self, sweep_interval_seconds: float) -> LifecycleManager:
        lifecycle = LifecycleManager()
        lifecycle.add_task(ScheduledTask("stale-sweep", sweep_interval_seconds, self.sweep_stale_records))
        return lifecycle


def create_store(mongo_uri: Optional[str], db_name: str = "cafe_games") -> KeyValueStore:
    """MongoDB when configured and reachable, otherwise memory."""
    if not mongo_uri:
        return MemoryStore()
    try:
        return MongoStore.connect(mongo_uri, db_name)
    except StorageUnavailableError as e:
        logger.warning("Falling back to in-memory daily locks: %s", e)
        return MemoryStore()


# Global service instance
_game_services = None


def get_game_services() -> Optional[GameServices]:
    """Get the global game services instance."""
    return _game_services


def current_game_services() -> Optional[GameServices]:
    """Services bound to the active Flask app, falling back to the global instance."""
    if has_app_context():
        bound = current_app.extensions.get('cafe_games')
        if bound is not None:
            return bound
    return _game_services


def initialize_game_services(config_class, platform: Platform = None, store: KeyValueStore = None,
                             clock: Callable[[], date] = date.today) -> GameServices:
    """Initialize the global game services instance."""
    global _game_services
    if store is None:
        store = create_store(getattr(config_class, 'MONGO_URI', None),
                             getattr(config_class, 'MONGO_DB_NAME', 'cafe_games'))
    _game_services = GameServices(store, platform or ServerPlatform(), clock)
    return _game_services
