"""
Session Game Base

Shared plumbing for the daily game services: a per-day cache of live games
keyed by browsing session, and the locks that serialize requests.

Requests are served on several threads. Every read-modify-write of one
session's game happens under that session's lock, from loading the game
through the state transition to the write-through save.
"""

import threading
from typing import Dict, Optional, Tuple

from .daily_lock import DailyLockStore, lock_key
from .platform import Platform
from .puzzle_selector import rolling_hash

LOCK_STRIPES = 64


class SessionGameService:
    """Base class for a daily game stored under one lock key per session."""

    game_key = ""

    def __init__(self, locks: DailyLockStore, platform: Platform):
        self.locks = locks
        self.platform = platform
        # session_id -> (iso day, game); read once per day, then kept in step with the store
        self.games: Dict[str, Tuple[str, object]] = {}
        self._games_guard = threading.Lock()
        # fixed pool so sessions never need their lock cleaned up
        self._session_locks = tuple(threading.RLock() for _ in range(LOCK_STRIPES))

    def locked(self, session_id: str) -> threading.RLock:
        """
        The lock serializing every operation on session_id's game.

        Reentrant, so a caller may hold it around several service calls.
        """
        return self._session_locks[abs(rolling_hash(session_id)) % LOCK_STRIPES]

    def _cached(self, session_id: str, day: str) -> Optional[object]:
        with self._games_guard:
            cached = self.games.get(session_id)
        if cached and cached[0] == day:
            return cached[1]
        return None

    def _remember(self, session_id: str, day: str, game) -> None:
        with self._games_guard:
            self.games[session_id] = (day, game)

    def _save(self, session_id: str, game) -> None:
        self.locks.save(lock_key(session_id, self.game_key), game.to_record(self.locks.clock()))

    @property
    def active_games(self) -> int:
        with self._games_guard:
            return len(self.games)

    def evict_stale(self) -> int:
        """Drop cached games from previous days."""
        today = self.locks.today()
        with self._games_guard:
            stale = [sid for sid, (day, _) in self.games.items() if day != today]
            for sid in stale:
                del self.games[sid]
        return len(stale)
