"""
Daily Lock Store

Keeps each session's game record for the current calendar day. A record
from any other day is treated as absent, which is what resets the games
at midnight and what stops a finished game being replayed for another reward.
"""

import logging
import threading
from datetime import date
from typing import Any, Callable, Dict, Optional

from ..config.game_settings import STORAGE_NAMESPACE
from .storage import KeyValueStore, MemoryStore, StorageUnavailableError

logger = logging.getLogger(__name__)


def lock_key(session_id: str, game_key: str) -> str:
    """Namespaced storage key for one game in one browsing session."""
    return f"{STORAGE_NAMESPACE}:{session_id}:{game_key}"


class DailyLockStore:
    """
    Date-checked read/write layer over a KeyValueStore.

    If the backing store fails, the lock store switches to a private
    in-memory store for the rest of the process. Games stay playable but
    progress will not survive a restart.
    """

    def __init__(self, store: KeyValueStore, clock: Callable[[], date] = date.today):
        self.store = store
        self.clock = clock
        self.persistent = True
        self._degrade_lock = threading.Lock()
        # held by writers and by the stale sweep's check-then-delete
        self._write_lock = threading.RLock()

    def today(self) -> str:
        return self.clock().isoformat()

    def _degrade(self, error: Exception) -> None:
        # swap at most once per process
        with self._degrade_lock:
            if not self.persistent:
                return
            logger.warning("Storage unavailable, continuing in memory only: %s", error)
            self.store = MemoryStore()
            self.persistent = False

    def load(self, game_key: str) -> Optional[Dict[str, Any]]:
        """
        Return today's record for game_key, or None.

        Stale records (any other date) are dropped rather than restored.
        """
        try:
            record = self.store.get(game_key)
        except StorageUnavailableError as e:
            self._degrade(e)
            record = self.store.get(game_key)

        if record is None:
            return None

        if record.get("date") != self.today():
            logger.debug("Discarding stale record %s from %s", game_key, record.get("date"))
            self.remove(game_key)
            return None

        return record

    def save(self, game_key: str, record: Dict[str, Any]) -> None:
        """Write through immediately. Stamps today's date if the record has none."""
        payload = dict(record)
        payload.setdefault("date", self.today())
        with self._write_lock:
            try:
                self.store.set(game_key, payload)
            except StorageUnavailableError as e:
                self._degrade(e)
                self.store.set(game_key, payload)

    def remove(self, game_key: str) -> None:
        with self._write_lock:
            try:
                self.store.remove(game_key)
            except StorageUnavailableError as e:
                self._degrade(e)
                self.store.remove(game_key)

    def purge_stale(self) -> int:
        """
        Delete every record not dated today.

        Returns:
            int: Number of records removed
        """
        today = self.today()
        removed = 0
        try:
            for key in self.store.keys():
                with self._write_lock:
                    record = self.store.get(key)
                    if record is not None and record.get("date") != today:
                        self.store.remove(key)
                        removed += 1
        except StorageUnavailableError as e:
            self._degrade(e)
        return removed
