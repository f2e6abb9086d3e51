"""
Key-Value Storage

A single TTL-free get/set/remove interface for persisted game state. Policy
such as the daily lock lives above this layer, never inside it.
"""

import copy
import datetime
import logging
import threading
from typing import Any, Dict, Iterator, Optional

from pymongo.errors import PyMongoError
from pymongo.mongo_client import MongoClient
from pymongo.server_api import ServerApi

logger = logging.getLogger(__name__)


class StorageUnavailableError(Exception):
    """Raised when the backing store cannot be read or written."""


class KeyValueStore:
    """Interface for persisted JSON-like records."""

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def set(self, key: str, value: Dict[str, Any]) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError

    def keys(self) -> Iterator[str]:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """Process-local store. Values are copied in and out."""

    def __init__(self):
        self._data: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            value = self._data.get(key)
            return copy.deepcopy(value) if value is not None else None

    def set(self, key: str, value: Dict[str, Any]) -> None:
        value = copy.deepcopy(value)
        with self._lock:
            self._data[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> Iterator[str]:
        with self._lock:
            return iter(list(self._data.keys()))

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


class MongoStore(KeyValueStore):
    """
    MongoDB-backed store, one document per key:
    {"_id": key, "value": {...}, "updated_at": datetime}
    """

    def __init__(self, collection):
        self.collection = collection

    @classmethod
    def connect(cls, mongo_uri: str, db_name: str = "cafe_games",
                collection_name: str = "daily_locks") -> "MongoStore":
        """
        Open a client and ping the server.

        Raises:
            StorageUnavailableError: If the server cannot be reached
        """
        try:
            client = MongoClient(mongo_uri, server_api=ServerApi('1'))
            client.admin.command('ping')
        except PyMongoError as e:
            raise StorageUnavailableError(f"MongoDB connection error: {e}") from e
        logger.info("Connected to MongoDB database %s", db_name)
        collection = client[db_name][collection_name]
        collection.create_index("updated_at")
        return cls(collection)

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            doc = self.collection.find_one({"_id": key})
        except PyMongoError as e:
            raise StorageUnavailableError(f"Read failed for {key}: {e}") from e
        return doc.get("value") if doc else None

    def set(self, key: str, value: Dict[str, Any]) -> None:
        try:
            self.collection.replace_one(
                {"_id": key},
                {"_id": key, "value": value, "updated_at": datetime.datetime.utcnow()},
                upsert=True
            )
        except PyMongoError as e:
            raise StorageUnavailableError(f"Write failed for {key}: {e}") from e

    def remove(self, key: str) -> None:
        try:
            self.collection.delete_one({"_id": key})
        except PyMongoError as e:
            raise StorageUnavailableError(f"Delete failed for {key}: {e}") from e

    def keys(self) -> Iterator[str]:
        try:
            ids = [doc["_id"] for doc in self.collection.find({}, {"_id": 1})]
        except PyMongoError as e:
            raise StorageUnavailableError(f"Key scan failed: {e}") from e
        return iter(ids)
