import pytest
from pymongo.errors import PyMongoError

from cafe_games.services.daily_lock import DailyLockStore, lock_key
from cafe_games.services.storage import MemoryStore, MongoStore, StorageUnavailableError


class FakeCollection:
    """Just enough of a pymongo collection for MongoStore."""

    def __init__(self, fail=False):
        self.docs = {}
        self.fail = fail

    def _check(self):
        if self.fail:
            raise PyMongoError("connection reset")

    def find_one(self, query):
        self._check()
        return self.docs.get(query["_id"])

    def replace_one(self, query, doc, upsert=False):
        self._check()
        self.docs[query["_id"]] = doc

    def delete_one(self, query):
        self._check()
        self.docs.pop(query["_id"], None)

    def find(self, query, projection=None):
        self._check()
        return [{"_id": key} for key in self.docs]


def test_lock_key_is_namespaced():
    assert lock_key("abc", "wordle_state") == "cafe:abc:wordle_state"


def test_same_day_record_is_restored(store, clock):
    locks = DailyLockStore(store, clock)
    locks.save("k", {"score": 10})
    assert locks.load("k") == {"score": 10, "date": "2026-03-14"}


def test_stale_record_is_dropped(store, clock):
    locks = DailyLockStore(store, clock)
    locks.save("k", {"score": 10})
    clock.advance()

    assert locks.load("k") is None
    assert store.get("k") is None


def test_save_keeps_explicit_date(store, clock):
    locks = DailyLockStore(store, clock)
    locks.save("k", {"date": "2026-03-13"})
    assert locks.load("k") is None


def test_failing_store_falls_back_to_memory(failing_store, clock):
    locks = DailyLockStore(failing_store, clock)
    assert locks.persistent

    locks.save("k", {"score": 5})
    assert not locks.persistent
    assert isinstance(locks.store, MemoryStore)
    # still playable for the rest of the process
    assert locks.load("k")["score"] == 5


def test_failing_load_returns_nothing(failing_store, clock):
    locks = DailyLockStore(failing_store, clock)
    assert locks.load("k") is None
    assert not locks.persistent


def test_purge_stale_removes_only_old_records(store, clock):
    locks = DailyLockStore(store, clock)
    locks.save("old", {"score": 1})
    clock.advance()
    locks.save("new", {"score": 2})

    assert locks.purge_stale() == 1
    assert list(store.keys()) == ["new"]


def test_memory_store_copies_values():
    store = MemoryStore()
    value = {"guesses": ["LATTE"]}
    store.set("k", value)
    value["guesses"].append("MOCHA")
    store.get("k")["guesses"].append("BAGEL")
    assert store.get("k") == {"guesses": ["LATTE"]}
    assert len(store) == 1


def test_mongo_store_document_shape():
    collection = FakeCollection()
    store = MongoStore(collection)
    store.set("k", {"score": 3})

    doc = collection.docs["k"]
    assert doc["_id"] == "k"
    assert doc["value"] == {"score": 3}
    assert "updated_at" in doc
    assert store.get("k") == {"score": 3}
    assert list(store.keys()) == ["k"]

    store.remove("k")
    assert store.get("k") is None


def test_mongo_errors_become_storage_unavailable():
    store = MongoStore(FakeCollection(fail=True))
    with pytest.raises(StorageUnavailableError):
        store.get("k")
    with pytest.raises(StorageUnavailableError):
        store.set("k", {})
    with pytest.raises(StorageUnavailableError):
        store.remove("k")
    with pytest.raises(StorageUnavailableError):
        store.keys()


def test_lock_store_degrades_when_mongo_fails(clock):
    locks = DailyLockStore(MongoStore(FakeCollection(fail=True)), clock)
    locks.save("k", {"score": 1})
    assert not locks.persistent
    assert locks.load("k")["score"] == 1
